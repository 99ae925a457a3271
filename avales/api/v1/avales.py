"""
Endpoints del registro de avales.
Los errores de negocio se convierten en respuestas en el handler de avales.main.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from avales.config import get_settings
from avales.database import get_db
from avales.schemas.aval import (
    AnulacionRequest,
    AvalCreate,
    AvalFilters,
    AvalListResponse,
    AvalResponse,
    AvalUpdate,
)
from avales.services import aval_service

settings = get_settings()

router = APIRouter()


@router.post("", response_model=AvalResponse, status_code=201)
async def create_aval(
    data: AvalCreate,
    db: AsyncSession = Depends(get_db),
):
    """Registra un aval; el correlativo lo genera el sistema."""
    return await aval_service.create_aval(db, data.model_dump(exclude_unset=True))


@router.get("", response_model=AvalListResponse)
async def list_avales(
    correlativo: str | None = Query(None, description="Búsqueda parcial por correlativo"),
    solicitante: str | None = Query(None, description="Búsqueda parcial por solicitante"),
    fecha: str | None = Query(None, description="Fecha de registro exacta"),
    estado: str | None = Query(None, description="ACTIVO o ANULADO"),
    limit: int | None = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Historial de avales con filtros y paginación opcional."""
    filters = AvalFilters(
        correlativo=correlativo,
        solicitante=solicitante,
        fecha=fecha,
        estado=estado,
    )
    items, total = await aval_service.list_avales(db, filters, limit=limit, offset=offset)
    return AvalListResponse(
        items=[AvalResponse.model_validate(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{aval_id}", response_model=AvalResponse)
async def get_aval(
    aval_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Obtiene el detalle de un aval."""
    return await aval_service.get_aval(db, aval_id)


@router.patch("/{aval_id}", response_model=AvalResponse)
async def update_aval(
    aval_id: int,
    data: AvalUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edita los datos de un aval activo (nunca el correlativo ni el estado)."""
    return await aval_service.update_aval(db, aval_id, data.model_dump(exclude_unset=True))


@router.patch("/{aval_id}/anular", response_model=AvalResponse)
async def void_aval(
    aval_id: int,
    data: AnulacionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Anula un aval indicando el motivo. La anulación es definitiva."""
    return await aval_service.void_aval(db, aval_id, data.motivo)

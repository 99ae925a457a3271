"""
Servicio de avales: registro, edición, anulación y consulta del historial.

Estados: ACTIVO (inicial) → ANULADO (terminal). Un aval anulado no
vuelve a ACTIVO y sus datos quedan congelados. Nada se elimina.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import false, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from avales.config import get_settings
from avales.core.correlativo import format_correlativo
from avales.core.exceptions import (
    AlreadyVoidedException,
    ForbiddenFieldException,
    ImmutableException,
    NotFoundException,
    ValidationException,
)
from avales.core.fechas import parse_fecha
from avales.models.aval import CAMPOS_FECHA, CAMPOS_PROTEGIDOS, Aval, CampoAval, EstadoAval
from avales.schemas.aval import AvalFilters
from avales.services import sequence_service

logger = logging.getLogger(__name__)
settings = get_settings()

_CAMPOS_EDITABLES = frozenset(campo.value for campo in CampoAval)
_ESTADOS = {estado.value: estado for estado in EstadoAval}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Any) -> str | None:
    """Texto recortado, o None si no es texto o está vacío."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _normalizar_campo(campo: CampoAval, value: Any) -> str | date | None:
    """Valor listo para persistir, o None si es inválido."""
    if campo in CAMPOS_FECHA:
        if isinstance(value, date):
            return parse_fecha(value)
        if _clean(value) is None:
            return None
        try:
            return parse_fecha(value)
        except ValueError:
            return None
    return _clean(value)


def _normalizar_payload(
    payload: Mapping[str, Any], campos: list[CampoAval]
) -> tuple[dict[str, str | date], list[str]]:
    valores: dict[str, str | date] = {}
    invalidos: list[str] = []
    for campo in campos:
        value = _normalizar_campo(campo, payload.get(campo.value))
        if value is None:
            invalidos.append(campo.value)
        else:
            valores[campo.value] = value
    return valores, invalidos


# ── Registro ────────────────────────────────────────


async def create_aval(db: AsyncSession, payload: Mapping[str, Any]) -> Aval:
    """
    Registra un aval con su correlativo.

    El incremento de la secuencia y el INSERT van en la misma transacción:
    si el INSERT falla se revierten juntos y el número no llega a
    entregarse a nadie.
    """
    valores, invalidos = _normalizar_payload(payload, list(CampoAval))
    if invalidos:
        raise ValidationException(fields=invalidos)

    try:
        numero = await sequence_service.next_value(db, settings.SEQUENCE_NAME)
        aval = Aval(
            correlativo=format_correlativo(numero),
            estado=EstadoAval.ACTIVO,
            updated_at=None,
            **valores,
        )
        db.add(aval)
        await db.flush()
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("No se pudo crear el aval")
        raise

    await db.refresh(aval)
    logger.info(f"Aval creado: {aval.correlativo} (id={aval.id})")
    return aval


async def get_aval(db: AsyncSession, aval_id: int) -> Aval:
    """Obtiene un aval por ID."""
    result = await db.execute(select(Aval).where(Aval.id == aval_id))
    aval = result.scalar_one_or_none()
    if not aval:
        raise NotFoundException("Aval")
    return aval


async def _get_for_update(db: AsyncSession, aval_id: int) -> Aval:
    result = await db.execute(
        select(Aval)
        .where(Aval.id == aval_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    aval = result.scalar_one_or_none()
    if not aval:
        raise NotFoundException("Aval")
    return aval


# ── Edición ─────────────────────────────────────────


async def update_aval(
    db: AsyncSession, aval_id: int, changes: Mapping[str, Any]
) -> Aval:
    """
    Actualiza solo los campos de datos presentes en `changes`.
    Correlativo, estado y campos de anulación no se editan por esta vía.
    """
    try:
        aval = await _get_for_update(db, aval_id)
        if aval.anulado:
            raise ImmutableException()

        prohibidos = sorted(key for key in changes if key not in _CAMPOS_EDITABLES)
        if CAMPOS_PROTEGIDOS.intersection(prohibidos):
            raise ForbiddenFieldException(fields=prohibidos)
        if prohibidos:
            raise ForbiddenFieldException("Campos desconocidos", fields=prohibidos)

        campos = [campo for campo in CampoAval if campo.value in changes]
        if not campos:
            raise ValidationException("No hay campos válidos para actualizar")

        valores, invalidos = _normalizar_payload(changes, campos)
        if invalidos:
            raise ValidationException("Campos inválidos para actualizar", fields=invalidos)

        for key, value in valores.items():
            setattr(aval, key, value)
        aval.updated_at = _now()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(aval)
    logger.info(f"Aval {aval.correlativo} actualizado: {', '.join(valores)}")
    return aval


# ── Anulación ───────────────────────────────────────


async def void_aval(db: AsyncSession, aval_id: int, motivo: str | None) -> Aval:
    """
    Anula un aval registrando motivo y fecha.
    Anular dos veces se rechaza: la anulación es un hecho de auditoría único.
    """
    try:
        aval = await _get_for_update(db, aval_id)

        motivo_limpio = _clean(motivo)
        if not motivo_limpio:
            raise ValidationException(
                "Debes indicar el motivo de anulacion", fields=["motivo"]
            )
        if aval.anulado:
            raise AlreadyVoidedException()

        ahora = _now()
        aval.estado = EstadoAval.ANULADO
        aval.motivo_anulacion = motivo_limpio
        aval.anulado_at = ahora
        aval.updated_at = ahora
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(aval)
    logger.info(f"Aval {aval.correlativo} anulado: {motivo_limpio}")
    return aval


# ── Historial ───────────────────────────────────────


def _contains(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _apply_filters(query, filters: AvalFilters):
    correlativo = _clean(filters.correlativo)
    if correlativo:
        query = query.where(Aval.correlativo.ilike(_contains(correlativo), escape="\\"))

    solicitante = _clean(filters.solicitante)
    if solicitante:
        query = query.where(
            Aval.nombre_solicitante.ilike(_contains(solicitante), escape="\\")
        )

    if filters.fecha is not None and (isinstance(filters.fecha, date) or _clean(filters.fecha)):
        try:
            query = query.where(Aval.fecha_registro == parse_fecha(filters.fecha))
        except ValueError:
            # Fecha ilegible: no coincide con ningún registro
            query = query.where(false())

    # Solo ACTIVO/ANULADO; cualquier otro valor se ignora
    estado = _ESTADOS.get((_clean(filters.estado) or "").upper())
    if estado:
        query = query.where(Aval.estado == estado)

    return query


async def list_avales(
    db: AsyncSession,
    filters: AvalFilters | None = None,
    *,
    limit: int | None = None,
    offset: int = 0,
) -> tuple[list[Aval], int]:
    """
    Lista avales filtrados, del más reciente al más antiguo (id DESC).
    Retorna (items, total) donde total es el conteo post-filtro sin paginar.
    """
    if limit is not None and limit < 0:
        raise ValidationException("Parámetros de paginación inválidos", fields=["limit"])
    if offset < 0:
        raise ValidationException("Parámetros de paginación inválidos", fields=["offset"])

    query = select(Aval)
    if filters:
        query = _apply_filters(query, filters)

    # Contar totales para paginación
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    query = query.order_by(Aval.id.desc())
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all()), total

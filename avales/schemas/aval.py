"""
Schemas del registro de avales.

La validación de negocio (campos obligatorios, campos protegidos) vive
en aval_service; estos schemas solo describen la forma de las
solicitudes y respuestas.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from avales.models.aval import EstadoAval


class AvalCreate(BaseModel):
    """Datos para registrar un aval. El correlativo lo genera el sistema."""
    fecha_registro: str | None = None
    fecha_solicitud: str | None = None
    direccion_administrativa: str | None = None
    unidad_institucion: str | None = None
    nombre_solicitante: str | None = None
    cargo: str | None = None
    responsable: str | None = None
    memorando_solicitud: str | None = None


class AvalUpdate(AvalCreate):
    """
    Edición parcial. Se aceptan claves extra para poder rechazar
    explícitamente correlativo/estado/anulación con ForbiddenFieldException.
    """
    model_config = ConfigDict(extra="allow")


class AnulacionRequest(BaseModel):
    motivo: str | None = None


class AvalFilters(BaseModel):
    """Filtros del historial; todos opcionales y combinados con AND."""
    correlativo: str | None = None
    solicitante: str | None = None
    fecha: str | date | None = None
    estado: str | None = None


class AvalResponse(BaseModel):
    id: int
    correlativo: str
    fecha_registro: date
    fecha_solicitud: date | None
    direccion_administrativa: str
    unidad_institucion: str
    nombre_solicitante: str
    cargo: str
    responsable: str | None
    memorando_solicitud: str
    estado: EstadoAval
    motivo_anulacion: str | None
    anulado_at: datetime | None
    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class AvalListResponse(BaseModel):
    """Página del historial con el total post-filtro."""
    items: list[AvalResponse]
    total: int
    limit: int | None
    offset: int

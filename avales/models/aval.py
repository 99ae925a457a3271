"""
Modelo Aval: registro de avales técnicos con correlativo único.

El correlativo se asigna al crear y nunca cambia. El estado solo
puede pasar de ACTIVO a ANULADO; un aval anulado queda congelado.
"""

import enum
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Enum, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from avales.database import Base


class EstadoAval(str, enum.Enum):
    """Ciclo de vida del aval."""
    ACTIVO = "ACTIVO"
    ANULADO = "ANULADO"


class CampoAval(str, enum.Enum):
    """Campos de datos del aval: los únicos que se capturan y se editan."""
    FECHA_REGISTRO = "fecha_registro"
    FECHA_SOLICITUD = "fecha_solicitud"
    DIRECCION_ADMINISTRATIVA = "direccion_administrativa"
    UNIDAD_INSTITUCION = "unidad_institucion"
    NOMBRE_SOLICITANTE = "nombre_solicitante"
    CARGO = "cargo"
    RESPONSABLE = "responsable"
    MEMORANDO_SOLICITUD = "memorando_solicitud"


CAMPOS_FECHA = frozenset({CampoAval.FECHA_REGISTRO, CampoAval.FECHA_SOLICITUD})

# Identidad y ciclo de vida: solo los gestionan create_aval() y void_aval()
CAMPOS_PROTEGIDOS = frozenset({"correlativo", "estado", "motivo_anulacion", "anulado_at"})


class Aval(Base):
    __tablename__ = "avales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    correlativo: Mapped[str] = mapped_column(
        String(60), nullable=False, unique=True,
        comment="Código único: DTI|DSST|AVAL|0001"
    )

    # ── Datos de la solicitud ────────────────────────
    fecha_registro: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_solicitud: Mapped[date | None] = mapped_column(
        Date, comment="Fecha en que ingresa el documento de solicitud"
    )
    direccion_administrativa: Mapped[str] = mapped_column(String(255), nullable=False)
    unidad_institucion: Mapped[str] = mapped_column(String(255), nullable=False)
    nombre_solicitante: Mapped[str] = mapped_column(String(255), nullable=False)
    cargo: Mapped[str] = mapped_column(String(255), nullable=False)
    responsable: Mapped[str | None] = mapped_column(
        String(255), comment="Responsable asignado internamente"
    )
    memorando_solicitud: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Estado / anulación ───────────────────────────
    estado: Mapped[EstadoAval] = mapped_column(
        Enum(EstadoAval, name="estado_aval"),
        nullable=False,
        default=EstadoAval.ACTIVO,
    )
    motivo_anulacion: Mapped[str | None] = mapped_column(Text)
    anulado_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # ── Timestamps ───────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_avales_fecha_registro", "fecha_registro"),
        Index("idx_avales_estado", "estado"),
        Index("idx_avales_nombre_solicitante", "nombre_solicitante"),
    )

    @property
    def anulado(self) -> bool:
        return self.estado == EstadoAval.ANULADO

    def __repr__(self) -> str:
        return f"<Aval {self.correlativo} [{self.estado.value}]>"

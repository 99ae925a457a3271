"""Create secuencias and avales tables

Contador AVAL sembrado en 0 y tabla de avales con estado
ACTIVO/ANULADO y campos de anulación.

Revision ID: a1c0e5f7b201
Revises:
Create Date: 2026-02-03

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c0e5f7b201"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


estado_aval = sa.Enum("ACTIVO", "ANULADO", name="estado_aval")


def upgrade() -> None:
    secuencias = op.create_table(
        "secuencias",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nombre", sa.String(50), nullable=False, unique=True, comment="Nombre de la secuencia: AVAL"),
        sa.Column("ultimo_numero", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("ultimo_numero >= 0", name="ck_secuencias_ultimo_numero"),
    )

    op.create_table(
        "avales",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("correlativo", sa.String(60), nullable=False, unique=True),
        sa.Column("fecha_registro", sa.Date(), nullable=False),
        sa.Column("fecha_solicitud", sa.Date(), nullable=True),
        sa.Column("direccion_administrativa", sa.String(255), nullable=False),
        sa.Column("unidad_institucion", sa.String(255), nullable=False),
        sa.Column("nombre_solicitante", sa.String(255), nullable=False),
        sa.Column("cargo", sa.String(255), nullable=False),
        sa.Column("responsable", sa.String(255), nullable=True),
        sa.Column("memorando_solicitud", sa.String(255), nullable=False),
        sa.Column("estado", estado_aval, nullable=False, server_default="ACTIVO"),
        sa.Column("motivo_anulacion", sa.Text(), nullable=True),
        sa.Column("anulado_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_index("idx_avales_fecha_registro", "avales", ["fecha_registro"])
    op.create_index("idx_avales_estado", "avales", ["estado"])
    op.create_index("idx_avales_nombre_solicitante", "avales", ["nombre_solicitante"])

    op.bulk_insert(secuencias, [{"nombre": "AVAL", "ultimo_numero": 0}])


def downgrade() -> None:
    op.drop_index("idx_avales_nombre_solicitante", table_name="avales")
    op.drop_index("idx_avales_estado", table_name="avales")
    op.drop_index("idx_avales_fecha_registro", table_name="avales")
    op.drop_table("avales")
    estado_aval.drop(op.get_bind(), checkfirst=True)
    op.drop_table("secuencias")

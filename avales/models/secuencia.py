"""
Modelo Secuencia: contadores nombrados para correlativos.

Guarda el último número entregado por cada secuencia ("AVAL").
La tabla nunca se limpia: solo avanza con next_value() o se
sobrescribe con resync() desde la importación masiva.
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from avales.database import Base


class Secuencia(Base):
    __tablename__ = "secuencias"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True,
        comment="Nombre de la secuencia: AVAL"
    )
    ultimo_numero: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
        comment="Último número entregado"
    )

    __table_args__ = (
        CheckConstraint("ultimo_numero >= 0", name="ck_secuencias_ultimo_numero"),
    )

    def __repr__(self) -> str:
        return f"<Secuencia {self.nombre} #{self.ultimo_numero}>"

"""
Modelos SQLAlchemy. Se exportan todos para que Alembic los detecte.
"""

from avales.models.secuencia import Secuencia
from avales.models.aval import Aval, CampoAval, EstadoAval

__all__ = [
    "Secuencia",
    "Aval",
    "CampoAval",
    "EstadoAval",
]

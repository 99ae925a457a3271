"""
Servicio de secuencias: entrega números correlativos sin huecos ni duplicados.

next_value() incrementa y lee el contador en una sola sentencia
UPDATE ... RETURNING, de modo que dos solicitudes concurrentes nunca
leen el mismo último número (bloqueo de fila en PostgreSQL, bloqueo de
escritura en SQLite). El commit lo hace quien llama, junto con el
registro que consume el número.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from avales.core.exceptions import InvalidSequenceNumberException, UnknownSequenceException
from avales.models.secuencia import Secuencia

logger = logging.getLogger(__name__)


async def next_value(db: AsyncSession, nombre: str) -> int:
    """Reserva y retorna el siguiente número de la secuencia."""
    result = await db.execute(
        update(Secuencia)
        .where(Secuencia.nombre == nombre)
        .values(ultimo_numero=Secuencia.ultimo_numero + 1)
        .returning(Secuencia.ultimo_numero)
        .execution_options(synchronize_session=False)
    )
    numero = result.scalar_one_or_none()
    if numero is None:
        logger.error("Secuencia %s no configurada", nombre)
        raise UnknownSequenceException(nombre)
    return numero


async def resync(db: AsyncSession, nombre: str, valor: int) -> None:
    """
    Sobrescribe el último número de la secuencia.
    Uso exclusivo de la reconciliación masiva; no hace commit.
    """
    if isinstance(valor, bool) or not isinstance(valor, int) or valor < 0:
        raise InvalidSequenceNumberException(valor)

    result = await db.execute(
        update(Secuencia)
        .where(Secuencia.nombre == nombre)
        .values(ultimo_numero=valor)
        .returning(Secuencia.id)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        raise UnknownSequenceException(nombre)
    logger.info("Secuencia %s sincronizada en %s", nombre, valor)


async def get_last_value(db: AsyncSession, nombre: str) -> int:
    """Último número entregado (solo lectura)."""
    result = await db.execute(
        select(Secuencia.ultimo_numero).where(Secuencia.nombre == nombre)
    )
    valor = result.scalar_one_or_none()
    if valor is None:
        raise UnknownSequenceException(nombre)
    return valor


async def ensure_sequence(db: AsyncSession, nombre: str) -> Secuencia:
    """Crea la secuencia en 0 si todavía no existe. Idempotente."""
    result = await db.execute(select(Secuencia).where(Secuencia.nombre == nombre))
    seq = result.scalar_one_or_none()
    if seq:
        return seq

    seq = Secuencia(nombre=nombre, ultimo_numero=0)
    db.add(seq)
    await db.commit()
    await db.refresh(seq)
    logger.info("Secuencia %s creada", nombre)
    return seq

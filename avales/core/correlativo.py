"""
Formato de correlativos: (prefijo, número) ↔ "DTI|DSST|AVAL|0007".

El relleno con ceros es un ancho mínimo, nunca un truncado:
12345 → "DTI|DSST|AVAL|12345".
"""

import re

from avales.config import get_settings
from avales.core.exceptions import InvalidSequenceNumberException

settings = get_settings()

MIN_DIGITS = 4
_SUFFIX_RE = re.compile(rf"\|(\d{{{MIN_DIGITS},}})$")


def format_correlativo(
    numero: int,
    prefix: str | None = None,
    digits: int | None = None,
) -> str:
    """Construye el código visible a partir del número de secuencia."""
    if isinstance(numero, bool) or not isinstance(numero, int) or numero <= 0:
        raise InvalidSequenceNumberException(numero)

    prefix = settings.CORRELATIVO_PREFIX if prefix is None else prefix
    digits = max(settings.CORRELATIVO_MIN_DIGITS if digits is None else digits, MIN_DIGITS)
    return f"{prefix}|{numero:0{digits}d}"


def parse_correlativo(code: str | None) -> int | None:
    """
    Extrae el número de secuencia del grupo final de dígitos separado por '|'.
    Retorna None si el código no tiene ese formato.
    """
    if not code:
        return None
    match = _SUFFIX_RE.search(code.strip())
    if not match:
        return None
    return int(match.group(1))

"""
Normalización de fechas de entrada.

Acepta yyyy-mm-dd, d/m/yyyy (dd/mm/yyyy) y datetimes ISO; siempre
devuelve un `date`, que se persiste y serializa como yyyy-mm-dd.
"""

import re
from datetime import date, datetime

_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DMY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATETIME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T")


def parse_fecha(value: object) -> date | None:
    """
    Convierte el valor a `date`.
    Retorna None si está vacío; lanza ValueError si no se reconoce el formato.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    if not raw:
        return None

    for pattern in (_YMD_RE, _ISO_DATETIME_RE):
        match = pattern.match(raw)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)

    match = _DMY_RE.match(raw)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return date(year, month, day)

    raise ValueError(f"Formato de fecha no reconocido: {raw!r}")

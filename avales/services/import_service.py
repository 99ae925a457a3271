"""
Importación masiva de avales desde una exportación TSV/CSV de la oficina.

Reemplaza por completo la tabla `avales` y deja la secuencia AVAL en el
correlativo más alto importado, todo en una sola transacción: si algo
falla, la base queda como estaba.
"""

import csv
import logging
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from avales.config import get_settings
from avales.core.correlativo import parse_correlativo
from avales.core.exceptions import ImportacionException
from avales.core.fechas import parse_fecha
from avales.models.aval import Aval, CampoAval, EstadoAval
from avales.services import sequence_service

logger = logging.getLogger(__name__)
settings = get_settings()


# Sinónimos aceptados por columna (ya normalizados)
COLUMN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "fecha_registro": ("fecha", "fecha de registro", "fecha registro"),
    "correlativo": ("correlativo aval", "correlativo"),
    "nombre_solicitante": ("solicitante", "nombre del solicitante", "nombre solicitante"),
    "cargo": ("cargo",),
    "unidad_institucion": (
        "unidad administrativa", "unidad", "unidad institucion", "unidad de la institucion",
    ),
    "direccion_administrativa": (
        "direccion", "direccion administrativa", "direccion_administrativa",
    ),
    "memorando_solicitud": ("memorando de solicitud", "memorando", "memorando_solicitud"),
    "fecha_solicitud": ("fecha de solicitud", "fecha solicitud"),
    "responsable": ("responsable",),
}

_SEPARATOR_RE = re.compile(r"[;\t,\s]+")


@dataclass
class ImportPlan:
    """Filas ya validadas, listas para reconciliar."""
    rows: list[dict] = field(default_factory=list)
    max_sequence: int = 0
    skipped: int = 0


@dataclass
class ImportResult:
    imported: int
    sequence_value: int
    skipped: int


# ── Lectura ──────────────────────────────────────────


def normalize_header(value: str | None) -> str:
    """Minúsculas, sin tildes ni espacios repetidos."""
    text = (value or "").strip().lower().replace("\ufffd", "")
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", text)


def read_text(path: Path) -> str:
    """Lee el archivo como UTF-8 y recurre a Latin-1 si no decodifica limpio."""
    data = path.read_bytes()
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")
    if "\ufffd" in text:
        return data.decode("latin-1")
    return text


def detect_delimiter(line: str) -> str:
    if "\t" in line:
        return "\t"
    if ";" in line:
        return ";"
    return ","


def _find_columns(headers: list[str]) -> dict[str, int]:
    columns: dict[str, int] = {}
    missing: list[str] = []
    for logical, options in COLUMN_SYNONYMS.items():
        idx = next((headers.index(opt) for opt in options if opt in headers), -1)
        if idx < 0:
            missing.append(logical)
        else:
            columns[logical] = idx
    if missing:
        raise ImportacionException(
            f"Faltan columnas obligatorias en el encabezado: {', '.join(missing)}",
            fields=missing,
        )
    return columns


def parse_import_text(text: str) -> ImportPlan:
    """Valida el contenido completo; cualquier fila incompleta aborta la importación."""
    lines = [line.rstrip() for line in text.splitlines()]

    header_index = next(
        (
            i for i, line in enumerate(lines)
            if "correlativo" in normalize_header(line) and "solicitante" in normalize_header(line)
        ),
        -1,
    )
    if header_index < 0:
        raise ImportacionException(
            'No se encontró un encabezado con las columnas "Correlativo" y "Solicitante"'
        )

    delimiter = detect_delimiter(lines[header_index])
    # Las posiciones del encabezado deben coincidir con las de los datos
    headers = [normalize_header(h) for h in next(csv.reader([lines[header_index]], delimiter=delimiter))]
    columns = _find_columns(headers)

    data_lines = [
        (header_index + 2 + offset, line)
        for offset, line in enumerate(lines[header_index + 1:])
        if _SEPARATOR_RE.sub("", line)
    ]
    if not data_lines:
        raise ImportacionException("El archivo no tiene filas de datos después del encabezado")

    plan = ImportPlan()
    seen: dict[str, int] = {}
    payload_fields = [campo.value for campo in CampoAval]

    for line_number, parts in zip(
        (n for n, _ in data_lines),
        csv.reader((line for _, line in data_lines), delimiter=delimiter),
    ):
        def get(name: str) -> str:
            idx = columns[name]
            return parts[idx].strip() if idx < len(parts) else ""

        raw = {name: get(name) for name in COLUMN_SYNONYMS}

        # Filas de relleno al final de la exportación (solo correlativo/número)
        if not any(raw[name] for name in payload_fields):
            plan.skipped += 1
            continue

        missing = [name for name in ["correlativo", *payload_fields] if not raw[name]]
        if missing:
            raise ImportacionException(
                f"Línea {line_number}: faltan campos obligatorios: {', '.join(missing)}",
                fields=missing,
            )

        row: dict[str, str | date | None] = dict(raw)
        for name in (CampoAval.FECHA_REGISTRO.value, CampoAval.FECHA_SOLICITUD.value):
            try:
                row[name] = parse_fecha(raw[name])
            except ValueError:
                raise ImportacionException(
                    f"Línea {line_number}: fecha inválida en {name}: {raw[name]!r}",
                    fields=[name],
                )

        correlativo = raw["correlativo"]
        if correlativo in seen:
            raise ImportacionException(
                f"Línea {line_number}: correlativo {correlativo} duplicado "
                f"(ya aparece en la línea {seen[correlativo]})",
                fields=["correlativo"],
            )
        seen[correlativo] = line_number

        numero = parse_correlativo(correlativo)
        if numero is not None:
            plan.max_sequence = max(plan.max_sequence, numero)
        plan.rows.append(row)

    return plan


def read_import_file(path: Path) -> ImportPlan:
    if not path.exists():
        raise ImportacionException(f"No se encontró el archivo: {path}")
    return parse_import_text(read_text(path))


# ── Reconciliación ───────────────────────────────────


async def reconcile(db: AsyncSession, plan: ImportPlan) -> ImportResult:
    """
    Borra todos los avales, reinserta los del plan y sincroniza la secuencia
    con el correlativo más alto. Todo o nada.
    """
    nombre = settings.SEQUENCE_NAME
    try:
        await db.execute(delete(Aval))
        await sequence_service.resync(db, nombre, 0)

        db.add_all(
            Aval(estado=EstadoAval.ACTIVO, updated_at=None, **row)
            for row in plan.rows
        )
        await db.flush()

        await sequence_service.resync(db, nombre, plan.max_sequence)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Importación revertida")
        raise

    logger.info(
        f"Importados {len(plan.rows)} avales; secuencia {nombre} en {plan.max_sequence}"
    )
    return ImportResult(
        imported=len(plan.rows),
        sequence_value=plan.max_sequence,
        skipped=plan.skipped,
    )


async def import_avales(db: AsyncSession, path: Path) -> ImportResult:
    plan = read_import_file(path)
    return await reconcile(db, plan)

"""
Script para reemplazar el registro de avales con una exportación TSV/CSV.

Uso:
    python scripts/import_avales.py data/avales.tsv
    python scripts/import_avales.py data/avales.csv --dry-run  # solo valida

Notas:
    - Borra TODOS los avales y los vuelve a importar en una sola transacción.
    - Deja la secuencia AVAL en el correlativo más alto importado.
    - Fechas aceptadas: dd/mm/yyyy o yyyy-mm-dd. Se guardan como yyyy-mm-dd.
    - Columnas esperadas (nombres flexibles): Fecha, Correlativo Aval,
      Solicitante, Cargo, Unidad, Dirección, Memorando, Fecha de Solicitud,
      Responsable.
"""

import argparse
import sys
from pathlib import Path

# Agregar el directorio raíz al path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from avales.config import get_settings
from avales.core.exceptions import ImportacionException
from avales.database import async_session_factory
from avales.services import import_service, sequence_service

settings = get_settings()


async def run_import(path: Path, dry_run: bool = False) -> None:
    try:
        plan = import_service.read_import_file(path)
    except ImportacionException as exc:
        print(f"ERROR: {exc.detail}")
        sys.exit(1)

    print(f"Leídos {len(plan.rows)} avales del archivo")
    print(f"Correlativo más alto: {plan.max_sequence}")
    if dry_run:
        print("Modo prueba: no se modificó la base de datos")
        return

    async with async_session_factory() as session:
        await sequence_service.ensure_sequence(session, settings.SEQUENCE_NAME)
        result = await import_service.reconcile(session, plan)

    print(f"Importados: {result.imported}")
    print(f"Secuencia {settings.SEQUENCE_NAME} en: {result.sequence_value}")
    if result.skipped:
        print(f"Omitidas {result.skipped} fila(s) vacías de relleno")
    print("Importación completada")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reemplazar avales desde un archivo TSV/CSV")
    parser.add_argument("archivo", type=Path, help="Ruta al TSV/CSV exportado")
    parser.add_argument("--dry-run", action="store_true", help="Validar sin escribir en la BD")
    args = parser.parse_args()

    asyncio.run(run_import(args.archivo.resolve(), args.dry_run))

"""
Tests del historial: filtros combinados y paginación.
"""

import pytest

from avales.core.exceptions import ValidationException
from avales.schemas.aval import AvalFilters
from avales.services import aval_service

SOLICITANTES = [
    ("María López", "2026-02-10"),
    ("Mario Díaz", "2026-02-10"),
    ("Ana María Ruiz", "2026-02-11"),
    ("Pedro Soto", "12/02/2026"),
    ("Lucía Mar", "2026-02-12"),
]


@pytest.fixture
async def avales(db_session, payload):
    """Cinco avales; el tercero queda anulado."""
    created = []
    for nombre, fecha in SOLICITANTES:
        data = dict(payload, nombre_solicitante=nombre, fecha_registro=fecha)
        created.append(await aval_service.create_aval(db_session, data))
    await aval_service.void_aval(db_session, created[2].id, "error de datos")
    return created


def _codes(items) -> list[str]:
    return [item.correlativo for item in items]


async def test_list_without_filters_is_most_recent_first(db_session, avales):
    items, total = await aval_service.list_avales(db_session)

    assert total == 5
    assert [item.id for item in items] == sorted((a.id for a in avales), reverse=True)


async def test_filter_by_correlativo_substring(db_session, avales):
    items, total = await aval_service.list_avales(
        db_session, AvalFilters(correlativo="aval|0002")
    )

    assert total == 1
    assert _codes(items) == ["DTI|DSST|AVAL|0002"]


async def test_filter_by_solicitante_substring(db_session, avales):
    items, total = await aval_service.list_avales(db_session, AvalFilters(solicitante="mar"))

    nombres = {item.nombre_solicitante for item in items}
    assert nombres == {"María López", "Mario Díaz", "Ana María Ruiz", "Lucía Mar"}
    assert total == 4


async def test_filter_by_fecha_accepts_both_formats(db_session, avales):
    _, total_ymd = await aval_service.list_avales(db_session, AvalFilters(fecha="2026-02-12"))
    _, total_dmy = await aval_service.list_avales(db_session, AvalFilters(fecha="12/02/2026"))

    assert total_ymd == total_dmy == 2


async def test_unparseable_fecha_matches_nothing(db_session, avales):
    items, total = await aval_service.list_avales(db_session, AvalFilters(fecha="mañana"))

    assert items == []
    assert total == 0


@pytest.mark.parametrize("estado, expected", [("ANULADO", 1), ("anulado", 1), ("Activo", 4)])
async def test_filter_by_estado(db_session, avales, estado, expected):
    items, total = await aval_service.list_avales(db_session, AvalFilters(estado=estado))

    assert total == expected
    assert all(item.estado.value == estado.upper() for item in items)


@pytest.mark.parametrize("estado", ["BORRADO", "' OR 1=1 --", "", "   "])
async def test_unknown_estado_is_ignored(db_session, avales, estado):
    _, total = await aval_service.list_avales(db_session, AvalFilters(estado=estado))

    assert total == 5


async def test_like_wildcards_are_literal(db_session, avales):
    _, total = await aval_service.list_avales(db_session, AvalFilters(correlativo="%"))
    assert total == 0

    _, total = await aval_service.list_avales(db_session, AvalFilters(solicitante="_"))
    assert total == 0


@pytest.mark.parametrize(
    "correlativo, solicitante",
    [("000", "mar"), ("0003", "ana"), ("0001", "pedro"), ("aval", ""), ("9", "mar")],
)
async def test_filters_are_orthogonal(db_session, avales, correlativo, solicitante):
    by_code, _ = await aval_service.list_avales(db_session, AvalFilters(correlativo=correlativo))
    by_name, _ = await aval_service.list_avales(db_session, AvalFilters(solicitante=solicitante))
    both, total = await aval_service.list_avales(
        db_session, AvalFilters(correlativo=correlativo, solicitante=solicitante)
    )

    expected = {a.id for a in by_code} & {a.id for a in by_name}
    assert {a.id for a in both} == expected
    assert total == len(expected)


async def test_pagination_reports_total_and_is_stable(db_session, avales):
    first, total = await aval_service.list_avales(db_session, limit=2, offset=0)
    second, _ = await aval_service.list_avales(db_session, limit=2, offset=2)
    third, _ = await aval_service.list_avales(db_session, limit=2, offset=4)

    assert total == 5
    assert _codes(first) == ["DTI|DSST|AVAL|0005", "DTI|DSST|AVAL|0004"]
    assert _codes(second) == ["DTI|DSST|AVAL|0003", "DTI|DSST|AVAL|0002"]
    assert _codes(third) == ["DTI|DSST|AVAL|0001"]


async def test_pagination_with_filters(db_session, avales):
    items, total = await aval_service.list_avales(
        db_session, AvalFilters(estado="ACTIVO"), limit=3, offset=0
    )

    assert total == 4
    assert _codes(items) == ["DTI|DSST|AVAL|0005", "DTI|DSST|AVAL|0004", "DTI|DSST|AVAL|0002"]


async def test_invalid_paging_is_rejected(db_session):
    with pytest.raises(ValidationException):
        await aval_service.list_avales(db_session, limit=-1)
    with pytest.raises(ValidationException):
        await aval_service.list_avales(db_session, offset=-5)

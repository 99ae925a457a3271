"""
Tests del formato de correlativos y de la normalización de fechas.
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from avales.config import Settings
from avales.core.correlativo import format_correlativo, parse_correlativo
from avales.core.exceptions import InvalidSequenceNumberException
from avales.core.fechas import parse_fecha


def test_format_pads_to_four_digits():
    assert format_correlativo(1) == "DTI|DSST|AVAL|0001"
    assert format_correlativo(7) == "DTI|DSST|AVAL|0007"
    assert format_correlativo(9999) == "DTI|DSST|AVAL|9999"


def test_format_never_truncates():
    assert format_correlativo(12345) == "DTI|DSST|AVAL|12345"
    assert format_correlativo(1234567) == "DTI|DSST|AVAL|1234567"


def test_format_with_custom_prefix():
    assert format_correlativo(3, prefix="OFI|AVAL") == "OFI|AVAL|0003"
    assert format_correlativo(3, prefix="X", digits=6) == "X|000003"


@pytest.mark.parametrize("digits", [0, 2, 3])
def test_format_never_pads_below_four_digits(digits):
    code = format_correlativo(5, digits=digits)

    assert code == "DTI|DSST|AVAL|0005"
    assert parse_correlativo(code) == 5


def test_settings_reject_less_than_four_digits():
    with pytest.raises(ValidationError):
        Settings(CORRELATIVO_MIN_DIGITS=2)


@pytest.mark.parametrize("numero", [0, -1, -500, True, 1.0, "5", None])
def test_format_rejects_invalid_numbers(numero):
    with pytest.raises(InvalidSequenceNumberException):
        format_correlativo(numero)


def test_parse_recovers_number():
    for numero in [*range(1, 120), 999, 1000, 9999, 10000, 54321, 99999, 100000]:
        assert parse_correlativo(format_correlativo(numero)) == numero


@pytest.mark.parametrize(
    "code",
    ["", None, "DTI|DSST|AVAL", "DTI|DSST|AVAL|12", "DTI-DSST-AVAL-0001", "AVAL|00a1"],
)
def test_parse_returns_none_for_unexpected_codes(code):
    assert parse_correlativo(code) is None


def test_parse_tolerates_surrounding_whitespace():
    assert parse_correlativo("  DTI|DSST|AVAL|0042 ") == 42


# ── Fechas ───────────────────────────────────────────


@pytest.mark.parametrize(
    "raw",
    ["2026-02-05", "05/02/2026", "5/2/2026", "2026-02-05T10:30:00", date(2026, 2, 5),
     datetime(2026, 2, 5, 8, 0)],
)
def test_parse_fecha_accepts_supported_formats(raw):
    assert parse_fecha(raw) == date(2026, 2, 5)


def test_parse_fecha_empty_is_none():
    assert parse_fecha(None) is None
    assert parse_fecha("   ") is None


@pytest.mark.parametrize("raw", ["ayer", "2026/02/05", "31/02/2026", "2026-13-01"])
def test_parse_fecha_rejects_unknown_or_impossible_dates(raw):
    with pytest.raises(ValueError):
        parse_fecha(raw)

import pytest

from assetdex.rack_space.errors import InvalidUnitFormat
from assetdex.rack_space.units import format_unit, parse_unit


@pytest.mark.parametrize(
    "value, expected",
    [
        (25, 25),
        ("25", 25),
        ("U25", 25),
        ("u25", 25),
        (" U7 ", 7),
        ("U0", 0),  # range is checked by the evaluator, not the parser
    ],
)
def test_parse_unit_accepts_int_and_unit_strings(value, expected):
    assert parse_unit(value) == expected


@pytest.mark.parametrize("value", ["", "U", "UU2", "U-3", "-3", "U2.5", "rack", None, 2.0, True, [1]])
def test_parse_unit_rejects_malformed_values(value):
    with pytest.raises(InvalidUnitFormat) as exc_info:
        parse_unit(value)

    assert exc_info.value.value == value


def test_invalid_unit_format_is_a_value_error():
    # Request schemas rely on this to report malformed units as 422s.
    with pytest.raises(ValueError):
        parse_unit("top")


def test_format_unit():
    assert format_unit(12) == "U12"
    assert parse_unit(format_unit(40)) == 40

"""
Conversion between the external ``U<n>`` unit notation and integer units.
"""
import re
from typing import Any

from assetdex.rack_space.errors import InvalidUnitFormat

_UNIT_PATTERN = re.compile(r"^[Uu]?(\d+)$")


def parse_unit(value: Any) -> int:
    """
    Parse a rack unit given as an int, ``"U25"`` or ``"25"``.

    Bounds are not checked here; the evaluator owns range validation.

    Raises:
        InvalidUnitFormat: If the value is not an integer or a unit string.
    """
    if isinstance(value, bool):
        raise InvalidUnitFormat(value)
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise InvalidUnitFormat(value)

    match = _UNIT_PATTERN.match(value.strip())
    if not match:
        raise InvalidUnitFormat(value)
    return int(match.group(1))


def format_unit(unit: int) -> str:
    return f"U{unit}"

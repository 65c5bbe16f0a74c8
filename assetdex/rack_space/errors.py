"""
Errors raised by the rack-space core.

Routers translate these into HTTP responses; the core itself never imports
FastAPI so it can be reused by any caller that hands it plain data.
"""
from typing import Any, Optional


class RackSpaceError(Exception):
    """Base class for every rack-space failure."""


class InvalidPlacement(RackSpaceError):
    """The candidate placement falls outside the rack or has no height."""

    def __init__(
        self,
        message: str,
        *,
        start_unit: Optional[int] = None,
        height: Optional[int] = None,
        total_units: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start_unit = start_unit
        self.height = height
        self.total_units = total_units


class InvalidUnitFormat(RackSpaceError, ValueError):
    """A unit value could not be parsed into an integer rack unit."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid rack unit '{value}', expected an integer or 'U<n>'")
        self.value = value


class SnapshotUnavailable(RackSpaceError):
    """The current occupancy of a rack could not be read."""

    def __init__(self, rack: str, reason: str) -> None:
        super().__init__(f"Occupancy of rack '{rack}' is unavailable: {reason}")
        self.rack = rack
        self.reason = reason

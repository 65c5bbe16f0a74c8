"""
Value types for rack-space evaluation.

Unit numbering: unit 1 is the bottom of the rack and ``total_units`` the top.
A device placed at ``start_unit`` with ``height`` units occupies
``start_unit .. start_unit + height - 1``.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

DEFAULT_TOTAL_UNITS = 42


@dataclass(frozen=True)
class RackUnitInterval:
    """Units occupied by one device."""

    device_id: str
    label: str
    start_unit: int
    height: int

    def __post_init__(self) -> None:
        if self.start_unit < 1:
            raise ValueError(f"start_unit must be >= 1, got {self.start_unit}")
        if self.height < 1:
            raise ValueError(f"height must be >= 1, got {self.height}")

    @property
    def end_unit(self) -> int:
        return self.start_unit + self.height - 1

    @property
    def occupied_units(self) -> FrozenSet[int]:
        return frozenset(range(self.start_unit, self.end_unit + 1))


@dataclass(frozen=True)
class RackSnapshot:
    """Point-in-time occupancy of one rack."""

    rack: str
    intervals: Tuple[RackUnitInterval, ...] = ()
    total_units: int = DEFAULT_TOTAL_UNITS

    def __post_init__(self) -> None:
        if self.total_units < 1:
            raise ValueError(f"total_units must be >= 1, got {self.total_units}")
        # Lists are accepted for convenience but stored as a tuple.
        object.__setattr__(self, "intervals", tuple(self.intervals))


@dataclass(frozen=True)
class CandidatePlacement:
    rack: str
    start_unit: int
    height: int
    exclude_device_id: Optional[str] = None

    @property
    def end_unit(self) -> int:
        return self.start_unit + self.height - 1

    @property
    def occupied_units(self) -> FrozenSet[int]:
        return frozenset(range(self.start_unit, self.end_unit + 1))


@dataclass(frozen=True)
class FreeSpace:
    """
    A maximal run of free units.

    ``start_unit`` is the highest unit of the run (the first one reached by the
    top-down scan) and ``end_unit`` the lowest.
    """

    start_unit: int
    end_unit: int

    @property
    def size(self) -> int:
        return self.start_unit - self.end_unit + 1

    @property
    def units(self) -> FrozenSet[int]:
        return frozenset(range(self.end_unit, self.start_unit + 1))


@dataclass(frozen=True)
class Suggestion:
    start_unit: int
    reason: str


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflicts: Tuple[RackUnitInterval, ...] = field(default_factory=tuple)
    free_spaces: Tuple[FreeSpace, ...] = field(default_factory=tuple)
    suggestion: Optional[Suggestion] = None

"""
Interval arithmetic over a rack snapshot.

Everything here is a pure function of its arguments: no I/O, no caching.
"""
from typing import List, Optional, Set

from assetdex.rack_space.types import (
    CandidatePlacement,
    FreeSpace,
    RackSnapshot,
    RackUnitInterval,
)


def _placed_intervals(
    snapshot: RackSnapshot,
    exclude_device_id: Optional[str],
) -> List[RackUnitInterval]:
    if exclude_device_id is None:
        return list(snapshot.intervals)
    return [i for i in snapshot.intervals if i.device_id != exclude_device_id]


def occupied_unit_set(
    snapshot: RackSnapshot,
    exclude_device_id: Optional[str] = None,
) -> Set[int]:
    """Union of the units held by every device except the excluded one."""
    occupied: Set[int] = set()
    for interval in _placed_intervals(snapshot, exclude_device_id):
        occupied.update(interval.occupied_units)
    return occupied


def conflicts_for(
    snapshot: RackSnapshot,
    candidate: CandidatePlacement,
) -> List[RackUnitInterval]:
    """
    Return every device whose units intersect the candidate's units.

    The result is ordered by ``start_unit`` ascending; devices sharing a start
    unit keep their snapshot order.
    """
    requested = candidate.occupied_units
    conflicts = [
        interval
        for interval in _placed_intervals(snapshot, candidate.exclude_device_id)
        if not requested.isdisjoint(interval.occupied_units)
    ]
    conflicts.sort(key=lambda interval: interval.start_unit)
    return conflicts


def free_spaces(
    snapshot: RackSnapshot,
    exclude_device_id: Optional[str] = None,
) -> List[FreeSpace]:
    """
    Scan the rack from the top unit down to unit 1 and group free units into
    maximal runs, top of rack first.
    """
    occupied = occupied_unit_set(snapshot, exclude_device_id)
    spaces: List[FreeSpace] = []
    run_start: Optional[int] = None

    for unit in range(snapshot.total_units, 0, -1):
        if unit not in occupied:
            if run_start is None:
                run_start = unit
        elif run_start is not None:
            spaces.append(FreeSpace(start_unit=run_start, end_unit=unit + 1))
            run_start = None

    # A run still open here reaches the bottom of the rack.
    if run_start is not None:
        spaces.append(FreeSpace(start_unit=run_start, end_unit=1))

    return spaces


def used_units(snapshot: RackSnapshot) -> int:
    """Number of units inside ``1..total_units`` held by some device."""
    return sum(
        1
        for unit in occupied_unit_set(snapshot)
        if 1 <= unit <= snapshot.total_units
    )

"""
Alternative placement selection.

Policy is first-fit from the top of the rack: the first free run (in the
top-down order produced by ``occupancy.free_spaces``) that is tall enough wins,
regardless of its size or its distance from the requested position. The
device is placed flush against the top of that run.
"""
from typing import List, Optional, Sequence

from assetdex.rack_space.types import FreeSpace, Suggestion
from assetdex.rack_space.units import format_unit


def candidate_spaces(
    spaces: Sequence[FreeSpace],
    required_height: int,
) -> List[FreeSpace]:
    """All free runs that can hold ``required_height`` units, in input order."""
    if required_height <= 0:
        return []
    return [space for space in spaces if space.size >= required_height]


def suggest(
    spaces: Sequence[FreeSpace],
    required_height: int,
) -> Optional[Suggestion]:
    """
    Pick one start unit for a device of ``required_height`` units.

    Returns None when no free run is tall enough.
    """
    candidates = candidate_spaces(spaces, required_height)
    if not candidates:
        return None

    best = candidates[0]
    start_unit = best.start_unit - required_height + 1
    reason = (
        f"Suggested position {format_unit(start_unit)} in available {best.size}U space "
        f"({format_unit(best.start_unit)}-{format_unit(best.end_unit)})"
    )
    return Suggestion(start_unit=start_unit, reason=reason)

"""
Single entry point for checking whether a device fits at a position in a rack.

``evaluate`` is referentially transparent: the same snapshot and candidate
always give the same result. It is safe to call concurrently, but its verdict
is only as fresh as the snapshot it was given. Two callers can both see
"available" for overlapping placements; writers must re-check under a lock
(see ``assetdex.helpers.placement_helper``) before committing.
"""
from assetdex.core.logger import app_logger
from assetdex.rack_space import occupancy
from assetdex.rack_space.errors import InvalidPlacement
from assetdex.rack_space.suggestion import suggest
from assetdex.rack_space.types import (
    AvailabilityResult,
    CandidatePlacement,
    RackSnapshot,
)


def validate_placement(candidate: CandidatePlacement, total_units: int) -> None:
    """
    Reject placements that cannot exist in a rack of ``total_units`` units.

    Raises:
        InvalidPlacement: If height or start unit is not positive, or the
            device would extend past the top of the rack.
    """
    if candidate.height <= 0:
        raise InvalidPlacement(
            f"Unit height must be >= 1, got {candidate.height}",
            start_unit=candidate.start_unit,
            height=candidate.height,
            total_units=total_units,
        )
    if candidate.start_unit <= 0:
        raise InvalidPlacement(
            f"Position must be >= 1, got {candidate.start_unit}",
            start_unit=candidate.start_unit,
            height=candidate.height,
            total_units=total_units,
        )
    if candidate.end_unit > total_units:
        raise InvalidPlacement(
            (
                f"Device position {candidate.start_unit} + height {candidate.height}U "
                f"(ends at U{candidate.end_unit}) exceeds rack height {total_units}U"
            ),
            start_unit=candidate.start_unit,
            height=candidate.height,
            total_units=total_units,
        )


def evaluate(snapshot: RackSnapshot, candidate: CandidatePlacement) -> AvailabilityResult:
    """
    Check ``candidate`` against ``snapshot``.

    Free spaces are always computed so callers can display them; a suggestion
    is only produced when the requested position conflicts.
    """
    if candidate.rack != snapshot.rack:
        raise InvalidPlacement(
            f"Candidate rack '{candidate.rack}' does not match snapshot rack '{snapshot.rack}'",
            start_unit=candidate.start_unit,
            height=candidate.height,
            total_units=snapshot.total_units,
        )

    validate_placement(candidate, snapshot.total_units)

    conflicts = occupancy.conflicts_for(snapshot, candidate)
    available = not conflicts
    spaces = occupancy.free_spaces(snapshot, candidate.exclude_device_id)
    suggestion = None if available else suggest(spaces, candidate.height)

    app_logger.debug(
        "Rack availability evaluated",
        extra={
            "rack": snapshot.rack,
            "position": candidate.start_unit,
            "unit_height": candidate.height,
            "exclude_device_id": candidate.exclude_device_id,
            "available": available,
            "conflict_count": len(conflicts),
            "free_space_count": len(spaces),
            "suggested_position": suggestion.start_unit if suggestion else None,
        },
    )

    return AvailabilityResult(
        available=available,
        conflicts=tuple(conflicts),
        free_spaces=tuple(spaces),
        suggestion=suggestion,
    )

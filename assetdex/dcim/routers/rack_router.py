"""
DCIM Rack Router - rack space availability checks and occupancy views.

Both endpoints read a fresh occupancy snapshot per request and run it through
the same rack-space evaluation, so what the rack view shows as free is exactly
what the availability check accepts.
"""
from fastapi import APIRouter, Depends, HTTPException, Path, status

from assetdex.core.logger import app_logger
from assetdex.helpers.occupancy_repository import RackOccupancyRepository, get_occupancy_repository
from assetdex.helpers.rbac_helper import AccessLevel, require_at_least_viewer
from assetdex.rack_space import occupancy
from assetdex.rack_space.errors import InvalidPlacement, SnapshotUnavailable
from assetdex.rack_space.evaluator import evaluate
from assetdex.rack_space.types import CandidatePlacement, RackSnapshot
from assetdex.schemas.rack_schemas import (
    AvailabilityCheckRequest,
    AvailabilityResponse,
    AvailableSpaceOut,
    RackOccupancyResponse,
    RackServerOut,
)

router = APIRouter(prefix="/api/dcim", tags=["DCIM Racks"])

SNAPSHOT_UNAVAILABLE_DETAIL = "Could not check rack availability"


def _load_snapshot_or_503(repository: RackOccupancyRepository, rack) -> RackSnapshot:
    try:
        return repository.load_snapshot(rack)
    except SnapshotUnavailable as e:
        app_logger.warning(
            "Rack snapshot unavailable",
            extra={"rack": e.rack, "reason": e.reason},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SNAPSHOT_UNAVAILABLE_DETAIL,
        )


@router.post(
    "/racks/check-availability",
    response_model=AvailabilityResponse,
    response_model_exclude_none=True,
    summary="Check whether a device fits at a rack position",
)
def check_rack_availability(
    body: AvailabilityCheckRequest,
    access_level: AccessLevel = Depends(require_at_least_viewer),
    repository: RackOccupancyRepository = Depends(get_occupancy_repository),
):
    """
    Check whether `unitHeight` units starting at `position` are free in `rack`.

    - `position` accepts `25` or `"U25"`
    - `excludeServerId` skips the server being edited so it never conflicts with itself
    - `availableSpaces` is always returned, top of rack first
    - `suggestion` is only returned on conflict, when some free run is tall enough

    The verdict is a pre-check only; moves are re-validated when saved.
    """
    rack = repository.get_rack(body.rack)
    snapshot = _load_snapshot_or_503(repository, rack)

    candidate = CandidatePlacement(
        rack=snapshot.rack,
        start_unit=body.position,
        height=body.unit_height,
        exclude_device_id=body.exclude_server_id,
    )
    try:
        result = evaluate(snapshot, candidate)
    except InvalidPlacement as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )

    return AvailabilityResponse.from_result(result)


@router.get(
    "/racks/{rack_name}/occupancy",
    response_model=RackOccupancyResponse,
    summary="Rack contents ordered top to bottom, with free unit ranges",
)
def get_rack_occupancy(
    rack_name: str = Path(..., min_length=1, description="Rack name (case-insensitive)"),
    access_level: AccessLevel = Depends(require_at_least_viewer),
    repository: RackOccupancyRepository = Depends(get_occupancy_repository),
):
    """
    Returns the rack metadata, its servers (highest unit first, unmounted
    servers last), used/available unit counts and the free unit ranges.
    """
    rack = repository.get_rack(rack_name)
    snapshot = _load_snapshot_or_503(repository, rack)
    try:
        servers = repository.list_servers(rack)
    except SnapshotUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not load rack contents",
        )

    start_by_id = {interval.device_id: interval.start_unit for interval in snapshot.intervals}
    servers = sorted(
        servers,
        key=lambda s: (-start_by_id.get(str(s.id), 0), s.hostname or ""),
    )

    used = occupancy.used_units(snapshot)
    return RackOccupancyResponse(
        name=rack.name,
        datacenter=rack.datacenter,
        floor=rack.floor,
        location=rack.location,
        total_units=snapshot.total_units,
        used_units=used,
        available_units=snapshot.total_units - used,
        servers=[RackServerOut.model_validate(s) for s in servers],
        available_spaces=[
            AvailableSpaceOut.from_free_space(space) for space in occupancy.free_spaces(snapshot)
        ],
    )

# assetdex/helpers/placement_helper.py
"""
Server placement writes.

Availability checks made by the UI are optimistic: they run against a snapshot
that may be stale by the time the user saves. Every move therefore locks the
target rack row, re-reads the rack occupancy inside the same transaction and
re-evaluates before writing. Concurrent moves into the same rack queue on that
lock, so two of them can never both commit overlapping units.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from assetdex.helpers.db_utils import db_operation, get_entity_by_id
from assetdex.helpers.occupancy_repository import RackOccupancyRepository
from assetdex.helpers.position_history_helper import record_position_change
from assetdex.models.inventory_models import Server
from assetdex.rack_space.errors import InvalidPlacement
from assetdex.rack_space.evaluator import evaluate
from assetdex.rack_space.types import CandidatePlacement
from assetdex.rack_space.units import format_unit
from assetdex.schemas.rack_schemas import (
    AvailableSpaceOut,
    ConflictingServerOut,
    ServerMoveRequest,
    SuggestionOut,
)


def _conflict_detail(result) -> Dict[str, Any]:
    return {
        "message": "Requested units are already occupied",
        "conflictingServers": [
            ConflictingServerOut.from_interval(i).model_dump() for i in result.conflicts
        ],
        "availableSpaces": [
            AvailableSpaceOut.from_free_space(s).model_dump(by_alias=True) for s in result.free_spaces
        ],
        "suggestion": (
            SuggestionOut(position=result.suggestion.start_unit, reason=result.suggestion.reason).model_dump()
            if result.suggestion
            else None
        ),
    }


def move_server(
    db: Session,
    repository: RackOccupancyRepository,
    server_id: str,
    move: ServerMoveRequest,
    changed_by: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Move a server to ``move.rack`` at ``move.position``.

    Raises:
        HTTPException: 404 for an unknown server or rack, 400 for a placement
            outside the rack or a server with no known height, 409 when the
            units are taken.
        SnapshotUnavailable: If the rack occupancy cannot be read.
    """
    with db_operation(db, "move server"):
        server = get_entity_by_id(db, Server, server_id, error_message=f"Server '{server_id}' not found")

        height = move.unit_height if move.unit_height is not None else server.unit_height
        if height is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Server '{server.hostname}' has no unit height; provide unitHeight",
            )

        rack = repository.get_rack(move.rack, lock=True)
        snapshot = repository.load_snapshot(rack)
        candidate = CandidatePlacement(
            rack=snapshot.rack,
            start_unit=move.position,
            height=height,
            exclude_device_id=str(server.id),
        )

        try:
            result = evaluate(snapshot, candidate)
        except InvalidPlacement as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=e.message,
            )

        if not result.available:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=_conflict_detail(result),
            )

        previous_rack = server.rack.name if server.rack is not None else None
        new_unit = format_unit(move.position)

        history = record_position_change(
            db,
            server_id=str(server.id),
            previous_rack=previous_rack,
            previous_unit=server.unit,
            previous_unit_height=server.unit_height,
            new_rack=rack.name,
            new_unit=new_unit,
            new_unit_height=height,
            changed_by=changed_by,
            notes=move.notes,
        )

        server.rack_id = rack.id
        server.rack = rack
        server.unit = new_unit
        server.unit_height = height

        db.commit()

    return {
        "id": str(server.id),
        "hostname": server.hostname,
        "rack": rack.name,
        "unit": new_unit,
        "unit_height": height,
        "previous_rack": previous_rack,
        "history_id": history.id,
    }

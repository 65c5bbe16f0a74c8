"""
DCIM Server Router - moving servers between rack positions and reading
their position history.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from assetdex.db.session import get_db
from assetdex.helpers import placement_helper
from assetdex.helpers.auth_helper import TokenUser, get_current_user
from assetdex.helpers.db_utils import get_entity_by_id
from assetdex.helpers.occupancy_repository import RackOccupancyRepository, get_occupancy_repository
from assetdex.helpers.position_history_helper import list_position_history
from assetdex.helpers.rbac_helper import AccessLevel, require_at_least_viewer, require_editor_or_admin
from assetdex.models.inventory_models import Server
from assetdex.rack_space.errors import SnapshotUnavailable
from assetdex.schemas.rack_schemas import PositionHistoryOut, ServerMoveRequest

router = APIRouter(prefix="/api/dcim", tags=["DCIM Servers"])


@router.post(
    "/servers/{server_id}/move",
    response_model=Dict[str, Any],
    status_code=status.HTTP_200_OK,
    summary="Move a server to a new rack position",
)
def move_server(
    body: ServerMoveRequest,
    server_id: str = Path(..., min_length=1, max_length=36),
    access_level: AccessLevel = Depends(require_editor_or_admin),
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    repository: RackOccupancyRepository = Depends(get_occupancy_repository),
):
    """
    Move a server to `rack` at `position`.

    **Required access level:** Editor or Admin

    The target rack is locked and its occupancy re-checked before the write.
    A conflict returns 409 with the conflicting servers, the free ranges and a
    suggested position. Every successful move is recorded in the server's
    position history.
    """
    try:
        data = placement_helper.move_server(
            db,
            repository,
            server_id,
            body,
            changed_by=current_user.username or current_user.id,
        )
    except SnapshotUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not verify rack availability; the server was not moved",
        )

    return {
        "message": f"Server '{data['hostname']}' moved to {data['rack']} {data['unit']}",
        "data": data,
        "history_id": data["history_id"],
    }


@router.get(
    "/servers/{server_id}/position-history",
    response_model=Dict[str, Any],
    summary="Position history of a server, newest first",
)
def get_server_position_history(
    server_id: str = Path(..., min_length=1, max_length=36),
    access_level: AccessLevel = Depends(require_at_least_viewer),
    db: Session = Depends(get_db),
):
    get_entity_by_id(db, Server, server_id, error_message=f"Server '{server_id}' not found")
    entries = list_position_history(db, server_id)
    return {
        "server_id": server_id,
        "total": len(entries),
        "results": [PositionHistoryOut.model_validate(entry).model_dump() for entry in entries],
    }

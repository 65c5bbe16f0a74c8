# assetdex/helpers/position_history_helper.py
"""
Position history helper for tracking server moves between racks and units.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from assetdex.core.logger import app_logger
from assetdex.models.inventory_models import ServerPositionHistory


def record_position_change(
    db: Session,
    *,
    server_id: str,
    previous_rack: Optional[str],
    previous_unit: Optional[str],
    previous_unit_height: Optional[int],
    new_rack: str,
    new_unit: str,
    new_unit_height: int,
    changed_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> ServerPositionHistory:
    """
    Create a position history entry.

    The entry is flushed so its id is available, but not committed: the
    caller commits it together with the server update.
    """
    entry = ServerPositionHistory(
        server_id=server_id,
        previous_rack=previous_rack,
        previous_unit=previous_unit,
        previous_unit_height=previous_unit_height,
        new_rack=new_rack,
        new_unit=new_unit,
        new_unit_height=new_unit_height,
        changed_by=changed_by,
        notes=notes,
    )
    db.add(entry)
    db.flush()

    app_logger.info(
        "Server position changed",
        extra={
            "server_id": server_id,
            "previous": f"{previous_rack}/{previous_unit}" if previous_rack else None,
            "new": f"{new_rack}/{new_unit}",
            "changed_by": changed_by,
        },
    )
    return entry


def list_position_history(db: Session, server_id: str) -> List[Dict[str, Any]]:
    """History entries for a server, newest first."""
    entries = (
        db.query(ServerPositionHistory)
        .filter(ServerPositionHistory.server_id == server_id)
        .order_by(ServerPositionHistory.changed_at.desc(), ServerPositionHistory.id.desc())
        .all()
    )
    return [serialize_position_change(entry) for entry in entries]


def serialize_position_change(entry: ServerPositionHistory) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "server_id": entry.server_id,
        "previous_rack": entry.previous_rack,
        "previous_unit": entry.previous_unit,
        "previous_unit_height": entry.previous_unit_height,
        "new_rack": entry.new_rack,
        "new_unit": entry.new_unit,
        "new_unit_height": entry.new_unit_height,
        "changed_by": entry.changed_by,
        "notes": entry.notes,
        "changed_at": entry.changed_at,
    }

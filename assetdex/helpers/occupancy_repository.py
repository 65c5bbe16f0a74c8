"""
Data access for rack occupancy.

The repository is the only place that turns stored server rows into a
``RackSnapshot``. It is built per request from an explicit session and passed
into the routers and helpers that need it; the rack-space core never sees it.
"""
from typing import List

from fastapi import Depends
from sqlalchemy import exc
from sqlalchemy.orm import Session

from assetdex.core.config import settings
from assetdex.core.logger import app_logger
from assetdex.db.session import get_db
from assetdex.helpers.db_utils import get_entity_by_name
from assetdex.models.inventory_models import Rack, Server
from assetdex.rack_space.errors import SnapshotUnavailable
from assetdex.rack_space.types import DEFAULT_TOTAL_UNITS, RackSnapshot, RackUnitInterval
from assetdex.rack_space.units import parse_unit


class RackOccupancyRepository:
    def __init__(self, db: Session, default_total_units: int = DEFAULT_TOTAL_UNITS) -> None:
        self.db = db
        self.default_total_units = default_total_units

    def get_rack(self, name: str, *, lock: bool = False) -> Rack:
        """
        Look up a rack by name (case-insensitive).

        With ``lock=True`` the rack row stays locked until the surrounding
        transaction ends, which serialises concurrent placements in that rack.
        """
        return get_entity_by_name(
            self.db,
            Rack,
            name,
            error_message=f"Rack '{name}' not found",
            lock=lock,
        )

    def total_units_for(self, rack: Rack) -> int:
        return rack.total_units or self.default_total_units

    def list_servers(self, rack: Rack) -> List[Server]:
        """All servers assigned to the rack, placed or not."""
        try:
            return self.db.query(Server).filter(Server.rack_id == rack.id).all()
        except exc.SQLAlchemyError as e:
            raise SnapshotUnavailable(rack.name, f"database error: {e}") from e

    def load_snapshot(self, rack: Rack) -> RackSnapshot:
        """
        Read the current occupancy of ``rack``.

        Servers without a unit or height are not mounted and are skipped. A
        stored unit that cannot be parsed makes the whole snapshot unusable
        rather than silently dropping a device.

        Raises:
            SnapshotUnavailable: On a database error or corrupt placement data.
        """
        try:
            rows = (
                self.db.query(Server.id, Server.hostname, Server.unit, Server.unit_height)
                .filter(Server.rack_id == rack.id)
                .filter(Server.unit.isnot(None))
                .filter(Server.unit_height.isnot(None))
                .all()
            )
        except exc.SQLAlchemyError as e:
            app_logger.error(
                "Rack occupancy read failed",
                extra={"rack": rack.name, "error": str(e)},
            )
            raise SnapshotUnavailable(rack.name, f"database error: {e}") from e

        intervals = []
        for server_id, hostname, unit, unit_height in rows:
            try:
                intervals.append(
                    RackUnitInterval(
                        device_id=str(server_id),
                        label=hostname,
                        start_unit=parse_unit(unit),
                        height=unit_height,
                    )
                )
            except ValueError as e:  # InvalidUnitFormat is a ValueError
                app_logger.error(
                    "Corrupt server placement in rack",
                    extra={"rack": rack.name, "server_id": str(server_id), "unit": unit, "error": str(e)},
                )
                raise SnapshotUnavailable(
                    rack.name,
                    f"server '{hostname}' has an invalid placement ({unit}, {unit_height}U)",
                ) from e

        intervals.sort(key=lambda interval: interval.start_unit)
        return RackSnapshot(
            rack=rack.name,
            intervals=tuple(intervals),
            total_units=self.total_units_for(rack),
        )


def get_occupancy_repository(db: Session = Depends(get_db)) -> RackOccupancyRepository:
    """FastAPI dependency building a repository bound to the request session."""
    return RackOccupancyRepository(db, default_total_units=settings.RACK_TOTAL_UNITS)

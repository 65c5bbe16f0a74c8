from types import SimpleNamespace

import pytest
from sqlalchemy import exc

from assetdex.helpers.occupancy_repository import RackOccupancyRepository
from assetdex.rack_space.errors import SnapshotUnavailable
from assetdex.rack_space.types import FreeSpace
from assetdex.rack_space import occupancy


class FakeQuery:
    def __init__(self, rows=None, error=None) -> None:
        self.rows = rows or []
        self.error = error

    def filter(self, *args, **kwargs):
        return self

    def all(self):
        if self.error is not None:
            raise self.error
        return self.rows


class FakeSession:
    def __init__(self, rows=None, error=None) -> None:
        self.rows = rows
        self.error = error

    def query(self, *entities):
        return FakeQuery(self.rows, self.error)


RACK = SimpleNamespace(id=1, name="R-A01", total_units=None)


def test_load_snapshot_builds_sorted_intervals():
    db = FakeSession(rows=[("b", "switch-01", "U40", 3), ("a", "db-01", "1", 2)])
    repository = RackOccupancyRepository(db)

    snapshot = repository.load_snapshot(RACK)

    assert snapshot.rack == "R-A01"
    assert snapshot.total_units == 42
    assert [(i.device_id, i.start_unit, i.height) for i in snapshot.intervals] == [("a", 1, 2), ("b", 40, 3)]
    assert occupancy.free_spaces(snapshot) == [FreeSpace(start_unit=39, end_unit=3)]


def test_rack_total_units_overrides_default():
    repository = RackOccupancyRepository(FakeSession(rows=[]), default_total_units=42)
    rack = SimpleNamespace(id=2, name="R-SHORT", total_units=24)

    assert repository.load_snapshot(rack).total_units == 24
    assert repository.total_units_for(RACK) == 42


@pytest.mark.parametrize("unit, height", [("top", 2), ("U0", 1), ("U5", 0)])
def test_corrupt_placement_makes_snapshot_unavailable(unit, height):
    repository = RackOccupancyRepository(FakeSession(rows=[("a", "db-01", unit, height)]))

    with pytest.raises(SnapshotUnavailable) as exc_info:
        repository.load_snapshot(RACK)

    assert exc_info.value.rack == "R-A01"
    assert "db-01" in exc_info.value.reason


def test_database_error_makes_snapshot_unavailable():
    repository = RackOccupancyRepository(FakeSession(error=exc.OperationalError("SELECT", {}, Exception("down"))))

    with pytest.raises(SnapshotUnavailable):
        repository.load_snapshot(RACK)

    with pytest.raises(SnapshotUnavailable):
        repository.list_servers(RACK)

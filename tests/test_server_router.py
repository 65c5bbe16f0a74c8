from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import HTTPException, status
from fastapi.testclient import TestClient

from assetdex.main import app
from assetdex.db.session import get_db
from assetdex.helpers.auth_helper import TokenUser, get_current_user
from assetdex.helpers.occupancy_repository import get_occupancy_repository
from assetdex.helpers.rbac_helper import AccessLevel, require_at_least_viewer, require_editor_or_admin
from assetdex.models.inventory_models import ServerPositionHistory
from assetdex.rack_space.errors import SnapshotUnavailable
from assetdex.rack_space.types import RackSnapshot, RackUnitInterval


class DummyDB:
    def __init__(self, servers=None) -> None:
        self.servers = servers or {}
        self.added = []
        self.commits = 0
        self.rollbacks = 0

    def get(self, model_class, entity_id):
        return self.servers.get(entity_id)

    def add(self, entity) -> None:
        self.added.append(entity)

    def flush(self) -> None:
        for index, entity in enumerate(self.added, start=1):
            if getattr(entity, "id", None) is None:
                entity.id = index

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeRepository:
    def __init__(self, racks, snapshots, unavailable=()) -> None:
        self.racks = racks
        self.snapshots = snapshots
        self.unavailable = set(unavailable)
        self.locked = []

    def get_rack(self, name, *, lock=False):
        rack = self.racks.get(name.upper())
        if rack is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rack '{name}' not found")
        if lock:
            self.locked.append(rack.name)
        return rack

    def load_snapshot(self, rack):
        if rack.name in self.unavailable:
            raise SnapshotUnavailable(rack.name, "database error: timeout")
        return self.snapshots[rack.name]


@pytest.fixture
def racks():
    return {
        "R-A01": SimpleNamespace(id=1, name="R-A01"),
        "R-B07": SimpleNamespace(id=2, name="R-B07"),
    }


@pytest.fixture
def dummy_db(racks):
    web = SimpleNamespace(
        id="srv-web", hostname="web-01", rack_id=1, rack=racks["R-A01"], unit="U10", unit_height=2
    )
    unplaced = SimpleNamespace(id="srv-new", hostname="new-01", rack_id=None, rack=None, unit=None, unit_height=None)
    return DummyDB(servers={"srv-web": web, "srv-new": unplaced})


@pytest.fixture
def repository(racks):
    snapshots = {
        "R-A01": RackSnapshot(
            rack="R-A01",
            intervals=[
                RackUnitInterval(device_id="srv-web", label="web-01", start_unit=10, height=2),
                RackUnitInterval(device_id="srv-db", label="db-01", start_unit=20, height=4),
            ],
        ),
    }
    return FakeRepository(racks, snapshots, unavailable={"R-B07"})


@pytest.fixture
def client(dummy_db, repository):
    # Disable DB prewarm during app lifespan to avoid requiring real DB_URL
    import assetdex.main as main_module

    async def _noop_prewarm(app_logger):  # type: ignore[unused-argument]
        return None

    main_module._prewarm_database = _noop_prewarm  # type: ignore[assignment]

    def _override_get_db():
        yield dummy_db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_occupancy_repository] = lambda: repository
    app.dependency_overrides[get_current_user] = lambda: TokenUser(id="7", username="jdoe", roles=["EDITOR"])
    app.dependency_overrides[require_editor_or_admin] = lambda: AccessLevel.editor
    app.dependency_overrides[require_at_least_viewer] = lambda: AccessLevel.editor

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def test_move_server_records_history(client, dummy_db, repository):
    response = client.post(
        "/api/dcim/servers/srv-web/move",
        json={"rack": "R-A01", "position": "U30", "notes": "Rebalance row A"},
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["data"]["rack"] == "R-A01"
    assert body["data"]["unit"] == "U30"
    assert body["data"]["unit_height"] == 2
    assert body["data"]["previous_rack"] == "R-A01"
    assert body["history_id"] == 1

    server = dummy_db.servers["srv-web"]
    assert server.unit == "U30"
    assert dummy_db.commits == 1
    assert repository.locked == ["R-A01"]

    (entry,) = dummy_db.added
    assert isinstance(entry, ServerPositionHistory)
    assert entry.previous_unit == "U10"
    assert entry.new_unit == "U30"
    assert entry.changed_by == "jdoe"
    assert entry.notes == "Rebalance row A"


def test_move_server_within_its_own_units(client, dummy_db):
    # 11-12 overlaps only the server's current 10-11.
    response = client.post("/api/dcim/servers/srv-web/move", json={"rack": "R-A01", "position": 11})

    assert response.status_code == status.HTTP_200_OK
    assert dummy_db.servers["srv-web"].unit == "U11"


def test_move_server_conflict_is_409(client, dummy_db):
    response = client.post(
        "/api/dcim/servers/srv-web/move",
        json={"rack": "R-A01", "position": 21, "unitHeight": 2},
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    detail = response.json()["detail"]
    assert [s["hostname"] for s in detail["conflictingServers"]] == ["db-01"]
    assert detail["availableSpaces"][0] == {"startUnit": 42, "endUnit": 24, "size": 19}
    assert detail["suggestion"]["position"] == 41
    assert dummy_db.commits == 0
    assert dummy_db.rollbacks == 1
    assert dummy_db.servers["srv-web"].unit == "U10"


def test_move_server_out_of_range_is_400(client, dummy_db):
    response = client.post("/api/dcim/servers/srv-web/move", json={"rack": "R-A01", "position": 42})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "exceeds rack height" in response.json()["detail"]
    assert dummy_db.commits == 0


def test_move_server_without_height_is_400(client):
    response = client.post("/api/dcim/servers/srv-new/move", json={"rack": "R-A01", "position": 30})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "unitHeight" in response.json()["detail"]


def test_move_unplaced_server_with_height(client, dummy_db):
    response = client.post(
        "/api/dcim/servers/srv-new/move",
        json={"rack": "r-a01", "position": 1, "unitHeight": 1},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["previous_rack"] is None
    assert dummy_db.servers["srv-new"].rack_id == 1


def test_move_unknown_server_is_404(client):
    response = client.post("/api/dcim/servers/missing/move", json={"rack": "R-A01", "position": 30})

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_move_to_unknown_rack_is_404(client):
    response = client.post("/api/dcim/servers/srv-web/move", json={"rack": "NOPE", "position": 30})

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_move_when_rack_unreadable_is_503(client, dummy_db):
    response = client.post("/api/dcim/servers/srv-web/move", json={"rack": "R-B07", "position": 30})

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert dummy_db.commits == 0


def test_position_history_lists_entries(client, monkeypatch):
    from assetdex.dcim.routers import server_router

    changed_at = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
    entries = [
        {
            "id": 2,
            "server_id": "srv-web",
            "previous_rack": "R-B07",
            "previous_unit": "U3",
            "previous_unit_height": 2,
            "new_rack": "R-A01",
            "new_unit": "U10",
            "new_unit_height": 2,
            "changed_by": "jdoe",
            "notes": None,
            "changed_at": changed_at,
        }
    ]
    monkeypatch.setattr(server_router, "list_position_history", lambda db, server_id: entries)

    response = client.get("/api/dcim/servers/srv-web/position-history")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["server_id"] == "srv-web"
    assert body["total"] == 1
    assert body["results"][0]["new_unit"] == "U10"
    assert body["results"][0]["previous_rack"] == "R-B07"


def test_position_history_unknown_server_is_404(client):
    response = client.get("/api/dcim/servers/missing/position-history")

    assert response.status_code == status.HTTP_404_NOT_FOUND

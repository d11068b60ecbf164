"""
Tests for the HTTP front end: game lifecycle, action endpoints, rejected
actions and saves.
"""

import pytest
from fastapi.testclient import TestClient

from packages.swordcore.config import GameConfig
from packages.swordcore.content.library import ContentLibrary
from packages.swordcore.persistence import MemoryStorage

from web.server import create_app


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(storage):
    app = create_app(ContentLibrary.default(), GameConfig(), storage)
    return TestClient(app)


@pytest.fixture
def started(client):
    response = client.post("/api/new", params={"seed": 42})
    assert response.status_code == 200
    return client


class TestLifecycle:

    def test_no_game_yet(self, client):
        body = client.get("/api/state").json()
        assert body == {"active": False, "has_save": False}

    def test_actions_need_a_game(self, client):
        assert client.post("/api/card/0").status_code == 404
        assert client.post("/api/end-turn").status_code == 404

    def test_new_game_starts_combat(self, started):
        body = started.get("/api/state").json()
        assert body["active"]
        assert body["game"]["phase"] == "combat"
        assert len(body["player"]["hand"]) == 5
        assert body["game"]["enemies"]


class TestActions:

    def test_end_turn(self, started):
        response = started.post("/api/end-turn")
        body = response.json()
        assert response.status_code == 200
        assert body["result"]["accepted"]
        assert body["state"]["game"]["turn"] == 2

    def test_bad_card_index_is_conflict(self, started):
        response = started.post("/api/card/99")
        assert response.status_code == 409
        assert response.json()["result"]["reason"] == "INVALID_INDEX"

    def test_wait_then_no_waits_left(self, started):
        assert started.post("/api/wait").status_code == 200
        response = started.post("/api/wait")
        assert response.status_code == 409
        assert response.json()["result"]["reason"] == "NO_WAITS_LEFT"

    def test_cancel_routes_are_not_shadowed(self, started):
        response = started.post("/api/target/cancel")
        assert response.json()["result"]["reason"] == "NOT_TARGETING"
        response = started.post("/api/selection/cancel")
        assert response.json()["result"]["reason"] == "NO_SELECTION"

    def test_exchange_toggle(self, started):
        body = started.post("/api/exchange").json()
        assert body["result"]["data"]["active"]
        assert body["state"]["runtime"]["is_exchange_mode"]

    def test_next_wave_needs_victory(self, started):
        assert started.post("/api/next-wave").status_code == 409


class TestSaves:

    def test_save_and_load(self, started, storage):
        turn_before = started.get("/api/state").json()["game"]["turn"]
        assert started.post("/api/save").json() == {"saved": True}
        assert storage.data

        started.post("/api/new", params={"seed": 7})
        body = started.post("/api/load").json()
        assert body["active"]
        assert body["game"]["turn"] == turn_before

    def test_load_without_save(self, client):
        assert client.post("/api/load").status_code == 404

    def test_delete_save(self, started, storage):
        started.post("/api/save")
        started.delete("/api/save")
        assert not storage.data
        assert started.post("/api/load").status_code == 404

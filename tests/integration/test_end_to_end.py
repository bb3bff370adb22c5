"""End-to-end tests for the Grove server.

Drives the unified FastAPI application the way a viewer would: load
several clouds, toggle visibility check boxes, make a multi-selection,
order it, and delete it in one batch.

Test classes:
    TestUnifiedServer: application wiring and health
    TestViewerSession: insert -> check -> select -> sort -> batch remove
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import grove_server
from grove.src.server import init_grove_tree

PREFIX = "/api/grove"


@pytest.fixture
def client() -> TestClient:
    """Client for the unified app with a fresh tree."""
    init_grove_tree()
    return TestClient(grove_server.app)


def _load(client: TestClient, row: int, group: str, leaf: str, select: bool = False) -> dict:
    resp = client.post(
        f"{PREFIX}/items",
        json={"row": row, "group_label": group, "leaf_label": leaf, "select": select},
    )
    assert resp.status_code == 201
    return resp.json()


class TestUnifiedServer:
    """Tests for application wiring."""

    def test_unified_health(self, client: TestClient) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["grove"]["loaded"] is True
        assert data["grove"]["error"] is None

    def test_router_mounted(self, client: TestClient) -> None:
        assert client.get(f"{PREFIX}/health").json()["service"] == "grove"


class TestViewerSession:
    """A full presentation-layer session."""

    def test_session(self, client: TestClient) -> None:
        _load(client, -1, "site_north.ply", "tile_0")
        _load(client, 0, "site_north.ply", "tile_1")
        _load(client, 0, "site_north.ply", "tile_2")
        last = _load(client, -1, "site_south.las", "tile_3", select=True)
        assert last["coordinate"] == {"row": 1, "col": 0}
        assert last["tree"]["groups"][1]["selected"] is True

        # Hide one tile, then the whole north group, then show it again.
        resp = client.put(f"{PREFIX}/items/0/1/checked", json={"checked": False})
        assert resp.json()["group_check_state"] == "partially_checked"
        client.post(f"{PREFIX}/clicks", json={"node": {"kind": "group", "row": 0}})
        checked = client.get(f"{PREFIX}/coordinates/checked").json()["coordinates"]
        assert checked == [
            {"row": 0, "col": 0},
            {"row": 0, "col": 1},
            {"row": 0, "col": 2},
            {"row": 1, "col": 0},
        ]

        # Marquee selection over tile_1 and tile_2, extended with the south group.
        client.post(
            f"{PREFIX}/selection",
            json={
                "nodes": [
                    {"kind": "leaf", "row": 0, "col": 1},
                    {"kind": "leaf", "row": 0, "col": 2},
                ]
            },
        )
        selected = client.post(
            f"{PREFIX}/selection",
            json={"nodes": [{"kind": "group", "row": 1}], "mode": "extend"},
        ).json()["selected"]
        assert selected == [
            {"row": 0, "col": 1},
            {"row": 0, "col": 2},
            {"row": 1, "col": 0},
        ]

        # Order the request and delete it from the highest coordinate down.
        ordered = client.post(
            f"{PREFIX}/coordinates/sort",
            json={"policy": "descending", "coordinates": selected},
        ).json()["coordinates"]
        for coord in ordered:
            resp = client.delete(f"{PREFIX}/items/{coord['row']}/{coord['col']}")
            assert resp.json()["applied"] is True

        tree = client.get(f"{PREFIX}/tree").json()
        assert tree["group_count"] == 1
        assert [leaf["label"] for leaf in tree["groups"][0]["leaves"]] == ["tile_0"]
        assert tree["current"] is None

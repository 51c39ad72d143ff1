"""Tests for indicators, system links, work locations and positions."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import ADMIN_ID, auth_header
from tests.unit.mocks.fake_supabase import FakeSupabase


class TestEconomicIndicators:
    def test_create_with_defaults(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(
            "/api/admin/economic-indicators",
            json={"title": "Selic", "value": "10,50%", "icon": "percent"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 201
        indicator = response.json()["indicator"]
        assert indicator["is_active"] is True
        assert indicator["display_order"] == 0
        assert indicator["created_by"] == ADMIN_ID

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post("/api/admin/economic-indicators", json={"title": "Selic"}, headers=auth_header("admin"))
        assert response.status_code == 400
        assert "value" in response.json()["error"]

    def test_everyone_reads_active_ordered(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed(
            "economic_indicators",
            {"title": "IPCA", "value": "4%", "icon": "i", "display_order": 2, "is_active": True},
            {"title": "Selic", "value": "10%", "icon": "i", "display_order": 1, "is_active": True},
            {"title": "Antigo", "value": "0", "icon": "i", "display_order": 0, "is_active": False},
        )
        body = client.get("/api/admin/economic-indicators?active_only=true", headers=auth_header("user")).json()
        assert [i["title"] for i in body["indicators"]] == ["Selic", "IPCA"]

    def test_user_cannot_write(self, client: TestClient) -> None:
        response = client.post(
            "/api/admin/economic-indicators",
            json={"title": "Selic", "value": "10%", "icon": "i"},
            headers=auth_header("user"),
        )
        assert response.status_code == 403


class TestCatalogCache:
    def test_writes_invalidate_cached_list(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (link,) = fake_db.seed("system_links", {"name": "Intranet", "url": "https://intranet", "display_order": 0})
        assert len(client.get("/api/admin/system-links", headers=auth_header("user")).json()["links"]) == 1

        fake_db.seed("system_links", {"name": "Direto no banco", "url": "x", "display_order": 1})
        assert len(client.get("/api/admin/system-links", headers=auth_header("user")).json()["links"]) == 1

        client.put("/api/admin/system-links", json={"id": link["id"], "name": "Portal"}, headers=auth_header("admin"))
        names = [l["name"] for l in client.get("/api/admin/system-links", headers=auth_header("user")).json()["links"]]
        assert names == ["Portal", "Direto no banco"]


class TestPositionsAndLocations:
    def test_crud_roundtrip(self, client: TestClient, fake_db: FakeSupabase) -> None:
        created = client.post("/api/admin/positions", json={"name": "Analista"}, headers=auth_header("admin")).json()
        position_id = created["position"]["id"]
        updated = client.put(
            "/api/admin/positions", json={"id": position_id, "department": "TI"}, headers=auth_header("admin")
        ).json()
        assert updated["position"]["department"] == "TI"
        assert client.delete(f"/api/admin/positions?id={position_id}", headers=auth_header("admin")).status_code == 200
        assert fake_db.rows("positions") == []

    def test_blank_name_on_update(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (location,) = fake_db.seed("work_locations", {"name": "Sede"})
        response = client.put(
            "/api/admin/work-locations", json={"id": location["id"], "name": " "}, headers=auth_header("admin")
        )
        assert response.status_code == 400

    def test_delete_unknown_is_404(self, client: TestClient) -> None:
        assert client.delete("/api/admin/work-locations?id=missing", headers=auth_header("admin")).status_code == 404

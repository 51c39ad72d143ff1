"""Tests for banner management and position bookkeeping."""

from __future__ import annotations

from fastapi.testclient import TestClient

from hub.modules.banners.service import positioning
from tests.conftest import auth_header
from tests.unit.mocks.fake_supabase import PUBLIC_URL, FakeSupabase


class TestPositioning:
    def test_sequential(self) -> None:
        stats = positioning([0, 1, 2])
        assert stats["nextAvailablePosition"] == 3
        assert stats["isSequential"] is True
        assert stats["hasGaps"] is False

    def test_gaps(self) -> None:
        stats = positioning([0, 2, 5])
        assert stats["availableGaps"] == [1, 3, 4]
        assert stats["nextAvailablePosition"] == 6
        assert stats["recommendCompaction"] is True

    def test_empty(self) -> None:
        stats = positioning([])
        assert stats["nextAvailablePosition"] == 0
        assert stats["maxPosition"] == -1
        assert stats["totalBanners"] == 0


class TestBannerRoutes:
    def test_create_appends_after_last_position(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed("banners", {"title": "A", "image_url": "a.png", "order_index": 4})
        response = client.post(
            "/api/admin/banners", json={"title": "B", "image_url": "b.png"}, headers=auth_header("admin")
        )
        assert response.status_code == 201
        assert response.json()["banner"]["order_index"] == 5

    def test_create_requires_title_and_image(self, client: TestClient) -> None:
        response = client.post("/api/admin/banners", json={"title": "B"}, headers=auth_header("admin"))
        assert response.status_code == 400

    def test_update_without_id(self, client: TestClient) -> None:
        response = client.put("/api/admin/banners", json={"title": "x"}, headers=auth_header("admin"))
        assert response.status_code == 400

    def test_replacing_image_removes_old_object(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (banner,) = fake_db.seed("banners", {"title": "A", "image_url": f"{PUBLIC_URL}/banners/old.png", "order_index": 0})
        response = client.put(
            "/api/admin/banners",
            json={"id": banner["id"], "image_url": f"{PUBLIC_URL}/banners/new.png"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 200
        assert fake_db.storage.removed == [("banners", ["old.png"])]

    def test_delete_survives_storage_failure(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (banner,) = fake_db.seed("banners", {"title": "A", "image_url": f"{PUBLIC_URL}/banners/a.png", "order_index": 0})
        fake_db.storage.fail_remove = True
        response = client.delete(f"/api/admin/banners?id={banner['id']}", headers=auth_header("admin"))
        assert response.status_code == 200
        assert fake_db.rows("banners") == []
        assert fake_db.storage.removed == [("banners", ["a.png"])]

    def test_delete_unknown_is_404(self, client: TestClient) -> None:
        assert client.delete("/api/admin/banners?id=missing", headers=auth_header("admin")).status_code == 404

    def test_compaction(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed(
            "banners",
            {"title": "A", "image_url": "a", "order_index": 0},
            {"title": "B", "image_url": "b", "order_index": 3},
            {"title": "C", "image_url": "c", "order_index": 7},
        )
        body = client.post("/api/admin/banners/positions", headers=auth_header("admin")).json()
        assert body["compaction"] == {"bannersUpdated": 2, "wasNeeded": True}
        assert sorted(b["order_index"] for b in fake_db.rows("banners")) == [0, 1, 2]

        again = client.post("/api/admin/banners/positions", headers=auth_header("admin")).json()
        assert again["compaction"]["wasNeeded"] is False

    def test_position_report(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed("banners", {"title": "A", "image_url": "a", "order_index": 1})
        body = client.get("/api/admin/banners/positions", headers=auth_header("admin")).json()
        assert body["positioning"]["availableGaps"] == [0]
        assert body["banners"][0]["position"] == 1

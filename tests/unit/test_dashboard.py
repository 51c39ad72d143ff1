"""Tests for the home page aggregate and stats."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from hub.core.parallel import fetch_all
from tests.conftest import SECTOR_ID, auth_header
from tests.unit.mocks.fake_supabase import FakeSupabase


def _iso(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


class TestFetchAll:
    def test_failure_is_isolated(self) -> None:
        def broken() -> list:
            raise RuntimeError("down")

        results, failed = fetch_all({"ok": lambda: [1], "broken": broken})
        assert results == {"ok": [1], "broken": []}
        assert failed == ["broken"]

    def test_custom_default(self) -> None:
        results, failed = fetch_all({"count": lambda: 1 / 0}, default=int)
        assert results == {"count": 0}
        assert failed == ["count"]

    def test_empty(self) -> None:
        assert fetch_all({}) == ({}, [])


class TestDashboard:
    def test_all_slices(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed("banners", {"title": "b", "is_active": True, "order_index": 0}, {"title": "off", "is_active": False})
        fake_db.seed("sector_news", {"title": "n", "sector_id": SECTOR_ID, "is_published": True})
        fake_db.seed("sector_events", {"title": "e", "sector_id": SECTOR_ID, "is_published": True, "start_date": _iso(3)})
        fake_db.seed("gallery_images", {"title": "g", "is_active": True, "order_index": 0})
        body = client.get("/api/dashboard", headers=auth_header("user")).json()
        assert [b["title"] for b in body["banners"]] == ["b"]
        assert len(body["news"]) == len(body["events"]) == len(body["gallery"]) == 1
        assert body["videos"] == []
        assert body["meta"] == {"succeeded": ["banners", "events", "gallery", "news", "videos"], "failed": []}

    def test_failed_slice_is_empty(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed("banners", {"title": "b", "is_active": True, "order_index": 0})
        fake_db.fail("gallery_images", "select")
        response = client.get("/api/dashboard", headers=auth_header("user"))
        assert response.status_code == 200
        body = response.json()
        assert body["gallery"] == []
        assert body["meta"]["failed"] == ["gallery"]
        assert len(body["banners"]) == 1

    def test_past_events_excluded(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed("sector_events", {"title": "old", "is_published": True, "start_date": _iso(-2)})
        assert client.get("/api/dashboard", headers=auth_header("user")).json()["events"] == []

    def test_requires_login(self, client: TestClient) -> None:
        assert client.get("/api/dashboard").status_code == 401


class TestStats:
    @pytest.fixture
    def seeded(self, fake_db: FakeSupabase) -> FakeSupabase:
        fake_db.seed(
            "sector_news",
            {"is_published": True, "created_at": _iso(-5)},
            {"is_published": True, "created_at": _iso(-45)},
            {"is_published": False, "created_at": _iso(-1)},
        )
        fake_db.seed("subsector_news", {"is_published": True, "created_at": _iso(-10)})
        fake_db.seed(
            "sector_events",
            {"is_published": True, "start_date": _iso(7)},
            {"is_published": True, "start_date": _iso(60)},
        )
        fake_db.seed("sector_messages", {"created_at": _iso(-2)}, {"created_at": _iso(-3)})
        return fake_db

    def test_counts(self, client: TestClient, seeded: FakeSupabase) -> None:
        body = client.get("/api/dashboard/stats", headers=auth_header("user")).json()
        assert body["news"] == 2
        assert body["events"] == 1
        assert body["messages"] == 2
        assert body["failed"] == []

    def test_failed_count_is_zero(self, client: TestClient, seeded: FakeSupabase) -> None:
        seeded.fail("subsector_news", "select")
        body = client.get("/api/dashboard/stats", headers=auth_header("user")).json()
        assert body["news"] == 1
        assert body["failed"] == ["subsector_news"]

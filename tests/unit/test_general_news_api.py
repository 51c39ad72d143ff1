"""Tests for company-wide news."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth_header
from tests.unit.mocks.fake_supabase import FakeSupabase

PATH = "/api/admin/general-news"
BODY = {
    "title": "Resultados do trimestre",
    "summary": "A cooperativa cresceu 12% no trimestre",
    "content": "Os resultados do terceiro trimestre superaram as metas previstas.",
}


class TestGeneralNews:
    def test_create_defaults(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(PATH, json=BODY, headers=auth_header("admin"))
        assert response.status_code == 201
        row = fake_db.rows("general_news")[0]
        assert row["priority"] == 0
        assert row["is_published"] is False
        assert row["created_by"] is not None

    def test_priority_out_of_range(self, client: TestClient) -> None:
        response = client.post(PATH, json={**BODY, "priority": 11}, headers=auth_header("admin"))
        assert response.status_code == 400

    def test_list_orders_by_priority_and_hides_drafts(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed(
            "general_news",
            {**BODY, "title": "baixa", "priority": 1, "is_published": True},
            {**BODY, "title": "alta", "priority": 5, "is_published": True},
            {**BODY, "title": "rascunho", "priority": 9, "is_published": False},
        )
        body = client.get(PATH, headers=auth_header("admin")).json()
        assert [n["title"] for n in body["data"]] == ["alta", "baixa"]
        body = client.get(f"{PATH}?includeUnpublished=true", headers=auth_header("admin")).json()
        assert body["count"] == 3

    def test_feature_raises_priority_up_to_ten(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("general_news", {**BODY, "priority": 10})
        response = client.patch(f"{PATH}?id={row['id']}&action=feature", headers=auth_header("admin"))
        assert response.json()["data"]["priority"] == 10
        client.patch(f"{PATH}?id={row['id']}&action=unfeature", headers=auth_header("admin"))
        assert fake_db.rows("general_news")[0]["priority"] == 0

    def test_invalid_action(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("general_news", BODY)
        response = client.patch(f"{PATH}?id={row['id']}&action=duplicate", headers=auth_header("admin"))
        assert response.status_code == 400

    def test_update_and_delete(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("general_news", BODY)
        response = client.put(PATH, json={"id": row["id"], "title": ""}, headers=auth_header("admin"))
        assert response.status_code == 400
        response = client.put(PATH, json={"id": row["id"], "priority": 3}, headers=auth_header("admin"))
        assert response.json()["data"]["priority"] == 3
        assert client.delete(f"{PATH}?id={row['id']}", headers=auth_header("admin")).status_code == 200
        assert fake_db.rows("general_news") == []

    def test_sector_admin_is_forbidden(self, client: TestClient) -> None:
        assert client.get(PATH, headers=auth_header("sector_admin")).status_code == 403

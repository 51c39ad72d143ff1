"""Tests for sector and subsector news, events, messages and documents."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import OTHER_SECTOR_ID, SECTOR_ID, SUBSECTOR_ID, auth_header
from tests.unit.mocks.fake_supabase import PUBLIC_URL, FakeSupabase

NEWS = f"/api/admin/sectors/{SECTOR_ID}/news"
NEWS_BODY = {
    "title": "Nova agência",
    "summary": "Inauguração da agência central",
    "content": "A agência central abre as portas na segunda-feira.",
}


class TestNews:
    def test_create_defaults_to_draft(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(NEWS, json=NEWS_BODY, headers=auth_header("sector_admin"))
        assert response.status_code == 201
        row = response.json()["data"]
        assert row["is_published"] is False
        assert row["sector_id"] == SECTOR_ID
        assert client.get(NEWS, headers=auth_header("admin")).json() == {"news": []}
        assert len(client.get(f"{NEWS}?showDrafts=true", headers=auth_header("admin")).json()["news"]) == 1

    def test_missing_required_field(self, client: TestClient) -> None:
        response = client.post(NEWS, json={"title": "Só título"}, headers=auth_header("admin"))
        assert response.status_code == 400

    def test_text_limits(self, client: TestClient) -> None:
        response = client.post(NEWS, json={**NEWS_BODY, "summary": "curto"}, headers=auth_header("admin"))
        assert response.status_code == 400
        assert "summary" in response.json()["error"]

    def test_publish_and_feature(self, client: TestClient, fake_db: FakeSupabase) -> None:
        first, second = fake_db.seed(
            "sector_news",
            {**NEWS_BODY, "sector_id": SECTOR_ID, "is_published": False, "is_featured": True},
            {**NEWS_BODY, "sector_id": SECTOR_ID, "is_published": False, "is_featured": False},
        )
        assert client.patch(NEWS, json={"id": second["id"], "action": "publish"}, headers=auth_header("admin")).status_code == 200
        client.patch(NEWS, json={"id": second["id"], "action": "feature"}, headers=auth_header("admin"))
        rows = {r["id"]: r for r in fake_db.rows("sector_news")}
        assert rows[second["id"]]["is_published"] is True
        assert rows[second["id"]]["is_featured"] is True
        assert rows[first["id"]]["is_featured"] is False

    def test_duplicate(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (original,) = fake_db.seed("sector_news", {**NEWS_BODY, "sector_id": SECTOR_ID, "is_published": True})
        response = client.patch(NEWS, json={"id": original["id"], "action": "duplicate"}, headers=auth_header("admin"))
        copy = response.json()["data"]
        assert copy["id"] != original["id"]
        assert copy["title"] == "Nova agência (cópia)"
        assert copy["is_published"] is False

    def test_unknown_action_is_400(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("sector_news", {**NEWS_BODY, "sector_id": SECTOR_ID})
        response = client.patch(NEWS, json={"id": row["id"], "action": "archive"}, headers=auth_header("admin"))
        assert response.status_code == 400

    def test_item_from_other_sector_is_404(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("sector_news", {**NEWS_BODY, "sector_id": "sector-2"})
        response = client.put(f"{NEWS}/{row['id']}", json={"title": "Outro título"}, headers=auth_header("admin"))
        assert response.status_code == 404

    def test_delete_cleans_image(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed(
            "sector_news", {**NEWS_BODY, "sector_id": SECTOR_ID, "image_url": f"{PUBLIC_URL}/images/news/a.png"}
        )
        assert client.delete(f"{NEWS}/{row['id']}", headers=auth_header("admin")).status_code == 200
        assert fake_db.rows("sector_news") == []
        assert fake_db.storage.removed == [("images", ["news/a.png"])]


class TestEvents:
    def test_subsector_event(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(
            f"/api/admin/subsectors/{SUBSECTOR_ID}/events",
            json={"title": "Treinamento", "description": "Treinamento de segurança", "start_date": "2026-11-02T13:00:00Z"},
            headers=auth_header("subsector_admin"),
        )
        assert response.status_code == 201
        assert fake_db.rows("subsector_events")[0]["subsector_id"] == SUBSECTOR_ID

    def test_plain_user_cannot_create(self, client: TestClient) -> None:
        response = client.post(
            f"/api/admin/sectors/{SECTOR_ID}/events",
            json={"title": "Treinamento", "description": "Treinamento de segurança", "start_date": "2026-11-02"},
            headers=auth_header("user"),
        )
        assert response.status_code == 403


MESSAGES = f"/api/admin/sectors/{SECTOR_ID}/messages"
MESSAGE_BODY = {"title": "Aviso", "content": "O expediente de sexta termina às 15h."}


class TestMessages:
    def test_create_is_published_by_default(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(MESSAGES, json=MESSAGE_BODY, headers=auth_header("sector_admin"))
        assert response.status_code == 201
        row = fake_db.rows("sector_messages")[0]
        assert row["is_published"] is True
        assert "is_featured" not in row

    def test_feature_is_not_a_message_action(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("sector_messages", {**MESSAGE_BODY, "sector_id": SECTOR_ID})
        response = client.patch(MESSAGES, json={"id": row["id"], "action": "feature"}, headers=auth_header("admin"))
        assert response.status_code == 400

    def test_update_cannot_blank_content(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("sector_messages", {**MESSAGE_BODY, "sector_id": SECTOR_ID})
        response = client.put(f"{MESSAGES}/{row['id']}", json={"content": ""}, headers=auth_header("admin"))
        assert response.status_code == 400


class TestDocuments:
    def test_requires_file_url(self, client: TestClient) -> None:
        response = client.post(
            f"/api/admin/subsectors/{SUBSECTOR_ID}/documents",
            json={"title": "Manual"},
            headers=auth_header("subsector_admin"),
        )
        assert response.status_code == 400

    def test_delete_removes_stored_file(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (row,) = fake_db.seed("sector_documents", {
            "sector_id": SECTOR_ID,
            "title": "Manual",
            "file_url": f"{PUBLIC_URL}/documents/sector-documents/{SECTOR_ID}/manual.pdf",
        })
        response = client.delete(f"/api/admin/sectors/{SECTOR_ID}/documents/{row['id']}", headers=auth_header("admin"))
        assert response.status_code == 200
        assert fake_db.storage.removed == [("documents", [f"sector-documents/{SECTOR_ID}/manual.pdf"])]


class TestContentOverview:
    def _seed(self, fake_db: FakeSupabase) -> None:
        fake_db.seed(
            "sector_messages",
            {**MESSAGE_BODY, "sector_id": SECTOR_ID, "is_published": True, "created_at": "2026-10-01T00:00:00Z"},
            {**MESSAGE_BODY, "title": "Rascunho", "sector_id": OTHER_SECTOR_ID, "is_published": False,
             "created_at": "2026-10-03T00:00:00Z"},
        )
        fake_db.seed(
            "subsector_messages",
            {**MESSAGE_BODY, "subsector_id": SUBSECTOR_ID, "is_published": True, "created_at": "2026-10-02T00:00:00Z"},
        )

    def test_lists_both_scopes_newest_first(self, client: TestClient, fake_db: FakeSupabase) -> None:
        self._seed(fake_db)
        body = client.get("/api/admin/messages", headers=auth_header("admin")).json()["data"]
        assert [m["type"] for m in body["messages"]] == ["sector", "subsector", "sector"]
        assert body["messages"][1]["location_name"] == "Infraestrutura"
        assert body["stats"] == {"total": 3, "published": 2, "drafts": 1, "byType": {"sector": 2, "subsector": 1}}
        assert body["pagination"]["totalPages"] == 1

    def test_sector_filter_reaches_its_subsectors(self, client: TestClient, fake_db: FakeSupabase) -> None:
        self._seed(fake_db)
        body = client.get(
            f"/api/admin/messages?sector_id={SECTOR_ID}&status=published", headers=auth_header("admin")
        ).json()["data"]
        assert {m["location_id"] for m in body["messages"]} == {SECTOR_ID, SUBSECTOR_ID}

    def test_paging(self, client: TestClient, fake_db: FakeSupabase) -> None:
        self._seed(fake_db)
        body = client.get("/api/admin/messages?limit=2&page=2", headers=auth_header("admin")).json()["data"]
        assert len(body["messages"]) == 1
        assert body["pagination"]["hasPrevPage"] is True
        assert body["pagination"]["hasNextPage"] is False

    def test_create_needs_the_scope_id(self, client: TestClient) -> None:
        response = client.post(
            "/api/admin/documents",
            json={"type": "sector", "title": "Manual", "file_url": "https://x/manual.pdf"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 400

    def test_create_update_and_delete_through_overview(self, client: TestClient, fake_db: FakeSupabase) -> None:
        created = client.post(
            "/api/admin/documents",
            json={"type": "subsector", "subsector_id": SUBSECTOR_ID, "title": "Manual", "file_url": "https://x/m.pdf"},
            headers=auth_header("admin"),
        )
        assert created.status_code == 201
        doc_id = created.json()["data"]["id"]
        assert fake_db.rows("subsector_documents")[0]["subsector_id"] == SUBSECTOR_ID

        updated = client.put(
            "/api/admin/documents",
            json={"id": doc_id, "type": "subsector", "title": "Manual 2026"},
            headers=auth_header("admin"),
        )
        assert updated.json()["data"]["title"] == "Manual 2026"

        published = client.patch(
            f"/api/admin/documents?id={doc_id}&type=subsector&action=publish", headers=auth_header("admin")
        )
        assert published.json()["data"]["is_published"] is True

        assert client.delete(f"/api/admin/documents?id={doc_id}&type=subsector", headers=auth_header("admin")).status_code == 200
        assert fake_db.rows("subsector_documents") == []

    def test_unknown_row_is_404(self, client: TestClient) -> None:
        response = client.delete("/api/admin/events?id=missing&type=sector", headers=auth_header("admin"))
        assert response.status_code == 404

    def test_sector_admin_is_forbidden(self, client: TestClient) -> None:
        assert client.get("/api/admin/events", headers=auth_header("sector_admin")).status_code == 403

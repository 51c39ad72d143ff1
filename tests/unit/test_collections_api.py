"""Tests for collections and their items."""

from __future__ import annotations

from fastapi.testclient import TestClient

from hub.modules.collections.service import MAX_ITEMS_PER_COLLECTION
from tests.conftest import auth_header
from tests.unit.mocks.fake_supabase import PUBLIC_URL, FakeSupabase


def _seed_collections(fake_db: FakeSupabase, count: int, **extra: object) -> list[dict]:
    return fake_db.seed(
        "collections",
        *[{"name": f"Coleção {i:02d}", "order_index": (i + 1) * 10, "is_active": True, **extra} for i in range(count)],
    )


class TestListCollections:
    def test_pagination(self, client: TestClient, fake_db: FakeSupabase) -> None:
        _seed_collections(fake_db, 15)
        first = client.get("/api/collections?page=1&limit=10", headers=auth_header("admin")).json()
        assert first["total"] == 15
        assert len(first["collections"]) == 10
        assert first["has_more"] is True
        second = client.get("/api/collections?page=2&limit=10", headers=auth_header("admin")).json()
        assert len(second["collections"]) == 5
        assert second["has_more"] is False

    def test_non_admin_sees_only_active(self, client: TestClient, fake_db: FakeSupabase) -> None:
        _seed_collections(fake_db, 2)
        fake_db.seed("collections", {"name": "Oculta", "order_index": 99, "is_active": False})
        assert client.get("/api/collections", headers=auth_header("user")).json()["total"] == 2
        assert client.get("/api/collections", headers=auth_header("admin")).json()["total"] == 3

    def test_inactive_collection_is_404_for_user(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (hidden,) = fake_db.seed("collections", {"name": "Oculta", "is_active": False})
        assert client.get(f"/api/collections/{hidden['id']}", headers=auth_header("user")).status_code == 404
        assert client.get(f"/api/collections/{hidden['id']}", headers=auth_header("admin")).status_code == 200

    def test_search_and_sort(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.seed(
            "collections",
            {"name": "Eventos 2025", "description": "", "order_index": 10, "is_active": True},
            {"name": "Campanhas", "description": "Fotos de eventos", "order_index": 20, "is_active": True},
            {"name": "Institucional", "description": "", "order_index": 30, "is_active": True},
        )
        body = client.get("/api/collections?search=eventos&sort_by=name", headers=auth_header("admin")).json()
        assert [c["name"] for c in body["collections"]] == ["Campanhas", "Eventos 2025"]


class TestCollectionWrites:
    def test_create_spaces_order_index(self, client: TestClient, fake_db: FakeSupabase) -> None:
        first = client.post("/api/collections", json={"name": "A"}, headers=auth_header("admin")).json()["collection"]
        second = client.post("/api/collections", json={"name": "B"}, headers=auth_header("admin")).json()["collection"]
        assert first["order_index"] == 10
        assert second["order_index"] == 20
        assert first["type"] == "mixed"

    def test_name_required(self, client: TestClient) -> None:
        response = client.post("/api/collections", json={"name": "  "}, headers=auth_header("admin"))
        assert response.status_code == 400
        assert response.json()["error"] == "Nome da coleção é obrigatório"

    def test_user_cannot_create(self, client: TestClient) -> None:
        assert client.post("/api/collections", json={"name": "A"}, headers=auth_header("user")).status_code == 403

    def test_put_is_idempotent(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        payload = {"name": "Renomeada", "color_theme": "#00A859"}
        for _ in range(2):
            response = client.put(f"/api/collections/{collection['id']}", json=payload, headers=auth_header("admin"))
            assert response.status_code == 200
        stored = fake_db.rows("collections")[0]
        assert stored["name"] == "Renomeada"
        assert stored["color_theme"] == "#00A859"

    def test_delete_removes_items_and_own_cover(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = fake_db.seed(
            "collections", {"name": "A", "cover_image_url": f"{PUBLIC_URL}/images/collections/covers/c.png"}
        )
        fake_db.seed("collection_items", {"collection_id": collection["id"], "item_id": "x", "item_type": "image"})
        assert client.delete(f"/api/collections/{collection['id']}", headers=auth_header("admin")).status_code == 200
        assert fake_db.rows("collections") == []
        assert fake_db.rows("collection_items") == []
        assert fake_db.storage.removed == [("images", ["collections/covers/c.png"])]


class TestCollectionItems:
    def test_add_list_and_duplicate(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        (image,) = fake_db.seed("gallery_images", {"title": "Foto", "image_url": "u"})
        path = f"/api/collections/{collection['id']}/items"
        response = client.post(path, json={"item_id": image["id"], "item_type": "image"}, headers=auth_header("admin"))
        assert response.status_code == 201
        assert response.json()["item"]["order_index"] == 1

        items = client.get(path, headers=auth_header("user")).json()["items"]
        assert items[0]["item_data"]["title"] == "Foto"

        again = client.post(path, json={"item_id": image["id"], "item_type": "image"}, headers=auth_header("admin"))
        assert again.status_code == 409
        assert again.json()["error"] == "Este item já está na coleção"

    def test_add_keeps_given_order_index(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        (video,) = fake_db.seed("dashboard_videos", {"title": "Vídeo", "video_url": "u"})
        response = client.post(
            f"/api/collections/{collection['id']}/items",
            json={"item_id": video["id"], "item_type": "video", "order_index": 7},
            headers=auth_header("admin"),
        )
        assert response.status_code == 201
        assert fake_db.rows("collection_items")[0]["order_index"] == 7

    def test_unknown_item_is_404(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        response = client.post(
            f"/api/collections/{collection['id']}/items",
            json={"item_id": "missing", "item_type": "video"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 404

    def test_invalid_item_type(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        response = client.post(
            f"/api/collections/{collection['id']}/items",
            json={"item_id": "x", "item_type": "audio"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 400

    def test_item_limit(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        fake_db.seed(
            "collection_items",
            *[{"collection_id": collection["id"], "item_id": f"i{n}", "item_type": "image"} for n in range(MAX_ITEMS_PER_COLLECTION)],
        )
        (image,) = fake_db.seed("gallery_images", {"title": "Foto", "image_url": "u"})
        response = client.post(
            f"/api/collections/{collection['id']}/items",
            json={"item_id": image["id"], "item_type": "image"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 400

    def test_reorder_and_remove(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = _seed_collections(fake_db, 1)
        first, second = fake_db.seed(
            "collection_items",
            {"collection_id": collection["id"], "item_id": "a", "item_type": "image", "order_index": 1},
            {"collection_id": collection["id"], "item_id": "b", "item_type": "image", "order_index": 2},
        )
        path = f"/api/collections/{collection['id']}/items"
        body = client.put(
            path,
            json={"items": [{"id": first["id"], "order_index": 2}, {"id": second["id"], "order_index": 1}]},
            headers=auth_header("admin"),
        ).json()
        assert [i["item_id"] for i in body["items"]] == ["b", "a"]

        assert client.delete(f"{path}?item_id={first['id']}", headers=auth_header("admin")).status_code == 200
        assert [i["item_id"] for i in fake_db.rows("collection_items")] == ["b"]


class TestCovers:
    def test_upload_cover(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(
            "/api/collections/upload/cover",
            files={"file": ("capa.jpg", b"\xff\xd8", "image/jpeg")},
            headers=auth_header("admin"),
        )
        assert response.status_code == 201
        assert response.json()["path"].startswith("collections/covers/cover_")

    def test_delete_cover_outside_folder_is_rejected(self, client: TestClient) -> None:
        response = client.delete("/api/collections/upload/cover?file_path=banners/a.png", headers=auth_header("admin"))
        assert response.status_code == 400

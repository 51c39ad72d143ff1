"""Tests for the global image gallery."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth_header
from tests.unit.mocks.fake_supabase import FakeSupabase

PNG = ("foto.png", b"\x89PNG\r\n", "image/png")


class TestGalleryUpload:
    def test_upload_into_collection(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (collection,) = fake_db.seed("collections", {"name": "Eventos", "is_active": True})
        response = client.post(
            "/api/admin/gallery/upload",
            files={"file": PNG},
            data={"title": " Confraternização ", "collection_id": collection["id"]},
            headers=auth_header("admin"),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["image"]["title"] == "Confraternização"
        assert body["collection_item"]["item_id"] == body["image"]["id"]
        assert body["image"]["file_path"] in fake_db.storage.buckets["images"]

    def test_insert_failure_removes_object(self, client: TestClient, fake_db: FakeSupabase) -> None:
        fake_db.fail("gallery_images", "insert")
        response = client.post("/api/admin/gallery/upload", files={"file": PNG}, headers=auth_header("admin"))
        assert response.status_code == 500
        assert fake_db.storage.buckets["images"] == {}

    def test_collection_failure_undoes_row_and_object(self, client: TestClient, fake_db: FakeSupabase) -> None:
        response = client.post(
            "/api/admin/gallery/upload",
            files={"file": PNG},
            data={"collection_id": "missing"},
            headers=auth_header("admin"),
        )
        assert response.status_code == 404
        assert fake_db.rows("gallery_images") == []
        assert fake_db.storage.buckets["images"] == {}

    def test_gif_allowed_pdf_rejected(self, client: TestClient) -> None:
        gif = client.post(
            "/api/admin/gallery/upload", files={"file": ("a.gif", b"GIF89a", "image/gif")}, headers=auth_header("admin")
        )
        assert gif.status_code == 201
        pdf = client.post(
            "/api/admin/gallery/upload", files={"file": ("a.pdf", b"%PDF", "application/pdf")}, headers=auth_header("admin")
        )
        assert pdf.status_code == 400


class TestGalleryDelete:
    def test_delete_drops_collection_refs(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (image,) = fake_db.seed("gallery_images", {"title": "a", "file_path": "gallery/a.png", "image_url": "u"})
        fake_db.seed(
            "collection_items",
            {"collection_id": "c1", "item_id": image["id"], "item_type": "image"},
            {"collection_id": "c1", "item_id": "video-1", "item_type": "video"},
        )
        fake_db.storage.fail_remove = True
        assert client.delete(f"/api/admin/gallery/{image['id']}", headers=auth_header("admin")).status_code == 200
        assert fake_db.rows("gallery_images") == []
        assert [i["item_id"] for i in fake_db.rows("collection_items")] == ["video-1"]
        assert fake_db.storage.removed == [("images", ["gallery/a.png"])]

    def test_only_admin(self, client: TestClient, fake_db: FakeSupabase) -> None:
        (image,) = fake_db.seed("gallery_images", {"title": "a"})
        assert client.delete(f"/api/admin/gallery/{image['id']}", headers=auth_header("sector_admin")).status_code == 403

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, UploadFile
from supabase import Client

from hub.core.crud import (
    clear_featured, fetch_by_id, first_row, next_order_index, reject_blank, require_fields, strip_immutable,
)
from hub.core.errors import NotFound, UpstreamError, ValidationFailed
from hub.core.scopes import Scope
from hub.core.storage import (
    DASHBOARD_VIDEO_TYPES, IMAGE_TYPES, VIDEO_TYPES, CompensatingActions, MediaStorage, generate_object_path,
    storage_path_from_url, validate_upload,
)
from hub.core.youtube import youtube_thumbnail
from hub.modules.collections.service import CollectionService

logger = logging.getLogger(__name__)

VIDEO_BUCKET = "videos"
IMAGE_BUCKET = "images"
MAX_VIDEO_BYTES = 100 * 1024 * 1024
MAX_IMAGE_BYTES = 10 * 1024 * 1024
UPLOAD_TYPES = ("youtube", "upload")
DASHBOARD_VIDEO_BUCKET = "images"
DASHBOARD_VIDEO_PLACEHOLDER = "/images/video-placeholder.jpg"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class _ScopedMedia:
    kind = ""
    label = ""

    def __init__(self, supabase: Client, scope: Scope):
        self.supabase = supabase
        self.scope = scope
        self.table = scope.table(self.kind)
        self.storage = MediaStorage(supabase)

    def _get(self, scope_id: str, row_id: str) -> Dict[str, Any]:
        row = fetch_by_id(self.supabase, self.table, row_id, **{self.scope.column: scope_id})
        if not row:
            raise NotFound(f"{self.label} não encontrado")
        return row

    def _list(self, scope_id: str, include_unpublished: bool) -> Dict[str, Any]:
        query = self.supabase.table(self.table).select("*").eq(self.scope.column, scope_id)
        if not include_unpublished:
            query = query.eq("is_published", True)
        rows = query.order("order_index").execute().data or []
        drafts = self.supabase.table(self.table)\
            .select("id", count="exact")\
            .eq(self.scope.column, scope_id)\
            .eq("is_published", False)\
            .execute()
        return {"rows": rows, "drafts": drafts.count or 0}

    def _insert(self, scope_id: str, data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        featured = bool(data.pop("is_featured", False))
        data[self.scope.column] = scope_id
        data["created_by"] = user_id
        data["is_featured"] = featured
        if data.get("order_index") is None:
            data["order_index"] = next_order_index(self.supabase, self.table, **{self.scope.column: scope_id})
        row = first_row(self.supabase.table(self.table).insert(data).execute())
        if featured:
            clear_featured(self.supabase, self.table, self.scope.column, scope_id, row["id"])
        return row

    def _update(self, scope_id: str, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("is_featured"):
            clear_featured(self.supabase, self.table, self.scope.column, scope_id, row_id)
        data["updated_at"] = _now()
        result = self.supabase.table(self.table)\
            .update(data)\
            .eq("id", row_id)\
            .eq(self.scope.column, scope_id)\
            .execute()
        return first_row(result)

    def _delete_row(self, row_id: str) -> None:
        self.supabase.table(self.table).delete().eq("id", row_id).execute()

    def _cleanup(self, row: Dict[str, Any]) -> None:
        """Remove the row's stored objects. Runs after the row is gone and never raises."""
        for bucket, paths in self.storage_refs(row).items():
            self.storage.remove_quietly(bucket, paths)

    def storage_refs(self, row: Dict[str, Any]) -> Dict[str, List[str]]:
        raise NotImplementedError

    def delete(self, scope_id: str, row_id: str) -> Dict[str, Any]:
        """Delete the row, then best-effort removal of its files."""
        try:
            row = self._get(scope_id, row_id)
            self._delete_row(row_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting {self.table} {row_id}: {e}")
            raise UpstreamError(f"Erro ao excluir {self.label.lower()}")
        self._cleanup(row)
        logger.info(f"Deleted {self.table} {row_id} from {self.scope.name} {scope_id}")
        return row


def _thumbnail_refs(url: Optional[str], exclude: Optional[str] = None) -> Dict[str, List[str]]:
    refs: Dict[str, List[str]] = {}
    if not url or url == exclude:
        return refs
    for bucket in (IMAGE_BUCKET, VIDEO_BUCKET):
        path = storage_path_from_url(url, bucket)
        if path:
            refs.setdefault(bucket, []).append(path)
    return refs


class VideoService(_ScopedMedia):
    kind = "videos"
    label = "Vídeo"

    def list_videos(self, scope_id: str, include_unpublished: bool = False) -> Dict[str, Any]:
        try:
            listing = self._list(scope_id, include_unpublished)
        except Exception as e:
            logger.error(f"Error listing {self.table} for {scope_id}: {e}")
            raise UpstreamError("Erro ao buscar vídeos")
        return {"videos": listing["rows"], "draftVideosCount": listing["drafts"]}

    def create_video(self, scope_id: str, payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        require_fields(payload, ("title", "video_url"), "Título e URL do vídeo são obrigatórios")
        data = strip_immutable(payload)
        data["upload_type"] = data.get("upload_type") or "youtube"
        if data["upload_type"] not in UPLOAD_TYPES:
            raise ValidationFailed("Tipo de upload inválido")
        if data["upload_type"] == "youtube" and not data.get("thumbnail_url"):
            data["thumbnail_url"] = youtube_thumbnail(data["video_url"])
        try:
            return self._insert(scope_id, data, user_id)
        except Exception as e:
            logger.error(f"Error creating {self.table}: {e}")
            raise UpstreamError("Erro ao criar vídeo")

    def update_video(self, scope_id: str, video_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        reject_blank(data, ("title", "video_url"))
        if "upload_type" in data and data["upload_type"] not in UPLOAD_TYPES:
            raise ValidationFailed("Tipo de upload inválido")
        try:
            current = self._get(scope_id, video_id)
            upload_type = data.get("upload_type") or current.get("upload_type") or "youtube"
            if upload_type == "youtube" and data.get("video_url") and not data.get("thumbnail_url"):
                derived = youtube_thumbnail(data["video_url"])
                if derived:
                    data["thumbnail_url"] = derived
            updated = self._update(scope_id, video_id, data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating {self.table} {video_id}: {e}")
            raise UpstreamError("Erro ao atualizar vídeo")
        return updated or {**current, **data}

    def storage_refs(self, row: Dict[str, Any]) -> Dict[str, List[str]]:
        refs: Dict[str, List[str]] = {}
        video_path = row.get("file_path") or storage_path_from_url(row.get("video_url"), VIDEO_BUCKET)
        if video_path:
            refs[VIDEO_BUCKET] = [video_path]
        for bucket, paths in _thumbnail_refs(row.get("thumbnail_url")).items():
            refs.setdefault(bucket, []).extend(paths)
        return refs

    async def upload_video(
        self,
        scope_id: str,
        file: UploadFile,
        title: str,
        description: Optional[str],
        thumbnail: Optional[UploadFile],
        user_id: str,
    ) -> Dict[str, Any]:
        """Store the video (and optional thumbnail) then insert its row, undoing uploads if the insert fails."""
        content = await file.read()
        validate_upload(content, file.content_type, VIDEO_TYPES, MAX_VIDEO_BYTES)
        thumb_content = await thumbnail.read() if thumbnail else b""
        if thumb_content:
            validate_upload(thumb_content, thumbnail.content_type, IMAGE_TYPES, MAX_IMAGE_BYTES)

        folder = f"uploads/{self.scope.name}s/{scope_id}"
        with CompensatingActions(f"{self.table} upload") as saga:
            try:
                video_path = generate_object_path(folder, "video", file.content_type)
                video_url = self.storage.upload(VIDEO_BUCKET, video_path, content, file.content_type)
                saga.add(f"object {video_path}", self.storage.remove, VIDEO_BUCKET, [video_path])

                thumbnail_url = None
                if thumb_content:
                    thumb_path = generate_object_path(f"thumbnails/{self.scope.name}s/{scope_id}", "thumb", thumbnail.content_type)
                    thumbnail_url = self.storage.upload(IMAGE_BUCKET, thumb_path, thumb_content, thumbnail.content_type)
                    saga.add(f"object {thumb_path}", self.storage.remove, IMAGE_BUCKET, [thumb_path])

                return self._insert(scope_id, {
                    "title": title,
                    "description": description,
                    "video_url": video_url,
                    "thumbnail_url": thumbnail_url,
                    "upload_type": "upload",
                    "file_path": video_path,
                    "file_size": len(content),
                    "mime_type": file.content_type,
                    "is_published": True,
                }, user_id)
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Video upload failed for {self.scope.name} {scope_id}: {e}")
                raise UpstreamError("Erro ao fazer upload do vídeo")


class ImageService(_ScopedMedia):
    kind = "images"
    label = "Imagem"

    def list_images(self, scope_id: str, include_unpublished: bool = False) -> Dict[str, Any]:
        try:
            listing = self._list(scope_id, include_unpublished)
        except Exception as e:
            logger.error(f"Error listing {self.table} for {scope_id}: {e}")
            raise UpstreamError("Erro ao buscar imagens")
        return {"images": listing["rows"], "draftImagesCount": listing["drafts"]}

    def create_image(self, scope_id: str, payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        require_fields(payload, ("image_url",), "URL da imagem é obrigatória")
        data = strip_immutable(payload)
        try:
            return self._insert(scope_id, data, user_id)
        except Exception as e:
            logger.error(f"Error creating {self.table}: {e}")
            raise UpstreamError("Erro ao criar imagem")

    def update_image(self, scope_id: str, image_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        reject_blank(data, ("image_url",))
        try:
            current = self._get(scope_id, image_id)
            updated = self._update(scope_id, image_id, data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating {self.table} {image_id}: {e}")
            raise UpstreamError("Erro ao atualizar imagem")
        return updated or {**current, **data}

    def storage_refs(self, row: Dict[str, Any]) -> Dict[str, List[str]]:
        refs: Dict[str, List[str]] = {}
        image_path = row.get("file_path") or storage_path_from_url(row.get("image_url"), IMAGE_BUCKET)
        if image_path:
            refs[IMAGE_BUCKET] = [image_path]
        for bucket, paths in _thumbnail_refs(row.get("thumbnail_url"), exclude=row.get("image_url")).items():
            refs.setdefault(bucket, []).extend(paths)
        return refs

    async def upload_image(
        self,
        scope_id: str,
        file: UploadFile,
        title: Optional[str],
        description: Optional[str],
        user_id: str,
    ) -> Dict[str, Any]:
        content = await file.read()
        validate_upload(content, file.content_type, IMAGE_TYPES, MAX_IMAGE_BYTES)
        path = generate_object_path(f"{self.scope.name}s/{scope_id}", "image", file.content_type)
        with CompensatingActions(f"{self.table} upload") as saga:
            try:
                image_url = self.storage.upload(IMAGE_BUCKET, path, content, file.content_type)
                saga.add(f"object {path}", self.storage.remove, IMAGE_BUCKET, [path])
                return self._insert(scope_id, {
                    "title": title or (file.filename or "").rsplit(".", 1)[0] or None,
                    "description": description,
                    "image_url": image_url,
                    "file_path": path,
                    "is_published": True,
                }, user_id)
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Image upload failed for {self.scope.name} {scope_id}: {e}")
                raise UpstreamError("Erro ao fazer upload da imagem")


class DashboardVideoService:
    """Direct uploads for the home page video list (dashboard_videos)."""

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)

    def _delete_row(self, video_id: str) -> None:
        self.supabase.table("dashboard_videos").delete().eq("id", video_id).execute()

    def _add_to_collection(self, collection_id: str, video_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """File the video in a collection. A missing or image-only collection leaves the upload as is."""
        collection = fetch_by_id(self.supabase, "collections", collection_id, "id, type")
        if not collection:
            logger.warning(f"Collection {collection_id} not found, video {video_id} not added")
            return None
        if collection.get("type") == "images":
            logger.warning(f"Collection {collection_id} only holds images, video {video_id} not added")
            return None
        try:
            return CollectionService(self.supabase).add_item(collection_id, video_id, "video", user_id)
        except HTTPException as e:
            logger.warning(f"Video {video_id} not added to collection {collection_id}: {e.detail}")
            return None

    async def upload(self, file: UploadFile, user_id: str, collection_id: Optional[str] = None) -> Dict[str, Any]:
        content = await file.read()
        validate_upload(content, file.content_type, DASHBOARD_VIDEO_TYPES, MAX_VIDEO_BYTES)
        path = generate_object_path("videos", "video", file.content_type)
        filename = file.filename or ""

        with CompensatingActions("dashboard video upload") as saga:
            try:
                url = self.storage.upload(DASHBOARD_VIDEO_BUCKET, path, content, file.content_type)
            except Exception as e:
                logger.error(f"Dashboard video upload failed for {path}: {e}")
                raise UpstreamError("Erro ao fazer upload do arquivo")
            saga.add(f"object {path}", self.storage.remove, DASHBOARD_VIDEO_BUCKET, [path])

            try:
                video = first_row(self.supabase.table("dashboard_videos").insert({
                    "title": filename.rsplit(".", 1)[0] or "Vídeo",
                    "video_url": url,
                    "thumbnail_url": DASHBOARD_VIDEO_PLACEHOLDER,
                    "is_active": True,
                    "order_index": next_order_index(self.supabase, "dashboard_videos", empty=1),
                    "upload_type": "direct",
                    "file_path": path,
                    "file_size": len(content),
                    "mime_type": file.content_type,
                    "processing_status": "ready",
                    "original_filename": filename,
                    "upload_progress": 100,
                }).execute())
            except Exception as e:
                logger.error(f"Dashboard video insert failed for {path}: {e}")
                raise UpstreamError("Erro ao salvar vídeo no dashboard")

        logger.info(f"Dashboard video {video['id']} uploaded to {path}")
        item = self._add_to_collection(collection_id, video["id"], user_id) if collection_id else None
        return {
            **video,
            "file_type": file.content_type,
            "original_name": filename,
            "collection_id": collection_id if item else None,
        }

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, UploadFile
from supabase import Client

from hub.core.crud import fetch_by_id, first_row, next_order_index, strip_immutable
from hub.core.errors import NotFound, UpstreamError
from hub.core.storage import (
    GALLERY_IMAGE_TYPES, CompensatingActions, MediaStorage, generate_object_path,
    storage_path_from_url, validate_upload,
)
from hub.modules.collections.service import CollectionService

logger = logging.getLogger(__name__)

BUCKET = "images"
FOLDER = "gallery"
MAX_IMAGE_BYTES = 10 * 1024 * 1024


class GalleryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)

    def _get(self, image_id: str) -> Dict[str, Any]:
        image = fetch_by_id(self.supabase, "gallery_images", image_id)
        if not image:
            raise NotFound("Imagem não encontrada")
        return image

    def list_images(self, active_only: bool = False) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table("gallery_images").select("*")
            if active_only:
                query = query.eq("is_active", True)
            return query.order("order_index").execute().data or []
        except Exception as e:
            logger.error(f"Error listing gallery images: {e}")
            raise UpstreamError("Erro ao buscar imagens")

    def _delete_row(self, image_id: str) -> None:
        self.supabase.table("gallery_images").delete().eq("id", image_id).execute()

    async def upload_image(
        self,
        file: UploadFile,
        title: Optional[str],
        user_id: str,
        collection_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload, insert the gallery row and optionally file it in a collection.

        Each step registers its undo; a failure in a later step removes what
        the earlier steps created.
        """
        content = await file.read()
        validate_upload(content, file.content_type, GALLERY_IMAGE_TYPES, MAX_IMAGE_BYTES)
        path = generate_object_path(FOLDER, "gallery", file.content_type)
        default_title = (file.filename or "").rsplit(".", 1)[0] or "Imagem"

        with CompensatingActions("gallery upload") as saga:
            try:
                url = self.storage.upload(BUCKET, path, content, file.content_type)
            except Exception as e:
                logger.error(f"Gallery upload failed for {path}: {e}")
                raise UpstreamError("Erro ao fazer upload da imagem")
            saga.add(f"object {path}", self.storage.remove, BUCKET, [path])

            try:
                image = first_row(self.supabase.table("gallery_images").insert({
                    "title": (title or default_title).strip(),
                    "image_url": url,
                    "file_path": path,
                    "is_active": True,
                    "order_index": next_order_index(self.supabase, "gallery_images"),
                    "created_by": user_id,
                }).execute())
            except Exception as e:
                logger.error(f"Gallery insert failed for {path}: {e}")
                raise UpstreamError("Erro ao salvar imagem no banco de dados")
            saga.add(f"gallery image {image['id']}", self._delete_row, image["id"])

            item = None
            if collection_id:
                item = CollectionService(self.supabase).add_item(collection_id, image["id"], "image", user_id)

        logger.info(f"Gallery image {image['id']} uploaded to {path}")
        return {"success": True, "image": image, "collection_item": item}

    def update_image(self, image_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        try:
            current = self._get(image_id)
            data["updated_at"] = datetime.now(timezone.utc).isoformat()
            updated = first_row(self.supabase.table("gallery_images").update(data).eq("id", image_id).execute())
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating gallery image {image_id}: {e}")
            raise UpstreamError("Erro ao atualizar imagem")
        return updated or {**current, **data}

    def delete_image(self, image_id: str) -> None:
        """Drop collection references and the row, then best-effort removal of the file."""
        try:
            image = self._get(image_id)
            self.supabase.table("collection_items")\
                .delete()\
                .eq("item_id", image_id)\
                .eq("item_type", "image")\
                .execute()
            self._delete_row(image_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting gallery image {image_id}: {e}")
            raise UpstreamError("Erro ao excluir imagem")
        path = image.get("file_path") or storage_path_from_url(image.get("image_url"), BUCKET)
        self.storage.remove_quietly(BUCKET, [path])

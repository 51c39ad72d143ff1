import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, UploadFile
from supabase import Client

from hub.core.crud import fetch_by_id, first_row, next_order_index, strip_immutable
from hub.core.errors import Conflict, NotFound, UpstreamError, ValidationFailed
from hub.core.storage import IMAGE_TYPES, MediaStorage, generate_object_path, storage_path_from_url, validate_upload

logger = logging.getLogger(__name__)

MAX_ITEMS_PER_COLLECTION = 100
DEFAULT_ORDER_INCREMENT = 10
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50
SORT_FIELDS = ("order_index", "name", "created_at", "updated_at")
ITEM_TABLES = {"image": "gallery_images", "video": "dashboard_videos"}

COVER_BUCKET = "images"
COVER_FOLDER = "collections/covers"
MAX_COVER_BYTES = 5 * 1024 * 1024


class CollectionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get(self, collection_id: str) -> Dict[str, Any]:
        collection = fetch_by_id(self.supabase, "collections", collection_id)
        if not collection:
            raise NotFound("Coleção não encontrada")
        return collection

    def list_collections(
        self,
        search: Optional[str] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "order_index",
        sort_order: str = "asc",
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        active_only: bool = False,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        if sort_by not in SORT_FIELDS:
            sort_by = "order_index"
        try:
            query = self.supabase.table("collections").select("*", count="exact")
            if search and search.strip():
                term = search.replace(",", " ").strip()
                query = query.or_(f"name.ilike.%{term}%,description.ilike.%{term}%")
            if type:
                query = query.eq("type", type)
            if active_only or status == "active":
                query = query.eq("is_active", True)
            elif status == "inactive":
                query = query.eq("is_active", False)
            start = (page - 1) * limit
            result = query.order(sort_by, desc=sort_order == "desc")\
                .range(start, start + limit - 1)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing collections: {e}")
            raise UpstreamError("Erro ao buscar coleções")
        total = result.count or 0
        return {
            "collections": result.data or [],
            "total": total,
            "page": page,
            "limit": limit,
            "has_more": total > page * limit,
        }

    def get_collection(self, collection_id: str, active_only: bool = False) -> Dict[str, Any]:
        try:
            collection = self._get(collection_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching collection {collection_id}: {e}")
            raise UpstreamError("Erro ao buscar coleção")
        if active_only and not collection.get("is_active"):
            raise NotFound("Coleção não encontrada")
        return collection

    def create_collection(self, payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        if not payload.get("name") or not payload["name"].strip():
            raise ValidationFailed("Nome da coleção é obrigatório")
        data = strip_immutable(payload)
        data["name"] = data["name"].strip()
        data.setdefault("type", "mixed")
        data.setdefault("is_active", True)
        data["created_by"] = user_id
        try:
            if not data.get("order_index"):
                data["order_index"] = next_order_index(
                    self.supabase, "collections", step=DEFAULT_ORDER_INCREMENT, empty=DEFAULT_ORDER_INCREMENT
                )
            return first_row(self.supabase.table("collections").insert(data).execute())
        except Exception as e:
            logger.error(f"Error creating collection: {e}")
            raise UpstreamError("Erro ao criar coleção")

    def update_collection(self, collection_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        if "name" in data:
            if not data["name"] or not data["name"].strip():
                raise ValidationFailed("Nome da coleção não pode estar vazio")
            data["name"] = data["name"].strip()
        try:
            current = self._get(collection_id)
            data["updated_at"] = datetime.now(timezone.utc).isoformat()
            updated = first_row(self.supabase.table("collections").update(data).eq("id", collection_id).execute())
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating collection {collection_id}: {e}")
            raise UpstreamError("Erro ao atualizar coleção")
        return updated or {**current, **data}

    def delete_collection(self, collection_id: str) -> None:
        try:
            collection = self._get(collection_id)
            self.supabase.table("collection_items").delete().eq("collection_id", collection_id).execute()
            self.supabase.table("collections").delete().eq("id", collection_id).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting collection {collection_id}: {e}")
            raise UpstreamError("Erro ao excluir coleção")
        cover = storage_path_from_url(collection.get("cover_image_url"), COVER_BUCKET)
        if cover and cover.startswith(COVER_FOLDER + "/"):
            MediaStorage(self.supabase).remove_quietly(COVER_BUCKET, [cover])

    # Items

    def list_items(self, collection_id: str) -> List[Dict[str, Any]]:
        """Items in order with the referenced image or video row under item_data."""
        try:
            self._get(collection_id)
            items = self.supabase.table("collection_items")\
                .select("*")\
                .eq("collection_id", collection_id)\
                .order("order_index")\
                .execute().data or []
            for item_type, table in ITEM_TABLES.items():
                ids = [i["item_id"] for i in items if i["item_type"] == item_type]
                if not ids:
                    continue
                rows = self.supabase.table(table).select("*").in_("id", ids).execute().data or []
                by_id = {r["id"]: r for r in rows}
                for item in items:
                    if item["item_type"] == item_type:
                        item["item_data"] = by_id.get(item["item_id"])
            return items
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing items of collection {collection_id}: {e}")
            raise UpstreamError("Erro ao buscar itens da coleção")

    def add_item(
        self,
        collection_id: str,
        item_id: Optional[str],
        item_type: Optional[str],
        user_id: str,
        order_index: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Append an item, or place it at order_index when the caller gives one."""
        if not item_id or not item_type:
            raise ValidationFailed("item_id e item_type são obrigatórios")
        if item_type not in ITEM_TABLES:
            raise ValidationFailed("item_type deve ser 'image' ou 'video'")
        try:
            self._get(collection_id)
            if not fetch_by_id(self.supabase, ITEM_TABLES[item_type], item_id, "id"):
                raise NotFound("Item não encontrado")
            existing = self.supabase.table("collection_items")\
                .select("id", count="exact")\
                .eq("collection_id", collection_id)\
                .execute()
            if (existing.count or 0) >= MAX_ITEMS_PER_COLLECTION:
                raise ValidationFailed(f"Limite de {MAX_ITEMS_PER_COLLECTION} itens por coleção atingido")
            duplicate = first_row(
                self.supabase.table("collection_items")
                .select("id")
                .eq("collection_id", collection_id)
                .eq("item_id", item_id)
                .eq("item_type", item_type)
                .limit(1)
                .execute()
            )
            if duplicate:
                raise Conflict("Este item já está na coleção")
            row = {
                "collection_id": collection_id,
                "item_id": item_id,
                "item_type": item_type,
                "order_index": order_index if order_index is not None else next_order_index(
                    self.supabase, "collection_items", empty=1, collection_id=collection_id
                ),
                "added_by": user_id,
            }
            return first_row(self.supabase.table("collection_items").insert(row).execute())
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding {item_type} {item_id} to collection {collection_id}: {e}")
            raise UpstreamError("Erro ao adicionar item à coleção")

    def remove_item(self, collection_id: str, item_row_id: str) -> None:
        try:
            item = fetch_by_id(self.supabase, "collection_items", item_row_id, collection_id=collection_id)
            if not item:
                raise NotFound("Item não encontrado na coleção")
            self.supabase.table("collection_items").delete().eq("id", item_row_id).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error removing item {item_row_id} from collection {collection_id}: {e}")
            raise UpstreamError("Erro ao remover item da coleção")

    def reorder_items(self, collection_id: str, positions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        try:
            self._get(collection_id)
            for position in positions:
                self.supabase.table("collection_items")\
                    .update({"order_index": position["order_index"]})\
                    .eq("id", position["id"])\
                    .eq("collection_id", collection_id)\
                    .execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error reordering collection {collection_id}: {e}")
            raise UpstreamError("Erro ao reordenar itens")
        return self.list_items(collection_id)

    # Cover images

    async def upload_cover(self, file: UploadFile) -> Dict[str, Any]:
        content = await file.read()
        validate_upload(content, file.content_type, IMAGE_TYPES, MAX_COVER_BYTES)
        path = generate_object_path(COVER_FOLDER, "cover", file.content_type)
        try:
            url = MediaStorage(self.supabase).upload(COVER_BUCKET, path, content, file.content_type)
        except Exception as e:
            logger.error(f"Cover upload failed: {e}")
            raise UpstreamError("Erro ao fazer upload da capa")
        return {"success": True, "url": url, "path": path}

    def delete_cover(self, file_path: Optional[str]) -> None:
        if not file_path or not file_path.startswith(COVER_FOLDER + "/") or ".." in file_path:
            raise ValidationFailed("Caminho de arquivo inválido")
        try:
            MediaStorage(self.supabase).remove(COVER_BUCKET, [file_path])
        except Exception as e:
            logger.error(f"Cover removal failed for {file_path}: {e}")
            raise UpstreamError("Erro ao remover capa")

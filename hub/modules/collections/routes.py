from fastapi import APIRouter, Depends, File, UploadFile
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import is_admin, require_role
from hub.core.errors import ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.collections.schemas import (
    CollectionCreate, CollectionItemAdd, CollectionListResponse, CollectionUpdate, ItemReorder,
)
from hub.modules.collections.service import DEFAULT_PAGE_SIZE, CollectionService

router = APIRouter(prefix="/collections", tags=["collections"])


def get_collection_service(supabase: Client = Depends(get_supabase)) -> CollectionService:
    return CollectionService(supabase)


@router.get("", response_model=CollectionListResponse)
async def list_collections(
    search: Optional[str] = None,
    type: Optional[str] = None,
    status: Optional[str] = None,
    sort_by: str = "order_index",
    sort_order: str = "asc",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    user_data: Dict = Depends(require_role("collections", "read")),
    service: CollectionService = Depends(get_collection_service),
):
    """Paginated collections. Non-admins only see active ones."""
    return service.list_collections(
        search=search, type=type, status=status, sort_by=sort_by, sort_order=sort_order,
        page=page, limit=limit, active_only=not is_admin(user_data),
    )


@router.post("", status_code=201)
async def create_collection(
    body: CollectionCreate,
    user_data: Dict = Depends(require_role("collections", "create")),
    service: CollectionService = Depends(get_collection_service),
):
    return {"collection": service.create_collection(body.model_dump(exclude_none=True), user_data["id"])}


@router.post("/upload/cover", status_code=201)
async def upload_cover(
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_role("collections", "upload")),
    service: CollectionService = Depends(get_collection_service),
):
    return await service.upload_cover(file)


@router.delete("/upload/cover")
async def delete_cover(
    file_path: Optional[str] = None,
    user_data: Dict = Depends(require_role("collections", "upload")),
    service: CollectionService = Depends(get_collection_service),
):
    service.delete_cover(file_path)
    return {"success": True}


@router.get("/{collection_id}")
async def get_collection(
    collection_id: str,
    user_data: Dict = Depends(require_role("collections", "read")),
    service: CollectionService = Depends(get_collection_service),
):
    return {"collection": service.get_collection(collection_id, active_only=not is_admin(user_data))}


@router.put("/{collection_id}")
async def update_collection(
    collection_id: str,
    body: CollectionUpdate,
    user_data: Dict = Depends(require_role("collections", "update")),
    service: CollectionService = Depends(get_collection_service),
):
    return {"collection": service.update_collection(collection_id, body.model_dump(exclude_unset=True))}


@router.delete("/{collection_id}")
async def delete_collection(
    collection_id: str,
    user_data: Dict = Depends(require_role("collections", "delete")),
    service: CollectionService = Depends(get_collection_service),
):
    service.delete_collection(collection_id)
    return {"success": True}


@router.get("/{collection_id}/items")
async def list_items(
    collection_id: str,
    user_data: Dict = Depends(require_role("collections", "read")),
    service: CollectionService = Depends(get_collection_service),
):
    service.get_collection(collection_id, active_only=not is_admin(user_data))
    return {"items": service.list_items(collection_id)}


@router.post("/{collection_id}/items", status_code=201)
async def add_item(
    collection_id: str,
    body: CollectionItemAdd,
    user_data: Dict = Depends(require_role("collections", "manage_items")),
    service: CollectionService = Depends(get_collection_service),
):
    return {"item": service.add_item(collection_id, body.item_id, body.item_type, user_data["id"], body.order_index)}


@router.put("/{collection_id}/items")
async def reorder_items(
    collection_id: str,
    body: ItemReorder,
    user_data: Dict = Depends(require_role("collections", "manage_items")),
    service: CollectionService = Depends(get_collection_service),
):
    if not body.items:
        raise ValidationFailed("Lista de itens é obrigatória")
    return {"items": service.reorder_items(collection_id, [i.model_dump() for i in body.items])}


@router.delete("/{collection_id}/items")
async def remove_item(
    collection_id: str,
    item_id: Optional[str] = None,
    user_data: Dict = Depends(require_role("collections", "manage_items")),
    service: CollectionService = Depends(get_collection_service),
):
    if not item_id:
        raise ValidationFailed("item_id é obrigatório")
    service.remove_item(collection_id, item_id)
    return {"success": True}

from fastapi import APIRouter, Depends
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import require_role
from hub.core.errors import ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.general_news.schemas import GeneralNewsPayload
from hub.modules.general_news.service import GeneralNewsService

router = APIRouter(prefix="/admin/general-news", tags=["general news"])


def get_general_news_service(supabase: Client = Depends(get_supabase)) -> GeneralNewsService:
    return GeneralNewsService(supabase)


@router.get("")
async def list_general_news(
    includeUnpublished: bool = False,
    user_data: Dict = Depends(require_role("general_news", "read")),
    service: GeneralNewsService = Depends(get_general_news_service),
):
    rows = service.list(includeUnpublished)
    return {"data": rows, "count": len(rows), "includeUnpublished": includeUnpublished}


@router.post("", status_code=201)
async def create_general_news(
    body: GeneralNewsPayload,
    user_data: Dict = Depends(require_role("general_news", "create")),
    service: GeneralNewsService = Depends(get_general_news_service),
):
    return {"success": True, "data": service.create(body.model_dump(exclude_none=True), user_data["id"])}


@router.put("")
async def update_general_news(
    body: GeneralNewsPayload,
    user_data: Dict = Depends(require_role("general_news", "update")),
    service: GeneralNewsService = Depends(get_general_news_service),
):
    if not body.id:
        raise ValidationFailed("ID é obrigatório")
    return {"success": True, "data": service.update(body.id, body.model_dump(exclude_unset=True))}


@router.patch("")
async def general_news_action(
    id: Optional[str] = None,
    action: Optional[str] = None,
    user_data: Dict = Depends(require_role("general_news", "publish")),
    service: GeneralNewsService = Depends(get_general_news_service),
):
    """publish, unpublish, feature (priority + 1) or unfeature (priority 0)."""
    return {"success": True, "data": service.run_action(id, action)}


@router.delete("")
async def delete_general_news(
    id: Optional[str] = None,
    user_data: Dict = Depends(require_role("general_news", "delete")),
    service: GeneralNewsService = Depends(get_general_news_service),
):
    if not id:
        raise ValidationFailed("ID é obrigatório")
    service.delete(id)
    return {"success": True}

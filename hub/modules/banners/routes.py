from fastapi import APIRouter, Depends
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import require_role
from hub.core.errors import ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.banners.schemas import BannerCreate, BannerUpdate
from hub.modules.banners.service import BannerService

router = APIRouter(prefix="/admin/banners", tags=["banners"])


def get_banner_service(supabase: Client = Depends(get_supabase)) -> BannerService:
    return BannerService(supabase)


@router.get("")
async def list_banners(
    user_data: Dict = Depends(require_role("banners", "read")),
    service: BannerService = Depends(get_banner_service),
):
    return service.list_banners()


@router.post("", status_code=201)
async def create_banner(
    body: BannerCreate,
    user_data: Dict = Depends(require_role("banners", "create")),
    service: BannerService = Depends(get_banner_service),
):
    return {"banner": service.create_banner(body.model_dump(exclude_none=True), user_data["id"])}


@router.put("")
async def update_banner(
    body: BannerUpdate,
    user_data: Dict = Depends(require_role("banners", "update")),
    service: BannerService = Depends(get_banner_service),
):
    if not body.id:
        raise ValidationFailed("ID do banner é obrigatório")
    return {"banner": service.update_banner(body.id, body.model_dump(exclude_unset=True))}


@router.delete("")
async def delete_banner(
    id: Optional[str] = None,
    user_data: Dict = Depends(require_role("banners", "delete")),
    service: BannerService = Depends(get_banner_service),
):
    if not id:
        raise ValidationFailed("ID do banner é obrigatório")
    service.delete_banner(id)
    return {"success": True}


@router.get("/positions")
async def get_positions(
    user_data: Dict = Depends(require_role("banners", "read")),
    service: BannerService = Depends(get_banner_service),
):
    return service.position_report()


@router.post("/positions")
async def compact_positions(
    user_data: Dict = Depends(require_role("banners", "reorder")),
    service: BannerService = Depends(get_banner_service),
):
    return service.compact_positions()

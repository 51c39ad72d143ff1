from fastapi import APIRouter, Depends, File, Form, UploadFile
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import require_role
from hub.database.supabase_client import get_supabase
from hub.modules.gallery.schemas import GalleryImageUpdate
from hub.modules.gallery.service import GalleryService

router = APIRouter(prefix="/admin/gallery", tags=["gallery"])


def get_gallery_service(supabase: Client = Depends(get_supabase)) -> GalleryService:
    return GalleryService(supabase)


@router.get("")
async def list_gallery(
    activeOnly: bool = False,
    user_data: Dict = Depends(require_role("gallery", "read")),
    service: GalleryService = Depends(get_gallery_service),
):
    return {"images": service.list_images(activeOnly)}


@router.post("/upload", status_code=201)
async def upload_gallery_image(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    collection_id: Optional[str] = Form(None),
    user_data: Dict = Depends(require_role("gallery", "upload")),
    service: GalleryService = Depends(get_gallery_service),
):
    return await service.upload_image(file, title, user_data["id"], collection_id)


@router.put("/{image_id}")
async def update_gallery_image(
    image_id: str,
    body: GalleryImageUpdate,
    user_data: Dict = Depends(require_role("gallery", "update")),
    service: GalleryService = Depends(get_gallery_service),
):
    return {"image": service.update_image(image_id, body.model_dump(exclude_unset=True))}


@router.delete("/{image_id}")
async def delete_gallery_image(
    image_id: str,
    user_data: Dict = Depends(require_role("gallery", "delete")),
    service: GalleryService = Depends(get_gallery_service),
):
    service.delete_image(image_id)
    return {"success": True}

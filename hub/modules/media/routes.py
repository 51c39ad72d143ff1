from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import require_role
from hub.core.scopes import SECTOR, SUBSECTOR, Scope, check_scope_access
from hub.database.supabase_client import get_supabase
from hub.modules.media.schemas import ImageCreate, ImageUpdate, VideoCreate, VideoUpdate
from hub.modules.media.service import DashboardVideoService, ImageService, VideoService


def build_router(scope: Scope) -> APIRouter:
    """Video and image routes for one scope, e.g. /admin/sectors/{scope_id}/videos."""
    router = APIRouter(prefix=f"/admin/{scope.name}s/{{scope_id}}", tags=[f"{scope.name} media"])
    resource = scope.policy("media")

    def get_video_service(supabase: Client = Depends(get_supabase)) -> VideoService:
        return VideoService(supabase, scope)

    def get_image_service(supabase: Client = Depends(get_supabase)) -> ImageService:
        return ImageService(supabase, scope)

    def scoped(action: str):
        def check(
            request: Request,
            scope_id: str,
            user_data: Dict = Depends(require_role(resource, action)),
            supabase: Client = Depends(get_supabase),
        ) -> Dict:
            check_scope_access(request, scope, scope_id, user_data, supabase)
            return user_data
        return check

    @router.get("/videos")
    async def list_videos(
        scope_id: str,
        includeUnpublished: bool = False,
        user_data: Dict = Depends(scoped("read")),
        service: VideoService = Depends(get_video_service),
    ):
        return service.list_videos(scope_id, includeUnpublished)

    @router.post("/videos", status_code=201)
    async def create_video(
        scope_id: str,
        body: VideoCreate,
        user_data: Dict = Depends(scoped("create")),
        service: VideoService = Depends(get_video_service),
    ):
        return {"video": service.create_video(scope_id, body.model_dump(exclude_none=True), user_data["id"])}

    @router.post("/videos/upload", status_code=201)
    async def upload_video(
        scope_id: str,
        file: UploadFile = File(...),
        title: str = Form(...),
        description: Optional[str] = Form(None),
        thumbnail: Optional[UploadFile] = File(None),
        user_data: Dict = Depends(scoped("create")),
        service: VideoService = Depends(get_video_service),
    ):
        video = await service.upload_video(scope_id, file, title, description, thumbnail, user_data["id"])
        return {"video": video}

    @router.put("/videos/{video_id}")
    async def update_video(
        scope_id: str,
        video_id: str,
        body: VideoUpdate,
        user_data: Dict = Depends(scoped("update")),
        service: VideoService = Depends(get_video_service),
    ):
        return {"video": service.update_video(scope_id, video_id, body.model_dump(exclude_unset=True))}

    @router.delete("/videos/{video_id}")
    async def delete_video(
        scope_id: str,
        video_id: str,
        user_data: Dict = Depends(scoped("delete")),
        service: VideoService = Depends(get_video_service),
    ):
        service.delete(scope_id, video_id)
        return {"success": True, "message": "Vídeo excluído com sucesso"}

    @router.get("/images")
    async def list_images(
        scope_id: str,
        includeUnpublished: bool = False,
        user_data: Dict = Depends(scoped("read")),
        service: ImageService = Depends(get_image_service),
    ):
        return service.list_images(scope_id, includeUnpublished)

    @router.post("/images", status_code=201)
    async def create_image(
        scope_id: str,
        body: ImageCreate,
        user_data: Dict = Depends(scoped("create")),
        service: ImageService = Depends(get_image_service),
    ):
        return {"image": service.create_image(scope_id, body.model_dump(exclude_none=True), user_data["id"])}

    @router.post("/images/upload", status_code=201)
    async def upload_image(
        scope_id: str,
        file: UploadFile = File(...),
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        user_data: Dict = Depends(scoped("create")),
        service: ImageService = Depends(get_image_service),
    ):
        return {"image": await service.upload_image(scope_id, file, title, description, user_data["id"])}

    @router.put("/images/{image_id}")
    async def update_image(
        scope_id: str,
        image_id: str,
        body: ImageUpdate,
        user_data: Dict = Depends(scoped("update")),
        service: ImageService = Depends(get_image_service),
    ):
        """Setting is_featured clears it on every other image of the scope first."""
        return {"image": service.update_image(scope_id, image_id, body.model_dump(exclude_unset=True))}

    @router.delete("/images/{image_id}")
    async def delete_image(
        scope_id: str,
        image_id: str,
        user_data: Dict = Depends(scoped("delete")),
        service: ImageService = Depends(get_image_service),
    ):
        service.delete(scope_id, image_id)
        return {"success": True, "message": "Imagem excluída com sucesso"}

    return router


sector_router = build_router(SECTOR)
subsector_router = build_router(SUBSECTOR)


dashboard_video_router = APIRouter(prefix="/admin/videos", tags=["dashboard videos"])


def get_dashboard_video_service(supabase: Client = Depends(get_supabase)) -> DashboardVideoService:
    return DashboardVideoService(supabase)


@dashboard_video_router.post("/upload", status_code=201)
async def upload_dashboard_video(
    file: UploadFile = File(...),
    collection_id: Optional[str] = Form(None),
    user_data: Dict = Depends(require_role("dashboard_videos", "upload")),
    service: DashboardVideoService = Depends(get_dashboard_video_service),
):
    return await service.upload(file, user_data["id"], collection_id)

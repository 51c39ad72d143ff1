from fastapi import APIRouter, Depends
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import require_role
from hub.core.errors import ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.notifications.schemas import NotificationCreate, NotificationGroupCreate, NotificationStatusUpdate
from hub.modules.notifications.service import DEFAULT_LIMIT, NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("")
async def list_notifications(
    filter: str = "all",
    type: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    user_data: Dict = Depends(require_role("notifications", "read")),
    service: NotificationService = Depends(get_notification_service),
):
    return service.list_for_user(user_data["id"], filter=filter, type=type, limit=limit, offset=offset)


@router.post("", status_code=201)
async def send_notification(
    body: NotificationCreate,
    user_data: Dict = Depends(require_role("notifications", "send")),
    service: NotificationService = Depends(get_notification_service),
):
    return service.send(body, user_data)


@router.put("")
async def update_notification(
    body: NotificationStatusUpdate,
    user_data: Dict = Depends(require_role("notifications", "update")),
    service: NotificationService = Depends(get_notification_service),
):
    if not body.notification_id or not body.action:
        raise ValidationFailed("ID da notificação e ação são obrigatórios")
    return service.set_read_state(user_data["id"], body.notification_id, body.action)


@router.delete("")
async def delete_notification(
    id: Optional[str] = None,
    user_data: Dict = Depends(require_role("notifications", "delete")),
    service: NotificationService = Depends(get_notification_service),
):
    if not id:
        raise ValidationFailed("ID da notificação é obrigatório")
    service.dismiss(user_data["id"], id)
    return {"success": True}


@router.get("/groups")
async def list_groups(
    user_data: Dict = Depends(require_role("notification_groups", "read")),
    service: NotificationService = Depends(get_notification_service),
):
    return {"groups": service.list_groups()}


@router.post("/groups", status_code=201)
async def create_group(
    body: NotificationGroupCreate,
    user_data: Dict = Depends(require_role("notification_groups", "create")),
    service: NotificationService = Depends(get_notification_service),
):
    return service.create_group(body, user_data["id"])

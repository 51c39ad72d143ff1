from fastapi import APIRouter, Depends, Request
from supabase import Client
from typing import Dict, Optional, Type

from pydantic import BaseModel

from hub.core.dependencies import require_role
from hub.core.errors import ValidationFailed
from hub.core.scopes import SECTOR, SUBSECTOR, Scope, check_scope_access
from hub.database.supabase_client import get_supabase
from hub.modules.content.schemas import (
    ContentAction, DocumentEntry, DocumentPayload, EventEntry, EventPayload, MessageEntry, MessagePayload,
    NewsPayload,
)
from hub.modules.content.service import ContentOverviewService, ContentService

PAYLOADS: Dict[str, Type[BaseModel]] = {
    "news": NewsPayload,
    "events": EventPayload,
    "messages": MessagePayload,
    "documents": DocumentPayload,
}
ENTRIES: Dict[str, Type[BaseModel]] = {
    "events": EventEntry,
    "messages": MessageEntry,
    "documents": DocumentEntry,
}


def build_router(scope: Scope, kind: str) -> APIRouter:
    router = APIRouter(prefix=f"/admin/{scope.name}s/{{scope_id}}/{kind}", tags=[f"{scope.name} content"])
    resource = scope.policy("content")
    payload_model = PAYLOADS[kind]

    def get_service(supabase: Client = Depends(get_supabase)) -> ContentService:
        return ContentService(supabase, scope, kind)

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

    @router.get("")
    async def list_content(
        scope_id: str,
        showDrafts: bool = False,
        user_data: Dict = Depends(scoped("read")),
        service: ContentService = Depends(get_service),
    ):
        return service.list(scope_id, showDrafts)

    @router.post("", status_code=201)
    async def create_content(
        scope_id: str,
        body: payload_model,
        user_data: Dict = Depends(scoped("create")),
        service: ContentService = Depends(get_service),
    ):
        return {"data": service.create(scope_id, body.model_dump(exclude_none=True), user_data["id"])}

    @router.put("/{item_id}")
    async def update_content(
        scope_id: str,
        item_id: str,
        body: payload_model,
        user_data: Dict = Depends(scoped("update")),
        service: ContentService = Depends(get_service),
    ):
        return {"data": service.update(scope_id, item_id, body.model_dump(exclude_unset=True))}

    @router.patch("")
    async def content_action(
        scope_id: str,
        body: ContentAction,
        user_data: Dict = Depends(scoped("publish")),
        service: ContentService = Depends(get_service),
    ):
        """publish, unpublish, feature, unfeature or duplicate one item."""
        if not body.id or not body.action:
            raise ValidationFailed("ID e ação são obrigatórios")
        return {"data": service.run_action(scope_id, body.id, body.action, user_data["id"])}

    @router.delete("/{item_id}")
    async def delete_content(
        scope_id: str,
        item_id: str,
        user_data: Dict = Depends(scoped("delete")),
        service: ContentService = Depends(get_service),
    ):
        service.delete(scope_id, item_id)
        return {"success": True}

    return router


def build_overview_router(kind: str) -> APIRouter:
    """Admin-only listing and editing of one kind across all sectors and subsectors."""
    router = APIRouter(prefix=f"/admin/{kind}", tags=["content overview"])
    entry_model = ENTRIES[kind]

    def get_service(supabase: Client = Depends(get_supabase)) -> ContentOverviewService:
        return ContentOverviewService(supabase, kind)

    @router.get("")
    async def list_overview(
        type: str = "all",
        search: Optional[str] = None,
        sector_id: Optional[str] = None,
        subsector_id: Optional[str] = None,
        status: str = "all",
        featured: str = "all",
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        order_by: str = "created_at",
        order_direction: str = "desc",
        user_data: Dict = Depends(require_role("content_overview", "read")),
        service: ContentOverviewService = Depends(get_service),
    ):
        filters = {
            "type": type, "search": search, "sector_id": sector_id, "subsector_id": subsector_id,
            "status": status, "featured": featured, "date_from": date_from, "date_to": date_to,
            "page": page, "limit": limit, "order_by": order_by, "order_direction": order_direction,
        }
        return {"success": True, "data": service.list(filters)}

    @router.post("", status_code=201)
    async def create_entry(
        body: entry_model,
        user_data: Dict = Depends(require_role("content_overview", "create")),
        service: ContentOverviewService = Depends(get_service),
    ):
        return {"success": True, "data": service.create(body.model_dump(exclude_none=True), user_data["id"])}

    @router.put("")
    async def update_entry(
        body: entry_model,
        user_data: Dict = Depends(require_role("content_overview", "update")),
        service: ContentOverviewService = Depends(get_service),
    ):
        return {"success": True, "data": service.update(body.model_dump(exclude_unset=True))}

    @router.patch("")
    async def entry_action(
        id: Optional[str] = None,
        type: Optional[str] = None,
        action: Optional[str] = None,
        user_data: Dict = Depends(require_role("content_overview", "publish")),
        service: ContentOverviewService = Depends(get_service),
    ):
        return {"success": True, "data": service.run_action(id, type, action, user_data["id"])}

    @router.delete("")
    async def delete_entry(
        id: Optional[str] = None,
        type: Optional[str] = None,
        user_data: Dict = Depends(require_role("content_overview", "delete")),
        service: ContentOverviewService = Depends(get_service),
    ):
        service.delete(id, type)
        return {"success": True}

    return router


routers = [build_router(scope, kind) for scope in (SECTOR, SUBSECTOR) for kind in PAYLOADS]
routers += [build_overview_router(kind) for kind in ENTRIES]

from fastapi import APIRouter, Depends
from supabase import Client
from typing import Dict, Optional, Type

from pydantic import BaseModel

from hub.core.dependencies import require_role
from hub.core.errors import ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.catalogs.schemas import IndicatorPayload, PositionPayload, SystemLinkPayload, WorkLocationPayload
from hub.modules.catalogs.service import CATALOGS, CatalogService

PAYLOADS: Dict[str, Type[BaseModel]] = {
    "economic-indicators": IndicatorPayload,
    "system-links": SystemLinkPayload,
    "work-locations": WorkLocationPayload,
    "positions": PositionPayload,
}


def build_router(path: str) -> APIRouter:
    """GET (?active_only), POST, PUT (id in body) and DELETE (?id) for one catalog table."""
    resource, service_class = CATALOGS[path]
    payload_model = PAYLOADS[path]
    router = APIRouter(prefix=f"/admin/{path}", tags=["catalogs"])

    def get_service(supabase: Client = Depends(get_supabase)) -> CatalogService:
        return service_class(supabase)

    @router.get("")
    async def list_rows(
        active_only: bool = False,
        user_data: Dict = Depends(require_role(resource, "read")),
        service: CatalogService = Depends(get_service),
    ):
        return {service.plural: service.list(active_only)}

    @router.post("", status_code=201)
    async def create_row(
        body: payload_model,
        user_data: Dict = Depends(require_role(resource, "create")),
        service: CatalogService = Depends(get_service),
    ):
        return {service.singular: service.create(body.model_dump(exclude_none=True), user_data["id"])}

    @router.put("")
    async def update_row(
        body: payload_model,
        user_data: Dict = Depends(require_role(resource, "update")),
        service: CatalogService = Depends(get_service),
    ):
        if not body.id:
            raise ValidationFailed("ID é obrigatório")
        return {service.singular: service.update(body.id, body.model_dump(exclude_unset=True))}

    @router.delete("")
    async def delete_row(
        id: Optional[str] = None,
        user_data: Dict = Depends(require_role(resource, "delete")),
        service: CatalogService = Depends(get_service),
    ):
        if not id:
            raise ValidationFailed("ID é obrigatório")
        service.delete(id)
        return {"success": True}

    return router


routers = [build_router(path) for path in CATALOGS]

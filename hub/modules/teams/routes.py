from fastapi import APIRouter, Depends, Query, Request
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import require_role
from hub.core.errors import ValidationFailed
from hub.core.scopes import SECTOR, SUBSECTOR, Scope, check_scope_access
from hub.database.supabase_client import get_supabase
from hub.modules.teams.schemas import TeamMemberAdd, TeamMemberUpdate
from hub.modules.teams.service import TeamService


def build_router(scope: Scope) -> APIRouter:
    """/admin/sector-team and /admin/subsector-team. Any user may read; writes check the scope."""
    router = APIRouter(prefix=f"/admin/{scope.name}-team", tags=["teams"])
    resource = scope.policy("team")

    def get_service(supabase: Client = Depends(get_supabase)) -> TeamService:
        return TeamService(supabase, scope)

    @router.get("")
    async def list_team(
        scope_id: Optional[str] = Query(None, alias=scope.column),
        user_data: Dict = Depends(require_role(resource, "read")),
        service: TeamService = Depends(get_service),
    ):
        return {"teamMembers": service.list_members(scope_id)}

    @router.post("", status_code=201)
    async def add_member(
        request: Request,
        body: TeamMemberAdd,
        user_data: Dict = Depends(require_role(resource, "create")),
        supabase: Client = Depends(get_supabase),
        service: TeamService = Depends(get_service),
    ):
        scope_id = getattr(body, scope.column)
        if not body.user_id or not scope_id:
            raise ValidationFailed(f"User ID e {scope.label} ID são obrigatórios")
        check_scope_access(request, scope, scope_id, user_data, supabase)
        return {"success": True, "member": service.add_member(scope_id, body.user_id, body.position)}

    @router.put("")
    async def update_member(
        request: Request,
        body: TeamMemberUpdate,
        user_data: Dict = Depends(require_role(resource, "update")),
        supabase: Client = Depends(get_supabase),
        service: TeamService = Depends(get_service),
    ):
        member = service.get_member(body.member_id)
        check_scope_access(request, scope, member[scope.column], user_data, supabase)
        return {"success": True, "member": service.update_member(member, body.position)}

    @router.delete("")
    async def remove_member(
        request: Request,
        member_id: Optional[str] = None,
        user_data: Dict = Depends(require_role(resource, "delete")),
        supabase: Client = Depends(get_supabase),
        service: TeamService = Depends(get_service),
    ):
        member = service.get_member(member_id)
        check_scope_access(request, scope, member[scope.column], user_data, supabase)
        service.remove_member(member)
        return {"success": True}

    return router


sector_router = build_router(SECTOR)
subsector_router = build_router(SUBSECTOR)

from fastapi import APIRouter, Depends, Request
from supabase import Client
from typing import Dict, Optional

from hub.core.dependencies import (
    check_sector_access, check_subsector_access, get_managed_sector_ids, is_admin, require_role,
)
from hub.core.errors import NotFound, ValidationFailed
from hub.database.supabase_client import get_supabase
from hub.modules.sectors.schemas import (
    SectorAdminAdd, SectorCreate, SectorUpdate, SubsectorAdminAdd, SubsectorCreate, SubsectorUpdate,
)
from hub.modules.sectors.service import SectorService, SubsectorService, sector_admins, subsector_admins

router = APIRouter(prefix="/admin", tags=["sectors"])


def get_sector_service(supabase: Client = Depends(get_supabase)) -> SectorService:
    return SectorService(supabase)


def get_subsector_service(supabase: Client = Depends(get_supabase)) -> SubsectorService:
    return SubsectorService(supabase)


# Sectors

@router.get("/sectors")
async def list_sectors(
    request: Request,
    user_data: Dict = Depends(require_role("sectors", "read")),
    service: SectorService = Depends(get_sector_service),
    supabase: Client = Depends(get_supabase),
):
    """Admins see every sector, sector admins only the ones assigned to them."""
    scope = None if is_admin(user_data) else get_managed_sector_ids(request, user_data, supabase)
    return {"sectors": service.list_for(scope)}


@router.post("/sectors", status_code=201)
async def create_sector(
    body: SectorCreate,
    user_data: Dict = Depends(require_role("sectors", "create")),
    service: SectorService = Depends(get_sector_service),
):
    return {"sector": service.create(body.model_dump(exclude_none=True))}


@router.put("/sectors/{sector_id}")
async def update_sector(
    sector_id: str,
    body: SectorUpdate,
    user_data: Dict = Depends(require_role("sectors", "update")),
    service: SectorService = Depends(get_sector_service),
):
    return {"sector": service.update(sector_id, body.model_dump(exclude_unset=True))}


@router.delete("/sectors/{sector_id}")
async def delete_sector(
    sector_id: str,
    user_data: Dict = Depends(require_role("sectors", "delete")),
    service: SectorService = Depends(get_sector_service),
):
    """Subsectors and sector content go with it through foreign key cascades."""
    service.delete(sector_id)
    return {"success": True}


@router.get("/sectors/{sector_id}/admins")
async def list_sector_admins(
    sector_id: str,
    user_data: Dict = Depends(require_role("sectors", "manage_admins")),
    service: SectorService = Depends(get_sector_service),
    supabase: Client = Depends(get_supabase),
):
    service.get(sector_id)
    return {"admins": sector_admins(supabase).list(sector_id)}


@router.post("/sectors/{sector_id}/admins", status_code=201)
async def add_sector_admin(
    sector_id: str,
    body: SectorAdminAdd,
    user_data: Dict = Depends(require_role("sectors", "manage_admins")),
    service: SectorService = Depends(get_sector_service),
    supabase: Client = Depends(get_supabase),
):
    if not body.user_id:
        raise ValidationFailed("ID do usuário é obrigatório")
    service.get(sector_id)
    return {"admin": sector_admins(supabase).add(sector_id, body.user_id)}


@router.delete("/sectors/{sector_id}/admins/{user_id}")
async def remove_sector_admin(
    sector_id: str,
    user_id: str,
    user_data: Dict = Depends(require_role("sectors", "manage_admins")),
    supabase: Client = Depends(get_supabase),
):
    admins = sector_admins(supabase)
    match = [a for a in admins.list(sector_id) if a["user_id"] == user_id]
    if not match:
        raise NotFound("Administrador não encontrado")
    admins.remove(match[0])
    return {"success": True}


# Subsectors

@router.get("/subsectors")
async def list_subsectors(
    request: Request,
    sector_id: Optional[str] = None,
    user_data: Dict = Depends(require_role("subsectors", "read")),
    service: SubsectorService = Depends(get_subsector_service),
    supabase: Client = Depends(get_supabase),
):
    if sector_id:
        check_sector_access(request, sector_id, user_data, supabase)
        return {"subsectors": service.list_filtered([sector_id])}
    scope = None if is_admin(user_data) else get_managed_sector_ids(request, user_data, supabase)
    return {"subsectors": service.list_filtered(scope)}


@router.post("/subsectors", status_code=201)
async def create_subsector(
    request: Request,
    body: SubsectorCreate,
    user_data: Dict = Depends(require_role("subsectors", "create")),
    service: SubsectorService = Depends(get_subsector_service),
    supabase: Client = Depends(get_supabase),
):
    if not body.name or not body.sector_id:
        raise ValidationFailed("Nome e setor são obrigatórios")
    check_sector_access(request, body.sector_id, user_data, supabase)
    return {"subsector": service.create(body.model_dump(exclude_none=True))}


@router.put("/subsectors")
async def update_subsector(
    request: Request,
    body: SubsectorUpdate,
    user_data: Dict = Depends(require_role("subsectors", "update")),
    service: SubsectorService = Depends(get_subsector_service),
    supabase: Client = Depends(get_supabase),
):
    if not body.id or not body.name:
        raise ValidationFailed("ID e nome são obrigatórios")
    current = service.get(body.id)
    check_sector_access(request, current["sector_id"], user_data, supabase)
    if body.sector_id and body.sector_id != current["sector_id"]:
        check_sector_access(request, body.sector_id, user_data, supabase)
    return {"subsector": service.update(body.id, body.model_dump(exclude_unset=True))}


@router.delete("/subsectors")
async def delete_subsector(
    request: Request,
    id: Optional[str] = None,
    user_data: Dict = Depends(require_role("subsectors", "delete")),
    service: SubsectorService = Depends(get_subsector_service),
    supabase: Client = Depends(get_supabase),
):
    if not id:
        raise ValidationFailed("ID do subsetor é obrigatório")
    current = service.get(id)
    check_sector_access(request, current["sector_id"], user_data, supabase)
    service.delete(id)
    return {"success": True}


@router.get("/subsector-admins")
async def list_subsector_admins(
    request: Request,
    subsector_id: Optional[str] = None,
    user_data: Dict = Depends(require_role("subsector_admins", "read")),
    supabase: Client = Depends(get_supabase),
):
    if not subsector_id:
        raise ValidationFailed("ID do subsetor é obrigatório")
    check_subsector_access(request, subsector_id, user_data, supabase)
    return {"admins": subsector_admins(supabase).list(subsector_id)}


@router.post("/subsector-admins", status_code=201)
async def add_subsector_admin(
    request: Request,
    body: SubsectorAdminAdd,
    user_data: Dict = Depends(require_role("subsector_admins", "create")),
    supabase: Client = Depends(get_supabase),
):
    if not body.user_id or not body.subsector_id:
        raise ValidationFailed("ID do usuário e do subsetor são obrigatórios")
    check_subsector_access(request, body.subsector_id, user_data, supabase)
    return {"admin": subsector_admins(supabase).add(body.subsector_id, body.user_id, duplicate_status=400)}


@router.delete("/subsector-admins")
async def remove_subsector_admin(
    request: Request,
    id: Optional[str] = None,
    user_data: Dict = Depends(require_role("subsector_admins", "delete")),
    supabase: Client = Depends(get_supabase),
):
    if not id:
        raise ValidationFailed("ID é obrigatório")
    admins = subsector_admins(supabase)
    assignment = admins.get(id)
    check_subsector_access(request, assignment["subsector_id"], user_data, supabase)
    admins.remove(assignment)
    return {"success": True}

from fastapi import APIRouter, Depends, Request
from supabase import Client
from typing import Dict

from hub.config.permissions_config import grants_for_role
from hub.core.dependencies import get_current_profile, get_managed_sector_ids, get_managed_subsector_ids
from hub.database.supabase_client import get_supabase
from hub.modules.auth.schemas import MeResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=MeResponse)
async def get_me(
    request: Request,
    user_data: Dict = Depends(get_current_profile),
    supabase: Client = Depends(get_supabase),
):
    """Current user, role and the grants the UI uses to show or hide admin areas."""
    role = user_data["role"]
    return {
        "id": user_data["id"],
        "email": user_data.get("email"),
        "role": role,
        "profile": user_data["profile"],
        "permissions": grants_for_role(role),
        "sector_ids": get_managed_sector_ids(request, user_data, supabase),
        "subsector_ids": get_managed_subsector_ids(request, user_data, supabase),
    }

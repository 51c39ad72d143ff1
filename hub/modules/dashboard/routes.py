from fastapi import APIRouter, Depends
from supabase import Client
from typing import Dict

from hub.core.dependencies import require_role
from hub.database.supabase_client import get_supabase
from hub.modules.dashboard.service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("")
async def home(
    user_data: Dict = Depends(require_role("dashboard", "read")),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.home()


@router.get("/stats")
async def stats(
    user_data: Dict = Depends(require_role("dashboard", "read")),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.stats()

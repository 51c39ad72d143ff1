import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from hub.core.crud import CrudService, fetch_by_id, first_row
from hub.core.errors import Conflict, NotFound, UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)


class SectorService(CrudService):
    table = "sectors"
    label = "Setor"
    required = ("name",)

    def list_for(self, sector_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """All sectors, or only sector_ids when given."""
        if sector_ids is None:
            return self.list()
        if not sector_ids:
            return []
        try:
            result = self.supabase.table("sectors").select("*").in_("id", sector_ids).order("name").execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error listing sectors {sector_ids}: {e}")
            raise UpstreamError("Erro ao buscar setores")


class SubsectorService(CrudService):
    table = "subsectors"
    label = "Subsetor"
    required = ("name", "sector_id")

    def list_filtered(self, sector_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table("subsectors").select("*")
            if sector_ids is not None:
                if not sector_ids:
                    return []
                query = query.in_("sector_id", sector_ids)
            return query.order("name").execute().data or []
        except Exception as e:
            logger.error(f"Error listing subsectors: {e}")
            raise UpstreamError("Erro ao buscar subsetores")


class ScopeAdminService:
    """Assignments of users as administrators of a sector or subsector.

    Adding an assignment promotes a plain `user` to the matching admin role.
    Removing the last assignment of that kind demotes the user back to `user`.
    """

    def __init__(self, supabase: Client, table: str, scope_column: str, role: str):
        self.supabase = supabase
        self.table = table
        self.scope_column = scope_column
        self.role = role

    def list(self, scope_id: str) -> List[Dict[str, Any]]:
        try:
            rows = self.supabase.table(self.table)\
                .select("*")\
                .eq(self.scope_column, scope_id)\
                .execute().data or []
            user_ids = [r["user_id"] for r in rows]
            profiles = {}
            if user_ids:
                result = self.supabase.table("profiles")\
                    .select("id, email, full_name, role, avatar_url")\
                    .in_("id", user_ids)\
                    .execute()
                profiles = {p["id"]: p for p in result.data or []}
            return [{**r, "profile": profiles.get(r["user_id"])} for r in rows]
        except Exception as e:
            logger.error(f"Error listing {self.table} for {scope_id}: {e}")
            raise UpstreamError("Erro ao buscar administradores")

    def add(self, scope_id: str, user_id: str, duplicate_status: int = 409) -> Dict[str, Any]:
        try:
            profile = fetch_by_id(self.supabase, "profiles", user_id, "id, role")
            if not profile:
                raise NotFound("Usuário não encontrado")
            existing = first_row(
                self.supabase.table(self.table)
                .select("id")
                .eq(self.scope_column, scope_id)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            if existing:
                message = "Usuário já é administrador"
                raise Conflict(message) if duplicate_status == 409 else ValidationFailed(message)
            row = first_row(
                self.supabase.table(self.table)
                .insert({self.scope_column: scope_id, "user_id": user_id})
                .execute()
            )
            if profile["role"] == "user":
                self.supabase.table("profiles").update({"role": self.role}).eq("id", user_id).execute()
                logger.info(f"Promoted user {user_id} to {self.role}")
            return row
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding {user_id} to {self.table}: {e}")
            raise UpstreamError("Erro ao adicionar administrador")

    def get(self, assignment_id: str) -> Dict[str, Any]:
        row = fetch_by_id(self.supabase, self.table, assignment_id)
        if not row:
            raise NotFound("Administrador não encontrado")
        return row

    def remove(self, assignment: Dict[str, Any]) -> None:
        try:
            self.supabase.table(self.table).delete().eq("id", assignment["id"]).execute()
            user_id = assignment["user_id"]
            remaining = self.supabase.table(self.table).select("id").eq("user_id", user_id).limit(1).execute()
            if not remaining.data:
                self.supabase.table("profiles")\
                    .update({"role": "user"})\
                    .eq("id", user_id)\
                    .eq("role", self.role)\
                    .execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error removing {self.table} {assignment.get('id')}: {e}")
            raise UpstreamError("Erro ao remover administrador")


def sector_admins(supabase: Client) -> ScopeAdminService:
    return ScopeAdminService(supabase, "sector_admins", "sector_id", "sector_admin")


def subsector_admins(supabase: Client) -> ScopeAdminService:
    return ScopeAdminService(supabase, "subsector_admins", "subsector_id", "subsector_admin")

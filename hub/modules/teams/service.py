import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from hub.core.crud import fetch_by_id, first_row
from hub.core.errors import NotFound, UpstreamError, ValidationFailed
from hub.core.scopes import SECTOR, Scope

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, full_name, email, avatar_url, position, work_location_id"
SECTOR_ADMIN_POSITION = "Administrador do Setor"


class TeamService:
    """Members shown on a sector or subsector page.

    Sector teams also list the sector admins flagged show_as_team_member,
    unless they are already regular members. Rows copied down from a
    subsector (is_from_subsector) can only be removed through the subsector.
    """

    def __init__(self, supabase: Client, scope: Scope):
        self.supabase = supabase
        self.scope = scope
        self.table = f"{scope.name}_team_members"

    def _profiles(self, user_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not user_ids:
            return {}
        profiles = self.supabase.table("profiles").select(PROFILE_COLUMNS).in_("id", user_ids).execute().data or []
        location_ids = list({p["work_location_id"] for p in profiles if p.get("work_location_id")})
        locations = {}
        if location_ids:
            rows = self.supabase.table("work_locations").select("id, name").in_("id", location_ids).execute().data or []
            locations = {r["id"]: {"name": r["name"]} for r in rows}
        return {p["id"]: {**p, "work_locations": locations.get(p.get("work_location_id"))} for p in profiles}

    def list_members(self, scope_id: Optional[str]) -> List[Dict[str, Any]]:
        if not scope_id:
            raise ValidationFailed(f"ID do {self.scope.label.lower()} é obrigatório")
        try:
            query = self.supabase.table(self.table).select("*").eq(self.scope.column, scope_id)
            if self.scope is SECTOR:
                query = query.order("is_from_subsector")
            members = query.order("created_at", desc=True).execute().data or []
            admins = []
            if self.scope is SECTOR:
                admins = self.supabase.table("sector_admins")\
                    .select("*")\
                    .eq("sector_id", scope_id)\
                    .eq("show_as_team_member", True)\
                    .execute().data or []
            member_ids = {m["user_id"] for m in members}
            admins = [a for a in admins if a["user_id"] not in member_ids]
            profiles = self._profiles(list(member_ids | {a["user_id"] for a in admins}))
        except Exception as e:
            logger.error(f"Error listing {self.table} for {scope_id}: {e}")
            raise UpstreamError(f"Erro ao buscar equipe do {self.scope.label.lower()}")

        admin_members = [{
            "id": f"admin-{a['id']}",
            "user_id": a["user_id"],
            "sector_id": a["sector_id"],
            "position": SECTOR_ADMIN_POSITION,
            "is_from_subsector": False,
            "subsector_id": None,
            "created_at": a.get("created_at"),
            "profiles": profiles.get(a["user_id"]),
            "is_admin": True,
        } for a in admins]
        return admin_members + [{**m, "profiles": profiles.get(m["user_id"])} for m in members]

    def get_member(self, member_id: Optional[str]) -> Dict[str, Any]:
        if not member_id:
            raise ValidationFailed("ID do membro é obrigatório")
        member = fetch_by_id(self.supabase, self.table, member_id)
        if not member:
            raise NotFound("Membro não encontrado")
        return member

    def add_member(self, scope_id: str, user_id: str, position: Optional[str]) -> Dict[str, Any]:
        try:
            existing = first_row(
                self.supabase.table(self.table)
                .select("id")
                .eq("user_id", user_id)
                .eq(self.scope.column, scope_id)
                .limit(1)
                .execute()
            )
            if existing:
                raise ValidationFailed(f"Usuário já está na equipe do {self.scope.label.lower()}")
            row = {
                "user_id": user_id,
                self.scope.column: scope_id,
                "position": position or None,
            }
            if self.scope is SECTOR:
                row["is_from_subsector"] = False
            member = first_row(self.supabase.table(self.table).insert(row).execute())
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding {user_id} to {self.table} {scope_id}: {e}")
            raise UpstreamError(f"Erro ao adicionar membro ao {self.scope.label.lower()}")
        logger.info(f"Added {user_id} to {self.table} {scope_id}")
        return member

    def update_member(self, member: Dict[str, Any], position: Optional[str]) -> Dict[str, Any]:
        changes = {"position": position, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            result = self.supabase.table(self.table).update(changes).eq("id", member["id"]).execute()
        except Exception as e:
            logger.error(f"Error updating {self.table} {member['id']}: {e}")
            raise UpstreamError(f"Erro ao atualizar membro do {self.scope.label.lower()}")
        return first_row(result) or {**member, **changes}

    def remove_member(self, member: Dict[str, Any]) -> None:
        if member.get("is_from_subsector"):
            raise ValidationFailed(
                "Não é possível remover um membro que foi adicionado através de um subsetor. "
                "Remova-o do subsetor correspondente."
            )
        try:
            self.supabase.table(self.table).delete().eq("id", member["id"]).execute()
        except Exception as e:
            logger.error(f"Error deleting {self.table} {member['id']}: {e}")
            raise UpstreamError(f"Erro ao remover membro do {self.scope.label.lower()}")
        logger.info(f"Removed member {member['id']} from {self.table}")

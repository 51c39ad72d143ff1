"""
Sector and subsector content share table layouts and routes; a Scope names
the parts that differ.
"""

from dataclasses import dataclass
from typing import Any, Dict

from fastapi import Request
from supabase import Client

from hub.core.crud import fetch_by_id
from hub.core.dependencies import check_sector_access, check_subsector_access
from hub.core.errors import NotFound


@dataclass(frozen=True)
class Scope:
    name: str
    column: str
    label: str

    def table(self, kind: str) -> str:
        return f"{self.name}_{kind}"

    def policy(self, area: str) -> str:
        return f"{self.name}_{area}"


SECTOR = Scope("sector", "sector_id", "Setor")
SUBSECTOR = Scope("subsector", "subsector_id", "Subsetor")


def check_scope_access(request: Request, scope: Scope, scope_id: str, user_data: Dict[str, Any], supabase: Client) -> None:
    """404 for an unknown sector/subsector, 403 when the caller does not manage it."""
    if scope is SUBSECTOR:
        check_subsector_access(request, scope_id, user_data, supabase)
        return
    if not fetch_by_id(supabase, "sectors", scope_id, "id"):
        raise NotFound("Setor não encontrado")
    check_sector_access(request, scope_id, user_data, supabase)

"""
Table helpers shared by the resource services.

Supabase has no multi-statement transactions over the REST API, so every
helper here is a single call or a documented sequence of calls.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException
from supabase import Client

from hub.core.errors import NotFound, UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "created_at", "created_by")


def first_row(result) -> Optional[Dict[str, Any]]:
    if result is None or not result.data:
        return None
    if isinstance(result.data, list):
        return result.data[0]
    return result.data


def strip_immutable(payload: Dict[str, Any], extra: Iterable[str] = ()) -> Dict[str, Any]:
    """Copy of payload without fields clients may never overwrite."""
    blocked = set(IMMUTABLE_FIELDS) | set(extra)
    return {k: v for k, v in payload.items() if k not in blocked}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(payload: Dict[str, Any], fields: Iterable[str], message: str = None) -> None:
    """Raise 400 when any field is missing, None or a blank string."""
    missing = [f for f in fields if _is_blank(payload.get(f))]
    if missing:
        raise ValidationFailed(message or f"Campos obrigatórios ausentes: {', '.join(missing)}")


def reject_blank(data: Dict[str, Any], fields: Iterable[str]) -> None:
    """Partial updates may omit required fields but never clear them."""
    for field in fields:
        if field in data and _is_blank(data[field]):
            raise ValidationFailed(f"Campo {field} não pode ser vazio")


def fetch_by_id(supabase: Client, table: str, row_id: Any, columns: str = "*", **scope: Any) -> Optional[Dict[str, Any]]:
    query = supabase.table(table).select(columns).eq("id", row_id)
    for column, value in scope.items():
        query = query.eq(column, value)
    return first_row(query.limit(1).execute())


def next_order_index(supabase: Client, table: str, step: int = 1, empty: int = 0, **scope: Any) -> int:
    """Highest order_index in scope plus step, or `empty` when the scope has no rows."""
    query = supabase.table(table).select("order_index")
    for column, value in scope.items():
        query = query.eq(column, value)
    row = first_row(query.order("order_index", desc=True).limit(1).execute())
    if not row or row.get("order_index") is None:
        return empty
    return row["order_index"] + step


def clear_featured(supabase: Client, table: str, parent_column: str, parent_id: Any, keep_id: Any) -> None:
    """Unset is_featured on every sibling of keep_id under the same parent.

    Run before setting keep_id featured. Two concurrent writers can still
    interleave between the two updates.
    """
    supabase.table(table)\
        .update({"is_featured": False})\
        .eq(parent_column, parent_id)\
        .neq("id", keep_id)\
        .execute()


class CrudService:
    """Plain table CRUD for resources without side effects.

    Subclasses set `table`, `label` (used in 404 messages), `required`
    (fields needed on create) and `order_by`.
    """

    table: str = ""
    label: str = "Registro"
    required: tuple = ()
    order_by: str = "name"
    order_desc: bool = False
    tracks_creator: bool = False

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list(self, active_only: bool = False) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table(self.table).select("*")
            if active_only:
                query = query.eq("is_active", True)
            result = query.order(self.order_by, desc=self.order_desc).execute()
            return result.data or []
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing {self.table}: {e}")
            raise UpstreamError(f"Erro ao buscar {self.table}")

    def get(self, row_id: str) -> Dict[str, Any]:
        try:
            row = fetch_by_id(self.supabase, self.table, row_id)
        except Exception as e:
            logger.error(f"Error fetching {self.table} {row_id}: {e}")
            raise UpstreamError(f"Erro ao buscar {self.table}")
        if not row:
            raise NotFound(f"{self.label} não encontrado")
        return row

    def create(self, payload: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        require_fields(payload, self.required)
        data = strip_immutable(payload)
        data.update(self.defaults_for_create(data))
        if user_id and self.tracks_creator:
            data["created_by"] = user_id
        try:
            result = self.supabase.table(self.table).insert(data).execute()
            return first_row(result)
        except Exception as e:
            logger.error(f"Error creating {self.table}: {e}")
            raise UpstreamError(f"Erro ao criar {self.table}")

    def update(self, row_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        reject_blank(data, self.required)
        self.get(row_id)
        if not data:
            return self.get(row_id)
        try:
            result = self.supabase.table(self.table).update(data).eq("id", row_id).execute()
        except Exception as e:
            logger.error(f"Error updating {self.table} {row_id}: {e}")
            raise UpstreamError(f"Erro ao atualizar {self.table}")
        return first_row(result) or self.get(row_id)

    def delete(self, row_id: str) -> Dict[str, Any]:
        row = self.get(row_id)
        try:
            self.supabase.table(self.table).delete().eq("id", row_id).execute()
        except Exception as e:
            logger.error(f"Error deleting {self.table} {row_id}: {e}")
            raise UpstreamError(f"Erro ao excluir {self.table}")
        return row

    def defaults_for_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {}

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from hub.core.crud import clear_featured, fetch_by_id, first_row, reject_blank, require_fields, strip_immutable
from hub.core.errors import NotFound, UpstreamError, ValidationFailed
from hub.core.scopes import SECTOR, SUBSECTOR, Scope
from hub.core.storage import MediaStorage, storage_path_from_url

logger = logging.getLogger(__name__)

TEXT_LIMITS = {
    "title": (3, 255),
    "summary": (10, 500),
    "content": (20, 10000),
    "description": (10, 1000),
}

ALL_ACTIONS = ("publish", "unpublish", "feature", "unfeature", "duplicate")

# kind -> table layout and behaviour; tables are "<scope>_<kind>"
KINDS = {
    "news": {
        "label": "Notícia",
        "required": ("title", "summary", "content"),
        "limits": ("title", "summary", "content"),
        "search": ("title", "summary"),
        "order": "created_at",
        "desc": True,
        "featurable": True,
        "published_default": False,
        "actions": ALL_ACTIONS,
        "files": {"image_url": "images"},
    },
    "events": {
        "label": "Evento",
        "required": ("title", "description", "start_date"),
        "limits": ("title", "description"),
        "search": ("title", "description"),
        "order": "start_date",
        "desc": False,
        "featurable": True,
        "published_default": False,
        "actions": ALL_ACTIONS,
        "files": {"image_url": "images"},
    },
    "messages": {
        "label": "Mensagem",
        "required": ("title", "content"),
        "limits": ("title", "content"),
        "search": ("title", "content"),
        "order": "created_at",
        "desc": True,
        "featurable": False,
        "published_default": True,
        "actions": ("publish", "unpublish", "duplicate"),
        "files": {},
    },
    "documents": {
        "label": "Documento",
        "required": ("title", "file_url"),
        "limits": ("title",),
        "search": ("title", "description"),
        "order": "created_at",
        "desc": True,
        "featurable": True,
        "published_default": False,
        "actions": ALL_ACTIONS,
        "files": {"file_url": "documents"},
    },
}

ACTIONS = {
    "publish": {"is_published": True},
    "unpublish": {"is_published": False},
    "feature": {"is_featured": True},
    "unfeature": {"is_featured": False},
}

SCOPES = {"sector": SECTOR, "subsector": SUBSECTOR}
OVERVIEW_ORDER_FIELDS = ("created_at", "updated_at", "title", "start_date", "file_size")


def check_text_limits(data: Dict[str, Any], fields=tuple(TEXT_LIMITS)) -> None:
    for field in fields:
        value = data.get(field)
        if value is None:
            continue
        low, high = TEXT_LIMITS[field]
        length = len(value.strip())
        if length < low or length > high:
            raise ValidationFailed(f"O campo {field} deve ter entre {low} e {high} caracteres")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContentService:
    """News, events, messages and documents of a sector or subsector."""

    def __init__(self, supabase: Client, scope: Scope, kind: str):
        self.supabase = supabase
        self.scope = scope
        self.kind = kind
        self.config = KINDS[kind]
        self.table = scope.table(kind)

    def _get(self, scope_id: str, row_id: str) -> Dict[str, Any]:
        row = fetch_by_id(self.supabase, self.table, row_id, **{self.scope.column: scope_id})
        if not row:
            raise NotFound(f"{self.config['label']} não encontrado")
        return row

    def scope_id_of(self, row_id: str) -> str:
        """Owning sector/subsector id of a row, 404 when the row does not exist."""
        try:
            row = fetch_by_id(self.supabase, self.table, row_id, f"id, {self.scope.column}")
        except Exception as e:
            logger.error(f"Error fetching {self.table} {row_id}: {e}")
            raise UpstreamError("Erro ao buscar conteúdo")
        if not row:
            raise NotFound(f"{self.config['label']} não encontrado")
        return row[self.scope.column]

    def list(self, scope_id: str, show_drafts: bool = False) -> Dict[str, Any]:
        try:
            query = self.supabase.table(self.table).select("*").eq(self.scope.column, scope_id)
            if not show_drafts:
                query = query.eq("is_published", True)
            rows = query.order(self.config["order"], desc=self.config["desc"]).execute().data or []
        except Exception as e:
            logger.error(f"Error listing {self.table} for {scope_id}: {e}")
            raise UpstreamError("Erro ao buscar conteúdo")
        return {self.kind: rows}

    def create(self, scope_id: str, payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        require_fields(payload, self.config["required"])
        data = strip_immutable(payload)
        check_text_limits(data, self.config["limits"])
        data.update({
            self.scope.column: scope_id,
            "created_by": user_id,
            "is_published": data.get("is_published", self.config["published_default"]),
        })
        featured = False
        if self.config["featurable"]:
            featured = bool(data.pop("is_featured", False))
            data["is_featured"] = featured
        try:
            row = first_row(self.supabase.table(self.table).insert(data).execute())
            if featured:
                clear_featured(self.supabase, self.table, self.scope.column, scope_id, row["id"])
            return row
        except Exception as e:
            logger.error(f"Error creating {self.table}: {e}")
            raise UpstreamError("Erro ao criar conteúdo")

    def update(self, scope_id: str, row_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        reject_blank(data, self.config["required"])
        check_text_limits(data, self.config["limits"])
        try:
            current = self._get(scope_id, row_id)
            return self._apply(scope_id, row_id, data) or {**current, **data}
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating {self.table} {row_id}: {e}")
            raise UpstreamError("Erro ao atualizar conteúdo")

    def _apply(self, scope_id: str, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("is_featured"):
            clear_featured(self.supabase, self.table, self.scope.column, scope_id, row_id)
        data["updated_at"] = _now()
        return first_row(self.supabase.table(self.table).update(data).eq("id", row_id).execute())

    def run_action(self, scope_id: str, row_id: str, action: str, user_id: str) -> Dict[str, Any]:
        if action not in self.config["actions"]:
            raise ValidationFailed("Ação inválida")
        try:
            current = self._get(scope_id, row_id)
            if action == "duplicate":
                copy = strip_immutable(current, extra=("updated_at",))
                copy.update({
                    "title": f"{current.get('title', '')} (cópia)"[:TEXT_LIMITS["title"][1]],
                    "is_published": False,
                    "created_by": user_id,
                })
                if self.config["featurable"]:
                    copy["is_featured"] = False
                return first_row(self.supabase.table(self.table).insert(copy).execute())
            return self._apply(scope_id, row_id, dict(ACTIONS[action])) or {**current, **ACTIONS[action]}
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error running {action} on {self.table} {row_id}: {e}")
            raise UpstreamError("Erro ao executar ação")

    def delete(self, scope_id: str, row_id: str) -> None:
        try:
            row = self._get(scope_id, row_id)
            self.supabase.table(self.table).delete().eq("id", row_id).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting {self.table} {row_id}: {e}")
            raise UpstreamError("Erro ao excluir conteúdo")
        storage = MediaStorage(self.supabase)
        for column, bucket in self.config["files"].items():
            storage.remove_quietly(bucket, [storage_path_from_url(row.get(column), bucket)])


def resolve_scope(scope_type: Optional[str]) -> Scope:
    if scope_type not in SCOPES:
        raise ValidationFailed('Tipo deve ser "sector" ou "subsector"')
    return SCOPES[scope_type]


class ContentOverviewService:
    """Admin view of one content kind across every sector and subsector.

    Writes name their target with `type` (sector|subsector) and are
    delegated to the scoped ContentService.
    """

    def __init__(self, supabase: Client, kind: str):
        self.supabase = supabase
        self.kind = kind
        self.config = KINDS[kind]

    def scoped(self, scope_type: Optional[str]) -> ContentService:
        return ContentService(self.supabase, resolve_scope(scope_type), self.kind)

    def _names(self, table: str, ids: List[str]) -> Dict[str, str]:
        if not ids:
            return {}
        rows = self.supabase.table(table).select("id, name").in_("id", ids).execute().data or []
        return {r["id"]: r["name"] for r in rows}

    def _fetch(self, scope: Scope, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = self.supabase.table(scope.table(self.kind)).select("*")
        search = (filters.get("search") or "").strip()
        if search:
            query = query.or_(",".join(f"{col}.ilike.%{search}%" for col in self.config["search"]))
        if filters.get("status") == "published":
            query = query.eq("is_published", True)
        elif filters.get("status") == "draft":
            query = query.eq("is_published", False)
        if self.config["featurable"]:
            if filters.get("featured") == "featured":
                query = query.eq("is_featured", True)
            elif filters.get("featured") == "not_featured":
                query = query.eq("is_featured", False)
        if filters.get("date_from"):
            query = query.gte("created_at", filters["date_from"])
        if filters.get("date_to"):
            query = query.lte("created_at", filters["date_to"])

        if scope is SECTOR:
            if filters.get("sector_id"):
                query = query.eq("sector_id", filters["sector_id"])
            rows = query.execute().data or []
            names = self._names("sectors", list({r["sector_id"] for r in rows if r.get("sector_id")}))
            return [{**r, "type": "sector", "location_id": r.get("sector_id"),
                     "location_name": names.get(r.get("sector_id"))} for r in rows]

        if filters.get("subsector_id"):
            query = query.eq("subsector_id", filters["subsector_id"])
        if filters.get("sector_id"):
            children = self.supabase.table("subsectors")\
                .select("id")\
                .eq("sector_id", filters["sector_id"])\
                .execute().data or []
            query = query.in_("subsector_id", [c["id"] for c in children])
        rows = query.execute().data or []
        names = self._names("subsectors", list({r["subsector_id"] for r in rows if r.get("subsector_id")}))
        return [{**r, "type": "subsector", "location_id": r.get("subsector_id"),
                 "location_name": names.get(r.get("subsector_id"))} for r in rows]

    def list(self, filters: Dict[str, Any]) -> Dict[str, Any]:
        scope_type = filters.get("type") or "all"
        if scope_type not in ("all", "sector", "subsector"):
            raise ValidationFailed("Filtros inválidos")
        order_by = filters.get("order_by") or "created_at"
        if order_by not in OVERVIEW_ORDER_FIELDS:
            raise ValidationFailed("Filtros inválidos")
        page = max(int(filters.get("page") or 1), 1)
        limit = min(max(int(filters.get("limit") or 20), 1), 100)

        by_type = {"sector": [], "subsector": []}
        try:
            for name, scope in SCOPES.items():
                if scope_type in ("all", name):
                    by_type[name] = self._fetch(scope, filters)
        except Exception as e:
            logger.error(f"Error listing {self.kind} overview: {e}")
            raise UpstreamError("Erro ao buscar conteúdo")

        rows = by_type["sector"] + by_type["subsector"]
        present = [r for r in rows if r.get(order_by) is not None]
        missing = [r for r in rows if r.get(order_by) is None]
        rows = sorted(present, key=lambda r: r[order_by], reverse=filters.get("order_direction") != "asc") + missing

        total = len(rows)
        total_pages = (total + limit - 1) // limit
        stats = {
            "total": total,
            "published": sum(1 for r in rows if r.get("is_published")),
            "drafts": sum(1 for r in rows if not r.get("is_published")),
            "byType": {name: len(items) for name, items in by_type.items()},
        }
        if self.config["featurable"]:
            stats["featured"] = sum(1 for r in rows if r.get("is_featured"))
        return {
            self.kind: rows[(page - 1) * limit:page * limit],
            "pagination": {
                "currentPage": page,
                "totalPages": total_pages,
                "totalCount": total,
                "limit": limit,
                "hasNextPage": page < total_pages,
                "hasPrevPage": page > 1,
            },
            "stats": stats,
        }

    def create(self, payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        data = dict(payload)
        service = self.scoped(data.pop("type", None))
        scope_id = data.get(service.scope.column)
        data.pop("sector_id", None)
        data.pop("subsector_id", None)
        if not scope_id:
            raise ValidationFailed("ID do setor/subsetor é obrigatório")
        if not fetch_by_id(self.supabase, service.scope.name + "s", scope_id, "id"):
            raise NotFound(f"{service.scope.label} não encontrado")
        return service.create(scope_id, data, user_id)

    def update(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(payload)
        row_id = data.pop("id", None)
        if not row_id:
            raise ValidationFailed("ID é obrigatório para atualização")
        service = self.scoped(data.pop("type", None))
        data.pop("sector_id", None)
        data.pop("subsector_id", None)
        return service.update(service.scope_id_of(row_id), row_id, data)

    def run_action(self, row_id: Optional[str], scope_type: Optional[str], action: Optional[str], user_id: str) -> Dict[str, Any]:
        if not row_id or not scope_type or not action:
            raise ValidationFailed("ID, tipo e ação são obrigatórios")
        service = self.scoped(scope_type)
        return service.run_action(service.scope_id_of(row_id), row_id, action, user_id)

    def delete(self, row_id: Optional[str], scope_type: Optional[str]) -> None:
        if not row_id or not scope_type:
            raise ValidationFailed("ID e tipo são obrigatórios")
        service = self.scoped(scope_type)
        service.delete(service.scope_id_of(row_id), row_id)

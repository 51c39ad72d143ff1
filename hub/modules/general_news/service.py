"""
Company-wide news. There is no featured flag; "feature" raises the priority
by one (up to MAX_PRIORITY) and "unfeature" resets it to zero.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from hub.core.crud import CrudService, first_row
from hub.core.errors import UpstreamError, ValidationFailed
from hub.core.storage import MediaStorage, storage_path_from_url
from hub.modules.content.service import check_text_limits

logger = logging.getLogger(__name__)

MAX_PRIORITY = 10
ACTIONS = ("publish", "unpublish", "feature", "unfeature")


def check_priority(data: Dict[str, Any]) -> None:
    priority = data.get("priority")
    if priority is not None and not 0 <= priority <= MAX_PRIORITY:
        raise ValidationFailed(f"Prioridade deve estar entre 0 e {MAX_PRIORITY}")


class GeneralNewsService(CrudService):
    table = "general_news"
    label = "Notícia"
    required = ("title", "summary", "content")
    tracks_creator = True

    def list(self, include_unpublished: bool = False) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table(self.table).select("*")
            if not include_unpublished:
                query = query.eq("is_published", True)
            return query.order("priority", desc=True).order("created_at", desc=True).execute().data or []
        except Exception as e:
            logger.error(f"Error listing general news: {e}")
            raise UpstreamError("Erro ao buscar notícias")

    def defaults_for_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"priority": data.get("priority", 0), "is_published": data.get("is_published", False)}

    def create(self, payload: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        check_text_limits(payload, ("title", "summary", "content"))
        check_priority(payload)
        return super().create(payload, user_id)

    def update(self, row_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        check_text_limits(payload, ("title", "summary", "content"))
        check_priority(payload)
        data = dict(payload)
        data.pop("id", None)
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        return super().update(row_id, data)

    def run_action(self, row_id: Optional[str], action: Optional[str]) -> Dict[str, Any]:
        if not row_id or not action:
            raise ValidationFailed("ID e ação são obrigatórios")
        if action not in ACTIONS:
            raise ValidationFailed('Ação deve ser "publish", "unpublish", "feature" ou "unfeature"')
        current = self.get(row_id)
        changes = {
            "publish": {"is_published": True},
            "unpublish": {"is_published": False},
            "feature": {"priority": min(MAX_PRIORITY, (current.get("priority") or 0) + 1)},
            "unfeature": {"priority": 0},
        }[action]
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table(self.table).update(changes).eq("id", row_id).execute()
        except Exception as e:
            logger.error(f"Error running {action} on general news {row_id}: {e}")
            raise UpstreamError(f"Erro ao executar ação {action}")
        return first_row(result) or {**current, **changes}

    def delete(self, row_id: str) -> Dict[str, Any]:
        row = super().delete(row_id)
        MediaStorage(self.supabase).remove_quietly("images", [storage_path_from_url(row.get("image_url"), "images")])
        return row

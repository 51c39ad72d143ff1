import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from hub.core.crud import fetch_by_id, first_row, next_order_index, require_fields, strip_immutable
from hub.core.errors import NotFound, UpstreamError
from hub.core.storage import MediaStorage, storage_path_from_url

logger = logging.getLogger(__name__)

BUCKET = "banners"


def positioning(order_indexes: List[int]) -> Dict[str, Any]:
    """Gap analysis of banner positions (0-based)."""
    used = sorted(order_indexes)
    max_position = max(used, default=-1)
    present = set(used)
    gaps = [i for i in range(max_position + 1) if i not in present]
    return {
        "nextAvailablePosition": max_position + 1,
        "usedPositions": used,
        "availableGaps": gaps,
        "totalBanners": len(used),
        "maxPosition": max_position,
        "hasGaps": bool(gaps),
        "isSequential": all(pos == i for i, pos in enumerate(used)),
        "recommendCompaction": len(gaps) > 1,
    }


class BannerService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)

    def _all(self, columns: str = "*") -> List[Dict[str, Any]]:
        result = self.supabase.table("banners")\
            .select(columns)\
            .order("order_index")\
            .execute()
        return result.data or []

    def _get(self, banner_id: str) -> Dict[str, Any]:
        banner = fetch_by_id(self.supabase, "banners", banner_id)
        if not banner:
            raise NotFound("Banner não encontrado")
        return banner

    def list_banners(self) -> Dict[str, Any]:
        try:
            banners = self._all()
        except Exception as e:
            logger.error(f"Error listing banners: {e}")
            raise UpstreamError("Erro ao buscar banners")
        stats = positioning([b["order_index"] for b in banners if b.get("order_index") is not None])
        return {"banners": banners, "positioning": stats}

    def create_banner(self, payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        require_fields(payload, ("title", "image_url"), "Título e imagem são obrigatórios")
        data = strip_immutable(payload)
        try:
            if data.get("order_index") is None:
                data["order_index"] = next_order_index(self.supabase, "banners")
            data["created_by"] = user_id
            return first_row(self.supabase.table("banners").insert(data).execute())
        except Exception as e:
            logger.error(f"Error creating banner: {e}")
            raise UpstreamError("Erro ao criar banner")

    def update_banner(self, banner_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = strip_immutable(payload)
        try:
            current = self._get(banner_id)
            if not data:
                return current
            updated = first_row(self.supabase.table("banners").update(data).eq("id", banner_id).execute())
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating banner {banner_id}: {e}")
            raise UpstreamError("Erro ao atualizar banner")
        if data.get("image_url") and data["image_url"] != current.get("image_url"):
            self.storage.remove_quietly(BUCKET, [storage_path_from_url(current.get("image_url"), BUCKET)])
        return updated or {**current, **data}

    def delete_banner(self, banner_id: str) -> None:
        try:
            banner = self._get(banner_id)
            self.supabase.table("banners").delete().eq("id", banner_id).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting banner {banner_id}: {e}")
            raise UpstreamError("Erro ao excluir banner")
        self.storage.remove_quietly(BUCKET, [storage_path_from_url(banner.get("image_url"), BUCKET)])

    def position_report(self) -> Dict[str, Any]:
        try:
            banners = self._all("id, title, order_index")
        except Exception as e:
            logger.error(f"Error reading banner positions: {e}")
            raise UpstreamError("Erro ao buscar banners")
        return {
            "positioning": positioning([b["order_index"] for b in banners if b.get("order_index") is not None]),
            "banners": [{"id": b["id"], "title": b.get("title"), "position": b.get("order_index")} for b in banners],
        }

    def compact_positions(self) -> Dict[str, Any]:
        """Renumber banners 0..n-1 keeping their current relative order."""
        try:
            banners = self._all("id, title, order_index, created_at")
            banners.sort(key=lambda b: (b.get("order_index") is None, b.get("order_index") or 0, b.get("created_at") or ""))
            updated = 0
            for position, banner in enumerate(banners):
                if banner.get("order_index") != position:
                    self.supabase.table("banners").update({"order_index": position}).eq("id", banner["id"]).execute()
                    banner["order_index"] = position
                    updated += 1
        except Exception as e:
            logger.error(f"Error compacting banner positions: {e}")
            raise UpstreamError("Erro ao compactar posições")
        logger.info(f"Compacted banner positions, {updated} banners moved")
        message = (
            f"Posições compactadas com sucesso. {updated} banners reposicionados."
            if updated else "Posições já estavam organizadas sequencialmente."
        )
        return {
            "success": True,
            "message": message,
            "compaction": {"bannersUpdated": updated, "wasNeeded": updated > 0},
            "banners": [{"id": b["id"], "title": b.get("title"), "position": b["order_index"]} for b in banners],
        }

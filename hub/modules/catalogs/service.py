"""
Small lookup tables edited by admins and read by everyone. Lists are kept in
the shared read cache and dropped whenever the table changes.
"""

from typing import Any, Dict, List, Optional

from hub.core.cache import cache_key, read_cache
from hub.core.crud import CrudService


class CatalogService(CrudService):
    plural = ""
    singular = ""
    has_active_flag = False

    def list(self, active_only: bool = False) -> List[Dict[str, Any]]:
        active_only = active_only and self.has_active_flag
        key = cache_key(self.table, active_only=active_only)
        cached = read_cache.get(key)
        if cached is not None:
            return cached
        rows = super().list(active_only)
        read_cache.set(key, rows)
        return rows

    def _invalidate(self) -> None:
        read_cache.invalidate(f"{self.table}:")

    def create(self, payload: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        row = super().create(payload, user_id)
        self._invalidate()
        return row

    def update(self, row_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = super().update(row_id, payload)
        self._invalidate()
        return row

    def delete(self, row_id: str) -> Dict[str, Any]:
        row = super().delete(row_id)
        self._invalidate()
        return row


class EconomicIndicatorService(CatalogService):
    table = "economic_indicators"
    label = "Indicador"
    plural, singular = "indicators", "indicator"
    required = ("title", "value", "icon")
    order_by = "display_order"
    has_active_flag = True
    tracks_creator = True

    def defaults_for_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"is_active": data.get("is_active", True), "display_order": data.get("display_order", 0)}


class SystemLinkService(CatalogService):
    table = "system_links"
    label = "Link"
    plural, singular = "links", "link"
    required = ("name", "url")
    order_by = "display_order"
    has_active_flag = True
    tracks_creator = True

    def defaults_for_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"is_active": data.get("is_active", True), "display_order": data.get("display_order", 0)}


class WorkLocationService(CatalogService):
    table = "work_locations"
    label = "Local de trabalho"
    plural, singular = "work_locations", "work_location"
    required = ("name",)


class PositionService(CatalogService):
    table = "positions"
    label = "Cargo"
    plural, singular = "positions", "position"
    required = ("name",)


CATALOGS = {
    "economic-indicators": ("economic_indicators", EconomicIndicatorService),
    "system-links": ("system_links", SystemLinkService),
    "work-locations": ("work_locations", WorkLocationService),
    "positions": ("positions", PositionService),
}

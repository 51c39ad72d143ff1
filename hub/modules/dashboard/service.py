import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from supabase import Client

from hub.core.cache import read_cache
from hub.core.parallel import fetch_all

logger = logging.getLogger(__name__)

HOME_CACHE_KEY = "dashboard:home"
HOME_CACHE_TTL = 60
WINDOW_DAYS = 30


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _banners(self) -> List[Dict[str, Any]]:
        return self.supabase.table("banners").select("*").eq("is_active", True).order("order_index").limit(10).execute().data or []

    def _news(self) -> List[Dict[str, Any]]:
        return self.supabase.table("sector_news")\
            .select("*")\
            .eq("is_published", True)\
            .order("created_at", desc=True)\
            .limit(6)\
            .execute().data or []

    def _events(self) -> List[Dict[str, Any]]:
        return self.supabase.table("sector_events")\
            .select("*")\
            .eq("is_published", True)\
            .gte("start_date", datetime.now(timezone.utc).isoformat())\
            .order("start_date")\
            .limit(6)\
            .execute().data or []

    def _videos(self) -> List[Dict[str, Any]]:
        return self.supabase.table("dashboard_videos").select("*").eq("is_active", True).order("order_index").limit(8).execute().data or []

    def _gallery(self) -> List[Dict[str, Any]]:
        return self.supabase.table("gallery_images").select("*").eq("is_active", True).order("order_index").limit(12).execute().data or []

    def home(self) -> Dict[str, Any]:
        """Every home page widget in one response. A widget whose query fails comes back empty."""
        cached = read_cache.get(HOME_CACHE_KEY)
        if cached is not None:
            return cached
        slices, failed = fetch_all({
            "banners": self._banners,
            "news": self._news,
            "events": self._events,
            "videos": self._videos,
            "gallery": self._gallery,
        })
        succeeded = sorted(name for name in slices if name not in failed)
        logger.info(f"Dashboard fetch: {len(succeeded)} succeeded, {len(failed)} failed")
        payload = {**slices, "meta": {"succeeded": succeeded, "failed": failed}}
        if not failed:
            read_cache.set(HOME_CACHE_KEY, payload, ttl=HOME_CACHE_TTL)
        return payload

    def _count(self, table: str, published: bool = True, **ranges: str) -> int:
        query = self.supabase.table(table).select("id", count="exact")
        if published:
            query = query.eq("is_published", True)
        for key, value in ranges.items():
            column, op = key.rsplit("__", 1)
            query = getattr(query, op)(column, value)
        return query.execute().count or 0

    def stats(self) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        since = (now - timedelta(days=WINDOW_DAYS)).isoformat()
        until = (now + timedelta(days=WINDOW_DAYS)).isoformat()
        counts, failed = fetch_all({
            f"{scope}_{kind}": task
            for scope in ("sector", "subsector")
            for kind, task in (
                ("news", lambda s=scope: self._count(f"{s}_news", created_at__gte=since)),
                ("events", lambda s=scope: self._count(f"{s}_events", start_date__gte=now.isoformat(), start_date__lte=until)),
                ("messages", lambda s=scope: self._count(f"{s}_messages", published=False, created_at__gte=since)),
            )
        }, default=int)
        return {
            "news": counts["sector_news"] + counts["subsector_news"],
            "events": counts["sector_events"] + counts["subsector_events"],
            "messages": counts["sector_messages"] + counts["subsector_messages"],
            "period_days": WINDOW_DAYS,
            "failed": failed,
        }

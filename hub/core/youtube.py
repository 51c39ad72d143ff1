import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)

THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

_YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com"}
_SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
_PATH_PREFIXES = ("/embed/", "/shorts/", "/v/", "/live/")
_VIDEO_ID = re.compile(r"^[\w-]+$")


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    """Return the video id of a YouTube URL, or None when the URL is not one. Never raises."""
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        logger.debug("Unparseable video URL: %s", url)
        return None

    host = (parsed.hostname or "").lower()
    candidate = None
    if host in _SHORT_HOSTS:
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host in _YOUTUBE_HOSTS:
        if parsed.path == "/watch":
            candidate = (parse_qs(parsed.query).get("v") or [None])[0]
        else:
            for prefix in _PATH_PREFIXES:
                if parsed.path.startswith(prefix):
                    candidate = parsed.path[len(prefix):].split("/")[0]
                    break

    if candidate and _VIDEO_ID.match(candidate):
        return candidate
    return None


def youtube_thumbnail(url: Optional[str]) -> Optional[str]:
    video_id = extract_youtube_id(url)
    if video_id is None:
        return None
    return THUMBNAIL_URL.format(video_id=video_id)

"""Tests for YouTube URL parsing."""

from __future__ import annotations

import pytest

from hub.core.youtube import extract_youtube_id, youtube_thumbnail


class TestExtractYoutubeId:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
        ],
    )
    def test_known_shapes(self, url: str) -> None:
        assert extract_youtube_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize(
        "url",
        [None, "", "not a url", "https://vimeo.com/12345", "https://www.youtube.com/watch", "https://youtu.be/"],
    )
    def test_non_youtube_returns_none(self, url: str | None) -> None:
        assert extract_youtube_id(url) is None

    def test_rejects_ids_with_odd_characters(self) -> None:
        assert extract_youtube_id("https://www.youtube.com/watch?v=abc<script>") is None


def test_thumbnail_url() -> None:
    assert youtube_thumbnail("https://youtu.be/abc123") == "https://img.youtube.com/vi/abc123/maxresdefault.jpg"
    assert youtube_thumbnail("https://example.com/video.mp4") is None

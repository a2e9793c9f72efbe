"""Cross-cutting helpers: constants, duration parsing, rich-text blocks."""

from __future__ import annotations

import re
from typing import Any, Iterator, Optional, Sequence, TypeVar

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

YOUTUBE_MAX_RESULTS = 50
SHORTS_MAX_SECONDS = 60
DEFAULT_DOCUMENT_TYPE = "videoarticle"
DEFAULT_LANG = "es-es"
SOURCE_ID_FIELD = "youtube_video_id"
UNTITLED_VIDEO = "Video Sin Título"
THUMBNAIL_PREFERENCE = ("maxres", "standard", "high", "medium", "default")
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
META_TITLE_LENGTH = 60
META_DESCRIPTION_LENGTH = 160

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


# ---------------------------------------------------------------------------
# Duration / short-form filter
# ---------------------------------------------------------------------------


def parse_iso_duration(value: Optional[str]) -> int:
    """Convert an ISO-8601 period such as ``PT1M35S`` to seconds (0 if unknown)."""
    if not value:
        return 0
    match = _DURATION_RE.search(value)
    if not match:
        return 0
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def is_long_form(duration: Optional[str], threshold: int = SHORTS_MAX_SECONDS) -> bool:
    """Keep unknown (zero) durations and anything strictly above *threshold*."""
    seconds = parse_iso_duration(duration)
    return seconds == 0 or seconds > threshold


# ---------------------------------------------------------------------------
# Sequence helpers
# ---------------------------------------------------------------------------


def batched(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of *items* with at most *size* elements."""
    if size < 1:
        raise ValueError("batch size must be positive")
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


def strip_nulls(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is explicitly ``None``."""
    return {key: value for key, value in data.items() if value is not None}


def pick_thumbnail_url(thumbnails: dict[str, str]) -> Optional[str]:
    for tier in THUMBNAIL_PREFERENCE:
        url = thumbnails.get(tier)
        if url:
            return url
    return None


# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------


def paragraph(text: str) -> dict[str, Any]:
    return {"type": "paragraph", "text": text, "spans": []}


def heading(text: str, level: int = 1) -> list[dict[str, Any]]:
    return [{"type": f"heading{level}", "text": text, "spans": []}]


def to_paragraphs(text: Optional[str]) -> list[dict[str, Any]]:
    """Split *text* into one paragraph block per non-empty trimmed line."""
    if not text:
        return []
    lines = (line.strip() for line in text.strip().split("\n"))
    return [paragraph(line) for line in lines if line]


def publication_date(published_at: Optional[str]) -> Optional[str]:
    """Return the ``YYYY-MM-DD`` part of an RFC 3339 timestamp."""
    if not published_at:
        return None
    return published_at.split("T", 1)[0] or None

"""YouTube Data API integration: uploads playlist paging and video details."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Sequence

from .models import SourceItem
from .utils import YOUTUBE_MAX_RESULTS, batched

log = logging.getLogger(__name__)


def build_youtube_service(api_key: str):
    """Create a YouTube Data API v3 client authenticated with an API key."""
    from googleapiclient.discovery import build

    return build("youtube", "v3", developerKey=api_key, cache_discovery=False)


# ---------------------------------------------------------------------------
# Source lister
# ---------------------------------------------------------------------------


def list_playlist_video_ids(
    service,
    playlist_id: str,
    *,
    page_size: int = YOUTUBE_MAX_RESULTS,
    max_pages: int = 3,
    max_items: int = 50,
    delay_s: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> list[str]:
    """Collect video IDs from a playlist, newest first, up to *max_items*.

    A failure on the first page propagates. A failure on a later page is
    logged and the IDs collected so far are returned.
    """
    video_ids: list[str] = []
    page_token = None
    pages_fetched = 0
    while True:
        pages_fetched += 1
        log.info("Fetching playlist page %s ...", pages_fetched)
        try:
            response = (
                service.playlistItems()
                .list(
                    part="contentDetails",
                    playlistId=playlist_id,
                    maxResults=page_size,
                    pageToken=page_token,
                )
                .execute()
            )
        except Exception as exc:
            if pages_fetched == 1:
                raise
            log.error(
                "Playlist page %s failed (%s); keeping %s IDs collected so far",
                pages_fetched,
                exc,
                len(video_ids),
            )
            break

        items = response.get("items")
        if not items:
            log.info("No more playlist items.")
            break
        ids = [
            (item.get("contentDetails") or {}).get("videoId")
            for item in items
        ]
        ids = [video_id for video_id in ids if video_id]
        video_ids.extend(ids)
        log.info("  +%s IDs (total %s)", len(ids), len(video_ids))

        page_token = response.get("nextPageToken")
        if len(video_ids) >= max_items:
            log.info("Reached limit of %s IDs to check.", max_items)
            break
        if not page_token or pages_fetched >= max_pages:
            break
        sleep(delay_s)

    return video_ids[:max_items]


# ---------------------------------------------------------------------------
# Detail fetcher
# ---------------------------------------------------------------------------


def fetch_video_details(
    service,
    video_ids: Sequence[str],
    *,
    batch_size: int = YOUTUBE_MAX_RESULTS,
    delay_s: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> list[SourceItem]:
    """Resolve snippet and duration for *video_ids* in batches.

    Failed batches are logged and left out of the result.
    """
    details: list[SourceItem] = []
    batch_size = min(batch_size, YOUTUBE_MAX_RESULTS)
    batches = list(batched(video_ids, batch_size))
    for index, batch in enumerate(batches):
        log.info("Fetching details for a batch of %s videos ...", len(batch))
        try:
            response = (
                service.videos()
                .list(part="snippet,contentDetails", id=",".join(batch))
                .execute()
            )
        except Exception as exc:
            log.error("Detail batch [%s] failed: %s", ",".join(batch), exc)
            response = {}
        items: list[dict[str, Any]] = response.get("items") or []
        details.extend(SourceItem.from_api(item) for item in items)
        if index + 1 < len(batches):
            sleep(delay_s)
    return details

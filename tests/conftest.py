"""Shared fixtures for the importer test suite.

YouTube and Prismic are replaced by in-memory fakes; nothing touches the
network and every configured delay is zero.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import pytest

from yt_importer import ImporterConfig, MigrationEvent

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)

REQUIRED_ENV = {
    "YOUTUBE_API_KEY": "yt-key",
    "PRISMIC_API_ENDPOINT": "https://recetas.cdn.prismic.io/api/v2",
    "PRISMIC_WRITE_TOKEN": "write-token",
    "YOUTUBE_UPLOADS_PLAYLIST_ID": "UU123",
    "PRISMIC_REPO_NAME": "recetas",
}


def make_video(
    video_id: str,
    *,
    duration: str = "PT5M",
    title: str | None = None,
    description: str = "",
    thumbnails: dict[str, str] | None = None,
    published_at: str = "2024-03-01T10:00:00Z",
) -> dict[str, Any]:
    """Build a ``videos.list`` resource as returned by the Data API."""
    if thumbnails is None:
        thumbnails = {
            "high": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
            "maxres": f"https://i.ytimg.com/vi/{video_id}/maxresdefault.jpg",
        }
    return {
        "id": video_id,
        "snippet": {
            "title": f"Receta {video_id}" if title is None else title,
            "description": description,
            "publishedAt": published_at,
            "thumbnails": {tier: {"url": url} for tier, url in thumbnails.items()},
        },
        "contentDetails": {"duration": duration},
    }


class _Request:
    def __init__(self, handler, kwargs):
        self._handler = handler
        self._kwargs = kwargs

    def execute(self):
        return self._handler(self._kwargs)


class _Resource:
    def __init__(self, handler):
        self._handler = handler

    def list(self, **kwargs):
        return _Request(self._handler, kwargs)


class FakeYouTube:
    """Mimics ``service.playlistItems().list(...).execute()`` chains.

    *pages* holds one list of video IDs (or an exception) per playlist page.
    """

    def __init__(self, pages, videos=None, failing_ids=()):
        self.pages = pages
        self.video_map = {v["id"]: v for v in (videos or [])}
        self.failing_ids = set(failing_ids)
        self.playlist_calls: list[dict[str, Any]] = []
        self.video_calls: list[dict[str, Any]] = []

    def playlistItems(self):
        return _Resource(self._playlist_page)

    def videos(self):
        return _Resource(self._video_batch)

    def _playlist_page(self, kwargs):
        self.playlist_calls.append(kwargs)
        token = kwargs.get("pageToken")
        index = int(token[len("page"):]) if token else 0
        page = self.pages[index]
        if isinstance(page, Exception):
            raise page
        response: dict[str, Any] = {
            "items": [{"contentDetails": {"videoId": vid}} for vid in page]
        }
        if index + 1 < len(self.pages):
            response["nextPageToken"] = f"page{index + 1}"
        return response

    def _video_batch(self, kwargs):
        self.video_calls.append(kwargs)
        ids = kwargs["id"].split(",")
        if self.failing_ids.intersection(ids):
            raise RuntimeError("quota exceeded")
        return {"items": [self.video_map[vid] for vid in ids if vid in self.video_map]}


class FakePrismic:
    """In-memory stand-in for :class:`yt_importer.PrismicClient`."""

    def __init__(self, existing=(), errors=None, migrate_error=None):
        self.existing = set(existing)
        self.errors = dict(errors or {})
        self.migrate_error = migrate_error
        self.queries: list[str] = []
        self.migrations: list[Any] = []

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return None

    def get_first(self, predicates, fetch=None):
        video_id = json.loads(predicates[0].split(", ", 1)[1][:-2])
        self.queries.append(video_id)
        if video_id in self.errors:
            raise self.errors[video_id]
        if video_id in self.existing:
            return {"id": f"doc-{video_id}"}
        return None

    def migrate(self, batch, reporter=None):
        self.migrations.append(batch)
        if self.migrate_error is not None:
            raise self.migrate_error
        if reporter is not None:
            for document in batch.documents:
                reporter(MigrationEvent("document:create", "done", document.label))
        return [f"new-{doc.video_id}" for doc in batch.documents]


@pytest.fixture
def config() -> ImporterConfig:
    return ImporterConfig(
        youtube_api_key="yt-key",
        prismic_api_endpoint=REQUIRED_ENV["PRISMIC_API_ENDPOINT"],
        prismic_write_token="write-token",
        playlist_id="UU123",
        prismic_repo_name="recetas",
        max_videos_to_import=10,
        api_delay_ms=0,
    )


@pytest.fixture
def no_sleep():
    """A sleep replacement that records requested delays."""
    calls: list[float] = []

    def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep

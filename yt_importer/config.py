"""Run-time configuration loaded from environment variables.

Values may be preloaded from a ``.env`` file. Required settings are checked
up front so a misconfigured run aborts before any network call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .utils import (
    DEFAULT_DOCUMENT_TYPE,
    DEFAULT_LANG,
    SHORTS_MAX_SECONDS,
    YOUTUBE_MAX_RESULTS,
)

REQUIRED_VARS = (
    "YOUTUBE_API_KEY",
    "PRISMIC_API_ENDPOINT",
    "PRISMIC_WRITE_TOKEN",
    "YOUTUBE_UPLOADS_PLAYLIST_ID",
    "PRISMIC_REPO_NAME",
)


class ConfigError(Exception):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class ImporterConfig:
    youtube_api_key: str
    prismic_api_endpoint: str
    prismic_write_token: str
    playlist_id: str
    prismic_repo_name: str
    prismic_access_token: Optional[str] = None
    prismic_migration_api_key: Optional[str] = None
    document_type: str = DEFAULT_DOCUMENT_TYPE
    lang: str = DEFAULT_LANG
    max_videos_to_check: int = 50
    max_videos_to_import: int = 1
    max_playlist_pages: int = 3
    page_size: int = YOUTUBE_MAX_RESULTS
    detail_batch_size: int = YOUTUBE_MAX_RESULTS
    api_delay_ms: int = 500
    shorts_max_seconds: int = SHORTS_MAX_SECONDS

    @property
    def api_delay_s(self) -> float:
        return self.api_delay_ms / 1000.0

    @property
    def read_token(self) -> str:
        return self.prismic_access_token or self.prismic_write_token


def _int_setting(
    env: Mapping[str, str],
    name: str,
    default: int,
    *,
    minimum: int = 1,
    maximum: Optional[int] = None,
) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None:
        value = min(value, maximum)
    return value


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    *,
    env_file: Optional[Path] = None,
) -> ImporterConfig:
    """Build an :class:`ImporterConfig` from *environ* (``os.environ`` by default).

    When reading the process environment, a ``.env`` file is loaded first
    without overriding variables that are already set.
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file)
        environ = os.environ

    missing = [name for name in REQUIRED_VARS if not environ.get(name, "").strip()]
    if missing:
        raise ConfigError(
            "Missing essential environment variables: " + ", ".join(missing)
        )

    return ImporterConfig(
        youtube_api_key=environ["YOUTUBE_API_KEY"].strip(),
        prismic_api_endpoint=environ["PRISMIC_API_ENDPOINT"].strip().rstrip("/"),
        prismic_write_token=environ["PRISMIC_WRITE_TOKEN"].strip(),
        playlist_id=environ["YOUTUBE_UPLOADS_PLAYLIST_ID"].strip(),
        prismic_repo_name=environ["PRISMIC_REPO_NAME"].strip(),
        prismic_access_token=environ.get("PRISMIC_ACCESS_TOKEN", "").strip() or None,
        prismic_migration_api_key=(
            environ.get("PRISMIC_MIGRATION_API_KEY", "").strip() or None
        ),
        document_type=environ.get("PRISMIC_CUSTOM_TYPE", "").strip()
        or DEFAULT_DOCUMENT_TYPE,
        lang=environ.get("PRISMIC_LANG", "").strip() or DEFAULT_LANG,
        max_videos_to_check=_int_setting(environ, "MAX_VIDEOS_TO_CHECK", 50),
        max_videos_to_import=_int_setting(environ, "MAX_VIDEOS_TO_IMPORT", 1),
        max_playlist_pages=_int_setting(environ, "MAX_PLAYLIST_PAGES", 3),
        page_size=_int_setting(
            environ,
            "YOUTUBE_PAGE_SIZE",
            YOUTUBE_MAX_RESULTS,
            maximum=YOUTUBE_MAX_RESULTS,
        ),
        detail_batch_size=_int_setting(
            environ,
            "YOUTUBE_DETAIL_BATCH_SIZE",
            YOUTUBE_MAX_RESULTS,
            maximum=YOUTUBE_MAX_RESULTS,
        ),
        api_delay_ms=_int_setting(environ, "YOUTUBE_API_DELAY_MS", 500, minimum=0),
        shorts_max_seconds=_int_setting(
            environ, "SHORTS_MAX_SECONDS", SHORTS_MAX_SECONDS, minimum=0
        ),
    )

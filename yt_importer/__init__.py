"""YouTube uploads -> Prismic video articles importer.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from yt_importer import X`` works.
"""

from .commit import commit_batch, is_permission_error, log_migration_event
from .config import ConfigError, ImporterConfig, load_config
from .dedup import Existence, check_exists, is_unrecognized_field_error
from .extraction import SECTION_RULES, SectionRule, extract_content, short_description
from .models import (
    CandidateDocument,
    ImportReport,
    MigrationBatch,
    MigrationEvent,
    SourceItem,
    StagedAsset,
)
from .prismic import (
    AssetDownloadError,
    PrismicClient,
    PrismicError,
    PrismicForbiddenError,
    PrismicNotFoundError,
    PrismicParsingError,
    at_predicate,
)
from .sources import build_youtube_service, fetch_video_details, list_playlist_video_ids
from .staging import build_document_data, stage_candidates, stage_document
from .utils import (
    SHORTS_MAX_SECONDS,
    is_long_form,
    parse_iso_duration,
    pick_thumbnail_url,
    strip_nulls,
    to_paragraphs,
)

__all__ = [
    # Models
    "SourceItem",
    "StagedAsset",
    "CandidateDocument",
    "MigrationBatch",
    "MigrationEvent",
    "ImportReport",
    # Config
    "ConfigError",
    "ImporterConfig",
    "load_config",
    # Utils
    "SHORTS_MAX_SECONDS",
    "parse_iso_duration",
    "is_long_form",
    "pick_thumbnail_url",
    "strip_nulls",
    "to_paragraphs",
    # Sources
    "build_youtube_service",
    "list_playlist_video_ids",
    "fetch_video_details",
    # Extraction
    "SectionRule",
    "SECTION_RULES",
    "extract_content",
    "short_description",
    # Prismic
    "AssetDownloadError",
    "PrismicClient",
    "PrismicError",
    "PrismicParsingError",
    "PrismicForbiddenError",
    "PrismicNotFoundError",
    "at_predicate",
    # Dedup
    "Existence",
    "check_exists",
    "is_unrecognized_field_error",
    # Staging
    "build_document_data",
    "stage_document",
    "stage_candidates",
    # Commit
    "commit_batch",
    "is_permission_error",
    "log_migration_event",
]

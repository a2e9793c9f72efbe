"""Shared data models for the importer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class SourceItem:
    """Snapshot of one upstream video, fetched once per run."""

    video_id: str
    title: str = ""
    description: str = ""
    published_at: str = ""
    thumbnails: dict[str, str] = field(default_factory=dict)
    duration: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "SourceItem":
        """Build from a ``videos.list`` resource (snippet + contentDetails)."""
        snippet = item.get("snippet") or {}
        details = item.get("contentDetails") or {}
        thumbnails = {
            tier: thumb["url"]
            for tier, thumb in (snippet.get("thumbnails") or {}).items()
            if isinstance(thumb, dict) and thumb.get("url")
        }
        return cls(
            video_id=item.get("id", ""),
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            published_at=snippet.get("publishedAt") or "",
            thumbnails=thumbnails,
            duration=details.get("duration") or "",
        )


@dataclass
class StagedAsset:
    """A remote file the destination store should fetch and host."""

    url: str
    filename: str
    alt: str = ""
    asset_id: Optional[str] = None


@dataclass
class CandidateDocument:
    """A document-creation request that has not been committed yet."""

    video_id: str
    document_type: str
    lang: str
    data: dict[str, Any]
    label: str
    uid: Optional[str] = None


@dataclass
class MigrationEvent:
    """Progress notification emitted while a batch is submitted."""

    type: str
    status: str
    message: str = ""


@dataclass
class MigrationBatch:
    """Ordered pending asset registrations and document creations."""

    assets: list[StagedAsset] = field(default_factory=list)
    documents: list[CandidateDocument] = field(default_factory=list)

    def create_asset(self, url: str, filename: str, alt: str = "") -> StagedAsset:
        """Register *url*; registering the same URL twice returns the first entry."""
        if not url:
            raise ValueError("asset URL is required")
        for asset in self.assets:
            if asset.url == url:
                return asset
        asset = StagedAsset(url=url, filename=filename, alt=alt)
        self.assets.append(asset)
        return asset

    def create_document(self, document: CandidateDocument) -> CandidateDocument:
        self.documents.append(document)
        return document

    def __len__(self) -> int:
        return len(self.assets) + len(self.documents)

    @property
    def is_empty(self) -> bool:
        return not self.documents


@dataclass
class ImportReport:
    """Per-phase counts for one importer run."""

    ids_listed: int = 0
    details_fetched: int = 0
    long_form: int = 0
    skipped_existing: int = 0
    staged: int = 0
    assets_staged: int = 0
    committed: bool = False
    commit_error: Optional[str] = None
    staged_ids: list[str] = field(default_factory=list)

"""Assemble Prismic documents for new videos and stage them in a batch."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from .config import ImporterConfig
from .dedup import Existence, check_exists
from .extraction import extract_content
from .models import CandidateDocument, MigrationBatch, SourceItem, StagedAsset
from .prismic import PrismicClient
from .utils import (
    META_DESCRIPTION_LENGTH,
    META_TITLE_LENGTH,
    SOURCE_ID_FIELD,
    UNTITLED_VIDEO,
    WATCH_URL,
    heading,
    pick_thumbnail_url,
    publication_date,
    strip_nulls,
)

log = logging.getLogger(__name__)

ExistenceCheck = Callable[[PrismicClient, str, str], Existence]


def register_thumbnail(
    batch: MigrationBatch,
    item: SourceItem,
    title: str,
) -> Optional[StagedAsset]:
    """Register the best available thumbnail; None when missing or rejected."""
    url = pick_thumbnail_url(item.thumbnails)
    if not url:
        log.warning("No thumbnail URL for video %s", item.video_id)
        return None
    filename = f"{item.video_id or 'video_thumbnail'}.jpg"
    try:
        asset = batch.create_asset(url, filename, alt=title)
    except Exception as exc:
        log.error(
            "Failed to register asset for %s from %s: %s", item.video_id, url, exc
        )
        return None
    log.debug("Registered thumbnail asset %s for %s", url, item.video_id)
    return asset


def build_document_data(
    item: SourceItem,
    image: Optional[StagedAsset],
) -> dict[str, Any]:
    """Map a video onto the ``videoarticle`` fields, nulls removed."""
    title = item.title or UNTITLED_VIDEO
    content = extract_content(item.description)
    short = content["short_description"]
    meta_description = (short[0]["text"] if short else title)[:META_DESCRIPTION_LENGTH]
    data: dict[str, Any] = {
        "title": heading(title),
        SOURCE_ID_FIELD: item.video_id,
        "publication_date": publication_date(item.published_at),
        "featured_image": image,
        "social_card_image": image,
        "video_embed": (
            {"embed_url": WATCH_URL.format(video_id=item.video_id)}
            if item.video_id
            else None
        ),
        "short_description": short,
        "ingredients": content["ingredients"],
        "instructions": content["instructions"],
        "meta_title": title[:META_TITLE_LENGTH],
        "meta_description": meta_description,
    }
    return strip_nulls(data)


def stage_document(
    batch: MigrationBatch,
    item: SourceItem,
    config: ImporterConfig,
) -> CandidateDocument:
    title = item.title or UNTITLED_VIDEO
    image = register_thumbnail(batch, item, title)
    document = CandidateDocument(
        video_id=item.video_id,
        document_type=config.document_type,
        lang=config.lang,
        data=build_document_data(item, image),
        label=f"YT Import: {title}",
    )
    return batch.create_document(document)


def stage_candidates(
    items: Iterable[SourceItem],
    batch: MigrationBatch,
    prismic: PrismicClient,
    config: ImporterConfig,
    *,
    exists: ExistenceCheck = check_exists,
) -> tuple[list[CandidateDocument], int]:
    """Stage up to ``config.max_videos_to_import`` new videos, in order.

    Returns (staged documents, number skipped because they already exist).
    Once the cap is reached the remaining items are not checked.
    """
    staged: list[CandidateDocument] = []
    skipped = 0
    for item in items:
        if len(staged) >= config.max_videos_to_import:
            log.info(
                "Reached import limit of %s for this run.",
                config.max_videos_to_import,
            )
            break

        log.info("Processing %r (ID: %s)", item.title or UNTITLED_VIDEO, item.video_id)
        if any(doc.video_id == item.video_id for doc in staged):
            log.info("  Already staged in this run; skipping.")
            continue
        if exists(prismic, item.video_id, config.document_type) is Existence.EXISTS:
            log.info("  Already in Prismic (or check failed); skipping.")
            skipped += 1
            continue

        try:
            document = stage_document(batch, item, config)
        except Exception as exc:
            log.error("Failed to stage document for %s: %s", item.video_id, exc)
            continue
        staged.append(document)
        log.info("  Staged document.create for %s", item.video_id)
    return staged, skipped

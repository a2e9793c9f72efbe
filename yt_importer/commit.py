"""Submit a staged migration batch and report what happened."""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from .models import MigrationBatch, MigrationEvent
from .prismic import AssetDownloadError, PrismicClient, Reporter

log = logging.getLogger(__name__)


def log_migration_event(event: MigrationEvent) -> None:
    level = logging.ERROR if event.status == "failed" else logging.INFO
    log.log(
        level,
        "[migration] type=%s status=%s %s",
        event.type,
        event.status,
        event.message,
    )


def _status_of(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    return status if isinstance(status, int) else None


def is_permission_error(exc: BaseException) -> bool:
    """True when Prismic (or the error behind it) answered with HTTP 403.

    Status codes decide when present; the message text is only consulted
    when neither the error nor its cause carries one.
    """
    if isinstance(exc, AssetDownloadError):
        return False
    status = _status_of(exc)
    if status is not None:
        return status == 403
    cause = exc.__cause__
    if cause is not None:
        cause_status = _status_of(cause)
        if cause_status is not None:
            return cause_status == 403
    text = str(cause) if cause is not None else str(exc)
    return re.search(r"\b403\b", text) is not None


def describe_failure(exc: BaseException) -> None:
    log.error("Migration failed: %s", exc)
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        log.error("  Status: %s", status_code)
    if exc.__cause__ is not None:
        log.error("  Cause: %r", exc.__cause__)
    body = getattr(exc, "body", None)
    if body:
        log.error(
            "  Data: %s",
            json.dumps(body, indent=2, ensure_ascii=False, default=str),
        )
    if is_permission_error(exc):
        log.error(
            "  403 detected: check that PRISMIC_WRITE_TOKEN is valid "
            "and has write access."
        )


def commit_batch(
    prismic: PrismicClient,
    batch: MigrationBatch,
    reporter: Optional[Reporter] = log_migration_event,
) -> tuple[bool, Optional[str]]:
    """Send *batch* in one migration. Returns (submitted, error message).

    An empty batch is skipped. Failures are logged and never re-raised.
    """
    if batch.is_empty:
        log.info("No new documents to migrate in this run.")
        return False, None

    log.info(
        "Running migration for %s document(s) and %s asset(s) ...",
        len(batch.documents),
        len(batch.assets),
    )
    try:
        prismic.migrate(batch, reporter=reporter)
    except Exception as exc:
        describe_failure(exc)
        return False, str(exc)

    log.info("Migration submitted; Prismic processes the operations asynchronously.")
    return True, None

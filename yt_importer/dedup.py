"""Duplicate detection against documents already stored in Prismic."""

from __future__ import annotations

import enum
import logging

from .prismic import PrismicClient, PrismicParsingError, at_predicate
from .utils import SOURCE_ID_FIELD

log = logging.getLogger(__name__)


class Existence(enum.Enum):
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


def field_path(document_type: str, field_name: str = SOURCE_ID_FIELD) -> str:
    return f"my.{document_type}.{field_name}"


def is_unrecognized_field_error(exc: BaseException, path: str) -> bool:
    """True for the Content API parsing error that rejects *path* as unknown.

    Prismic answers some queries on custom key fields with
    ``unexpected field '<path>'`` even though the field exists. Such a
    response says nothing about whether the document exists.
    """
    return isinstance(exc, PrismicParsingError) and (
        f"unexpected field '{path}'" in str(exc)
    )


def check_exists(
    prismic: PrismicClient,
    video_id: str,
    document_type: str,
    field_name: str = SOURCE_ID_FIELD,
) -> Existence:
    """Look up *video_id* by its key field.

    Unexplained query failures report EXISTS so the video is skipped rather
    than imported twice. The unrecognized-field parsing error reports
    NOT_EXISTS so the video is still imported.
    """
    path = field_path(document_type, field_name)
    # fetch is narrowed to the key field, so a hit returns no other document data
    try:
        document = prismic.get_first(
            [at_predicate(path, video_id)],
            fetch=[f"{document_type}.{field_name}"],
        )
    except Exception as exc:
        if is_unrecognized_field_error(exc, path):
            log.warning(
                "Ignoring known parsing error for %s (%s); assuming it does not exist",
                video_id,
                path,
            )
            return Existence.NOT_EXISTS
        log.error("Unexpected error checking %s, assuming it exists: %s", video_id, exc)
        return Existence.EXISTS
    return Existence.EXISTS if document else Existence.NOT_EXISTS

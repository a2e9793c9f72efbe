"""Recipe content extraction from free-text video descriptions.

Sections are located with a small rule table: each rule names the target
field, the header keywords that open the section and the headers that close
it. A missing header yields an empty list for that field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .utils import to_paragraphs

INGREDIENT_HEADERS = (r"INGREDIENTES[:\s]+",)
INSTRUCTION_HEADERS = (r"PREPARACIÓN:", r"PASOS:", r"ELABORACIÓN:?")
# inside the ingredients list only a header with its colon ends the section
INGREDIENT_TERMINATORS = (r"PREPARACIÓN:", r"PASOS:", r"ELABORACIÓN:")

SHORT_DESCRIPTION_LENGTH = 250
SENTENCE_MIN_OFFSET = 100
ELLIPSIS = "..."


@dataclass(frozen=True)
class SectionRule:
    """Maps a set of header keywords to an output field."""

    name: str
    headers: tuple[str, ...]
    terminators: tuple[str, ...] = ()
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        start = "(?:" + "|".join(self.headers) + ")"
        if self.terminators:
            end = "(?:" + "|".join(self.terminators) + r"|\Z)"
            body = r"([\s\S]*?)" + end
        else:
            body = r"([\s\S]*)"
        object.__setattr__(self, "pattern", re.compile(start + body, re.IGNORECASE))

    def extract(self, text: str) -> str:
        match = self.pattern.search(text)
        return match.group(1) if match else ""


SECTION_RULES = (
    SectionRule("ingredients", INGREDIENT_HEADERS, terminators=INGREDIENT_TERMINATORS),
    SectionRule("instructions", INSTRUCTION_HEADERS),
)


def short_description(
    text: Optional[str],
    limit: int = SHORT_DESCRIPTION_LENGTH,
    min_offset: int = SENTENCE_MIN_OFFSET,
) -> str:
    """Trim *text* to *limit* characters, ending on a sentence when possible."""
    text = text or ""
    snippet = text[:limit]
    last_period = snippet.rfind(".")
    if last_period > min_offset:
        return snippet[: last_period + 1]
    if len(text) > limit:
        return snippet + ELLIPSIS
    return snippet


def extract_content(
    description: Optional[str],
    rules: tuple[SectionRule, ...] = SECTION_RULES,
) -> dict[str, list[dict[str, Any]]]:
    """Return ``short_description`` plus one paragraph list per rule field."""
    description = description or ""
    content = {rule.name: to_paragraphs(rule.extract(description)) for rule in rules}
    content["short_description"] = to_paragraphs(short_description(description))
    return content

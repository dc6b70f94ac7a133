# src/parsing/parser.py — v2
"""Parse the vision model's free-text answer into named fields.

Two answer shapes are in circulation and both must parse:

* rich: labelled sections ``TYPE:``, ``CATEGORY:``, … ``DESCRIPTION:``,
  ``EXTRACTED_TEXT:``. Selected when both ``TYPE:`` and ``SUBJECT:`` appear
  at the start of a line.
* legacy: only ``DESCRIPTION:`` and ``EXTRACTED_TEXT:``.

Labels are only recognised at line start and only from the canonical set,
so a body line such as ``Note: see below`` never opens a new section.
Parsing never raises; text without any label becomes the description.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel

SUBJECT_MAX_CHARS = 80
DEFAULT_TYPE = "other"

RICH_LABELS: tuple[str, ...] = (
    "TYPE",
    "CATEGORY",
    "STYLE",
    "MOOD",
    "MEDIUM",
    "COMPOSITION",
    "PALETTE",
    "SUBJECT",
    "COLORS",
    "TAGS",
    "DESCRIPTION",
    "EXTRACTED_TEXT",
)
LEGACY_LABELS: tuple[str, ...] = ("DESCRIPTION", "EXTRACTED_TEXT")

# Sections whose literal "none" means "nothing found"
_NONE_AWARE_FIELDS = frozenset({
    "category", "style", "mood", "medium", "composition",
    "palette", "colors", "tags", "subject", "extracted_text",
})


def _label_pattern(labels: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(r"^(%s):" % "|".join(labels), re.MULTILINE)


_RICH_PATTERN = _label_pattern(RICH_LABELS)
_LEGACY_PATTERN = _label_pattern(LEGACY_LABELS)
_TYPE_LABEL = re.compile(r"^TYPE:", re.MULTILINE)
_SUBJECT_LABEL = re.compile(r"^SUBJECT:", re.MULTILINE)


class ParsedResponse(BaseModel):
    """Field decomposition of one provider answer. Every field defaults to ""."""

    type: str = DEFAULT_TYPE
    category: str = ""
    style: str = ""
    mood: str = ""
    medium: str = ""
    composition: str = ""
    palette: str = ""
    subject: str = ""
    colors: str = ""
    tags: str = ""
    description: str = ""
    extracted_text: str = ""

    def fields(self) -> dict[str, str]:
        """Plain field map, without the format tag."""
        return self.model_dump(exclude={"format"})


class RichResponse(ParsedResponse):
    format: Literal["rich"] = "rich"


class LegacyResponse(ParsedResponse):
    format: Literal["legacy"] = "legacy"


def is_rich_format(raw_text: str) -> bool:
    """Rich format requires both a TYPE: and a SUBJECT: label."""
    return bool(_TYPE_LABEL.search(raw_text) and _SUBJECT_LABEL.search(raw_text))


def parse_response(raw_text: str) -> RichResponse | LegacyResponse:
    """Parse a model answer, picking the format by content sniffing."""
    if is_rich_format(raw_text):
        return _parse_rich(raw_text)
    return _parse_legacy(raw_text)


def _parse_rich(raw_text: str) -> RichResponse:
    sections = split_sections(raw_text, _RICH_PATTERN)
    values = {
        label.lower(): _clean(label.lower(), body)
        for label, body in sections.items()
    }

    palette = values.get("palette", "")
    return RichResponse(
        type=values.get("type", "").lower() or DEFAULT_TYPE,
        category=values.get("category", ""),
        style=values.get("style", ""),
        mood=values.get("mood", ""),
        medium=values.get("medium", ""),
        composition=values.get("composition", ""),
        palette=palette,
        subject=_single_line(values.get("subject", ""))[:SUBJECT_MAX_CHARS],
        colors=palette or values.get("colors", ""),
        tags=values.get("tags", ""),
        description=values.get("description", ""),
        extracted_text=values.get("extracted_text", ""),
    )


def _parse_legacy(raw_text: str) -> LegacyResponse:
    sections = split_sections(raw_text, _LEGACY_PATTERN)
    if "DESCRIPTION" not in sections:
        return LegacyResponse(description=raw_text.strip())
    return LegacyResponse(
        description=sections["DESCRIPTION"],
        extracted_text=_clean("extracted_text", sections.get("EXTRACTED_TEXT", "")),
    )


def split_sections(raw_text: str, pattern: re.Pattern[str]) -> dict[str, str]:
    """Map each label matched by ``pattern`` to its trimmed body.

    A body runs from the end of its label to the start of the next matched
    label (or end of text). When a label repeats, the first one wins.
    """
    matches = list(pattern.finditer(raw_text))
    sections: dict[str, str] = {}
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(raw_text)
        label = match.group(1)
        if label not in sections:
            sections[label] = raw_text[match.end():end].strip()
    return sections


def _clean(field: str, body: str) -> str:
    body = body.strip()
    if field in _NONE_AWARE_FIELDS and body.lower() == "none":
        return ""
    return body


def _single_line(text: str) -> str:
    return " ".join(text.split())

"""Text normalization helpers.

Centralizes the defensive parsing of free text coming from users and
from external providers.
"""

from __future__ import annotations

import html
import re
import unicodedata

_TAG_RE = re.compile(r"<[^>]*>?")
_SPACE_RE = re.compile(r"\s+")
# "1. ", "2) ", "- ", "* " prefixes that chat models like to add to lists.
_LIST_PREFIX_RE = re.compile(r"^\s*(?:\d+\s*[.):-]|[-*•])\s+")


def normalize_text(text: str) -> str:
    """Lowercase, strip accents and surrounding whitespace."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()


def strip_markup(text: str) -> str:
    """Remove HTML tags and entities from a provider instruction.

    Block-level tags (``<div>``) separate sentences in directions output, so
    tags are replaced with a space before whitespace is collapsed.
    """
    without_tags = _TAG_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", html.unescape(without_tags)).strip()


def split_lines(text: str) -> list[str]:
    """Split a multi-line model answer into non-empty entries.

    List markers are removed so numbered and plain answers compare equal.
    """
    entries: list[str] = []
    for line in text.splitlines():
        cleaned = _LIST_PREFIX_RE.sub("", line).strip()
        if cleaned:
            entries.append(cleaned)
    return entries


"""Decide which catalog units need work for a target language."""

from __future__ import annotations

import unicodedata
from enum import Enum
from typing import Optional

from .structures import LocalizationGroup, LocalizationUnit

# Unicode general category prefixes that carry no translatable text:
# separators/whitespace (Z), symbols (S), punctuation (P) and control or
# format characters (C).
_PASSTHROUGH_CATEGORIES = ("Z", "S", "P", "C")


class Decision(Enum):
    """Outcome of evaluating one (entry, language) pair."""

    SKIP = "skip"
    TRANSLATE = "translate"
    WARN_UNSUPPORTED = "warn_unsupported"
    COPY_KEY = "copy_key"


def decide(
    existing: Optional[LocalizationUnit],
    *,
    force: bool,
    should_translate: Optional[bool],
) -> Decision:
    """Return what to do with the unit currently stored for a language."""

    if existing is not None and not existing.is_supported_format:
        return Decision.WARN_UNSUPPORTED
    if existing is not None and existing.has_translation and not force:
        return Decision.SKIP
    if should_translate is False:
        return Decision.COPY_KEY
    return Decision.TRANSLATE


def resolve_source_text(
    key: str,
    group: LocalizationGroup,
    source_language: str,
) -> str:
    """Return the source-language value of an entry, falling back to its key."""

    unit = group.unit_for(source_language)
    if unit is not None and unit.string_unit is not None and unit.string_unit.value:
        return unit.string_unit.value
    return key


def is_untranslatable(text: str) -> bool:
    """True when the text holds nothing but whitespace, symbols or controls.

    Format strings such as ``%@`` and emoji-only strings fall in this group
    and are passed through unchanged.
    """

    return all(
        unicodedata.category(char).startswith(_PASSTHROUGH_CATEGORIES)
        for char in text
    )

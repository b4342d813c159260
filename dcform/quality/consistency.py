"""Constraints evaluated across sibling entries.

These checks look at a whole title or date sequence instead of one
value, and attribute each problem to the index that causes it. The
first occurrence of a value is never blamed; only later repeats are.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping, Sequence
from typing import Any

from dcform.core.dates import has_valid_date_value
from dcform.core.fields import TitleType
from dcform.core.models import DateRangeEntry, TitleEntry, TitleUniquenessResult

DUPLICATE_TITLE_MESSAGE = "This title already exists"
EXTRA_MAIN_TITLE_MESSAGE = "Only one main title is allowed"

TitleLike = TitleEntry | Mapping[str, Any] | tuple[str, str]


def normalize_title_key(title: str | None) -> str:
    """Comparison key for a title.

    Applies NFKC normalization and case folding and collapses whitespace,
    so visually identical titles compare equal.
    """
    if not title:
        return ""
    text = unicodedata.normalize("NFKC", title).casefold()
    return re.sub(r"\s+", " ", text).strip()


def coerce_titles(titles: Sequence[TitleLike] | None) -> list[TitleEntry]:
    """Convert a title sequence to TitleEntry structs."""
    return [TitleEntry.coerce(item) for item in titles or ()]


def validate_title_uniqueness(titles: Sequence[TitleLike]) -> TitleUniquenessResult:
    """Find titles that repeat an earlier (title, type) pair.

    Args:
        titles: Ordered title rows.

    Returns:
        Result whose ``errors`` maps each repeating index to a message.
        Empty titles never collide.
    """
    errors: dict[int, str] = {}
    seen: dict[tuple[str, str], int] = {}

    for index, entry in enumerate(coerce_titles(titles)):
        key = normalize_title_key(entry.title)
        if not key:
            continue

        pair = (key, entry.title_type)
        if pair in seen:
            errors[index] = DUPLICATE_TITLE_MESSAGE
        else:
            seen[pair] = index

    return TitleUniquenessResult(is_valid=not errors, errors=errors)


def check_main_title_count(titles: Sequence[TitleLike]) -> dict[int, str]:
    """Flag every main title after the first one."""
    errors: dict[int, str] = {}
    found = False

    for index, entry in enumerate(coerce_titles(titles)):
        if entry.title_type != TitleType.MAIN_TITLE.value:
            continue
        if found:
            errors[index] = EXTRA_MAIN_TITLE_MESSAGE
        found = True

    return errors


def can_add_title(titles: Sequence[TitleLike], max_titles: int) -> bool:
    """Whether the editor may append another title row.

    The last row must be filled in before a new one is offered.
    """
    entries = coerce_titles(titles)
    return 0 < len(entries) < max_titles and bool(entries[-1].title.strip())


def can_add_date(
    dates: Sequence[DateRangeEntry | Mapping[str, Any]], max_dates: int
) -> bool:
    """Whether the editor may append another date row."""
    return 0 < len(dates) < max_dates and has_valid_date_value(dates[-1])

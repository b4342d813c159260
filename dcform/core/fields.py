"""DataCite field vocabularies and editor limits."""

import re
from enum import Enum, unique

# Field limits used by the metadata editor
TITLE_MAX_LENGTH = 325
ABSTRACT_MAX_LENGTH = 17500
MIN_YEAR = 1900

# Length above this share of a maximum is reported as a warning.
LENGTH_WARNING_RATIO = 0.9

DEFAULT_DEBOUNCE_MS = 300
DOI_DEBOUNCE_MS = 500

MAX_TITLES = 100
MAX_DATES = 100


@unique
class TitleType(Enum):
    """DataCite title types as kebab-case slugs."""

    MAIN_TITLE = "main-title"
    ALTERNATIVE_TITLE = "alternative-title"
    SUBTITLE = "subtitle"
    TRANSLATED_TITLE = "translated-title"
    OTHER = "other"


@unique
class DateType(Enum):
    """DataCite dateType vocabulary."""

    ACCEPTED = "accepted"
    AVAILABLE = "available"
    COPYRIGHTED = "copyrighted"
    COLLECTED = "collected"
    COVERAGE = "coverage"
    CREATED = "created"
    ISSUED = "issued"
    SUBMITTED = "submitted"
    UPDATED = "updated"
    VALID = "valid"
    WITHDRAWN = "withdrawn"
    OTHER = "other"


# Date types whose values describe something that already happened
PAST_ONLY_DATE_TYPES = frozenset(
    {
        DateType.ACCEPTED.value,
        DateType.COLLECTED.value,
        DateType.CREATED.value,
        DateType.SUBMITTED.value,
        DateType.UPDATED.value,
    }
)


@unique
class ContributorType(Enum):
    """Kind of contributor entry."""

    PERSON = "person"
    INSTITUTION = "institution"


def normalize_title_type_slug(value: str | None) -> str:
    """Normalize a title type to its kebab-case slug.

    Legacy values arrive as ``TitleCase`` (``AlternativeTitle``), snake_case
    or free text; all of them map onto the slug form used by ``TitleType``.
    """
    if value is None:
        return ""

    slug = str(value).strip()
    if not slug:
        return ""

    slug = slug.replace("_", "-")
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", slug)
    slug = re.sub(r"[^a-zA-Z0-9-]", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-").lower()

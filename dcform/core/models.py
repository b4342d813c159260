"""Core data models for the validation engine.

All values crossing the engine boundary are immutable msgspec structs.
Form state arrives as plain mappings, so each entry type can also be
built from a mapping that uses either snake_case or the editor's
camelCase keys (``titleType``, ``startDate``, ...).

Key components:
- Severity / ValidationOutcome: the single result a field displays
- CheckResult: answer of a primitive validator
- TitleEntry, DateRangeEntry, ContributorEntry: sibling-aware form rows
- DateComponents: decomposed DataCite datetime token
- DatasetRecord: a whole metadata record, as checked by the CLI
"""

import enum
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import msgspec

from .fields import TitleType, normalize_title_type_slug

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def _as_text(value: Any) -> str | None:
    # YAML loads unquoted ISO dates as date/datetime objects
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def snake_keys(data: Any) -> Any:
    """Recursively convert mapping keys from camelCase to snake_case."""
    if isinstance(data, Mapping):
        return {_snake_case(str(k)): snake_keys(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [snake_keys(item) for item in data]
    return data


class Severity(enum.Enum):
    """Severity of a validation outcome.

    Only ERROR blocks submission.
    """

    ERROR = "error"
    WARNING = "warning"


class ValidationOutcome(msgspec.Struct, frozen=True, kw_only=True):
    """A non-null validation result for one field."""

    severity: Severity
    message: str

    @classmethod
    def error(cls, message: str) -> "ValidationOutcome":
        return cls(severity=Severity.ERROR, message=message)

    @classmethod
    def warning(cls, message: str) -> "ValidationOutcome":
        return cls(severity=Severity.WARNING, message=message)

    @property
    def blocks_submission(self) -> bool:
        """Whether this outcome must prevent the form from submitting."""
        return self.severity is Severity.ERROR

    def to_string(self) -> str:
        """Format as human-readable string."""
        return f"[{self.severity.name}] {self.message}"


class CheckResult(msgspec.Struct, frozen=True, kw_only=True):
    """Result of a primitive validator."""

    is_valid: bool
    error: str | None = None
    warning: str | None = None
    normalized: str | None = None


class TitleUniquenessResult(msgspec.Struct, frozen=True, kw_only=True):
    """Uniqueness verdict over a title sequence.

    ``errors`` holds a message only for the indices that repeat an
    earlier title.
    """

    is_valid: bool
    errors: dict[int, str] = msgspec.field(default_factory=dict)


class TitleEntry(msgspec.Struct, frozen=True, kw_only=True):
    """One title row, identified by its position in the sequence."""

    title: str = ""
    title_type: str = TitleType.MAIN_TITLE.value

    @classmethod
    def coerce(cls, value: Any) -> "TitleEntry":
        """Build a TitleEntry from a struct, mapping or (title, type) pair.

        Title types from mappings and pairs are normalized to their slug, so
        legacy spellings such as ``MainTitle`` are recognized.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            data = snake_keys(value)
            title_type = data.get("title_type", data.get("type"))
            return cls(
                title=data.get("title") or "",
                title_type=normalize_title_type_slug(title_type)
                or TitleType.MAIN_TITLE.value,
            )
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(
                title=value[0] or "", title_type=normalize_title_type_slug(value[1])
            )
        raise TypeError(f"Cannot build TitleEntry from {type(value).__name__}")


class DateComponents(msgspec.Struct, frozen=True, kw_only=True):
    """Decomposed DataCite datetime token."""

    date: str
    time: str | None = None
    timezone: str | None = None


class DateRangeEntry(msgspec.Struct, frozen=True, kw_only=True):
    """A dated event: single date, closed range or open range."""

    date_type: str = ""
    start_date: str | None = None
    end_date: str | None = None

    @classmethod
    def coerce(cls, value: Any) -> "DateRangeEntry":
        """Build a DateRangeEntry from a struct or mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            data = snake_keys(value)
            return cls(
                date_type=data.get("date_type") or "",
                start_date=_as_text(data.get("start_date")),
                end_date=_as_text(data.get("end_date")),
            )
        raise TypeError(f"Cannot build DateRangeEntry from {type(value).__name__}")


class ContributorEntry(msgspec.Struct, frozen=True, kw_only=True):
    """A contributor row with free-text roles."""

    roles: tuple[str, ...] = ()
    type: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    institution_name: str | None = None
    orcid: str | None = None


class DatasetRecord(msgspec.Struct, frozen=True, kw_only=True):
    """The subset of a DataCite record checked field by field."""

    titles: tuple[TitleEntry, ...] = ()
    publication_year: str | None = None
    version: str | None = None
    doi: str | None = None
    abstract: str | None = None
    url: str | None = None
    dates: tuple[DateRangeEntry, ...] = ()
    contributors: tuple[ContributorEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DatasetRecord":
        """Create a record from a decoded YAML/JSON mapping.

        Args:
            data: Mapping with snake_case or camelCase keys.

        Returns:
            New DatasetRecord instance.

        Raises:
            msgspec.ValidationError: If a field has the wrong shape.
        """
        normalized = snake_keys(data)
        year = normalized.get("publication_year", normalized.get("year"))
        if year is not None:
            normalized["publication_year"] = str(year)
        normalized.pop("year", None)
        # Unquoted YAML versions such as 1.2 arrive as floats
        if normalized.get("version") is not None:
            normalized["version"] = _as_text(normalized["version"])

        if isinstance(normalized.get("titles"), list):
            normalized["titles"] = [
                msgspec.structs.asdict(TitleEntry.coerce(item))
                for item in normalized["titles"]
            ]
        if isinstance(normalized.get("dates"), list):
            normalized["dates"] = [
                msgspec.structs.asdict(DateRangeEntry.coerce(item))
                for item in normalized["dates"]
            ]
        if isinstance(normalized.get("contributors"), list):
            for contributor in normalized["contributors"]:
                if isinstance(contributor, dict) and isinstance(
                    contributor.get("roles"), str
                ):
                    contributor["roles"] = [contributor["roles"]]

        return msgspec.convert(normalized, cls)

"""Rule composition for editor fields.

A field owns an ordered list of ValidationRule objects. Evaluation walks
the list in order and stops at the first rule that returns an outcome,
so a field only ever shows its highest-precedence problem.

Rule factories build the lists for concrete DataCite fields. Every rule
accepts ``(value, context=None)``; cross-entry rules read the sibling
entries from ``context`` so they always judge the latest state of the
whole sequence rather than the snapshot taken when the rule was built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from dcform.config import DEFAULT_SETTINGS, ValidationSettings
from dcform.core.dates import has_valid_date_value, parse_date_part, parse_date_time
from dcform.core.fields import (
    PAST_ONLY_DATE_TYPES,
    TitleType,
    normalize_title_type_slug,
)
from dcform.core.models import DateRangeEntry, TitleEntry, ValidationOutcome
from dcform.quality.consistency import (
    TitleLike,
    check_main_title_count,
    coerce_titles,
    validate_title_uniqueness,
)
from dcform.quality.validators import (
    validate_date,
    validate_doi_format,
    validate_email,
    validate_orcid,
    validate_required,
    validate_semantic_version,
    validate_text_length,
    validate_url_format,
    validate_year,
)

logger = logging.getLogger(__name__)

ValidateFn = Callable[..., ValidationOutcome | None]


@dataclass(frozen=True)
class ValidationRule:
    """A single check on a field value."""

    validate: ValidateFn
    debounce_ms: int | None = None
    name: str | None = None


def create_validation_rule(
    validate: ValidateFn, *, debounce_ms: int | None = None, name: str | None = None
) -> ValidationRule:
    """Wrap a ``(value, context=None)`` callable as a rule."""
    return ValidationRule(validate=validate, debounce_ms=debounce_ms, name=name)


def combine_validation_rules(*rules: ValidationRule) -> list[ValidationRule]:
    """Concatenate rules into one ordered list."""
    return list(rules)


def evaluate_rules(
    rules: Sequence[ValidationRule], value: Any, context: Any = None
) -> ValidationOutcome | None:
    """Run rules in order and return the first outcome.

    Rules after the first failing one are not called. A rule that raises
    is reported as an error outcome for the field.
    """
    for rule in rules:
        try:
            outcome = rule.validate(value, context)
        except Exception as e:
            logger.warning(
                "Validation rule %s raised", rule.name or rule.validate, exc_info=True
            )
            return ValidationOutcome.error(f"Validation failed: {e}")

        if outcome is not None:
            return outcome

    return None


def max_debounce_ms(rules: Sequence[ValidationRule]) -> int:
    """Quiet period for a field: the longest debounce among its rules."""
    return max((rule.debounce_ms or 0 for rule in rules), default=0)


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _from_check(result) -> ValidationOutcome | None:
    if not result.is_valid:
        return ValidationOutcome.error(result.error or "Invalid value")
    if result.warning:
        return ValidationOutcome.warning(result.warning)
    return None


def _max_length_rule(field_name: str, max_length: int) -> ValidationRule:
    """Hard maximum; longer values block submission."""

    def validate(value: Any, context: Any = None) -> ValidationOutcome | None:
        return _from_check(
            validate_text_length(value, max=max_length, field_name=field_name)
        )

    return ValidationRule(validate=validate, name=f"{field_name.lower()}_length")


def _near_limit_rule(field_name: str, max_length: int, ratio: float) -> ValidationRule:
    """Warning tier between ``max_length * ratio`` and ``max_length``.

    Goes last in a field's list so it never hides a blocking error.
    """

    def validate(value: Any, context: Any = None) -> ValidationOutcome | None:
        length = len(str(value or "").strip())
        if max_length * ratio < length <= max_length:
            return ValidationOutcome.warning(
                f"{field_name} is approaching maximum length ({length}/{max_length})"
            )
        return None

    return ValidationRule(validate=validate, name=f"{field_name.lower()}_near_limit")


def _required_rule(field_name: str) -> ValidationRule:
    def validate(value: Any, context: Any = None) -> ValidationOutcome | None:
        result = validate_required(value, field_name)
        if not result.is_valid:
            return ValidationOutcome.error(result.error)
        return None

    return ValidationRule(validate=validate, name=f"{field_name.lower()}_required")


def _optional_rule(
    check: Callable[[Any], Any], name: str, debounce_ms: int | None = None
) -> ValidationRule:
    """Format check that is skipped for empty input."""

    def validate(value: Any, context: Any = None) -> ValidationOutcome | None:
        if _is_blank(value):
            return None
        return _from_check(check(value))

    return ValidationRule(validate=validate, debounce_ms=debounce_ms, name=name)


def get_required_rules(field_name: str) -> list[ValidationRule]:
    """Rules for a plain mandatory text field."""
    return [_required_rule(field_name)]


def get_year_validation_rules(
    settings: ValidationSettings = DEFAULT_SETTINGS,
) -> list[ValidationRule]:
    """Rules for the mandatory publication year."""

    def validate_range(value: Any, context: Any = None) -> ValidationOutcome | None:
        return _from_check(
            validate_year(value, min_year=settings.min_year, max_year=settings.max_year)
        )

    return [
        _required_rule("Publication Year"),
        ValidationRule(validate=validate_range, name="year_range"),
    ]


def get_doi_validation_rules(
    settings: ValidationSettings = DEFAULT_SETTINGS,
) -> list[ValidationRule]:
    """Rules for the optional DOI field."""
    return [
        _optional_rule(
            validate_doi_format, "doi_format", debounce_ms=settings.doi_debounce_ms
        )
    ]


def get_version_validation_rules() -> list[ValidationRule]:
    """Rules for the optional dataset version."""
    return [_optional_rule(validate_semantic_version, "version_format")]


def get_url_validation_rules(
    field_name: str = "URL", required: bool = False
) -> list[ValidationRule]:
    """Rules for a URL field, optional unless ``required``."""
    rules = [_optional_rule(validate_url_format, f"{field_name.lower()}_format")]
    if required:
        rules.insert(0, _required_rule(field_name))
    return rules


def get_orcid_validation_rules() -> list[ValidationRule]:
    """Rules for an optional ORCID iD."""
    return [_optional_rule(validate_orcid, "orcid_format")]


def get_email_validation_rules(required: bool = False) -> list[ValidationRule]:
    """Rules for a contact email address."""
    rules = [_optional_rule(validate_email, "email_format")]
    if required:
        rules.insert(0, _required_rule("Email"))
    return rules


def get_abstract_validation_rules(
    settings: ValidationSettings = DEFAULT_SETTINGS,
) -> list[ValidationRule]:
    """Rules for the mandatory abstract."""
    return [
        _required_rule("Abstract"),
        _max_length_rule("Abstract", settings.abstract_max_length),
        _near_limit_rule(
            "Abstract", settings.abstract_max_length, settings.length_warning_ratio
        ),
    ]


def _current_titles(
    index: int, value: Any, context: Any, snapshot: list[TitleEntry]
) -> list[TitleEntry]:
    """Sibling titles with the evaluated row set to its current value."""
    titles = coerce_titles(context) if context is not None else list(snapshot)
    if 0 <= index < len(titles):
        titles[index] = TitleEntry(
            title=str(value or ""), title_type=titles[index].title_type
        )
    return titles


def create_title_validation_rules(
    index: int,
    title_type: str,
    titles: Sequence[TitleLike] = (),
    settings: ValidationSettings = DEFAULT_SETTINGS,
) -> list[ValidationRule]:
    """Rules for the title row at ``index``.

    Args:
        index: Position of the row among its siblings.
        title_type: Type slug of the row.
        titles: Sibling rows; used when no context is passed at evaluation.
        settings: Length limits and debounce interval.

    Returns:
        Required (main title only), maximum length, uniqueness, single main
        title and near-limit warning rules, in that order.
    """
    snapshot = coerce_titles(titles)
    is_main = normalize_title_type_slug(title_type) == TitleType.MAIN_TITLE.value

    def validate_main_required(value: Any, context: Any = None) -> ValidationOutcome | None:
        if is_main and _is_blank(value):
            return ValidationOutcome.error("Main title is required")
        return None

    def validate_unique(value: Any, context: Any = None) -> ValidationOutcome | None:
        current = _current_titles(index, value, context, snapshot)
        message = validate_title_uniqueness(current).errors.get(index)
        return ValidationOutcome.error(message) if message else None

    def validate_single_main(value: Any, context: Any = None) -> ValidationOutcome | None:
        current = _current_titles(index, value, context, snapshot)
        message = check_main_title_count(current).get(index)
        return ValidationOutcome.error(message) if message else None

    return [
        ValidationRule(validate=validate_main_required, name="title_required"),
        _max_length_rule("Title", settings.title_max_length),
        ValidationRule(
            validate=validate_unique,
            debounce_ms=settings.debounce_ms,
            name="title_unique",
        ),
        ValidationRule(validate=validate_single_main, name="title_single_main"),
        _near_limit_rule(
            "Title", settings.title_max_length, settings.length_warning_ratio
        ),
    ]


def revalidate_titles(
    titles: Sequence[TitleLike], settings: ValidationSettings = DEFAULT_SETTINGS
) -> list[ValidationOutcome | None]:
    """Evaluate every title row against the full current sequence.

    A rename can both resolve and introduce a collision on another row,
    so all siblings are re-checked together.
    """
    entries = coerce_titles(titles)
    return [
        evaluate_rules(
            create_title_validation_rules(i, entry.title_type, entries, settings),
            entry.title,
            entries,
        )
        for i, entry in enumerate(entries)
    ]


def get_date_entry_validation_rules(
    date_type: str = "",
) -> list[ValidationRule]:
    """Rules for a start/end date row.

    The value is a DateRangeEntry or mapping. Empty rows are valid;
    otherwise each present part must be a date and the start must not
    fall after the end. Past-only date types reject future dates.
    """
    allow_future = date_type not in PAST_ONLY_DATE_TYPES

    def validate_parts(value: Any, context: Any = None) -> ValidationOutcome | None:
        entry = DateRangeEntry.coerce(value)
        if not has_valid_date_value(entry):
            return None
        for label, part in (("Start date", entry.start_date), ("End date", entry.end_date)):
            if _is_blank(part):
                continue
            result = validate_date(part, allow_future=allow_future)
            if not result.is_valid:
                return ValidationOutcome.error(f"{label}: {result.error}")
        return None

    def validate_order(value: Any, context: Any = None) -> ValidationOutcome | None:
        entry = DateRangeEntry.coerce(value)
        if _is_blank(entry.start_date) or _is_blank(entry.end_date):
            return None
        start = parse_date_part(parse_date_time(entry.start_date).date)
        end = parse_date_part(parse_date_time(entry.end_date).date)
        if start and end and start > end:
            return ValidationOutcome.error("Start date must not be after end date")
        return None

    return [
        ValidationRule(validate=validate_parts, name="date_format"),
        ValidationRule(validate=validate_order, name="date_order"),
    ]


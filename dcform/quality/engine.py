"""Validation engine for editor forms and whole metadata records.

Provides:
- FormValidator: per-field validation state with debounced evaluation,
  touched tracking and submit gating
- check_record: synchronous check of a complete DatasetRecord
- RecordReport: per-field outcomes with a human-readable summary
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

import msgspec

from dcform.config import DEFAULT_SETTINGS, ValidationSettings
from dcform.core.contributors import infer_contributor_type, normalise_roles
from dcform.core.fields import ContributorType, TitleType
from dcform.core.models import (
    DatasetRecord,
    Severity,
    TitleEntry,
    ValidationOutcome,
)
from dcform.quality.consistency import TitleLike, coerce_titles
from dcform.quality.rules import (
    ValidationRule,
    create_title_validation_rules,
    evaluate_rules,
    get_abstract_validation_rules,
    get_date_entry_validation_rules,
    get_doi_validation_rules,
    get_orcid_validation_rules,
    get_url_validation_rules,
    get_version_validation_rules,
    get_year_validation_rules,
    max_debounce_ms,
)
from dcform.quality.scheduler import DebounceTimer

logger = logging.getLogger(__name__)

FieldListener = Callable[[str, "FieldState"], None]


class ValidationStatus(Enum):
    """Lifecycle of a field's validation."""

    IDLE = "idle"
    PENDING = "pending"
    VALID = "valid"
    INVALID = "invalid"


@dataclass
class FieldState:
    """Validation state of one field."""

    status: ValidationStatus = ValidationStatus.IDLE
    outcome: ValidationOutcome | None = None
    touched: bool = False
    value: Any = None


class FormValidator:
    """Tracks validation state for the fields of one form.

    Every field owns its own DebounceTimer. A field whose rules declare a
    debounce interval is evaluated once input has been quiet for the
    longest of those intervals; other fields are evaluated immediately.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        """Initialize validator.

        Args:
            loop: Event loop for debounce timers; defaults to the running loop.
        """
        self._loop = loop
        self._fields: dict[str, FieldState] = {}
        self._timers: dict[str, DebounceTimer] = {}
        self._listeners: list[FieldListener] = []

    def _state(self, field_id: str) -> FieldState:
        if field_id not in self._fields:
            self._fields[field_id] = FieldState()
        return self._fields[field_id]

    def subscribe(self, listener: FieldListener) -> None:
        """Call ``listener(field_id, state)`` after each completed pass."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: FieldListener) -> None:
        """Stop notifying a listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def validate_field(
        self,
        field_id: str,
        value: Any,
        rules: Sequence[ValidationRule],
        context: Any = None,
        immediate: bool = False,
    ) -> ValidationOutcome | None:
        """Validate a field now or after its debounce interval.

        Args:
            field_id: Identifier of the field instance.
            value: Current raw value.
            rules: Ordered rules for the field.
            context: Sibling snapshot for cross-entry rules.
            immediate: Skip the debounce interval.

        Returns:
            The outcome when evaluated synchronously; None when the pass
            was deferred or the value is valid.
        """
        delay = 0 if immediate else max_debounce_ms(rules)

        timer = self._timers.get(field_id)
        if timer is not None:
            timer.cancel()

        if delay <= 0:
            return self._run(field_id, value, rules, context)

        if timer is None:
            timer = DebounceTimer(self._loop, name=field_id)
            self._timers[field_id] = timer

        timer.schedule(delay, self._run, field_id, value, rules, context)
        state = self._state(field_id)
        state.status = ValidationStatus.PENDING
        state.value = value
        logger.debug("Deferred validation of %s by %d ms", field_id, delay)
        return None

    def _run(
        self,
        field_id: str,
        value: Any,
        rules: Sequence[ValidationRule],
        context: Any,
    ) -> ValidationOutcome | None:
        outcome = evaluate_rules(rules, value, context)

        state = self._state(field_id)
        state.outcome = outcome
        state.value = value
        state.status = (
            ValidationStatus.INVALID
            if outcome is not None and outcome.blocks_submission
            else ValidationStatus.VALID
        )

        for listener in list(self._listeners):
            try:
                listener(field_id, state)
            except Exception:
                logger.exception("Validation listener failed for %s", field_id)

        return outcome

    def validate_titles(
        self,
        titles: Sequence[TitleLike],
        field_prefix: str = "titles",
        settings: ValidationSettings = DEFAULT_SETTINGS,
        immediate: bool = False,
    ) -> list[ValidationOutcome | None]:
        """Re-validate every title row against the current sequence.

        Rows that no longer exist have their state and timers dropped.
        """
        entries = coerce_titles(titles)
        outcomes = [
            self.validate_field(
                f"{field_prefix}.{index}",
                entry.title,
                create_title_validation_rules(index, entry.title_type, entries, settings),
                context=entries,
                immediate=immediate,
            )
            for index, entry in enumerate(entries)
        ]

        prefix = f"{field_prefix}."
        for field_id in list(self._fields):
            if field_id.startswith(prefix):
                suffix = field_id[len(prefix) :]
                if suffix.isdigit() and int(suffix) >= len(entries):
                    self.reset_field_validation(field_id)

        return outcomes

    def mark_field_touched(self, field_id: str) -> None:
        """Record that the user has visited a field."""
        self._state(field_id).touched = True

    def get_field_state(self, field_id: str) -> FieldState:
        """Get a field's state; unknown fields are idle."""
        return self._fields.get(field_id, FieldState())

    def get_field_outcome(self, field_id: str) -> ValidationOutcome | None:
        return self.get_field_state(field_id).outcome

    def has_field_error(self, field_id: str) -> bool:
        outcome = self.get_field_outcome(field_id)
        return outcome is not None and outcome.blocks_submission

    def is_pending(self, field_id: str) -> bool:
        timer = self._timers.get(field_id)
        return timer is not None and timer.pending

    def reset_field_validation(self, field_id: str) -> None:
        """Forget a field, cancelling its pending validation."""
        timer = self._timers.pop(field_id, None)
        if timer is not None:
            timer.dispose()
        self._fields.pop(field_id, None)

    def reset_all_validation(self) -> None:
        """Forget every field and cancel all pending validations."""
        for timer in self._timers.values():
            timer.dispose()
        self._timers.clear()
        self._fields.clear()

    @property
    def invalid_count(self) -> int:
        return sum(1 for field_id in self._fields if self.has_field_error(field_id))

    @property
    def touched_count(self) -> int:
        return sum(1 for state in self._fields.values() if state.touched)

    @property
    def can_submit(self) -> bool:
        """Submission is blocked only by error outcomes, never by warnings."""
        return self.invalid_count == 0

    def dispose(self) -> None:
        """Release all timers."""
        self.reset_all_validation()
        self._listeners.clear()

    def __enter__(self) -> "FormValidator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


class RecordReport(msgspec.Struct, frozen=True, kw_only=True):
    """Outcomes of checking one metadata record."""

    outcomes: dict[str, ValidationOutcome] = msgspec.field(default_factory=dict)
    timestamp: datetime = msgspec.field(default_factory=datetime.now)

    @property
    def errors(self) -> dict[str, ValidationOutcome]:
        return {
            k: v for k, v in self.outcomes.items() if v.severity is Severity.ERROR
        }

    @property
    def warnings(self) -> dict[str, ValidationOutcome]:
        return {
            k: v for k, v in self.outcomes.items() if v.severity is Severity.WARNING
        }

    @property
    def has_errors(self) -> bool:
        """Check if report contains blocking outcomes."""
        return bool(self.errors)

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=== Validation Report ===",
            f"Generated: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
        ]

        if not self.outcomes:
            lines.append("No issues found")
            return "\n".join(lines)

        by_severity = defaultdict(list)
        for field_id, outcome in self.outcomes.items():
            by_severity[outcome.severity].append(f"  {field_id}: {outcome.message}")

        for severity in (Severity.ERROR, Severity.WARNING):
            if by_severity[severity]:
                lines.append(f"\n{severity.name} ({len(by_severity[severity])}):")
                lines.extend(by_severity[severity])

        return "\n".join(lines)


def _check_title_set(
    titles: Sequence[TitleEntry], max_titles: int
) -> ValidationOutcome | None:
    if not titles:
        return ValidationOutcome.error("At least one title is required")
    if len(titles) > max_titles:
        return ValidationOutcome.error(f"No more than {max_titles} titles are allowed")
    if not any(t.title_type == TitleType.MAIN_TITLE.value for t in titles):
        return ValidationOutcome.error("A main title is required")
    return None


def check_record(
    record: DatasetRecord, settings: ValidationSettings = DEFAULT_SETTINGS
) -> RecordReport:
    """Check every field of a record synchronously.

    Each field contributes at most one outcome, keyed by a dotted field id
    such as ``titles.1`` or ``dates.0``.
    """
    outcomes: dict[str, ValidationOutcome] = {}

    def add(field_id: str, outcome: ValidationOutcome | None) -> None:
        if outcome is not None:
            outcomes[field_id] = outcome

    titles = list(record.titles)
    add("titles", _check_title_set(titles, settings.max_titles))
    for index, entry in enumerate(titles):
        rules = create_title_validation_rules(index, entry.title_type, titles, settings)
        add(f"titles.{index}", evaluate_rules(rules, entry.title, titles))

    add(
        "publication_year",
        evaluate_rules(get_year_validation_rules(settings), record.publication_year),
    )
    add("version", evaluate_rules(get_version_validation_rules(), record.version))
    add("doi", evaluate_rules(get_doi_validation_rules(settings), record.doi))
    add(
        "abstract",
        evaluate_rules(get_abstract_validation_rules(settings), record.abstract),
    )
    add("url", evaluate_rules(get_url_validation_rules(), record.url))

    if len(record.dates) > settings.max_dates:
        add(
            "dates",
            ValidationOutcome.error(
                f"No more than {settings.max_dates} dates are allowed"
            ),
        )

    for index, entry in enumerate(record.dates):
        add(
            f"dates.{index}",
            evaluate_rules(get_date_entry_validation_rules(entry.date_type), entry),
        )

    for index, contributor in enumerate(record.contributors):
        roles = normalise_roles(list(contributor.roles))
        if not roles:
            add(
                f"contributors.{index}.roles",
                ValidationOutcome.error("At least one contributor role is required"),
            )
        kind = infer_contributor_type(contributor.type, roles)
        if kind is ContributorType.PERSON:
            add(
                f"contributors.{index}.orcid",
                evaluate_rules(get_orcid_validation_rules(), contributor.orcid),
            )

    report = RecordReport(outcomes=outcomes)
    logger.debug(
        "Checked record: %d errors, %d warnings",
        len(report.errors),
        len(report.warnings),
    )
    return report

"""Tests for the form validation engine and the record checker.

This module tests:
- Per-field state transitions and submit gating
- Debounced evaluation and cancellation
- Sibling re-validation for titles
- Whole-record checks and report summaries
"""

import asyncio

import pytest

from dcform.config import ValidationSettings
from dcform.core.models import DatasetRecord, Severity
from dcform.quality.engine import (
    FormValidator,
    RecordReport,
    ValidationStatus,
    check_record,
)
from dcform.quality.rules import (
    create_validation_rule,
    get_abstract_validation_rules,
    get_doi_validation_rules,
    get_year_validation_rules,
)


def counting_rules(calls, debounce_ms):
    def validate(value, context=None):
        calls.append(value)
        return None

    return [create_validation_rule(validate, debounce_ms=debounce_ms)]


class TestFormValidatorSync:
    """Test fields whose rules are not debounced."""

    def test_unknown_field_is_idle(self):
        validator = FormValidator()

        state = validator.get_field_state("doi")
        assert state.status is ValidationStatus.IDLE
        assert state.outcome is None

    def test_error_marks_field_invalid(self):
        validator = FormValidator()

        outcome = validator.validate_field("year", "1800", get_year_validation_rules())

        assert outcome.severity is Severity.ERROR
        assert validator.get_field_state("year").status is ValidationStatus.INVALID
        assert validator.has_field_error("year")
        assert validator.invalid_count == 1
        assert not validator.can_submit

    def test_warning_does_not_block_submit(self):
        validator = FormValidator()

        outcome = validator.validate_field(
            "abstract", "a" * 16000, get_abstract_validation_rules()
        )

        assert outcome.severity is Severity.WARNING
        assert validator.get_field_state("abstract").status is ValidationStatus.VALID
        assert not validator.has_field_error("abstract")
        assert validator.can_submit

    def test_fixing_a_field_clears_error(self):
        validator = FormValidator()
        rules = get_year_validation_rules()

        validator.validate_field("year", "", rules)
        validator.validate_field("year", "2020", rules)

        assert validator.get_field_outcome("year") is None
        assert validator.can_submit

    def test_immediate_skips_debounce(self):
        validator = FormValidator()

        outcome = validator.validate_field(
            "doi", "not-a-doi", get_doi_validation_rules(), immediate=True
        )

        assert outcome.blocks_submission
        assert not validator.is_pending("doi")

    def test_touched_tracking(self):
        validator = FormValidator()

        validator.mark_field_touched("titles.0")
        validator.mark_field_touched("doi")
        validator.mark_field_touched("doi")

        assert validator.touched_count == 2
        assert validator.get_field_state("doi").touched

    def test_listeners(self):
        validator = FormValidator()
        events = []

        def listener(field_id, state):
            events.append((field_id, state.status))

        validator.subscribe(listener)
        validator.validate_field("year", "2020", get_year_validation_rules())
        validator.unsubscribe(listener)
        validator.validate_field("year", "", get_year_validation_rules())

        assert events == [("year", ValidationStatus.VALID)]

    def test_failing_listener_is_logged(self, caplog):
        validator = FormValidator()

        def broken(field_id, state):
            raise RuntimeError("listener broke")

        validator.subscribe(broken)
        outcome = validator.validate_field("year", "1800", get_year_validation_rules())

        assert outcome is not None
        assert "Validation listener failed for year" in caplog.text

    def test_reset(self):
        validator = FormValidator()
        rules = get_year_validation_rules()
        validator.validate_field("year", "", rules)
        validator.validate_field("other", "", rules)

        validator.reset_field_validation("year")
        assert validator.get_field_state("year").status is ValidationStatus.IDLE
        assert validator.invalid_count == 1

        validator.reset_all_validation()
        assert validator.invalid_count == 0


    def test_schedule_failure_leaves_field_idle(self):
        """Without a running loop a debounced field is not left pending."""
        validator = FormValidator()

        with pytest.raises(RuntimeError):
            validator.validate_field("doi", "x", counting_rules([], debounce_ms=20))

        assert validator.get_field_state("doi").status is ValidationStatus.IDLE
        assert not validator.is_pending("doi")


class TestFormValidatorDebounce:
    """Test debounced fields."""

    @pytest.mark.asyncio
    async def test_rapid_changes_validate_last_value_once(self):
        calls = []
        rules = counting_rules(calls, debounce_ms=50)
        validator = FormValidator()

        for value in ["1", "10.", "10.1234/x"]:
            assert validator.validate_field("doi", value, rules) is None

        assert validator.is_pending("doi")
        assert validator.get_field_state("doi").status is ValidationStatus.PENDING

        await asyncio.sleep(0.15)

        assert calls == ["10.1234/x"]
        assert validator.get_field_state("doi").status is ValidationStatus.VALID
        assert not validator.is_pending("doi")

    @pytest.mark.asyncio
    async def test_debounced_error(self):
        settings = ValidationSettings(doi_debounce_ms=20)
        validator = FormValidator()

        validator.validate_field("doi", "10.1/x", get_doi_validation_rules(settings))
        await asyncio.sleep(0.08)

        assert validator.has_field_error("doi")
        assert not validator.can_submit

    @pytest.mark.asyncio
    async def test_reset_cancels_pending_validation(self):
        calls = []
        validator = FormValidator()

        validator.validate_field("doi", "x", counting_rules(calls, debounce_ms=20))
        validator.reset_field_validation("doi")
        await asyncio.sleep(0.06)

        assert calls == []
        assert validator.get_field_state("doi").status is ValidationStatus.IDLE

    @pytest.mark.asyncio
    async def test_immediate_cancels_pending_validation(self):
        calls = []
        rules = counting_rules(calls, debounce_ms=20)
        validator = FormValidator()

        validator.validate_field("doi", "old", rules)
        validator.validate_field("doi", "new", rules, immediate=True)
        await asyncio.sleep(0.06)

        assert calls == ["new"]

    @pytest.mark.asyncio
    async def test_context_manager_disposes_timers(self):
        calls = []

        with FormValidator() as validator:
            validator.validate_field("doi", "x", counting_rules(calls, debounce_ms=20))

        await asyncio.sleep(0.06)
        assert calls == []

    @pytest.mark.asyncio
    async def test_fields_debounce_independently(self):
        calls = []
        validator = FormValidator()

        validator.validate_field("titles.0", "a", counting_rules(calls, debounce_ms=20))
        validator.validate_field("titles.1", "b", counting_rules(calls, debounce_ms=20))
        await asyncio.sleep(0.08)

        assert sorted(calls) == ["a", "b"]


class TestValidateTitles:
    """Test sibling re-validation through the form engine."""

    def test_duplicate_flagged_on_later_row(self):
        validator = FormValidator()
        titles = [
            {"title": "Ocean data", "titleType": "main-title"},
            {"title": "Ocean data", "titleType": "alternative-title"},
            {"title": "ocean data", "titleType": "alternative-title"},
        ]

        outcomes = validator.validate_titles(titles, immediate=True)

        assert outcomes[0] is None
        assert outcomes[1] is None
        assert outcomes[2].message == "This title already exists"
        assert validator.has_field_error("titles.2")

    def test_removed_rows_are_forgotten(self):
        validator = FormValidator()
        titles = [("A", "main-title"), ("A", "main-title"), ("", "subtitle")]

        validator.validate_titles(titles, immediate=True)
        assert validator.has_field_error("titles.1")

        validator.validate_titles(titles[:1], immediate=True)

        assert validator.get_field_state("titles.1").status is ValidationStatus.IDLE
        assert validator.get_field_state("titles.2").status is ValidationStatus.IDLE
        assert validator.can_submit

    @pytest.mark.asyncio
    async def test_titles_debounced_by_default(self):
        validator = FormValidator()
        settings = ValidationSettings(debounce_ms=20)

        outcomes = validator.validate_titles([("", "main-title")], settings=settings)

        assert outcomes == [None]
        assert validator.is_pending("titles.0")

        await asyncio.sleep(0.08)
        assert validator.get_field_outcome("titles.0").message == "Main title is required"


class TestCheckRecord:
    """Test whole-record checks."""

    def test_valid_record(self, valid_record_data):
        report = check_record(DatasetRecord.from_dict(valid_record_data))

        assert report.outcomes == {}
        assert not report.has_errors
        assert "No issues found" in report.to_summary()

    def test_invalid_record(self, invalid_record_data):
        report = check_record(DatasetRecord.from_dict(invalid_record_data))
        messages = {k: v.message for k, v in report.outcomes.items()}

        assert messages["titles.1"] == "This title already exists"
        assert messages["publication_year"] == "Publication Year is required"
        assert messages["version"].startswith("Invalid semantic version")
        assert messages["doi"].startswith("Invalid DOI format")
        assert messages["abstract"] == "Abstract is required"
        assert messages["dates.0"] == "Start date must not be after end date"
        assert messages["contributors.0.roles"] == (
            "At least one contributor role is required"
        )
        assert "checksum" in messages["contributors.1.orcid"]
        assert "titles" not in messages
        assert "url" not in messages
        assert report.has_errors

    def test_missing_titles(self):
        report = check_record(DatasetRecord.from_dict({}))
        assert report.outcomes["titles"].message == "At least one title is required"

    def test_no_main_title(self):
        record = DatasetRecord.from_dict(
            {"titles": [{"title": "Only a subtitle", "titleType": "subtitle"}]}
        )
        assert check_record(record).outcomes["titles"].message == (
            "A main title is required"
        )

    def test_legacy_main_title_type(self, valid_record_data):
        valid_record_data["titles"] = [{"title": "Main", "titleType": "MainTitle"}]
        report = check_record(DatasetRecord.from_dict(valid_record_data))

        assert report.outcomes == {}

    def test_duplicate_long_titles_block(self, valid_record_data):
        valid_record_data["titles"].extend(
            [{"title": "x" * 300, "titleType": "alternative-title"}] * 2
        )
        report = check_record(DatasetRecord.from_dict(valid_record_data))

        assert report.outcomes["titles.2"].severity is Severity.WARNING
        assert report.outcomes["titles.3"].message == "This title already exists"
        assert report.has_errors

    def test_row_limits(self, valid_record_data):
        settings = ValidationSettings(max_titles=1, max_dates=1)
        report = check_record(DatasetRecord.from_dict(valid_record_data), settings)

        assert report.outcomes["titles"].message == "No more than 1 titles are allowed"
        assert report.outcomes["dates"].message == "No more than 1 dates are allowed"

    def test_row_limits_not_reached(self, valid_record_data):
        settings = ValidationSettings(max_titles=2, max_dates=2)
        assert check_record(DatasetRecord.from_dict(valid_record_data), settings).outcomes == {}

    def test_institution_orcid_not_checked(self):
        record = DatasetRecord.from_dict(
            {"contributors": [{"roles": ["Sponsor"], "orcid": "bad"}]}
        )
        assert "contributors.0.orcid" not in check_record(record).outcomes

    def test_warnings_do_not_count_as_errors(self, valid_record_data):
        valid_record_data["abstract"] = "a" * 16000
        report = check_record(DatasetRecord.from_dict(valid_record_data))

        assert list(report.warnings) == ["abstract"]
        assert report.errors == {}
        assert not report.has_errors

    def test_settings_applied(self, valid_record_data):
        settings = ValidationSettings(title_max_length=10)
        report = check_record(DatasetRecord.from_dict(valid_record_data), settings)

        assert report.outcomes["titles.0"].severity is Severity.ERROR


class TestRecordReport:
    def test_summary_groups_by_severity(self, invalid_record_data):
        report = check_record(DatasetRecord.from_dict(invalid_record_data))
        summary = report.to_summary()

        assert summary.startswith("=== Validation Report ===")
        assert f"ERROR ({len(report.errors)}):" in summary
        assert "  abstract: Abstract is required" in summary
        assert "WARNING" not in summary

    def test_empty_report(self):
        assert RecordReport().outcomes == {}

"""Validation of DataCite editor fields.

This package provides:
- Primitive validators for single values (required, length, year,
  version, DOI, URL, ORCID, email, dates)
- Cross-entry constraints over sibling title and date rows
- Rule composition with first-failure-wins evaluation and field factories
- A per-field debounce timer
- Form state tracking and whole-record checks
"""

from dcform.quality.consistency import (
    can_add_date,
    can_add_title,
    check_main_title_count,
    normalize_title_key,
    validate_title_uniqueness,
)
from dcform.quality.engine import (
    FieldState,
    FormValidator,
    RecordReport,
    ValidationStatus,
    check_record,
)
from dcform.quality.rules import (
    ValidationRule,
    combine_validation_rules,
    create_title_validation_rules,
    create_validation_rule,
    evaluate_rules,
    get_abstract_validation_rules,
    get_date_entry_validation_rules,
    get_doi_validation_rules,
    get_email_validation_rules,
    get_orcid_validation_rules,
    get_required_rules,
    get_url_validation_rules,
    get_version_validation_rules,
    get_year_validation_rules,
    max_debounce_ms,
    revalidate_titles,
)
from dcform.quality.scheduler import DebounceTimer
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

__all__ = [
    # Validators
    "validate_required",
    "validate_text_length",
    "validate_year",
    "validate_semantic_version",
    "validate_doi_format",
    "validate_url_format",
    "validate_orcid",
    "validate_email",
    "validate_date",
    # Consistency
    "validate_title_uniqueness",
    "check_main_title_count",
    "normalize_title_key",
    "can_add_title",
    "can_add_date",
    # Rules
    "ValidationRule",
    "create_validation_rule",
    "combine_validation_rules",
    "evaluate_rules",
    "max_debounce_ms",
    "get_required_rules",
    "get_year_validation_rules",
    "get_doi_validation_rules",
    "get_version_validation_rules",
    "get_url_validation_rules",
    "get_orcid_validation_rules",
    "get_email_validation_rules",
    "get_abstract_validation_rules",
    "create_title_validation_rules",
    "get_date_entry_validation_rules",
    "revalidate_titles",
    # Scheduling
    "DebounceTimer",
    # Engine
    "FormValidator",
    "FieldState",
    "ValidationStatus",
    "RecordReport",
    "check_record",
]

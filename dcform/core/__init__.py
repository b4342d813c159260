"""Core models, vocabularies, date codec and role classifier."""

# Contributor roles
from dcform.core.contributors import (
    CONTRIBUTOR_ROLE_LABELS,
    INSTITUTION_ONLY_ROLE_KEYS,
    infer_contributor_type,
    is_institution_only_role,
    normalise_role_label,
    normalise_roles,
    role_key,
)

# Date codec
from dcform.core.dates import (
    build_date_time,
    has_valid_date_value,
    parse_date_entry,
    parse_date_part,
    parse_date_time,
    serialize_date_entry,
)

# Vocabularies and limits
from dcform.core.fields import (
    ABSTRACT_MAX_LENGTH,
    LENGTH_WARNING_RATIO,
    TITLE_MAX_LENGTH,
    ContributorType,
    DateType,
    TitleType,
    normalize_title_type_slug,
)

# Models
from dcform.core.models import (
    CheckResult,
    ContributorEntry,
    DatasetRecord,
    DateComponents,
    DateRangeEntry,
    Severity,
    TitleEntry,
    TitleUniquenessResult,
    ValidationOutcome,
)

__all__ = [
    # Roles
    "CONTRIBUTOR_ROLE_LABELS",
    "INSTITUTION_ONLY_ROLE_KEYS",
    "role_key",
    "normalise_role_label",
    "normalise_roles",
    "is_institution_only_role",
    "infer_contributor_type",
    # Dates
    "parse_date_time",
    "build_date_time",
    "serialize_date_entry",
    "has_valid_date_value",
    "parse_date_entry",
    "parse_date_part",
    # Fields
    "TITLE_MAX_LENGTH",
    "ABSTRACT_MAX_LENGTH",
    "LENGTH_WARNING_RATIO",
    "TitleType",
    "DateType",
    "ContributorType",
    "normalize_title_type_slug",
    # Models
    "Severity",
    "ValidationOutcome",
    "CheckResult",
    "TitleUniquenessResult",
    "TitleEntry",
    "DateComponents",
    "DateRangeEntry",
    "ContributorEntry",
    "DatasetRecord",
]

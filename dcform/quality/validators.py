"""Primitive field validators for DataCite metadata.

Each validator answers one question about one value and returns a
CheckResult. Validators are total: malformed input, wrong types and
None all produce an invalid result instead of an exception.

Covered formats:
- Required text and text length bounds
- Publication year
- Semantic version (optional field)
- DOI (with doi.org / doi: prefixes)
- URL, ORCID (with checksum) and email
- Calendar dates in DataCite token form
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any
from urllib.parse import urlparse

from dcform.core.dates import parse_date_part, parse_date_time
from dcform.core.fields import MIN_YEAR
from dcform.core.models import CheckResult

_YEAR_PATTERN = re.compile(r"^\d{4}$")

_SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?)?$"
)

_DOI_PATTERN = re.compile(r"^10\.\d{4,}(?:\.\d+)*/\S+$")
_DOI_PREFIXES = (
    "https://doi.org/",
    "http://doi.org/",
    "https://dx.doi.org/",
    "http://dx.doi.org/",
    "doi:",
)

_ORCID_PATTERN = re.compile(r"^\d{4}-\d{4}-\d{4}-\d{3}[\dX]$")
_ORCID_PREFIXES = ("https://orcid.org/", "http://orcid.org/", "orcid.org/")

_EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_VALID = CheckResult(is_valid=True)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _invalid(message: str) -> CheckResult:
    return CheckResult(is_valid=False, error=message)


def validate_required(value: Any, field_name: str = "Field") -> CheckResult:
    """Fail when the trimmed value is empty."""
    if not _text(value):
        return _invalid(f"{field_name} is required")
    return _VALID


def validate_text_length(
    text: Any,
    *,
    min: int | None = None,
    max: int | None = None,
    field_name: str = "Field",
) -> CheckResult:
    """Check the trimmed length of ``text`` against ``[min, max]``.

    Only hard violations are reported. Rule factories decide whether a
    value close to ``max`` deserves a warning.
    """
    length = len(_text(text))

    if min is not None and length < min:
        return _invalid(
            f"{field_name} must be at least {min} characters (current: {length})"
        )

    if max is not None and length > max:
        return _invalid(
            f"{field_name} must not exceed {max} characters (current: {length})"
        )

    return _VALID


def validate_year(
    value: Any, *, min_year: int = MIN_YEAR, max_year: int | None = None
) -> CheckResult:
    """Validate a four-digit publication year.

    The accepted range defaults to ``min_year`` through next year, so
    datasets registered ahead of their release year still pass.
    """
    if isinstance(value, bool):
        return _invalid("Year must be a valid number")

    if isinstance(value, int):
        year = value
    else:
        text = _text(value)
        if not _YEAR_PATTERN.match(text):
            return _invalid("Year must be a four-digit number")
        year = int(text)

    upper = max_year if max_year is not None else datetime.now().year + 1
    if year < min_year or year > upper:
        return _invalid(f"Year must be between {min_year} and {upper}")

    return _VALID


def validate_semantic_version(value: Any) -> CheckResult:
    """Validate ``MAJOR.MINOR[.PATCH]``; empty input is valid.

    A full ``MAJOR.MINOR.PATCH`` version may carry semver pre-release and
    build metadata (``1.0.0-rc.1+build.5``).
    """
    text = _text(value)
    if not text:
        return _VALID

    if not _SEMVER_PATTERN.match(text):
        return _invalid(
            "Invalid semantic version. Use format: MAJOR.MINOR.PATCH (e.g., 1.2.3)"
        )

    return _VALID


def validate_doi_format(value: Any) -> CheckResult:
    """Validate DOI syntax ``10.<registrant>/<suffix>``.

    Resolver URLs and the ``doi:`` scheme are accepted and stripped; the
    bare DOI is returned as ``normalized``.
    """
    clean = _text(value)
    if not clean:
        return _invalid("DOI is required")

    for prefix in _DOI_PREFIXES:
        if clean.lower().startswith(prefix):
            clean = clean[len(prefix) :]
            break

    if not _DOI_PATTERN.match(clean):
        return _invalid(
            "Invalid DOI format. Use format: 10.xxxx/xxxxx or https://doi.org/10.xxxx/xxxxx"
        )

    return CheckResult(is_valid=True, normalized=clean)


def validate_url_format(value: Any) -> CheckResult:
    """Validate an absolute http(s) URL with a host."""
    text = _text(value)
    if not text:
        return _invalid("URL is required")

    try:
        parsed = urlparse(text)
    except ValueError as e:
        return _invalid(f"Invalid URL: {e}")

    if parsed.scheme.lower() not in ("http", "https"):
        return _invalid("Invalid URL format. URL must start with http:// or https://")

    if not parsed.netloc:
        return _invalid("Invalid URL format. URL is missing a domain")

    return CheckResult(is_valid=True, normalized=text)


def validate_orcid(value: Any) -> CheckResult:
    """Validate an ORCID iD and its ISO 7064 MOD 11-2 check digit.

    Empty input is valid since ORCID is optional.
    """
    clean = _text(value)
    if not clean:
        return _VALID

    for prefix in _ORCID_PREFIXES:
        if clean.lower().startswith(prefix):
            clean = clean[len(prefix) :]
            break
    clean = clean.upper()

    if not _ORCID_PATTERN.match(clean):
        return _invalid("Invalid ORCID format. Use format: 0000-0001-2345-6789")

    digits = clean.replace("-", "")
    total = 0
    for digit in digits[:-1]:
        total = (total + int(digit)) * 2

    check_digit = (12 - total % 11) % 11
    expected = "X" if check_digit == 10 else str(check_digit)

    if digits[-1] != expected:
        return _invalid("Invalid ORCID checksum. Please verify the ORCID.")

    return CheckResult(is_valid=True, normalized=clean)


def validate_email(value: Any) -> CheckResult:
    """Validate an email address."""
    text = _text(value)
    if not text:
        return _invalid("Email is required")

    if not _EMAIL_PATTERN.match(text):
        return _invalid("Invalid email format")

    return _VALID


def validate_date(
    value: Any,
    *,
    allow_future: bool = False,
    min_date: date = date(MIN_YEAR, 1, 1),
    max_date: date | None = None,
) -> CheckResult:
    """Validate one DataCite datetime token as a calendar date.

    The time and timezone are split off first; only the date part is
    range-checked.
    """
    text = _text(value)
    if not text:
        return _invalid("Date is required")

    parsed = parse_date_part(parse_date_time(text).date)
    if parsed is None:
        return _invalid("Invalid date format. Use YYYY, YYYY-MM or YYYY-MM-DD")

    if parsed < min_date:
        return _invalid(f"Date must be on or after {min_date.isoformat()}")

    upper = max_date if max_date is not None else (None if allow_future else date.today())
    if upper is not None and parsed > upper:
        if max_date is None:
            return _invalid("Date cannot be in the future")
        return _invalid(f"Date must be on or before {upper.isoformat()}")

    return CheckResult(is_valid=True, normalized=parsed.isoformat())

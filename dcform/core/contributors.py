"""Contributor role normalization and type inference.

Role names arrive from XML imports, CSV uploads and legacy databases in
many spellings (``HostingInstitution``, ``hosting-institution``,
``Hosting Institution``). They are reduced to a lookup key with case,
diacritics and punctuation removed and mapped onto the DataCite
contributorType labels.
"""

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any

from .fields import ContributorType

CONTRIBUTOR_ROLE_LABELS = {
    "contactperson": "Contact Person",
    "datacollector": "Data Collector",
    "datacurator": "Data Curator",
    "datamanager": "Data Manager",
    "distributor": "Distributor",
    "editor": "Editor",
    "hostinginstitution": "Hosting Institution",
    "producer": "Producer",
    "projectleader": "Project Leader",
    "projectmanager": "Project Manager",
    "projectmember": "Project Member",
    "registrationagency": "Registration Agency",
    "registrationauthority": "Registration Authority",
    "relatedperson": "Related Person",
    "researcher": "Researcher",
    "researchgroup": "Research Group",
    "rightsholder": "Rights Holder",
    "sponsor": "Sponsor",
    "supervisor": "Supervisor",
    "translator": "Translator",
    "workpackageleader": "Work Package Leader",
    "other": "Other",
}

# Legacy ISO 19115 spelling still present in imported records
_ROLE_ALIASES = {
    "pointofcontact": "contactperson",
}

# Roles that only an organisation can hold
INSTITUTION_ONLY_ROLE_KEYS = frozenset(
    {
        "distributor",
        "hostinginstitution",
        "registrationagency",
        "registrationauthority",
        "researchgroup",
        "sponsor",
    }
)


def role_key(label: str | None) -> str:
    """Reduce a role label to its lookup key.

    Strips diacritics, case, whitespace and punctuation, so
    ``"Hosting-Institution"`` and ``"hosting institution"`` share a key.
    """
    if not label:
        return ""

    nfd = unicodedata.normalize("NFD", label)
    ascii_text = "".join(char for char in nfd if unicodedata.category(char) != "Mn")
    key = re.sub(r"[^a-z0-9]", "", ascii_text.casefold())
    return _ROLE_ALIASES.get(key, key)


def normalise_role_label(label: str | None) -> str:
    """Map a free-text role to its canonical label.

    Unknown roles are kept as trimmed text rather than dropped.
    """
    key = role_key(label)
    if key in CONTRIBUTOR_ROLE_LABELS:
        return CONTRIBUTOR_ROLE_LABELS[key]
    return (label or "").strip()


def normalise_roles(roles: Iterable[Any] | Mapping[str, Any] | str | None) -> list[str]:
    """Normalize a role collection to unique canonical labels.

    Args:
        roles: A list of labels, a single label, a mapping whose values are
            labels, or None. Non-string items are ignored.

    Returns:
        Canonical labels in first-seen order without duplicates.
    """
    if not roles:
        return []

    if isinstance(roles, str):
        raw_roles: Iterable[Any] = [roles]
    elif isinstance(roles, Mapping):
        raw_roles = roles.values()
    else:
        raw_roles = roles

    result = []
    seen = set()
    for role in raw_roles:
        if not isinstance(role, str):
            continue
        label = normalise_role_label(role)
        if label and label not in seen:
            seen.add(label)
            result.append(label)

    return result


def is_institution_only_role(label: str | None) -> bool:
    """Check whether a role can only be held by an institution."""
    return role_key(label) in INSTITUTION_ONLY_ROLE_KEYS


def infer_contributor_type(
    explicit_type: str | None, roles: Iterable[str] | None
) -> ContributorType:
    """Infer whether a contributor is a person or an institution.

    A contributor is an institution when its declared type says so, or
    when every declared role is institution-only. Mixed roles and an empty
    role list fall back to person.
    """
    if explicit_type and explicit_type.strip().lower() == ContributorType.INSTITUTION.value:
        return ContributorType.INSTITUTION

    role_list = [role for role in (roles or []) if role and role.strip()]
    if role_list and all(is_institution_only_role(role) for role in role_list):
        return ContributorType.INSTITUTION

    return ContributorType.PERSON

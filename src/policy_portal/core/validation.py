"""Input validation rules for policy records."""

from __future__ import annotations

import re
from datetime import datetime

from policy_portal.models.policy import FIELD_LABELS, GENDERS, NUMERIC_FIELDS, PolicyRecord

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

REQUIRED_FIELDS = (
    "partner_name",
    "product_name",
    "premium",
    "branch_name",
    "branch_code",
    "customer_name",
    "gender",
    "date_of_birth",
    "mobile_number",
    "enrolment_date",
    "nominee_name",
    "nominee_relationship",
)

DATE_FIELDS = ("date_of_birth", "enrolment_date", "nominee_dob")
GENDER_FIELDS = ("gender", "nominee_gender")


def validate_optional_date(value: str, field_name: str) -> str:
    """Accept an empty value or a real YYYY-MM-DD date."""
    normalized = value.strip()
    if not normalized:
        return ""
    if not DATE_PATTERN.match(normalized):
        raise ValueError(f"{field_name} must use the YYYY-MM-DD format.")
    try:
        datetime.strptime(normalized, "%Y-%m-%d")
    except ValueError as error:
        raise ValueError(f"{field_name} is not a valid date.") from error
    return normalized


def validate_gender(value: str, field_name: str) -> str:
    """Accept an empty value or one of the allowed genders."""
    normalized = value.strip()
    if normalized and normalized not in GENDERS:
        raise ValueError(f"{field_name} must be one of: {', '.join(GENDERS)}.")
    return normalized


def missing_required_fields(record: PolicyRecord) -> list[str]:
    """Return the labels of required fields that are still unset."""
    missing: list[str] = []
    for name in REQUIRED_FIELDS:
        value = getattr(record, name)
        if name in NUMERIC_FIELDS:
            if value is None:
                missing.append(FIELD_LABELS[name])
        elif not str(value).strip():
            missing.append(FIELD_LABELS[name])
    return missing


def validate_policy(record: PolicyRecord) -> PolicyRecord:
    """Validate a form record before it is saved."""
    missing = missing_required_fields(record)
    if missing:
        raise ValueError(f"Please fill in: {', '.join(missing)}")

    for name in DATE_FIELDS:
        validate_optional_date(getattr(record, name), FIELD_LABELS[name])
    for name in GENDER_FIELDS:
        validate_gender(getattr(record, name), FIELD_LABELS[name])
    return record

"""Policy record domain model."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

GENDERS = ("Male", "Female", "Other")

NOMINEE_RELATIONSHIPS = [
    "Spouse",
    "Son",
    "Daughter",
    "Mother",
    "Father",
    "Sister",
    "Brother",
    "Grandfather",
    "Grandmother",
    "Nephew",
    "Niece",
    "Uncle",
    "Aunty",
    "Other",
]

NUMERIC_FIELDS = frozenset({"premium", "tenure"})

FIELD_LABELS = {
    "id": "ID",
    "partner_name": "Partner Name",
    "product_name": "Product Details",
    "premium": "Premium",
    "tenure": "Tenure",
    "agent_name": "CSE Name",
    "branch_name": "Branch Name",
    "branch_code": "Branch Code",
    "region": "Region",
    "customer_name": "Customer Name",
    "gender": "Gender",
    "date_of_birth": "Date of Birth",
    "mobile_number": "Mobile Number",
    "customer_id": "Customer ID",
    "enrolment_date": "Enrolment Date",
    "savings_account_no": "Savings A/C No.",
    "csb_code": "CSB Code",
    "d2c_code": "D2C Code / RO Code",
    "nominee_name": "Nominee Name",
    "nominee_dob": "Nominee Date of Birth",
    "nominee_relationship": "Nominee Relationship",
    "nominee_mobile_number": "Nominee Mobile Number",
    "nominee_gender": "Nominee Gender",
    "remarks": "Remarks",
}

Number = int | float


def new_policy_id() -> str:
    """Generate an opaque, unique policy identifier."""
    return uuid.uuid4().hex


def to_number(value: Any) -> Number | None:
    """Coerce a form or stored value to a number, or None when unset."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


@dataclass
class PolicyRecord:
    """One insurance policy entry as captured by the data-entry form."""

    id: str = ""
    partner_name: str = ""
    product_name: str = ""
    premium: Number | None = None
    tenure: Number | None = None
    agent_name: str = ""
    branch_name: str = ""
    branch_code: str = ""
    region: str = ""
    customer_name: str = ""
    gender: str = ""
    date_of_birth: str = ""
    mobile_number: str = ""
    customer_id: str = ""
    enrolment_date: str = ""
    savings_account_no: str = ""
    csb_code: str = ""
    d2c_code: str = ""
    nominee_name: str = ""
    nominee_dob: str = ""
    nominee_relationship: str = ""
    nominee_mobile_number: str = ""
    nominee_gender: str = ""
    remarks: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyRecord":
        """Build a record from stored or extracted data, ignoring unknown keys."""
        values: dict[str, Any] = {}
        for name in FIELD_NAMES:
            if name not in data:
                continue
            values[name] = _normalize(name, data[name])
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def merged(self, partial: dict[str, Any]) -> "PolicyRecord":
        """Return a copy with every present field of ``partial`` overwritten."""
        updates = {
            name: _normalize(name, value)
            for name, value in partial.items()
            if name in FIELD_NAMES and name != "id" and value is not None
        }
        return replace(self, **updates)

    def display_value(self, name: str) -> str:
        value = getattr(self, name)
        return "" if value is None else str(value)


def _normalize(name: str, value: Any) -> Any:
    if name in NUMERIC_FIELDS:
        return to_number(value)
    return "" if value is None else str(value)


FIELD_NAMES: tuple[str, ...] = tuple(field.name for field in fields(PolicyRecord))

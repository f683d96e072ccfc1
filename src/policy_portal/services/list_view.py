"""Search, sort and pagination for the policy list."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from policy_portal.models.app_state import SortState
from policy_portal.models.policy import FIELD_NAMES, PolicyRecord

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class Page:
    items: list[PolicyRecord]
    page: int
    total_pages: int
    total_count: int


def filter_records(records: list[PolicyRecord], search_term: str) -> list[PolicyRecord]:
    """Keep records where any field contains the term, case-insensitively."""
    term = search_term.lower()
    if not term:
        return list(records)
    return [
        record
        for record in records
        if any(term in record.display_value(name).lower() for name in FIELD_NAMES)
    ]


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None or value == "":
        return (0, "")
    if isinstance(value, (int, float)):
        return (1, value)
    return (2, str(value))


def sort_records(
    records: list[PolicyRecord],
    key: str | None,
    descending: bool = False,
) -> list[PolicyRecord]:
    """Stable sort by one field; equal keys keep their relative order."""
    if key is None:
        return list(records)
    if key not in FIELD_NAMES:
        raise ValueError(f"Unknown sort field: {key}")
    return sorted(records, key=lambda record: _sort_key(getattr(record, key)), reverse=descending)


def toggle_sort(state: SortState, key: str) -> SortState:
    """Flip direction for the current key; any other key starts ascending."""
    if state.key == key:
        return SortState(key=key, descending=not state.descending)
    return SortState(key=key, descending=False)


def total_pages(count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    return min(max(1, page), total_pages(count, page_size))


def paginate(
    records: list[PolicyRecord],
    page: int,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page:
    """Return one page of records, clamping the page number into range."""
    current = clamp_page(page, len(records), page_size)
    start = (current - 1) * page_size
    return Page(
        items=list(records[start : start + page_size]),
        page=current,
        total_pages=total_pages(len(records), page_size),
        total_count=len(records),
    )


def build_page(
    records: list[PolicyRecord],
    search_term: str,
    sort: SortState,
    page: int,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page:
    """Run filter, sort and paginate in sequence."""
    filtered = filter_records(records, search_term)
    ordered = sort_records(filtered, sort.key, sort.descending)
    return paginate(ordered, page, page_size)

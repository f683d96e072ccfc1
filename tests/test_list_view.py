"""Tests for list search, sort and pagination."""

from __future__ import annotations

import pytest

from policy_portal.models.app_state import SortState
from policy_portal.models.policy import PolicyRecord
from policy_portal.services.list_view import (
    build_page,
    filter_records,
    paginate,
    sort_records,
    toggle_sort,
)


def make_records() -> list[PolicyRecord]:
    return [
        PolicyRecord(id="1", customer_name="Rina Das", partner_name="PBGB", premium=690),
        PolicyRecord(id="2", customer_name="amit roy", partner_name="KCCB", premium=399),
        PolicyRecord(id="3", customer_name="Bina Sen", partner_name="PBGB", premium=None),
        PolicyRecord(id="4", customer_name="Chandan", partner_name="UBGB", premium=365),
    ]


def test_empty_search_keeps_every_record_in_order() -> None:
    records = make_records()
    assert [record.id for record in filter_records(records, "")] == ["1", "2", "3", "4"]


def test_search_is_case_insensitive_across_fields() -> None:
    records = make_records()
    assert [record.id for record in filter_records(records, "AMIT")] == ["2"]
    assert [record.id for record in filter_records(records, "pbgb")] == ["1", "3"]
    assert [record.id for record in filter_records(records, "399")] == ["2"]
    assert filter_records(records, "nobody") == []


def test_toggle_sort_flips_same_key_and_resets_for_new_key() -> None:
    state = toggle_sort(SortState(), "premium")
    assert state == SortState(key="premium", descending=False)

    state = toggle_sort(state, "premium")
    assert state == SortState(key="premium", descending=True)

    state = toggle_sort(state, "customer_name")
    assert state == SortState(key="customer_name", descending=False)


def test_sort_numbers_numerically_with_empty_first() -> None:
    ordered = sort_records(make_records(), "premium")
    assert [record.id for record in ordered] == ["3", "4", "2", "1"]

    descending = sort_records(make_records(), "premium", descending=True)
    assert [record.id for record in descending] == ["1", "2", "4", "3"]


def test_sort_is_stable_for_equal_keys() -> None:
    ordered = sort_records(make_records(), "partner_name")
    assert [record.id for record in ordered] == ["2", "1", "3", "4"]


def test_sort_without_key_keeps_order_and_rejects_unknown_key() -> None:
    assert [record.id for record in sort_records(make_records(), None)] == ["1", "2", "3", "4"]
    with pytest.raises(ValueError):
        sort_records(make_records(), "not_a_field")


def test_paginate_twenty_five_records() -> None:
    records = [PolicyRecord(id=str(index)) for index in range(25)]

    first = paginate(records, 1)
    assert first.total_pages == 3
    assert len(first.items) == 10

    last = paginate(records, 3)
    assert [record.id for record in last.items] == [str(index) for index in range(20, 25)]

    assert paginate(records, 9).page == 3
    assert paginate(records, 0).page == 1


def test_paginate_empty_collection_reports_one_page() -> None:
    page = paginate([], 1)
    assert page.page == 1
    assert page.total_pages == 1
    assert page.items == []
    assert page.total_count == 0


def test_build_page_filters_before_paginating() -> None:
    records = [PolicyRecord(id=str(index), region="East" if index % 2 else "West") for index in range(30)]

    page = build_page(records, "east", SortState(), page=2, page_size=10)

    assert page.total_count == 15
    assert page.total_pages == 2
    assert len(page.items) == 5

"""Tests for application state transitions."""

from __future__ import annotations

import pytest

from policy_portal.models.app_state import ConfirmAction, Severity, ViewMode
from policy_portal.repositories.audit_repository import AuditRepository
from policy_portal.repositories.db_pool import ThreadLocalConnection
from policy_portal.repositories.policy_repository import PolicyRepository
from policy_portal.repositories.schema import initialize_schema
from policy_portal.repositories.settings_repository import SettingsRepository
from policy_portal.repositories.store import KeyValueStore
from policy_portal.services.app_controller import AppController
from policy_portal.services.policy_service import PolicyService


def build_controller(tmp_path, clock=lambda: 1000, page_size=10):
    pool = ThreadLocalConnection(str(tmp_path / "test.db"))
    initialize_schema(pool)
    store = KeyValueStore(pool)
    policy_service = PolicyService(PolicyRepository(store), AuditRepository(pool))
    settings_repo = SettingsRepository(store)
    controller = AppController(policy_service, settings_repo, page_size=page_size, clock=clock)
    return controller, policy_service, store


def fill_required(controller: AppController, customer_name: str = "Rina Das") -> None:
    form = controller.form
    form.set_field("partner_name", "BANGIYA")
    form.set_field("product_name", "Combo")
    form.set_field("premium", "490")
    for name, value in {
        "branch_name": "Kolkata",
        "branch_code": "KOL01",
        "customer_name": customer_name,
        "gender": "Female",
        "date_of_birth": "1990-05-12",
        "mobile_number": "9876543210",
        "enrolment_date": "2024-01-15",
        "nominee_name": "Amit Das",
        "nominee_relationship": "Spouse",
    }.items():
        form.set_field(name, value)


def test_initial_state_is_list_view(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)

    assert controller.state.view is ViewMode.LIST
    assert controller.state.editing is None
    assert controller.state.toast is None
    assert controller.state.theme == "light"


def test_add_new_then_save_returns_to_list_with_toast(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)

    controller.start_new()
    assert controller.state.view is ViewMode.FORM
    fill_required(controller)

    assert controller.save_form() is True
    assert controller.state.view is ViewMode.LIST
    assert controller.form is None
    assert controller.state.toast.message == "New policy added successfully!"
    assert controller.state.toast.severity is Severity.SUCCESS
    assert len(controller.policies) == 1
    assert controller.policies[0].tenure == 1
    assert controller.policies[0].agent_name == "Jahed"


def test_invalid_save_stays_on_form_with_error_toast(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()
    controller.form.set_field("customer_name", "Incomplete")

    assert controller.save_form() is False
    assert controller.state.view is ViewMode.FORM
    assert controller.state.toast.severity is Severity.ERROR
    assert controller.state.toast.message.startswith("Please fill in:")
    assert controller.policies == []


def test_edit_updates_existing_policy(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()
    fill_required(controller)
    controller.save_form()
    policy_id = controller.policies[0].id

    controller.start_edit(policy_id)
    assert controller.state.editing.id == policy_id
    controller.form.set_field("remarks", "Follow up")

    assert controller.save_form() is True
    assert controller.state.toast.message == "Policy updated successfully!"
    assert controller.policies[0].remarks == "Follow up"
    assert len(controller.policies) == 1


def test_cancel_discards_form(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()
    fill_required(controller)

    controller.cancel_form()

    assert controller.state.view is ViewMode.LIST
    assert controller.form is None
    assert controller.policies == []


def test_delete_requires_confirmation(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    for name in ("One", "Two"):
        controller.start_new()
        fill_required(controller, customer_name=name)
        controller.save_form()
    target = controller.policies[0].id

    pending = controller.request_delete(target)
    assert pending.action is ConfirmAction.DELETE_ONE
    controller.cancel_pending()
    assert controller.state.pending is None
    assert len(controller.policies) == 2

    controller.request_delete(target)
    controller.confirm_pending()
    assert [policy.customer_name for policy in controller.policies] == ["Two"]
    assert controller.state.toast.message == "Policy deleted."


def test_delete_all_after_confirmation(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()
    fill_required(controller)
    controller.save_form()

    controller.request_delete_all()
    controller.confirm_pending()

    assert controller.policies == []
    assert controller.state.toast.message == "All policies deleted."


def test_confirm_without_pending_does_nothing(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.confirm_pending()
    assert controller.state.toast is None


def test_toast_expiry_only_clears_matching_toast(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path, clock=lambda: 5000)

    first = controller.show_toast("first", Severity.INFO)
    second = controller.show_toast("second", Severity.INFO)
    assert second.id > first.id

    assert controller.expire_toast(first.id) is False
    assert controller.state.toast is second

    assert controller.expire_toast(second.id) is True
    assert controller.state.toast is None


def test_search_change_resets_page(tmp_path) -> None:
    controller, service, _ = build_controller(tmp_path, page_size=1)
    for name in ("One", "Two", "Three"):
        controller.start_new()
        fill_required(controller, customer_name=name)
        controller.save_form()

    assert controller.next_page() == 2
    assert controller.next_page() == 3
    assert controller.next_page() == 3

    controller.set_search("two")
    assert controller.state.list_view.page == 1
    assert controller.visible_page().total_count == 1

    controller.set_search("")
    controller.request_sort("customer_name")
    assert [policy.customer_name for policy in controller.visible_page(2).items] == ["Three"]
    assert len(service.list_policies()) == 3


def test_theme_change_is_persisted(tmp_path) -> None:
    controller, _, store = build_controller(tmp_path)

    controller.set_theme("synthwave")

    assert controller.state.theme == "synthwave"
    assert store.read("mswasth-theme", None) == "synthwave"
    with pytest.raises(ValueError):
        controller.set_theme("not-a-theme")

    reloaded, _, _ = build_controller(tmp_path)
    assert reloaded.state.theme == "synthwave"


def test_autofill_requires_image(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()

    assert controller.begin_autofill(has_image=False) is False
    assert controller.state.toast.message == "Please upload an image first."
    assert controller.state.toast.severity is Severity.INFO


def test_autofill_success_merges_fields(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()

    assert controller.begin_autofill(has_image=True) is True
    assert controller.begin_autofill(has_image=True) is False

    assert controller.complete_autofill({"customer_name": "Asha Roy", "premium": 690}, controller.form)

    assert controller.form.record.customer_name == "Asha Roy"
    assert controller.form.record.premium == 690
    assert not controller.form.extracting
    assert controller.state.toast.message == "Data extracted successfully!"


def test_autofill_failure_shows_error(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()
    controller.begin_autofill(has_image=True)

    assert controller.fail_autofill("Failed to process image with the Gemini API.", controller.form)

    assert not controller.form.extracting
    assert controller.state.toast.severity is Severity.ERROR
    assert controller.state.toast.message == "Failed to process image with the Gemini API."


def test_late_autofill_result_is_not_applied_to_another_form(tmp_path) -> None:
    controller, _, _ = build_controller(tmp_path)
    controller.start_new()
    fill_required(controller, customer_name="Existing Customer")
    controller.save_form()
    existing = controller.policies[0]

    origin = controller.start_new()
    assert controller.begin_autofill(has_image=True) is True
    controller.cancel_form()
    controller.start_edit(existing.id)
    controller.dismiss_toast()

    assert controller.complete_autofill({"customer_name": "From Other Image"}, origin) is False
    assert controller.fail_autofill("timed out", origin) is False
    assert controller.form.record.customer_name == "Existing Customer"
    assert controller.state.toast is None

    assert controller.save_form() is True
    assert controller.policies[0].customer_name == "Existing Customer"

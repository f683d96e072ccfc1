"""Top-level application controller.

All UI state lives in one ``AppState`` and changes only through the named
transitions below. Widgets read ``state`` and call transitions; they never
mutate state themselves.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from policy_portal.models.app_state import (
    THEMES,
    AppState,
    ConfirmAction,
    PendingConfirmation,
    Severity,
    Toast,
    ViewMode,
)
from policy_portal.models.policy import PolicyRecord
from policy_portal.repositories.settings_repository import SettingsRepository
from policy_portal.services.form_engine import PolicyFormEngine
from policy_portal.services.list_view import DEFAULT_PAGE_SIZE, Page, build_page, toggle_sort
from policy_portal.services.policy_service import PolicyService

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AppController:
    """Owns the policy collection view and every UI state transition."""

    def __init__(
        self,
        policy_service: PolicyService,
        settings_repo: SettingsRepository,
        page_size: int = DEFAULT_PAGE_SIZE,
        form_factory: Callable[[], PolicyFormEngine] = PolicyFormEngine,
        clock: Callable[[], int] = _now_ms,
    ):
        self._policy_service = policy_service
        self._settings_repo = settings_repo
        self._page_size = page_size
        self._form_factory = form_factory
        self._clock = clock
        self._last_toast_id = 0
        self.form: PolicyFormEngine | None = None
        self.state = AppState(theme=settings_repo.get_theme())

    @property
    def policies(self) -> list[PolicyRecord]:
        return self._policy_service.list_policies()

    def show_list(self) -> None:
        self.state.view = ViewMode.LIST
        self.state.editing = None
        self.form = None

    def start_new(self) -> PolicyFormEngine:
        self.state.editing = None
        self.state.view = ViewMode.FORM
        self.form = self._form_factory()
        self.form.start_new()
        return self.form

    def start_edit(self, policy_id: str) -> PolicyFormEngine:
        policy = self._policy_service.get_policy(policy_id)
        self.state.editing = policy
        self.state.view = ViewMode.FORM
        self.form = self._form_factory()
        self.form.start_edit(policy)
        return self.form

    def cancel_form(self) -> None:
        self.show_list()

    def save_form(self) -> bool:
        """Create or update from the form; returns False when validation fails."""
        if self.form is None:
            raise RuntimeError("No form is open.")
        record = self.form.to_record()
        try:
            if self.state.editing is not None:
                self._policy_service.update_policy(record)
                message = "Policy updated successfully!"
            else:
                self._policy_service.create_policy(record)
                message = "New policy added successfully!"
        except ValueError as error:
            self.show_toast(str(error), Severity.ERROR)
            return False
        self.show_list()
        self.show_toast(message, Severity.SUCCESS)
        return True

    def request_delete(self, policy_id: str) -> PendingConfirmation:
        self.state.pending = PendingConfirmation(ConfirmAction.DELETE_ONE, policy_id)
        return self.state.pending

    def request_delete_all(self) -> PendingConfirmation:
        self.state.pending = PendingConfirmation(ConfirmAction.DELETE_ALL)
        return self.state.pending

    def confirm_pending(self) -> None:
        """Carry out the pending destructive action."""
        pending = self.state.pending
        if pending is None:
            return
        self.state.pending = None
        try:
            if pending.action is ConfirmAction.DELETE_ONE:
                self._policy_service.delete_policy(pending.policy_id or "")
                self.show_toast("Policy deleted.", Severity.SUCCESS)
            else:
                self._policy_service.delete_all()
                self.state.list_view.page = 1
                self.show_toast("All policies deleted.", Severity.SUCCESS)
        except ValueError as error:
            self.show_toast(str(error), Severity.ERROR)

    def cancel_pending(self) -> None:
        self.state.pending = None

    def show_toast(self, message: str, severity: Severity = Severity.INFO) -> Toast:
        toast_id = max(self._clock(), self._last_toast_id + 1)
        self._last_toast_id = toast_id
        self.state.toast = Toast(id=toast_id, message=message, severity=severity)
        if severity is Severity.ERROR:
            logger.warning("Error toast: %s", message)
        return self.state.toast

    def expire_toast(self, toast_id: int) -> bool:
        """Clear the toast only if it is still the one that scheduled expiry."""
        if self.state.toast is not None and self.state.toast.id == toast_id:
            self.state.toast = None
            return True
        return False

    def dismiss_toast(self) -> None:
        self.state.toast = None

    def set_search(self, term: str) -> None:
        if term != self.state.list_view.search_term:
            self.state.list_view.search_term = term
            self.state.list_view.page = 1

    def request_sort(self, key: str) -> None:
        self.state.list_view.sort = toggle_sort(self.state.list_view.sort, key)

    def go_to_page(self, page: int) -> int:
        self.state.list_view.page = self.visible_page(page).page
        return self.state.list_view.page

    def next_page(self) -> int:
        return self.go_to_page(self.state.list_view.page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.state.list_view.page - 1)

    def visible_page(self, page: int | None = None) -> Page:
        list_view = self.state.list_view
        return build_page(
            self._policy_service.list_policies(),
            list_view.search_term,
            list_view.sort,
            list_view.page if page is None else page,
            self._page_size,
        )

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self._settings_repo.set_theme(theme)
        self.state.theme = theme

    def begin_autofill(self, has_image: bool) -> bool:
        """Start an extraction; False when no image is chosen or one is running."""
        if self.form is None:
            raise RuntimeError("No form is open.")
        if not has_image:
            self.show_toast("Please upload an image first.", Severity.INFO)
            return False
        return self.form.begin_extraction()

    def complete_autofill(self, partial: dict[str, Any], form: PolicyFormEngine) -> bool:
        """Apply an extraction result to ``form``; dropped unless it is still the open form."""
        if form is not self.form:
            logger.info("Dropping extraction result for a form that is no longer open")
            return False
        form.end_extraction()
        form.apply_extraction(partial)
        self.show_toast("Data extracted successfully!", Severity.SUCCESS)
        return True

    def fail_autofill(self, message: str, form: PolicyFormEngine) -> bool:
        if form is not self.form:
            logger.info("Dropping extraction failure for a form that is no longer open: %s", message)
            return False
        form.end_extraction()
        self.show_toast(message or "An unknown error occurred.", Severity.ERROR)
        return True

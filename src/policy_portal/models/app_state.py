"""Application view state models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from policy_portal.models.policy import PolicyRecord

THEMES = [
    "light",
    "dark",
    "cupcake",
    "bumblebee",
    "emerald",
    "corporate",
    "synthwave",
    "retro",
    "cyberpunk",
    "valentine",
    "halloween",
    "garden",
    "forest",
    "aqua",
    "lofi",
    "pastel",
    "fantasy",
    "wireframe",
    "black",
    "luxury",
    "dracula",
    "cmyk",
    "autumn",
    "business",
    "acid",
    "lemonade",
    "night",
    "coffee",
    "winter",
]


class ViewMode(str, Enum):
    LIST = "list"
    FORM = "form"


class Severity(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class ConfirmAction(str, Enum):
    DELETE_ONE = "delete_one"
    DELETE_ALL = "delete_all"


@dataclass(frozen=True)
class Toast:
    """Transient user notification; ``id`` is a millisecond timestamp."""

    id: int
    message: str
    severity: Severity


@dataclass(frozen=True)
class PendingConfirmation:
    """Destructive action awaiting an explicit yes/no from the user."""

    action: ConfirmAction
    policy_id: str | None = None


@dataclass(frozen=True)
class SortState:
    key: str | None = None
    descending: bool = False


@dataclass
class ListViewState:
    search_term: str = ""
    sort: SortState = field(default_factory=SortState)
    page: int = 1


@dataclass
class AppState:
    """Non-persisted UI state owned by the application controller."""

    view: ViewMode = ViewMode.LIST
    editing: PolicyRecord | None = None
    toast: Toast | None = None
    pending: PendingConfirmation | None = None
    list_view: ListViewState = field(default_factory=ListViewState)
    theme: str = "light"

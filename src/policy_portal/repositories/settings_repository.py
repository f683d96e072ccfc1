"""Persisted UI preferences."""

from __future__ import annotations

from policy_portal.repositories.store import KeyValueStore, PersistedValue

DEFAULT_THEME_KEY = "mswasth-theme"


class SettingsRepository:
    """Stores the current theme name as a JSON string."""

    def __init__(
        self,
        store: KeyValueStore,
        theme_key: str = DEFAULT_THEME_KEY,
        default_theme: str = "light",
    ):
        self._theme: PersistedValue[str] = PersistedValue(store, theme_key, default_theme)
        self._default_theme = default_theme

    def get_theme(self) -> str:
        theme = self._theme.get()
        return theme if isinstance(theme, str) and theme else self._default_theme

    def set_theme(self, theme: str) -> None:
        self._theme.set(theme)

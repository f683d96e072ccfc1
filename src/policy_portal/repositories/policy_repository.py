"""Policy collection repository."""

from __future__ import annotations

import logging
from typing import Any

from policy_portal.models.policy import PolicyRecord
from policy_portal.repositories.store import KeyValueStore, PersistedValue

logger = logging.getLogger(__name__)

DEFAULT_POLICIES_KEY = "mswasth-policies"


class PolicyRepository:
    """Holds the policy collection as one JSON array under a fixed key."""

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_POLICIES_KEY):
        self._value: PersistedValue[list[dict[str, Any]]] = PersistedValue(store, key, [])

    def list_policies(self) -> list[PolicyRecord]:
        """Return all stored policies in insertion order."""
        raw = self._value.get()
        if not isinstance(raw, list):
            logger.warning("Stored policies under %r are not a list; ignoring them", self._value.key)
            return []
        return [PolicyRecord.from_dict(item) for item in raw if isinstance(item, dict)]

    def save_policies(self, policies: list[PolicyRecord]) -> None:
        """Replace the stored collection."""
        self._value.set([policy.to_dict() for policy in policies])

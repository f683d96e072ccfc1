"""Cascading form engine for policy entry.

Partner, product and premium form a dependency chain: choosing a partner
resets everything below it, choosing a product resets the premium and its
derived values, and choosing a premium fills tenure and agent from the
lookup table. Every other field is a plain value with no derivation.

``activate_voice_field`` and ``apply_utterance`` are hooks for a dictation
front end. The desktop window has no speech recognizer, so nothing in the
UI calls them; any recognizer that yields text can drive them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from policy_portal.models.lookup import (
    PARTNER_PRODUCTS,
    LookupTable,
    PremiumOption,
    premium_options_for,
    products_for,
)
from policy_portal.models.policy import FIELD_NAMES, PolicyRecord, new_policy_id, to_number

logger = logging.getLogger(__name__)


class PolicyFormEngine:
    """Holds the record being edited and the option sets derived from it."""

    def __init__(
        self,
        lookup: LookupTable = PARTNER_PRODUCTS,
        id_factory: Callable[[], str] = new_policy_id,
    ):
        self._lookup = lookup
        self._id_factory = id_factory
        self._record = PolicyRecord(id=id_factory())
        self._product_options: list[str] = []
        self._premium_options: list[PremiumOption] = []
        self._active_field: str | None = None
        self._extracting = False
        self._is_edit = False

    @property
    def record(self) -> PolicyRecord:
        return self._record

    @property
    def is_edit(self) -> bool:
        return self._is_edit

    @property
    def product_options(self) -> list[str]:
        return list(self._product_options)

    @property
    def premium_options(self) -> list[PremiumOption]:
        return list(self._premium_options)

    @property
    def active_field(self) -> str | None:
        return self._active_field

    @property
    def extracting(self) -> bool:
        return self._extracting

    def start_new(self) -> PolicyRecord:
        """Reset to an empty record carrying a fresh identifier."""
        self._record = PolicyRecord(id=self._id_factory())
        self._product_options = []
        self._premium_options = []
        self._active_field = None
        self._is_edit = False
        return self._record

    def start_edit(self, record: PolicyRecord) -> PolicyRecord:
        """Load ``record`` and rebuild its option sets from the lookup table."""
        self._record = PolicyRecord.from_dict(record.to_dict())
        self._product_options = products_for(self._record.partner_name, self._lookup)
        self._premium_options = premium_options_for(
            self._record.partner_name,
            self._record.product_name,
            self._lookup,
        )
        self._active_field = None
        self._is_edit = True
        return self._record

    def set_partner(self, partner: str) -> None:
        self._record.partner_name = partner
        self._record.product_name = ""
        self._clear_premium()
        self._product_options = products_for(partner, self._lookup)
        self._premium_options = []

    def set_product(self, product: str) -> None:
        self._record.product_name = product
        self._clear_premium()
        self._premium_options = premium_options_for(
            self._record.partner_name,
            product,
            self._lookup,
        )

    def set_premium(self, premium: Any) -> None:
        """Select a premium; tenure and agent follow when it is a known option."""
        value = to_number(premium)
        self._record.premium = value
        if value is None:
            return
        for option in self._premium_options:
            if option.premium == value:
                self._record.tenure = option.tenure
                self._record.agent_name = option.agent
                return

    def set_field(self, name: str, value: Any) -> None:
        """Set one field, running the cascade for partner, product and premium."""
        if name == "partner_name":
            self.set_partner(str(value))
        elif name == "product_name":
            self.set_product(str(value))
        elif name == "premium":
            self.set_premium(value)
        elif name == "id":
            raise ValueError("The policy identifier cannot be changed.")
        elif name in FIELD_NAMES:
            self._record = self._record.merged({name: value})
        else:
            raise ValueError(f"Unknown policy field: {name}")

    def apply_extraction(self, partial: dict[str, Any]) -> PolicyRecord:
        """Merge extracted fields over the form without running the cascade."""
        self._record = self._record.merged(partial)
        logger.info("Applied %d extracted field(s) to the form", len(partial))
        return self._record

    def activate_voice_field(self, name: str) -> None:
        if name not in FIELD_NAMES or name == "id":
            raise ValueError(f"Unknown policy field: {name}")
        self._active_field = name

    def apply_utterance(self, text: str) -> bool:
        """Write a recognized utterance verbatim into the active field."""
        if self._active_field is None:
            return False
        name = self._active_field
        self._active_field = None
        self._record = self._record.merged({name: text})
        return True

    def begin_extraction(self) -> bool:
        """Mark an extraction as in flight; False when one already is."""
        if self._extracting:
            return False
        self._extracting = True
        return True

    def end_extraction(self) -> None:
        self._extracting = False

    def to_record(self) -> PolicyRecord:
        return PolicyRecord.from_dict(self._record.to_dict())

    def _clear_premium(self) -> None:
        self._record.premium = None
        self._record.tenure = None
        self._record.agent_name = ""

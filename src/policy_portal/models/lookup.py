"""Partner/product premium table driving the cascading form."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PremiumOption:
    """A valid premium under one partner product, with its derived values."""

    premium: int
    tenure: int
    agent: str


LookupTable = dict[str, dict[str, tuple[PremiumOption, ...]]]


def _options(agent: str, *pairs: tuple[int, int]) -> tuple[PremiumOption, ...]:
    return tuple(PremiumOption(premium=premium, tenure=tenure, agent=agent) for premium, tenure in pairs)


PARTNER_PRODUCTS: LookupTable = {
    "BANGIYA": {
        "Combo": _options("Jahed", (490, 1), (690, 1), (980, 2), (990, 1)),
        "Telemedicine": _options(
            "Jahed", (360, 1), (700, 2), (1000, 3), (2000, 6), (3000, 9)
        ),
    },
    "PBGB": {
        "Combo": _options("Aditya", (490, 1), (690, 1)),
        "Telemedicine": _options("Aditya", (365, 1)),
    },
    "UBKGB": {
        "Combo": _options("Abhijit", (490, 1), (690, 1)),
        "Telemedicine": _options("Abhijit", (365, 1)),
    },
    "KCCB": {
        "Combo": _options("Aditya", (700, 1), (1050, 1)),
        "Telemedicine": _options("Aditya", (399, 1)),
    },
    "Assam Vikas Gramin Bank": {
        "Telemedicine": _options("Abhishek", (365, 1)),
    },
    "DCCB": {
        "Telemedicine": _options("Abhishek", (365, 1)),
    },
    "UBGB": {
        "Telemedicine": _options("Nazreen", (365, 1)),
    },
}


def partners(table: LookupTable = PARTNER_PRODUCTS) -> list[str]:
    return list(table)


def products_for(partner: str, table: LookupTable = PARTNER_PRODUCTS) -> list[str]:
    """Return products offered by ``partner``; empty when the partner is unknown."""
    return list(table.get(partner, {}))


def premium_options_for(
    partner: str,
    product: str,
    table: LookupTable = PARTNER_PRODUCTS,
) -> list[PremiumOption]:
    """Return premium options for a partner product; empty when absent."""
    return list(table.get(partner, {}).get(product, ()))

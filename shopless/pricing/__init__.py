"""Pricing — разрешение опций и распределение налога."""

from shopless.pricing.constraint_resolver import (
    boolean_matches,
    find_price_constraint,
    number_matches,
    resolve_options,
)
from shopless.pricing.tax_allocation import (
    NO_TAX,
    TaxAllocation,
    allocate_tax,
    calculate_flat_tax,
    calculate_tax,
)

__all__ = [
    "boolean_matches",
    "find_price_constraint",
    "number_matches",
    "resolve_options",
    "NO_TAX",
    "TaxAllocation",
    "allocate_tax",
    "calculate_flat_tax",
    "calculate_tax",
]

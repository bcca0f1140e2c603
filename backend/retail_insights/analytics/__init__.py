"""Pricing columns and value analytics for normalized catalogs"""

from .pricing import (
    BUDGET,
    PREMIUM,
    add_normalized_size,
    add_pricing_columns,
    round_for_storage,
    value_label,
)
from .queries import CatalogAnalytics

__all__ = [
    "BUDGET",
    "PREMIUM",
    "add_normalized_size",
    "add_pricing_columns",
    "round_for_storage",
    "value_label",
    "CatalogAnalytics",
]

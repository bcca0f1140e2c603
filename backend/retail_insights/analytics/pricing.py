"""Derived pricing columns for normalized catalog frames."""

from typing import Dict, Optional

import polars as pl

from retail_insights.normalization.normalizer import PackSizeNormalizer, PackSizeUnit

PREMIUM = "Premium"
BUDGET = "Budget"

# Decimal places of the persisted NUMERIC columns
STORAGE_SCALE: Dict[str, int] = {
    "price": 2,
    "quantity": 2,
    "unit_price": 4,
    "rating": 2,
    "original_price": 2,
    "discount": 2,
    "discount_percentage": 2,
    "price_per_100g": 2,
}


def add_normalized_size(
    df: pl.DataFrame,
    normalizer: PackSizeNormalizer,
    column: str = "packsize"
) -> pl.DataFrame:
    """Append quantity and unit columns parsed from the pack size column.

    Args:
        df: Catalog frame
        normalizer: PackSizeNormalizer used for every row
        column: Name of the raw pack size column

    Returns:
        Frame with Float64 ``quantity`` and Utf8 ``unit`` columns
    """
    sizes = normalizer.normalize_many(df[column].to_list())
    return df.with_columns(
        pl.Series("quantity", [s.quantity for s in sizes], dtype=pl.Float64),
        pl.Series("unit", [s.unit.value if s.unit else None for s in sizes], dtype=pl.Utf8),
    )


def add_pricing_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Compute unit price, price per 100g and discount columns.

    unit_price is null when quantity is missing or not positive, and
    price_per_100g is only set for gram rows. discount_percentage is null
    when the original price is missing or zero.
    """
    price = pl.col("price").cast(pl.Float64)
    original_price = pl.col("original_price").cast(pl.Float64)
    quantity = pl.col("quantity")

    df = df.with_columns(
        pl.when(quantity.is_not_null() & (quantity > 0))
        .then(price / quantity)
        .otherwise(None)
        .alias("unit_price"),
        (original_price - price).alias("discount"),
    )
    return df.with_columns(
        pl.when(pl.col("unit") == PackSizeUnit.GRAM.value)
        .then(pl.col("unit_price") * 100)
        .otherwise(None)
        .alias("price_per_100g"),
        pl.when(original_price.is_not_null() & (original_price != 0))
        .then(pl.col("discount") / original_price * 100)
        .otherwise(None)
        .alias("discount_percentage"),
    )


def round_for_storage(df: pl.DataFrame) -> pl.DataFrame:
    """Round numeric columns to the scale of their database columns."""
    return df.with_columns([
        pl.col(col).cast(pl.Float64).round(scale)
        for col, scale in STORAGE_SCALE.items()
        if col in df.columns
    ])


def value_label(price_per_100g: Optional[float], mean_price_per_100g: Optional[float]) -> str:
    """Classify a gram row as Premium or Budget against the catalog mean.

    Rows without a price per 100g, or a catalog without a mean, are Budget,
    the same outcome as a SQL comparison against NULL.
    """
    if price_per_100g is None or mean_price_per_100g is None:
        return BUDGET
    return PREMIUM if price_per_100g > mean_price_per_100g else BUDGET

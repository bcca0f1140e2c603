"""Mapping of raw catalog columns onto the product schema"""
import logging
from typing import Dict, List

import polars as pl

from retail_insights.ingestion.exceptions import MissingColumnError

logger = logging.getLogger(__name__)

# First decimal in a price cell; currency prefixes such as "Rs." are skipped
_PRICE_PATTERN = r"(-?\d+(?:\.\d+)?)"

REQUIRED_COLUMNS: List[str] = ["product_name", "price", "packsize"]
OPTIONAL_COLUMNS: List[str] = ["category", "rating", "original_price"]
CATALOG_COLUMNS: List[str] = ["category", "product_name", "price", "packsize", "rating", "original_price"]
NUMERIC_COLUMNS: List[str] = ["price", "rating", "original_price"]

COLUMN_ALIASES: Dict[str, str] = {
    "name": "product_name",
    "product": "product_name",
    "title": "product_name",
    "pack_size": "packsize",
    "packsize_label": "packsize",
    "size": "packsize",
    "weight": "packsize",
    "selling_price": "price",
    "discounted_selling_price": "price",
    "discountedsellingprice": "price",
    "mrp": "original_price",
    "list_price": "original_price",
    "product_category": "category",
}


def canonical_header(header: str) -> str:
    """Lowercase a header and replace spaces and hyphens with underscores"""
    name = header.strip().lower().replace(' ', '_').replace('-', '_')
    return COLUMN_ALIASES.get(name, name)


def map_catalog_columns(df: pl.DataFrame) -> pl.DataFrame:
    """
    Rename, type and select the catalog columns

    Args:
        df: Parsed catalog with text columns

    Returns:
        Frame with exactly the CATALOG_COLUMNS, numeric columns as Float64

    Raises:
        MissingColumnError: If a required column cannot be found
    """
    rename_map: Dict[str, str] = {}
    for col in df.columns:
        target = canonical_header(col)
        if target in CATALOG_COLUMNS and target not in rename_map.values():
            rename_map[col] = target
    # First column wins when several headers resolve to the same field
    df = df.select([pl.col(src).alias(dst) for src, dst in rename_map.items()])

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise MissingColumnError(f"Catalog is missing required columns: {', '.join(missing)}")

    for col in OPTIONAL_COLUMNS:
        if col not in df.columns:
            logger.info(f"'{col}' column not found in catalog. Adding an empty column.")
            df = df.with_columns(pl.lit(None).alias(col))

    text_columns = [col for col in CATALOG_COLUMNS if col not in NUMERIC_COLUMNS]
    df = df.with_columns(
        [
            pl.col(col)
            .cast(pl.Utf8)
            .str.replace_all(",", "", literal=True)
            .str.extract(_PRICE_PATTERN, 1)
            .cast(pl.Float64, strict=False)
            for col in NUMERIC_COLUMNS
        ]
        + [
            pl.when(pl.col(col).cast(pl.Utf8).str.strip_chars() == "")
            .then(None)
            .otherwise(pl.col(col).cast(pl.Utf8))
            .alias(col)
            for col in text_columns
        ]
    )

    return df.select(CATALOG_COLUMNS)

"""Tests for derived pricing columns"""
import polars as pl
import pytest

from retail_insights.analytics.pricing import (
    BUDGET,
    PREMIUM,
    add_normalized_size,
    add_pricing_columns,
    round_for_storage,
    value_label,
)


@pytest.fixture
def catalog_frame():
    """Small catalog frame with raw pack sizes"""
    return pl.DataFrame({
        "product_name": ["Onion", "Rice", "Juice", "Eggs", "Combo", "Empty", "Free Sample"],
        "packsize": ["600-800 g", "1 kg", "1 l", "6 pcs", "Combo", None, "0 g"],
        "price": [40.0, 120.0, 110.0, 84.0, 250.0, 99.0, 10.0],
        "original_price": [50.0, 150.0, 125.0, 84.0, 300.0, None, 0.0],
    })


@pytest.fixture
def priced_frame(catalog_frame, normalizer):
    return add_pricing_columns(add_normalized_size(catalog_frame, normalizer))


def test_add_normalized_size_columns(catalog_frame, normalizer):
    df = add_normalized_size(catalog_frame, normalizer)
    assert df["quantity"].to_list() == [700.0, 1000.0, 1000.0, 6.0, None, None, 0.0]
    assert df["unit"].to_list() == ["g", "g", "ml", "pcs", None, None, "g"]
    assert df["quantity"].dtype == pl.Float64


def test_add_normalized_size_preserves_order(catalog_frame, normalizer):
    df = add_normalized_size(catalog_frame, normalizer)
    assert df["product_name"].to_list() == catalog_frame["product_name"].to_list()


def test_unit_price(priced_frame):
    unit_price = priced_frame["unit_price"].to_list()
    assert unit_price[0] == pytest.approx(40 / 700)
    assert unit_price[2] == pytest.approx(0.11)
    assert unit_price[3] == pytest.approx(14.0)


def test_unit_price_undefined_without_quantity(priced_frame):
    assert priced_frame["unit_price"][4] is None
    assert priced_frame["unit_price"][5] is None


def test_unit_price_undefined_for_zero_quantity(priced_frame):
    assert priced_frame["unit_price"][6] is None
    assert priced_frame["price_per_100g"][6] is None


def test_price_per_100g_only_for_grams(priced_frame):
    per_100g = priced_frame["price_per_100g"].to_list()
    assert per_100g[0] == pytest.approx(40 / 700 * 100)
    assert per_100g[1] == pytest.approx(12.0)
    assert per_100g[2] is None
    assert per_100g[3] is None


def test_price_per_100g_matches_unit_price(priced_frame):
    grams = priced_frame.filter((pl.col("unit") == "g") & (pl.col("quantity") > 0))
    for row in grams.iter_rows(named=True):
        assert row["price_per_100g"] == pytest.approx(row["price"] / row["quantity"] * 100)


def test_discount_columns(priced_frame):
    assert priced_frame["discount"][0] == pytest.approx(10.0)
    assert priced_frame["discount_percentage"][0] == pytest.approx(20.0)
    assert priced_frame["discount_percentage"][3] == pytest.approx(0.0)


def test_discount_percentage_undefined_without_original_price(priced_frame):
    assert priced_frame["discount"][5] is None
    assert priced_frame["discount_percentage"][5] is None
    assert priced_frame["discount_percentage"][6] is None


def test_round_for_storage(priced_frame):
    rounded = round_for_storage(priced_frame)
    assert rounded["unit_price"][0] == pytest.approx(0.0571)
    assert rounded["price_per_100g"][0] == pytest.approx(5.71)
    assert rounded["product_name"].to_list() == priced_frame["product_name"].to_list()


def test_rounded_price_per_100g_within_tolerance(priced_frame):
    rounded = round_for_storage(priced_frame)
    grams = rounded.filter((pl.col("unit") == "g") & (pl.col("quantity") > 0))
    for row in grams.iter_rows(named=True):
        assert row["price_per_100g"] == pytest.approx(row["price"] / row["quantity"] * 100, abs=0.005)


class TestValueLabel:
    """Premium/Budget threshold"""

    def test_above_mean_is_premium(self):
        assert value_label(50.0, 33.0) == PREMIUM

    def test_equal_to_mean_is_budget(self):
        assert value_label(33.0, 33.0) == BUDGET

    def test_below_mean_is_budget(self):
        assert value_label(5.0, 33.0) == BUDGET

    def test_missing_values_are_budget(self):
        assert value_label(None, 33.0) == BUDGET
        assert value_label(50.0, None) == BUDGET

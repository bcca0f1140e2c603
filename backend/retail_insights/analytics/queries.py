"""Value-based analytical queries over the products table"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.orm import Query, Session

from retail_insights.analytics.pricing import BUDGET, PREMIUM
from retail_insights.common.models import Product
from retail_insights.normalization.normalizer import PackSizeUnit

logger = logging.getLogger(__name__)

GRAM = PackSizeUnit.GRAM.value


class CatalogAnalytics:
    """Standardized-price queries, optionally scoped to one upload.

    Every price per 100g comparison only looks at gram rows; rows in other
    units or without a parsed quantity never take part.
    """

    def __init__(self, db: Session, upload_id: Optional[UUID] = None):
        self.db = db
        self.upload_id = upload_id

    def average_price_per_100g(self) -> Optional[float]:
        """Mean price per 100g over gram rows, the Premium/Budget threshold"""
        query = self._scoped(
            self.db.query(func.avg(Product.price_per_100g)).filter(Product.unit == GRAM)
        )
        return query.scalar()

    def cheapest_per_100g(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Cheapest gram products by price per 100g, ignoring zero prices"""
        query = self._scoped(
            self.db.query(Product.product_name, Product.price, Product.price_per_100g)
            .filter(Product.price_per_100g != 0, Product.unit == GRAM)
        )
        return self._rows(query.order_by(Product.price_per_100g.asc()).limit(limit))

    def best_value(self, limit: int = 15) -> List[Dict[str, Any]]:
        """Lowest price per 100g products"""
        query = self._scoped(
            self.db.query(Product.product_name, Product.category, Product.price_per_100g)
            .filter(Product.unit == GRAM, Product.price_per_100g.is_not(None))
        )
        return self._rows(query.order_by(Product.price_per_100g.asc()).limit(limit))

    def value_segments(self) -> List[Dict[str, Any]]:
        """Every priced gram product labelled Premium or Budget"""
        query = self._scoped(
            self.db.query(
                Product.product_name,
                Product.category,
                Product.price_per_100g,
                self._value_label(),
            ).filter(Product.unit == GRAM, Product.price_per_100g.is_not(None))
        )
        return self._rows(query.order_by(Product.price_per_100g.asc()))

    def top_premium(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most expensive Premium products by price per 100g"""
        query = self._scoped(
            self.db.query(
                Product.product_name,
                Product.category,
                Product.price_per_100g,
                Product.rating,
            ).filter(Product.unit == GRAM, Product.price_per_100g > self._average_subquery())
        )
        return self._rows(query.order_by(Product.price_per_100g.desc()).limit(limit))

    def category_value_scores(self) -> List[Dict[str, Any]]:
        """Average price per 100g and rating per category, best value first"""
        avg_price_per_100g = func.avg(Product.price_per_100g).label("avg_price_per_100g")
        query = self._scoped(
            self.db.query(
                Product.category,
                avg_price_per_100g,
                func.avg(Product.rating).label("avg_rating"),
                func.count(Product.id).label("total_products"),
            ).filter(Product.unit == GRAM)
        )
        query = query.group_by(Product.category).order_by(avg_price_per_100g.asc().nulls_last())
        return self._rows(query)

    def price_rating_dataset(self, max_price_per_100g: float = 200.0) -> List[Dict[str, Any]]:
        """Gram products for price vs rating analysis, outliers removed"""
        query = self._scoped(
            self.db.query(
                Product.category,
                Product.price,
                Product.rating,
                Product.price_per_100g,
                Product.discount_percentage,
                self._value_label(),
            ).filter(
                Product.unit == GRAM,
                Product.price_per_100g.is_not(None),
                Product.price_per_100g > 0,
                Product.price_per_100g < max_price_per_100g,
            )
        )
        return self._rows(query)

    def discounted_products(self) -> List[Dict[str, Any]]:
        """Products sold below their original price"""
        query = self._scoped(
            self.db.query(
                Product.product_name,
                Product.price,
                Product.original_price,
                Product.discount_percentage,
            ).filter(Product.price < Product.original_price)
        )
        return self._rows(query.order_by(Product.id))

    def _average_subquery(self):
        stmt = select(func.avg(Product.price_per_100g)).where(Product.unit == GRAM)
        if self.upload_id is not None:
            stmt = stmt.where(Product.upload_id == self.upload_id)
        return stmt.scalar_subquery()

    def _value_label(self):
        return case(
            (Product.price_per_100g > self._average_subquery(), PREMIUM),
            else_=BUDGET,
        ).label("value_label")

    def _scoped(self, query: Query) -> Query:
        if self.upload_id is not None:
            query = query.filter(Product.upload_id == self.upload_id)
        return query

    def _rows(self, query: Query) -> List[Dict[str, Any]]:
        rows = [dict(row._mapping) for row in query.all()]
        logger.debug(f"Analytics query returned {len(rows)} rows")
        return rows

"""API endpoints for value analytics."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_insights.analytics.queries import CatalogAnalytics
from retail_insights.common.config import settings
from retail_insights.common.database import get_db

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def get_analytics(
    upload_id: Optional[UUID] = Query(default=None),
    db: Session = Depends(get_db)
) -> CatalogAnalytics:
    """Get analytics scoped to an upload, or to the whole table."""
    return CatalogAnalytics(db, upload_id)


@router.get("/cheapest-per-100g")
def cheapest_per_100g(
    limit: int = Query(default=settings.analytics.default_top_n, ge=1, le=500),
    analytics: CatalogAnalytics = Depends(get_analytics)
) -> List[Dict[str, Any]]:
    return analytics.cheapest_per_100g(limit)


@router.get("/best-value")
def best_value(
    limit: int = Query(default=15, ge=1, le=500),
    analytics: CatalogAnalytics = Depends(get_analytics)
) -> List[Dict[str, Any]]:
    return analytics.best_value(limit)


@router.get("/value-segments")
def value_segments(analytics: CatalogAnalytics = Depends(get_analytics)) -> Dict[str, Any]:
    """Premium/Budget labels with the threshold they were computed against."""
    return {
        "average_price_per_100g": analytics.average_price_per_100g(),
        "items": analytics.value_segments(),
    }


@router.get("/top-premium")
def top_premium(
    limit: int = Query(default=settings.analytics.default_top_n, ge=1, le=500),
    analytics: CatalogAnalytics = Depends(get_analytics)
) -> List[Dict[str, Any]]:
    return analytics.top_premium(limit)


@router.get("/category-value-scores")
def category_value_scores(analytics: CatalogAnalytics = Depends(get_analytics)) -> List[Dict[str, Any]]:
    return analytics.category_value_scores()


@router.get("/price-rating")
def price_rating(
    max_price_per_100g: float = Query(default=settings.analytics.price_per_100g_outlier_cap, gt=0),
    analytics: CatalogAnalytics = Depends(get_analytics)
) -> List[Dict[str, Any]]:
    return analytics.price_rating_dataset(max_price_per_100g)


@router.get("/discounted")
def discounted(analytics: CatalogAnalytics = Depends(get_analytics)) -> List[Dict[str, Any]]:
    return analytics.discounted_products()

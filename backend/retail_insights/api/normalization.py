"""API endpoints for pack size normalization."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from retail_insights.common.database import get_db
from retail_insights.common.schemas import (
    NormalizationSummarySchema,
    NormalizedSizeSchema,
    PackSizePreviewRequest,
    PackSizePreviewResponse,
)
from retail_insights.normalization.normalizer import PackSizeNormalizer
from retail_insights.normalization.service import (
    NormalizationError,
    NormalizationService,
    UploadNotFoundError,
)
from retail_insights.validation.quality import DataQualityReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/normalization", tags=["normalization"])


def get_normalizer() -> PackSizeNormalizer:
    """Get normalizer instance."""
    return PackSizeNormalizer()


def get_normalization_service(
    db: Session = Depends(get_db),
    normalizer: PackSizeNormalizer = Depends(get_normalizer)
) -> NormalizationService:
    """Get normalization service instance."""
    return NormalizationService(normalizer, db)


@router.post("/preview", response_model=PackSizePreviewResponse)
def preview_normalization(
    request: PackSizePreviewRequest,
    normalizer: PackSizeNormalizer = Depends(get_normalizer)
) -> PackSizePreviewResponse:
    """Normalize labels without touching the database."""
    items = []
    for label in request.labels:
        size = normalizer.normalize(label)
        rule = normalizer.match_rule(label)
        items.append(NormalizedSizeSchema(
            packsize=label,
            quantity=size.quantity,
            unit=size.unit.value if size.unit else None,
            rule=rule.name if rule else None,
        ))
    return PackSizePreviewResponse(items=items)


@router.post("/process/{upload_id}", response_model=NormalizationSummarySchema)
def process_normalization(
    upload_id: UUID,
    service: NormalizationService = Depends(get_normalization_service)
) -> NormalizationSummarySchema:
    """Normalize every pack size of an upload and store derived prices.

    Args:
        upload_id: Upload UUID
        service: NormalizationService instance

    Returns:
        Summary of parsed and unparsed rows
    """
    try:
        summary = service.normalize_upload(upload_id)
    except UploadNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NormalizationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Normalization failed for upload {upload_id}")
        raise HTTPException(status_code=500, detail=f"Normalization failed: {str(e)}")

    return NormalizationSummarySchema(
        upload_id=upload_id,
        total_records=summary.total_records,
        parsed_records=summary.parsed_records,
        unparsed_records=summary.unparsed_records,
        unit_breakdown=summary.unit_breakdown,
        priced_per_100g=summary.priced_per_100g,
        errors=summary.errors,
    )


@router.get("/quality/{upload_id}", response_model=DataQualityReport)
def get_quality_report(
    upload_id: UUID,
    service: NormalizationService = Depends(get_normalization_service)
) -> DataQualityReport:
    """Data quality report for rows that cannot be used for pricing."""
    try:
        return service.build_quality_report(upload_id)
    except UploadNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

"""Normalization service for catalog pack sizes."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

import polars as pl
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_insights.analytics.pricing import (
    add_normalized_size,
    add_pricing_columns,
    round_for_storage,
)
from retail_insights.common.models import (
    AuditAction,
    AuditLog,
    Product,
    Upload,
    UploadStatus,
)
from retail_insights.normalization.normalizer import PackSizeNormalizer, PackSizeUnit
from retail_insights.validation.quality import (
    ERROR,
    DataQualityChecker,
    DataQualityReport,
    DataQualitySummary,
)

logger = logging.getLogger(__name__)

# Cleared for rows whose pack size is rejected by the quality checker
REJECTED_COLUMNS = ["unit_price", "price_per_100g"]

DERIVED_COLUMNS = [
    "quantity",
    "unit",
    "unit_price",
    "discount",
    "discount_percentage",
    "price_per_100g",
]


class NormalizationError(Exception):
    """Raised when normalization fails."""
    pass


class UploadNotFoundError(NormalizationError):
    """Raised when the requested upload does not exist."""
    pass


@dataclass
class NormalizationSummary:
    """Summary of normalization operation."""
    total_records: int
    parsed_records: int
    unparsed_records: int
    unit_breakdown: Dict[str, int]
    priced_per_100g: int
    errors: List[str] = field(default_factory=list)


class NormalizationService:
    """Runs the pack size transform over stored catalog rows."""

    def __init__(
        self,
        normalizer: PackSizeNormalizer,
        db_session: Session,
        checker: Optional[DataQualityChecker] = None
    ):
        """Initialize normalization service.

        Args:
            normalizer: PackSizeNormalizer instance
            db_session: Database session
            checker: Data quality checker, built from the normalizer if omitted
        """
        self.normalizer = normalizer
        self.db = db_session
        self.checker = checker or DataQualityChecker(normalizer)

    def normalize_frame(self, df: pl.DataFrame) -> pl.DataFrame:
        """Add normalized size and pricing columns to a catalog frame.

        Row order is preserved. Rows the quality checker rejects, such as
        negative quantities, keep their parsed size but get no prices.
        """
        df = add_pricing_columns(add_normalized_size(df, self.normalizer))
        rejected = pl.Series(
            "_rejected",
            [self.checker.rejects(label) for label in df["packsize"].to_list()],
            dtype=pl.Boolean,
        )
        return (
            df.with_columns(rejected)
            .with_columns([
                pl.when(pl.col("_rejected")).then(None).otherwise(pl.col(col)).alias(col)
                for col in REJECTED_COLUMNS
            ])
            .drop("_rejected")
        )

    def normalize_upload(self, upload_id: UUID) -> NormalizationSummary:
        """Recompute every derived column for an upload from its raw labels.

        Args:
            upload_id: Upload UUID

        Returns:
            NormalizationSummary with statistics

        Raises:
            NormalizationError: If the upload is missing, empty or cannot be saved
        """
        upload = self._get_upload(upload_id)
        products = self._get_products(upload_id)
        if not products:
            raise NormalizationError(f"No products found for upload {upload_id}")

        frame = round_for_storage(self.normalize_frame(self._products_frame(products)))

        derived = {row["id"]: row for row in frame.iter_rows(named=True)}
        for product in products:
            row = derived[product.id]
            for col in DERIVED_COLUMNS:
                setattr(product, col, row[col])

        unit_breakdown = Counter(row["unit"] for row in derived.values() if row["unit"] is not None)
        parsed = sum(unit_breakdown.values())
        priced = sum(1 for row in derived.values() if row["price_per_100g"] is not None)
        errors = [
            f"Row {product.row_index}: could not parse pack size '{product.packsize}'"
            for product in products
            if product.packsize is not None and product.quantity is None
        ]
        for message in errors:
            logger.debug(message)

        try:
            upload.status = UploadStatus.NORMALIZED
            self._create_audit_log(upload_id, {
                "total_records": len(products),
                "parsed_records": parsed,
                "unit_breakdown": dict(unit_breakdown),
            })
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save normalized products: {str(e)}", exc_info=True)
            raise NormalizationError(f"Normalization failed: {str(e)}") from e

        logger.info(f"Normalized {parsed}/{len(products)} pack sizes for upload {upload_id}")

        return NormalizationSummary(
            total_records=len(products),
            parsed_records=parsed,
            unparsed_records=len(products) - parsed,
            unit_breakdown=dict(unit_breakdown),
            priced_per_100g=priced,
            errors=errors,
        )

    def build_quality_report(self, upload_id: UUID) -> DataQualityReport:
        """Check every row of an upload and collect data quality issues.

        Args:
            upload_id: Upload UUID

        Returns:
            DataQualityReport with errors and warnings split by severity
        """
        self._get_upload(upload_id)
        products = self._get_products(upload_id)

        summary = DataQualitySummary(total_records=len(products))
        if products:
            frame = self.normalize_frame(self._products_frame(products))
            summary.excluded_from_pricing = frame["price_per_100g"].null_count()
        unit_breakdown: Counter = Counter()
        issue_breakdown: Counter = Counter()
        errors = []
        warnings = []

        for product in products:
            size = self.normalizer.normalize(product.packsize)

            if product.packsize is None:
                summary.missing_labels += 1
            elif not size.is_parsed:
                summary.unparseable_records += 1
            else:
                summary.parsed_records += 1
                unit_breakdown[size.unit.value] += 1
                if size.unit == PackSizeUnit.UNKNOWN:
                    summary.unknown_unit_records += 1

            for issue in self.checker.check(product.id, product.packsize, size):
                issue_breakdown[issue.rule_name] += 1
                if issue.severity == ERROR:
                    errors.append(issue)
                else:
                    warnings.append(issue)

        summary.unit_breakdown = dict(unit_breakdown)
        summary.issue_breakdown = dict(issue_breakdown)

        logger.info(
            f"Quality report for upload {upload_id}: "
            f"{len(errors)} errors, {len(warnings)} warnings"
        )

        return DataQualityReport(
            upload_id=upload_id,
            summary=summary,
            errors=errors,
            warnings=warnings,
        )

    def _get_upload(self, upload_id: UUID) -> Upload:
        upload = self.db.query(Upload).filter(Upload.id == upload_id).first()
        if not upload:
            raise UploadNotFoundError(f"Upload {upload_id} not found")
        return upload

    def _products_frame(self, products: List[Product]) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "id": [p.id for p in products],
                "packsize": [p.packsize for p in products],
                "price": [p.price for p in products],
                "original_price": [p.original_price for p in products],
            },
            schema={
                "id": pl.Int64,
                "packsize": pl.Utf8,
                "price": pl.Float64,
                "original_price": pl.Float64,
            },
        )

    def _get_products(self, upload_id: UUID) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.upload_id == upload_id)
            .order_by(Product.row_index)
            .all()
        )

    def _create_audit_log(self, upload_id: UUID, changes: Dict) -> None:
        audit = AuditLog(
            entity_id=upload_id,
            entity_type="uploads",
            action=AuditAction.NORMALIZED,
            actor="system",
            changes=changes,
            timestamp=datetime.now(timezone.utc)
        )
        self.db.add(audit)


"""Data quality checks for normalized pack sizes"""
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from retail_insights.normalization.normalizer import (
    NormalizedSize,
    PackSizeNormalizer,
    PackSizeUnit,
    extract_numbers,
)

# A minus sign glued to a number that does not close a range ("600-800", "600 -800")
_NEGATIVE_PATTERN = re.compile(r"(?<![\d.])(?<!\d\s)-\d")

ERROR = "error"
WARNING = "warning"


class QualityIssue(BaseModel):
    """Single data quality finding for a catalog row"""
    product_id: Optional[int] = None
    packsize: Optional[str] = None
    rule_name: str
    severity: str  # "error" | "warning"
    message: str
    suggested_fixes: List[str] = Field(default_factory=list)


class DataQualitySummary(BaseModel):
    """Counts behind a data quality report"""
    total_records: int = 0
    parsed_records: int = 0
    missing_labels: int = 0
    unparseable_records: int = 0
    unknown_unit_records: int = 0
    excluded_from_pricing: int = 0
    unit_breakdown: Dict[str, int] = Field(default_factory=dict)
    issue_breakdown: Dict[str, int] = Field(default_factory=dict)


class DataQualityReport(BaseModel):
    """Data quality report for one upload"""
    upload_id: UUID
    summary: DataQualitySummary
    errors: List[QualityIssue] = Field(default_factory=list)
    warnings: List[QualityIssue] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DataQualityChecker:
    """Explains why a row cannot be used for standardized pricing"""

    def __init__(self, normalizer: PackSizeNormalizer):
        self.normalizer = normalizer

    def rejects(self, packsize: Optional[str]) -> bool:
        """True when the label must not be priced at all (negative quantity)"""
        return packsize is not None and bool(_NEGATIVE_PATTERN.search(packsize))

    def check(
        self,
        product_id: Optional[int],
        packsize: Optional[str],
        size: NormalizedSize
    ) -> List[QualityIssue]:
        """
        Run every rule against one row

        Args:
            product_id: Row identity carried into the issues
            packsize: Raw pack size label
            size: Result of normalizing ``packsize``

        Returns:
            Issues found, empty for clean rows and for missing labels
        """
        if packsize is None:
            return []

        issues: List[QualityIssue] = []

        if not size.is_parsed:
            issues.append(QualityIssue(
                product_id=product_id,
                packsize=packsize,
                rule_name="unparseable_packsize",
                severity=ERROR,
                message=f"No numeric quantity found in pack size '{packsize}'.",
                suggested_fixes=["Correct the label manually", "Exclude the row from pricing analysis"],
            ))
            return issues

        if self.rejects(packsize):
            issues.append(QualityIssue(
                product_id=product_id,
                packsize=packsize,
                rule_name="negative_quantity",
                severity=ERROR,
                message=f"Pack size '{packsize}' contains a negative number; parsed as {size.quantity}.",
                suggested_fixes=["Reject the row", "Correct the label at the source"],
            ))

        if size.unit == PackSizeUnit.UNKNOWN:
            issues.append(QualityIssue(
                product_id=product_id,
                packsize=packsize,
                rule_name="unknown_unit",
                severity=WARNING,
                message=f"No unit recognised in '{packsize}'; kept {size.quantity} for manual reclassification.",
                suggested_fixes=["Add a unit to the label", "Reclassify the row manually"],
            ))

        if size.quantity == 0:
            issues.append(QualityIssue(
                product_id=product_id,
                packsize=packsize,
                rule_name="zero_quantity",
                severity=WARNING,
                message=f"Pack size '{packsize}' has zero quantity; unit price is undefined.",
                suggested_fixes=["Correct the label at the source"],
            ))

        rule = self.normalizer.match_rule(packsize)
        if rule is not None and not rule.average_range and len(extract_numbers(packsize.lower())) > 1:
            issues.append(QualityIssue(
                product_id=product_id,
                packsize=packsize,
                rule_name="discarded_range_value",
                severity=WARNING,
                message=(
                    f"Pack size '{packsize}' matched the {rule.name} rule, "
                    f"which keeps only the first number ({size.quantity})."
                ),
                suggested_fixes=["Review whether the label describes a range"],
            ))

        return issues

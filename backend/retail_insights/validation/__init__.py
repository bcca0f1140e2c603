"""Retail Insights - Data Quality Module"""

from .quality import DataQualityChecker, DataQualityReport, DataQualitySummary, QualityIssue

__all__ = [
    "DataQualityChecker",
    "DataQualityReport",
    "DataQualitySummary",
    "QualityIssue",
]

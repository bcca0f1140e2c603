"""Ingest a catalog CSV, normalize pack sizes and print value segments"""
import argparse
import logging

from retail_insights.analytics.queries import CatalogAnalytics
from retail_insights.common.config import settings
from retail_insights.common.database import SessionLocal, init_db
from retail_insights.ingestion.service import IngestionService
from retail_insights.normalization.normalizer import PackSizeNormalizer
from retail_insights.normalization.service import NormalizationService

logger = logging.getLogger(__name__)


def run(csv_path: str, top_n: int) -> None:
    init_db()
    db = SessionLocal()
    try:
        ingested = IngestionService(db).ingest_file(csv_path)
        service = NormalizationService(PackSizeNormalizer(), db)
        summary = service.normalize_upload(ingested.upload_id)
        report = service.build_quality_report(ingested.upload_id)

        print(f"Upload {ingested.upload_id}: {summary.parsed_records}/{summary.total_records} pack sizes parsed")
        print(f"Units: {summary.unit_breakdown}")
        print(f"Rows with price per 100g: {summary.priced_per_100g}")
        print(f"Quality issues: {report.summary.issue_breakdown}")

        analytics = CatalogAnalytics(db, ingested.upload_id)
        print(f"\nAverage price per 100g: {analytics.average_price_per_100g()}")
        print(f"\nTop {top_n} best value products:")
        for row in analytics.best_value(top_n):
            print(f"  {row['product_name']:<30} {str(row['category']):<25} {row['price_per_100g']}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("csv_path", help="Catalog CSV file")
    parser.add_argument("--top", type=int, default=settings.analytics.default_top_n, help="Rows to print")
    args = parser.parse_args()

    logging.basicConfig(level=settings.app.log_level)
    run(args.csv_path, args.top)

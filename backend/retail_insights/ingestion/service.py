"""Catalog ingestion service"""
import logging
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
from uuid import UUID

import polars as pl
from sqlalchemy.orm import Session

from retail_insights.common.config import settings
from retail_insights.common.models import AuditAction, AuditLog, Product, Upload, UploadStatus
from retail_insights.ingestion.base_parser import BaseParser
from retail_insights.ingestion.catalog import map_catalog_columns
from retail_insights.ingestion.csv_parser import CSVParser
from retail_insights.ingestion.exceptions import UnsupportedFileTypeError

logger = logging.getLogger(__name__)

PARSERS = [CSVParser]


class IngestionResult:
    """Result of catalog ingestion"""
    def __init__(
        self,
        upload_id: UUID,
        filename: str,
        row_count: int,
        column_count: int,
        headers: List[str],
        preview: Dict[str, List],
        errors: Optional[List[str]] = None
    ):
        self.upload_id = upload_id
        self.filename = filename
        self.row_count = row_count
        self.column_count = column_count
        self.headers = headers
        self.preview = preview
        self.errors = errors or []


class IngestionService:
    """Loads catalog files into the products table"""

    def __init__(self, db: Session):
        self.db = db

    def ingest_file(self, file_path: str, file_type: Optional[str] = None) -> IngestionResult:
        """Parse a catalog file and store its rows with raw pack sizes.

        Normalized columns stay empty until the normalization service runs.
        """
        file_type = (file_type or Path(file_path).suffix.lstrip('.')).lower()
        logger.info(f"Ingesting file: {file_path} (type: {file_type})")

        upload_id = uuid.uuid4()
        filename = Path(file_path).name

        try:
            parser = self.get_parser(file_type)
            parsed = parser.parse(file_path)
            df = map_catalog_columns(parsed.data)

            metadata = dict(parsed.metadata)
            metadata["source_headers"] = metadata.pop("headers", [])

            upload = Upload(
                id=upload_id,
                filename=filename,
                upload_time=datetime.now(timezone.utc),
                status=UploadStatus.INGESTED,
                file_path=file_path,
                file_metadata=metadata
            )
            self.db.add(upload)

            self.save_to_database(df, upload_id)

            audit = AuditLog(
                entity_id=upload_id,
                entity_type="uploads",
                action=AuditAction.CREATED,
                actor="system",
                timestamp=datetime.now(timezone.utc),
                changes={"filename": filename, "rows": df.height}
            )
            self.db.add(audit)

            self.db.commit()
            logger.info(f"Successfully ingested file: {upload_id} ({df.height} products)")

            return IngestionResult(
                upload_id=upload_id,
                filename=filename,
                row_count=df.height,
                column_count=df.width,
                headers=df.columns,
                preview=self._generate_preview(df)
            )

        except Exception as e:
            logger.error(f"Failed to ingest file: {e}")
            self.db.rollback()

            upload = Upload(
                id=upload_id,
                filename=filename,
                upload_time=datetime.now(timezone.utc),
                status=UploadStatus.FAILED,
                file_path=file_path,
                file_metadata={"error": str(e)}
            )
            self.db.add(upload)
            self.db.commit()
            raise

    def ingest_file_from_upload(self, file) -> IngestionResult:
        """Store a FastAPI UploadFile under the upload dir and ingest it"""
        upload_dir = Path(settings.app.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)

        file_ext = Path(file.filename).suffix
        stored_path = upload_dir / f"{uuid.uuid4()}{file_ext}"
        with open(stored_path, 'wb') as out:
            shutil.copyfileobj(file.file, out)

        result = self.ingest_file(str(stored_path), file_ext.lstrip('.'))
        result.filename = file.filename
        return result

    def get_parser(self, file_type: str) -> BaseParser:
        """Return the parser for a file type"""
        for parser_cls in PARSERS:
            if parser_cls.handles(file_type):
                return parser_cls()
        raise UnsupportedFileTypeError(f"Unsupported file type: {file_type}")

    def save_to_database(self, df: pl.DataFrame, upload_id: UUID) -> None:
        """Add one Product per catalog row to the session"""
        products = [
            Product(
                upload_id=upload_id,
                row_index=idx,
                category=row["category"],
                product_name=row["product_name"] or "",
                price=row["price"],
                packsize=row["packsize"],
                rating=row["rating"],
                original_price=row["original_price"],
            )
            for idx, row in enumerate(df.iter_rows(named=True))
        ]
        self.db.add_all(products)

    def get_upload_status(self, upload_id: UUID) -> Optional[Upload]:
        """Get upload by ID"""
        return self.db.query(Upload).filter(Upload.id == upload_id).first()

    def _generate_preview(self, df: pl.DataFrame, rows: int = 5) -> Dict[str, List]:
        preview_df = df.head(rows)
        return {
            col: [str(v) if v is not None else None for v in preview_df[col].to_list()]
            for col in preview_df.columns
        }

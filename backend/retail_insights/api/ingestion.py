"""Ingestion API endpoints"""
import logging
from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from retail_insights.common.config import settings
from retail_insights.common.database import get_db
from retail_insights.common.models import UploadStatus
from retail_insights.common.schemas import ErrorResponse, UploadResponse, UploadStatusResponse
from retail_insights.ingestion.exceptions import ParseError, UnsupportedFileTypeError
from retail_insights.ingestion.service import IngestionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ingest", tags=["ingestion"])


def _check_catalog_file(file: UploadFile) -> None:
    """Reject uploads by extension and size before anything is stored"""
    allowed = settings.app.allowed_extensions
    if Path(file.filename or "").suffix.lower() not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Catalogs must be one of: {', '.join(allowed)}"
        )

    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    if size > settings.app.max_file_size_mb * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Catalog exceeds {settings.app.max_file_size_mb}MB"
        )


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file format"},
        413: {"model": ErrorResponse, "description": "File too large"},
        422: {"model": ErrorResponse, "description": "Unparseable catalog"},
        500: {"model": ErrorResponse, "description": "Server error"}
    },
    summary="Upload a product catalog",
    description="Upload a CSV product catalog; pack sizes are stored raw until normalization runs"
)
def upload_file(
    file: UploadFile = File(..., description="Catalog file (.csv)"),
    db: Session = Depends(get_db)
):
    """Upload and ingest a catalog file"""
    logger.info(f"Catalog upload received: {file.filename}")
    _check_catalog_file(file)

    try:
        result = IngestionService(db).ingest_file_from_upload(file)
    except UnsupportedFileTypeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ParseError as e:
        logger.warning(f"Catalog {file.filename} rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Failed to parse catalog: {str(e)}"
        )
    except Exception as e:
        logger.exception(f"Unexpected error while ingesting {file.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during catalog ingestion"
        )

    return UploadResponse(
        upload_id=result.upload_id,
        filename=result.filename,
        status=UploadStatus.INGESTED.value,
        row_count=result.row_count,
        detected_headers=result.headers,
        preview_data=result.preview
    )


@router.get(
    "/status/{upload_id}",
    response_model=UploadStatusResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Upload not found"}
    },
    summary="Get upload status"
)
def get_upload_status(
    upload_id: UUID,
    db: Session = Depends(get_db)
):
    """Get upload status by ID"""
    service = IngestionService(db)
    upload = service.get_upload_status(upload_id)

    if not upload:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Upload {upload_id} not found"
        )

    metadata = upload.file_metadata or {}
    return UploadStatusResponse(
        upload_id=upload.id,
        status=upload.status.value,
        message=metadata.get("error") if upload.status == UploadStatus.FAILED else None,
        created_at=upload.created_at,
        updated_at=upload.updated_at
    )

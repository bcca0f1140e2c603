"""Pydantic schemas for API requests and responses"""
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


# Request Schemas

class PackSizePreviewRequest(BaseModel):
    """Pack size labels to normalize without persisting anything"""
    labels: List[Optional[str]] = Field(..., min_length=1, max_length=1000)

    @field_validator("labels")
    @classmethod
    def validate_label_length(cls, v: List[Optional[str]]) -> List[Optional[str]]:
        for label in v:
            if label is not None and len(label) > 255:
                raise ValueError("Pack size labels must be at most 255 characters")
        return v


# Response Schemas

class UploadResponse(BaseModel):
    """Upload response schema"""
    upload_id: UUID
    filename: str
    status: str
    row_count: int
    detected_headers: List[str]
    preview_data: Dict[str, List]

    model_config = {"from_attributes": True}


class UploadStatusResponse(BaseModel):
    """Upload status schema"""
    upload_id: UUID
    status: str
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NormalizedSizeSchema(BaseModel):
    """Normalized pack size for one label"""
    packsize: Optional[str]
    quantity: Optional[float]
    unit: Optional[str]
    rule: Optional[str] = None


class PackSizePreviewResponse(BaseModel):
    """Normalized sizes in request order"""
    items: List[NormalizedSizeSchema]


class NormalizationSummarySchema(BaseModel):
    """Outcome of normalizing an upload"""
    upload_id: UUID
    total_records: int
    parsed_records: int
    unparsed_records: int
    unit_breakdown: Dict[str, int] = Field(default_factory=dict)
    priced_per_100g: int
    errors: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response schema"""
    detail: str

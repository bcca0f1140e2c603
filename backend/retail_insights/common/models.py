"""SQLAlchemy database models"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, DateTime, Enum, ForeignKey, Index, Integer, JSON, Numeric, String, Text, Uuid
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadStatus(str, enum.Enum):
    """Upload status enumeration"""
    PENDING = "pending"
    INGESTED = "ingested"
    NORMALIZED = "normalized"
    FAILED = "failed"


class AuditAction(str, enum.Enum):
    """Audit action enumeration"""
    CREATED = "created"
    NORMALIZED = "normalized"


class Upload(Base):
    """Tracks uploaded catalog files"""
    __tablename__ = "uploads"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    filename = Column(String(255), nullable=False)
    upload_time = Column(DateTime, nullable=False, default=_utcnow)
    status = Column(Enum(UploadStatus), nullable=False, default=UploadStatus.PENDING)
    file_path = Column(String(512), nullable=False)
    file_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    products = relationship("Product", back_populates="upload", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_uploads_status", "status"),
        Index("ix_uploads_upload_time", "upload_time"),
    )

    def __repr__(self):
        return f"<Upload(id={self.id}, filename={self.filename}, status={self.status})>"


class Product(Base):
    """One catalog row with its normalized pack size and derived prices"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    upload_id = Column(Uuid, ForeignKey("uploads.id", ondelete="CASCADE"), nullable=False)
    row_index = Column(Integer, nullable=False)
    category = Column(Text, nullable=True)
    product_name = Column(Text, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    packsize = Column(Text, nullable=True)
    quantity = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    unit = Column(String(16), nullable=True)
    unit_price = Column(Numeric(10, 4, asdecimal=False), nullable=True)
    rating = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    original_price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    discount = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    discount_percentage = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    price_per_100g = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    upload = relationship("Upload", back_populates="products")

    __table_args__ = (
        Index("ix_products_upload_id", "upload_id"),
        Index("ix_products_unit", "unit"),
        Index("ix_products_category", "category"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.product_name}, quantity={self.quantity} {self.unit})>"


class AuditLog(Base):
    """Provenance tracking for uploads"""
    __tablename__ = "audit_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_id = Column(Uuid, nullable=False)
    entity_type = Column(String(50), nullable=False)
    action = Column(Enum(AuditAction), nullable=False)
    actor = Column(String(255), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=_utcnow)
    changes = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_audit_log_entity_id", "entity_id"),
        Index("ix_audit_log_timestamp", "timestamp"),
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, entity_type={self.entity_type}, action={self.action}, actor={self.actor})>"

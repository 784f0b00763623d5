from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional, List

from inspection_capture import db

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    Mapped,
    mapped_column,
    relationship,
)

# ----------------------------
# Helpers
# ----------------------------

def utcnow() -> datetime:
    # SQLite has no real TZ; store UTC consistently.
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())

# ----------------------------
# Enums
# ----------------------------

class ScanSource(str, enum.Enum):
    scanner = "scanner"
    camera = "camera"
    manual = "manual"


class Symbology(str, enum.Enum):
    datamatrix = "datamatrix"
    qr = "qr"
    unknown = "unknown"


class PhotoDirection(str, enum.Enum):
    front = "front"
    back = "back"
    left = "left"
    right = "right"


class ArchiveStatus(str, enum.Enum):
    pending = "pending"   # saved to the DB, not archived yet
    success = "success"   # record + photos written to the document store
    failed = "failed"     # document store raised; DB row is still kept
    skipped = "skipped"   # archiving disabled by config


# ----------------------------
# Models
# ----------------------------

class ScanCapture(db.Model):
    """
    One decoded payload handed to the parse endpoint, matched or not.
    """
    __tablename__ = "scan_capture"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    source: Mapped[ScanSource] = mapped_column(Enum(ScanSource), default=ScanSource.camera, nullable=False, index=True)

    # Raw reader output, control characters included; useful for replay/debugging.
    raw_input: Mapped[str] = mapped_column(Text, nullable=False)

    symbology: Mapped[Symbology] = mapped_column(Enum(Symbology), default=Symbology.unknown, nullable=False)
    product_name: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    matched: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    inspections: Mapped[List["Inspection"]] = relationship(back_populates="scan")


class Inspection(db.Model):
    """
    Canonical inspection record (one submitted form).
    """
    __tablename__ = "inspection"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    product_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    inspector: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Scan that filled the product name, when it came from the reader.
    scan_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("scan_capture.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    archive_status: Mapped[ArchiveStatus] = mapped_column(
        Enum(ArchiveStatus), default=ArchiveStatus.pending, nullable=False, index=True
    )
    archive_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    archive_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    scan: Mapped[Optional["ScanCapture"]] = relationship(back_populates="inspections")

    photos: Mapped[List["InspectionPhoto"]] = relationship(
        back_populates="inspection",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InspectionPhoto.direction",
    )

    __table_args__ = (
        Index("ix_inspection_created_inspector", "created_at", "inspector"),
        CheckConstraint("length(product_name) > 0", name="ck_inspection_product_nonempty"),
    )

    def to_dict(self, with_photos: bool = False) -> dict:
        data = {
            "id": self.id,
            "productName": self.product_name,
            "inspector": self.inspector,
            "notes": self.notes,
            "scanId": self.scan_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "archive": {
                "status": self.archive_status.value if self.archive_status else None,
                "folderPath": self.archive_path,
                "error": self.archive_error,
            },
        }
        if with_photos:
            data["photos"] = [photo.to_dict() for photo in self.photos]
        return data


class InspectionPhoto(db.Model):
    """
    One directional photo attached to an inspection. Bytes live in the document store.
    """
    __tablename__ = "inspection_photo"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    inspection_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("inspection.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    direction: Mapped[PhotoDirection] = mapped_column(Enum(PhotoDirection), nullable=False)
    content_type: Mapped[str] = mapped_column(String(64), default="image/jpeg", nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)

    # Set once the document store has written the file.
    file_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    inspection: Mapped["Inspection"] = relationship(back_populates="photos")

    __table_args__ = (
        UniqueConstraint("inspection_id", "direction", name="uq_photo_per_direction"),
        CheckConstraint("size_bytes > 0", name="ck_photo_nonempty"),
    )

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.value,
            "contentType": self.content_type,
            "sizeBytes": self.size_bytes,
            "filePath": self.file_path,
        }

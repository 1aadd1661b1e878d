"""FileTag model: a tag instance attached to a file."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assettags.db.base import Base

if TYPE_CHECKING:
    from assettags.db.models.tag_key import AssetTagKey


class FileTag(Base):
    """A key/value tag on a file.

    Files live in an external store; ``file_id`` is their opaque identifier.
    Framework-derived tags reference their framework by id and get the
    current definition back when loaded.
    """

    __tablename__ = "file_tags"

    # Primary key (the tag's canonical uuid)
    uuid: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    file_id: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)

    key_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tag_keys.id", ondelete="CASCADE")
    )
    # JSON-encoded; dates are stored as ISO strings
    value: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    framework_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tag_frameworks.id", ondelete="SET NULL"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    key: Mapped[AssetTagKey] = relationship("AssetTagKey", lazy="joined")

    __table_args__ = (
        Index("ix_file_tags_file_id", "file_id"),
    )

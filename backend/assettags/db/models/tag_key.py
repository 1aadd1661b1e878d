"""Canonical tag key definitions."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from assettags.db.base import Base


class AssetTagKey(Base):
    """A stored key title with its display color.

    Keys created by a framework are scoped to it; keys created from free-form
    tags have no framework.
    """

    __tablename__ = "tag_keys"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    org_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    hex: Mapped[str] = mapped_column(String(16), nullable=False)

    framework_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tag_frameworks.id", ondelete="SET NULL"), nullable=True
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_tag_keys_org_id_title", "org_id", "title"),
    )

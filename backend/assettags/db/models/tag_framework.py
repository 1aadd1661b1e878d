"""Tag framework model: a named schema of tag templates."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assettags.db.base import Base

if TYPE_CHECKING:
    from assettags.db.models.tag_template import AssetTagTemplate


class AssetTagFramework(Base):
    """An organization-owned set of tag field definitions."""

    __tablename__ = "tag_frameworks"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # Owning organization
    org_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Framework data
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    templates: Mapped[list[AssetTagTemplate]] = relationship(
        "AssetTagTemplate",
        back_populates="framework",
        cascade="all, delete-orphan",
        order_by="AssetTagTemplate.position",
    )

    __table_args__ = (
        Index("ix_tag_frameworks_org_id_name", "org_id", "name"),
    )

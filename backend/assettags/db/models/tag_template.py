"""Tag template model: one field of a framework."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assettags.db.base import Base
from assettags.tagging.enums import TagValueType

if TYPE_CHECKING:
    from assettags.db.models.tag_framework import AssetTagFramework
    from assettags.db.models.tag_key import AssetTagKey


class AssetTagTemplate(Base):
    """A field definition within a framework, in display order."""

    __tablename__ = "tag_templates"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    framework_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tag_frameworks.id", ondelete="CASCADE"), index=True
    )
    key_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tag_keys.id", ondelete="CASCADE")
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    value_type: Mapped[TagValueType] = mapped_column(
        Enum(TagValueType), default=TagValueType.TEXT
    )
    options: Mapped[list[str]] = mapped_column(JSON, default=list)
    # JSON-encoded; dates are stored as ISO strings
    default_value: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    # Relationships
    framework: Mapped[AssetTagFramework] = relationship(
        "AssetTagFramework", back_populates="templates"
    )
    key: Mapped[AssetTagKey] = relationship("AssetTagKey", lazy="joined")

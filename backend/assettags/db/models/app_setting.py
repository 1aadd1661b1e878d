"""Per-organization preferences stored as JSON values."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from assettags.db.base import Base


class AppSetting(Base):
    """One preference of one organization.

    ``value`` holds JSON text; ``"null"`` means the preference is unset. The
    default framework is stored under the ``default_framework_id`` key.
    """

    __tablename__ = "app_settings"

    org_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="null")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<AppSetting {self.org_id}/{self.key}>"

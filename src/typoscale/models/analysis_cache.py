"""Cached compliance reports keyed by upload content hash."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from typoscale.models.base import Base, TimestampMixin


class AnalysisCache(Base, TimestampMixin):
    """One cached report per content hash.

    Rows are replaced wholesale on every fresh computation. A row whose
    ``expires_at`` has passed is treated as absent even before cleanup
    removes it.
    """

    __tablename__ = "analysis_cache"

    content_hash: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    analysis_result: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AnalysisCache(content_hash={self.content_hash[:12]}, expires_at={self.expires_at})>"

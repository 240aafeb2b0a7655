"""Admitted-request records for the sliding-window rate limiter."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from typoscale.models.base import Base


class RateLimitWindow(Base):
    """A single admitted request.

    Admission counts rows in the trailing window rather than incrementing a
    counter, so rows are never updated.
    """

    __tablename__ = "rate_limit_windows"
    __table_args__ = (Index("ix_rate_limit_windows_identity_start", "identity", "window_start"),)

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    identity: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    request_count: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )
    window_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
    )
    window_end: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
    )

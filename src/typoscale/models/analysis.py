"""History of completed analysis runs."""

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from typoscale.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from typoscale.models.file import UploadedFile


class AnalysisRecord(Base, TimestampMixin):
    """One row per freshly computed report (cache hits are not recorded)."""

    __tablename__ = "analyses"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    file_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("uploaded_files.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    analysis_data: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    font_sizes_detected: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    exceeds_size_limit: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
    )
    overall_score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    file: Mapped["UploadedFile"] = relationship(back_populates="analyses")

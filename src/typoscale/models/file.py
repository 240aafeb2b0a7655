"""Uploaded design files."""

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from typoscale.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from typoscale.models.analysis import AnalysisRecord


class UploadedFile(Base, TimestampMixin):
    """An uploaded PDF or PNG, deduplicated by SHA-256 of its bytes."""

    __tablename__ = "uploaded_files"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    filename: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    original_name: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    filepath: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )
    file_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    file_size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    mime_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    analyses: Mapped[list["AnalysisRecord"]] = relationship(
        back_populates="file",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<UploadedFile(id={self.id}, filename={self.filename})>"

"""SQLAlchemy models."""

from typoscale.models.analysis import AnalysisRecord
from typoscale.models.analysis_cache import AnalysisCache
from typoscale.models.base import Base, TimestampMixin
from typoscale.models.file import UploadedFile
from typoscale.models.rate_limit import RateLimitWindow

__all__ = [
    "AnalysisCache",
    "AnalysisRecord",
    "Base",
    "RateLimitWindow",
    "TimestampMixin",
    "UploadedFile",
]

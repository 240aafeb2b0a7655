"""Request and response schemas for the HTTP API."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from typoscale.typography.schemas import ComplianceReport


class UploadedFileResponse(BaseModel):
    """Schema for an uploaded file record."""

    id: UUID
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UploadResponse(BaseModel):
    success: bool = True
    file: UploadedFileResponse
    duplicate: bool = False


class AnalyzeRequest(BaseModel):
    """Schema for an analysis request."""

    file_id: UUID | None = Field(default=None, description="Id returned by the upload endpoint")
    force_refresh: bool = Field(default=False, description="Skip the result cache")
    method: Literal["ai", "exact"] | None = Field(
        default=None,
        description="Override the configured analysis mode",
    )


class AnalyzeResponse(BaseModel):
    success: bool = True
    data: ComplianceReport
    cached: bool


class CleanupResponse(BaseModel):
    success: bool = True
    message: str
    invalid_files_removed: list[dict[str, str]]
    valid_files_remaining: int
    cache_entries_removed: int
    analyses_removed: int


class PurgeResponse(BaseModel):
    success: bool = True
    removed: int


class RateLimitStatusResponse(BaseModel):
    identity: str
    enabled: bool
    limit: int
    remaining: int
    reset_at: datetime


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by every exception handler."""

    success: bool = False
    error: ErrorBody
    correlation_id: str | None = None

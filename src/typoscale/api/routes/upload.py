"""Upload routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from typoscale.api.dependencies.services import get_upload_service
from typoscale.schemas.api import UploadedFileResponse, UploadResponse
from typoscale.uploads.service import UploadService

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    service: Annotated[UploadService, Depends(get_upload_service)],
    file: Annotated[UploadFile | None, File(description="PDF or PNG design")] = None,
) -> UploadResponse:
    """Store a PDF or PNG for analysis.

    Re-uploading identical bytes returns the existing record.
    """
    data = await file.read() if file is not None else b""
    result = await service.upload(
        data,
        original_name=file.filename if file is not None else None,
        mime_type=file.content_type if file is not None else None,
    )
    return UploadResponse(
        file=UploadedFileResponse.model_validate(result.file),
        duplicate=result.duplicate,
    )

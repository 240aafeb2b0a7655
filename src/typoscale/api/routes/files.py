"""Stored file routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from typoscale.api.dependencies.services import get_upload_service
from typoscale.uploads.service import UploadService

router = APIRouter()


@router.get("/files/{filename}")
async def get_file(
    filename: str,
    service: Annotated[UploadService, Depends(get_upload_service)],
) -> Response:
    """Serve the stored bytes of an upload by its generated filename."""
    record, data = await service.read_by_filename(filename)
    return Response(
        content=data,
        media_type=record.mime_type,
        headers={"Content-Disposition": f'inline; filename="{record.filename}"'},
    )

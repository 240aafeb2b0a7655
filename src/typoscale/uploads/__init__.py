"""Uploaded file registry."""

from typoscale.uploads.service import CleanupReport, MaintenanceService, UploadResult, UploadService

__all__ = [
    "CleanupReport",
    "MaintenanceService",
    "UploadResult",
    "UploadService",
]

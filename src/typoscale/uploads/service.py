"""Upload registration and file registry maintenance."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from typoscale.core.exceptions import (
    FileNotFoundInStoreError,
    FileTooLargeError,
    InfrastructureError,
    MissingRequiredFieldError,
    UnsupportedFileTypeError,
)
from typoscale.core.logging import get_logger
from typoscale.models.analysis import AnalysisRecord
from typoscale.models.analysis_cache import AnalysisCache
from typoscale.models.file import UploadedFile
from typoscale.store.file_storage import LocalFileStorage, compute_content_hash
from typoscale.store.record_store import RecordStore
from typoscale.typography.document import SUPPORTED_MIME_TYPES

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadResult:
    file: UploadedFile
    duplicate: bool


class UploadService:
    """Validates and stores uploaded design files.

    Uploads are deduplicated on the SHA-256 of their bytes: uploading the
    same content twice returns the first record.
    """

    def __init__(
        self,
        store: RecordStore,
        storage: LocalFileStorage,
        *,
        max_file_size_bytes: int,
    ) -> None:
        self.store = store
        self.storage = storage
        self.max_file_size_bytes = max_file_size_bytes

    async def upload(self, data: bytes, *, original_name: str | None, mime_type: str | None) -> UploadResult:
        """Register an upload.

        Raises:
            MissingRequiredFieldError: If no file content was sent.
            UnsupportedFileTypeError: If the file is not a PDF or PNG.
            FileTooLargeError: If the file exceeds the configured maximum.
        """
        if not data:
            raise MissingRequiredFieldError("No file provided", field="file")

        if mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedFileTypeError(field="file", details={"mime_type": mime_type})

        if len(data) > self.max_file_size_bytes:
            limit_mb = self.max_file_size_bytes // (1024 * 1024)
            raise FileTooLargeError(
                f"File too large. Maximum size is {limit_mb}MB",
                field="file",
                details={"size_bytes": len(data), "max_bytes": self.max_file_size_bytes},
            )

        file_hash = compute_content_hash(data)
        existing = await self.store.find_where(UploadedFile, UploadedFile.file_hash == file_hash)
        if existing:
            logger.info("upload_deduplicated", file_id=str(existing[0].id), file_hash=file_hash)
            return UploadResult(file=existing[0], duplicate=True)

        filename = self.storage.generate_filename(mime_type)
        path = self.storage.save(filename, data)

        try:
            record = await self.store.insert(
                UploadedFile(
                    filename=filename,
                    original_name=original_name or filename,
                    filepath=str(path),
                    file_hash=file_hash,
                    file_size=len(data),
                    mime_type=mime_type,
                )
            )
        except InfrastructureError:
            # A concurrent upload of the same bytes won the unique hash index.
            self.storage.delete(path)
            existing = await self.store.find_where(UploadedFile, UploadedFile.file_hash == file_hash)
            if not existing:
                raise
            logger.info("upload_deduplicated", file_id=str(existing[0].id), file_hash=file_hash)
            return UploadResult(file=existing[0], duplicate=True)

        logger.info(
            "upload_stored",
            file_id=str(record.id),
            filename=filename,
            mime_type=mime_type,
            size_bytes=len(data),
        )
        return UploadResult(file=record, duplicate=False)

    async def get(self, file_id: UUID) -> UploadedFile:
        record = await self.store.find_by_key(UploadedFile, file_id)
        if record is None:
            raise FileNotFoundInStoreError(resource_type="File", resource_id=str(file_id))
        return record

    async def read_by_filename(self, filename: str) -> tuple[UploadedFile, bytes]:
        """Look up a stored file by its generated name and return its bytes."""
        rows = await self.store.find_where(UploadedFile, UploadedFile.filename == filename)
        if not rows or not self.storage.exists(rows[0].filepath):
            raise FileNotFoundInStoreError(resource_type="File", resource_id=filename)
        return rows[0], self.storage.read(rows[0].filepath)


@dataclass
class CleanupReport:
    invalid_files_removed: list[dict[str, str]] = field(default_factory=list)
    valid_files_remaining: int = 0
    cache_entries_removed: int = 0
    analyses_removed: int = 0


class MaintenanceService:
    """Administrative cleanup of the file registry, cache and history."""

    def __init__(self, store: RecordStore, storage: LocalFileStorage) -> None:
        self.store = store
        self.storage = storage

    async def cleanup(self) -> CleanupReport:
        """Drop file records whose bytes are gone, then reset cache and history."""
        report = CleanupReport()

        for record in await self.store.find_where(UploadedFile):
            if self.storage.exists(record.filepath):
                report.valid_files_remaining += 1
                continue
            await self.store.delete_where(AnalysisRecord, AnalysisRecord.file_id == record.id)
            await self.store.delete_where(AnalysisCache, AnalysisCache.content_hash == record.file_hash)
            await self.store.delete_where(UploadedFile, UploadedFile.id == record.id)
            report.invalid_files_removed.append({"id": str(record.id), "filepath": record.filepath})

        report.cache_entries_removed = await self.store.delete_where(AnalysisCache)
        report.analyses_removed = await self.store.delete_where(AnalysisRecord)

        logger.info(
            "cleanup_complete",
            invalid_files_removed=len(report.invalid_files_removed),
            valid_files_remaining=report.valid_files_remaining,
            cache_entries_removed=report.cache_entries_removed,
            analyses_removed=report.analyses_removed,
        )
        return report

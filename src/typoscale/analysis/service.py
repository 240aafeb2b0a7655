"""Analysis orchestration: cache lookup, compute, record, cache store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from typoscale.core.config import AnalysisConfig
from typoscale.core.exceptions import (
    AnalysisError,
    ExtractionError,
    FileNotFoundInStoreError,
    InfrastructureError,
    MissingRequiredFieldError,
    UnknownVisionError,
    VisionBoundaryError,
)
from typoscale.core.logging import get_logger
from typoscale.core.metrics import track_analysis, track_fail_open
from typoscale.models.analysis import AnalysisRecord
from typoscale.models.file import UploadedFile
from typoscale.store.file_storage import LocalFileStorage
from typoscale.store.record_store import RecordStore
from typoscale.typography.cache import ResultCache
from typoscale.typography.document import render_for_vision
from typoscale.typography.extractor import DocumentFontExtractor
from typoscale.typography.report_builder import ComplianceReportBuilder
from typoscale.typography.schemas import ComplianceReport
from typoscale.vision.client import VisionClient

logger = get_logger(__name__)

AnalysisMode = Literal["ai", "exact"]


@dataclass(frozen=True)
class AnalysisOutcome:
    report: ComplianceReport
    cached: bool
    mode: AnalysisMode


class AnalysisService:
    """Produces a compliance report for an uploaded file.

    Reports are looked up in the result cache by the file's content hash
    unless a refresh is forced. The cache only holds reports from the
    configured mode, so a per-request method override bypasses it. Fresh
    reports come from exact PDF metadata ("exact") or from the vision model
    ("ai"); each is appended to the analysis history. Extraction and vision
    failures are logged in full and surface as a generic AnalysisError.
    """

    def __init__(
        self,
        store: RecordStore,
        storage: LocalFileStorage,
        cache: ResultCache,
        config: AnalysisConfig,
        *,
        vision: VisionClient | None = None,
        extractor: DocumentFontExtractor | None = None,
        builder: ComplianceReportBuilder | None = None,
    ) -> None:
        self.store = store
        self.storage = storage
        self.cache = cache
        self.config = config
        self.vision = vision
        self.extractor = extractor or DocumentFontExtractor()
        self.builder = builder or ComplianceReportBuilder(config.enabled_sections)

    async def analyze(
        self,
        file_id: UUID | None,
        *,
        force_refresh: bool = False,
        method: AnalysisMode | None = None,
    ) -> AnalysisOutcome:
        """Analyze a previously uploaded file.

        Raises:
            MissingRequiredFieldError: If ``file_id`` is None.
            FileNotFoundInStoreError: If no upload has that id.
            AnalysisError: If extraction or the vision call fails.
        """
        if file_id is None:
            raise MissingRequiredFieldError("File ID is required", field="file_id")

        record = await self.store.find_by_key(UploadedFile, file_id)
        if record is None:
            raise FileNotFoundInStoreError(resource_type="File", resource_id=str(file_id))

        mode: AnalysisMode = method or self.config.mode  # type: ignore[assignment]
        # Cached reports are produced by the configured mode only.
        use_cache = mode == self.config.mode

        if use_cache and not force_refresh:
            cached = await self.cache.get(record.file_hash)
            if cached is not None:
                track_analysis(mode, "cached")
                logger.info("analysis_cache_hit", file_id=str(file_id))
                return AnalysisOutcome(report=cached, cached=True, mode=mode)

        logger.info(
            "analysis_started",
            file_id=str(file_id),
            mode=mode,
            mime_type=record.mime_type,
            force_refresh=force_refresh,
        )
        try:
            report = await self._compute(record, mode)
        except (ExtractionError, VisionBoundaryError, OSError) as e:
            track_analysis(mode, "failed")
            logger.exception(
                "analysis_failed",
                file_id=str(file_id),
                mode=mode,
                error_type=type(e).__name__,
            )
            raise AnalysisError() from e

        await self._record(record, report, mode)
        if use_cache:
            await self.cache.put(record.file_hash, report)

        track_analysis(mode, "success")
        logger.info(
            "analysis_complete",
            file_id=str(file_id),
            mode=mode,
            overall_score=report.overall_score,
            font_sizes_detected=report.font_sizes_detected,
            exceeds_size_limit=report.exceeds_size_limit,
        )
        return AnalysisOutcome(report=report, cached=False, mode=mode)

    async def _compute(self, record: UploadedFile, mode: AnalysisMode) -> ComplianceReport:
        data = self.storage.read(record.filepath)

        if mode == "exact":
            analysis = self.extractor.extract_from_bytes(data, record.mime_type)
            return self.builder.build(analysis)

        if self.vision is None:
            raise UnknownVisionError("Vision client is not configured")
        image = render_for_vision(data, record.mime_type, dpi=self.config.vision_render_dpi)
        return await self.vision.analyze_report(image)

    async def _record(self, record: UploadedFile, report: ComplianceReport, mode: AnalysisMode) -> None:
        # History rows are best effort.
        try:
            await self.store.insert(
                AnalysisRecord(
                    file_id=record.id,
                    analysis_data=report.to_json(),
                    method=mode,
                    font_sizes_detected=report.font_sizes_detected,
                    exceeds_size_limit=report.exceeds_size_limit,
                    overall_score=report.overall_score,
                )
            )
        except InfrastructureError as e:
            track_fail_open("analysis_history")
            logger.error("analysis_record_failed", file_id=str(record.id), error=str(e))

"""Exact font size extraction from document text metadata."""

from __future__ import annotations

import math

import structlog

from typoscale.core.exceptions import (
    ExactExtractionUnsupportedError,
    ExtractionError,
    UnsupportedFileTypeError,
)
from typoscale.typography.document import PDF_MIME, PNG_MIME, Document, TextRun, parse_pdf
from typoscale.typography.schemas import (
    AnalysisMethod,
    Certainty,
    FontMeasurement,
    FontSizeAnalysis,
    Position,
)

logger = structlog.get_logger(__name__)

SIZE_PRECISION = 2
_SIZE_SCALE = 10**SIZE_PRECISION

# Declared sizes are read, not inferred.
METADATA_CONFIDENCE = 0.95


def round_size(size: float) -> float:
    """Round half-up to SIZE_PRECISION decimals (built-in round() is half-to-even)."""
    return math.floor(size * _SIZE_SCALE + 0.5) / _SIZE_SCALE


class DocumentFontExtractor:
    """Collect the distinct declared font sizes of a document.

    Sizes are rounded half-up to two decimals before deduplication, so 24.0
    and 24.01 remain distinct, 24.001 and 24.004 collapse into 24.0 and
    10.125 becomes 10.13.
    """

    def extract(self, document: Document) -> FontSizeAnalysis:
        """Walk every page and text run in order.

        Raises:
            ExtractionError: If the document fails while being read.
        """
        sizes: set[float] = set()
        measurements: list[FontMeasurement] = []

        try:
            for page in document.pages():
                for run in page.text_runs():
                    measurement = self._measure(run)
                    if measurement is None:
                        continue
                    sizes.add(measurement.font_size_pt)
                    measurements.append(measurement)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error("font_extraction_failed", error=str(e))
            raise ExtractionError("Document could not be read", details={"reason": str(e)}) from e

        ordered = tuple(sorted(sizes, reverse=True))
        analysis = FontSizeAnalysis(
            sizes=ordered,
            measurements=tuple(measurements),
            unique_size_count=len(ordered),
            method=AnalysisMethod.METADATA_EXACT,
            confidence=METADATA_CONFIDENCE,
        )

        logger.info(
            "font_extraction_complete",
            unique_sizes=analysis.unique_size_count,
            font_sizes=list(ordered),
            total_measurements=len(measurements),
        )
        return analysis

    def extract_from_bytes(self, file_bytes: bytes, mime_type: str) -> FontSizeAnalysis:
        """Extract from an uploaded file.

        PDFs are parsed for embedded font metadata. PNGs are refused, since a
        raster has no declared sizes and estimating them would not be exact.

        Raises:
            ExactExtractionUnsupportedError: For PNG input.
            UnsupportedFileTypeError: For any other MIME type.
            ExtractionError: If the PDF cannot be parsed.
        """
        if mime_type == PDF_MIME:
            with parse_pdf(file_bytes) as document:
                return self.extract(document)
        if mime_type == PNG_MIME:
            logger.warning("exact_extraction_refused", mime_type=mime_type)
            raise ExactExtractionUnsupportedError(details={"mime_type": mime_type})
        raise UnsupportedFileTypeError(
            f"Unsupported file type for precise font analysis: {mime_type}",
            details={"mime_type": mime_type},
        )

    @staticmethod
    def _measure(run: TextRun) -> FontMeasurement | None:
        # Runs without a declared size are decorative glyphs, never size 0.
        if run.size is None:
            return None
        return FontMeasurement(
            font_size_pt=round_size(run.size),
            font_family=run.font_name or "unknown",
            text=run.text,
            position=Position(x=run.x, y=run.y, width=run.width, height=run.height),
            certainty=Certainty.EXACT,
        )

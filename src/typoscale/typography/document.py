"""Paginated document access and rendering using PyMuPDF."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol

import fitz  # PyMuPDF  # type: ignore[import-not-found]
import structlog

from typoscale.core.exceptions import ExtractionError, UnsupportedFileTypeError

logger = structlog.get_logger(__name__)

PDF_MIME = "application/pdf"
PNG_MIME = "image/png"
SUPPORTED_MIME_TYPES = frozenset({PDF_MIME, PNG_MIME})


@dataclass(frozen=True)
class TextRun:
    """A run of text as reported by the renderer.

    ``size`` and ``font_name`` are None when the renderer did not declare them.
    """

    text: str
    size: float | None
    font_name: str | None
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class Page(Protocol):
    def text_runs(self) -> Iterable[TextRun]: ...


class Document(Protocol):
    def pages(self) -> Iterable[Page]: ...


class PdfPage:
    """Text runs of one PyMuPDF page, in the order PyMuPDF reports spans."""

    def __init__(self, page: Any) -> None:
        self._page = page

    def text_runs(self) -> Iterator[TextRun]:
        for block in self._page.get_text("dict")["blocks"]:
            if block.get("type") != 0:  # Skip image blocks
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    yield self._span_to_run(span)

    @staticmethod
    def _span_to_run(span: dict[str, Any]) -> TextRun:
        x0, y0, x1, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
        size = span.get("size")
        return TextRun(
            text=span.get("text", ""),
            size=float(size) if size is not None else None,
            font_name=span.get("font") or None,
            x=float(x0),
            y=float(y0),
            width=float(x1 - x0),
            height=float(y1 - y0),
        )


class PdfDocument:
    """Iterates pages of a PDF opened from memory."""

    def __init__(self, doc: Any) -> None:
        self._doc = doc

    @property
    def page_count(self) -> int:
        return int(self._doc.page_count)

    def pages(self) -> Iterator[PdfPage]:
        for page in self._doc:
            yield PdfPage(page)

    def render_page_png(self, index: int, *, dpi: int) -> bytes:
        return bytes(self._doc[index].get_pixmap(dpi=dpi).tobytes("png"))

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> PdfDocument:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def parse_pdf(file_bytes: bytes) -> PdfDocument:
    """Open PDF bytes for text-run iteration.

    Raises:
        ExtractionError: If the bytes are not a readable PDF.
    """
    try:
        doc = fitz.open(stream=file_bytes, filetype="pdf")
    except Exception as e:
        logger.error("failed_to_open_pdf", size_bytes=len(file_bytes), error=str(e))
        raise ExtractionError("Document could not be parsed as PDF", details={"reason": str(e)}) from e
    if doc.needs_pass:
        doc.close()
        raise ExtractionError("Document is encrypted")
    return PdfDocument(doc)


def render_for_vision(file_bytes: bytes, mime_type: str, *, dpi: int = 300) -> bytes:
    """Produce the PNG sent to the vision model.

    PDFs contribute their first page rendered at ``dpi``; PNGs are decoded and
    re-encoded losslessly without resizing.

    Raises:
        UnsupportedFileTypeError: For anything other than PDF or PNG.
        ExtractionError: If the file cannot be decoded.
    """
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise UnsupportedFileTypeError(details={"mime_type": mime_type})

    try:
        if mime_type == PDF_MIME:
            with parse_pdf(file_bytes) as document:
                if document.page_count == 0:
                    raise ExtractionError("PDF has no pages")
                png = document.render_page_png(0, dpi=dpi)
        else:
            png = fitz.Pixmap(file_bytes).tobytes("png")
    except ExtractionError:
        raise
    except Exception as e:
        logger.error("render_failed", mime_type=mime_type, error=str(e))
        raise ExtractionError("Failed to render document for analysis") from e

    logger.info("document_rendered", mime_type=mime_type, png_bytes=len(png), dpi=dpi)
    return png

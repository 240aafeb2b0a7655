"""Builders for documents, uploads and reports used across tests."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import fitz  # PyMuPDF  # type: ignore[import-not-found]

from typoscale.typography.document import TextRun
from typoscale.typography.report_builder import build_report
from typoscale.typography.schemas import AnalysisMethod, FontSizeAnalysis

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakePage:
    def __init__(self, runs: Iterable[TextRun]) -> None:
        self._runs = list(runs)

    def text_runs(self) -> list[TextRun]:
        return self._runs


class FakeDocument:
    """In-memory document made of pages of text runs."""

    def __init__(self, *pages: Iterable[TextRun]) -> None:
        self._pages = [FakePage(runs) for runs in pages]

    def pages(self) -> list[FakePage]:
        return self._pages


def run(size: float | None, text: str = "Sample", font_name: str | None = "Helvetica") -> TextRun:
    return TextRun(text=text, size=size, font_name=font_name)


def make_pdf(*pages: Iterable[float]) -> bytes:
    """Build a PDF whose pages carry one line of text per listed font size."""
    doc = fitz.open()
    for sizes in pages:
        page = doc.new_page()
        y = 72.0
        for size in sizes:
            page.insert_text((72, y), f"Text at {size}pt", fontsize=size)
            y += size * 2 + 10
    data = doc.tobytes()
    doc.close()
    return data


def make_png(width: int = 16, height: int = 16) -> bytes:
    pixmap = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pixmap.clear_with(255)
    return pixmap.tobytes("png")


def analysis_for(*sizes: float) -> FontSizeAnalysis:
    ordered = tuple(sorted(set(sizes), reverse=True))
    return FontSizeAnalysis(
        sizes=ordered,
        unique_size_count=len(ordered),
        method=AnalysisMethod.METADATA_EXACT,
        confidence=0.95,
    )


def vision_payload(*sizes: float) -> dict[str, Any]:
    """A well-formed vision model reply."""
    return build_report(analysis_for(*sizes)).model_dump(mode="json", exclude_none=True)

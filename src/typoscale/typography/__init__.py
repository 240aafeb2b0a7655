"""Font size extraction, compliance reports and result caching."""

from typoscale.typography.cache import ResultCache
from typoscale.typography.extractor import DocumentFontExtractor
from typoscale.typography.report_builder import ComplianceReportBuilder, build_report
from typoscale.typography.schemas import (
    AnalysisMethod,
    Certainty,
    ComplianceReport,
    ComplianceSummary,
    FontMeasurement,
    FontSizeAnalysis,
    Position,
    Section,
    SectionKind,
    Severity,
)

__all__ = [
    "AnalysisMethod",
    "Certainty",
    "ComplianceReport",
    "ComplianceReportBuilder",
    "ComplianceSummary",
    "DocumentFontExtractor",
    "FontMeasurement",
    "FontSizeAnalysis",
    "Position",
    "ResultCache",
    "Section",
    "SectionKind",
    "Severity",
    "build_report",
]

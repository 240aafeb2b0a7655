"""Translate a font size analysis into a compliance report."""

from collections.abc import Iterable

from typoscale.typography.schemas import (
    SIZE_LIMIT,
    ComplianceReport,
    ComplianceSummary,
    FontSizeAnalysis,
    Section,
    SectionKind,
    Severity,
)

PASSING_SCORE = 85
SCORE_FLOOR = 20
PENALTY_PER_EXTRA_SIZE = 15


def score_for_size_count(size_count: int) -> int:
    """Flat pass score up to the limit, then 15 points off per extra size (floor 20)."""
    if size_count <= SIZE_LIMIT:
        return PASSING_SCORE
    return max(SCORE_FLOOR, 100 - (size_count - SIZE_LIMIT) * PENALTY_PER_EXTRA_SIZE)


def format_size(size: float) -> str:
    return f"{size:g}pt"


class ComplianceReportBuilder:
    """Pure mapping from FontSizeAnalysis to ComplianceReport.

    Sections not listed in ``enabled_sections`` are emitted as disabled
    placeholders. Only the type scale section is computed from measurements.
    """

    def __init__(self, enabled_sections: Iterable[SectionKind | str] = (SectionKind.TYPE_SCALE,)) -> None:
        self.enabled_sections = frozenset(SectionKind(kind) for kind in enabled_sections)

    def build(self, analysis: FontSizeAnalysis) -> ComplianceReport:
        n = analysis.unique_size_count
        exceeds = n > SIZE_LIMIT
        score = score_for_size_count(n)

        sections: dict[SectionKind, Section] = {}
        for kind in SectionKind:
            if kind is SectionKind.TYPE_SCALE and kind in self.enabled_sections:
                sections[kind] = self._type_scale_section(analysis, score, exceeds)
            else:
                # Only the type scale can be derived from declared sizes.
                sections[kind] = Section.disabled(kind)

        if exceeds:
            priority_issues = [f"Critical: Using {n} font sizes (max recommended: {SIZE_LIMIT})"]
            quick_wins = ["Consolidate similar font sizes to reduce total count"]
        else:
            priority_issues = []
            quick_wins = ["Font size count is manageable"]

        return ComplianceReport(
            overall_score=score,
            font_sizes_detected=n,
            exceeds_size_limit=exceeds,
            sections=sections,
            priority_issues=priority_issues,
            quick_wins=quick_wins,
            compliance_summary=ComplianceSummary(
                passes_limit=not exceeds,
                total_violations=1 if exceeds else 0,
                severity=Severity.HIGH if exceeds else Severity.LOW,
            ),
        )

    @staticmethod
    def _type_scale_section(analysis: FontSizeAnalysis, score: int, exceeds: bool) -> Section:
        n = analysis.unique_size_count
        feedback = (
            f"Precise analysis detected {n} distinct font sizes using {analysis.method.value}. "
            f"Confidence: {analysis.confidence * 100:.0f}%"
        )
        if exceeds:
            recommendations = [f"Reduce from {n} sizes to maximum {SIZE_LIMIT} sizes"]
        else:
            recommendations = ["Font size count is within recommended limits"]
        return Section(
            score=score,
            feedback=feedback,
            recommendations=recommendations,
            detected_sizes=[format_size(size) for size in analysis.sizes],
        )


def build_report(analysis: FontSizeAnalysis) -> ComplianceReport:
    """Build a report with the default section set."""
    return ComplianceReportBuilder().build(analysis)

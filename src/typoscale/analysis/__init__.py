"""Analysis pipeline for uploaded designs."""

from typoscale.analysis.service import AnalysisMode, AnalysisOutcome, AnalysisService

__all__ = [
    "AnalysisMode",
    "AnalysisOutcome",
    "AnalysisService",
]

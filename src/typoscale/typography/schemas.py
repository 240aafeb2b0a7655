"""Data schemas for font measurements and compliance reports."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Certainty(str, Enum):
    """How a font size was obtained."""

    EXACT = "exact"
    MEASURED = "measured"
    ESTIMATED = "estimated"


class AnalysisMethod(str, Enum):
    """Source of a font size analysis."""

    METADATA_EXACT = "metadata-exact"
    IMAGE_ESTIMATED = "image-estimated"
    HYBRID = "hybrid"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SectionKind(str, Enum):
    """Report sections and the key each uses for its issue list."""

    TYPE_SCALE = "type_scale"
    HIERARCHY = "hierarchy"
    CONSISTENCY = "consistency"
    READABILITY = "readability"

    @property
    def issue_field(self) -> str:
        return _ISSUE_FIELDS[self]


_ISSUE_FIELDS = {
    SectionKind.TYPE_SCALE: "detected_sizes",
    SectionKind.HIERARCHY: "hierarchy_issues",
    SectionKind.CONSISTENCY: "inconsistencies",
    SectionKind.READABILITY: "readability_issues",
}

SIZE_LIMIT = 4

DISABLED_SECTION_FEEDBACK = "Disabled: analysis currently focuses on type scale compliance only"


class Position(BaseModel):
    """Bounding box of a text run in document coordinates."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


class FontMeasurement(BaseModel):
    """One observed text run."""

    model_config = ConfigDict(frozen=True)

    font_size_pt: float = Field(..., ge=0.0, description="Declared size in points")
    font_family: str = Field(default="unknown")
    text: str = Field(default="")
    position: Position
    certainty: Certainty = Certainty.EXACT


class FontSizeAnalysis(BaseModel):
    """Aggregate font size data for one document."""

    model_config = ConfigDict(frozen=True)

    sizes: tuple[float, ...] = Field(
        default=(),
        description="Distinct sizes rounded to 2 decimals, largest first",
    )
    measurements: tuple[FontMeasurement, ...] = Field(default=())
    unique_size_count: int = Field(..., ge=0)
    method: AnalysisMethod
    confidence: float = Field(..., ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_sizes(self) -> "FontSizeAnalysis":
        if len(set(self.sizes)) != len(self.sizes):
            raise ValueError("sizes must be distinct")
        if self.unique_size_count != len(self.sizes):
            raise ValueError(
                f"unique_size_count ({self.unique_size_count}) does not match "
                f"number of sizes ({len(self.sizes)})"
            )
        if list(self.sizes) != sorted(self.sizes, reverse=True):
            raise ValueError("sizes must be sorted in descending order")
        return self


class Section(BaseModel):
    """Score and feedback for one aspect of the report."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=1, le=100)
    feedback: str
    recommendations: list[str] = Field(default_factory=list)
    detected_sizes: list[str] | None = None
    recommended_scale: Literal["compact", "balanced", "spacious"] | None = None
    hierarchy_issues: list[str] | None = None
    inconsistencies: list[str] | None = None
    readability_issues: list[str] | None = None

    @classmethod
    def disabled(cls, kind: SectionKind) -> "Section":
        """Placeholder for a section whose analysis is switched off."""
        return cls.model_validate(
            {
                "score": 100,
                "feedback": DISABLED_SECTION_FEEDBACK,
                "recommendations": ["Type scale analysis takes priority"],
                kind.issue_field: [],
            }
        )

    @property
    def is_disabled(self) -> bool:
        return self.feedback == DISABLED_SECTION_FEEDBACK


class ComplianceSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    passes_limit: bool
    total_violations: int = Field(..., ge=0)
    severity: Severity


class ComplianceReport(BaseModel):
    """Canonical typography compliance report.

    Produced either by the report builder from exact measurements or by the
    vision model, in which case it is validated against this schema before
    being trusted.
    """

    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(..., ge=1, le=100)
    font_sizes_detected: int = Field(..., ge=0)
    exceeds_size_limit: bool
    sections: dict[SectionKind, Section]
    priority_issues: list[str] = Field(default_factory=list)
    quick_wins: list[str] = Field(default_factory=list)
    compliance_summary: ComplianceSummary

    @model_validator(mode="after")
    def _check_consistency(self) -> "ComplianceReport":
        missing = set(SectionKind) - set(self.sections)
        if missing:
            names = ", ".join(sorted(kind.value for kind in missing))
            raise ValueError(f"missing sections: {names}")
        for kind, section in self.sections.items():
            for other in SectionKind:
                if other is not kind and getattr(section, other.issue_field) is not None:
                    raise ValueError(
                        f"section {kind.value} carries {other.issue_field}, "
                        f"which belongs to {other.value}"
                    )
        if self.exceeds_size_limit != (self.font_sizes_detected > SIZE_LIMIT):
            raise ValueError(
                f"exceeds_size_limit must be true exactly when more than {SIZE_LIMIT} sizes are detected"
            )
        if self.compliance_summary.passes_limit == self.exceeds_size_limit:
            raise ValueError("compliance_summary.passes_limit must equal not exceeds_size_limit")
        return self

    def to_json(self) -> str:
        """Serialize for persistence, omitting unused optional fields."""
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "ComplianceReport":
        return cls.model_validate_json(payload)

"""Prompts for the vision model."""

from collections.abc import Iterable

from typoscale.typography.schemas import DISABLED_SECTION_FEEDBACK, SIZE_LIMIT, SectionKind

_SECTION_GUIDANCE = {
    SectionKind.TYPE_SCALE: (
        "Identify every distinct font size actually used. Count them, list them in "
        "detected_sizes, and judge whether the sizes work together as a scale."
    ),
    SectionKind.HIERARCHY: (
        "Does size track content importance? Are hierarchy levels clearly separated "
        "(at least 2pt apart)? List problems in hierarchy_issues."
    ),
    SectionKind.CONSISTENCY: (
        "Do all titles, all body text and all metadata each share a single size? "
        "List violations in inconsistencies."
    ),
    SectionKind.READABILITY: (
        "Is body text at least 12pt on mobile, with adequate contrast and spacing? "
        "List problems in readability_issues."
    ),
}

_BASE_PROMPT = f"""You are an expert typography consultant evaluating a design against a strict type scale rule.

RULE: a design may use at most {SIZE_LIMIT} distinct font sizes. Fewer is better; 2-3 is often ideal.
Any design using {SIZE_LIMIT + 1} or more sizes is a critical issue.

METHOD:
- Examine the actual image systematically, top to bottom and left to right.
- Compare letter heights directly. If text looks a different size, it IS a different size.
- Never assume a template or standard scale, and never default to exactly {SIZE_LIMIT} sizes.
- Err on the side of finding more sizes rather than fewer.
- Describe how you measured in the feedback.

SECTIONS TO EVALUATE:
{{section_guidance}}

Respond with JSON only, using exactly this structure:
{{{{
  "overall_score": <integer 1-100>,
  "font_sizes_detected": <integer>,
  "exceeds_size_limit": <true when font_sizes_detected > {SIZE_LIMIT}>,
  "sections": {{{{
    "type_scale": {{{{"score": <1-100>, "feedback": "...", "recommendations": ["..."], "detected_sizes": ["..."]}}}},
    "hierarchy": {{{{"score": <1-100>, "feedback": "...", "recommendations": ["..."], "hierarchy_issues": ["..."]}}}},
    "consistency": {{{{"score": <1-100>, "feedback": "...", "recommendations": ["..."], "inconsistencies": ["..."]}}}},
    "readability": {{{{"score": <1-100>, "feedback": "...", "recommendations": ["..."], "readability_issues": ["..."]}}}}
  }}}},
  "priority_issues": ["..."],
  "quick_wins": ["..."],
  "compliance_summary": {{{{
    "passes_limit": <the opposite of exceeds_size_limit>,
    "total_violations": <integer>,
    "severity": "low|medium|high|critical"
  }}}}
}}}}
"""

USER_INSTRUCTION = (
    "Analyze this design image and provide a typography assessment focused on "
    "counting font sizes and type scale compliance."
)


def build_system_prompt(enabled_sections: Iterable[SectionKind | str]) -> str:
    """System prompt listing which sections to evaluate and which to stub out."""
    enabled = {SectionKind(kind) for kind in enabled_sections}
    lines = []
    for kind in SectionKind:
        if kind in enabled:
            lines.append(f"- {kind.value}: {_SECTION_GUIDANCE[kind]}")
        else:
            lines.append(
                f'- {kind.value}: not evaluated. Return score 100, feedback "{DISABLED_SECTION_FEEDBACK}", '
                f'recommendations ["Type scale analysis takes priority"] and an empty {kind.issue_field} list.'
            )
    return _BASE_PROMPT.format(section_guidance="\n".join(lines))

"""Vision model boundary for image-based typography reports."""

from typoscale.vision.client import VisionClient, parse_vision_report
from typoscale.vision.prompts import build_system_prompt

__all__ = [
    "VisionClient",
    "build_system_prompt",
    "parse_vision_report",
]

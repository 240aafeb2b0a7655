"""TypoScale: typography compliance analysis for design files."""

__version__ = "0.1.0"

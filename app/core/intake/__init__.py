"""
Intake Layer

Structure-intake step of the consultation workflow and the prompt it feeds
to the consultation agent.
"""
from .normalizer import (
    PatientIntake,
    StructuredIntake,
    detect_risk_indicators,
    extract_lifestyle_flags,
    find_missing_info,
    structure_intake,
    summarize_intake,
)
from .prompts import build_consultation_prompt

__all__ = [
    "PatientIntake",
    "StructuredIntake",
    "detect_risk_indicators",
    "extract_lifestyle_flags",
    "find_missing_info",
    "structure_intake",
    "summarize_intake",
    "build_consultation_prompt",
]

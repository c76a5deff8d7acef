"""
TCM Pattern Layer

Keyword-scored pattern matching behind the `tcm-insight` tool.

Usage:
    from app.core.tcm import TcmIntake, analyze_presentation

    insight = analyze_presentation(TcmIntake(key_symptoms="恶寒 头痛 无汗"))
    insight.primary_pattern.id     # "windCold"
"""
from .base import (
    ConsultationInsight,
    PatternInsight,
    RedFlagRule,
    ScoredMatch,
    TcmIntake,
    TcmPattern,
)
from .catalog import DEFAULT_CATALOG, GENERAL_REGULATION_ID, PatternCatalog
from .analyzer import analyze_presentation, detect_red_flags, rank_patterns

__all__ = [
    "ConsultationInsight",
    "PatternInsight",
    "RedFlagRule",
    "ScoredMatch",
    "TcmIntake",
    "TcmPattern",
    "DEFAULT_CATALOG",
    "GENERAL_REGULATION_ID",
    "PatternCatalog",
    "analyze_presentation",
    "detect_red_flags",
    "rank_patterns",
]

"""
TCM Pattern Analyzer

Keyword-overlap scoring of the pattern catalog against a patient narrative.

Design principles:
  - Pure: (TcmIntake, PatternCatalog) -> ConsultationInsight, never raises.
  - Absent intake fields are omitted everywhere, never replaced by
    placeholder text.
  - Catalog declaration order breaks ties (sorted() is stable).
"""
from __future__ import annotations

from typing import List

from .base import (
    ConsultationInsight,
    PatternInsight,
    ScoredMatch,
    TcmIntake,
    TcmPattern,
)
from .catalog import DEFAULT_CATALOG, PatternCatalog

MAX_SECONDARY_PATTERNS = 2
MAX_SUGGESTED_FOCUS = 5
SUMMARY_DELIMITER = "；"


def build_narrative(intake: TcmIntake) -> str:
    """Present fields joined by single spaces, lower-cased."""
    return " ".join(text for _, text in intake.present_fields()).lower()


def build_intake_summary(intake: TcmIntake) -> str:
    """e.g. "主诉：恶寒 头痛；病程：两天"."""
    return SUMMARY_DELIMITER.join(f"{label}：{text}" for label, text in intake.present_fields())


def score_pattern(pattern: TcmPattern, narrative: str) -> int:
    """Count of pattern keywords found as substrings of the narrative."""
    return sum(1 for keyword in pattern.keywords if keyword.lower() in narrative)


def rank_patterns(narrative: str, catalog: PatternCatalog = DEFAULT_CATALOG) -> List[ScoredMatch]:
    """All catalog patterns, highest score first; ties keep catalog order."""
    scored = [ScoredMatch(pattern, score_pattern(pattern, narrative)) for pattern in catalog.patterns]
    return sorted(scored, key=lambda match: match.score, reverse=True)


def detect_red_flags(narrative: str, catalog: PatternCatalog = DEFAULT_CATALOG) -> List[str]:
    """One message per rule with at least one keyword hit, in rule order."""
    return [
        rule.message
        for rule in catalog.red_flags
        if any(keyword.lower() in narrative for keyword in rule.keywords)
    ]


def _render_pattern(match: ScoredMatch, intake: TcmIntake) -> PatternInsight:
    pattern = match.pattern
    return PatternInsight(
        id=pattern.id,
        name=pattern.name,
        description=pattern.description,
        rationale=f"根据提供的症状（{intake.key_symptoms}）及体征提示的关键词，符合{pattern.name}的特征表现。",
        classical_formula=pattern.classical_formula,
        key_herbs=list(pattern.key_herbs),
        acupoints=list(pattern.acupoints),
        lifestyle=list(pattern.lifestyle),
        score=match.score,
    )


def _render_fallback(pattern: TcmPattern, intake: TcmIntake) -> PatternInsight:
    return PatternInsight(
        id=pattern.id,
        name=pattern.name,
        description=pattern.description,
        rationale=f"目前症状描述（{intake.key_symptoms}）尚不足以判定特定证型，建议先行综合调理并随访。",
        classical_formula=pattern.classical_formula,
        key_herbs=list(pattern.key_herbs),
        acupoints=list(pattern.acupoints),
        lifestyle=list(pattern.lifestyle),
        score=0,
    )


def _suggested_focus(primary: PatternInsight, secondary: List[PatternInsight]) -> List[str]:
    focus: List[str] = []
    for pattern in [primary, *secondary]:
        for advice in pattern.lifestyle:
            if advice not in focus:
                focus.append(advice)
    return focus[:MAX_SUGGESTED_FOCUS]


def analyze_presentation(
    intake: TcmIntake,
    catalog: PatternCatalog = DEFAULT_CATALOG,
) -> ConsultationInsight:
    """
    Surface likely patterns, red flags and care focuses for one intake.

    Args:
        intake: Patient narrative fields.
        catalog: Pattern catalog; defaults to the built-in one.

    Returns:
        ConsultationInsight.  The primary pattern is the best-scoring
        pattern, or the general-regulation fallback when nothing matched.
    """
    narrative = build_narrative(intake)
    ranked = rank_patterns(narrative, catalog)

    top = ranked[0] if ranked else None
    if top is not None and top.score > 0:
        primary = _render_pattern(top, intake)
    else:
        primary = _render_fallback(catalog.fallback, intake)

    secondary = [
        _render_pattern(match, intake)
        for match in ranked[1:1 + MAX_SECONDARY_PATTERNS]
        if match.score > 0
    ]

    return ConsultationInsight(
        primary_pattern=primary,
        secondary_patterns=secondary,
        red_flags=detect_red_flags(narrative, catalog),
        intake_summary=build_intake_summary(intake),
        suggested_focus=_suggested_focus(primary, secondary),
    )

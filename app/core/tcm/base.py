"""
TCM Pattern Layer: Base Types

Data contracts for the keyword-driven pattern scorer.  Catalog types are
frozen; result types are rebuilt on every request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TcmPattern:
    """One syndrome pattern of the static catalog."""
    id: str                              # e.g. "windCold"
    name: str                            # e.g. "风寒束表 (Wind-Cold Invasion)"
    description: str
    classical_formula: str
    key_herbs: Tuple[str, ...] = ()
    acupoints: Tuple[str, ...] = ()
    lifestyle: Tuple[str, ...] = ()
    # Matched as case-insensitive substrings of the narrative.
    # Surrounding spaces are significant (" sigh ").
    keywords: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RedFlagRule:
    """Keyword set that, on any hit, contributes one advisory message."""
    id: str
    keywords: Tuple[str, ...]
    message: str


@dataclass(frozen=True)
class ScoredMatch:
    pattern: TcmPattern
    score: int


# Field order is significant: narrative and summary are built in this order.
INTAKE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("key_symptoms", "主诉"),
    ("duration", "病程"),
    ("tongue", "舌象"),
    ("pulse", "脉象"),
    ("constitution", "体质"),
    ("lifestyle", "生活方式"),
)


@dataclass(frozen=True)
class TcmIntake:
    """Free-text patient narrative consumed by the scorer."""
    key_symptoms: str
    tongue: Optional[str] = None
    pulse: Optional[str] = None
    constitution: Optional[str] = None
    lifestyle: Optional[str] = None
    duration: Optional[str] = None

    def present_fields(self) -> List[Tuple[str, str]]:
        """(label, text) for every non-empty field, in declared order."""
        result = []
        for name, label in INTAKE_FIELDS:
            value = getattr(self, name)
            if value:
                result.append((label, value))
        return result


@dataclass
class PatternInsight:
    """A catalog pattern rendered for one consultation."""
    id: str
    name: str
    description: str
    rationale: str
    classical_formula: str
    key_herbs: List[str] = field(default_factory=list)
    acupoints: List[str] = field(default_factory=list)
    lifestyle: List[str] = field(default_factory=list)
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "rationale": self.rationale,
            "classicalFormula": self.classical_formula,
            "keyHerbs": list(self.key_herbs),
            "acupoints": list(self.acupoints),
            "lifestyle": list(self.lifestyle),
            "score": self.score,
        }


@dataclass
class ConsultationInsight:
    """
    Output of the `tcm-insight` tool.

    Serialises to the camelCase wire shape
    {primaryPattern, secondaryPatterns, redFlags, intakeSummary, suggestedFocus}.
    """
    primary_pattern: PatternInsight
    secondary_patterns: List[PatternInsight] = field(default_factory=list)
    red_flags: List[str] = field(default_factory=list)
    intake_summary: str = ""
    suggested_focus: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryPattern": self.primary_pattern.to_dict(),
            "secondaryPatterns": [p.to_dict() for p in self.secondary_patterns],
            "redFlags": list(self.red_flags),
            "intakeSummary": self.intake_summary,
            "suggestedFocus": list(self.suggested_focus),
        }

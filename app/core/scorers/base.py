"""
Scorer Base Types

A scorer grades one finished agent run with a score in [0, 1] and a short
human-readable reason.  Scorers never change the run they grade.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ScoringRun:
    """What a scorer sees of an agent run."""
    input_text: str
    output_text: str
    tool_calls: List[str] = field(default_factory=list)     # tool names, call order


@dataclass
class ScoreResult:
    scorer: str
    score: float
    reason: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scorer": self.scorer,
            "score": round(self.score, 4),
            "reason": self.reason,
            "details": self.details,
        }


class Scorer(ABC):
    """Base class for all run scorers."""

    name: str = "scorer"
    description: str = ""

    @abstractmethod
    def score(self, run: ScoringRun) -> ScoreResult:
        """Grade one run."""

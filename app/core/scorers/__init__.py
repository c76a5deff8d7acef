"""
Scorers

Post-hoc quality checks of consultation agent runs.

Usage:
    from app.core.scorers import ScoringRun, default_scorer_bindings, run_scorers

    results = run_scorers(ScoringRun(input_text, answer, ["tcm_insight"]),
                          default_scorer_bindings(client))
"""
from typing import List, Optional

from app.core.llm import ChatClient
from .base import Scorer, ScoreResult, ScoringRun
from .completeness import CompletenessScorer, extract_terms
from .runner import ScorerBinding, run_scorers
from .safety import SafetyReminderScorer, parse_judge_output
from .tool_call import ToolCallAccuracyScorer

EXPECTED_TOOL = "tcm_insight"


def default_scorer_bindings(
    client: Optional[ChatClient] = None,
    sampling_rate: float = 1.0,
) -> List[ScorerBinding]:
    """Tool-call, completeness and safety scorers sharing one sampling rate."""
    return [
        ScorerBinding(ToolCallAccuracyScorer(expected_tool=EXPECTED_TOOL, strict_mode=False), sampling_rate),
        ScorerBinding(CompletenessScorer(), sampling_rate),
        ScorerBinding(SafetyReminderScorer(client), sampling_rate),
    ]


__all__ = [
    "Scorer",
    "ScoreResult",
    "ScoringRun",
    "CompletenessScorer",
    "extract_terms",
    "ScorerBinding",
    "run_scorers",
    "SafetyReminderScorer",
    "parse_judge_output",
    "ToolCallAccuracyScorer",
    "EXPECTED_TOOL",
    "default_scorer_bindings",
]

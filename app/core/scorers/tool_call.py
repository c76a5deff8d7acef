"""
Tool-Call Appropriateness Scorer

Checks whether the agent called the tool it was expected to call.
"""
from __future__ import annotations

from .base import Scorer, ScoreResult, ScoringRun


class ToolCallAccuracyScorer(Scorer):
    """
    Score 1 when the expected tool was called, else 0.

    In strict mode the expected tool must also be the only tool called.
    A run with no tool calls scores 0.
    """

    name = "toolCallAppropriateness"
    description = "Checks that the agent consulted the expected tool."

    def __init__(self, expected_tool: str, strict_mode: bool = False):
        self.expected_tool = expected_tool
        self.strict_mode = strict_mode

    def score(self, run: ScoringRun) -> ScoreResult:
        called = list(run.tool_calls)
        was_called = self.expected_tool in called

        if self.strict_mode:
            correct = was_called and set(called) == {self.expected_tool}
        else:
            correct = was_called

        if not called:
            reason = f"No tools were called; expected {self.expected_tool}"
        elif correct:
            reason = f"Expected tool {self.expected_tool} was called"
        elif was_called:
            reason = f"{self.expected_tool} was called alongside other tools (strict mode)"
        else:
            reason = f"Expected {self.expected_tool} but called: {', '.join(called)}"

        return ScoreResult(
            scorer=self.name,
            score=1.0 if correct else 0.0,
            reason=reason,
            details={
                "expected_tool": self.expected_tool,
                "actual_tools": called,
                "strict_mode": self.strict_mode,
            },
        )

"""
Scorer Runner

Runs the registered scorers over a finished agent run, each according to its
sampling rate.  One scorer failing must not block the others.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, List, Sequence

from app.utils import ScoringError, get_logger
from .base import Scorer, ScoreResult, ScoringRun

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScorerBinding:
    """A scorer plus the fraction of runs it should grade (1.0 = every run)."""
    scorer: Scorer
    sampling_rate: float = 1.0

    def __post_init__(self):
        if not 0.0 <= self.sampling_rate <= 1.0:
            raise ScoringError(
                f"sampling_rate must be within [0, 1], got {self.sampling_rate}",
                scorer=self.scorer.name,
            )

    def should_sample(self, rng: Callable[[], float] = random.random) -> bool:
        if self.sampling_rate >= 1.0:
            return True
        if self.sampling_rate <= 0.0:
            return False
        return rng() < self.sampling_rate


def run_scorers(
    run: ScoringRun,
    bindings: Sequence[ScorerBinding],
    rng: Callable[[], float] = random.random,
) -> List[ScoreResult]:
    """Grade ``run`` with every sampled scorer, in registration order."""
    results: List[ScoreResult] = []
    for binding in bindings:
        if not binding.should_sample(rng):
            continue
        name = binding.scorer.name
        try:
            results.append(binding.scorer.score(run))
        except Exception as exc:
            logger.error(f"Scorer [{name}] raised {exc}", exc_info=True, extra={"scorer": name})
    return results

"""
Completeness Scorer

Measures how much of the user's message the answer covers, by term overlap.

Latin terms come from NLTK's ``word_tokenize``: lower-cased words of three
or more characters, minus NLTK's English stopwords. NLTK does not segment
Chinese, so every CJK run contributes its overlapping bigrams instead:
"恶寒头痛" gives "恶寒", "寒头", "头痛".

The tokenizer and stopword list need the ``punkt_tab`` and ``stopwords``
NLTK data packages (``python -m nltk.downloader punkt_tab stopwords``).
Without them tokenization falls back to ``wordpunct_tokenize`` and no
stopwords are removed.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import FrozenSet, List, Set

import nltk
from nltk.corpus import stopwords
from nltk.tokenize import word_tokenize, wordpunct_tokenize

from app.utils import get_logger

from .base import Scorer, ScoreResult, ScoringRun

logger = get_logger(__name__)

_CJK_RUN = re.compile(r"[\u4e00-\u9fff]+")
_MIN_WORD_LENGTH = 3


@lru_cache(maxsize=None)
def nltk_resource_available(resource: str) -> bool:
    try:
        nltk.data.find(resource)
    except LookupError:
        logger.warning(f"NLTK resource {resource!r} not installed")
        return False
    return True


@lru_cache(maxsize=1)
def english_stopwords() -> FrozenSet[str]:
    if not nltk_resource_available("corpora/stopwords"):
        return frozenset()
    return frozenset(stopwords.words("english"))


def tokenize(text: str) -> List[str]:
    if nltk_resource_available("tokenizers/punkt_tab"):
        return word_tokenize(text)
    return wordpunct_tokenize(text)


def _is_latin_word(token: str) -> bool:
    return len(token) >= _MIN_WORD_LENGTH and token[0].isascii() and token[0].isalpha()


def extract_terms(text: str) -> Set[str]:
    stop = english_stopwords()
    terms = {
        token
        for token in (t.lower() for t in tokenize(text))
        if _is_latin_word(token) and token not in stop
    }
    for run in _CJK_RUN.findall(text):
        if len(run) == 1:
            terms.add(run)
        else:
            terms.update(run[i:i + 2] for i in range(len(run) - 1))
    return terms


class CompletenessScorer(Scorer):
    """Fraction of input terms that reappear in the output."""

    name = "completeness"
    description = "Checks that the answer addresses the elements of the user's message."

    def score(self, run: ScoringRun) -> ScoreResult:
        input_terms = extract_terms(run.input_text)
        output_terms = extract_terms(run.output_text)

        if not input_terms:
            return ScoreResult(
                scorer=self.name,
                score=1.0,
                reason="Input contains no scorable terms",
                details={"input_terms": 0, "covered_terms": 0, "missing": []},
            )

        covered = input_terms & output_terms
        missing = sorted(input_terms - output_terms)
        score = len(covered) / len(input_terms)

        return ScoreResult(
            scorer=self.name,
            score=score,
            reason=f"Covered {len(covered)} of {len(input_terms)} input terms",
            details={
                "input_terms": len(input_terms),
                "covered_terms": len(covered),
                "missing": missing[:20],
            },
        )

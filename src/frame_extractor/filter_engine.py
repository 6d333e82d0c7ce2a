"""FilterEngine — ban list plus a repetition heuristic for extracted text.

Design goals:
  - Ban check: case-insensitive substring match, no word boundaries
  - Repetition score in [0, 1]:
        0.5 · word frequency + 0.3 · bigram frequency + 0.2 · loop detection
  - Loop detection is sampled, not exhaustive, to stay cheap on long text
"""

from __future__ import annotations
import logging
import re
from collections import Counter

from .types import FilterResult

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.6

_TOKEN = re.compile(r"[^\W_]+")     # Unicode letters/digits
_MIN_TOKEN_LEN = 3
_MIN_LOOP_LEN = 3
_MAX_LOOP_LEN = 12
_LOOP_SAMPLES = 20
_LOOP_SATURATION = 5


def tokenize(text: str) -> list[str]:
    """Lower-case alphanumeric tokens of at least three characters."""
    return [t for t in _TOKEN.findall(text.lower()) if len(t) >= _MIN_TOKEN_LEN]


def word_frequency_score(tokens: list[str]) -> float:
    """Share of the most frequent token, amplified ×1.5."""
    if not tokens:
        return 0.0
    top = Counter(tokens).most_common(1)[0][1]
    return min(1.0, 1.5 * top / len(tokens))


def bigram_score(tokens: list[str]) -> float:
    """Share of the most frequent consecutive token pair, amplified ×1.5."""
    if len(tokens) < 3:
        return 0.0
    top = Counter(zip(tokens, tokens[1:])).most_common(1)[0][1]
    return min(1.0, 1.5 * top / (len(tokens) - 1))


def loop_score(text: str) -> float:
    """Highest occurrence count of a short substring, 5+ saturating at 1.0.

    Only every ``len(text) // 20``-th start position is sampled.
    """
    n = len(text)
    if n <= _MIN_LOOP_LEN * 2:
        return 0.0
    longest = min(_MAX_LOOP_LEN, n // 2)
    step = max(1, n // _LOOP_SAMPLES)

    max_count = 0
    for start in range(0, n, step):
        for length in range(_MIN_LOOP_LEN, longest + 1):
            if start + length > n:
                break
            count = text.count(text[start:start + length])
            max_count = max(max_count, count)
    return min(1.0, max(0.0, max_count / _LOOP_SATURATION))


class FilterEngine:
    """Ban-list matcher and repetition scorer.

    The ban list can be changed between calls; scoring itself is read-only.
    """

    __slots__ = ("_banned",)

    def __init__(self, banned: list[str] | None = None) -> None:
        self._banned: list[str] = []     # lower-cased, insertion order
        for phrase in banned or []:
            self.add_banned(phrase)

    # ------------------------------------------------------------------
    # Ban list
    # ------------------------------------------------------------------

    def add_banned(self, phrase: str) -> None:
        """Add a phrase (stored lower-case).  Blank phrases are ignored."""
        normalized = phrase.lower()
        if not normalized.strip() or normalized in self._banned:
            return
        self._banned.append(normalized)
        logger.debug("ban list: added %r (%d phrases)", normalized, len(self._banned))

    def remove_banned(self, phrase: str) -> None:
        normalized = phrase.lower()
        if normalized in self._banned:
            self._banned.remove(normalized)
            logger.debug("ban list: removed %r (%d phrases)", normalized, len(self._banned))

    @property
    def banned(self) -> list[str]:
        return list(self._banned)

    def is_banned(self, text: str) -> bool:
        if not self._banned:
            return False
        lowered = text.lower()
        return any(phrase in lowered for phrase in self._banned)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, text: str) -> float:
        """Repetition score in [0, 1]; 0 when fewer than three tokens."""
        tokens = tokenize(text)
        if len(tokens) < 3:
            return 0.0
        total = (
            0.5 * word_frequency_score(tokens)
            + 0.3 * bigram_score(tokens)
            + 0.2 * loop_score(text)
        )
        return min(1.0, max(0.0, total))

    def should_hide(self, text: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
        return self.score(text) >= threshold

    def filter(
        self,
        text: str,
        *,
        ban_enabled: bool = True,
        repetition_enabled: bool = True,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> FilterResult:
        """Combined verdict.  Disabled checks report False (and score 0.0)."""
        banned = ban_enabled and self.is_banned(text)
        score = self.score(text) if repetition_enabled else 0.0
        repetitive = repetition_enabled and score >= threshold
        return FilterResult.build(is_banned=banned, is_repetitive=repetitive, repetition_score=score)

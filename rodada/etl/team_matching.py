"""
Fuzzy team-name matching against a candidate pool.

Scoring tiers (inputs are canonical names, see name_normalization):
- Equal: 1.0
- One contains the other: 0.9 + 0.1 * len(shorter) / len(longer), in [0.9, 1.0]
- Otherwise: Dice coefficient over character bigrams, in [0.0, 1.0)

The bigram intersection is counted with multiplicity, so "aaaa" vs "aa"-like
repetitions cannot inflate the score.

Best-effort only: callers receive the score and decide what to trust.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from rodada.etl.name_normalization import canonicalize

logger = logging.getLogger(__name__)

SUBSTRING_BASE_SCORE = 0.9


@dataclass(frozen=True)
class BestMatch:
    """Result of matching one name against a candidate pool."""
    canonical: str                   # canonical form of the queried name
    best_candidate: Optional[str]    # candidate as given, None for an empty pool
    score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "canonical": self.canonical,
            "best_candidate": self.best_candidate,
            "score": self.score,
        }


def bigrams(s: str) -> Counter:
    """Multiset of adjacent character pairs ("abc" -> {"ab": 1, "bc": 1})."""
    return Counter(s[i:i + 2] for i in range(len(s) - 1))


def dice_coefficient(a: str, b: str) -> float:
    """2 * |A ∩ B| / (|A| + |B|) over bigram multisets."""
    bg_a = bigrams(a)
    bg_b = bigrams(b)
    total = sum(bg_a.values()) + sum(bg_b.values())
    if total == 0:
        return 0.0
    overlap = sum((bg_a & bg_b).values())
    return 2.0 * overlap / total


def name_similarity(a: str, b: str) -> float:
    """
    Similarity of two canonical names in [0, 1].

    Empty names never match anything (an empty string is trivially a
    substring of every name).
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    if a in b or b in a:
        shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
        return SUBSTRING_BASE_SCORE + (1.0 - SUBSTRING_BASE_SCORE) * (len(shorter) / len(longer))

    return dice_coefficient(a, b)


def best_match(name: str, candidates: Iterable[str]) -> BestMatch:
    """
    Pick the candidate most similar to name.

    The target is canonicalized; candidates are compared through their
    canonical form but returned as given. Ties keep the first-seen candidate.
    An empty pool yields best_candidate=None and score 0.0.

    Example:
        best_match("Real Madrid CF", ["real madrid", "barcelona"])
        -> BestMatch(canonical="real madrid", best_candidate="real madrid", score=1.0)
    """
    target = canonicalize(name)

    best: Optional[str] = None
    best_score = -1.0
    for candidate in candidates:
        score = name_similarity(target, canonicalize(candidate))
        if score > best_score:
            best = candidate
            best_score = score

    if best is None:
        logger.debug("[TEAM_MATCH] Empty candidate pool for %r", name)
        return BestMatch(canonical=target, best_candidate=None, score=0.0)

    return BestMatch(canonical=target, best_candidate=best, score=best_score)

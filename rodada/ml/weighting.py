"""
Evidence weighting.

- weight_from_rank: similar-games list, Top1 = 1.0, Top2 = 0.5, Top3 = 0.333...
- weight_from_delta: round overview, inverse of the similarity distance

Weights are never negative for ranks; zero-weight picks still count in
simple means but drop out of every weighted aggregate.
"""

from typing import Optional

from rodada.config import get_settings
from rodada.etl.numeric import try_float, try_int


def weight_from_rank(rank) -> float:
    """
    1/rank for rank >= 1, else 0.

    Accepts an int or a raw cell; raw cells are truncated ("2.7" -> rank 2).
    """
    if rank is None:
        return 0.0
    r = rank if isinstance(rank, int) and not isinstance(rank, bool) else try_int(rank)
    if r is None or r <= 0:
        return 0.0
    return 1.0 / r


def weight_from_delta(delta, eps: Optional[float] = None) -> float:
    """1 / (delta + eps); absent delta -> 0. Negative deltas give negative weights."""
    d = try_float(delta)
    if d is None:
        return 0.0
    if eps is None:
        eps = get_settings().DELTA_EPS
    if d + eps == 0:
        return 0.0
    return 1.0 / (d + eps)

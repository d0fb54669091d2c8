"""
Weighted statistics and the CV-based confidence model.

All aggregates share one pair-filtering rule: a (value, weight) pair counts
only when the value is a finite number and the weight is > 0. Simple means
ignore weights entirely (nulls are still skipped).

Confidence from CV%:
    percent = round(100 - clamp(cv, 0, cap) / cap * 100)   (half rounds up)
    tier    = green if cv <= green_max, yellow if cv <= yellow_max, else red
    tier    = gray ("no data") when cv is null/NaN

Tiers are decided on the UNCLAMPED cv. The cap and both thresholds are
policy constants (Settings.CV_CAP / CV_GREEN_MAX / CV_YELLOW_MAX), not
derived values.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from rodada.config import Settings, get_settings

TIER_GREEN = "green"
TIER_YELLOW = "yellow"
TIER_RED = "red"
TIER_GRAY = "gray"

TIER_LABELS = {
    TIER_GREEN: "high confidence",
    TIER_YELLOW: "medium confidence",
    TIER_RED: "low confidence",
    TIER_GRAY: "no data",
}


@dataclass(frozen=True)
class ConfidencePolicy:
    """Adjustable constants of the confidence model."""
    cap: float = 120.0
    green_max: float = 35.0
    yellow_max: float = 60.0
    eps: float = 1e-6
    saturation: float = 999.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ConfidencePolicy":
        s = settings or get_settings()
        return cls(
            cap=s.CV_CAP,
            green_max=s.CV_GREEN_MAX,
            yellow_max=s.CV_YELLOW_MAX,
            eps=s.CV_EPS,
            saturation=s.CV_SATURATION,
        )


@dataclass(frozen=True)
class Confidence:
    percent: Optional[int]
    tier: str
    label: str

    def to_dict(self) -> dict:
        return {"percent": self.percent, "tier": self.tier, "label": self.label}


NO_DATA = Confidence(percent=None, tier=TIER_GRAY, label=TIER_LABELS[TIER_GRAY])


@dataclass(frozen=True)
class WeightedMetric:
    """Simple mean, weighted mean and confidence of one metric over a pick set."""
    simple_mean: Optional[float] = None
    weighted_mean: Optional[float] = None
    confidence: Confidence = field(default=NO_DATA)
    cv: Optional[float] = None
    n: int = 0                      # non-null values seen by the simple mean

    def to_dict(self) -> dict:
        return {
            "simple_mean": self.simple_mean,
            "weighted_mean": self.weighted_mean,
            "confidence": self.confidence.to_dict(),
            "cv": self.cv,
            "n": self.n,
        }


def _is_number(v) -> bool:
    return v is not None and not isinstance(v, bool) and math.isfinite(v)


def _weighted_pairs(
    values: Sequence[Optional[float]],
    weights: Sequence[float],
) -> tuple[np.ndarray, np.ndarray]:
    """Arrays of (value, weight) pairs with a numeric value and weight > 0."""
    xs: list[float] = []
    ws: list[float] = []
    for i, v in enumerate(values):
        w = weights[i] if i < len(weights) else 0.0
        if not _is_number(v) or w is None or not w > 0:
            continue
        xs.append(float(v))
        ws.append(float(w))
    return np.asarray(xs, dtype=float), np.asarray(ws, dtype=float)


def mean_simple(values: Sequence[Optional[float]]) -> Optional[float]:
    """Plain mean of the non-null values; None when there are none."""
    xs = np.asarray([float(v) for v in values if _is_number(v)], dtype=float)
    if xs.size == 0:
        return None
    return float(xs.mean())


def mean_weighted(
    values: Sequence[Optional[float]],
    weights: Sequence[float],
) -> Optional[float]:
    """sum(v*w) / sum(w) over valid pairs; None when the total weight is 0."""
    xs, ws = _weighted_pairs(values, weights)
    if ws.size == 0 or ws.sum() <= 0:
        return None
    return float(np.average(xs, weights=ws))


def variance_weighted(
    values: Sequence[Optional[float]],
    weights: Sequence[float],
) -> Optional[float]:
    """Weighted population variance around the weighted mean."""
    xs, ws = _weighted_pairs(values, weights)
    if ws.size == 0 or ws.sum() <= 0:
        return None
    center = np.average(xs, weights=ws)
    return float(np.average((xs - center) ** 2, weights=ws))


def cv_percent(
    values: Sequence[Optional[float]],
    weights: Sequence[float],
    policy: Optional[ConfidencePolicy] = None,
) -> Optional[float]:
    """
    Weighted coefficient of variation, in percent.

    When |mean| < eps the ratio is undefined: returns 0 if the spread is also
    ~0 (e.g. every value is 0), otherwise the saturation sentinel, which
    always lands in the red tier at 0% confidence.
    """
    policy = policy or ConfidencePolicy.from_settings()

    variance = variance_weighted(values, weights)
    mean = mean_weighted(values, weights)
    if variance is None or mean is None:
        return None

    sd = math.sqrt(max(0.0, variance))
    if abs(mean) < policy.eps:
        return 0.0 if sd < policy.eps else policy.saturation

    return sd / abs(mean) * 100.0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def confidence_from_cv(
    cv: Optional[float],
    policy: Optional[ConfidencePolicy] = None,
) -> Confidence:
    """Map a CV% to a confidence percent and traffic-light tier."""
    if cv is None or not math.isfinite(cv):
        return NO_DATA
    policy = policy or ConfidencePolicy.from_settings()

    clamped = max(0.0, min(policy.cap, cv))
    percent = _round_half_up(100.0 - (clamped / policy.cap) * 100.0)

    if cv <= policy.green_max:
        tier = TIER_GREEN
    elif cv <= policy.yellow_max:
        tier = TIER_YELLOW
    else:
        tier = TIER_RED

    return Confidence(percent=percent, tier=tier, label=TIER_LABELS[tier])


def reliability_tier(
    reliability: Optional[float],
    policy: Optional[ConfidencePolicy] = None,
) -> str:
    """
    Tier of a reliability score (100 - cv, clamped to [0, 100]).

    Thresholds mirror the CV tiers: >= 100 - green_max is green,
    >= 100 - yellow_max is yellow.
    """
    if reliability is None:
        return TIER_GRAY
    policy = policy or ConfidencePolicy.from_settings()
    if reliability >= 100.0 - policy.green_max:
        return TIER_GREEN
    if reliability >= 100.0 - policy.yellow_max:
        return TIER_YELLOW
    return TIER_RED


def aggregate_metric(
    values: Sequence[Optional[float]],
    weights: Sequence[float],
    policy: Optional[ConfidencePolicy] = None,
) -> WeightedMetric:
    """WeightedMetric for one metric series and its pick weights."""
    policy = policy or ConfidencePolicy.from_settings()
    cv = cv_percent(values, weights, policy)
    return WeightedMetric(
        simple_mean=mean_simple(values),
        weighted_mean=mean_weighted(values, weights),
        confidence=confidence_from_cv(cv, policy),
        cv=cv,
        n=sum(1 for v in values if _is_number(v)),
    )

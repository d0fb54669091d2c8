"""Weighting and weighted statistics."""

from rodada.ml.weighted_stats import (
    Confidence,
    ConfidencePolicy,
    WeightedMetric,
    aggregate_metric,
    confidence_from_cv,
    cv_percent,
    mean_simple,
    mean_weighted,
    variance_weighted,
)
from rodada.ml.weighting import weight_from_delta, weight_from_rank

__all__ = [
    "Confidence", "ConfidencePolicy", "WeightedMetric",
    "aggregate_metric", "confidence_from_cv", "cv_percent",
    "mean_simple", "mean_weighted", "variance_weighted",
    "weight_from_delta", "weight_from_rank",
]

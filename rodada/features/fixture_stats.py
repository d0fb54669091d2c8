"""
Fixture statistics from a "similar games" export.

Each row of the export is a previous match judged similar to the fixture,
ranked 1..N. One row becomes two picks, one per perspective:
- home perspective reads the row's home-side numbers (FTHG, HC, HY, ...)
- away perspective reads the away-side numbers (FTAG, AC, AY, ...)

Only picks whose enrichment succeeded (found=true) feed the aggregates.
Unfound picks are kept as evidence rows with their reason string.

Usage:
    stats = build_fixture_statistics(rows)
    stats.home_stats.metrics["goals"].weighted_mean
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from rodada.etl.columns import (
    METRIC_KEYS,
    SIMILAR_FIELDS,
    cell,
    metric_fields,
    resolve_columns,
)
from rodada.etl.numeric import parse_flag, parse_score, try_float, try_int
from rodada.ml.weighted_stats import ConfidencePolicy, WeightedMetric, aggregate_metric
from rodada.ml.weighting import weight_from_rank

logger = logging.getLogger(__name__)

SIDES = ("home", "away")


def check_side(side: str) -> str:
    if side not in SIDES:
        raise ValueError("side must be 'home' or 'away'")
    return side


@dataclass(frozen=True)
class HistoricalPick:
    """One previous match used as evidence, seen from one side."""
    perspective: str
    rank: Optional[int]
    weight: float
    date: str = ""
    home_name: str = ""
    away_name: str = ""
    score: str = ""
    metrics: Mapping[str, Optional[float]] = field(default_factory=dict)
    found: bool = True
    reason: str = ""
    rank_inferred: bool = False     # rank taken from row position, weight forced to 0

    @property
    def parsed_score(self) -> Optional[tuple[int, int]]:
        return parse_score(self.score)

    def metric(self, key: str) -> Optional[float]:
        return self.metrics.get(key)

    def to_dict(self) -> dict:
        return {
            "perspective": self.perspective,
            "rank": self.rank,
            "weight": self.weight,
            "date": self.date,
            "home_name": self.home_name,
            "away_name": self.away_name,
            "score": self.score,
            "metrics": dict(self.metrics),
            "found": self.found,
            "reason": self.reason,
            "rank_inferred": self.rank_inferred,
        }


@dataclass(frozen=True)
class SideStatistics:
    """Aggregated metrics for one perspective."""
    side: str
    n_picks: int
    metrics: Mapping[str, WeightedMetric]

    def to_dict(self) -> dict:
        return {
            "side": self.side,
            "n_picks": self.n_picks,
            "metrics": {k: m.to_dict() for k, m in self.metrics.items()},
        }


@dataclass(frozen=True)
class FixtureStatistics:
    home_picks: list[HistoricalPick]
    away_picks: list[HistoricalPick]
    home_stats: SideStatistics
    away_stats: SideStatistics

    @property
    def has_enriched_data(self) -> bool:
        return self.home_stats.n_picks > 0 or self.away_stats.n_picks > 0

    def to_dict(self) -> dict:
        return {
            "home_picks": [p.to_dict() for p in self.home_picks],
            "away_picks": [p.to_dict() for p in self.away_picks],
            "home_stats": self.home_stats.to_dict(),
            "away_stats": self.away_stats.to_dict(),
        }


def read_metrics(row: Mapping[str, str], columns: Mapping[str, Optional[str]]) -> dict[str, Optional[float]]:
    """The seven "for" metrics of a row, given resolved metric columns."""
    return {key: try_float(cell(row, columns.get(key))) for key in METRIC_KEYS}


def picks_from_similar_rows(rows: Sequence[Mapping[str, str]], side: str) -> list[HistoricalPick]:
    """One perspective's picks, in row order (found and unfound alike)."""
    check_side(side)
    columns = resolve_columns(rows, SIMILAR_FIELDS)
    metric_columns = resolve_columns(rows, metric_fields(side))

    picks: list[HistoricalPick] = []
    for position, row in enumerate(rows, start=1):
        parsed_rank = try_int(cell(row, columns["rank"]))
        rank_ok = parsed_rank is not None and parsed_rank >= 1
        picks.append(HistoricalPick(
            perspective=side,
            rank=parsed_rank if rank_ok else position,
            weight=weight_from_rank(parsed_rank) if rank_ok else 0.0,
            date=cell(row, columns["date"]),
            home_name=cell(row, columns["home_name"]),
            away_name=cell(row, columns["away_name"]),
            score=cell(row, columns["score"]),
            metrics=read_metrics(row, metric_columns),
            found=parse_flag(cell(row, columns["found"])),
            reason=cell(row, columns["reason"]),
            rank_inferred=not rank_ok,
        ))
    return picks


def side_statistics(
    picks: Sequence[HistoricalPick],
    side: str,
    policy: Optional[ConfidencePolicy] = None,
) -> SideStatistics:
    """Aggregate the found picks of one perspective into WeightedMetrics."""
    policy = policy or ConfidencePolicy.from_settings()
    valid = [p for p in picks if p.found]
    weights = [p.weight for p in valid]
    metrics = {
        key: aggregate_metric([p.metric(key) for p in valid], weights, policy)
        for key in METRIC_KEYS
    }
    return SideStatistics(side=side, n_picks=len(valid), metrics=metrics)


def build_fixture_statistics(
    similar_rows: Sequence[Mapping[str, str]],
    policy: Optional[ConfidencePolicy] = None,
) -> FixtureStatistics:
    """Home/away picks and their aggregated statistics for one fixture."""
    policy = policy or ConfidencePolicy.from_settings()
    home_picks = picks_from_similar_rows(similar_rows, "home")
    away_picks = picks_from_similar_rows(similar_rows, "away")

    result = FixtureStatistics(
        home_picks=home_picks,
        away_picks=away_picks,
        home_stats=side_statistics(home_picks, "home", policy),
        away_stats=side_statistics(away_picks, "away", policy),
    )

    unfound = sum(1 for p in home_picks if not p.found)
    logger.debug(
        "[FIXTURE_STATS] %d similar rows, %d unfound, %d with inferred rank",
        len(similar_rows),
        unfound,
        sum(1 for p in home_picks if p.rank_inferred),
    )
    return result

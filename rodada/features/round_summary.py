"""
Round overview for one fixture, from the "top" similar-games export.

Unlike the per-fixture statistics (rank-weighted, enrichment required), the
overview only needs the full-time score of each similar match and weights it
by the inverse similarity distance (delta_total_val):

    w = 1 / (delta + eps)

From the scores it derives goals for/against per side, a game-level CV and
reliability, and a simple goals forecast:

    home_forecast = (home goals-for_w + away goals-against_w) / 2
    away_forecast = (away goals-for_w + home goals-against_w) / 2
"""

import logging
import math
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from rodada.etl.columns import SIMILAR_FIELDS, cell, resolve_columns
from rodada.etl.name_normalization import (
    infer_teams_from_base,
    loose_normalize,
    pick_display_name,
    resolve_display_seed,
)
from rodada.etl.numeric import clamp, mean2, parse_score, try_int
from rodada.features.panel_reader import FixtureMeta, parse_panel_meta, parse_top_meta
from rodada.ml.weighted_stats import (
    ConfidencePolicy,
    mean_simple,
    mean_weighted,
    reliability_tier,
    variance_weighted,
)
from rodada.ml.weighting import weight_from_delta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalSeries:
    """Goals for/against of each side across the usable similar matches."""
    home_for: list[float] = field(default_factory=list)
    home_against: list[float] = field(default_factory=list)
    away_for: list[float] = field(default_factory=list)
    away_against: list[float] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class RoundFixtureSummary:
    meta: FixtureMeta
    display_home: str
    display_away: str
    home_position: Optional[int]
    away_position: Optional[int]
    n_samples: int
    home_for_weighted: Optional[float]
    home_against_weighted: Optional[float]
    away_for_weighted: Optional[float]
    away_against_weighted: Optional[float]
    home_for_simple: Optional[float]
    home_against_simple: Optional[float]
    game_cv: Optional[float]
    reliability: Optional[float]
    reliability_tier: str
    home_forecast: Optional[float]
    away_forecast: Optional[float]
    total_forecast: Optional[float]

    def to_dict(self) -> dict:
        out = {k: v for k, v in self.__dict__.items() if k != "meta"}
        out["meta"] = self.meta.to_dict()
        return out


def goal_series(
    top_rows: Sequence[Mapping[str, str]],
    eps: Optional[float] = None,
) -> GoalSeries:
    """Rows with a parseable score and a positive delta weight, split by side."""
    columns = resolve_columns(top_rows, SIMILAR_FIELDS)
    series = GoalSeries()
    skipped = 0
    for row in top_rows:
        score = parse_score(cell(row, columns["score"]))
        w = weight_from_delta(cell(row, columns["delta"]), eps)
        if score is None or w <= 0:
            skipped += 1
            continue
        hg, ag = score
        series.home_for.append(float(hg))
        series.home_against.append(float(ag))
        series.away_for.append(float(ag))
        series.away_against.append(float(hg))
        series.weights.append(w)

    if skipped:
        logger.debug("[ROUND] Skipped %d top rows (no score or non-positive weight)", skipped)
    return series


def estimate_position(top_rows: Sequence[Mapping[str, str]], team_name: str) -> Optional[int]:
    """
    Most frequent league position of a team across the top rows.

    The team may appear as target (target_pos_then) or opponent
    (opponent_pos_then). Ties go to the better (smaller) position.
    """
    wanted = loose_normalize(team_name)
    if not wanted:
        return None

    counts: Counter = Counter()
    for row in top_rows:
        if loose_normalize(row.get("target_team")) == wanted:
            pos = try_int(row.get("target_pos_then"))
            if pos is not None:
                counts[pos] += 1
        if loose_normalize(row.get("opponent")) == wanted:
            pos = try_int(row.get("opponent_pos_then"))
            if pos is not None:
                counts[pos] += 1

    if not counts:
        return None
    return min(counts, key=lambda p: (-counts[p], p))


def fixture_meta(
    top_rows: Sequence[Mapping[str, str]],
    panel_rows: Optional[Sequence[Mapping[str, str]]] = None,
    base_name: Optional[str] = None,
) -> FixtureMeta:
    """Metadata from panels when available, else the top rows; names backfilled from base_name."""
    meta = parse_panel_meta(panel_rows) if panel_rows else parse_top_meta(top_rows)
    if (not meta.home_name or not meta.away_name) and base_name:
        inferred = infer_teams_from_base(base_name)
        if inferred:
            meta = FixtureMeta(
                competition=meta.competition,
                fixture_id=meta.fixture_id,
                utc_date=meta.utc_date,
                matchday=meta.matchday,
                home_name=meta.home_name or inferred[0],
                away_name=meta.away_name or inferred[1],
            )
    return meta


def display_names(
    meta: FixtureMeta,
    top_rows: Sequence[Mapping[str, str]],
    base_name: Optional[str] = None,
) -> tuple[str, str]:
    """Clean, beautified (home, away) names for display and matching seeds."""
    fallback = infer_teams_from_base(base_name) if base_name else None
    seed_home = resolve_display_seed(meta.home_name, fallback[0] if fallback else None)
    seed_away = resolve_display_seed(meta.away_name, fallback[1] if fallback else None)
    return pick_display_name(seed_home, top_rows), pick_display_name(seed_away, top_rows)


def _round_cv(values: list[float], w: list[float], eps: float) -> Optional[float]:
    """
    Weighted CV% of one goal series, None when |mean| < eps.

    A series with a near-zero mean (e.g. a side that never conceded) drops
    out of the game CV; it never saturates it.
    """
    mean = mean_weighted(values, w)
    variance = variance_weighted(values, w)
    if mean is None or variance is None or abs(mean) < eps:
        return None
    return math.sqrt(max(0.0, variance)) / abs(mean) * 100.0


def _side_cv(gf: list[float], ga: list[float], w: list[float], policy: ConfidencePolicy) -> Optional[float]:
    return mean2(_round_cv(gf, w, policy.eps), _round_cv(ga, w, policy.eps))


def build_round_summary(
    top_rows: Sequence[Mapping[str, str]],
    panel_rows: Optional[Sequence[Mapping[str, str]]] = None,
    base_name: Optional[str] = None,
    policy: Optional[ConfidencePolicy] = None,
) -> RoundFixtureSummary:
    """Overview card data for one fixture of the round."""
    policy = policy or ConfidencePolicy.from_settings()

    meta = fixture_meta(top_rows, panel_rows, base_name)
    home_name, away_name = display_names(meta, top_rows, base_name)

    s = goal_series(top_rows)
    w = s.weights

    home_for_w = mean_weighted(s.home_for, w)
    home_against_w = mean_weighted(s.home_against, w)
    away_for_w = mean_weighted(s.away_for, w)
    away_against_w = mean_weighted(s.away_against, w)

    game_cv = mean2(
        _side_cv(s.home_for, s.home_against, w, policy),
        _side_cv(s.away_for, s.away_against, w, policy),
    )
    reliability = None if game_cv is None else clamp(100.0 - game_cv, 0.0, 100.0)

    home_fc = (home_for_w + away_against_w) / 2 if home_for_w is not None and away_against_w is not None else None
    away_fc = (away_for_w + home_against_w) / 2 if away_for_w is not None and home_against_w is not None else None
    total_fc = home_fc + away_fc if home_fc is not None and away_fc is not None else None

    return RoundFixtureSummary(
        meta=meta,
        display_home=home_name,
        display_away=away_name,
        home_position=estimate_position(top_rows, home_name),
        away_position=estimate_position(top_rows, away_name),
        n_samples=len(w),
        home_for_weighted=home_for_w,
        home_against_weighted=home_against_w,
        away_for_weighted=away_for_w,
        away_against_weighted=away_against_w,
        home_for_simple=mean_simple(s.home_for),
        home_against_simple=mean_simple(s.home_against),
        game_cv=game_cv,
        reliability=reliability,
        reliability_tier=reliability_tier(reliability, policy),
        home_forecast=home_fc,
        away_forecast=away_fc,
        total_forecast=total_fc,
    )


def sort_round(summaries: Sequence[RoundFixtureSummary]) -> list[RoundFixtureSummary]:
    """Kickoff, then matchday (missing last), competition, home name."""
    def key(s: RoundFixtureSummary):
        md = try_int(s.meta.matchday)
        return (s.meta.utc_date, md if md is not None else 10**9, s.meta.competition, s.display_home)
    return sorted(summaries, key=key)

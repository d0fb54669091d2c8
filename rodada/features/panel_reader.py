"""
Reader for the pre-aggregated "panel" export.

The pipeline that writes the panel already computed mean/std/CV/n for each
metric, once over a baseline sample and once over the similar-games sample.
Nothing is recomputed here: fields are read as-is and only cv_pct goes
through the confidence transform.

Field naming: {prefix}_{stat_key}_{field}, e.g. "baseline_goals_mean",
"similar_corners_cv_pct". One panel row per side, identified by the
"side" column (HOME/AWAY).
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from rodada.config import get_settings
from rodada.etl.columns import METRIC_KEYS
from rodada.etl.numeric import try_float, try_int
from rodada.features.fixture_stats import check_side
from rodada.ml.weighted_stats import Confidence, ConfidencePolicy, confidence_from_cv

logger = logging.getLogger(__name__)

PANEL_FIELDS = ("mean", "std", "cv_pct", "n")


@dataclass(frozen=True)
class PanelMetric:
    mean: Optional[float] = None
    std: Optional[float] = None
    cv_pct: Optional[float] = None
    n: Optional[int] = None
    confidence: Optional[Confidence] = None

    def to_dict(self) -> dict:
        return {
            "mean": self.mean,
            "std": self.std,
            "cv_pct": self.cv_pct,
            "n": self.n,
            "confidence": self.confidence.to_dict() if self.confidence else None,
        }


@dataclass(frozen=True)
class SideStats:
    """Panel statistics for one side, per scope (baseline / similar)."""
    side: str
    team_name: str = ""
    position: Optional[int] = None
    points: Optional[int] = None
    baseline: Mapping[str, PanelMetric] = field(default_factory=dict)
    similar: Mapping[str, PanelMetric] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "side": self.side,
            "team_name": self.team_name,
            "position": self.position,
            "points": self.points,
            "baseline": {k: m.to_dict() for k, m in self.baseline.items()},
            "similar": {k: m.to_dict() for k, m in self.similar.items()},
        }


@dataclass(frozen=True)
class FixtureMeta:
    competition: str = ""
    fixture_id: str = ""
    utc_date: str = ""
    matchday: str = ""
    home_name: str = ""
    away_name: str = ""

    def to_dict(self) -> dict:
        return {
            "competition": self.competition,
            "fixture_id": self.fixture_id,
            "utc_date": self.utc_date,
            "matchday": self.matchday,
            "home_name": self.home_name,
            "away_name": self.away_name,
        }


def panel_field(prefix: str, stat_key: str, field_name: str) -> str:
    return f"{prefix}_{stat_key}_{field_name}"


def _get(row: Mapping[str, str], key: str) -> str:
    return str(row.get(key) or "").strip()


def read_panel_metric(
    row: Mapping[str, str],
    prefix: str,
    stat_key: str,
    policy: Optional[ConfidencePolicy] = None,
) -> PanelMetric:
    """The four pre-computed fields of one metric; cv_pct drives the confidence."""
    cv = try_float(_get(row, panel_field(prefix, stat_key, "cv_pct")))
    return PanelMetric(
        mean=try_float(_get(row, panel_field(prefix, stat_key, "mean"))),
        std=try_float(_get(row, panel_field(prefix, stat_key, "std"))),
        cv_pct=cv,
        n=try_int(_get(row, panel_field(prefix, stat_key, "n"))),
        confidence=confidence_from_cv(cv, policy),
    )


def build_side_stats_from_panel(
    panel_row: Optional[Mapping[str, str]],
    side: str,
    stat_keys: Sequence[str] = METRIC_KEYS,
    policy: Optional[ConfidencePolicy] = None,
) -> SideStats:
    """
    Read one side's panel row. A missing row yields all-null metrics with
    gray confidence, never an error.
    """
    check_side(side)
    settings = get_settings()
    policy = policy or ConfidencePolicy.from_settings(settings)
    row = panel_row or {}

    baseline = {
        key: read_panel_metric(row, settings.PANEL_BASELINE_PREFIX, key, policy)
        for key in stat_keys
    }
    similar = {
        key: read_panel_metric(row, settings.PANEL_SIMILAR_PREFIX, key, policy)
        for key in stat_keys
    }
    return SideStats(
        side=side,
        team_name=_get(row, "team_name"),
        position=try_int(_get(row, "pos")),
        points=try_int(_get(row, "pts")),
        baseline=baseline,
        similar=similar,
    )


def find_panel_row(
    panel_rows: Sequence[Mapping[str, str]],
    side: str,
) -> Optional[Mapping[str, str]]:
    """First panel row whose "side" column is HOME/AWAY (case-insensitive)."""
    wanted = check_side(side).upper()
    for row in panel_rows:
        if _get(row, "side").upper() == wanted:
            return row
    return None


def parse_panel_meta(panel_rows: Sequence[Mapping[str, str]]) -> FixtureMeta:
    """Fixture metadata from the panel export (last HOME/AWAY row wins)."""
    if not panel_rows:
        return FixtureMeta()
    r0 = panel_rows[0]

    home = ""
    away = ""
    for row in panel_rows:
        side = _get(row, "side").upper()
        if side == "HOME":
            home = _get(row, "team_name") or home
        elif side == "AWAY":
            away = _get(row, "team_name") or away

    return FixtureMeta(
        competition=_get(r0, "competition"),
        fixture_id=_get(r0, "fixture_id"),
        utc_date=_get(r0, "utcDate") or _get(r0, "utcDate_fixture"),
        matchday=_get(r0, "matchday") or _get(r0, "matchday_fixture"),
        home_name=home,
        away_name=away,
    )


def parse_top_meta(top_rows: Sequence[Mapping[str, str]]) -> FixtureMeta:
    """Fixture metadata from the first similar-games row (no team names there)."""
    if not top_rows:
        return FixtureMeta()
    r0 = top_rows[0]
    return FixtureMeta(
        competition=_get(r0, "competition"),
        fixture_id=_get(r0, "fixture_id"),
        utc_date=_get(r0, "utcDate_fixture"),
        matchday=_get(r0, "matchday_fixture"),
    )

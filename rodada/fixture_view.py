"""
Everything the fixture page shows, computed from three row sets.

Sources (each may be empty):
- similar_rows: "similar games" export, rank-weighted evidence
- panel_rows:   pre-aggregated panel export (one row per side)
- archive_rows: third-party league archive, for recent matches

The view is recomputed from scratch on every call; cached_fixture_view()
adds an optional cache keyed on (fixture_id, source_hash).
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from rodada.etl.archive_schema import STRATEGY_POSITIONAL, ArchiveSchema, resolve_archive_schema
from rodada.features.fixture_stats import FixtureStatistics, HistoricalPick, build_fixture_statistics
from rodada.features.panel_reader import (
    FixtureMeta,
    SideStats,
    build_side_stats_from_panel,
    find_panel_row,
)
from rodada.features.recent_matches import (
    AnchorMatch,
    archive_team_pool,
    resolve_anchor,
    resolve_recent_matches,
)
from rodada.features.round_summary import display_names, fixture_meta
from rodada.ml.weighted_stats import ConfidencePolicy
from rodada.utils.cache import FixtureViewCache, source_hash

logger = logging.getLogger(__name__)

Rows = Sequence[Mapping[str, str]]


@dataclass(frozen=True)
class FixtureView:
    meta: FixtureMeta
    statistics: FixtureStatistics
    home_panel: Optional[SideStats]
    away_panel: Optional[SideStats]
    archive_schema: ArchiveSchema
    home_anchor: AnchorMatch
    away_anchor: AnchorMatch
    home_recent: list[HistoricalPick]
    away_recent: list[HistoricalPick]

    @property
    def warnings(self) -> list[str]:
        out = []
        if self.archive_schema.strategy == STRATEGY_POSITIONAL:
            out.append(
                "archive columns guessed by position "
                f"({self.archive_schema.date_col}/{self.archive_schema.home_col}/"
                f"{self.archive_schema.away_col}); recent matches may be wrong"
            )
        if not self.statistics.has_enriched_data:
            out.append("no enriched similar games for this fixture")
        return out

    def to_dict(self) -> dict:
        return {
            "meta": self.meta.to_dict(),
            "statistics": self.statistics.to_dict(),
            "home_panel": self.home_panel.to_dict() if self.home_panel else None,
            "away_panel": self.away_panel.to_dict() if self.away_panel else None,
            "archive_schema": self.archive_schema.to_dict(),
            "home_anchor": self.home_anchor.to_dict(),
            "away_anchor": self.away_anchor.to_dict(),
            "home_recent": [p.to_dict() for p in self.home_recent],
            "away_recent": [p.to_dict() for p in self.away_recent],
            "warnings": self.warnings,
        }


def _panel_side(panel_rows: Rows, side: str, policy: ConfidencePolicy) -> Optional[SideStats]:
    row = find_panel_row(panel_rows, side)
    if row is None:
        return None
    return build_side_stats_from_panel(row, side, policy=policy)


def build_fixture_view(
    similar_rows: Rows,
    panel_rows: Rows = (),
    archive_rows: Rows = (),
    fixture_date: Optional[str] = None,
    home_seed: Optional[str] = None,
    away_seed: Optional[str] = None,
    home_anchor: Optional[str] = None,
    away_anchor: Optional[str] = None,
    home_anchor_score: Optional[float] = None,
    away_anchor_score: Optional[float] = None,
    limit: Optional[int] = None,
    policy: Optional[ConfidencePolicy] = None,
    base_name: Optional[str] = None,
) -> FixtureView:
    """
    Build the fixture view.

    fixture_date defaults to the panel metadata (or the first similar row).
    Name seeds default to the cleaned panel team names, falling back to the
    "__HOME_vs_AWAY" pair of base_name. Upstream anchors, when given, bypass
    fuzzy matching.
    """
    policy = policy or ConfidencePolicy.from_settings()

    meta = fixture_meta(similar_rows, panel_rows, base_name)
    fixture_date = fixture_date or meta.utc_date
    if not home_seed or not away_seed:
        derived_home, derived_away = display_names(meta, similar_rows, base_name)
        home_seed = home_seed or derived_home
        away_seed = away_seed or derived_away

    statistics = build_fixture_statistics(similar_rows, policy)

    schema = resolve_archive_schema(archive_rows)
    pool = archive_team_pool(archive_rows, schema)
    home_match = resolve_anchor(home_seed or "", pool, home_anchor, home_anchor_score)
    away_match = resolve_anchor(away_seed or "", pool, away_anchor, away_anchor_score)

    home_recent = resolve_recent_matches(
        archive_rows, schema, home_match.best_canonical_candidate, "home", fixture_date, limit
    )
    away_recent = resolve_recent_matches(
        archive_rows, schema, away_match.best_canonical_candidate, "away", fixture_date, limit
    )

    logger.info(
        "[FIXTURE_VIEW] %s: %d similar rows, %d archive rows (%s), recent %d/%d",
        meta.fixture_id or "?",
        len(similar_rows),
        len(archive_rows),
        schema.strategy,
        len(home_recent),
        len(away_recent),
    )

    return FixtureView(
        meta=meta,
        statistics=statistics,
        home_panel=_panel_side(panel_rows, "home", policy),
        away_panel=_panel_side(panel_rows, "away", policy),
        archive_schema=schema,
        home_anchor=home_match,
        away_anchor=away_match,
        home_recent=home_recent,
        away_recent=away_recent,
    )


def cached_fixture_view(
    cache: FixtureViewCache,
    fixture_id: str,
    similar_rows: Rows,
    panel_rows: Rows = (),
    archive_rows: Rows = (),
    **kwargs,
) -> FixtureView:
    """
    build_fixture_view() behind a cache keyed on (fixture_id, source_hash).

    kwargs (date, seeds, anchors) are not part of the key: they must be
    fixed per fixture_id, as they are when derived from the same sources.
    """
    key = (str(fixture_id), source_hash(similar_rows, panel_rows, archive_rows))
    hit, view = cache.get(key)
    if hit:
        return view

    view = build_fixture_view(similar_rows, panel_rows, archive_rows, **kwargs)
    cache.set(key, view)
    return view

"""
Anchor resolution and "most recent matches" from a league archive.

An anchor is the archive's own spelling (canonicalized) of a fixture side.
It comes either from an upstream mapping, trusted verbatim, or from fuzzy
matching the display name against every team seen in the archive.

Recent matches are archive rows strictly before the fixture day where the
anchor played on the requested side, newest first. They are recency-ordered
evidence, not similarity-ranked, so every pick carries weight 0.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from rodada.config import get_settings
from rodada.etl.archive_schema import ArchiveSchema
from rodada.etl.columns import cell, metric_fields, resolve_columns
from rodada.etl.name_normalization import canonicalize
from rodada.etl.numeric import parse_match_date
from rodada.etl.team_matching import best_match
from rodada.features.fixture_stats import HistoricalPick, check_side, read_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnchorMatch:
    canonical_seed: str
    best_canonical_candidate: Optional[str]
    similarity_score: Optional[float]
    source: str = "fuzzy"           # "fuzzy" | "upstream"

    def to_dict(self) -> dict:
        return {
            "canonical_seed": self.canonical_seed,
            "best_canonical_candidate": self.best_canonical_candidate,
            "similarity_score": self.similarity_score,
            "source": self.source,
        }


def archive_team_pool(rows: Sequence[Mapping[str, str]], schema: ArchiveSchema) -> list[str]:
    """Distinct canonical team names of the archive, first-seen order."""
    pool: dict[str, None] = {}
    if not schema.is_resolved:
        return []
    for row in rows:
        for col in (schema.home_col, schema.away_col):
            name = canonicalize(cell(row, col))
            if name:
                pool.setdefault(name, None)
    return list(pool)


def resolve_anchor(
    seed: str,
    candidates: Sequence[str],
    upstream_canonical: Optional[str] = None,
    upstream_score: Optional[float] = None,
) -> AnchorMatch:
    """
    Map a fixture side's display name onto the archive's candidate pool.

    An upstream canonical mapping short-circuits matching; its score is
    passed through as supplied (None when absent). An empty seed, or one that
    scores 0 against every candidate, resolves to no anchor.
    """
    canonical_seed = canonicalize(seed)
    if upstream_canonical:
        return AnchorMatch(
            canonical_seed=canonical_seed,
            best_canonical_candidate=upstream_canonical,
            similarity_score=upstream_score,
            source="upstream",
        )

    match = best_match(seed, candidates)
    anchor = match.best_candidate
    if anchor is not None and (not canonical_seed or match.score <= 0):
        # best_match still returns the first candidate on a zero score
        anchor = None
    if anchor is None:
        logger.info("[ANCHOR] No archive candidate for %r", seed)
    else:
        logger.debug("[ANCHOR] %r -> %r (score=%.3f)", seed, anchor, match.score)
    return AnchorMatch(
        canonical_seed=canonical_seed,
        best_canonical_candidate=anchor,
        similarity_score=match.score,
        source="fuzzy",
    )


def _score_text(metrics: Mapping[str, Optional[float]], other: Mapping[str, Optional[float]], side: str) -> str:
    mine, theirs = metrics.get("goals"), other.get("goals")
    if mine is None or theirs is None:
        return ""
    home, away = (mine, theirs) if side == "home" else (theirs, mine)
    return f"{int(home)}-{int(away)}"


def resolve_recent_matches(
    archive_rows: Sequence[Mapping[str, str]],
    schema: ArchiveSchema,
    anchor_canonical: Optional[str],
    side: str,
    before_date,
    limit: Optional[int] = None,
) -> list[HistoricalPick]:
    """
    The anchor's last `limit` matches on `side` strictly before `before_date`.

    Rows with an unreadable date are skipped (their order is unknown).
    Equal dates keep archive order.
    """
    check_side(side)
    if limit is None:
        limit = get_settings().RECENT_MATCHES_LIMIT

    anchor = canonicalize(anchor_canonical)
    cutoff = parse_match_date(before_date)
    if not anchor or cutoff is None or not schema.is_resolved or limit <= 0:
        logger.debug(
            "[RECENT] Skipping %s lookup (anchor=%r, cutoff=%r, schema=%s)",
            side, anchor, cutoff, schema.strategy,
        )
        return []

    team_col = schema.home_col if side == "home" else schema.away_col
    other_side = "away" if side == "home" else "home"
    own_metric_cols = resolve_columns(archive_rows, metric_fields(side))
    other_metric_cols = resolve_columns(archive_rows, metric_fields(other_side))

    dated: list[tuple[date, Mapping[str, str]]] = []
    for row in archive_rows:
        if canonicalize(cell(row, team_col)) != anchor:
            continue
        played = parse_match_date(cell(row, schema.date_col))
        if played is None or played >= cutoff:
            continue
        dated.append((played, row))

    # sort() is stable: same-day rows keep archive order
    dated.sort(key=lambda item: item[0], reverse=True)

    picks: list[HistoricalPick] = []
    for position, (_played, row) in enumerate(dated[:limit], start=1):
        metrics = read_metrics(row, own_metric_cols)
        picks.append(HistoricalPick(
            perspective=side,
            rank=position,
            weight=0.0,
            date=cell(row, schema.date_col),
            home_name=cell(row, schema.home_col),
            away_name=cell(row, schema.away_col),
            score=_score_text(metrics, read_metrics(row, other_metric_cols), side),
            metrics=metrics,
            found=True,
        ))
    return picks

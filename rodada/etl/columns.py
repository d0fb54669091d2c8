"""
Column alias tables for the three CSV sources.

Each logical field maps to an ordered list of accepted column names. The
first alias present in a source's header wins, and resolution happens once
per source (resolve_columns) rather than per cell.

Usage:
    columns = resolve_columns(rows, SIMILAR_FIELDS)
    rank_raw = cell(row, columns["rank"])
"""

from typing import Iterable, Mapping, Optional, Sequence

Row = Mapping[str, str]

# metric key -> (home-side code, away-side code) in football-data.co.uk naming
METRIC_CODES: dict[str, tuple[str, str]] = {
    "goals": ("FTHG", "FTAG"),
    "corners": ("HC", "AC"),
    "yellow_cards": ("HY", "AY"),
    "red_cards": ("HR", "AR"),
    "fouls": ("HF", "AF"),
    "shots": ("HS", "AS"),
    "shots_on_target": ("HST", "AST"),
}

METRIC_KEYS: tuple[str, ...] = tuple(METRIC_CODES)

# Descriptive fields of a "similar games" row
SIMILAR_FIELDS: dict[str, list[str]] = {
    "rank": ["rank", "top_rank", "pos_rank"],
    "found": ["fd_found", "found"],
    "reason": ["fd_reason", "reason"],
    "date": ["utcDate_prev", "date_prev", "Date"],
    "home_name": ["home_prev", "HomeTeam", "Home"],
    "away_name": ["away_prev", "AwayTeam", "Away"],
    "score": ["score_fulltime_prev", "score_fulltime", "score"],
    "delta": ["delta_total_val", "delta"],
}


def metric_aliases(metric: str, side: str) -> list[str]:
    """
    Accepted column names for a side's metric.

    goals/home -> ["fd_FTHG", "FTHG", "home_goals_home", "home_goals"]
    """
    home_code, away_code = METRIC_CODES[metric]
    code = home_code if side == "home" else away_code
    return [f"fd_{code}", code, f"{side}_{metric}_{side}", f"{side}_{metric}"]


def metric_fields(side: str) -> dict[str, list[str]]:
    return {metric: metric_aliases(metric, side) for metric in METRIC_KEYS}


def header_of(rows: Iterable[Row]) -> list[str]:
    """Union of column names in first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            seen.setdefault(key, None)
    return list(seen)


def resolve_columns(
    rows: Sequence[Row],
    fields: Mapping[str, Sequence[str]],
) -> dict[str, Optional[str]]:
    """Map each logical field to the first alias present in the header (or None)."""
    header = set(header_of(rows))
    resolved: dict[str, Optional[str]] = {}
    for field, aliases in fields.items():
        resolved[field] = next((a for a in aliases if a in header), None)
    return resolved


def cell(row: Row, column: Optional[str]) -> str:
    """Trimmed raw value of a resolved column; "" when absent."""
    if column is None:
        return ""
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()

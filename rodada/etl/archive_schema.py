"""
Column resolution for third-party league archives.

Archives come from different providers with different headers. The resolver
tries, in order:
1. football-data.co.uk headers (Date / HomeTeam / AwayTeam)
2. Short headers (Date / Home / Away)
3. Case-insensitive vocabulary match (date, matchdate, data; hometeam,
   home, mandante; awayteam, away, visitante)
4. The first three columns, flagged low_confidence

A positional guess is never silent: the strategy tag and low_confidence flag
travel with the result so the caller can warn the user.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from rodada.etl.columns import header_of

logger = logging.getLogger(__name__)

STRATEGY_FOOTBALL_DATA = "football_data"
STRATEGY_SHORT = "short_headers"
STRATEGY_HEURISTIC = "heuristic"
STRATEGY_POSITIONAL = "positional_fallback"
STRATEGY_UNRESOLVED = "unresolved"

KNOWN_HEADER_SETS: list[tuple[str, tuple[str, str, str]]] = [
    (STRATEGY_FOOTBALL_DATA, ("Date", "HomeTeam", "AwayTeam")),
    (STRATEGY_SHORT, ("Date", "Home", "Away")),
]

DATE_VOCAB = ("date", "matchdate", "data")
HOME_VOCAB = ("hometeam", "home", "mandante")
AWAY_VOCAB = ("awayteam", "away", "visitante")


@dataclass(frozen=True)
class ArchiveSchema:
    """Which archive columns hold the match date, home team and away team."""
    date_col: Optional[str]
    home_col: Optional[str]
    away_col: Optional[str]
    strategy: str
    low_confidence: bool = False

    @property
    def is_resolved(self) -> bool:
        return all((self.date_col, self.home_col, self.away_col))

    def to_dict(self) -> dict:
        return {
            "date_col": self.date_col,
            "home_col": self.home_col,
            "away_col": self.away_col,
            "strategy": self.strategy,
            "low_confidence": self.low_confidence,
        }


def _header_key(column: str) -> str:
    return re.sub(r"[\s_\-]+", "", column.strip().lower())


def _vocab_match(header: Sequence[str], vocab: Sequence[str], taken: set[str]) -> Optional[str]:
    # Vocabulary order is priority order ("hometeam" beats "home")
    keyed = [(_header_key(c), c) for c in header if c not in taken]
    for word in vocab:
        for key, column in keyed:
            if key == word:
                return column
    return None


def resolve_archive_schema(rows: Sequence[Mapping[str, str]]) -> ArchiveSchema:
    """Infer the date/home/away columns of an archive row set."""
    header = header_of(rows)
    if not header:
        return ArchiveSchema(None, None, None, STRATEGY_UNRESOLVED, low_confidence=True)

    present = set(header)
    for strategy, (date_col, home_col, away_col) in KNOWN_HEADER_SETS:
        if {date_col, home_col, away_col} <= present:
            return ArchiveSchema(date_col, home_col, away_col, strategy)

    taken: set[str] = set()
    date_col = _vocab_match(header, DATE_VOCAB, taken)
    if date_col:
        taken.add(date_col)
    home_col = _vocab_match(header, HOME_VOCAB, taken)
    if home_col:
        taken.add(home_col)
    away_col = _vocab_match(header, AWAY_VOCAB, taken)
    if date_col and home_col and away_col:
        return ArchiveSchema(date_col, home_col, away_col, STRATEGY_HEURISTIC)

    if len(header) >= 3:
        logger.warning(
            "[ARCHIVE_SCHEMA] No known date/home/away headers in %s; "
            "falling back to the first three columns",
            header[:6],
        )
        return ArchiveSchema(
            header[0], header[1], header[2], STRATEGY_POSITIONAL, low_confidence=True
        )

    logger.warning("[ARCHIVE_SCHEMA] Cannot resolve archive with %d column(s)", len(header))
    return ArchiveSchema(None, None, None, STRATEGY_UNRESOLVED, low_confidence=True)

"""ETL helpers: cell coercion, column aliases, name canonicalization and matching."""

from rodada.etl.archive_schema import ArchiveSchema, resolve_archive_schema
from rodada.etl.name_normalization import canonicalize
from rodada.etl.numeric import parse_match_date, parse_score, try_float, try_int
from rodada.etl.team_matching import BestMatch, best_match, name_similarity

__all__ = [
    "ArchiveSchema",
    "resolve_archive_schema",
    "canonicalize",
    "parse_match_date",
    "parse_score",
    "try_float",
    "try_int",
    "BestMatch",
    "best_match",
    "name_similarity",
]

"""
Null-safe coercion of raw CSV cells.

Every numeric or date cell read anywhere in the package goes through this
module. Locale rules:
- A single decimal comma is accepted ("1,5" -> 1.5). Only the first comma is
  replaced, so thousands separators are NOT supported ("1,234,5" -> None).
- Surrounding whitespace is ignored; empty strings and garbage become None.
- NaN and +/-inf are rejected (None), never propagated.

Dates accept ISO ("2026-02-01", "2026-02-01T18:00:00Z", "2026-02-01 18:00")
and day-first ("01/02/2026", "01/02/26") forms. Only the calendar day is
kept: "before the fixture" comparisons work at day granularity.
"""

import math
import re
from datetime import date, datetime
from typing import Optional

_SCORE_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")

_TRUTHY = {"true", "1", "yes", "y", "sim"}

_DAY_FIRST_FORMATS = ("%d/%m/%Y", "%d/%m/%y", "%d-%m-%Y", "%d.%m.%Y")


def try_float(value) -> Optional[float]:
    """Parse a float from a raw cell. Returns None on anything unusable."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else None

    s = str(value).strip().replace(",", ".", 1)
    if not s:
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    return v if math.isfinite(v) else None


def try_int(value) -> Optional[int]:
    """Parse an int by truncating a parsed float ("2.9" -> 2, "-1.5" -> -1)."""
    f = try_float(value)
    if f is None:
        return None
    return math.trunc(f)


def parse_score(score) -> Optional[tuple[int, int]]:
    """Parse a full-time score like "2-1" or " 2 - 1 " into (home, away)."""
    if not score:
        return None
    m = _SCORE_RE.match(str(score))
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def parse_flag(value) -> bool:
    """Boolean cell ("true"/"1"/"yes"), case-insensitive. Anything else is False."""
    return str(value or "").strip().lower() in _TRUTHY


def parse_match_date(value) -> Optional[date]:
    """
    Parse a match date cell into a calendar date.

    Examples:
        "2026-02-01T18:00:00Z" -> date(2026, 2, 1)
        "2026-02-01 18:00"     -> date(2026, 2, 1)
        "01/02/2026"           -> date(2026, 2, 1)
        "01/02/26"             -> date(2026, 2, 1)
        "next sunday"          -> None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = str(value).strip()
    if not s:
        return None

    # ISO: the first 10 chars carry the calendar day, whatever follows
    if len(s) >= 10 and s[4] == "-" and s[7] == "-":
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            return None

    # Day-first forms; drop a trailing time part if present
    head = s.split()[0]
    for fmt in _DAY_FIRST_FORMATS:
        try:
            return datetime.strptime(head, fmt).date()
        except ValueError:
            continue
    return None


def mean2(a: Optional[float], b: Optional[float]) -> Optional[float]:
    """Null-aware average of two values: mean2(a, None) == a."""
    if a is None and b is None:
        return None
    if a is None:
        return b
    if b is None:
        return a
    return (a + b) / 2


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))

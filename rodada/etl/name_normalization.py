"""
Shared team name canonicalization for cross-source matching.

Single source of truth: the similar-games export, the panel export and the
league archive all compare team names through canonicalize().

Also holds the display-name helpers used when a team name has to be
recovered from a fixture label or a file base name.
"""

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Optional

# Organizational tokens only. Semantic tokens ('real', 'united', 'city',
# 'atletico') distinguish teams and are kept.
STOPWORDS = frozenset({
    "fc", "cf", "sc", "ac", "afc", "cfc",
    "club", "clube", "futebol", "football",
    "de", "da", "do", "dos", "das", "the",
})

_MULTIPLICATION_SIGNS = ("×", "✕", "✖")

_PUNCT_RE = re.compile(r"[^\w\s]")

_FIXTURE_PREFIX_RE = re.compile(
    r"^MD\s*\d+\s*[-–—•|]?\s*\d{4}-\d{2}-\d{2}\s*[-–—•|]?\s*", re.IGNORECASE
)
_LEADING_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\s*[-–—•|]?\s*")
# Each team segment stops at the next "__" separator
_BASE_PAIR_RE = re.compile(r"__([^_](?:(?!__).)*?)_vs_((?:(?!__).)*?)(?:__|$)")

# Columns of a similar-games row that carry a team name
TEAM_NAME_COLUMNS = (
    "home_prev", "away_prev", "target_team", "opponent",
    "home", "away", "home_fixture", "away_fixture",
)


def canonicalize(name: Optional[str]) -> str:
    """
    Canonical, comparison-ready form of a team name.

    Steps:
    1. Trim, multiplication glyph -> "x", collapse whitespace
    2. Strip diacritics (NFKD, drop combining marks, Nordic letters), lowercase
    3. Underscores -> spaces, "&" -> "and"
    4. Remove remaining punctuation (replaced by a space, not deleted)
    5. Drop organizational stopwords, rejoin with single spaces

    Idempotent: canonicalize(canonicalize(x)) == canonicalize(x).

    Examples:
        "São Paulo FC"        -> "sao paulo"
        "Real Madrid CF"      -> "real madrid"
        "Brighton & Hove"     -> "brighton and hove"
        "Paris Saint-Germain" -> "paris saint germain"
        "Clube de Regatas do Flamengo" -> "regatas flamengo"
    """
    if not name:
        return ""

    s = str(name).strip()
    for glyph in _MULTIPLICATION_SIGNS:
        s = s.replace(glyph, "x")
    s = " ".join(s.split())

    s = unicodedata.normalize("NFKD", s)
    s = "".join(c for c in s if not unicodedata.combining(c))
    s = s.lower()
    # Nordic letters NFKD doesn't decompose
    s = s.replace("ø", "o").replace("æ", "ae").replace("ð", "d")

    s = s.replace("_", " ").replace("&", " and ")
    s = _PUNCT_RE.sub(" ", s)
    # \w keeps "_" produced by NFKD of exotic glyphs; treat it as a separator too
    s = s.replace("_", " ")

    tokens = [t for t in s.split() if t not in STOPWORDS]
    return " ".join(tokens)


def loose_normalize(name: Optional[str]) -> str:
    """
    Accent/punctuation-insensitive form that keeps every token.

    Used where two spellings of the *same* label must be grouped
    ("Fútbol" vs "Futbol") without dropping stopwords.
    """
    if not name:
        return ""
    s = unicodedata.normalize("NFKD", str(name))
    s = "".join(c for c in s if not unicodedata.combining(c)).lower()
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return " ".join(s.split())


def strip_fixture_prefix(label: Optional[str]) -> str:
    """
    Remove round/date prefixes from a team label.

    "MD22 2026-02-01 Real Madrid CF"     -> "Real Madrid CF"
    "MD 22 - 2026-02-01 - Real Madrid CF" -> "Real Madrid CF"
    "2026-02-01 Real Madrid CF"          -> "Real Madrid CF"
    """
    s = (label or "").strip()
    if not s:
        return s
    s = _FIXTURE_PREFIX_RE.sub("", s).strip()
    s = _LEADING_DATE_RE.sub("", s).strip()
    return s


def looks_dirty_team_name(name: Optional[str]) -> bool:
    """True when a string is more likely a file/fixture label than a team name."""
    t = (name or "").strip()
    if not t:
        return True
    if re.match(r"^MD\s*\d+", t, re.IGNORECASE):
        return True
    if re.search(r"\d{4}-\d{2}-\d{2}", t):
        return True
    return (
        re.search(r"histSeason", t, re.IGNORECASE) is not None
        or re.search(r"ID\d+", t, re.IGNORECASE) is not None
        or "__" in t
        or "_vs_" in t
    )


def infer_teams_from_base(base_name: Optional[str]) -> Optional[tuple[str, str]]:
    """
    Recover (home, away) from a file base name like
    "PL__ID123__Real_Madrid_vs_Barcelona__top12".
    """
    m = _BASE_PAIR_RE.search(base_name or "")
    if not m:
        return None
    home = m.group(1).replace("_", " ").strip()
    away = m.group(2).replace("_", " ").strip()
    if not home or not away:
        return None
    return home, away


def collect_team_spellings(rows: Iterable[Mapping[str, str]]) -> list[str]:
    """Every non-empty team-name cell in the rows, in order."""
    out: list[str] = []
    for row in rows:
        for col in TEAM_NAME_COLUMNS:
            value = (row.get(col) or "").strip()
            if value:
                out.append(value)
    return out


def pick_display_name(seed: str, rows: Iterable[Mapping[str, str]]) -> str:
    """
    Beautify a seed name with the richest spelling found in the rows.

    Among spellings whose loose form equals the seed's, the longest wins
    (accented spellings are longer once NFKD-decomposed, but plain length of
    the original string is what counts). Returns the seed when nothing matches.
    """
    seed_n = loose_normalize(seed)
    if not seed_n:
        return seed

    best: Optional[str] = None
    for spelling in collect_team_spellings(rows):
        if loose_normalize(spelling) != seed_n:
            continue
        if best is None or len(spelling) > len(best):
            best = spelling
    return best or seed


def resolve_display_seed(raw_name: Optional[str], fallback: Optional[str]) -> str:
    """
    Clean a team label; use the fallback (from the base name) when the
    cleaned label still looks like a fixture label.
    """
    cleaned = strip_fixture_prefix(raw_name or "")
    if not looks_dirty_team_name(cleaned):
        return cleaned
    return fallback or cleaned or (raw_name or "")

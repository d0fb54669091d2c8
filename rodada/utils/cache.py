"""TTL cache for fixture views.

Fixture views are pure functions of their three source row sets, so an entry
is keyed on (fixture_id, source_hash). Any change in any source changes the
hash and misses; storing the new view drops the fixture's older entries.

Usage:
    _cache = FixtureViewCache()  # ttl from FIXTURE_CACHE_TTL_SECONDS

    key = (fixture_id, source_hash(similar_rows, panel_rows, archive_rows))
    hit, view = _cache.get(key)
    if hit:
        return view

    view = build_fixture_view(...)
    _cache.set(key, view)

    # Invalidate
    _cache.invalidate()
"""

import hashlib
import json
import time
from collections.abc import Mapping, Sequence
from typing import Optional

from rodada.config import get_settings


def source_hash(*row_sets: Sequence[Mapping[str, str]]) -> str:
    """SHA-256 over the row sets, in argument order (row and column order matter)."""
    digest = hashlib.sha256()
    for rows in row_sets:
        payload = json.dumps(
            [list(row.items()) for row in (rows or [])],
            ensure_ascii=False,
            default=str,
        )
        digest.update(payload.encode("utf-8"))
        digest.update(b"\x1e")  # separator: ([a], []) != ([], [a])
    return digest.hexdigest()


class FixtureViewCache:
    """TTL-based cache keyed on (fixture_id, source_hash)."""

    __slots__ = ("ttl", "_entries")

    def __init__(self, ttl: Optional[float] = None):
        self.ttl = get_settings().FIXTURE_CACHE_TTL_SECONDS if ttl is None else ttl
        self._entries: dict[tuple[str, str], tuple[float, object]] = {}

    def get(self, key: tuple[str, str]) -> tuple[bool, object]:
        """Return (hit, data). Expired entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        timestamp, data = entry
        if time.time() - timestamp >= self.ttl:
            del self._entries[key]
            return False, None
        return True, data

    def set(self, key: tuple[str, str], data: object) -> None:
        """Store data with current timestamp, replacing the fixture's stale hashes."""
        for stale in [k for k in self._entries if k[0] == key[0] and k != key]:
            del self._entries[stale]
        self._entries[key] = (time.time(), data)

    def invalidate(self, fixture_id: "str | None" = None) -> None:
        """Clear one fixture's entries, or everything."""
        if fixture_id is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k[0] == fixture_id]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

"""End-to-end tests for the fixture view and its cached variant."""

import pytest

from rodada.etl.archive_schema import STRATEGY_FOOTBALL_DATA, STRATEGY_POSITIONAL
from rodada.fixture_view import build_fixture_view, cached_fixture_view
from rodada.ml.weighted_stats import ConfidencePolicy
from rodada.utils.cache import FixtureViewCache

POLICY = ConfidencePolicy()


def _similar():
    return [
        {"rank": "1", "fd_found": "true", "fd_FTHG": "2", "fd_FTAG": "1",
         "home_prev": "Arsenal", "away_prev": "Chelsea", "score_fulltime_prev": "2-1"},
        {"rank": "2", "fd_found": "true", "fd_FTHG": "1", "fd_FTAG": "1",
         "home_prev": "Liverpool", "away_prev": "Everton", "score_fulltime_prev": "1-1"},
    ]


def _panels():
    return [
        {"competition": "PL", "fixture_id": "537", "utcDate": "2026-02-01T16:30:00Z",
         "matchday": "24", "side": "HOME", "team_name": "Arsenal FC",
         "similar_goals_mean": "1.7", "similar_goals_cv_pct": "28"},
        {"competition": "PL", "fixture_id": "537", "utcDate": "2026-02-01T16:30:00Z",
         "matchday": "24", "side": "AWAY", "team_name": "Chelsea FC",
         "similar_goals_mean": "1.0", "similar_goals_cv_pct": "70"},
    ]


def _archive():
    return [
        {"Date": "10/01/2026", "HomeTeam": "Arsenal", "AwayTeam": "Chelsea", "FTHG": "2", "FTAG": "1"},
        {"Date": "17/01/2026", "HomeTeam": "Everton", "AwayTeam": "Chelsea", "FTHG": "0", "FTAG": "0"},
        {"Date": "24/01/2026", "HomeTeam": "Arsenal", "AwayTeam": "Everton", "FTHG": "3", "FTAG": "1"},
        {"Date": "07/02/2026", "HomeTeam": "Arsenal", "AwayTeam": "Leeds", "FTHG": "1", "FTAG": "0"},
    ]


class TestBuildFixtureView:

    def test_full_view(self):
        view = build_fixture_view(_similar(), _panels(), _archive(), policy=POLICY)
        assert view.meta.fixture_id == "537"
        assert view.statistics.home_stats.metrics["goals"].weighted_mean == pytest.approx(5 / 3)
        assert view.home_panel.team_name == "Arsenal FC"
        assert view.away_panel.similar["goals"].confidence.tier == "red"
        assert view.archive_schema.strategy == STRATEGY_FOOTBALL_DATA
        assert view.warnings == []

    def test_anchors_and_recent_matches(self):
        view = build_fixture_view(_similar(), _panels(), _archive(), policy=POLICY)
        assert view.home_anchor.best_canonical_candidate == "arsenal"
        assert view.away_anchor.best_canonical_candidate == "chelsea"
        assert [p.away_name for p in view.home_recent] == ["Everton", "Chelsea"]
        assert [p.home_name for p in view.away_recent] == ["Everton", "Arsenal"]

    def test_explicit_date_and_seeds(self):
        view = build_fixture_view(
            _similar(), (), _archive(),
            fixture_date="2026-01-20", home_seed="Arsenal", away_seed="Chelsea",
            policy=POLICY,
        )
        assert [p.date for p in view.home_recent] == ["10/01/2026"]
        assert view.home_panel is None

    def test_upstream_anchor(self):
        view = build_fixture_view(
            _similar(), _panels(), _archive(),
            home_anchor="everton", home_anchor_score=0.88, policy=POLICY,
        )
        assert view.home_anchor.source == "upstream"
        assert view.home_anchor.similarity_score == 0.88
        assert [p.away_name for p in view.home_recent] == ["Chelsea"]

    def test_limit(self):
        view = build_fixture_view(_similar(), _panels(), _archive(), limit=1, policy=POLICY)
        assert len(view.home_recent) == 1

    def test_positional_archive_warns(self):
        archive = [{"dia": r["Date"], "casa": r["HomeTeam"], "fora": r["AwayTeam"]} for r in _archive()]
        view = build_fixture_view(_similar(), _panels(), archive, policy=POLICY)
        assert view.archive_schema.strategy == STRATEGY_POSITIONAL
        assert len(view.home_recent) == 2
        assert any("guessed by position" in w for w in view.warnings)

    def test_no_sources(self):
        view = build_fixture_view([], policy=POLICY)
        assert not view.statistics.has_enriched_data
        assert view.home_recent == []
        assert view.home_anchor.best_canonical_candidate is None
        assert view.warnings == ["no enriched similar games for this fixture"]

    def test_no_seeds_with_archive_yields_no_recent_matches(self):
        view = build_fixture_view(_similar(), (), _archive(), fixture_date="2026-02-01", policy=POLICY)
        assert view.home_anchor.best_canonical_candidate is None
        assert view.away_anchor.best_canonical_candidate is None
        assert view.home_recent == []
        assert view.away_recent == []

    def test_unrelated_seed_is_not_pinned_to_first_team(self):
        view = build_fixture_view(
            _similar(), (), _archive(),
            fixture_date="2026-02-01", home_seed="Zz", away_seed="Chelsea", policy=POLICY,
        )
        assert view.home_recent == []
        assert [p.home_name for p in view.away_recent] == ["Everton", "Arsenal"]

    def test_seeds_from_base_name(self):
        view = build_fixture_view(
            _similar(), (), _archive(),
            fixture_date="2026-02-01",
            base_name="PL__ID537__Arsenal_vs_Chelsea__top12_enriched",
            policy=POLICY,
        )
        assert view.meta.home_name == "Arsenal"
        assert view.home_anchor.best_canonical_candidate == "arsenal"
        assert [p.away_name for p in view.home_recent] == ["Everton", "Chelsea"]
        assert view.away_anchor.best_canonical_candidate == "chelsea"

    def test_panel_names_beat_base_name(self):
        view = build_fixture_view(
            _similar(), _panels(), _archive(),
            base_name="PL__ID537__Everton_vs_Leeds__top12", policy=POLICY,
        )
        assert view.home_anchor.canonical_seed == "arsenal"

    def test_to_dict(self):
        d = build_fixture_view(_similar(), _panels(), _archive(), policy=POLICY).to_dict()
        assert set(d) == {
            "meta", "statistics", "home_panel", "away_panel", "archive_schema",
            "home_anchor", "away_anchor", "home_recent", "away_recent", "warnings",
        }
        assert d["home_recent"][0]["weight"] == 0.0


class TestCachedFixtureView:

    def test_hit_returns_same_view(self):
        cache = FixtureViewCache(ttl=60)
        first = cached_fixture_view(cache, "537", _similar(), _panels(), _archive(), policy=POLICY)
        second = cached_fixture_view(cache, "537", _similar(), _panels(), _archive(), policy=POLICY)
        assert first is second
        assert len(cache) == 1

    def test_source_change_misses(self):
        cache = FixtureViewCache(ttl=60)
        first = cached_fixture_view(cache, "537", _similar(), _panels(), _archive(), policy=POLICY)
        archive = _archive()[:2]
        second = cached_fixture_view(cache, "537", _similar(), _panels(), archive, policy=POLICY)
        assert first is not second
        assert len(second.home_recent) == 1
        assert len(cache) == 1

    def test_invalidate(self):
        cache = FixtureViewCache(ttl=60)
        first = cached_fixture_view(cache, "537", _similar(), policy=POLICY)
        cache.invalidate("537")
        assert cached_fixture_view(cache, "537", _similar(), policy=POLICY) is not first

"""Tests for league archive column resolution."""

import logging

from rodada.etl.archive_schema import (
    STRATEGY_FOOTBALL_DATA,
    STRATEGY_HEURISTIC,
    STRATEGY_POSITIONAL,
    STRATEGY_SHORT,
    STRATEGY_UNRESOLVED,
    resolve_archive_schema,
)


def _rows(*columns):
    return [{c: "" for c in columns}]


class TestKnownHeaders:

    def test_football_data(self):
        schema = resolve_archive_schema(_rows("Div", "Date", "HomeTeam", "AwayTeam", "FTHG"))
        assert (schema.date_col, schema.home_col, schema.away_col) == ("Date", "HomeTeam", "AwayTeam")
        assert schema.strategy == STRATEGY_FOOTBALL_DATA
        assert not schema.low_confidence
        assert schema.is_resolved

    def test_short_headers(self):
        schema = resolve_archive_schema(_rows("Country", "Date", "Home", "Away", "HG"))
        assert (schema.date_col, schema.home_col, schema.away_col) == ("Date", "Home", "Away")
        assert schema.strategy == STRATEGY_SHORT

    def test_football_data_wins_over_short(self):
        schema = resolve_archive_schema(_rows("Date", "Home", "Away", "HomeTeam", "AwayTeam"))
        assert schema.strategy == STRATEGY_FOOTBALL_DATA


class TestHeuristic:

    def test_portuguese_vocabulary(self):
        schema = resolve_archive_schema(_rows("Rodada", "Data", "Mandante", "Visitante"))
        assert (schema.date_col, schema.home_col, schema.away_col) == ("Data", "Mandante", "Visitante")
        assert schema.strategy == STRATEGY_HEURISTIC
        assert not schema.low_confidence

    def test_case_and_separators_ignored(self):
        schema = resolve_archive_schema(_rows("match_date", "home_team", "Away-Team"))
        assert (schema.date_col, schema.home_col, schema.away_col) == (
            "match_date", "home_team", "Away-Team",
        )
        assert schema.strategy == STRATEGY_HEURISTIC

    def test_vocabulary_order_is_priority(self):
        schema = resolve_archive_schema(_rows("date", "home", "home_team", "away"))
        assert schema.home_col == "home_team"


class TestFallbacks:

    def test_positional(self, caplog):
        with caplog.at_level(logging.WARNING, logger="rodada.etl.archive_schema"):
            schema = resolve_archive_schema(_rows("dia", "casa", "fora", "placar"))
        assert (schema.date_col, schema.home_col, schema.away_col) == ("dia", "casa", "fora")
        assert schema.strategy == STRATEGY_POSITIONAL
        assert schema.low_confidence
        assert schema.is_resolved
        assert "first three columns" in caplog.text

    def test_empty_rows(self):
        schema = resolve_archive_schema([])
        assert schema.strategy == STRATEGY_UNRESOLVED
        assert not schema.is_resolved

    def test_too_few_columns(self):
        schema = resolve_archive_schema(_rows("a", "b"))
        assert schema.strategy == STRATEGY_UNRESOLVED
        assert schema.date_col is None

    def test_header_is_union_of_rows(self):
        rows = [{"Date": "01/02/2026"}, {"HomeTeam": "Arsenal", "AwayTeam": "Chelsea"}]
        assert resolve_archive_schema(rows).strategy == STRATEGY_FOOTBALL_DATA

    def test_to_dict(self):
        d = resolve_archive_schema(_rows("x", "y", "z")).to_dict()
        assert d == {
            "date_col": "x",
            "home_col": "y",
            "away_col": "z",
            "strategy": "positional_fallback",
            "low_confidence": True,
        }

"""Unit tests for fuzzy team matching: bigram Dice, substring tier, best match."""

import pytest

from rodada.etl.team_matching import (
    BestMatch,
    best_match,
    bigrams,
    dice_coefficient,
    name_similarity,
)


class TestBigrams:

    def test_multiset(self):
        assert bigrams("abc") == {"ab": 1, "bc": 1}
        assert bigrams("aaa") == {"aa": 2}
        assert bigrams("a") == {}
        assert bigrams("") == {}


class TestNameSimilarity:

    def test_exact_match(self):
        assert name_similarity("real madrid", "real madrid") == 1.0

    def test_substring_tier(self):
        score = name_similarity("madrid", "real madrid")
        assert score == pytest.approx(0.9 + 0.1 * 6 / 11)
        assert name_similarity("real madrid", "madrid") == score

    def test_substring_never_below_base(self):
        assert name_similarity("a", "a very long team name") >= 0.9

    def test_dice_tier(self):
        # ni ig gh ht / na ac ch ht -> one shared bigram
        assert name_similarity("night", "nacht") == pytest.approx(0.25)

    def test_dice_counts_multiplicity(self):
        assert dice_coefficient("aaaa", "aaab") == pytest.approx(4 / 6)

    def test_unrelated(self):
        assert name_similarity("arsenal", "chelsea") < 0.5

    def test_empty_never_matches(self):
        assert name_similarity("", "real madrid") == 0.0
        assert name_similarity("real madrid", "") == 0.0
        assert name_similarity("", "") == 0.0

    def test_single_char_names(self):
        assert dice_coefficient("a", "b") == 0.0

    def test_symmetric(self):
        assert name_similarity("flamengo", "fluminense") == name_similarity("fluminense", "flamengo")


class TestBestMatch:

    def test_exact_after_canonicalization(self):
        result = best_match("Real Madrid CF", ["Barcelona", "Real Madrid"])
        assert result == BestMatch(canonical="real madrid", best_candidate="Real Madrid", score=1.0)

    def test_returns_candidate_as_given(self):
        result = best_match("sao paulo", ["Palmeiras", "São Paulo FC"])
        assert result.best_candidate == "São Paulo FC"
        assert result.score == 1.0

    def test_prefers_closer_substring(self):
        result = best_match("Sporting", ["Sporting Gijon", "Sporting CP"])
        assert result.best_candidate == "Sporting CP"
        assert result.score == pytest.approx(0.9 + 0.1 * 8 / 11)

    def test_tie_keeps_first_seen(self):
        result = best_match("Santos", ["Santos", "Santos FC"])
        assert result.best_candidate == "Santos"

    def test_empty_pool(self):
        result = best_match("Santos", [])
        assert result.best_candidate is None
        assert result.score == 0.0
        assert result.canonical == "santos"

    def test_accepts_generator(self):
        result = best_match("Arsenal", (name for name in ["Chelsea", "Arsenal"]))
        assert result.best_candidate == "Arsenal"

    def test_to_dict(self):
        assert best_match("Arsenal", ["Arsenal"]).to_dict() == {
            "canonical": "arsenal",
            "best_candidate": "Arsenal",
            "score": 1.0,
        }

    def test_partial_overlap_strictly_between(self):
        score = name_similarity("abc", "abd")
        assert 0.0 < score < 1.0
        assert score == pytest.approx(0.5)

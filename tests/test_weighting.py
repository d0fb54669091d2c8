"""Tests for rank and delta evidence weights."""

import pytest

from rodada.ml.weighting import weight_from_delta, weight_from_rank


class TestWeightFromRank:

    def test_inverse_rank(self):
        assert weight_from_rank(1) == 1.0
        assert weight_from_rank(2) == 0.5
        assert weight_from_rank(3) == pytest.approx(1 / 3)

    def test_non_positive_is_zero(self):
        assert weight_from_rank(0) == 0.0
        assert weight_from_rank(-2) == 0.0

    def test_raw_cells(self):
        assert weight_from_rank("4") == 0.25
        assert weight_from_rank("2.7") == 0.5
        assert weight_from_rank("") == 0.0
        assert weight_from_rank("abc") == 0.0
        assert weight_from_rank(None) == 0.0

    def test_monotonic(self):
        weights = [weight_from_rank(r) for r in range(1, 13)]
        assert weights == sorted(weights, reverse=True)


class TestWeightFromDelta:

    def test_inverse_delta(self):
        assert weight_from_delta("1", eps=0.0) == 1.0
        assert weight_from_delta("0,5", eps=0.0) == 2.0

    def test_zero_delta_uses_eps(self):
        assert weight_from_delta(0, eps=1e-6) == pytest.approx(1e6)

    def test_missing_delta(self):
        assert weight_from_delta("", eps=1e-6) == 0.0
        assert weight_from_delta(None) == 0.0

    def test_degenerate_denominator(self):
        assert weight_from_delta(0, eps=0.0) == 0.0

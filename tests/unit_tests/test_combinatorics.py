"""Tests for k-subset enumeration of modifiable positions."""

from math import comb

import pytest

from alphauis.combinatorics import nchoosek_combinations


class TestNChooseK:
    """Test nchoosek_combinations()."""

    @pytest.mark.parametrize("n", range(0, 7))
    def test_counts_and_shape(self, n):
        """Every k in 0..n yields C(n,k) distinct ascending k-subsets."""
        indices = list(range(n))
        for k in range(0, n + 1):
            combs = nchoosek_combinations(indices, k)
            assert len(combs) == comb(n, k)
            assert len(set(combs)) == len(combs)
            for subset in combs:
                assert len(subset) == k
                assert list(subset) == sorted(subset)
                assert set(subset) <= set(indices)

    def test_k_zero_yields_empty_subset(self):
        """k=0 returns exactly one empty subset."""
        assert nchoosek_combinations([3, 5, 8], 0) == [()]
        assert nchoosek_combinations([], 0) == [()]

    def test_k_larger_than_n_is_empty(self):
        """k>n returns no subsets (not an error)."""
        assert nchoosek_combinations([1, 2], 3) == []
        assert nchoosek_combinations([], 1) == []

    def test_arbitrary_positions(self):
        """Works on arbitrary (unsorted) position sets."""
        assert nchoosek_combinations([7, 1, 4], 2) == [(1, 4), (1, 7), (4, 7)]

    def test_terminal_position(self):
        """The N-terminal position -1 is an ordinary index."""
        assert nchoosek_combinations([-1], 1) == [(-1,)]

    def test_negative_k_raises(self):
        """Negative subset sizes are rejected."""
        with pytest.raises(ValueError):
            nchoosek_combinations([1, 2], -1)

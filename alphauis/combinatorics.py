"""Enumeration of k-subsets of modifiable positions."""

from itertools import combinations
from typing import Iterable, List, Tuple


def nchoosek_combinations(indices: Iterable[int], k: int) -> List[Tuple[int, ...]]:
    """Enumerate all k-element subsets of an index set.

    Parameters
    ----------
    indices : iterable of int
        Candidate positions (duplicates are collapsed)
    k : int
        Subset size

    Returns
    -------
    List[Tuple[int, ...]]
        All C(n, k) subsets, each in ascending order. ``k == 0`` yields a
        single empty subset, ``k > n`` yields no subsets.

    Examples
    --------
    >>> nchoosek_combinations([4, 1, 7], 2)
    [(1, 4), (1, 7), (4, 7)]
    >>> nchoosek_combinations([1, 2], 0)
    [()]
    >>> nchoosek_combinations([1, 2], 3)
    []
    """
    if k < 0:
        raise ValueError(f"Subset size must be non-negative, got {k}")

    pool = sorted(set(indices))
    return list(combinations(pool, k))

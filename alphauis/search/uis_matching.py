"""Unique ion signature (UIS) matching.

A fragment ion is a unique ion signature for a peptidoform if no other
candidate peptidoform (target or decoy) in the same precursor isolation
window produces an ion within the m/z tolerance.

Core algorithms:
1. Linear scan over (m/z, peptidoform) pairs (reference implementation)
2. Binary search on m/z-sorted arrays (O(log n + k)) for whole windows

Tolerances are absolute (Th) and symmetric, with inclusive bounds.
"""

from typing import Iterable, List, Sequence, Tuple

import numpy as np
import numba

IonEntry = Tuple[float, str]


def get_matching_peptidoforms(
    fragment_ion: float,
    ions: Iterable[IonEntry],
    mz_threshold: float,
) -> List[str]:
    """Peptidoforms with an ion within ±mz_threshold of ``fragment_ion``.

    Parameters
    ----------
    fragment_ion : float
        Queried product m/z
    ions : iterable of (float, str)
        (m/z, peptidoform label) pairs that could interfere
    mz_threshold : float
        Absolute tolerance in Th (inclusive)

    Returns
    -------
    List[str]
        Matching labels, first-seen order, without duplicates

    Examples
    --------
    >>> ions = [(500.0, "A"), (500.0005, "B"), (600.0, "C")]
    >>> get_matching_peptidoforms(500.0002, ions, 0.001)
    ['A', 'B']
    """
    lower = fragment_ion - mz_threshold
    upper = fragment_ion + mz_threshold

    matches = []
    for mz, label in ions:
        if lower <= mz <= upper and label not in matches:
            matches.append(label)
    return matches


def is_unique_ion_signature(peptidoforms: Sequence[str], peptidoform: str) -> bool:
    """True iff the only matching peptidoform is the one under test."""
    return len(peptidoforms) == 1 and peptidoforms[0] == peptidoform


@numba.jit(nopython=True, cache=True)
def search_mz_range_numba(
    mz_values: np.ndarray,
    target_mz: float,
    tol_mz: float,
) -> Tuple[int, int]:
    """Binary search for all m/z within an absolute tolerance (Numba-compiled).

    Parameters
    ----------
    mz_values : np.ndarray (float64)
        Sorted m/z values
        CRITICAL: Must be sorted ascending! No validation for speed.
    target_mz : float
        Queried m/z
    tol_mz : float
        Absolute tolerance in Th (inclusive)

    Returns
    -------
    start_idx : int
        First index in range (inclusive)
    end_idx : int
        Last index in range (exclusive, Python convention)

    Examples
    --------
    >>> mz_values = np.array([100.0, 200.0, 200.1, 300.0])
    >>> search_mz_range_numba(mz_values, 200.0, 0.1)
    (1, 3)
    """
    mz_min = target_mz - tol_mz
    mz_max = target_mz + tol_mz

    n = len(mz_values)
    if n == 0:
        return (0, 0)

    # first m/z >= mz_min
    left, right = 0, n
    while left < right:
        mid = (left + right) // 2
        if mz_values[mid] < mz_min:
            left = mid + 1
        else:
            right = mid
    start_idx = left

    # first m/z > mz_max
    left, right = start_idx, n
    while left < right:
        mid = (left + right) // 2
        if mz_values[mid] <= mz_max:
            left = mid + 1
        else:
            right = mid
    end_idx = left

    return (start_idx, end_idx)


class IonIndex:
    """m/z-sorted ion catalogue of one precursor isolation window.

    Read-only after construction; built once per window from the target and
    decoy in-silico ion maps and shared by target and decoy assay generation.

    Examples
    --------
    >>> index = IonIndex([(500.0, "A"), (600.0, "C"), (500.0005, "B")])
    >>> index.matching_peptidoforms(500.0002, 0.001)
    ['A', 'B']
    """

    def __init__(self, ions: Iterable[IonEntry]):
        ions = list(ions)
        mz = np.array([entry[0] for entry in ions], dtype=np.float64)
        order = np.argsort(mz, kind="stable")
        self.mz = mz[order]
        self.labels = [ions[i][1] for i in order]

    def __len__(self) -> int:
        return len(self.labels)

    def matching_peptidoforms(self, fragment_ion: float, mz_threshold: float) -> List[str]:
        """Same result set as ``get_matching_peptidoforms`` over the window."""
        start, end = search_mz_range_numba(self.mz, fragment_ion, mz_threshold)
        matches = []
        for label in self.labels[start:end]:
            if label not in matches:
                matches.append(label)
        return matches

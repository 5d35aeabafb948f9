"""Precursor isolation (swath) window lookup.

Windows are ordered ``(lower, upper)`` m/z intervals with inclusive bounds;
the index of a window in the sequence is its ordinal. Callers must supply
sorted, non-overlapping windows (see ``validate_swathes``).
"""

from typing import Sequence

from ..config import validate_swathes
from ..experiment import SwathWindow

NO_SWATH = -1


def get_swath(swathes: Sequence[SwathWindow], precursor_mz: float) -> int:
    """Index of the first window containing ``precursor_mz``.

    Examples
    --------
    >>> swathes = [(400.0, 500.0), (500.0, 600.0)]
    >>> get_swath(swathes, 450.0), get_swath(swathes, 550.0), get_swath(swathes, 650.0)
    (0, 1, -1)
    """
    for i, (lower, upper) in enumerate(swathes):
        if lower <= precursor_mz <= upper:
            return i
    return NO_SWATH


def is_in_swath(
    swathes: Sequence[SwathWindow],
    precursor_mz: float,
    product_mz: float,
) -> bool:
    """True iff the product falls into the precursor's own isolation window.

    Such a product is co-isolated with the precursor and cannot be told apart
    from unfragmented precursor signal. Returns False if no window contains
    the precursor.
    """
    swath_idx = get_swath(swathes, precursor_mz)
    if swath_idx == NO_SWATH:
        return False
    lower, upper = swathes[swath_idx]
    return lower <= product_mz <= upper


__all__ = ['NO_SWATH', 'get_swath', 'is_in_swath', 'validate_swathes']

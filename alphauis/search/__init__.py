"""Interference search for unique ion signature selection.

Core algorithms:
1. Absolute-tolerance matching of a fragment ion against candidate ions
2. Binary search on m/z-sorted window catalogues (O(log n))
"""

from .uis_matching import (
    get_matching_peptidoforms,
    is_unique_ion_signature,
    search_mz_range_numba,
    IonIndex,
)

__all__ = [
    'get_matching_peptidoforms',
    'is_unique_ion_signature',
    'search_mz_range_numba',
    'IonIndex',
]

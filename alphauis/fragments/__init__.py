"""Fragment ion series generation for transition annotation.

Numba-compiled prefix/suffix mass kernels with a/b/c/x/y/z ion types,
product charges and neutral losses.
"""

from .generator import (
    FragmentIon,
    encode_peptide_to_ord,
    round_mz,
    format_annotation,
    cumulative_residue_masses,
    generate_fragment_masses,
    calculate_precursor_mz,
    peptide_precursor_mz,
    get_ion_series,
    annotate_ion,
)

__all__ = [
    'FragmentIon',
    'encode_peptide_to_ord',
    'round_mz',
    'format_annotation',
    'cumulative_residue_masses',
    'generate_fragment_masses',
    'calculate_precursor_mz',
    'peptide_precursor_mz',
    'get_ion_series',
    'annotate_ion',
]

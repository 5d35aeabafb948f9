"""Theoretical fragment ion series for modified peptides.

Generates a/b/c/x/y/z ion series with product charges and neutral losses,
the fragmentation model shared by transition re-annotation and in-silico
ion map construction.

Key optimizations:
1. Numba JIT compilation for the mass kernels
2. ord() encoding for string-to-array conversion (no string operations in Numba)
3. Pre-allocated arrays (no dynamic memory allocation)

Ion masses (neutral, before adding z protons)
----------------------------------------------
a = prefix - CO
b = prefix
c = prefix + NH3
x = suffix + H2O + CO - 2H
y = suffix + H2O
z = suffix + H2O - NH3
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import numba

from ..constants import (
    PROTON_MASS,
    AA_MASSES,
    ION_TYPE_CODES,
    ION_NEUTRAL_OFFSETS,
    PREFIX_ION_TYPES,
    NEUTRAL_LOSS_MASSES,
    UNSPECIFIC_LOSSES,
    RESIDUE_SPECIFIC_LOSSES,
    DEFAULT_ROUND_DEC_POW,
)
from ..modifications import (
    Modification,
    ModificationDatabase,
    prepare_modifications_for_numba,
    calculate_modified_neutral_mass,
)

# Offsets indexed by ion type code (see ION_TYPE_CODES)
ION_OFFSETS = np.zeros(len(ION_TYPE_CODES), dtype=np.float64)
for _ion_type, _code in ION_TYPE_CODES.items():
    ION_OFFSETS[_code] = ION_NEUTRAL_OFFSETS[_ion_type]


@dataclass(frozen=True)
class FragmentIon:
    """A theoretical product ion.

    Attributes
    ----------
    annotation : str
        Ion label, e.g. ``y3^1`` or ``b4-H2O1^2``
    ion_type : str
        One of a, b, c, x, y, z
    ordinal : int
        Number of residues in the fragment
    charge : int
        Product charge
    loss : str
        Neutral loss formula ("" if none)
    mz : float
        Rounded product m/z
    """

    annotation: str
    ion_type: str
    ordinal: int
    charge: int
    loss: str
    mz: float


# =============================================================================
# Helper Functions
# =============================================================================

def encode_peptide_to_ord(peptide: str) -> np.ndarray:
    """Encode peptide string to ord() array for Numba processing.

    Examples
    --------
    >>> encode_peptide_to_ord("PEPTIDE")
    array([80, 69, 80, 84, 73, 68, 69], dtype=uint8)
    """
    return np.array([ord(c) for c in peptide], dtype=np.uint8)


def round_mz(mz: float, round_dec_pow: int = DEFAULT_ROUND_DEC_POW) -> float:
    """Round m/z to 10**round_dec_pow (e.g. -4 → 0.0001 Th)."""
    return round(float(mz), -round_dec_pow)


def format_annotation(ion_type: str, ordinal: int, charge: int, loss: str = "") -> str:
    """Build ion labels such as ``y3^1`` or ``b4-H2O1^2``."""
    loss_part = f"-{loss}" if loss else ""
    return f"{ion_type}{ordinal}{loss_part}^{charge}"


# =============================================================================
# Core Mass Kernels (Numba-Compiled)
# =============================================================================

@numba.jit(nopython=True, cache=True)
def cumulative_residue_masses(
    peptide_ord: np.ndarray,
    modifications: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Prefix and suffix residue mass sums including modifications.

    Parameters
    ----------
    peptide_ord : np.ndarray (uint8)
        Peptide sequence as ord() values
    modifications : np.ndarray (float64)
        Shape (n_mods, 2), rows ``[position, mass_shift]``. Position -1
        (N-term) is folded onto the first residue, position n (C-term) onto
        the last one.

    Returns
    -------
    cumsum_forward : np.ndarray (float64)
        cumsum_forward[i] = mass of residues 0..i
    cumsum_backward : np.ndarray (float64)
        cumsum_backward[i] = mass of residues i..n-1
    """
    peptide_length = len(peptide_ord)

    residue_mass = np.empty(peptide_length, dtype=np.float64)
    for i in range(peptide_length):
        residue_mass[i] = AA_MASSES[peptide_ord[i]]

    for j in range(len(modifications)):
        position = int(modifications[j, 0])
        if position < 0:
            position = 0
        if position >= peptide_length:
            position = peptide_length - 1
        residue_mass[position] += modifications[j, 1]

    cumsum_forward = np.empty(peptide_length, dtype=np.float64)
    cumsum_backward = np.empty(peptide_length, dtype=np.float64)

    cumsum_forward[0] = residue_mass[0]
    for i in range(1, peptide_length):
        cumsum_forward[i] = cumsum_forward[i-1] + residue_mass[i]

    cumsum_backward[peptide_length-1] = residue_mass[peptide_length-1]
    for i in range(peptide_length-2, -1, -1):
        cumsum_backward[i] = cumsum_backward[i+1] + residue_mass[i]

    return cumsum_forward, cumsum_backward


@numba.jit(nopython=True, cache=True)
def generate_fragment_masses(
    peptide_ord: np.ndarray,
    modifications: np.ndarray,
    ion_type_codes: np.ndarray,
    ion_offsets: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Neutral fragment masses for the requested ion types (Numba-compiled).

    Parameters
    ----------
    peptide_ord : np.ndarray (uint8)
        Peptide sequence as ord() values
    modifications : np.ndarray (float64)
        Modification array from prepare_modifications_for_numba()
    ion_type_codes : np.ndarray (int64)
        Ion type codes (0-2 prefix a/b/c, 3-5 suffix x/y/z)
    ion_offsets : np.ndarray (float64)
        Neutral offset per ion type code

    Returns
    -------
    fragment_mass : np.ndarray (float64)
        Neutral masses
    fragment_type : np.ndarray (uint8)
        Ion type codes
    fragment_ordinal : np.ndarray (uint8)
        Fragment ordinal (1 to peptide_length - 1)
    """
    peptide_length = len(peptide_ord)
    n_positions = peptide_length - 1

    max_fragments = n_positions * len(ion_type_codes)
    fragment_mass = np.empty(max_fragments, dtype=np.float64)
    fragment_type = np.empty(max_fragments, dtype=np.uint8)
    fragment_ordinal = np.empty(max_fragments, dtype=np.uint8)

    if n_positions <= 0:
        return fragment_mass[:0], fragment_type[:0], fragment_ordinal[:0]

    cumsum_forward, cumsum_backward = cumulative_residue_masses(peptide_ord, modifications)

    idx = 0
    for code in ion_type_codes:
        for ordinal in range(1, n_positions + 1):
            if code < 3:  # prefix ion
                mass = cumsum_forward[ordinal - 1]
            else:  # suffix ion
                mass = cumsum_backward[peptide_length - ordinal]

            fragment_mass[idx] = mass + ion_offsets[code]
            fragment_type[idx] = code
            fragment_ordinal[idx] = ordinal
            idx += 1

    return fragment_mass[:idx], fragment_type[:idx], fragment_ordinal[:idx]


@numba.jit(nopython=True, cache=True)
def calculate_precursor_mz(neutral_mass: float, charge: int) -> float:
    """Calculate precursor m/z from neutral mass.

    Examples
    --------
    >>> calculate_precursor_mz(1000.5, charge=2)
    501.257276466622
    """
    return (neutral_mass + charge * PROTON_MASS) / charge


def peptide_precursor_mz(
    sequence: str,
    modifications: Sequence[Modification],
    charge: int,
    db: ModificationDatabase,
) -> float:
    """Precursor m/z of a (modified) peptide at the given charge."""
    neutral_mass = calculate_modified_neutral_mass(
        encode_peptide_to_ord(sequence),
        prepare_modifications_for_numba(modifications, db),
    )
    return calculate_precursor_mz(neutral_mass, charge)


# =============================================================================
# Ion Series with Charges and Neutral Losses
# =============================================================================

def _fragment_losses(
    sequence: str,
    modifications: Sequence[Modification],
    ion_type: str,
    ordinal: int,
    enable_specific_losses: bool,
    enable_unspecific_losses: bool,
    db: ModificationDatabase,
) -> List[str]:
    losses = []
    if enable_specific_losses:
        n = len(sequence)
        if ion_type in PREFIX_ION_TYPES:
            first, last = -1, ordinal - 1
        else:
            first, last = n - ordinal, n

        for aa in sequence[max(first, 0):last + 1]:
            for loss in RESIDUE_SPECIFIC_LOSSES.get(aa, ()):
                if loss not in losses:
                    losses.append(loss)
        for name, position in modifications:
            if first <= position <= last:
                for loss in db.neutral_losses(name):
                    if loss not in losses:
                        losses.append(loss)

    if enable_unspecific_losses:
        for loss in UNSPECIFIC_LOSSES:
            if loss not in losses:
                losses.append(loss)

    return losses


def get_ion_series(
    sequence: str,
    modifications: Sequence[Modification],
    precursor_charge: int,
    fragment_types: Sequence[str],
    fragment_charges: Sequence[int],
    enable_specific_losses: bool,
    enable_unspecific_losses: bool,
    db: ModificationDatabase,
    round_dec_pow: int = DEFAULT_ROUND_DEC_POW,
) -> List[FragmentIon]:
    """Generate the theoretical ion series of a peptidoform.

    Parameters
    ----------
    sequence : str
        Stripped peptide sequence
    modifications : sequence of (str, int)
        Placed modifications
    precursor_charge : int
        Precursor charge; product charges above it are skipped
    fragment_types : sequence of str
        Ion types among a, b, c, x, y, z
    fragment_charges : sequence of int
        Product charges
    enable_specific_losses : bool
        Add residue- and modification-specific neutral losses
    enable_unspecific_losses : bool
        Add H2O1, H3N1, C1H2N2 and C1H2N1O1 losses to every ion
    db : ModificationDatabase
        Source of modification masses and losses
    round_dec_pow : int
        Round m/z to 10**round_dec_pow

    Returns
    -------
    List[FragmentIon]
        Ions ordered by ion type (as requested), ordinal, charge, loss

    Examples
    --------
    >>> db = ModificationDatabase()
    >>> ions = get_ion_series("PEPTIDEK", [], 2, ("y",), (1,), False, False, db)
    >>> ions[0].annotation, ions[0].mz
    ('y1^1', 147.1128)
    """
    if len(sequence) < 2:
        return []

    codes = np.array([ION_TYPE_CODES[t] for t in fragment_types], dtype=np.int64)
    masses, types, ordinals = generate_fragment_masses(
        encode_peptide_to_ord(sequence),
        prepare_modifications_for_numba(modifications, db),
        codes,
        ION_OFFSETS,
    )

    code_to_type = {code: ion_type for ion_type, code in ION_TYPE_CODES.items()}
    charges = [c for c in fragment_charges if c <= precursor_charge]

    ions = []
    for mass, code, ordinal in zip(masses, types, ordinals):
        ion_type = code_to_type[int(code)]
        ordinal = int(ordinal)
        losses = [""] + _fragment_losses(
            sequence, modifications, ion_type, ordinal,
            enable_specific_losses, enable_unspecific_losses, db,
        )
        for charge in charges:
            for loss in losses:
                neutral = mass - NEUTRAL_LOSS_MASSES[loss] if loss else mass
                if neutral <= 0:
                    continue
                mz = round_mz((neutral + charge * PROTON_MASS) / charge, round_dec_pow)
                ions.append(FragmentIon(
                    annotation=format_annotation(ion_type, ordinal, charge, loss),
                    ion_type=ion_type,
                    ordinal=ordinal,
                    charge=charge,
                    loss=loss,
                    mz=mz,
                ))

    return ions


def annotate_ion(
    ion_series: Sequence[FragmentIon],
    product_mz: float,
    mz_threshold: float,
) -> Optional[FragmentIon]:
    """Find the theoretical ion closest to ``product_mz`` within tolerance.

    Returns
    -------
    FragmentIon or None
        Closest ion with ``|mz - product_mz| <= mz_threshold``; the first one
        in series order wins ties. None if nothing matches.
    """
    best = None
    best_error = mz_threshold
    for ion in ion_series:
        error = abs(ion.mz - product_mz)
        if error <= best_error and (best is None or error < abs(best.mz - product_mz)):
            best = ion
            best_error = error
    return best

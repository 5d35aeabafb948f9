"""Modification database and peptidoform handling.

This module provides the modification validity oracle used during
localization enumeration, plus parsing and formatting of peptidoform labels
and modified mass calculation.

Key Features
------------
- Explicit modification table (no process-wide registry): residue or
  terminal specificity, mass shift and characteristic neutral losses
- ``modifiable_sites()``: ordered positions able to carry a modification
- Peptidoform labels in bracket notation, e.g. ``PEPS(Phospho)TIDEK``
- Modified neutral mass (Python and Numba)

Position convention
-------------------
Modifications are ``(name, position)`` tuples with 0-based residue
positions. N-terminal modifications use position ``-1`` and C-terminal
modifications use position ``len(sequence)``, so a terminal modification
never competes with a residue modification for the same slot.

Examples
--------
>>> db = ModificationDatabase()
>>> db.modifiable_sites("SASK", "Phospho")
(0, 2)
>>> parse_peptidoform("S(Phospho)ASK")
('SASK', (('Phospho', 0),))
>>> format_peptidoform("SASK", [("Phospho", 2)])
'SAS(Phospho)K'
"""

from __future__ import annotations
from dataclasses import dataclass
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import numba

from .constants import (
    H2O_MASS,
    AA_MASSES,
    AA_MASSES_DICT,
    PHOSPHO_MASS,
    OXIDATION_MASS,
    CARBAMIDOMETHYL_MASS,
    ACETYL_MASS,
    DEAMIDATION_MASS,
    GLYGLY_MASS,
    METHYL_MASS,
    DIMETHYL_MASS,
    TRIMETHYL_MASS,
)
from .exceptions import UnknownModificationError

N_TERM = "N-term"
C_TERM = "C-term"

Modification = Tuple[str, int]


# =============================================================================
# Modification Database (validity oracle)
# =============================================================================

@dataclass(frozen=True)
class ModificationSpec:
    """Chemistry of a single modification.

    Attributes
    ----------
    name : str
        Unimod-style name, e.g. "Phospho"
    mass : float
        Monoisotopic mass shift in Da
    residues : str
        One-letter codes of residues that can carry it (empty for terminal)
    terminus : str, optional
        ``"N-term"`` or ``"C-term"`` for terminal modifications
    losses : tuple of str
        Neutral losses characteristic of the modified residue
    """

    name: str
    mass: float
    residues: str = ""
    terminus: Optional[str] = None
    losses: Tuple[str, ...] = ()


DEFAULT_MODIFICATIONS = (
    ModificationSpec("Phospho", PHOSPHO_MASS, residues="STY", losses=("H3O4P1",)),
    ModificationSpec("Oxidation", OXIDATION_MASS, residues="M", losses=("C1H4O1S1",)),
    ModificationSpec("Carbamidomethyl", CARBAMIDOMETHYL_MASS, residues="C"),
    ModificationSpec("Acetyl", ACETYL_MASS, terminus=N_TERM),
    ModificationSpec("Amidated", -DEAMIDATION_MASS, terminus=C_TERM),
    ModificationSpec("Deamidated", DEAMIDATION_MASS, residues="NQ"),
    ModificationSpec("GlyGly", GLYGLY_MASS, residues="K"),
    ModificationSpec("Methyl", METHYL_MASS, residues="KR"),
    ModificationSpec("Dimethyl", DIMETHYL_MASS, residues="KR"),
    ModificationSpec("Trimethyl", TRIMETHYL_MASS, residues="K"),
)


class ModificationDatabase:
    """Answers which positions of a sequence can carry a modification.

    The database is an explicit object passed to every component that needs
    it. It is authoritative for localization enumeration and does not cache
    results across sequences.

    Examples
    --------
    >>> db = ModificationDatabase()
    >>> db.modifiable_sites("PEPSTYK", "Phospho")
    (3, 4, 5)
    >>> db.modifiable_sites("PEPTIDEK", "Acetyl")
    (-1,)
    """

    def __init__(self, modifications: Optional[Iterable[ModificationSpec]] = None):
        if modifications is None:
            modifications = DEFAULT_MODIFICATIONS
        self._modifications: Dict[str, ModificationSpec] = {}
        for spec in modifications:
            self.add(spec)

    def add(self, spec: ModificationSpec) -> None:
        """Register (or replace) a modification."""
        if spec.terminus not in (None, N_TERM, C_TERM):
            raise ValueError(f"Unknown terminus for {spec.name}: {spec.terminus}")
        self._modifications[spec.name] = spec

    def __contains__(self, name: str) -> bool:
        return name in self._modifications

    def __getitem__(self, name: str) -> ModificationSpec:
        try:
            return self._modifications[name]
        except KeyError:
            raise UnknownModificationError(f"Unknown modification: {name}") from None

    def __len__(self) -> int:
        return len(self._modifications)

    @property
    def names(self) -> List[str]:
        return sorted(self._modifications)

    def mass_shift(self, name: str) -> float:
        return self[name].mass

    def neutral_losses(self, name: str) -> Tuple[str, ...]:
        return self[name].losses

    def modifiable_sites(self, sequence: str, name: str) -> Tuple[int, ...]:
        """Ordered positions of ``sequence`` able to carry ``name``.

        Parameters
        ----------
        sequence : str
            Stripped (unmodified) peptide sequence
        name : str
            Modification name

        Returns
        -------
        Tuple[int, ...]
            ``(-1,)`` for N-terminal modifications, ``(len(sequence),)`` for
            C-terminal modifications, otherwise residue indices in ascending
            order.
        """
        spec = self[name]
        if spec.terminus == N_TERM:
            return (-1,)
        if spec.terminus == C_TERM:
            return (len(sequence),)
        return tuple(i for i, aa in enumerate(sequence) if aa in spec.residues)


# =============================================================================
# Peptidoform Labels
# =============================================================================

_PEPTIDOFORM_TOKEN = re.compile(r"([A-Z])(?:\(([^()]+)\))?")
_N_TERM_MOD = re.compile(r"^\.?\(([^()]+)\)")
_C_TERM_MOD = re.compile(r"\.\(([^()]+)\)$")


def parse_peptidoform(label: str) -> Tuple[str, Tuple[Modification, ...]]:
    """Split a peptidoform label into stripped sequence and modifications.

    Examples
    --------
    >>> parse_peptidoform(".(Acetyl)PEPS(Phospho)K")
    ('PEPSK', (('Acetyl', -1), ('Phospho', 3)))
    """
    body = label
    mods: List[Modification] = []

    n_term = _N_TERM_MOD.match(body)
    if n_term:
        mods.append((n_term.group(1), -1))
        body = body[n_term.end():]

    c_term_name = None
    c_term = _C_TERM_MOD.search(body)
    if c_term:
        c_term_name = c_term.group(1)
        body = body[:c_term.start()]

    residues = []
    pos = 0
    for match in _PEPTIDOFORM_TOKEN.finditer(body):
        if match.start() != pos:
            raise ValueError(f"Malformed peptidoform: {label}")
        residues.append(match.group(1))
        if match.group(2):
            mods.append((match.group(2), len(residues) - 1))
        pos = match.end()
    if pos != len(body) or not residues:
        raise ValueError(f"Malformed peptidoform: {label}")

    sequence = "".join(residues)
    if c_term_name is not None:
        mods.append((c_term_name, len(sequence)))

    return sequence, tuple(mods)


def format_peptidoform(sequence: str, modifications: Sequence[Modification]) -> str:
    """Render a peptidoform label, e.g. ``SAS(Phospho)K``.

    Terminal modifications are written as ``.(Name)`` before or after the
    sequence.
    """
    by_position = {position: name for name, position in modifications}

    parts = []
    if -1 in by_position:
        parts.append(f".({by_position[-1]})")
    for i, aa in enumerate(sequence):
        parts.append(aa)
        if i in by_position:
            parts.append(f"({by_position[i]})")
    if len(sequence) in by_position:
        parts.append(f".({by_position[len(sequence)]})")

    return "".join(parts)


# =============================================================================
# Mass Calculation with Modifications
# =============================================================================

def compute_modified_mass(
    sequence: str,
    modifications: Sequence[Modification],
    db: Optional[ModificationDatabase] = None,
) -> float:
    """Compute peptide neutral mass with modifications.

    Parameters
    ----------
    sequence : str
        Peptide sequence (standard one-letter codes)
    modifications : sequence of (str, int)
        Modification tuples
    db : ModificationDatabase, optional
        Source of mass shifts (default table if omitted)

    Returns
    -------
    float
        Neutral peptide mass in Daltons

    Examples
    --------
    >>> round(compute_modified_mass("PEPTIDE", []), 4)
    799.36
    """
    if db is None:
        db = ModificationDatabase()

    mass = sum(AA_MASSES_DICT[aa] for aa in sequence) + H2O_MASS
    for name, _ in modifications:
        mass += db.mass_shift(name)

    return mass


def prepare_modifications_for_numba(
    modifications: Sequence[Modification],
    db: Optional[ModificationDatabase] = None,
) -> np.ndarray:
    """Convert modification list to numpy array for Numba functions.

    Returns
    -------
    np.ndarray
        Array of shape (n_mods, 2) with dtype float64, each row
        ``[position, mass_shift]``; empty (0, 2) array if no modifications

    Examples
    --------
    >>> prepare_modifications_for_numba([("Phospho", 3)])
    array([[ 3.      , 79.966331]])
    """
    if not modifications:
        return np.zeros((0, 2), dtype=np.float64)
    if db is None:
        db = ModificationDatabase()

    result = np.zeros((len(modifications), 2), dtype=np.float64)
    for i, (name, position) in enumerate(modifications):
        result[i, 0] = position
        result[i, 1] = db.mass_shift(name)

    return result


@numba.jit(nopython=True, cache=True)
def calculate_modified_neutral_mass(
    peptide_ord: np.ndarray,
    modifications: np.ndarray
) -> float:
    """Calculate neutral peptide mass with modifications from ord() array.

    Parameters
    ----------
    peptide_ord : np.ndarray (uint8)
        Peptide sequence as ord() values
    modifications : np.ndarray (float64)
        Modification array: shape (n_mods, 2), each row is [position, mass_shift]
    """
    total = 0.0
    for i in range(len(peptide_ord)):
        total += AA_MASSES[peptide_ord[i]]

    total += H2O_MASS

    for i in range(len(modifications)):
        total += modifications[i, 1]

    return total

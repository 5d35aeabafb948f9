"""Decoy peptide generation for UIS assay design.

Decoys mimic the physicochemical properties of their targets without being
identical: each distinct stripped target sequence is shuffled into a decoy
sequence, and the target's modifications are transferred onto the decoy's
own modifiable residues.

Design principles:
1. Shuffling keeps residue composition (and therefore precursor mass)
2. A decoy never equals its target sequence
3. A decoy is always a permutation of its target. Homopolymers and single
   residues have no other permutation and get random residues instead
4. A decoy avoids every target sequence and every other decoy whenever a
   bounded number of shuffles finds such a permutation
5. One decoy per stripped target sequence: peptides sharing a sequence
   (e.g. different charge states) share the decoy sequence

Reproducibility
---------------
Randomness comes from a ``numpy.random.Generator`` created from a
``FixedSeed`` (identical decoys across runs) or ``ENVIRONMENT_SEED``
(fresh OS entropy, deliberately NOT reproducible).
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Dict, Iterable, Mapping, Set, Union

import numpy as np

from ..constants import STANDARD_AMINO_ACIDS, DECOY_PREFIX
from ..exceptions import InsufficientSitesError
from ..experiment import Peptide
from ..modifications import ModificationDatabase

logger = logging.getLogger(__name__)


# =============================================================================
# Seeds
# =============================================================================

@dataclass(frozen=True)
class FixedSeed:
    """Reproducible seed: same value ⇒ identical decoys across runs."""
    value: int

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Seed must be non-negative, got {self.value}")


class EnvironmentSeed(Enum):
    """Seed drawn from OS entropy. Decoys differ from run to run."""
    FROM_ENVIRONMENT = "environment"


ENVIRONMENT_SEED = EnvironmentSeed.FROM_ENVIRONMENT

DecoySeed = Union[FixedSeed, EnvironmentSeed]


def as_seed(seed: Union[DecoySeed, int, None]) -> DecoySeed:
    """Normalize user input to a DecoySeed.

    ``None`` and the legacy sentinel ``-1`` select ENVIRONMENT_SEED; any
    other non-negative integer becomes a FixedSeed.

    Examples
    --------
    >>> as_seed(42)
    FixedSeed(value=42)
    >>> as_seed(-1) is ENVIRONMENT_SEED
    True
    """
    if isinstance(seed, (FixedSeed, EnvironmentSeed)):
        return seed
    if seed is None or int(seed) == -1:
        return ENVIRONMENT_SEED
    return FixedSeed(int(seed))


def make_rng(seed: DecoySeed) -> np.random.Generator:
    """Create the pseudorandom generator for one decoy generation pass."""
    if isinstance(seed, FixedSeed):
        return np.random.default_rng(seed.value)
    logger.info("Decoy seed drawn from environment entropy (not reproducible)")
    return np.random.default_rng()


# =============================================================================
# Sequence Generation
# =============================================================================

def get_random_sequence(length: int, rng: np.random.Generator) -> str:
    """Draw a sequence uniformly from the 20 standard amino acids.

    Parameters
    ----------
    length : int
        Sequence length
    rng : np.random.Generator
        Seeded generator; the output is deterministic for a fixed seed and
        call sequence

    Examples
    --------
    >>> get_random_sequence(8, np.random.default_rng(1))  # doctest: +SKIP
    'CSRKFMNW'
    """
    draws = rng.integers(0, len(STANDARD_AMINO_ACIDS), size=length)
    return ''.join(STANDARD_AMINO_ACIDS[i] for i in draws)


def shuffle_sequence(sequence: str, rng: np.random.Generator) -> str:
    """Random permutation of the residues of ``sequence``."""
    order = rng.permutation(len(sequence))
    return ''.join(sequence[i] for i in order)


def _draw_decoy(
    target: str,
    forbidden: Set[str],
    rng: np.random.Generator,
    max_attempts: int,
) -> str:
    """Draw one decoy sequence for ``target``.

    Shuffles are tried first, avoiding ``forbidden`` sequences. When no
    collision-free shuffle turns up, the first shuffle that differs from the
    target is accepted anyway, so a decoy stays a permutation of its target
    residues whenever one exists. Only sequences without a non-identity
    permutation (homopolymers such as ``SSSS`` and single residues) get
    residues drawn at random, which changes their composition and mass.
    """
    def acceptable(candidate: str) -> bool:
        return candidate != target and candidate not in forbidden

    for _ in range(max_attempts):
        candidate = shuffle_sequence(target, rng)
        if acceptable(candidate):
            return candidate

    if len(set(target)) > 1:
        logger.warning(
            f"No collision-free shuffle of {target} after {max_attempts} attempts, "
            f"accepting a shuffle that only differs from its target"
        )
        for _ in range(max_attempts):
            candidate = shuffle_sequence(target, rng)
            if candidate != target:
                return candidate
        # swap the first residue with the first one that differs from it
        swap = next(i for i, residue in enumerate(target) if residue != target[0])
        residues = list(target)
        residues[0], residues[swap] = residues[swap], residues[0]
        return ''.join(residues)

    # No permutation of a homopolymer differs from it, draw new residues
    for _ in range(max_attempts):
        candidate = get_random_sequence(len(target), rng)
        if acceptable(candidate):
            logger.debug(f"Decoy for homopolymer {target} drawn at random")
            return candidate

    logger.warning(
        f"No collision-free decoy for homopolymer {target} after {max_attempts} "
        f"random draws, accepting a decoy that only differs from its target"
    )
    candidate = get_random_sequence(len(target), rng)
    while candidate == target:
        candidate = get_random_sequence(len(target), rng)
    return candidate


def generate_decoy_sequences(
    target_sequence_map: Mapping[int, Mapping[str, Iterable[str]]],
    seed: Union[DecoySeed, int, None] = ENVIRONMENT_SEED,
    max_attempts: int = 20,
) -> Dict[str, str]:
    """Generate one decoy sequence per distinct stripped target sequence.

    Parameters
    ----------
    target_sequence_map : mapping
        Swath window index → {stripped target sequence → peptidoform labels}
    seed : DecoySeed or int or None
        FixedSeed / non-negative int for reproducible decoys,
        ENVIRONMENT_SEED / None / -1 for time-varying decoys
    max_attempts : int
        Shuffles tried per target before accepting a shuffle that collides
        with another target or decoy (random draws for homopolymers)

    Returns
    -------
    Dict[str, str]
        Target stripped sequence → decoy stripped sequence

    Notes
    -----
    Windows are visited in ascending order and sequences in sorted order so
    that a fixed seed always consumes the generator identically.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    rng = make_rng(as_seed(seed))

    all_targets: Set[str] = set()
    for sequences in target_sequence_map.values():
        all_targets.update(sequences)

    logger.info(f"Generating decoys for {len(all_targets):,} target sequences...")

    decoy_map: Dict[str, str] = {}
    forbidden = set(all_targets)
    for window in sorted(target_sequence_map):
        for target in sorted(target_sequence_map[window]):
            if target in decoy_map:
                continue
            if not target:
                raise ValueError("Cannot generate a decoy for an empty sequence")
            decoy = _draw_decoy(target, forbidden, rng, max_attempts)
            decoy_map[target] = decoy
            forbidden.add(decoy)

    logger.info(f"✓ Generated {len(decoy_map):,} decoy sequences")

    return decoy_map


# =============================================================================
# Decoy Peptides
# =============================================================================

def generate_decoy_peptide(
    peptide: Peptide,
    decoy_sequence: str,
    db: ModificationDatabase,
) -> Peptide:
    """Build the decoy counterpart of a target peptide.

    Each modification is moved to the decoy site with the same rank among
    modifiable sites as on the target (e.g. the phosphate on the 2nd S/T/Y
    of the target goes to the 2nd S/T/Y of the decoy).

    Raises
    ------
    InsufficientSitesError
        If the decoy sequence cannot host the target's modifications
    """
    modifications = []
    names = list(dict.fromkeys(name for name, _ in peptide.modifications))
    for name in names:
        placed = [pos for mod, pos in peptide.modifications if mod == name]
        target_sites = db.modifiable_sites(peptide.sequence, name)
        decoy_sites = db.modifiable_sites(decoy_sequence, name)
        if len(decoy_sites) < len(placed):
            raise InsufficientSitesError(decoy_sequence, name, len(placed), len(decoy_sites))

        ranks = []
        for pos in placed:
            rank = target_sites.index(pos) if pos in target_sites else None
            if rank is not None and rank < len(decoy_sites) and rank not in ranks:
                ranks.append(rank)
        free = (r for r in range(len(decoy_sites)) if r not in ranks)
        while len(ranks) < len(placed):
            ranks.append(next(free))

        modifications.extend((name, decoy_sites[rank]) for rank in ranks)

    modifications.sort(key=lambda m: m[1])
    return Peptide(
        id=DECOY_PREFIX + peptide.id,
        sequence=decoy_sequence,
        modifications=tuple(modifications),
        charge=peptide.charge,
        protein_refs=tuple(DECOY_PREFIX + ref for ref in peptide.protein_refs),
        decoy=True,
    )

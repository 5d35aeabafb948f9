"""Enumeration of alternative modification localizations.

A peptide identified with, e.g., one phosphorylation on a sequence with
three serines could carry the phosphate on any of them. Unless a fragment
ion discriminates the three peptidoforms, they are indistinguishable. This
module enumerates that closure for target peptides and transfers the same
combinatorial structure onto decoy sequences.

Examples
--------
>>> db = ModificationDatabase()
>>> peptide = Peptide("p1", "SASK", (("Phospho", 2),), charge=2)
>>> [p.peptidoform for p in combine_modifications(peptide, db)]
['S(Phospho)ASK', 'SAS(Phospho)K']
"""

from collections import Counter
import logging
from typing import Dict, List, Sequence, Tuple

from .combinatorics import nchoosek_combinations
from .exceptions import InsufficientSitesError
from .experiment import Peptide
from .modifications import ModificationDatabase

logger = logging.getLogger(__name__)


def add_modifications_sequences(
    sequences: Sequence[Peptide],
    mods_combs: Sequence[Tuple[int, ...]],
    modification: str,
) -> List[Peptide]:
    """Place ``modification`` at every combination of positions.

    Parameters
    ----------
    sequences : sequence of Peptide
        Template peptides (possibly already carrying other modifications)
    mods_combs : sequence of tuple of int
        Position combinations, e.g. from ``nchoosek_combinations``
    modification : str
        Modification name

    Returns
    -------
    List[Peptide]
        One peptide per (template, combination). A combination that hits a
        position already modified on the template is skipped, since a
        residue carries at most one modification.
    """
    modified = []
    for template in sequences:
        occupied = {position for _, position in template.modifications}
        for combination in mods_combs:
            if occupied.intersection(combination):
                continue
            mods = list(template.modifications)
            mods.extend((modification, position) for position in combination)
            mods.sort(key=lambda m: m[1])
            modified.append(template.with_modifications(mods))
    return modified


def _count_modifications(peptide: Peptide) -> Dict[str, int]:
    # Counter keeps first-appearance order
    return Counter(name for name, _ in peptide.modifications)


def combine_modifications(peptide: Peptide, db: ModificationDatabase) -> List[Peptide]:
    """Enumerate all localizations consistent with the observed modifications.

    For every modification type on ``peptide`` (k copies), the modification
    database defines the n sites able to carry it; all C(n, k) placements are
    generated and folded together across modification types.

    Parameters
    ----------
    peptide : Peptide
        Template peptide
    db : ModificationDatabase
        Modification validity oracle

    Returns
    -------
    List[Peptide]
        All alternative peptidoforms, in enumeration order. Includes the
        input placement. An unmodified peptide returns ``[peptide]``.

    Raises
    ------
    InsufficientSitesError
        If the sequence offers fewer sites than observed modifications
    """
    counts = _count_modifications(peptide)
    if not counts:
        return [peptide]

    modified = [peptide.with_modifications(())]
    for name, count in counts.items():
        sites = db.modifiable_sites(peptide.sequence, name)
        if len(sites) < count:
            raise InsufficientSitesError(peptide.sequence, name, count, len(sites))

        mods_combs = nchoosek_combinations(sites, count)
        modified = add_modifications_sequences(modified, mods_combs, name)

    return modified


def combine_decoy_modifications(
    peptide: Peptide,
    decoy_peptide: Peptide,
    db: ModificationDatabase,
) -> List[Peptide]:
    """Transfer the target's localization closure onto a decoy sequence.

    Combinations are enumerated over the ranks of the target's modifiable
    sites and mapped onto the decoy's own modifiable sites (rank j → j-th
    decoy site), so the decoy keeps the target's combinatorial structure
    while only modifying residues that can carry the modification. If the
    decoy has fewer sites than the target, ranks are enumerated over the
    decoy's sites.

    Parameters
    ----------
    peptide : Peptide
        Target peptide (provides modification counts and target sites)
    decoy_peptide : Peptide
        Decoy peptide; its sequence defines the decoy sites
    db : ModificationDatabase
        Modification validity oracle

    Returns
    -------
    List[Peptide]
        Decoy peptidoforms (copies of ``decoy_peptide`` with placed
        modifications), in enumeration order.

    Raises
    ------
    InsufficientSitesError
        If the decoy offers fewer sites than observed modifications
    """
    counts = _count_modifications(peptide)
    if not counts:
        return [decoy_peptide.with_modifications(())]

    modified = [decoy_peptide.with_modifications(())]
    for name, count in counts.items():
        target_sites = db.modifiable_sites(peptide.sequence, name)
        decoy_sites = db.modifiable_sites(decoy_peptide.sequence, name)
        if len(target_sites) < count:
            raise InsufficientSitesError(peptide.sequence, name, count, len(target_sites))
        if len(decoy_sites) < count:
            raise InsufficientSitesError(decoy_peptide.sequence, name, count, len(decoy_sites))

        n_ranks = min(len(target_sites), len(decoy_sites))
        rank_combs = nchoosek_combinations(range(n_ranks), count)
        mods_combs = [tuple(decoy_sites[rank] for rank in comb) for comb in rank_combs]
        modified = add_modifications_sequences(modified, mods_combs, name)

    logger.debug(f"{peptide.peptidoform} → {len(modified)} decoy peptidoforms on {decoy_peptide.sequence}")
    return modified

"""In-silico fragment ion maps per precursor isolation window.

For every target peptide (and its decoy), all alternative modification
localizations are enumerated and their theoretical ion series stored under
the flat key ``(window, stripped_sequence)``. These maps are the lookup
structure for unique ion signature selection.

Map types
---------
IonMap
    (window, stripped sequence) → [(product m/z, peptidoform label), ...]
SequenceMap
    window → {stripped sequence → {peptidoform label, ...}}
PeptideMap
    peptide id → [(peptidoform label, precursor m/z), ...], capped at
    ``max_num_alternative_localizations`` entries in enumeration order

Peptides whose precursor lies outside every window share the window
``NO_SWATH`` (-1); without configured windows this puts all peptides into
one interference pool (MRM).
"""

from dataclasses import dataclass, field
import logging
from typing import Dict, Iterator, List, Mapping, Set, Tuple

from ..config import AssayConfig
from ..database.decoys import generate_decoy_peptide
from ..exceptions import InsufficientSitesError
from ..experiment import Peptide, TargetedExperiment
from ..fragments.generator import get_ion_series, peptide_precursor_mz, round_mz
from ..modifications import ModificationDatabase
from ..placement import combine_modifications, combine_decoy_modifications
from .swath import get_swath, NO_SWATH

logger = logging.getLogger(__name__)

IonMap = Dict[Tuple[int, str], List[Tuple[float, str]]]
SequenceMap = Dict[int, Dict[str, Set[str]]]
PeptideMap = Dict[str, List[Tuple[str, float]]]


@dataclass
class InSilicoMaps:
    """Ion, sequence and peptide maps built in one pass, plus bookkeeping.

    Attributes
    ----------
    ion_map, sequence_map, peptide_map
        See module docstring
    peptides : Dict[str, Peptide]
        Processed peptides by id (decoy peptides for decoy maps)
    windows : Dict[str, int]
        Window index of every processed peptide
    enumerated : Dict[str, int]
        Number of enumerated localizations per peptide (before capping)
    truncated : List[str]
        Peptide ids whose localizations exceeded the cap
    skipped : Dict[str, str]
        Peptide ids that could not be processed, with the reason
    target_decoy_map : Dict[str, Peptide]
        Target peptide id → decoy peptide (decoy maps only)
    """

    ion_map: IonMap = field(default_factory=dict)
    sequence_map: SequenceMap = field(default_factory=dict)
    peptide_map: PeptideMap = field(default_factory=dict)
    peptides: Dict[str, Peptide] = field(default_factory=dict)
    windows: Dict[str, int] = field(default_factory=dict)
    enumerated: Dict[str, int] = field(default_factory=dict)
    truncated: List[str] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    target_decoy_map: Dict[str, Peptide] = field(default_factory=dict)

    def window_ions(self, window: int) -> Iterator[Tuple[float, str]]:
        """All (m/z, label) pairs stored for a window (empty if none)."""
        for (ion_window, _), ions in self.ion_map.items():
            if ion_window == window:
                yield from ions

    @property
    def n_ions(self) -> int:
        return sum(len(ions) for ions in self.ion_map.values())


def _add_peptidoforms(
    maps: InSilicoMaps,
    peptide: Peptide,
    window: int,
    precursor_mz: float,
    alternatives: List[Peptide],
    config: AssayConfig,
    db: ModificationDatabase,
    seen: Set[Tuple[int, str, int]],
) -> None:
    cap = config.max_num_alternative_localizations
    maps.peptides[peptide.id] = peptide
    maps.windows[peptide.id] = window
    maps.enumerated[peptide.id] = len(alternatives)
    if len(alternatives) > cap:
        logger.warning(
            f"{peptide.id}: {len(alternatives)} alternative localizations exceed "
            f"the limit of {cap}, processing the first {cap}"
        )
        maps.truncated.append(peptide.id)

    key = (window, peptide.sequence)
    ions = maps.ion_map.setdefault(key, [])
    labels = maps.sequence_map.setdefault(window, {}).setdefault(peptide.sequence, set())
    peptidoforms = maps.peptide_map.setdefault(peptide.id, [])

    # Every localization enters the ion map so that UIS claims also hold
    # against localizations beyond the cap.
    for i, alternative in enumerate(alternatives):
        label = alternative.peptidoform
        labels.add(label)
        if i < cap:
            peptidoforms.append((label, precursor_mz))

        if (window, label, peptide.charge) in seen:
            continue
        seen.add((window, label, peptide.charge))

        if config.enable_ms2_precursors:
            ions.append((round_mz(precursor_mz, config.round_dec_pow), label))
        for ion in get_ion_series(
            alternative.sequence,
            alternative.modifications,
            peptide.charge,
            config.fragment_types,
            config.fragment_charges,
            config.enable_specific_losses,
            config.enable_unspecific_losses,
            db,
            config.round_dec_pow,
        ):
            ions.append((ion.mz, label))


def generate_target_in_silico_map(
    exp: TargetedExperiment,
    config: AssayConfig,
    db: ModificationDatabase,
) -> InSilicoMaps:
    """Build the target ion, sequence and peptide maps.

    Peptides whose modifications cannot be placed (insufficient sites) are
    skipped, logged and recorded in ``skipped``; processing continues.
    """
    maps = InSilicoMaps()
    seen: Set[Tuple[int, str, int]] = set()

    targets = [peptide for peptide in exp.peptides if not peptide.decoy]
    logger.info(f"Building target in-silico ion map for {len(targets):,} peptides...")

    for peptide in targets:
        precursor_mz = peptide_precursor_mz(
            peptide.sequence, peptide.modifications, peptide.charge, db
        )
        window = get_swath(config.swathes, precursor_mz)
        if window == NO_SWATH and config.swathes:
            logger.debug(f"{peptide.id}: precursor {precursor_mz:.4f} outside all swath windows")

        try:
            alternatives = combine_modifications(peptide, db)
        except InsufficientSitesError as err:
            logger.warning(f"Skipping {peptide.id}: {err}")
            maps.skipped[peptide.id] = str(err)
            continue

        _add_peptidoforms(maps, peptide, window, precursor_mz, alternatives, config, db, seen)

    logger.info(
        f"✓ Target ion map: {len(maps.peptide_map):,} peptides, "
        f"{maps.n_ions:,} ions, {len(maps.skipped):,} skipped"
    )
    return maps


def generate_decoy_in_silico_map(
    config: AssayConfig,
    target_maps: InSilicoMaps,
    decoy_sequence_map: Mapping[str, str],
    db: ModificationDatabase,
) -> InSilicoMaps:
    """Build the decoy ion, sequence and peptide maps.

    Every target peptide present in ``target_maps`` receives a decoy peptide
    (sequence from ``decoy_sequence_map``). Decoy ions are stored in the
    TARGET precursor's window: the decoy competes with the peptides its
    target is co-isolated with.
    """
    maps = InSilicoMaps()
    seen: Set[Tuple[int, str, int]] = set()

    logger.info(f"Building decoy in-silico ion map for {len(target_maps.peptide_map):,} peptides...")

    for peptide_id in target_maps.peptide_map:
        peptide = target_maps.peptides[peptide_id]
        window = target_maps.windows[peptide_id]
        decoy_sequence = decoy_sequence_map[peptide.sequence]

        try:
            decoy_peptide = generate_decoy_peptide(peptide, decoy_sequence, db)
            alternatives = combine_decoy_modifications(peptide, decoy_peptide, db)
        except InsufficientSitesError as err:
            logger.warning(f"Skipping decoy of {peptide.id}: {err}")
            maps.skipped[peptide.id] = str(err)
            continue

        maps.target_decoy_map[peptide.id] = decoy_peptide
        precursor_mz = peptide_precursor_mz(
            decoy_peptide.sequence, decoy_peptide.modifications, decoy_peptide.charge, db
        )
        _add_peptidoforms(maps, decoy_peptide, window, precursor_mz, alternatives, config, db, seen)

    logger.info(
        f"✓ Decoy ion map: {len(maps.peptide_map):,} peptides, "
        f"{maps.n_ions:,} ions, {len(maps.skipped):,} skipped"
    )
    return maps

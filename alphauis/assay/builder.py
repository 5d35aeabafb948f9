"""Unique ion signature (UIS) assay generation.

Selects, per peptide and per precursor isolation window, the fragment ions
that discriminate each modification localization from every other
candidate peptidoform (Sherman et al., 2009, PMID: 19556279).

Workflow (``uis_transitions``):
1. Target in-silico ion map (all localizations of all target peptides)
2. Decoy sequences (seeded shuffle, one per stripped target sequence)
3. Decoy in-silico ion map (always built: targets are checked against decoys)
4. Per-window m/z index over target + decoy ions (shared, read-only)
5. Target UIS transitions; decoy UIS transitions unless disabled

Each map is complete before selection starts: a transition can only be
declared unique once every ion of its window is known.
"""

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from ..config import AssayConfig
from ..database.decoys import generate_decoy_sequences
from ..experiment import TargetedExperiment, Transition
from ..fragments.generator import FragmentIon, get_ion_series, round_mz
from ..modifications import ModificationDatabase, parse_peptidoform
from ..search.uis_matching import IonIndex, is_unique_ion_signature
from .ion_map import (
    InSilicoMaps,
    generate_target_in_silico_map,
    generate_decoy_in_silico_map,
)

logger = logging.getLogger(__name__)

MS2_PRECURSOR_ANNOTATION = "MS2_Precursor_i0"


@dataclass
class AssayReport:
    """Outcome of one ``uis_transitions`` call.

    Attributes
    ----------
    n_target_transitions, n_decoy_transitions : int
        UIS transitions added to the experiment
    processed : Dict[str, int]
        Peptidoforms processed per target peptide (after capping)
    enumerated : Dict[str, int]
        Localizations enumerated per target peptide (before capping)
    truncated : List[str]
        Target peptides whose localizations exceeded the cap
    skipped : Dict[str, str]
        Peptides skipped, with reason (decoy failures keyed by target id)
    decoy_sequences : Dict[str, str]
        Target stripped sequence → decoy stripped sequence
    """

    n_target_transitions: int = 0
    n_decoy_transitions: int = 0
    processed: Dict[str, int] = field(default_factory=dict)
    enumerated: Dict[str, int] = field(default_factory=dict)
    truncated: List[str] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    decoy_sequences: Dict[str, str] = field(default_factory=dict)


def build_ion_indices(*maps: InSilicoMaps) -> Dict[int, IonIndex]:
    """One m/z index per window over the union of the given ion maps."""
    entries: Dict[int, list] = {}
    for in_silico in maps:
        for (window, _), ions in in_silico.ion_map.items():
            entries.setdefault(window, []).extend(ions)
    return {window: IonIndex(ions) for window, ions in entries.items()}


def _candidate_ions(
    sequence: str,
    modifications,
    charge: int,
    precursor_mz: float,
    config: AssayConfig,
    db: ModificationDatabase,
) -> List[FragmentIon]:
    ions = get_ion_series(
        sequence,
        modifications,
        charge,
        config.fragment_types,
        config.fragment_charges,
        config.enable_specific_losses,
        config.enable_unspecific_losses,
        db,
        config.round_dec_pow,
    )
    if config.enable_ms2_precursors:
        ions.append(FragmentIon(
            annotation=MS2_PRECURSOR_ANNOTATION,
            ion_type="",
            ordinal=0,
            charge=charge,
            loss="",
            mz=round_mz(precursor_mz, config.round_dec_pow),
        ))
    return ions


def _generate_assays(
    maps: InSilicoMaps,
    indices: Dict[int, IonIndex],
    config: AssayConfig,
    db: ModificationDatabase,
    decoy: bool,
) -> List[Transition]:
    transitions = []
    for peptide_id, peptidoforms in maps.peptide_map.items():
        peptide = maps.peptides[peptide_id]
        index = indices.get(maps.windows[peptide_id])
        if index is None:
            continue

        for label, precursor_mz in peptidoforms:
            sequence, modifications = parse_peptidoform(label)
            seen_mz = set()
            for ion in _candidate_ions(sequence, modifications, peptide.charge, precursor_mz, config, db):
                if ion.mz in seen_mz:
                    continue
                seen_mz.add(ion.mz)

                matches = index.matching_peptidoforms(ion.mz, config.uis_mz_threshold)
                if not is_unique_ion_signature(matches, label):
                    continue

                transitions.append(Transition(
                    id=f"{peptide_id}_UIS_{label}_{ion.annotation}",
                    peptide_ref=peptide_id,
                    precursor_mz=precursor_mz,
                    product_mz=ion.mz,
                    product_charge=ion.charge,
                    fragment_type=ion.ion_type,
                    fragment_ordinal=ion.ordinal,
                    annotation=ion.annotation,
                    decoy=decoy,
                    detecting=False,
                    identifying=True,
                    quantifying=False,
                    uis=True,
                    peptidoforms=(label,),
                ))
    return transitions


def generate_target_assays(
    target_maps: InSilicoMaps,
    indices: Dict[int, IonIndex],
    config: AssayConfig,
    db: ModificationDatabase,
) -> List[Transition]:
    """UIS transitions for every target peptide in ``target_maps``.

    An ion qualifies if, within ``config.uis_mz_threshold``, the only
    peptidoform producing it in the window (targets and decoys) is the
    peptidoform under test.
    """
    transitions = _generate_assays(target_maps, indices, config, db, decoy=False)
    logger.info(f"✓ Generated {len(transitions):,} target UIS transitions")
    return transitions


def generate_decoy_assays(
    decoy_maps: InSilicoMaps,
    indices: Dict[int, IonIndex],
    config: AssayConfig,
    db: ModificationDatabase,
) -> List[Transition]:
    """UIS transitions for every decoy peptide in ``decoy_maps``.

    Uses the same window indices as the targets, so a decoy ion confusable
    with any target or decoy peptidoform is excluded.
    """
    transitions = _generate_assays(decoy_maps, indices, config, db, decoy=True)
    logger.info(f"✓ Generated {len(transitions):,} decoy UIS transitions")
    return transitions


def uis_transitions(
    exp: TargetedExperiment,
    config: AssayConfig,
    db: Optional[ModificationDatabase] = None,
) -> AssayReport:
    """Annotate UIS / site-specific transitions of a targeted experiment.

    The generated transitions are appended to ``exp.transitions``; when decoy
    transitions are generated, the decoy peptides are added to
    ``exp.peptides``.

    Parameters
    ----------
    exp : TargetedExperiment
        Experiment with target peptides (typically after
        ``prepare_transitions``)
    config : AssayConfig
        Fragment model, swath windows, UIS tolerance, localization cap,
        decoy seed and decoy toggle
    db : ModificationDatabase, optional
        Modification validity oracle (default table if omitted)

    Returns
    -------
    AssayReport
        Counts, truncated and skipped peptides, decoy sequences

    Raises
    ------
    AssayConfigurationError
        If the configuration is inconsistent (before any processing)
    """
    config.validate()
    if db is None:
        db = ModificationDatabase()

    target_maps = generate_target_in_silico_map(exp, config, db)
    decoy_sequences = generate_decoy_sequences(target_maps.sequence_map, config.shuffle_seed)
    decoy_maps = generate_decoy_in_silico_map(config, target_maps, decoy_sequences, db)

    indices = build_ion_indices(target_maps, decoy_maps)

    target_transitions = generate_target_assays(target_maps, indices, config, db)
    decoy_transitions = []
    if not config.disable_decoy_transitions:
        decoy_transitions = generate_decoy_assays(decoy_maps, indices, config, db)
        known = set(exp.peptide_index())
        for decoy_peptide in decoy_maps.target_decoy_map.values():
            if decoy_peptide.id not in known:
                exp.add_peptide(decoy_peptide)
                known.add(decoy_peptide.id)

    exp.transitions = exp.transitions + target_transitions + decoy_transitions

    skipped = dict(target_maps.skipped)
    skipped.update(decoy_maps.skipped)
    return AssayReport(
        n_target_transitions=len(target_transitions),
        n_decoy_transitions=len(decoy_transitions),
        processed={pid: len(forms) for pid, forms in target_maps.peptide_map.items()},
        enumerated=dict(target_maps.enumerated),
        truncated=list(target_maps.truncated),
        skipped=skipped,
        decoy_sequences=decoy_sequences,
    )

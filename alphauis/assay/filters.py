"""Transition annotation and filtering.

Prepares a raw transition list for assay generation, following the rules of
Schubert et al., 2015 (PMID: 25675208):

1. ``reannotate_transitions``: replace product m/z by the closest theoretical
   ion and drop transitions that cannot be explained
2. ``restrict_transitions``: drop products outside the instrument range or
   inside the precursor's isolation window
3. ``detecting_transitions``: keep the most intense transitions per assay

All stages mutate ``exp.transitions`` in place.
"""

from dataclasses import replace
import logging
from typing import Dict, List, Optional, Sequence

from ..config import AssayConfig, validate_swathes
from ..constants import DEFAULT_ROUND_DEC_POW
from ..exceptions import AssayConfigurationError
from ..experiment import SwathWindow, TargetedExperiment
from ..fragments.generator import (
    FragmentIon,
    annotate_ion,
    get_ion_series,
    peptide_precursor_mz,
)
from ..modifications import ModificationDatabase
from .swath import get_swath, is_in_swath, NO_SWATH

logger = logging.getLogger(__name__)


def reannotate_transitions(
    exp: TargetedExperiment,
    precursor_mz_threshold: float,
    product_mz_threshold: float,
    fragment_types: Sequence[str],
    fragment_charges: Sequence[int],
    enable_specific_losses: bool,
    enable_unspecific_losses: bool,
    round_dec_pow: int = DEFAULT_ROUND_DEC_POW,
    db: Optional[ModificationDatabase] = None,
) -> None:
    """Annotate transitions against the theoretical ion series.

    For every transition the precursor m/z is recomputed from its peptide and
    the product m/z is replaced by the closest theoretical ion (rounded to
    10**round_dec_pow). Transitions whose recorded precursor deviates by more
    than ``precursor_mz_threshold``, or whose product matches no ion within
    ``product_mz_threshold``, are dropped.

    Raises
    ------
    KeyError
        If a transition references an unknown peptide
    """
    if db is None:
        db = ModificationDatabase()

    ion_series_cache: Dict[str, List[FragmentIon]] = {}
    precursor_cache: Dict[str, float] = {}
    peptides = exp.peptide_index()

    annotated = []
    for transition in exp.transitions:
        peptide = peptides.get(transition.peptide_ref)
        if peptide is None:
            raise KeyError(f"Peptide reference not found: {transition.peptide_ref}")

        if peptide.id not in precursor_cache:
            precursor_cache[peptide.id] = peptide_precursor_mz(
                peptide.sequence, peptide.modifications, peptide.charge, db
            )
            ion_series_cache[peptide.id] = get_ion_series(
                peptide.sequence,
                peptide.modifications,
                peptide.charge,
                fragment_types,
                fragment_charges,
                enable_specific_losses,
                enable_unspecific_losses,
                db,
                round_dec_pow,
            )
        precursor_mz = precursor_cache[peptide.id]

        if abs(transition.precursor_mz - precursor_mz) > precursor_mz_threshold:
            logger.debug(f"Precursor mismatch, dropping {transition.id}")
            continue

        ion = annotate_ion(ion_series_cache[peptide.id], transition.product_mz, product_mz_threshold)
        if ion is None:
            logger.debug(f"Product not annotated, dropping {transition.id}")
            continue

        annotated.append(replace(
            transition,
            precursor_mz=precursor_mz,
            product_mz=ion.mz,
            product_charge=ion.charge,
            fragment_type=ion.ion_type,
            fragment_ordinal=ion.ordinal,
            annotation=ion.annotation,
        ))

    logger.info(f"✓ Reannotated {len(annotated):,} of {len(exp.transitions):,} transitions")
    exp.transitions = annotated


def restrict_transitions(
    exp: TargetedExperiment,
    lower_mz_limit: float,
    upper_mz_limit: float,
    swathes: Sequence[SwathWindow],
) -> None:
    """Drop transitions that cannot be measured reliably.

    Removed are transitions that are unannotated, whose product m/z lies
    outside [lower_mz_limit, upper_mz_limit], whose product falls into the
    precursor's own isolation window, or (when windows are configured) whose
    precursor falls into no window at all.

    Raises
    ------
    AssayConfigurationError
        If the limits are inverted or the windows overlap
    """
    if lower_mz_limit > upper_mz_limit:
        raise AssayConfigurationError(
            f"lower_mz_limit ({lower_mz_limit}) > upper_mz_limit ({upper_mz_limit})"
        )
    validate_swathes(swathes)

    restricted = []
    for transition in exp.transitions:
        if not transition.is_annotated:
            continue
        if not lower_mz_limit <= transition.product_mz <= upper_mz_limit:
            continue
        if swathes and get_swath(swathes, transition.precursor_mz) == NO_SWATH:
            continue
        if is_in_swath(swathes, transition.precursor_mz, transition.product_mz):
            continue
        restricted.append(transition)

    logger.info(f"✓ Restricted to {len(restricted):,} of {len(exp.transitions):,} transitions")
    exp.transitions = restricted


def detecting_transitions(
    exp: TargetedExperiment,
    min_transitions: int,
    max_transitions: int,
) -> None:
    """Select the detecting transitions of every assay.

    Per peptide (one precursor = sequence + charge), transitions are ranked
    by library intensity (descending, ties keep input order) and the top
    ``max_transitions`` are kept and flagged detecting. Peptides with fewer
    than ``min_transitions`` transitions lose all of them.

    Raises
    ------
    AssayConfigurationError
        If min_transitions > max_transitions (checked before any work)
    """
    if min_transitions > max_transitions:
        raise AssayConfigurationError(
            f"min_transitions ({min_transitions}) > max_transitions ({max_transitions})"
        )

    selected_ids = set()
    n_dropped_assays = 0
    for peptide_ref, transitions in exp.transitions_by_peptide().items():
        if len(transitions) < min_transitions:
            n_dropped_assays += 1
            logger.debug(f"{peptide_ref}: {len(transitions)} < {min_transitions} transitions, dropped")
            continue
        ranked = sorted(transitions, key=lambda t: -t.library_intensity)
        selected_ids.update(id(t) for t in ranked[:max_transitions])

    exp.transitions = [
        replace(t, detecting=True) for t in exp.transitions if id(t) in selected_ids
    ]

    logger.info(
        f"✓ Selected {len(exp.transitions):,} detecting transitions "
        f"({n_dropped_assays:,} assays below minimum dropped)"
    )


def prepare_transitions(
    exp: TargetedExperiment,
    config: AssayConfig,
    db: Optional[ModificationDatabase] = None,
) -> None:
    """Run reannotation, restriction and detecting selection in order."""
    reannotate_transitions(
        exp,
        config.precursor_mz_threshold,
        config.product_mz_threshold,
        config.fragment_types,
        config.fragment_charges,
        config.enable_specific_losses,
        config.enable_unspecific_losses,
        config.round_dec_pow,
        db,
    )
    restrict_transitions(exp, config.lower_mz_limit, config.upper_mz_limit, config.swathes)
    detecting_transitions(exp, config.min_transitions, config.max_transitions)

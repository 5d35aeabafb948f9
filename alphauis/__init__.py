"""alphauis - Unique ion signature assay and decoy design for targeted proteomics.

Builds MRM/SWATH assays whose identifying transitions discriminate every
modification localization of a peptide from all co-isolated candidate
peptidoforms, together with seeded, reproducible decoys.

Workflow
--------
>>> from alphauis import AssayConfig, FixedSeed, prepare_transitions, uis_transitions
>>> config = AssayConfig.for_acquisition("swath", shuffle_seed=FixedSeed(42))
>>> prepare_transitions(exp, config)           # doctest: +SKIP
>>> report = uis_transitions(exp, config)      # doctest: +SKIP
"""

__version__ = "0.1.0"

from alphauis import fragments
from alphauis import database
from alphauis import search
from alphauis import assay
from alphauis import labeling

from alphauis.config import AssayConfig
from alphauis.database import FixedSeed, ENVIRONMENT_SEED
from alphauis.experiment import Peptide, Protein, Transition, TargetedExperiment
from alphauis.modifications import ModificationDatabase, ModificationSpec
from alphauis.assay import prepare_transitions, uis_transitions, AssayReport
from alphauis.labeling import (
    BaseLabeler,
    UnlabeledLabeler,
    Implemented,
    NOT_SUPPORTED,
    unwrap,
)

__all__ = [
    "fragments",
    "database",
    "search",
    "assay",
    "labeling",
    "AssayConfig",
    "FixedSeed",
    "ENVIRONMENT_SEED",
    "Peptide",
    "Protein",
    "Transition",
    "TargetedExperiment",
    "ModificationDatabase",
    "ModificationSpec",
    "prepare_transitions",
    "uis_transitions",
    "AssayReport",
    "BaseLabeler",
    "UnlabeledLabeler",
    "Implemented",
    "NOT_SUPPORTED",
    "unwrap",
]

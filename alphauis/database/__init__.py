"""Decoy sequence and decoy peptide generation.

Seeded residue shuffling with collision avoidance and a global
target → decoy sequence map.
"""

from .decoys import (
    FixedSeed,
    EnvironmentSeed,
    ENVIRONMENT_SEED,
    DecoySeed,
    as_seed,
    make_rng,
    get_random_sequence,
    shuffle_sequence,
    generate_decoy_sequences,
    generate_decoy_peptide,
)

__all__ = [
    'FixedSeed',
    'EnvironmentSeed',
    'ENVIRONMENT_SEED',
    'DecoySeed',
    'as_seed',
    'make_rng',
    'get_random_sequence',
    'shuffle_sequence',
    'generate_decoy_sequences',
    'generate_decoy_peptide',
]

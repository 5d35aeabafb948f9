"""Pytest configuration for alphauis tests.

This module provides common fixtures and configuration for all tests.
"""

import pytest


@pytest.fixture
def mod_db():
    """Default modification database."""
    from alphauis.modifications import ModificationDatabase
    return ModificationDatabase()


@pytest.fixture
def simple_peptide():
    """Simple tryptic peptide for basic tests."""
    return "PEPTIDEK"


@pytest.fixture
def phospho_peptide():
    """Singly phosphorylated peptide with two adjacent serines."""
    from alphauis.experiment import Peptide
    return Peptide("pep_PESSAK_2", "PESSAK", (("Phospho", 2),), charge=2, protein_refs=("P1",))


@pytest.fixture
def wide_swath():
    """A single isolation window covering typical precursors."""
    return ((300.0, 1000.0),)


@pytest.fixture
def b_ion_config(wide_swath):
    """Singly charged b ions only, reproducible decoys."""
    from alphauis.config import AssayConfig
    from alphauis.database import FixedSeed
    return AssayConfig(
        fragment_types=("b",),
        fragment_charges=(1,),
        swathes=wide_swath,
        uis_mz_threshold=0.01,
        shuffle_seed=FixedSeed(42),
    )


@pytest.fixture
def tryptic_peptides():
    """Collection of typical tryptic peptides."""
    return [
        "PEPTIDEK",
        "ACDEK",
        "TESTPEPTIDER",
        "YGGFMTSEK",
        "LGEHNIDVLEGNEQFINAAK",
    ]


@pytest.fixture
def proton_mass():
    """Proton mass constant."""
    from alphauis.constants import PROTON_MASS
    return PROTON_MASS


@pytest.fixture
def aa_masses_dict():
    """Amino acid masses dictionary."""
    from alphauis.constants import AA_MASSES_DICT
    return AA_MASSES_DICT

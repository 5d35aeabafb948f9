"""Physical constants, residue masses and neutral losses for assay design.

This module provides all physical constants, amino acid masses, ion-type
offsets and neutral-loss masses used throughout alphauis. All values are
sourced from NIST or established proteomics standards.

Constants are provided in both dictionary and ord()-indexed array formats
for compatibility with both standard Python and Numba JIT-compiled code.

Sources
-------
- NIST physical constants: https://physics.nist.gov/cgi-bin/cuu/Value
- IUPAC amino acid masses: https://www.unimod.org/masses.html
- Unimod modification masses: https://www.unimod.org/modifications_list.php
"""

import numpy as np

# =============================================================================
# Fundamental Physical Constants (NIST values)
# =============================================================================

# Proton mass (NOT hydrogen atom mass!)
# Source: NIST 2018 CODATA
PROTON_MASS = 1.007276466622  # Da

# Electron mass
ELECTRON_MASS = 0.000548579909  # Da

# Hydrogen atom mass (proton + electron)
HYDROGEN_MASS = PROTON_MASS + ELECTRON_MASS  # Da

# Water mass (H2O)
H2O_MASS = 18.010564684  # Da

# Ammonia mass (NH3)
NH3_MASS = 17.026549101  # Da

# Carbon monoxide mass (CO)
CO_MASS = 27.994914620  # Da

# =============================================================================
# Ion Types
# =============================================================================

# Prefix (N-terminal) and suffix (C-terminal) fragment ion types.
# Integer codes are used inside Numba kernels.
ION_TYPE_CODES = {
    'a': 0,
    'b': 1,
    'c': 2,
    'x': 3,
    'y': 4,
    'z': 5,
}

PREFIX_ION_TYPES = ('a', 'b', 'c')
SUFFIX_ION_TYPES = ('x', 'y', 'z')

# Neutral offsets added to the summed residue masses of a fragment.
# a = b - CO
# c = b + NH3
# x = y + CO - 2H
# z = y - NH3
ION_NEUTRAL_OFFSETS = {
    'a': -CO_MASS,
    'b': 0.0,
    'c': NH3_MASS,
    'x': H2O_MASS + CO_MASS - 2 * HYDROGEN_MASS,
    'y': H2O_MASS,
    'z': H2O_MASS - NH3_MASS,
}

# =============================================================================
# Amino Acid Monoisotopic Masses (Da)
# =============================================================================

# Standard 20 amino acids (unmodified residues)
AA_MASSES_DICT = {
    'A': 71.037114,   # Alanine
    'R': 156.101111,  # Arginine
    'N': 114.042927,  # Asparagine
    'D': 115.026943,  # Aspartic acid
    'C': 103.009185,  # Cysteine (unmodified)
    'E': 129.042593,  # Glutamic acid
    'Q': 128.058578,  # Glutamine
    'G': 57.021464,   # Glycine
    'H': 137.058912,  # Histidine
    'I': 113.084064,  # Isoleucine
    'L': 113.084064,  # Leucine
    'K': 128.094963,  # Lysine
    'M': 131.040485,  # Methionine
    'F': 147.068414,  # Phenylalanine
    'P': 97.052764,   # Proline
    'S': 87.032028,   # Serine
    'T': 101.047679,  # Threonine
    'W': 186.079313,  # Tryptophan
    'Y': 163.063320,  # Tyrosine
    'V': 99.068414,   # Valine
}

# Alphabet used for random decoy sequences
STANDARD_AMINO_ACIDS = tuple(sorted(AA_MASSES_DICT))

# ord()-indexed lookup array for fast Numba access
# Access via: AA_MASSES[ord('A')] → 71.037114
AA_MASSES = np.zeros(256, dtype=np.float64)
for aa, mass in AA_MASSES_DICT.items():
    AA_MASSES[ord(aa)] = mass

# =============================================================================
# Common Modification Masses
# =============================================================================

# Phosphorylation (Unimod:21), HPO3
PHOSPHO_MASS = 79.966331

# Oxidation of Methionine (Unimod:35), O
OXIDATION_MASS = 15.994915

# Carbamidomethylation of Cysteine (Unimod:4), C2H3NO
CARBAMIDOMETHYL_MASS = 57.021464

# Acetylation (Unimod:1), C2H2O
ACETYL_MASS = 42.010565

# Deamidation (Unimod:7), NH → O
DEAMIDATION_MASS = 0.984016

# Ubiquitin remnant (Unimod:121), C4H6N2O2
GLYGLY_MASS = 114.042927

# Methylation (Unimod:34/36/37)
METHYL_MASS = 14.015650
DIMETHYL_MASS = 28.031300
TRIMETHYL_MASS = 42.046950

# =============================================================================
# Neutral Losses (Da)
# =============================================================================

# Loss names follow the Hill-formula style used in transition annotations,
# e.g. "b4-H2O1^1".
NEUTRAL_LOSS_MASSES = {
    'H2O1': H2O_MASS,
    'H3N1': NH3_MASS,
    'C1H2N2': 42.021798,
    'C1H2N1O1': 44.013639,
    'H3O4P1': 97.976896,   # Phosphoric acid
    'C1H4O1S1': 63.998285,  # Methanesulfenic acid from M(Oxidation)
}

# Applied to every fragment ion when unspecific losses are enabled
UNSPECIFIC_LOSSES = ('H2O1', 'H3N1', 'C1H2N2', 'C1H2N1O1')

# Applied when the fragment contains one of these residues and specific
# losses are enabled
RESIDUE_SPECIFIC_LOSSES = {
    'S': ('H2O1',),
    'T': ('H2O1',),
    'D': ('H2O1',),
    'E': ('H2O1',),
    'K': ('H3N1',),
    'R': ('H3N1',),
    'N': ('H3N1',),
    'Q': ('H3N1',),
}

# =============================================================================
# Assay Design Defaults
# =============================================================================

# Round product m/z to 10**DEFAULT_ROUND_DEC_POW
DEFAULT_ROUND_DEC_POW = -4

# Maximum number of enumerated modification localizations per peptide
DEFAULT_MAX_ALTERNATIVE_LOCALIZATIONS = 20

# Identifier prefix for decoy peptides and transitions
DECOY_PREFIX = 'DECOY_'

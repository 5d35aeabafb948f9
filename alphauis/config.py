"""Parameters for transition filtering and UIS assay generation.

All parameters are passed explicitly; nothing is read from the environment.
"""

from dataclasses import dataclass, field, replace
from typing import Sequence, Tuple

from .constants import (
    ION_TYPE_CODES,
    DEFAULT_ROUND_DEC_POW,
    DEFAULT_MAX_ALTERNATIVE_LOCALIZATIONS,
)
from .database.decoys import DecoySeed, ENVIRONMENT_SEED, as_seed
from .exceptions import AssayConfigurationError
from .experiment import SwathWindow


def validate_swathes(swathes: Sequence[SwathWindow]) -> None:
    """Check that swath windows are well-formed, sorted and non-overlapping.

    Adjacent windows may share a bound (e.g. (400, 500), (500, 600)).

    Raises
    ------
    AssayConfigurationError
        If a window is inverted, or windows are unsorted or overlap
    """
    previous_upper = None
    for i, (lower, upper) in enumerate(swathes):
        if lower > upper:
            raise AssayConfigurationError(
                f"Swath window {i} is inverted: ({lower}, {upper})"
            )
        if previous_upper is not None and lower < previous_upper:
            raise AssayConfigurationError(
                f"Swath window {i} ({lower}, {upper}) overlaps or precedes "
                f"the previous window ending at {previous_upper}"
            )
        previous_upper = upper


@dataclass
class AssayConfig:
    """Parameters for transition annotation and UIS assay generation.

    Fragment model
    --------------
    fragment_types : ion types among a, b, c, x, y, z
    fragment_charges : product charge states
    enable_specific_losses : residue/modification specific neutral losses
    enable_unspecific_losses : H2O, NH3, CH2N2, CH2NO losses on every ion
    enable_ms2_precursors : treat the precursor m/z as a potential interference
    round_dec_pow : round product m/z to 10**round_dec_pow

    Filtering
    ---------
    precursor_mz_threshold, product_mz_threshold : annotation tolerances (Th)
    lower_mz_limit, upper_mz_limit : allowed product m/z range (Th)
    swathes : precursor isolation windows
    min_transitions, max_transitions : detecting transitions per assay

    UIS
    ---
    uis_mz_threshold : absolute tolerance (Th) within which ions interfere
    max_num_alternative_localizations : peptidoforms processed per peptide
    shuffle_seed : FixedSeed for reproducible decoys, ENVIRONMENT_SEED otherwise
    disable_decoy_transitions : skip decoy UIS transition generation
    """

    fragment_types: Tuple[str, ...] = ("b", "y")
    fragment_charges: Tuple[int, ...] = (1, 2)
    enable_specific_losses: bool = False
    enable_unspecific_losses: bool = False
    enable_ms2_precursors: bool = False
    round_dec_pow: int = DEFAULT_ROUND_DEC_POW

    precursor_mz_threshold: float = 0.025
    product_mz_threshold: float = 0.025
    lower_mz_limit: float = 200.0
    upper_mz_limit: float = 2000.0
    swathes: Tuple[SwathWindow, ...] = ()
    min_transitions: int = 6
    max_transitions: int = 6

    uis_mz_threshold: float = 0.05
    max_num_alternative_localizations: int = DEFAULT_MAX_ALTERNATIVE_LOCALIZATIONS
    shuffle_seed: DecoySeed = field(default=ENVIRONMENT_SEED)
    disable_decoy_transitions: bool = False

    def __post_init__(self):
        self.fragment_types = tuple(self.fragment_types)
        self.fragment_charges = tuple(int(c) for c in self.fragment_charges)
        self.swathes = tuple((float(lo), float(hi)) for lo, hi in self.swathes)
        self.shuffle_seed = as_seed(self.shuffle_seed)
        self.validate()

    def validate(self) -> None:
        """Raise AssayConfigurationError for inconsistent parameters."""
        unknown = [t for t in self.fragment_types if t not in ION_TYPE_CODES]
        if unknown:
            raise AssayConfigurationError(
                f"Unknown fragment types: {unknown}. Must be among {sorted(ION_TYPE_CODES)}"
            )
        if any(c < 1 for c in self.fragment_charges):
            raise AssayConfigurationError(
                f"Fragment charges must be positive, got {self.fragment_charges}"
            )
        if self.min_transitions < 0:
            raise AssayConfigurationError(
                f"min_transitions must be non-negative, got {self.min_transitions}"
            )
        if self.min_transitions > self.max_transitions:
            raise AssayConfigurationError(
                f"min_transitions ({self.min_transitions}) > "
                f"max_transitions ({self.max_transitions})"
            )
        if self.lower_mz_limit > self.upper_mz_limit:
            raise AssayConfigurationError(
                f"lower_mz_limit ({self.lower_mz_limit}) > "
                f"upper_mz_limit ({self.upper_mz_limit})"
            )
        for name in ("precursor_mz_threshold", "product_mz_threshold", "uis_mz_threshold"):
            if getattr(self, name) < 0:
                raise AssayConfigurationError(f"{name} must be non-negative")
        if self.max_num_alternative_localizations < 1:
            raise AssayConfigurationError(
                "max_num_alternative_localizations must be at least 1"
            )
        validate_swathes(self.swathes)

    def evolve(self, **changes) -> "AssayConfig":
        """Copy with some parameters changed (re-validated)."""
        return replace(self, **changes)

    @classmethod
    def for_acquisition(cls, acquisition: str, **overrides) -> "AssayConfig":
        """Create parameters with defaults for an acquisition method.

        Args:
            acquisition: "swath" (DIA, wide windows, 25 Th isolation) or
                "mrm" (triple quadrupole, unit resolution)

        Returns:
            AssayConfig with acquisition-specific defaults
        """
        if acquisition == "swath":
            params = dict(
                fragment_types=("b", "y"),
                fragment_charges=(1, 2),
                uis_mz_threshold=0.05,
                swathes=tuple((float(lo), float(lo + 25)) for lo in range(400, 1200, 25)),
                lower_mz_limit=350.0,
                upper_mz_limit=2000.0,
            )
        elif acquisition == "mrm":
            params = dict(
                fragment_types=("y",),
                fragment_charges=(1,),
                uis_mz_threshold=0.7,
                product_mz_threshold=0.7,
                precursor_mz_threshold=0.7,
            )
        else:
            raise AssayConfigurationError(f"Unknown acquisition method: {acquisition}")

        params.update(overrides)
        return cls(**params)

"""Tests for AssayConfig validation and presets."""

import pytest

from alphauis.config import AssayConfig
from alphauis.database.decoys import FixedSeed, ENVIRONMENT_SEED
from alphauis.exceptions import AssayConfigurationError


class TestAssayConfigDefaults:
    """Test default parameters."""

    def test_defaults(self):
        """Defaults describe b/y ions at charges 1 and 2."""
        config = AssayConfig()
        assert config.fragment_types == ("b", "y")
        assert config.fragment_charges == (1, 2)
        assert config.round_dec_pow == -4
        assert config.max_num_alternative_localizations == 20
        assert config.shuffle_seed is ENVIRONMENT_SEED
        assert config.swathes == ()
        assert not config.disable_decoy_transitions

    def test_normalization(self):
        """Lists become tuples and integer seeds become FixedSeed."""
        config = AssayConfig(
            fragment_types=["y"],
            fragment_charges=[1],
            swathes=[[400, 500]],
            shuffle_seed=42,
        )
        assert config.fragment_types == ("y",)
        assert config.swathes == ((400.0, 500.0),)
        assert config.shuffle_seed == FixedSeed(42)

    def test_legacy_seed_sentinel(self):
        """-1 selects an environment seed."""
        assert AssayConfig(shuffle_seed=-1).shuffle_seed is ENVIRONMENT_SEED


class TestAssayConfigValidation:
    """Test that inconsistent parameters are rejected up front."""

    def test_min_above_max(self):
        with pytest.raises(AssayConfigurationError, match="min_transitions"):
            AssayConfig(min_transitions=7, max_transitions=6)

    def test_overlapping_swathes(self):
        with pytest.raises(AssayConfigurationError):
            AssayConfig(swathes=((400.0, 510.0), (500.0, 600.0)))

    def test_unknown_fragment_type(self):
        with pytest.raises(AssayConfigurationError, match="Unknown fragment types"):
            AssayConfig(fragment_types=("b", "q"))

    def test_non_positive_charge(self):
        with pytest.raises(AssayConfigurationError):
            AssayConfig(fragment_charges=(0, 1))

    def test_inverted_limits(self):
        with pytest.raises(AssayConfigurationError):
            AssayConfig(lower_mz_limit=2000.0, upper_mz_limit=200.0)

    def test_negative_threshold(self):
        with pytest.raises(AssayConfigurationError, match="uis_mz_threshold"):
            AssayConfig(uis_mz_threshold=-0.1)

    def test_localization_cap(self):
        with pytest.raises(AssayConfigurationError):
            AssayConfig(max_num_alternative_localizations=0)

    def test_configuration_error_is_value_error(self):
        """Callers catching ValueError also catch configuration errors."""
        with pytest.raises(ValueError):
            AssayConfig(min_transitions=-1)


class TestAssayConfigHelpers:
    """Test evolve() and acquisition presets."""

    def test_evolve(self):
        """evolve() returns a changed copy."""
        config = AssayConfig()
        changed = config.evolve(uis_mz_threshold=0.01)
        assert changed.uis_mz_threshold == 0.01
        assert config.uis_mz_threshold == 0.05

    def test_evolve_validates(self):
        with pytest.raises(AssayConfigurationError):
            AssayConfig().evolve(min_transitions=10)

    def test_swath_preset(self):
        """SWATH preset has contiguous valid windows."""
        config = AssayConfig.for_acquisition("swath", shuffle_seed=FixedSeed(1))
        assert config.swathes[0] == (400.0, 425.0)
        assert all(a[1] == b[0] for a, b in zip(config.swathes, config.swathes[1:]))
        assert config.shuffle_seed == FixedSeed(1)

    def test_mrm_preset(self):
        """MRM preset uses y ions and no windows."""
        config = AssayConfig.for_acquisition("mrm")
        assert config.fragment_types == ("y",)
        assert config.swathes == ()

    def test_unknown_preset(self):
        with pytest.raises(AssayConfigurationError):
            AssayConfig.for_acquisition("dda")

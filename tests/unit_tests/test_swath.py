"""Tests for precursor isolation window lookup."""

import pytest

from alphauis.assay.swath import NO_SWATH, get_swath, is_in_swath, validate_swathes
from alphauis.exceptions import AssayConfigurationError

SWATHES = [(400.0, 500.0), (500.0, 600.0)]


class TestGetSwath:
    """Test window lookup."""

    def test_lookup(self):
        """Precursors map to the window containing them, -1 otherwise."""
        assert get_swath(SWATHES, 450.0) == 0
        assert get_swath(SWATHES, 550.0) == 1
        assert get_swath(SWATHES, 650.0) == NO_SWATH == -1
        assert get_swath(SWATHES, 399.99) == NO_SWATH

    def test_inclusive_bounds(self):
        """Bounds are inclusive; a shared bound belongs to the first window."""
        assert get_swath(SWATHES, 400.0) == 0
        assert get_swath(SWATHES, 500.0) == 0
        assert get_swath(SWATHES, 600.0) == 1

    def test_no_windows(self):
        """Without windows nothing is contained."""
        assert get_swath([], 450.0) == NO_SWATH


class TestIsInSwath:
    """Test co-isolation of products with their precursor."""

    def test_product_in_own_window(self):
        """A product inside the precursor's window is co-isolated."""
        assert is_in_swath(SWATHES, 450.0, 480.0)
        assert not is_in_swath(SWATHES, 450.0, 550.0)
        assert not is_in_swath(SWATHES, 450.0, 300.0)

    def test_precursor_outside_windows(self):
        """Without a containing window the product is never co-isolated."""
        assert not is_in_swath(SWATHES, 650.0, 650.0)
        assert not is_in_swath([], 450.0, 450.0)


class TestValidateSwathes:
    """Test window validation."""

    def test_valid(self):
        """Sorted, touching or separated windows are fine."""
        validate_swathes(SWATHES)
        validate_swathes([(400.0, 425.0), (430.0, 455.0)])
        validate_swathes([])

    def test_inverted(self):
        """Lower bound above upper bound is rejected."""
        with pytest.raises(AssayConfigurationError, match="inverted"):
            validate_swathes([(500.0, 400.0)])

    def test_overlapping(self):
        """Overlapping windows are rejected."""
        with pytest.raises(AssayConfigurationError):
            validate_swathes([(400.0, 510.0), (500.0, 600.0)])

    def test_unsorted(self):
        """Windows must be in ascending order."""
        with pytest.raises(AssayConfigurationError):
            validate_swathes([(500.0, 600.0), (400.0, 500.0)])

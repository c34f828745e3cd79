"""Tests for Box and PositionSet."""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from mdpair.system import Box, PositionSet, as_position_set


class TestBoxCreation:
    """Test box creation methods."""

    def test_cubic_box(self):
        """Test creating a cubic box."""
        box = Box.cubic(10.0)
        assert box.length == 10.0
        assert np.isclose(box.volume, 1000.0)

    def test_length_coerced_to_float(self):
        """Test integer lengths are stored as floats."""
        box = Box(4)
        assert isinstance(box.length, float)
        assert box.volume == 64.0

    @pytest.mark.parametrize("length", [0.0, -1.0, float("inf"), float("nan")])
    def test_invalid_length(self, length):
        """Test that non-positive or non-finite lengths raise errors."""
        with pytest.raises(ValueError):
            Box(length)


class TestPeriodicBoundaries:
    """Test periodic boundary condition methods."""

    def test_minimum_image_scalar(self):
        """Test minimum image of a single coordinate delta."""
        box = Box.cubic(10.0)

        assert np.isclose(box.minimum_image(1.0), 1.0)
        assert np.isclose(box.minimum_image(8.0), -2.0)
        assert np.isclose(box.minimum_image(-7.0), 3.0)
        assert np.isclose(box.minimum_image(23.0), 3.0)

    def test_minimum_image_vector(self):
        """Test minimum image is applied per axis."""
        box = Box.cubic(10.0)

        dr = box.minimum_image(np.array([8.0, -1.0, 14.0]))
        assert np.allclose(dr, [-2.0, -1.0, 4.0])

    def test_minimum_image_batch(self):
        """Test minimum image for multiple separations."""
        box = Box.cubic(10.0)

        delta = np.array([[-8.0, 0.0, 0.0], [-9.5, 0.0, 0.0]])
        dr = box.minimum_image(delta)
        expected = np.array([[2.0, 0.0, 0.0], [0.5, 0.0, 0.0]])
        assert np.allclose(dr, expected)


class TestBoxImmutability:
    """Test that Box is immutable."""

    def test_frozen_dataclass(self):
        """Test that box attributes cannot be modified."""
        box = Box.cubic(10.0)

        with pytest.raises(FrozenInstanceError):
            box.length = 5.0


class TestPositionSet:
    """Test the per-step position snapshot."""

    def test_from_array_copies(self):
        """Test that the snapshot does not alias the input."""
        raw = np.zeros((3, 3))
        positions = PositionSet.from_array(raw)

        raw[0, 0] = 1.0
        assert positions.coordinates[0, 0] == 0.0
        assert positions.n_atoms == 3
        assert len(positions) == 3

    def test_read_only(self):
        """Test that coordinates cannot be mutated in place."""
        positions = PositionSet.from_array(np.zeros((2, 3)))

        with pytest.raises(ValueError):
            positions.coordinates[0, 0] = 1.0

    def test_frozen(self):
        """Test that the snapshot cannot be rebound."""
        positions = PositionSet.from_array(np.zeros((2, 3)))

        with pytest.raises(FrozenInstanceError):
            positions.coordinates = np.ones((2, 3))

    @pytest.mark.parametrize("shape", [(3,), (2, 2), (2, 3, 1)])
    def test_invalid_shape(self, shape):
        """Test that non-(N, 3) arrays are rejected."""
        with pytest.raises(ValueError, match="shape"):
            PositionSet.from_array(np.zeros(shape))

    def test_non_finite_rejected(self):
        """Test that NaN coordinates are rejected."""
        with pytest.raises(ValueError, match="finite"):
            PositionSet.from_array(np.array([[0.0, np.nan, 0.0]]))

    def test_translated(self):
        """Test translation returns a new shifted snapshot."""
        positions = PositionSet.from_array(np.array([[1.0, 2.0, 3.0]]))
        moved = positions.translated([10.0, 0.0, -10.0])

        np.testing.assert_array_equal(moved.coordinates, [[11.0, 2.0, -7.0]])
        np.testing.assert_array_equal(positions.coordinates, [[1.0, 2.0, 3.0]])

    def test_as_position_set(self):
        """Test snapshots pass through and arrays are wrapped."""
        positions = PositionSet.from_array(np.zeros((2, 3)))

        assert as_position_set(positions) is positions
        assert isinstance(as_position_set(np.zeros((2, 3))), PositionSet)

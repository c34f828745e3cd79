"""Tests for atom ranges and partition validation."""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from mdpair.errors import InvalidPartitionError
from mdpair.parallel import AtomRange, partition_all, partition_atoms, validate_partition


class TestAtomRange:
    """Test the global/local index bijection."""

    def test_size_and_offsets(self):
        """Test basic range properties."""
        atom_range = AtomRange(4, 9)

        assert atom_range.size == 6
        assert len(atom_range) == 6
        assert atom_range.start == 3
        assert atom_range.stop == 9
        assert atom_range.rows == slice(3, 9)
        np.testing.assert_array_equal(atom_range.global_indices(), [3, 4, 5, 6, 7, 8])

    def test_local_index(self):
        """Test local slot numbering starts at 1 for atom lo."""
        atom_range = AtomRange(4, 9)

        assert atom_range.local_index(4) == 1
        assert atom_range.local_index(9) == 6

    def test_bijection(self):
        """Test local_index and global_index are inverse."""
        atom_range = AtomRange(11, 20)

        for global_index in range(11, 21):
            local = atom_range.local_index(global_index)
            assert atom_range.global_index(local) == global_index
        for local in range(1, atom_range.size + 1):
            assert atom_range.local_index(atom_range.global_index(local)) == local

    def test_local_offsets_match_local_index(self):
        """Test the vectorized lookup agrees with the scalar one."""
        atom_range = AtomRange(5, 8)
        zero_based = np.array([4, 5, 6, 7])

        offsets = atom_range.local_offsets(zero_based)
        expected = [atom_range.local_index(int(g) + 1) - 1 for g in zero_based]
        np.testing.assert_array_equal(offsets, expected)

    def test_outside_range_raises(self):
        """Test that foreign atoms have no local slot."""
        atom_range = AtomRange(4, 9)

        with pytest.raises(IndexError):
            atom_range.local_index(3)
        with pytest.raises(IndexError):
            atom_range.global_index(0)
        with pytest.raises(IndexError):
            atom_range.global_index(7)

    def test_contains(self):
        """Test membership."""
        atom_range = AtomRange(4, 9)

        assert 4 in atom_range
        assert 9 in atom_range
        assert 10 not in atom_range
        assert np.int64(5) in atom_range

    def test_empty_range(self):
        """Test that hi = lo - 1 is an empty range."""
        atom_range = AtomRange(5, 4)

        assert atom_range.is_empty
        assert atom_range.global_indices().size == 0
        assert list(atom_range.blocks(3)) == []

    @pytest.mark.parametrize("lo, hi", [(0, 3), (5, 2)])
    def test_invalid_bounds(self, lo, hi):
        """Test that invalid bounds are rejected."""
        with pytest.raises(InvalidPartitionError):
            AtomRange(lo, hi)

    def test_blocks(self):
        """Test splitting into sub-ranges."""
        blocks = list(AtomRange(3, 10).blocks(3))

        assert blocks == [AtomRange(3, 5), AtomRange(6, 8), AtomRange(9, 10)]

    def test_check_within(self):
        """Test that a range past atom N is rejected."""
        AtomRange(1, 10).check_within(10)

        with pytest.raises(InvalidPartitionError):
            AtomRange(1, 11).check_within(10)

    def test_frozen(self):
        """Test that ranges are immutable."""
        atom_range = AtomRange(1, 5)

        with pytest.raises(FrozenInstanceError):
            atom_range.lo = 2


class TestPartitionAtoms:
    """Test block decomposition."""

    def test_single_worker(self):
        """Test one worker owns every atom."""
        assert partition_atoms(100, 1, 0) == AtomRange(1, 100)

    def test_remainder_goes_to_first_ranks(self):
        """Test uneven splits."""
        ranges = partition_all(10, 3)

        assert ranges == [AtomRange(1, 4), AtomRange(5, 7), AtomRange(8, 10)]

    def test_more_workers_than_atoms(self):
        """Test that surplus workers receive empty ranges."""
        ranges = partition_all(2, 4)

        assert [r.size for r in ranges] == [1, 1, 0, 0]
        validate_partition(ranges, 2)

    @pytest.mark.parametrize("n_atoms", [1, 7, 64, 101])
    @pytest.mark.parametrize("n_workers", [1, 2, 3, 8])
    def test_partition_tiles(self, n_atoms, n_workers):
        """Test every generated partition is valid."""
        ranges = partition_all(n_atoms, n_workers)

        validate_partition(ranges, n_atoms)
        assert sum(r.size for r in ranges) == n_atoms

    def test_invalid_arguments(self):
        """Test argument checking."""
        with pytest.raises(ValueError):
            partition_atoms(10, 0, 0)
        with pytest.raises(ValueError):
            partition_atoms(10, 2, 2)
        with pytest.raises(ValueError):
            partition_atoms(-1, 2, 0)


class TestValidatePartition:
    """Test detection of gaps and overlaps."""

    def test_unordered_input(self):
        """Test that rank order does not matter."""
        validate_partition([AtomRange(6, 10), AtomRange(1, 5)], 10)

    def test_overlap(self):
        """Test overlapping ranges."""
        with pytest.raises(InvalidPartitionError, match="overlaps"):
            validate_partition([AtomRange(1, 5), AtomRange(5, 10)], 10)

    def test_gap(self):
        """Test a gap between ranges."""
        with pytest.raises(InvalidPartitionError, match="not assigned"):
            validate_partition([AtomRange(1, 4), AtomRange(6, 10)], 10)

    def test_missing_tail(self):
        """Test atoms past the last range."""
        with pytest.raises(InvalidPartitionError, match="not assigned"):
            validate_partition([AtomRange(1, 8)], 10)

    def test_too_many_atoms(self):
        """Test ranges reaching past atom N."""
        with pytest.raises(InvalidPartitionError, match="system has"):
            validate_partition([AtomRange(1, 12)], 10)

"""Atom-index range decomposition across workers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..errors import InvalidPartitionError


@dataclass(frozen=True)
class AtomRange:
    """
    Inclusive range [lo, hi] of 1-based atom indices owned by one worker.

    Local buffers sized to the range are addressed through
    :meth:`local_index`, the single place where global atom identity is
    mapped onto a buffer slot. An empty range is written as
    ``AtomRange(lo, lo - 1)``.

    Attributes:
        lo: First owned atom (1-based).
        hi: Last owned atom (1-based, inclusive).
    """

    lo: int
    hi: int

    def __post_init__(self) -> None:
        """Validate bounds."""
        if self.lo < 1:
            raise InvalidPartitionError(f"range lower bound must be >= 1, got {self.lo}")
        if self.hi < self.lo - 1:
            raise InvalidPartitionError(
                f"range upper bound {self.hi} is below lower bound {self.lo}"
            )

    @classmethod
    def full(cls, n_atoms: int) -> AtomRange:
        """Range covering every atom of an N-atom system."""
        return cls(1, n_atoms)

    @property
    def size(self) -> int:
        """Number of atoms in the range."""
        return self.hi - self.lo + 1

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    @property
    def start(self) -> int:
        """0-based array offset of the first owned atom."""
        return self.lo - 1

    @property
    def stop(self) -> int:
        """0-based exclusive end offset."""
        return self.hi

    @property
    def rows(self) -> slice:
        """Slice selecting the owned rows of an (N, ...) array."""
        return slice(self.start, self.stop)

    def __contains__(self, global_index: object) -> bool:
        return isinstance(global_index, (int, np.integer)) and (
            self.lo <= global_index <= self.hi
        )

    def __len__(self) -> int:
        return self.size

    def local_index(self, global_index: int) -> int:
        """
        Map a 1-based global atom index to its 1-based local slot.

        Raises:
            IndexError: If the atom is not owned by this range.
        """
        if global_index not in self:
            raise IndexError(f"atom {global_index} is outside range [{self.lo}, {self.hi}]")
        return global_index - self.lo + 1

    def global_index(self, local_index: int) -> int:
        """Inverse of :meth:`local_index`."""
        if not 1 <= local_index <= self.size:
            raise IndexError(f"local slot {local_index} is outside [1, {self.size}]")
        return local_index + self.lo - 1

    def local_offsets(self, zero_based_global: NDArray[np.integer]) -> NDArray[np.integer]:
        """
        Vectorized slot lookup for numpy code.

        Takes 0-based global row indices and returns 0-based buffer rows,
        i.e. ``local_index(g + 1) - 1`` for each entry.
        """
        return np.asarray(zero_based_global) - self.start

    def global_indices(self) -> NDArray[np.integer]:
        """0-based global row indices of the owned atoms."""
        return np.arange(self.start, self.stop, dtype=np.int64)

    def blocks(self, block_size: int) -> Iterator[AtomRange]:
        """Split into consecutive sub-ranges of at most ``block_size`` atoms."""
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {block_size}")
        for lo in range(self.lo, self.hi + 1, block_size):
            yield AtomRange(lo, min(lo + block_size - 1, self.hi))

    def check_within(self, n_atoms: int) -> None:
        """Raise if the range reaches past atom N."""
        if self.hi > n_atoms:
            raise InvalidPartitionError(
                f"range [{self.lo}, {self.hi}] exceeds system of {n_atoms} atoms"
            )


def partition_atoms(n_atoms: int, n_workers: int, rank: int) -> AtomRange:
    """
    Contiguous block decomposition of [1, N].

    The first ``n_atoms % n_workers`` ranks receive one extra atom.

    Args:
        n_atoms: Total number of atoms.
        n_workers: Number of workers.
        rank: Rank of the calling worker.

    Returns:
        The worker's AtomRange (possibly empty).
    """
    if n_workers < 1:
        raise ValueError(f"n_workers must be >= 1, got {n_workers}")
    if not 0 <= rank < n_workers:
        raise ValueError(f"rank {rank} outside [0, {n_workers})")
    if n_atoms < 0:
        raise ValueError(f"n_atoms must be >= 0, got {n_atoms}")

    atoms_per_worker = n_atoms // n_workers
    remainder = n_atoms % n_workers

    if rank < remainder:
        start = rank * (atoms_per_worker + 1)
        end = start + atoms_per_worker + 1
    else:
        start = rank * atoms_per_worker + remainder
        end = start + atoms_per_worker

    return AtomRange(start + 1, end)


def partition_all(n_atoms: int, n_workers: int) -> list[AtomRange]:
    """Ranges for every rank, in rank order."""
    return [partition_atoms(n_atoms, n_workers, rank) for rank in range(n_workers)]


def validate_partition(ranges: Iterable[AtomRange], n_atoms: int) -> None:
    """
    Check that the ranges tile [1, N] with no gaps or overlaps.

    Empty ranges are ignored.

    Raises:
        InvalidPartitionError: On any gap, overlap or out-of-bounds range.
    """
    filled = sorted((r for r in ranges if not r.is_empty), key=lambda r: r.lo)

    expected = 1
    for atom_range in filled:
        if atom_range.lo < expected:
            raise InvalidPartitionError(
                f"range [{atom_range.lo}, {atom_range.hi}] overlaps atoms below {expected}"
            )
        if atom_range.lo > expected:
            raise InvalidPartitionError(
                f"atoms [{expected}, {atom_range.lo - 1}] are not assigned to any worker"
            )
        expected = atom_range.hi + 1

    if expected - 1 > n_atoms:
        raise InvalidPartitionError(
            f"partition covers atoms up to {expected - 1} but system has {n_atoms}"
        )
    if expected - 1 < n_atoms:
        raise InvalidPartitionError(
            f"atoms [{expected}, {n_atoms}] are not assigned to any worker"
        )

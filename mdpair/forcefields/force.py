"""Per-worker force accumulation over a full ordered-pair loop."""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..parallel.partition import AtomRange
from ..system import Box, PositionSet, as_position_set
from .base import ForceProvider
from .kernel import lj_pair_terms, pair_separations, rows_per_batch

logger = logging.getLogger(__name__)


def ordered_pairs(
    atom_range: AtomRange, n_atoms: int
) -> tuple[NDArray[np.integer], NDArray[np.integer]]:
    """
    Every ordered pair (i, j) with i in the range and j != i.

    Both (i, j) and (j, i) appear when both atoms are owned.

    Returns:
        0-based (i_idx, j_idx) arrays of length size * (N - 1).
    """
    owned = atom_range.global_indices()
    i_idx = np.repeat(owned, n_atoms)
    j_idx = np.tile(np.arange(n_atoms, dtype=np.int64), owned.size)
    keep = i_idx != j_idx
    return i_idx[keep], j_idx[keep]


def compute_forces(
    positions: PositionSet | ArrayLike,
    box: Box,
    cutoff: float,
    atom_range: AtomRange,
) -> NDArray[np.floating]:
    """
    Net LJ force on every atom of ``atom_range``.

    Each owned atom interacts with all N - 1 others regardless of which
    worker owns the partner, so the result needs no symmetrization or
    cross-worker exchange.

    Args:
        positions: Snapshot (or (N, 3) array) of all atom positions.
        box: Periodic cubic box.
        cutoff: Cutoff radius; pairs with d >= cutoff are skipped.
        atom_range: Atoms owned by the calling worker.

    Returns:
        New force buffer of shape (atom_range.size, 3); row k is atom
        ``atom_range.lo + k``.

    Raises:
        DegenerateConfigurationError: If two atoms coincide inside the cutoff.
        InvalidPartitionError: If the range exceeds the system size.
    """
    positions = as_position_set(positions)
    n_atoms = positions.n_atoms
    atom_range.check_within(n_atoms)
    if cutoff <= 0.0:
        raise ValueError(f"cutoff must be positive, got {cutoff}")

    forces = np.zeros((atom_range.size, 3), dtype=np.float64)

    for block in atom_range.blocks(rows_per_batch(n_atoms)):
        i_idx, j_idx = ordered_pairs(block, n_atoms)
        dr = pair_separations(positions.coordinates, box, i_idx, j_idx)
        terms = lj_pair_terms(dr, cutoff, pairs=(i_idx, j_idx))
        np.add.at(forces, atom_range.local_offsets(i_idx), terms.force)

    logger.debug(
        "Forces for atoms [%d, %d] of %d computed", atom_range.lo, atom_range.hi, n_atoms
    )
    return forces


class ForceAccumulator(ForceProvider):
    """
    Brute-force LJ forces for one worker's atom range.

    Attributes:
        box: Periodic cubic box.
        cutoff: Cutoff radius.
    """

    def __init__(self, box: Box, cutoff: float) -> None:
        if cutoff <= 0.0:
            raise ValueError(f"cutoff must be positive, got {cutoff}")
        self.box = box
        self.cutoff = cutoff

    def compute(
        self, positions: PositionSet, atom_range: AtomRange
    ) -> NDArray[np.floating]:
        """Compute forces on the atoms of ``atom_range``."""
        return compute_forces(positions, self.box, self.cutoff, atom_range)

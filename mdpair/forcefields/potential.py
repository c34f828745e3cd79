"""
Potential energy, virial pressure and pair-distance histogram.

Each worker walks the strict lower triangle of the pair matrix restricted
to its own rows (i in range, j < i). Because ranges tile [1, N], every
unordered pair is visited by exactly one worker exactly once. The local
sums are then combined with a sum-reduction to a root worker, which is
the only place where the totals are meaningful.

Two conventions are kept as they are in the surrounding simulation code:

- The reduced energy and virial are halved at the root even though the
  triangular walk already counts each pair once.
- Long-range tail corrections are computed and returned, but not applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import HistogramBoundsExceededError
from ..parallel.backends.base import ParallelBackend, PendingReduction
from ..parallel.dispatcher import get_backend
from ..parallel.partition import AtomRange, validate_partition
from ..system import Box, PositionSet, as_position_set
from .kernel import lj_pair_terms, pair_separations, rows_per_batch

logger = logging.getLogger(__name__)

# Histogram increment per visited pair, restoring the (i, j) + (j, i) count
PAIR_COUNT_INCREMENT = 2.0


@dataclass(frozen=True)
class LocalPotential:
    """
    One worker's unreduced contribution.

    Attributes:
        energy: Sum of pair potentials over the worker's pairs.
        virial: Sum of per-axis virial terms over the worker's pairs.
        histogram: Raw pair counts from this call only.
        n_pairs: Number of pairs visited, inside the cutoff or not.
    """

    energy: float
    virial: float
    histogram: NDArray[np.floating]
    n_pairs: int


@dataclass(frozen=True)
class TailCorrection:
    """
    Long-range corrections for the truncated potential.

    These are reported alongside the results and never added to them.

    Attributes:
        potential_shift: Value of the pair potential at the cutoff.
        energy: Tail correction to the potential energy.
        pressure: Tail correction to the pressure.
    """

    potential_shift: float
    energy: float
    pressure: float


@dataclass(frozen=True)
class PotentialResult:
    """
    Outcome of one potential evaluation on one worker.

    Attributes:
        energy: Global potential energy on the root, None elsewhere.
        pressure: Global virial pressure on the root, None elsewhere.
        histogram: Caller's histogram plus this worker's counts (unreduced).
        tail: Tail corrections for this system (not applied).
        local: This worker's unreduced summary.
        is_root: Whether this worker is the reduction root.
    """

    energy: float | None
    pressure: float | None
    histogram: NDArray[np.floating]
    tail: TailCorrection
    local: LocalPotential
    is_root: bool


def default_n_bins(cutoff: float, bin_width: float) -> int:
    """Smallest histogram length that holds every distance below ``cutoff``."""
    return int(np.floor(cutoff / bin_width)) + 1


def triangular_pairs(
    atom_range: AtomRange,
) -> tuple[NDArray[np.integer], NDArray[np.integer]]:
    """
    Pairs (i, j) with i in the range and j in [1, i - 1].

    Returns:
        0-based (i_idx, j_idx) arrays.
    """
    owned = atom_range.global_indices()
    # A 0-based row i has exactly i partners below it
    counts = owned
    offsets = np.cumsum(counts) - counts
    i_idx = np.repeat(owned, counts)
    j_idx = np.arange(int(counts.sum()), dtype=np.int64) - np.repeat(offsets, counts)
    return i_idx, j_idx


def accumulate_local(
    positions: PositionSet | ArrayLike,
    box: Box,
    cutoff: float,
    bin_width: float,
    atom_range: AtomRange,
    n_bins: int,
) -> LocalPotential:
    """
    Walk this worker's triangle and sum energy, virial and bin counts.

    Args:
        positions: Snapshot (or (N, 3) array) of all atom positions.
        box: Periodic cubic box.
        cutoff: Cutoff radius.
        bin_width: Histogram bin width.
        atom_range: Atoms owned by the calling worker.
        n_bins: Histogram length.

    Returns:
        The worker's LocalPotential.

    Raises:
        DegenerateConfigurationError: If two atoms coincide inside the cutoff.
        HistogramBoundsExceededError: If a distance maps past the last bin.
    """
    positions = as_position_set(positions)
    atom_range.check_within(positions.n_atoms)

    energy = 0.0
    virial = 0.0
    n_pairs = 0
    histogram = np.zeros(n_bins, dtype=np.float64)

    for block in atom_range.blocks(rows_per_batch(positions.n_atoms)):
        i_idx, j_idx = triangular_pairs(block)
        if i_idx.size == 0:
            continue
        dr = pair_separations(positions.coordinates, box, i_idx, j_idx)
        terms = lj_pair_terms(dr, cutoff, pairs=(i_idx, j_idx))

        energy += float(np.sum(terms.energy))
        virial += float(np.sum(terms.virial))
        n_pairs += int(i_idx.size)

        distances = terms.distance[terms.inside]
        bins = np.floor(distances / bin_width).astype(np.int64)
        if bins.size and bins.max() >= n_bins:
            k = int(np.argmax(bins))
            raise HistogramBoundsExceededError(int(bins[k]), n_bins, float(distances[k]))
        histogram += PAIR_COUNT_INCREMENT * np.bincount(bins, minlength=n_bins)

    logger.debug(
        "Visited %d pairs for atoms [%d, %d]", n_pairs, atom_range.lo, atom_range.hi
    )
    return LocalPotential(
        energy=energy, virial=virial, histogram=histogram, n_pairs=n_pairs
    )


def tail_corrections(n_atoms: int, box: Box, cutoff: float) -> TailCorrection:
    """Long-range LJ corrections for a homogeneous fluid beyond ``cutoff``."""
    volume = box.volume
    rho = n_atoms / volume
    facte = (8.0 / 3.0) * np.pi * n_atoms * rho
    factp = (16.0 / 3.0) * np.pi * rho**2

    return TailCorrection(
        potential_shift=4.0 * (1.0 / cutoff**12 - 1.0 / cutoff**6),
        energy=float(facte * ((1.0 / 3.0) / cutoff**9 - 1.0 / cutoff**3)),
        pressure=float(factp * ((2.0 / 3.0) / cutoff**9 - 1.0 / cutoff**3)),
    )


def contribute_potential(
    local: LocalPotential, backend: ParallelBackend, root: int = 0
) -> PendingReduction:
    """Phase one: post this worker's energy and virial to the reduction."""
    return backend.ireduce_sum(np.array([local.energy, local.virial]), root=root)


def reduce_potential(
    local: LocalPotential,
    backend: ParallelBackend,
    box: Box,
    root: int = 0,
) -> tuple[float | None, float | None]:
    """
    Sum-reduce energy and virial to ``root`` and normalize there.

    Every worker must call this once per evaluation; a worker that does not
    leaves its peers blocked.

    Returns:
        (energy, pressure) on the root, (None, None) elsewhere.
    """
    totals = contribute_potential(local, backend, root).wait()
    if totals is None:
        return None, None

    energy = float(totals[0]) / 2.0
    pressure = float(totals[1]) / 2.0 / (3.0 * box.volume)
    return energy, pressure


def compute_potential(
    positions: PositionSet | ArrayLike,
    box: Box,
    cutoff: float,
    bin_width: float,
    atom_range: AtomRange,
    histogram: ArrayLike | None = None,
    backend: ParallelBackend | None = None,
    root: int = 0,
    check_partition: bool = True,
) -> PotentialResult:
    """
    Global potential energy and pressure, plus this worker's histogram.

    Args:
        positions: Snapshot (or (N, 3) array) of all atom positions.
        box: Periodic cubic box.
        cutoff: Cutoff radius.
        bin_width: Histogram bin width.
        atom_range: Atoms owned by the calling worker.
        histogram: Running histogram to add to. Not modified; its length
            fixes the number of bins. Defaults to a zeroed histogram of
            ``default_n_bins(cutoff, bin_width)`` bins.
        backend: Parallel backend; defaults to the global default.
        root: Rank receiving the reduced totals.
        check_partition: All-gather every worker's range and verify that
            they tile [1, N] before any work is done.

    Returns:
        PotentialResult for this worker.

    Raises:
        InvalidPartitionError: If the ranges do not tile [1, N].
        DegenerateConfigurationError: If two atoms coincide inside the cutoff.
        HistogramBoundsExceededError: If a distance maps past the last bin.
    """
    positions = as_position_set(positions)
    backend = get_backend(backend)
    backend.check_root(root)
    if cutoff <= 0.0:
        raise ValueError(f"cutoff must be positive, got {cutoff}")
    if bin_width <= 0.0:
        raise ValueError(f"bin_width must be positive, got {bin_width}")

    if histogram is None:
        histogram = np.zeros(default_n_bins(cutoff, bin_width), dtype=np.float64)
    else:
        histogram = np.array(histogram, dtype=np.float64)
        if histogram.ndim != 1 or histogram.size == 0:
            raise ValueError("histogram must be a non-empty 1-D array")

    n_atoms = positions.n_atoms
    if check_partition and backend.n_workers > 1:
        validate_partition(backend.allgather(atom_range), n_atoms)
    else:
        atom_range.check_within(n_atoms)

    local = accumulate_local(
        positions, box, cutoff, bin_width, atom_range, n_bins=histogram.size
    )
    energy, pressure = reduce_potential(local, backend, box, root)

    return PotentialResult(
        energy=energy,
        pressure=pressure,
        histogram=histogram + local.histogram,
        tail=tail_corrections(n_atoms, box, cutoff),
        local=local,
        is_root=backend.rank == root,
    )


class PotentialAccumulator:
    """
    Potential, pressure and histogram evaluation bound to one backend.

    Attributes:
        box: Periodic cubic box.
        cutoff: Cutoff radius.
        bin_width: Histogram bin width.
        n_bins: Histogram length used when no histogram is passed in.
        backend: Parallel backend.
        root: Rank receiving the reduced totals.
        check_partition: Verify the partition on every call.
    """

    def __init__(
        self,
        box: Box,
        cutoff: float,
        bin_width: float,
        n_bins: int | None = None,
        backend: ParallelBackend | None = None,
        root: int = 0,
        check_partition: bool = True,
    ) -> None:
        if cutoff <= 0.0:
            raise ValueError(f"cutoff must be positive, got {cutoff}")
        if bin_width <= 0.0:
            raise ValueError(f"bin_width must be positive, got {bin_width}")
        self.box = box
        self.cutoff = cutoff
        self.bin_width = bin_width
        self.n_bins = n_bins if n_bins is not None else default_n_bins(cutoff, bin_width)
        if self.n_bins < 1:
            raise ValueError(f"n_bins must be >= 1, got {self.n_bins}")
        self.backend = get_backend(backend)
        self.backend.check_root(root)
        self.root = root
        self.check_partition = check_partition

    def new_histogram(self) -> NDArray[np.floating]:
        """Zeroed histogram of the configured length."""
        return np.zeros(self.n_bins, dtype=np.float64)

    def compute(
        self,
        positions: PositionSet,
        atom_range: AtomRange,
        histogram: ArrayLike | None = None,
    ) -> PotentialResult:
        """Evaluate potential, pressure and histogram for one step."""
        if histogram is None:
            histogram = self.new_histogram()
        return compute_potential(
            positions,
            self.box,
            self.cutoff,
            self.bin_width,
            atom_range,
            histogram=histogram,
            backend=self.backend,
            root=self.root,
            check_partition=self.check_partition,
        )

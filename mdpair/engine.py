"""Per-step driver joining partition, force and potential evaluation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import EvaluationConfig
from .forcefields import ForceAccumulator, PotentialAccumulator, PotentialResult
from .parallel import AtomRange, ParallelBackend, get_backend
from .system import PositionSet, as_position_set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    """
    Everything one worker produces for one step.

    Attributes:
        atom_range: Atoms owned by this worker.
        forces: Net force on each owned atom, shape (atom_range.size, 3).
        potential: Energy, pressure and histogram for this worker.
    """

    atom_range: AtomRange
    forces: NDArray[np.floating]
    potential: PotentialResult


class PairEvaluator:
    """
    Evaluate LJ forces and potential for one worker of an SPMD group.

    The time-integration loop hands in a fresh snapshot every step. Every
    worker of the group must call :meth:`potential` (or :meth:`evaluate`)
    the same number of times, since each call ends in a collective.

    Example usage:
        evaluator = PairEvaluator(config, n_atoms=len(positions))
        result = evaluator.evaluate(positions)
        if result.potential.is_root:
            print(result.potential.energy, result.potential.pressure)

    Attributes:
        config: Evaluation parameters.
        backend: Parallel backend of this worker.
        n_atoms: Number of atoms in the system.
        atom_range: Atoms owned by this worker.
    """

    def __init__(
        self,
        config: EvaluationConfig,
        n_atoms: int,
        backend: ParallelBackend | None = None,
        atom_range: AtomRange | None = None,
    ) -> None:
        """
        Initialize evaluator.

        Args:
            config: Evaluation parameters.
            n_atoms: Number of atoms in the system.
            backend: Parallel backend. Defaults to the one named in the
                config.
            atom_range: Atoms owned by this worker. Defaults to the
                backend's contiguous block partition.
        """
        self.config = config
        self.backend = backend if backend is not None else get_backend(config.backend)
        self.n_atoms = n_atoms
        self.atom_range = (
            atom_range if atom_range is not None else self.backend.partition_atoms(n_atoms)
        )
        self.atom_range.check_within(n_atoms)

        box = config.box
        self._forces = ForceAccumulator(box, config.cutoff)
        self._potential = PotentialAccumulator(
            box,
            config.cutoff,
            config.bin_width,
            n_bins=config.n_bins,
            backend=self.backend,
            root=config.root,
            check_partition=config.check_partition,
        )

        logger.debug(
            "Rank %d of %d owns atoms [%d, %d]",
            self.backend.rank,
            self.backend.n_workers,
            self.atom_range.lo,
            self.atom_range.hi,
        )

    def _snapshot(self, positions: PositionSet | ArrayLike) -> PositionSet:
        positions = as_position_set(positions)
        if positions.n_atoms != self.n_atoms:
            raise ValueError(
                f"expected {self.n_atoms} positions, got {positions.n_atoms}"
            )
        return positions

    def new_histogram(self) -> NDArray[np.floating]:
        """Zeroed histogram sized for the configured cutoff and bin width."""
        return self._potential.new_histogram()

    def forces(self, positions: PositionSet | ArrayLike) -> NDArray[np.floating]:
        """Net force on each owned atom; purely local."""
        return self._forces.compute(self._snapshot(positions), self.atom_range)

    def potential(
        self,
        positions: PositionSet | ArrayLike,
        histogram: ArrayLike | None = None,
    ) -> PotentialResult:
        """Energy and pressure (root only) plus this worker's histogram."""
        return self._potential.compute(
            self._snapshot(positions), self.atom_range, histogram
        )

    def evaluate(
        self,
        positions: PositionSet | ArrayLike,
        histogram: ArrayLike | None = None,
    ) -> StepResult:
        """Forces and potential for one step from a single snapshot."""
        snapshot = self._snapshot(positions)
        forces = self._forces.compute(snapshot, self.atom_range)
        potential = self._potential.compute(snapshot, self.atom_range, histogram)
        return StepResult(atom_range=self.atom_range, forces=forces, potential=potential)

    def gather_forces(self, local_forces: NDArray[np.floating]) -> NDArray[np.floating]:
        """
        Assemble the full (N, 3) force array on every worker.

        Collective: every worker must call it.
        """
        if local_forces.shape != (self.atom_range.size, 3):
            raise ValueError(
                f"local forces shape {local_forces.shape} != ({self.atom_range.size}, 3)"
            )
        pieces = self.backend.allgather((self.atom_range, local_forces))

        forces = np.zeros((self.n_atoms, 3), dtype=np.float64)
        for atom_range, block in pieces:
            forces[atom_range.rows] = block
        return forces

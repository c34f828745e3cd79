"""Abstract base class for parallel backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..partition import AtomRange, partition_atoms


class PendingReduction:
    """
    Handle for a sum-reduction that has been contributed to but not read.

    Contributing is the first phase and never blocks. :meth:`wait` is the
    second phase: it blocks until every worker has contributed and returns
    the global sum on the root, None elsewhere.
    """

    def __init__(self, complete: Callable[[], NDArray[np.floating] | None]) -> None:
        self._complete = complete
        self._done = False
        self._value: NDArray[np.floating] | None = None

    @classmethod
    def completed(cls, value: NDArray[np.floating] | None) -> PendingReduction:
        """A reduction whose result is already known."""
        pending = cls(lambda: value)
        pending.wait()
        return pending

    @property
    def done(self) -> bool:
        return self._done

    def wait(self) -> NDArray[np.floating] | None:
        """Block until the reduction completes and return its value."""
        if not self._done:
            self._value = self._complete()
            self._done = True
        return self._value


class ParallelBackend(ABC):
    """
    Abstract base class for parallelization backends.

    Every worker of an SPMD group holds one backend instance and calls the
    same collectives in the same order. A worker that skips a collective
    stalls its peers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return backend name."""
        ...

    @property
    @abstractmethod
    def n_workers(self) -> int:
        """Return number of parallel workers."""
        ...

    @property
    @abstractmethod
    def rank(self) -> int:
        """Return rank of current worker (0 for serial)."""
        ...

    @property
    def is_root(self) -> bool:
        """Check if this is the root process."""
        return self.rank == 0

    @abstractmethod
    def ireduce_sum(
        self,
        local_data: ArrayLike,
        root: int = 0,
    ) -> PendingReduction:
        """
        Contribute local data to a sum-reduction without blocking.

        Args:
            local_data: Local data to reduce.
            root: Rank that receives the sum.

        Returns:
            Handle whose ``wait()`` yields the sum on root, None elsewhere.
        """
        ...

    @abstractmethod
    def allgather(self, obj: Any) -> list[Any]:
        """
        Gather one picklable object from every worker to every worker.

        Returns:
            List of objects in rank order.
        """
        ...

    @abstractmethod
    def barrier(self) -> None:
        """Synchronize all workers."""
        ...

    def reduce_sum(
        self,
        local_data: ArrayLike,
        root: int = 0,
    ) -> NDArray[np.floating] | None:
        """
        Blocking sum-reduce to root.

        Returns:
            Reduced sum on root, None on other ranks.
        """
        return self.ireduce_sum(local_data, root=root).wait()

    def check_root(self, root: int) -> None:
        """Raise if ``root`` is not a valid rank."""
        if not 0 <= root < self.n_workers:
            raise ValueError(f"root {root} outside [0, {self.n_workers})")

    def partition_atoms(self, n_atoms: int) -> AtomRange:
        """
        Get atom range for this worker.

        Args:
            n_atoms: Total number of atoms.

        Returns:
            This worker's inclusive 1-based AtomRange.
        """
        return partition_atoms(n_atoms, self.n_workers, self.rank)

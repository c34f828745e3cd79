"""Serial (single-process) backend."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ParallelBackend, PendingReduction


class SerialBackend(ParallelBackend):
    """
    Serial backend for single-process execution.

    This is the default backend and provides a reference implementation.
    Collectives involve a single worker and complete immediately.
    """

    @property
    def name(self) -> str:
        """Return backend name."""
        return "serial"

    @property
    def n_workers(self) -> int:
        """Return number of parallel workers."""
        return 1

    @property
    def rank(self) -> int:
        """Return rank of current process."""
        return 0

    def ireduce_sum(
        self,
        local_data: ArrayLike,
        root: int = 0,
    ) -> PendingReduction:
        """Reduction over one worker is the local data itself."""
        self.check_root(root)
        return PendingReduction.completed(np.array(local_data, dtype=np.float64))

    def allgather(self, obj: Any) -> list[Any]:
        """Allgather over one worker."""
        return [obj]

    def barrier(self) -> None:
        """Barrier is a no-op in serial."""
        pass

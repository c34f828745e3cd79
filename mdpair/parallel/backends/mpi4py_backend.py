"""MPI backend using mpi4py."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ParallelBackend, PendingReduction

if TYPE_CHECKING:
    from mpi4py import MPI as MPI_TYPE


class MPI4PyBackend(ParallelBackend):
    """
    MPI backend using mpi4py for distributed-memory parallelism.

    This backend requires mpi4py to be installed and the program
    to be launched with mpirun/mpiexec.

    Example:
        mpirun -n 4 python examples/run_mpi_evaluation.py
    """

    def __init__(self, comm: MPI_TYPE.Comm | None = None) -> None:
        """
        Initialize MPI backend.

        Args:
            comm: Communicator to use. Defaults to COMM_WORLD.
        """
        try:
            from mpi4py import MPI
        except ImportError as e:
            raise ImportError(
                "mpi4py is required for MPI backend. Install with: pip install mpi4py"
            ) from e

        self._MPI = MPI
        self._comm = comm if comm is not None else MPI.COMM_WORLD
        self._rank = self._comm.Get_rank()
        self._size = self._comm.Get_size()

    @property
    def name(self) -> str:
        """Return backend name."""
        return "mpi4py"

    @property
    def n_workers(self) -> int:
        """Return number of MPI processes."""
        return self._size

    @property
    def rank(self) -> int:
        """Return MPI rank of current process."""
        return self._rank

    @property
    def comm(self) -> MPI_TYPE.Comm:
        """Return MPI communicator."""
        return self._comm

    def ireduce_sum(
        self,
        local_data: ArrayLike,
        root: int = 0,
    ) -> PendingReduction:
        """
        Post a non-blocking sum-reduction to root.

        Args:
            local_data: Local data to reduce.
            root: Rank of the root process.

        Returns:
            Handle completing with the sum on root, None elsewhere.
        """
        self.check_root(root)
        sendbuf = np.ascontiguousarray(local_data, dtype=np.float64)
        recvbuf = np.zeros_like(sendbuf)
        request = self._comm.Ireduce(sendbuf, recvbuf, op=self._MPI.SUM, root=root)

        def complete() -> np.ndarray | None:
            request.Wait()
            if self._rank == root:
                return recvbuf
            return None

        return PendingReduction(complete)

    def allgather(self, obj: Any) -> list[Any]:
        """Gather a picklable object from all ranks to all ranks."""
        return self._comm.allgather(obj)

    def barrier(self) -> None:
        """Synchronize all MPI processes."""
        self._comm.Barrier()

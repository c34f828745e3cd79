"""In-process SPMD backend: N workers on threads sharing a rendezvous."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ...errors import ReductionProtocolError
from .base import ParallelBackend, PendingReduction

logger = logging.getLogger(__name__)


class _Rendezvous:
    """Shared mailbox and barrier for one group of thread workers."""

    def __init__(self, n_workers: int, timeout: float | None) -> None:
        self.n_workers = n_workers
        self._barrier = threading.Barrier(n_workers, timeout=timeout)
        self._lock = threading.Lock()
        self._contributions: dict[int, list[Any]] = {}

    def wait(self) -> None:
        try:
            self._barrier.wait()
        except threading.BrokenBarrierError as e:
            raise ReductionProtocolError(
                "a peer worker failed or timed out before reaching the collective"
            ) from e

    def abort(self) -> None:
        self._barrier.abort()

    def contribute(self, seq: int, rank: int, value: Any) -> None:
        with self._lock:
            slots = self._contributions.setdefault(seq, [None] * self.n_workers)
            slots[rank] = value

    def collect(self, seq: int) -> list[Any]:
        """Return every worker's contribution to collective ``seq``."""
        self.wait()
        with self._lock:
            values = list(self._contributions[seq])
        # Second barrier so nobody drops the slot before all have read it
        self.wait()
        with self._lock:
            self._contributions.pop(seq, None)
        return values


class ThreadBackend(ParallelBackend):
    """
    One worker's view of a :class:`ThreadGroup`.

    Collectives must be posted in the same order on every worker, and
    pending reductions waited on in posting order.
    """

    def __init__(self, rendezvous: _Rendezvous, rank: int) -> None:
        self._rendezvous = rendezvous
        self._rank = rank
        self._seq = itertools.count()

    @property
    def name(self) -> str:
        """Return backend name."""
        return "threads"

    @property
    def n_workers(self) -> int:
        """Return number of workers in the group."""
        return self._rendezvous.n_workers

    @property
    def rank(self) -> int:
        """Return rank of this worker."""
        return self._rank

    def ireduce_sum(
        self,
        local_data: ArrayLike,
        root: int = 0,
    ) -> PendingReduction:
        """
        Deposit local data and return a handle for the rank-ordered sum.

        Args:
            local_data: Local data to reduce.
            root: Rank that receives the sum.
        """
        self.check_root(root)
        seq = next(self._seq)
        self._rendezvous.contribute(
            seq, self._rank, np.array(local_data, dtype=np.float64)
        )

        def complete() -> NDArray[np.floating] | None:
            values = self._rendezvous.collect(seq)
            if self._rank != root:
                return None
            total = values[0].copy()
            for value in values[1:]:
                total += value
            return total

        return PendingReduction(complete)

    def allgather(self, obj: Any) -> list[Any]:
        """Gather one object from every worker, in rank order."""
        seq = next(self._seq)
        self._rendezvous.contribute(seq, self._rank, obj)
        return self._rendezvous.collect(seq)

    def barrier(self) -> None:
        """Synchronize all workers of the group."""
        self._rendezvous.wait()


class ThreadGroup:
    """
    Run the same function on N in-process workers concurrently.

    Each call to :meth:`run` starts a fresh group, so a failure in one run
    does not poison the next.

    Example:
        >>> group = ThreadGroup(4)
        >>> ranks = group.run(lambda backend: backend.rank)
        >>> ranks
        [0, 1, 2, 3]
    """

    def __init__(self, n_workers: int, timeout: float | None = None) -> None:
        """
        Initialize the group.

        Args:
            n_workers: Number of workers.
            timeout: Seconds a worker may wait in a collective before the
                group is declared broken. None waits forever.
        """
        if n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {n_workers}")
        self.n_workers = n_workers
        self.timeout = timeout

    def backends(self) -> list[ThreadBackend]:
        """Create connected backends for one group run."""
        rendezvous = _Rendezvous(self.n_workers, self.timeout)
        return [ThreadBackend(rendezvous, rank) for rank in range(self.n_workers)]

    def run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> list[Any]:
        """
        Call ``func(backend, *args, **kwargs)`` once per rank.

        Returns:
            Return values in rank order.

        Raises:
            The first error raised by a worker. Errors that are only a
            consequence of a peer failing (ReductionProtocolError) are
            reported only if nothing else went wrong.
        """
        backends = self.backends()
        rendezvous = backends[0]._rendezvous

        def run_one(backend: ThreadBackend) -> Any:
            try:
                return func(backend, *args, **kwargs)
            except BaseException:
                rendezvous.abort()
                raise

        logger.debug("Starting thread group with %d workers", self.n_workers)
        with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
            futures = [executor.submit(run_one, backend) for backend in backends]
            errors = [future.exception() for future in futures]

        failures = [e for e in errors if e is not None]
        if failures:
            primary = next(
                (e for e in failures if not isinstance(e, ReductionProtocolError)),
                failures[0],
            )
            raise primary

        return [future.result() for future in futures]

"""Parallelization infrastructure for pair evaluation."""

from .backends.base import ParallelBackend, PendingReduction
from .backends.serial import SerialBackend
from .backends.threads import ThreadBackend, ThreadGroup
from .dispatcher import get_backend, set_default_backend
from .partition import AtomRange, partition_all, partition_atoms, validate_partition

__all__ = [
    "ParallelBackend",
    "PendingReduction",
    "SerialBackend",
    "ThreadBackend",
    "ThreadGroup",
    "AtomRange",
    "partition_atoms",
    "partition_all",
    "validate_partition",
    "get_backend",
    "set_default_backend",
]

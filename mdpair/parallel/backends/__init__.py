"""Parallel backend implementations."""

from .base import ParallelBackend, PendingReduction
from .serial import SerialBackend
from .threads import ThreadBackend, ThreadGroup

__all__ = [
    "ParallelBackend",
    "PendingReduction",
    "SerialBackend",
    "ThreadBackend",
    "ThreadGroup",
]

"""Backend dispatcher for selecting and managing parallel backends."""

from __future__ import annotations

import logging
import os
from typing import Literal

from .backends.base import ParallelBackend
from .backends.serial import SerialBackend

logger = logging.getLogger(__name__)

# Global default backend
_default_backend: ParallelBackend | None = None

# Available backend types
BackendType = Literal["serial", "mpi4py"]

# Environment variables set by common MPI launchers
_MPI_ENV_VARS = (
    "OMPI_COMM_WORLD_SIZE",  # OpenMPI
    "PMI_SIZE",  # MPICH
    "SLURM_NTASKS",  # SLURM
    "PBS_NP",  # PBS
)


def get_backend(
    backend: BackendType | ParallelBackend | None = None,
) -> ParallelBackend:
    """
    Get a parallel backend instance.

    Args:
        backend: Backend specification. Can be:
            - None: Use default backend (serial if not set)
            - String: Create backend by name
            - ParallelBackend: Use provided instance directly

    Returns:
        ParallelBackend instance.

    Examples:
        >>> backend = get_backend()  # Default (serial)
        >>> backend = get_backend("mpi4py")
    """
    global _default_backend

    # Use provided backend instance directly
    if isinstance(backend, ParallelBackend):
        return backend

    # Use default if None
    if backend is None:
        if _default_backend is None:
            _default_backend = SerialBackend()
        return _default_backend

    # Create backend by name
    return create_backend(backend)


def create_backend(name: BackendType) -> ParallelBackend:
    """
    Create a parallel backend by name.

    Thread backends are not created here: they only make sense as a group,
    see :class:`~mdpair.parallel.ThreadGroup`.

    Args:
        name: Backend name.

    Returns:
        ParallelBackend instance.

    Raises:
        ValueError: If backend name is unknown.
        ImportError: If required package is not installed.
    """
    if name == "serial":
        backend: ParallelBackend = SerialBackend()

    elif name == "mpi4py":
        from .backends.mpi4py_backend import MPI4PyBackend

        backend = MPI4PyBackend()

    else:
        raise ValueError(f"Unknown backend: {name}. Available: serial, mpi4py")

    logger.info(
        "Created %s backend (rank %d of %d)",
        backend.name,
        backend.rank,
        backend.n_workers,
    )
    return backend


def set_default_backend(
    backend: BackendType | ParallelBackend,
) -> ParallelBackend:
    """
    Set the default parallel backend.

    Args:
        backend: Backend specification (name or instance).

    Returns:
        The new default backend.
    """
    global _default_backend

    if isinstance(backend, ParallelBackend):
        _default_backend = backend
    else:
        _default_backend = create_backend(backend)

    return _default_backend


def reset_default_backend() -> None:
    """Reset default backend to None (will use serial on next get)."""
    global _default_backend
    _default_backend = None


def detect_best_backend() -> BackendType:
    """
    Detect the best available backend.

    Returns "mpi4py" when launched under an MPI launcher with mpi4py
    importable, otherwise "serial".
    """
    for var in _MPI_ENV_VARS:
        if var in os.environ:
            try:
                from mpi4py import MPI  # noqa: F401

                return "mpi4py"
            except ImportError:
                logger.warning(
                    "%s is set but mpi4py is not installed; running serially", var
                )
            break

    return "serial"


def auto_backend() -> ParallelBackend:
    """Automatically select and create the best backend."""
    return create_backend(detect_best_backend())

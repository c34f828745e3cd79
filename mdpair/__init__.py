"""
mdpair - Brute-force Lennard-Jones force and potential evaluation.

Design Principles:
- All-pairs LJ kernel with a hard cutoff, reduced units
- Atom-index range decomposition across SPMD workers
- Explicit two-phase sum-reduction of energy and pressure
- Immutable per-step position snapshots

Quick Start:
    >>> import numpy as np
    >>> from mdpair import EvaluationConfig, PairEvaluator
    >>> config = EvaluationConfig(box_length=10.0, cutoff=2.5, bin_width=0.1)
    >>> positions = np.array([[0.0, 0.0, 0.0], [1.5, 0.0, 0.0]])
    >>> result = PairEvaluator(config, n_atoms=2).evaluate(positions)
    >>> print(f"Potential energy: {result.potential.energy:.4f}")
"""

__version__ = "0.1.0"

from .config import EvaluationConfig, load_config
from .engine import PairEvaluator, StepResult
from .errors import (
    DegenerateConfigurationError,
    HistogramBoundsExceededError,
    InvalidPartitionError,
    MDPairError,
    ReductionProtocolError,
)
from .forcefields import (
    ForceAccumulator,
    PotentialAccumulator,
    PotentialResult,
    compute_forces,
    compute_potential,
)
from .parallel import AtomRange, ThreadGroup, get_backend
from .system import Box, PositionSet

__all__ = [
    "EvaluationConfig",
    "load_config",
    "PairEvaluator",
    "StepResult",
    "MDPairError",
    "DegenerateConfigurationError",
    "HistogramBoundsExceededError",
    "InvalidPartitionError",
    "ReductionProtocolError",
    "ForceAccumulator",
    "PotentialAccumulator",
    "PotentialResult",
    "compute_forces",
    "compute_potential",
    "AtomRange",
    "ThreadGroup",
    "get_backend",
    "Box",
    "PositionSet",
]

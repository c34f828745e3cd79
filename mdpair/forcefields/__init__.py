"""Lennard-Jones pair kernel and per-worker accumulators."""

from .base import ForceProvider
from .force import ForceAccumulator, compute_forces, ordered_pairs
from .kernel import (
    PairContribution,
    PairTerms,
    evaluate_pair,
    lj_pair_terms,
    rows_per_batch,
)
from .potential import (
    LocalPotential,
    PotentialAccumulator,
    PotentialResult,
    TailCorrection,
    compute_potential,
    reduce_potential,
    tail_corrections,
    triangular_pairs,
)

__all__ = [
    "ForceProvider",
    "ForceAccumulator",
    "compute_forces",
    "ordered_pairs",
    "PairContribution",
    "PairTerms",
    "evaluate_pair",
    "lj_pair_terms",
    "rows_per_batch",
    "LocalPotential",
    "PotentialAccumulator",
    "PotentialResult",
    "TailCorrection",
    "compute_potential",
    "reduce_potential",
    "tail_corrections",
    "triangular_pairs",
]

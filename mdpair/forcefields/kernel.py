"""Lennard-Jones pair kernel in reduced units (epsilon = sigma = 1)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import DegenerateConfigurationError
from ..system import Box

# Upper bound on pairs evaluated per vectorized batch
PAIRS_PER_BATCH = 1 << 21


@dataclass(frozen=True)
class PairTerms:
    """
    LJ terms for a batch of pairs.

    Pairs at or beyond the cutoff carry zeros in every field except
    ``distance``.

    Attributes:
        distance: Minimum-image pair distance, shape (M,).
        inside: Mask of pairs with distance < cutoff, shape (M,).
        du: Force scale 48/d^14 - 24/d^8, shape (M,).
        energy: Pair potential 4 (1/d^12 - 1/d^6), shape (M,).
        force: Force on the first atom of each pair, du * dr, shape (M, 3).
        virial: Sum of the per-axis terms du * delta_axis, shape (M,).
    """

    distance: NDArray[np.floating]
    inside: NDArray[np.bool_]
    du: NDArray[np.floating]
    energy: NDArray[np.floating]
    force: NDArray[np.floating]
    virial: NDArray[np.floating]


@dataclass(frozen=True)
class PairContribution:
    """LJ contribution of a single pair (i, j) to atom i."""

    distance: float
    inside: bool
    energy: float
    virial: float
    force: NDArray[np.floating]


def rows_per_batch(n_atoms: int, pair_budget: int | None = None) -> int:
    """Owned rows per batch so that rows * n_atoms stays within the pair budget."""
    budget = PAIRS_PER_BATCH if pair_budget is None else pair_budget
    return max(1, budget // max(n_atoms, 1))

def pair_separations(
    coordinates: NDArray[np.floating],
    box: Box,
    i_idx: NDArray[np.integer],
    j_idx: NDArray[np.integer],
) -> NDArray[np.floating]:
    """
    Minimum-image separation r_i - r_j for arrays of 0-based indices.

    Returns:
        Separation vectors, shape (M, 3).
    """
    return box.minimum_image(coordinates[i_idx] - coordinates[j_idx])


def _raise_degenerate(
    mask: NDArray[np.bool_],
    distance: NDArray[np.floating],
    pairs: tuple[NDArray[np.integer], NDArray[np.integer]] | None,
) -> None:
    k = int(np.argmax(mask))
    pair = None
    if pairs is not None:
        pair = (int(pairs[0][k]) + 1, int(pairs[1][k]) + 1)
    raise DegenerateConfigurationError(pair, float(distance[k]))


def lj_pair_terms(
    dr: ArrayLike,
    cutoff: float,
    pairs: tuple[NDArray[np.integer], NDArray[np.integer]] | None = None,
) -> PairTerms:
    """
    Evaluate the truncated LJ potential for a batch of separations.

    The cutoff is hard: no shift or smoothing is applied, and a pair at
    exactly ``cutoff`` contributes nothing.

    Args:
        dr: Minimum-imaged separation vectors r_i - r_j, shape (M, 3).
        cutoff: Cutoff radius.
        pairs: Optional 0-based (i_idx, j_idx) arrays used only to name the
            offending atoms in errors.

    Returns:
        PairTerms for every separation.

    Raises:
        DegenerateConfigurationError: If any pair inside the cutoff is at zero
            separation, or so close that its terms overflow.
    """
    dr = np.asarray(dr, dtype=np.float64).reshape(-1, 3)
    distance = np.sqrt(np.sum(dr**2, axis=1))
    inside = distance < cutoff

    # Outside pairs get a dummy distance; their terms are masked to zero
    d = np.where(inside, distance, 1.0)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        du = np.where(inside, 48.0 / d**14 - 24.0 / d**8, 0.0)
        energy = np.where(inside, 4.0 * (1.0 / d**12 - 1.0 / d**6), 0.0)
        force = du[:, np.newaxis] * dr
        virial = du * dr[:, 0] + du * dr[:, 1] + du * dr[:, 2]

    # d == 0 and separations small enough for d**14 to underflow both diverge
    diverged = ~(
        np.isfinite(du)
        & np.isfinite(energy)
        & np.isfinite(virial)
        & np.all(np.isfinite(force), axis=1)
    )
    if np.any(diverged):
        _raise_degenerate(diverged, distance, pairs)

    return PairTerms(
        distance=distance,
        inside=inside,
        du=du,
        energy=energy,
        force=force,
        virial=virial,
    )


def evaluate_pair(
    r_i: ArrayLike,
    r_j: ArrayLike,
    box: Box,
    cutoff: float,
) -> PairContribution:
    """
    LJ contribution of atom j to atom i.

    Args:
        r_i: Position of atom i, shape (3,).
        r_j: Position of atom j, shape (3,).
        box: Periodic box used for the minimum image.
        cutoff: Cutoff radius.

    Returns:
        PairContribution with the force acting on atom i.
    """
    dr = box.minimum_image(np.asarray(r_i, dtype=np.float64) - np.asarray(r_j))
    terms = lj_pair_terms(dr, cutoff)
    return PairContribution(
        distance=float(terms.distance[0]),
        inside=bool(terms.inside[0]),
        energy=float(terms.energy[0]),
        virial=float(terms.virial[0]),
        force=terms.force[0],
    )

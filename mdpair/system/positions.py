"""Immutable per-step position snapshot."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class PositionSet:
    """
    Read-only snapshot of atom positions for one evaluation step.

    Every worker evaluates forces and potential from the same snapshot.
    The wrapped array is flagged non-writeable, so accidental in-place
    updates raise instead of silently diverging between workers.

    Attributes:
        coordinates: Atom positions, shape (N, 3). Row k is atom k + 1.
    """

    coordinates: NDArray[np.floating]

    def __post_init__(self) -> None:
        """Validate shape and freeze the array."""
        coordinates = np.array(self.coordinates, dtype=np.float64, copy=True)
        if coordinates.ndim != 2 or coordinates.shape[1] != 3:
            raise ValueError(
                f"positions must have shape (N, 3), got {coordinates.shape}"
            )
        if not np.all(np.isfinite(coordinates)):
            raise ValueError("positions must be finite")
        coordinates.setflags(write=False)
        object.__setattr__(self, "coordinates", coordinates)

    @classmethod
    def from_array(cls, positions: ArrayLike) -> PositionSet:
        """Create a snapshot, copying the input."""
        return cls(np.asarray(positions))

    @property
    def n_atoms(self) -> int:
        """Return number of atoms."""
        return len(self.coordinates)

    def __len__(self) -> int:
        return self.n_atoms

    def translated(self, shift: ArrayLike) -> PositionSet:
        """Return a new snapshot with every atom shifted by ``shift``."""
        return PositionSet(self.coordinates + np.asarray(shift, dtype=np.float64))


def as_position_set(positions: PositionSet | ArrayLike) -> PositionSet:
    """Accept either a snapshot or a raw (N, 3) array."""
    if isinstance(positions, PositionSet):
        return positions
    return PositionSet.from_array(positions)

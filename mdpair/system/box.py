"""Cubic periodic simulation box."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Box:
    """
    Cubic simulation box with periodic boundaries on every axis.

    Attributes:
        length: Edge length of the cube.
    """

    length: float

    def __post_init__(self) -> None:
        """Validate the edge length."""
        length = float(self.length)
        if not np.isfinite(length) or length <= 0.0:
            raise ValueError(f"Box length must be positive, got {self.length}")
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "length", length)

    @classmethod
    def cubic(cls, length: float) -> Box:
        """Create a cubic box with given side length."""
        return cls(length)

    @property
    def volume(self) -> float:
        """Return box volume."""
        return self.length**3

    def minimum_image(self, delta: ArrayLike) -> NDArray[np.floating]:
        """
        Wrap coordinate deltas to their nearest periodic image.

        Operates elementwise, so a scalar, a (3,) separation or an (M, 3)
        stack of separations are all handled one axis at a time.

        Args:
            delta: Raw coordinate difference(s).

        Returns:
            Wrapped delta(s) in [-L/2, L/2].
        """
        delta = np.asarray(delta, dtype=np.float64)
        return delta - self.length * np.round(delta / self.length)

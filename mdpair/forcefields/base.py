"""Base interface for force providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from ..parallel import AtomRange
    from ..system import PositionSet


class ForceProvider(ABC):
    """
    Abstract base class for force computation over a worker's atom range.

    Implementations return the net force on every owned atom, with no
    communication with other workers.
    """

    @abstractmethod
    def compute(
        self, positions: PositionSet, atom_range: AtomRange
    ) -> NDArray[np.floating]:
        """
        Compute forces on the atoms of ``atom_range``.

        Args:
            positions: Snapshot of all atom positions for this step.
            atom_range: Atoms owned by the calling worker.

        Returns:
            Forces array of shape (atom_range.size, 3).
        """
        ...

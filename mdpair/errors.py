"""Error types raised by the pair evaluation engine."""

from __future__ import annotations


class MDPairError(Exception):
    """Base class for all mdpair errors."""


class DegenerateConfigurationError(MDPairError, ValueError):
    """
    Two distinct atoms sit at (or numerically at) zero separation.

    The LJ terms diverge as d goes to 0, so the evaluation is refused
    instead of returning NaN or Inf forces.

    Attributes:
        pair: The offending atom pair as 1-based global indices, or None
            when the caller evaluated bare separations.
        distance: Their separation.
    """

    def __init__(
        self, pair: tuple[int, int] | None = None, distance: float = 0.0
    ) -> None:
        self.pair = pair
        self.distance = distance
        if pair is None:
            message = f"separation {distance:g} between distinct atoms is degenerate"
        else:
            message = (
                f"atoms {pair[0]} and {pair[1]} are coincident (separation {distance:g})"
            )
        super().__init__(message)


class HistogramBoundsExceededError(MDPairError, IndexError):
    """
    A pair distance maps to a bin at or beyond the histogram length.

    Callers must size the histogram so that ``floor(cutoff / bin_width)``
    is a valid index.
    """

    def __init__(self, bin_index: int, n_bins: int, distance: float) -> None:
        self.bin_index = bin_index
        self.n_bins = n_bins
        self.distance = distance
        super().__init__(
            f"distance {distance:.6g} maps to bin {bin_index}, "
            f"histogram has {n_bins} bins"
        )


class InvalidPartitionError(MDPairError, ValueError):
    """Atom ranges overlap, leave gaps, or fall outside [1, N]."""


class ReductionProtocolError(MDPairError, RuntimeError):
    """A worker left a collective operation its peers were waiting in."""

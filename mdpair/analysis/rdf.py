"""Radial distribution function from raw pair-distance histograms."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system import Box


def bin_centers(n_bins: int, bin_width: float) -> NDArray[np.floating]:
    """Midpoint distance of every histogram bin."""
    return (np.arange(n_bins, dtype=np.float64) + 0.5) * bin_width


def normalize_rdf(
    histogram: ArrayLike,
    n_atoms: int,
    box: Box,
    bin_width: float,
    n_frames: int = 1,
) -> NDArray[np.floating]:
    """
    Convert raw pair counts into g(r).

    The histogram counts every pair twice (i-j and j-i), so it is compared
    against N * rho * shell_volume per frame for an ideal gas.

    g(r) = H(r) / (n_frames * N * rho * 4/3 pi ((r + dr)^3 - r^3))

    Args:
        histogram: Reduced pair counts summed over all workers and frames.
        n_atoms: Number of atoms.
        box: Simulation box (sets the density).
        bin_width: Histogram bin width.
        n_frames: Number of steps accumulated into ``histogram``.

    Returns:
        g(r) per bin.
    """
    histogram = np.asarray(histogram, dtype=np.float64)
    if n_frames < 1 or n_atoms < 1:
        return np.zeros_like(histogram)

    edges = np.arange(histogram.size + 1, dtype=np.float64) * bin_width
    shell_volumes = (4.0 / 3.0) * np.pi * (edges[1:] ** 3 - edges[:-1] ** 3)
    rho = n_atoms / box.volume

    return histogram / (n_frames * n_atoms * rho * shell_volumes)


class RDFAccumulator:
    """
    Running g(r) over many steps.

    Feed it the globally reduced histogram of each step (or the per-worker
    histograms, each once); ``result`` returns the averaged g(r).
    """

    def __init__(self, n_bins: int, bin_width: float) -> None:
        """
        Initialize accumulator.

        Args:
            n_bins: Number of histogram bins.
            bin_width: Histogram bin width.
        """
        self.n_bins = n_bins
        self.bin_width = bin_width
        self.reset()

    @property
    def name(self) -> str:
        """Analyzer name."""
        return "rdf"

    def reset(self) -> None:
        """Reset histogram."""
        self._histogram = np.zeros(self.n_bins, dtype=np.float64)
        self._n_frames = 0

    def update(self, histogram: ArrayLike, frames: int = 1) -> None:
        """Add counts covering ``frames`` steps."""
        histogram = np.asarray(histogram, dtype=np.float64)
        if histogram.shape != (self.n_bins,):
            raise ValueError(
                f"histogram shape {histogram.shape} != ({self.n_bins},)"
            )
        self._histogram += histogram
        self._n_frames += frames

    @property
    def n_frames(self) -> int:
        return self._n_frames

    def result(self, n_atoms: int, box: Box) -> dict[str, Any]:
        """
        Get RDF result.

        Returns:
            Dictionary with 'r' (bin centers), 'g_r' and 'n_frames'.
        """
        return {
            "r": bin_centers(self.n_bins, self.bin_width),
            "g_r": normalize_rdf(
                self._histogram, n_atoms, box, self.bin_width, self._n_frames
            ),
            "n_frames": self._n_frames,
        }

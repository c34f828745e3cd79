"""Evaluation parameters and YAML loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import yaml

from .system import Box

_BACKENDS = ("serial", "mpi4py")


def _section(d: dict[str, Any], key: str) -> dict[str, Any]:
    # A bare "key:" line in YAML loads as None
    section = d.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{key} must be a mapping")
    return section


@dataclass
class EvaluationConfig:
    """
    Parameters consumed by one force/potential evaluation.

    Attributes:
        box_length: Edge of the cubic box.
        cutoff: LJ cutoff radius.
        bin_width: Histogram bin width.
        n_bins: Histogram length. Defaults to the smallest length that
            holds every distance below the cutoff.
        root: Rank receiving reduced energy and pressure.
        backend: Parallel backend name.
        check_partition: Verify atom ranges on every potential evaluation.
    """

    box_length: float
    cutoff: float
    bin_width: float
    n_bins: int | None = None
    root: int = 0
    backend: str = "serial"
    check_partition: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate values."""
        if self.box_length <= 0.0:
            raise ValueError(f"system.box_length must be positive, got {self.box_length}")
        if self.cutoff <= 0.0:
            raise ValueError(f"potential.cutoff must be positive, got {self.cutoff}")
        if self.bin_width <= 0.0:
            raise ValueError(f"rdf.bin_width must be positive, got {self.bin_width}")
        if self.n_bins is None:
            self.n_bins = int(np.floor(self.cutoff / self.bin_width)) + 1
        if self.n_bins < 1:
            raise ValueError(f"rdf.n_bins must be >= 1, got {self.n_bins}")
        if self.root < 0:
            raise ValueError(f"parallel.root must be >= 0, got {self.root}")
        if self.backend not in _BACKENDS:
            raise ValueError(f"parallel.backend must be one of: {', '.join(_BACKENDS)}")

    @property
    def box(self) -> Box:
        """Cubic box of edge ``box_length``."""
        return Box.cubic(self.box_length)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EvaluationConfig:
        """
        Build a config from the nested mapping used in YAML files.

        Expected layout::

            system: {box_length: 10.0}
            potential: {cutoff: 2.5}
            rdf: {bin_width: 0.05, n_bins: 51}
            parallel: {backend: serial, root: 0, check_partition: true}
        """
        system = _section(d, "system")
        potential = _section(d, "potential")
        rdf = _section(d, "rdf")
        parallel = _section(d, "parallel")

        if "box_length" not in system:
            raise ValueError("system.box_length is required")
        if "cutoff" not in potential:
            raise ValueError("potential.cutoff is required")
        if "bin_width" not in rdf:
            raise ValueError("rdf.bin_width is required")

        n_bins = rdf.get("n_bins")
        known = {"system", "potential", "rdf", "parallel"}

        return cls(
            box_length=float(system["box_length"]),
            cutoff=float(potential["cutoff"]),
            bin_width=float(rdf["bin_width"]),
            n_bins=int(n_bins) if n_bins is not None else None,
            root=int(parallel.get("root", 0)),
            backend=str(parallel.get("backend", "serial")).lower(),
            check_partition=bool(parallel.get("check_partition", True)),
            extra={k: v for k, v in d.items() if k not in known},
        )


def load_config(path: str) -> EvaluationConfig:
    """Read an EvaluationConfig from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        d = yaml.safe_load(f)

    if not isinstance(d, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return EvaluationConfig.from_dict(d)

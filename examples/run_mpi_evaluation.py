#!/usr/bin/env python
"""
Evaluate one snapshot across MPI ranks.

Usage:
    mpirun -n 4 python examples/run_mpi_evaluation.py [config.yaml]
"""

import sys
from pathlib import Path

import numpy as np

from mdpair import PairEvaluator, load_config
from mdpair.logging_config import setup_logging
from mdpair.parallel import get_backend


def main():
    backend = get_backend("mpi4py")
    setup_logging(rank=backend.rank)

    config_path = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).with_name("lj_fluid.yaml")
    config = load_config(str(config_path))

    # Identical seed on every rank gives every rank the same snapshot
    rng = np.random.default_rng(0)
    grid = (np.arange(5) + 0.5) * config.box_length / 5
    lattice = np.array(np.meshgrid(grid, grid, grid, indexing="ij")).reshape(3, -1).T
    positions = lattice + rng.normal(0.0, 0.05, lattice.shape)

    evaluator = PairEvaluator(config, n_atoms=len(positions), backend=backend)
    step = evaluator.evaluate(positions)
    forces = evaluator.gather_forces(step.forces)

    if step.potential.is_root:
        print(f"Ranks:     {backend.n_workers}")
        print(f"Energy:    {step.potential.energy:.6f}")
        print(f"Pressure:  {step.potential.pressure:.6f}")
        print(f"Net force: {forces.sum(axis=0)}")


if __name__ == "__main__":
    main()

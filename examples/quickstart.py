#!/usr/bin/env python
"""
Quick start example - evaluate forces, energy and pressure on one worker.

Usage:
    python examples/quickstart.py
"""

import numpy as np

from mdpair import AtomRange, Box, compute_forces, compute_potential


def fcc_lattice(n_cells, lattice_constant):
    """Face-centred cubic positions for n_cells^3 unit cells."""
    basis = np.array(
        [[0.0, 0.0, 0.0], [0.5, 0.5, 0.0], [0.5, 0.0, 0.5], [0.0, 0.5, 0.5]]
    )
    cells = np.array(
        np.meshgrid(*[np.arange(n_cells)] * 3, indexing="ij")
    ).reshape(3, -1).T
    return ((cells[:, None, :] + basis[None, :, :]).reshape(-1, 3)) * lattice_constant


def main():
    print("=" * 60)
    print("mdpair Quick Start")
    print("=" * 60)

    density = 0.8
    n_cells = 3
    a = (4.0 / density) ** (1.0 / 3.0)
    positions = fcc_lattice(n_cells, a)
    box = Box.cubic(n_cells * a)
    n_atoms = len(positions)
    everything = AtomRange(1, n_atoms)

    print(f"\n{n_atoms} atoms, box length {box.length:.4f}")

    # 1. Forces on every atom
    print("\n1. Forces:")
    print("-" * 40)
    forces = compute_forces(positions, box, 2.5, everything)
    print(f"   Max |F|:      {np.abs(forces).max():.3e}")
    print(f"   Net force:    {forces.sum(axis=0)}")

    # 2. Energy, pressure and pair histogram
    print("\n2. Potential:")
    print("-" * 40)
    result = compute_potential(positions, box, 2.5, 0.05, everything)
    print(f"   Energy:       {result.energy:.6f}")
    print(f"   Pressure:     {result.pressure:.6f}")
    print(f"   Pair counts:  {int(result.histogram.sum())}")

    # 3. Tail corrections are reported but not applied
    print("\n3. Tail corrections (not applied):")
    print("-" * 40)
    print(f"   Energy:       {result.tail.energy:.6f}")
    print(f"   Pressure:     {result.tail.pressure:.6f}")
    print(f"   Shift:        {result.tail.potential_shift:.6f}")

    print("\n" + "=" * 60)
    print("Done")
    print("=" * 60)


if __name__ == "__main__":
    main()

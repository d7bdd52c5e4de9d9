#!/usr/bin/env python3
"""
Basic RMSD Analysis Example

This script demonstrates how to iterate over a trajectory and compute the
RMSD of a group of atoms using the molsim package. A small synthetic LAMMPS
dump is written first so the example runs on its own.
"""

import sys
from pathlib import Path
import numpy as np

# Add the source directory to the Python path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from molsim import (
    Simulation, make_atoms, write_lammps_dump, rmsd_over_trajectory,
    rmsd_matrix, ResultWriter, RMSDPlotter,
)

def make_trajectory(filename, n_frames=20, n_atoms=30):
    """A rigid cluster that rotates slowly, drifts, and vibrates."""
    rng = np.random.default_rng(0)
    base = rng.uniform(-3.0, 3.0, size=(n_atoms, 3))
    positions = np.empty((n_frames, n_atoms, 3))
    for i in range(n_frames):
        angle = 0.05 * i
        rot = np.array([
            [np.cos(angle), -np.sin(angle), 0.0],
            [np.sin(angle), np.cos(angle), 0.0],
            [0.0, 0.0, 1.0],
        ])
        noise = rng.normal(scale=0.02 * (1 + i / 5), size=base.shape)
        positions[i] = (base + noise) @ rot.T + np.array([10.0 + 0.1 * i, 10.0, 10.0])
    write_lammps_dump(filename, positions, np.diag([30.0, 30.0, 30.0]))

def main():
    # Create output directory
    output_dir = Path("rmsd_output")
    writer = ResultWriter(output_dir)

    traj_file = output_dir / "cluster.lammpstrj"
    print("Writing synthetic trajectory...")
    make_trajectory(traj_file)

    # Every second frame, all atoms
    with Simulation(make_atoms(30), traj_file, step=2) as sim:
        print(sim)

        print("Iterating over the selected frames...")
        for frame in sim:
            print(f"  frame {sim.frame_index:3d}: first atom at {frame.positions[0]}")

        indices = np.arange(15)
        print("Calculating RMSD (aligned and not aligned)...")
        aligned = rmsd_over_trajectory(sim, indices, progress=True)
        raw = rmsd_over_trajectory(sim, indices, align=False)
        for i, a, r in zip(sim.frame_range, aligned, raw):
            print(f"  frame {i:3d}: aligned {a:.4f}  raw {r:.4f}")

        print("Calculating RMSD matrix...")
        matrix = rmsd_matrix(sim, indices, progress=True)
        frames = list(sim.frame_range)

    writer.save_rmsd_series(frames, aligned)
    writer.save_rmsd_matrix(matrix)

    print("Plotting...")
    RMSDPlotter((frames, aligned), 'series', output_dir / "rmsd.png",
                title="RMSD of the first 15 atoms").generate_plot()
    RMSDPlotter(matrix, 'matrix', output_dir / "rmsd_matrix.png").generate_plot()

    print(f"Done. Results in {output_dir.resolve()}")

if __name__ == "__main__":
    main()

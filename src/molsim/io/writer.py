"""
Result writing module for molsim.

This module provides functionality for saving analysis results and for
writing coordinates in the LAMMPS dump layout.
"""
import numpy as np
from pathlib import Path
import logging
from typing import Optional, Union, Dict, Any, Sequence
import json
import yaml

from ..utils.helpers import ensure_directory, validate_array_shape

logger = logging.getLogger(__name__)


class ResultWriter:
    """Class for writing analysis results."""

    def __init__(self, output_dir: Union[str, Path]):
        """
        Initialize the result writer.

        Args:
            output_dir: Directory to write output files to
        """
        self.output_dir = ensure_directory(output_dir)

    def save_rmsd_series(self, frame_indices: Sequence[int], rmsd_values: Sequence[float],
                         filename: Optional[str] = None) -> Path:
        """
        Save an RMSD series as a two column text file and a .npy array.

        Args:
            frame_indices: Raw frame index of every value
            rmsd_values: RMSD values
            filename: Optional custom filename (default: 'rmsd.dat')

        Returns:
            Path of the text file
        """
        if len(frame_indices) != len(rmsd_values):
            raise ValueError(f"Got {len(frame_indices)} frame indices for {len(rmsd_values)} RMSD values.")
        if filename is None:
            filename = 'rmsd.dat'
        filepath = self.output_dir / filename

        logger.info(f"Saving RMSD series to {filepath}")
        data = np.column_stack([np.asarray(frame_indices, dtype=np.float64),
                                np.asarray(rmsd_values, dtype=np.float64)])
        np.savetxt(filepath, data, fmt=['%d', '%.10e'], header='frame rmsd')
        np.save(filepath.with_suffix('.npy'), np.asarray(rmsd_values, dtype=np.float64))
        return filepath

    def save_rmsd_matrix(self, matrix: np.ndarray, filename: Optional[str] = None) -> Path:
        """
        Save an RMSD matrix to .npy and to a whitespace separated text file.

        Args:
            matrix: Square RMSD matrix
            filename: Optional custom filename (default: 'rmsd_matrix.npy')

        Returns:
            Path of the .npy file
        """
        if filename is None:
            filename = 'rmsd_matrix.npy'
        filepath = self.output_dir / filename

        logger.info(f"Saving RMSD matrix to {filepath}")
        np.save(filepath, matrix)
        np.savetxt(filepath.with_suffix('.dat'), matrix, fmt='%.8e')
        return filepath

    def save_config(self, config: Dict[str, Any], filename: Optional[str] = None) -> Path:
        """
        Save configuration data to a YAML file.

        Args:
            config: Configuration dictionary to save
            filename: Optional custom filename (default: 'config.yaml')
        """
        if filename is None:
            filename = 'config.yaml'
        filepath = self.output_dir / filename

        logger.info(f"Saving configuration to {filepath}")
        with open(filepath, 'w') as f:
            yaml.dump(config, f, default_flow_style=False)
        return filepath

    def save_analysis_results(self, results: Dict[str, Any], filename: Optional[str] = None) -> Path:
        """
        Save analysis results to a JSON file.

        Args:
            results: Analysis results dictionary to save
            filename: Optional custom filename (default: 'analysis_results.json')
        """
        if filename is None:
            filename = 'analysis_results.json'
        filepath = self.output_dir / filename

        logger.info(f"Saving analysis results to {filepath}")
        with open(filepath, 'w') as f:
            json.dump(results, f, indent=4)
        return filepath


def write_lammps_dump(filename: Union[str, Path], positions: np.ndarray, box_matrix: np.ndarray,
                      types: Optional[np.ndarray] = None) -> None:
    """
    Write coordinates as a LAMMPS text dump.

    Args:
        filename: Output file
        positions: (frames, atoms, 3) coordinates
        box_matrix: (3, 3) cell with the cell vectors as rows, upper
            triangular in the LAMMPS sense (a along x, b in the xy plane)
        types: Optional per-atom integer types (default 1)
    """
    positions = np.asarray(positions, dtype=np.float64)
    if positions.ndim != 3 or positions.shape[2] != 3:
        raise ValueError("Positions must be 3D (frames, atoms, xyz) and last dimension must be 3.")
    box_matrix = np.asarray(box_matrix, dtype=np.float64)
    validate_array_shape(box_matrix, (3, 3), "box_matrix")
    n_fr, n_at, _ = positions.shape
    if types is None:
        types = np.ones(n_at, dtype=np.int32)
    ensure_directory(Path(filename).parent)

    # Origin at (0,0,0); rows a = (lx,0,0), b = (xy,ly,0), c = (xz,yz,lz)
    xhi, yhi, zhi = box_matrix[0, 0], box_matrix[1, 1], box_matrix[2, 2]
    xy, xz, yz = box_matrix[1, 0], box_matrix[2, 0], box_matrix[2, 1]

    is_triclinic = not (np.isclose(xy, 0.0) and np.isclose(xz, 0.0) and np.isclose(yz, 0.0))

    with open(filename, 'w') as f:
        for i_fr in range(n_fr):
            f.write(f"ITEM: TIMESTEP\n{i_fr}\n")
            f.write(f"ITEM: NUMBER OF ATOMS\n{n_at}\n")
            if is_triclinic:
                f.write("ITEM: BOX BOUNDS xy xz yz pp pp pp\n")
                f.write(f"{min(0.0, xy, xz, xy + xz):.8f} {xhi + max(0.0, xy, xz, xy + xz):.8f} {xy:.8f}\n")
                f.write(f"{min(0.0, yz):.8f} {yhi + max(0.0, yz):.8f} {xz:.8f}\n")
                f.write(f"{0.0:.8f} {zhi:.8f} {yz:.8f}\n")
            else:
                f.write("ITEM: BOX BOUNDS pp pp pp\n")
                f.write(f"{0.0:.8f} {xhi:.8f}\n")
                f.write(f"{0.0:.8f} {yhi:.8f}\n")
                f.write(f"{0.0:.8f} {zhi:.8f}\n")

            f.write("ITEM: ATOMS id type x y z\n")
            for j_at in range(n_at):
                f.write(f"{j_at+1} {int(types[j_at])} {positions[i_fr,j_at,0]:.6f} "
                        f"{positions[i_fr,j_at,1]:.6f} {positions[i_fr,j_at,2]:.6f}\n")
    logger.debug(f"Wrote {n_fr} frames to LAMMPS dump: {filename}")

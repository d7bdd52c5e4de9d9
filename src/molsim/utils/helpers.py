"""
Utility functions for molsim.

This module provides helper functions shared by the command line tool and
the analysis code.
"""
import numpy as np
import logging
from typing import Union, List, Tuple, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

def parse_atom_indices(index_spec: Union[str, int, List[int], Tuple[int, ...], np.ndarray, None],
                       n_atoms: Optional[int] = None) -> np.ndarray:
    """
    Parse an atom index specification into a sorted array of 0-based indices.

    Args:
        index_spec: Index specification, which can be:
            - None or 'all': every atom (needs n_atoms)
            - String: comma separated indices and inclusive ranges, e.g. '0-9,12,20-24'
            - Integer: a single index
            - List/Tuple/Array: explicit indices
        n_atoms: Number of atoms, used for 'all' and bounds checking

    Returns:
        Sorted array of unique indices

    Raises:
        ValueError: If the specification is invalid or out of bounds
        TypeError: If the specification type is not supported
    """
    if index_spec is None or (isinstance(index_spec, str) and index_spec.strip().lower() == 'all'):
        if n_atoms is None:
            raise ValueError("Selecting all atoms needs the number of atoms.")
        indices = np.arange(n_atoms)

    elif isinstance(index_spec, (int, np.integer)):
        indices = np.array([int(index_spec)])

    elif isinstance(index_spec, str):
        selected = []
        for part in index_spec.replace(' ', '').split(','):
            if not part:
                continue
            try:
                if '-' in part[1:]:
                    lo, hi = part.split('-', 1)
                    lo_i, hi_i = int(lo), int(hi)
                    if hi_i < lo_i:
                        raise ValueError()
                    selected.extend(range(lo_i, hi_i + 1))
                else:
                    selected.append(int(part))
            except ValueError:
                raise ValueError(f"Invalid atom index specification: '{part}' in '{index_spec}'.")
        indices = np.array(selected, dtype=np.int64)

    elif isinstance(index_spec, (list, tuple, np.ndarray)):
        arr = np.asarray(index_spec)
        if arr.ndim != 1:
            raise ValueError(f"Atom index array must be 1D, got {arr.ndim} dims.")
        if arr.size and not np.issubdtype(arr.dtype, np.integer):
            raise ValueError(f"Atom indices must be integers, got dtype {arr.dtype}.")
        indices = arr.astype(np.int64)
    else:
        raise TypeError(f"Unsupported atom index type: {type(index_spec)}")

    indices = np.unique(indices)
    if indices.size == 0:
        raise ValueError("Atom index specification selects no atoms.")
    if indices[0] < 0:
        raise ValueError(f"Atom indices must be non-negative, got {indices[0]}.")
    if n_atoms is not None and indices[-1] >= n_atoms:
        raise ValueError(f"Atom index {indices[-1]} out of bounds for {n_atoms} atoms.")
    return indices

def update_dict_recursively(base_dict: dict, update_with: dict) -> dict:
    """
    Recursively update a dictionary with another dictionary.

    Args:
        base_dict: Base dictionary to update
        update_with: Dictionary containing updates

    Returns:
        Updated dictionary
    """
    for k, v_update in update_with.items():
        if isinstance(v_update, dict) and k in base_dict and isinstance(base_dict[k], dict):
            update_dict_recursively(base_dict[k], v_update)
        else:
            base_dict[k] = v_update
    return base_dict

def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path

def validate_array_shape(arr: np.ndarray, expected_shape: tuple, name: str) -> None:
    """
    Validate that an array has the expected shape.

    Args:
        arr: Array to validate
        expected_shape: Expected shape tuple
        name: Name of the array for error messages

    Raises:
        ValueError: If array shape doesn't match expected shape
    """
    if arr.shape != expected_shape:
        raise ValueError(f"{name} has shape {arr.shape}, expected {expected_shape}")

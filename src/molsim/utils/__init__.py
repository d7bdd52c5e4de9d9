"""
Utilities module for molsim.

This module provides various utility functions and configuration management
for the molsim package.
"""

from .config_manager import ConfigManager, DEFAULT_CONFIG
from .helpers import (
    parse_atom_indices,
    update_dict_recursively,
    ensure_directory,
    validate_array_shape,
)

__all__ = [
    'ConfigManager',
    'DEFAULT_CONFIG',
    'parse_atom_indices',
    'update_dict_recursively',
    'ensure_directory',
    'validate_array_shape',
]

"""
Configuration management module for molsim.

This module provides functionality for loading, validating, and managing
configuration settings for trajectory RMSD analysis.
"""
import copy
import yaml
from pathlib import Path
import logging
from typing import Dict, Any, Optional, Union

from .helpers import update_dict_recursively

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'trajectory': {'file': None, 'format': 'auto', 'first': 1, 'last': None, 'step': 1},
    'analysis': {'atom_indices': 'all', 'mass_weighted': False, 'align': True,
                 'reference_frame': None, 'matrix': False},
    'output': {'directory': 'molsim_output', 'plot': False},
}

class ConfigManager:
    """Class for managing molsim configuration settings."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager with the default settings.

        Args:
            config_file: Path to a YAML file overriding the defaults (optional)
        """
        self.config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        if config_file is not None:
            self.load_config(config_file)

    def load_config(self, config_file: Union[str, Path]) -> None:
        """
        Load configuration from a YAML file, merged over the current settings.

        Args:
            config_file: Path to the configuration file
        """
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        logger.info(f"Loading configuration from {config_path}")
        with open(config_path, 'r') as f:
            user_cfg = yaml.safe_load(f)
        if user_cfg is None:
            user_cfg = {}
        if not isinstance(user_cfg, dict):
            raise ValueError(f"Configuration file {config_file} must contain a mapping.")
        update_dict_recursively(self.config, user_cfg)

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate the loaded configuration."""
        required_keys = [
            'trajectory',
            'analysis',
            'output'
        ]

        for key in required_keys:
            if not isinstance(self.config.get(key), dict):
                raise ValueError(f"Missing required configuration key: {key}")

        # Validate trajectory settings
        traj_cfg = self.config['trajectory']
        for key in ['first', 'step']:
            value = traj_cfg.get(key)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"Trajectory setting '{key}' must be a positive integer, got {value!r}")
        last = traj_cfg.get('last')
        if last is not None and (not isinstance(last, int) or last < traj_cfg['first']):
            raise ValueError(f"Trajectory setting 'last' must be an integer >= first, got {last!r}")

        # Validate analysis settings
        analysis_keys = ['atom_indices', 'mass_weighted', 'align', 'reference_frame', 'matrix']
        for key in analysis_keys:
            if key not in self.config['analysis']:
                raise ValueError(f"Missing required analysis setting: {key}")

        # Validate output settings
        if not self.config['output'].get('directory'):
            raise ValueError("Missing required output setting: directory")

    def get_trajectory_config(self) -> Dict[str, Any]:
        """Frame source and selection: file, format, first, last, step."""
        return self.config['trajectory']

    def get_analysis_config(self) -> Dict[str, Any]:
        """Atom subset, weighting, alignment, reference frame and matrix switch."""
        return self.config['analysis']

    def get_output_config(self) -> Dict[str, Any]:
        return self.config['output']

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Merge ``updates`` (e.g. command-line overrides) and re-validate."""
        update_dict_recursively(self.config, updates)
        self._validate_config()

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the settings, as saved next to the results."""
        return copy.deepcopy(self.config)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ConfigManager':
        """
        Create a ConfigManager instance from a dictionary merged over the defaults.

        Args:
            config_dict: Dictionary of configuration settings

        Returns:
            ConfigManager instance
        """
        instance = cls()
        update_dict_recursively(instance.config, copy.deepcopy(config_dict))
        instance._validate_config()
        return instance

"""
Configuration management for water-cluster graph analysis.

This module handles loading, validation and creation of configuration
files for the analysis pipeline.
"""

import json
from dataclasses import dataclass, asdict, field
from typing import Dict, Any, List
from pathlib import Path


@dataclass
class AnalysisConfig:
    """
    Configuration for the analysis pipeline.

    Ring sizes bound the primitive cycle search, ``index_base`` tells the
    builder whether molecule indices in the input records start at 0 or 1,
    and ``std_ddof`` selects sample (1) or population (0) standard deviation
    for grouped statistics.
    """

    # Ring search bounds
    min_ring_size: int = 3
    max_ring_size: int = 10

    # Input conventions
    index_base: int = 0

    # Statistics
    std_ddof: int = 1
    energy_window: List[int] = field(default_factory=lambda: [20, 30])

    # Processing
    n_proc: int = 1

    def __post_init__(self):
        """Validate parameters after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate that all parameters are within acceptable ranges."""
        if self.min_ring_size < 3:
            raise ValueError(f"min_ring_size must be at least 3, got {self.min_ring_size}")

        if self.max_ring_size < self.min_ring_size:
            raise ValueError(
                f"max_ring_size ({self.max_ring_size}) must not be smaller than "
                f"min_ring_size ({self.min_ring_size})"
            )

        if self.index_base not in (0, 1):
            raise ValueError(f"index_base must be 0 or 1, got {self.index_base}")

        if self.std_ddof not in (0, 1):
            raise ValueError(f"std_ddof must be 0 or 1, got {self.std_ddof}")

        if len(self.energy_window) != 2 or self.energy_window[0] > self.energy_window[1]:
            raise ValueError(f"energy_window must be [low, high] with low <= high, got {self.energy_window}")

        if self.n_proc < 1:
            raise ValueError(f"n_proc must be positive, got {self.n_proc}")

    @property
    def ring_sizes(self) -> List[int]:
        """Ring sizes counted by the analysis, in increasing order."""
        return list(range(self.min_ring_size, self.max_ring_size + 1))

    def to_dict(self) -> Dict[str, Any]:
        """Convert the dataclass to a dictionary with file key names."""
        data = asdict(self)
        key_mapping = {
            'min_ring_size': 'Min_ring_size',
            'max_ring_size': 'Max_ring_size',
            'index_base': 'Index_base',
            'std_ddof': 'Std_ddof',
            'energy_window': 'Energy_window',
            'n_proc': 'N_proc'
        }
        return {key_mapping[k]: v for k, v in data.items()}

    def save_to_file(self, filename: str = "water_graphs.json") -> None:
        """
        Save the configuration to a JSON file.

        Args:
            filename: Path to save the configuration file
        """
        filepath = Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=4)

    @classmethod
    def load_from_file(cls, filename: str = "water_graphs.json") -> "AnalysisConfig":
        """
        Load configuration from a JSON file.

        Keys missing from the file keep their default values.

        Args:
            filename: Path to the configuration file

        Returns:
            AnalysisConfig: Loaded configuration object

        Raises:
            FileNotFoundError: If the configuration file doesn't exist
            ValueError: If the configuration file is invalid
        """
        filepath = Path(filename)
        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filename}")

        try:
            with open(filepath, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a JSON object: {filename}")

        reverse_mapping = {
            'Min_ring_size': 'min_ring_size',
            'Max_ring_size': 'max_ring_size',
            'Index_base': 'index_base',
            'Std_ddof': 'std_ddof',
            'Energy_window': 'energy_window',
            'N_proc': 'n_proc'
        }

        kwargs = {reverse_mapping[k]: v for k, v in data.items() if k in reverse_mapping}

        instance = cls()
        for key, value in kwargs.items():
            setattr(instance, key, value)

        instance.validate()
        return instance

    @classmethod
    def default_config(cls) -> "AnalysisConfig":
        """Create a default configuration."""
        return cls()

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the current configuration.

        Returns:
            Dict[str, Any]: Configuration summary
        """
        return {
            'ring_sizes': self.ring_sizes,
            'index_base': self.index_base,
            'std_ddof': self.std_ddof,
            'energy_window': list(self.energy_window),
            'n_proc': self.n_proc
        }


def load_or_create_config(config_path: str = "water_graphs.json") -> AnalysisConfig:
    """
    Load configuration from file, or write a default one if none exists.

    Args:
        config_path: Path to the configuration file

    Returns:
        AnalysisConfig: Configuration object
    """
    if Path(config_path).exists():
        return AnalysisConfig.load_from_file(config_path)

    config = AnalysisConfig.default_config()
    config.save_to_file(config_path)
    print(f"Created default configuration file: {config_path}")
    return config

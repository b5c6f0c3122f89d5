"""
Configuration Management System

Handles loading, validation, and management of converter parameters.
"""

import copy
import math
import yaml
from typing import Dict, Any, Optional
from pathlib import Path

from ..data_models import CameraModel, ConverterConfig, SamplingPolicy, NORMALIZATIONS


class ConfigManager:
    """Manages configuration parameters for the depth-to-pointcloud converter."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to a configuration file whose values override the
                packaged defaults. If None, only the defaults are used.
        """
        self.default_path = self._get_default_config_path()
        self.config_path = config_path or self.default_path
        self.config = self._load_config(self.default_path)
        if config_path is not None:
            self._merge(self.config, self._load_config(config_path))
        self._validate_config()

    def _get_default_config_path(self) -> str:
        """Get path to default configuration file."""
        package_dir = Path(__file__).parent.parent
        return str(package_dir / "config" / "default_config.yaml")

    def _load_config(self, path: str) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(path, 'r') as file:
                config = yaml.safe_load(file)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")
        return config

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _validate_config(self) -> None:
        """Validate configuration parameters for consistency and feasibility."""
        # Validate camera parameters
        camera = self.config.get('camera', {})
        if float(camera.get('sensor_width', 36.0)) <= 0:
            raise ValueError("camera.sensor_width must be positive")
        if float(camera.get('focal_length', 50.0)) <= 0:
            raise ValueError("camera.focal_length must be positive")
        if camera.get('normalization', 'unit') not in NORMALIZATIONS:
            raise ValueError(f"camera.normalization must be one of {NORMALIZATIONS}")

        # Validate sampling parameters
        sampling = self.config.get('sampling', {})
        keep_fraction = float(sampling.get('keep_fraction', 1.0))
        if not 0.0 <= keep_fraction <= 1.0:
            raise ValueError("sampling.keep_fraction must be in [0, 1]")
        if not float(sampling.get('noise_stddev', 0.0)) >= 0.0:
            raise ValueError("sampling.noise_stddev must be non-negative")

        seed = sampling.get('seed')
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ValueError("sampling.seed must be an integer or null")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'camera.focal_length')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        The previous value is restored if validation fails.

        Args:
            key: Configuration key (e.g., 'sampling.keep_fraction')
            value: Value to set
        """
        previous = copy.deepcopy(self.config)
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref:
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value
        try:
            self._validate_config()
        except ValueError:
            self.config = previous
            raise

    def save(self, output_path: Optional[str] = None) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration. If None, overwrites current file.
        """
        save_path = output_path or self.config_path

        with open(save_path, 'w') as file:
            yaml.dump(self.config, file, default_flow_style=False, indent=2)

    def get_camera_params(self) -> Dict[str, Any]:
        """Get pinhole camera parameters as a dictionary."""
        return self.config.get('camera', {})

    def get_sampling_params(self) -> Dict[str, Any]:
        """Get sampling policy parameters as a dictionary."""
        return self.config.get('sampling', {})

    def to_converter_config(self) -> ConverterConfig:
        """Freeze the current values into an immutable ConverterConfig."""
        camera = self.get_camera_params()
        sampling = self.get_sampling_params()

        return ConverterConfig(
            camera=CameraModel(
                sensor_width=float(camera.get('sensor_width', 36.0)),
                focal_length=float(camera.get('focal_length', 50.0)),
                normalization=camera.get('normalization', 'unit'),
            ),
            sampling=SamplingPolicy(
                lower_cut=float(sampling.get('lower_cut', -math.inf)),
                upper_cut=float(sampling.get('upper_cut', math.inf)),
                keep_fraction=float(sampling.get('keep_fraction', 1.0)),
                noise_stddev=float(sampling.get('noise_stddev', 0.0)),
                point_color=float(sampling.get('point_color', 4.2108e+06)),
            ),
            seed=sampling.get('seed'),
        )

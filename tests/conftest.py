"""
Pytest configuration and fixtures for depth-to-pointcloud tests.
"""

import pytest
import numpy as np
import OpenEXR

from depth_pointcloud.data_models import CameraModel, ConverterConfig, DepthGrid, SamplingPolicy
from depth_pointcloud.utils.config_manager import ConfigManager


class ScriptedRandomSource:
    """Deterministic random source returning fixed draws."""

    def __init__(self, uniform_values=0.0, normal_value=0.0):
        self.uniform_values = uniform_values
        self.normal_value = normal_value
        self.uniform_calls = 0
        self.normal_calls = 0

    def uniform(self, size):
        self.uniform_calls += 1
        values = np.asarray(self.uniform_values, dtype=np.float64)
        return np.resize(values, size)

    def normal(self, stddev, size):
        self.normal_calls += 1
        return np.full(size, self.normal_value, dtype=np.float64)


@pytest.fixture
def config_manager():
    """Fixture providing a configuration manager instance."""
    return ConfigManager()


@pytest.fixture
def camera():
    """Fixture providing the default 36mm / 50mm pinhole camera."""
    return CameraModel(sensor_width=36.0, focal_length=50.0)


@pytest.fixture
def legacy_camera():
    """Fixture providing a camera using focal-length normalization."""
    return CameraModel(sensor_width=36.0, focal_length=50.0, normalization="focal")


@pytest.fixture
def two_pixel_grid():
    """Fixture providing a 2x1 grid with depths 10 and 20."""
    return DepthGrid(np.array([[10.0, 20.0]], dtype=np.float32))


@pytest.fixture
def ramp_grid():
    """Fixture providing a 4x3 grid with distinct depths 1..12."""
    return DepthGrid(np.arange(1, 13, dtype=np.float32).reshape(3, 4))


@pytest.fixture
def sample_depth_map():
    """Fixture providing a synthetic depth map of a tilted plane."""
    height, width = 48, 64
    y_indices, x_indices = np.mgrid[0:height, 0:width]
    depth = 100.0 + 2.0 * y_indices + 0.5 * x_indices

    # Background with no geometry
    depth[:8, :] = np.inf

    return depth.astype(np.float32)


@pytest.fixture
def converter_config():
    """Fixture providing a configuration that keeps every pixel without noise."""
    return ConverterConfig(camera=CameraModel(), sampling=SamplingPolicy())


@pytest.fixture
def scripted_random():
    """Fixture providing the scripted random source class."""
    return ScriptedRandomSource


@pytest.fixture
def write_exr(tmp_path):
    """Fixture providing a helper that writes channels to an OpenEXR file."""
    def _write(channels, name="depth.exr"):
        path = tmp_path / name
        header = {"compression": OpenEXR.ZIP_COMPRESSION,
                  "type": OpenEXR.scanlineimage}
        with OpenEXR.File(header, channels) as outfile:
            outfile.write(str(path))
        return path

    return _write


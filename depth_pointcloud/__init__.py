"""
Depth-to-PointCloud Converter

Converts the Z buffer of an OpenEXR image into a PCD point cloud by simulating
a pinhole camera and reprojecting every depth sample into camera space.

This package implements:
- OpenEXR Z channel loading over arbitrary data windows
- Pinhole unprojection with unit-length or focal-length ray normalization
- Depth range filtering, probabilistic subsampling and gaussian noise
- ASCII PCD v.7 output
"""

__version__ = "1.0.0"
__author__ = "Depth-to-PointCloud Team"

from .formats import ExrDepthReader, PCDWriter
from .reconstruction import PinholeReprojector, PointSampler, NumpyRandomSource
from .exceptions import DepthPointCloudError, UsageError, InputFormatError, DegenerateInputError
from .data_models import (
    DepthGrid, CameraModel, SamplingPolicy, Point3D,
    ConverterConfig, SampledPointCloud
)

__all__ = [
    # Formats
    'ExrDepthReader', 'PCDWriter',
    # Reconstruction
    'PinholeReprojector', 'PointSampler', 'NumpyRandomSource',
    # Errors
    'DepthPointCloudError', 'UsageError', 'InputFormatError', 'DegenerateInputError',
    # Data Models
    'DepthGrid', 'CameraModel', 'SamplingPolicy', 'Point3D',
    'ConverterConfig', 'SampledPointCloud'
]

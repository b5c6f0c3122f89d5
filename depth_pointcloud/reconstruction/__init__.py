"""
3D Reconstruction Module

Implements pinhole unprojection and the point sampling pipeline.
"""

from .pinhole_reprojector import PinholeReprojector
from .point_sampler import PointSampler, NumpyRandomSource, RandomSource

__all__ = ['PinholeReprojector', 'PointSampler', 'NumpyRandomSource', 'RandomSource']

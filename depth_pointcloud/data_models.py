"""
Data Models for the Depth-to-PointCloud Converter

Defines the value objects passed between the depth source, the
reprojection/sampling engine and the point cloud writer.
"""

import math
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

import numpy as np

from .exceptions import InputFormatError


NORMALIZATIONS = ("unit", "focal")


class DepthGrid:
    """Read-only 2-D raster of depth samples, indexed ``[y, x]``."""

    def __init__(self, depth: np.ndarray, origin: Tuple[int, int] = (0, 0)):
        """
        Wrap a depth raster.

        Args:
            depth: 2-D array of depth values (height x width)
            origin: Data-window origin (x, y) of the source image
        """
        depth = np.array(depth, dtype=np.float32)
        if depth.ndim != 2:
            raise InputFormatError(f"Depth grid must be 2-D, got shape {depth.shape}")
        if depth.shape[0] < 1 or depth.shape[1] < 1:
            raise InputFormatError(f"Depth grid must not be empty, got shape {depth.shape}")

        depth.setflags(write=False)
        self._depth = depth
        self.origin = tuple(int(v) for v in origin)

    @property
    def depth(self) -> np.ndarray:
        return self._depth

    @property
    def width(self) -> int:
        return self._depth.shape[1]

    @property
    def height(self) -> int:
        return self._depth.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._depth.shape

    @property
    def size(self) -> int:
        return self._depth.size

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def value_at(self, x: int, y: int) -> float:
        """Depth sample at pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} grid")
        return float(self._depth[y, x])

    def is_flat(self) -> bool:
        """True when every sample is bit-identical to the first one."""
        bits = self._depth.view(np.uint32)
        return bool(np.all(bits == bits.flat[0]))

    def __repr__(self) -> str:
        return f"DepthGrid(width={self.width}, height={self.height}, origin={self.origin})"


@dataclass(frozen=True)
class CameraModel:
    """Pinhole camera: sensor width and focal length in millimetres."""
    sensor_width: float = 36.0
    focal_length: float = 50.0
    normalization: str = "unit"  # "unit" (spherical) or "focal" (legacy planar)

    def __post_init__(self):
        if not self.sensor_width > 0:
            raise ValueError(f"sensor_width must be positive, got {self.sensor_width}")
        if not self.focal_length > 0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")
        if self.normalization not in NORMALIZATIONS:
            raise ValueError(f"normalization must be one of {NORMALIZATIONS}, got {self.normalization!r}")

    def sensor_height(self, aspect_ratio: float) -> float:
        """Sensor height for an image of the given width/height ratio."""
        if not aspect_ratio > 0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        return self.sensor_width / aspect_ratio


@dataclass(frozen=True)
class SamplingPolicy:
    """Range filter, subsampling, noise and color applied to emitted points."""
    lower_cut: float = -math.inf
    upper_cut: float = math.inf
    keep_fraction: float = 1.0
    noise_stddev: float = 0.0
    point_color: float = 4.2108e+06

    def __post_init__(self):
        if not 0.0 <= self.keep_fraction <= 1.0:
            raise ValueError(f"keep_fraction must be in [0, 1], got {self.keep_fraction}")
        if not self.noise_stddev >= 0.0:
            raise ValueError(f"noise_stddev must be non-negative, got {self.noise_stddev}")

    def accepts_depth(self, depth: float) -> bool:
        """Strict range test: both cut values are excluded."""
        return self.lower_cut < depth < self.upper_cut


@dataclass(frozen=True)
class Point3D:
    """Emitted point: camera-space position plus packed color."""
    x: float
    y: float
    z: float
    rgb: float


@dataclass(frozen=True)
class ConverterConfig:
    """Complete, immutable configuration of one conversion run."""
    camera: CameraModel = field(default_factory=CameraModel)
    sampling: SamplingPolicy = field(default_factory=SamplingPolicy)
    seed: Optional[int] = None


@dataclass
class SampledPointCloud:
    """Points emitted by one sampling pass, in raster order."""
    positions: np.ndarray  # Nx3 camera-space coordinates
    point_color: float
    candidate_count: int  # pixels that passed the range filter
    source_size: int  # pixels in the source grid

    @property
    def point_count(self) -> int:
        return int(self.positions.shape[0])

    def __len__(self) -> int:
        return self.point_count

    def points(self) -> Iterator[Point3D]:
        """Lazily yield the emitted points."""
        for x, y, z in self.positions:
            yield Point3D(float(x), float(y), float(z), self.point_color)

    def __iter__(self) -> Iterator[Point3D]:
        return self.points()

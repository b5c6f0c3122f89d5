"""
Pinhole Camera Reprojector

Unprojects depth samples back into camera space by tracing a ray from the
focal point through the pixel's position on a simulated sensor.
"""

import numpy as np
from typing import Union
import logging

from ..data_models import CameraModel, DepthGrid
from ..exceptions import InputFormatError


ArrayLike = Union[int, float, np.ndarray]


class PinholeReprojector:
    """Maps (pixel, depth) pairs to 3D positions relative to the camera origin."""

    def __init__(self, camera: CameraModel):
        """
        Initialize reprojector.

        Args:
            camera: Pinhole camera model (sensor width, focal length)
        """
        self.camera = camera
        self.logger = logging.getLogger(__name__)

        self.logger.info(f"Pinhole reprojector initialized: sensor_width={camera.sensor_width}mm, "
                         f"focal_length={camera.focal_length}mm, normalization={camera.normalization}")

    def ray_directions(self, width: int, height: int, x: ArrayLike, y: ArrayLike) -> np.ndarray:
        """
        Compute normalized ray directions for pixel coordinates.

        The sensor sits at z = -focal_length behind the focal point at the
        origin. The vertical axis is flipped so that image rows grow downwards
        while world Y grows upwards.

        Args:
            width: Grid width in pixels
            height: Grid height in pixels
            x: Pixel column(s)
            y: Pixel row(s), broadcastable against x

        Returns:
            Array of shape broadcast(x, y) + (3,)
        """
        if height <= 0 or width <= 0:
            raise InputFormatError(f"Cannot reproject a {width}x{height} grid")

        sensor_width = self.camera.sensor_width
        focal_length = self.camera.focal_length
        sensor_height = self.camera.sensor_height(width / height)

        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        # Position on the sensor, centered on the optical axis
        centered_x = sensor_width * x / width - sensor_width / 2
        centered_y = sensor_height * y / height - sensor_height / 2

        dir_x, dir_y = np.broadcast_arrays(centered_x, -centered_y)
        dir_z = np.full(dir_x.shape, -focal_length)
        direction = np.stack([dir_x, dir_y, dir_z], axis=-1)

        if self.camera.normalization == "unit":
            length = np.sqrt(dir_x * dir_x + dir_y * dir_y + dir_z * dir_z)
            return direction / length[..., np.newaxis]

        return direction / focal_length

    def reproject(self, grid: DepthGrid, x: int, y: int) -> np.ndarray:
        """
        Reproject a single pixel.

        Args:
            grid: Source depth grid
            x: Pixel column
            y: Pixel row

        Returns:
            3-element position (x, y, z)
        """
        depth = grid.value_at(x, y)
        return self.ray_directions(grid.width, grid.height, x, y) * depth

    def reproject_pixels(self, grid: DepthGrid, xs: np.ndarray, y: int) -> np.ndarray:
        """
        Reproject a subset of pixels from one row.

        Args:
            grid: Source depth grid
            xs: Pixel columns within row y
            y: Pixel row

        Returns:
            Nx3 array of positions
        """
        xs = np.asarray(xs, dtype=np.intp)
        depths = grid.depth[y, xs].astype(np.float64)
        directions = self.ray_directions(grid.width, grid.height, xs, y)
        return directions * depths[:, np.newaxis]

    def reproject_grid(self, grid: DepthGrid) -> np.ndarray:
        """
        Reproject every pixel of the grid.

        Returns:
            HxWx3 array of positions
        """
        y_coords, x_coords = np.mgrid[0:grid.height, 0:grid.width]
        directions = self.ray_directions(grid.width, grid.height, x_coords, y_coords)
        return directions * grid.depth.astype(np.float64)[..., np.newaxis]

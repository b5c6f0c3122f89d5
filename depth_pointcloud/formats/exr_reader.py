"""
OpenEXR Depth Reader

Loads the Z buffer channel of an OpenEXR image into a DepthGrid.
"""

import OpenEXR
import numpy as np
from pathlib import Path
from typing import Tuple, Union
import logging

from ..data_models import DepthGrid
from ..exceptions import InputFormatError


class ExrDepthReader:
    """Reads a single floating-point depth channel from OpenEXR files."""

    def __init__(self, channel: str = "Z"):
        """
        Initialize reader.

        Args:
            channel: Name of the depth channel
        """
        self.channel = channel
        self.logger = logging.getLogger(__name__)

    def read(self, path: Union[str, Path]) -> DepthGrid:
        """
        Read the depth channel of an OpenEXR image.

        Args:
            path: Image path

        Returns:
            Depth grid covering the image's data window
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Input image not found: {path}")

        try:
            with OpenEXR.File(str(path), separate_channels=True) as exr:
                header = exr.header()
                channels = dict(exr.channels())
        except Exception as e:
            raise InputFormatError(f"Cannot decode OpenEXR image {path}: {e}") from e

        if self.channel not in channels:
            raise InputFormatError(
                f"Image {path} does not contain a {self.channel} buffer "
                f"(channels: {', '.join(sorted(channels))})")
        pixels = np.asarray(channels[self.channel].pixels)

        if pixels.dtype.kind != 'f':
            raise InputFormatError(
                f"Channel {self.channel} of {path} is not floating point ({pixels.dtype})")

        origin = self._data_window_origin(header)
        grid = DepthGrid(pixels.astype(np.float32), origin=origin)

        self.logger.info(f"Loaded {grid.width}x{grid.height} {self.channel} buffer from {path} "
                         f"(data window origin {origin})")
        if self.logger.isEnabledFor(logging.DEBUG) and np.any(np.isfinite(grid.depth)):
            finite = grid.depth[np.isfinite(grid.depth)]
            self.logger.debug(f"Finite depth range: [{finite.min()}, {finite.max()}]")

        return grid

    @staticmethod
    def _data_window_origin(header: dict) -> Tuple[int, int]:
        """Extract the (x, y) origin of the data window, if present."""
        window = header.get("dataWindow")
        if window is None:
            return (0, 0)
        window_min = np.asarray(window[0]).ravel()
        return (int(window_min[0]), int(window_min[1]))

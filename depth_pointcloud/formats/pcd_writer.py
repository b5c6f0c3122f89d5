"""
PCD Writer

Serializes sampled points to the ASCII variant of the PCD v.7 format.
See http://pointclouds.org/documentation/tutorials/pcd_file_format.html
"""

import os
from pathlib import Path
from typing import Iterable, TextIO, Union
import logging

from ..data_models import Point3D, SampledPointCloud


class PCDWriter:
    """Writes x/y/z/rgb point records with a fixed PCD header."""

    DEFAULT_FLOAT_FORMAT = "{:.9g}"  # round-trips single precision

    def __init__(self, float_format: str = DEFAULT_FLOAT_FORMAT):
        self.float_format = float_format
        self.logger = logging.getLogger(__name__)

    def format_header(self, point_count: int) -> str:
        """Build the 11-line PCD header for the given point count."""
        return (
            "# .PCD v.7 - Point Cloud Data file format\n"
            "VERSION .7\n"
            "FIELDS x y z rgb\n"
            "SIZE 4 4 4 4\n"
            "TYPE F F F F\n"
            "COUNT 1 1 1 1\n"
            f"WIDTH {point_count}\n"
            "HEIGHT 1\n"
            "VIEWPOINT 0 0 0 1 0 0 0\n"
            f"POINTS {point_count}\n"
            "DATA ascii\n"
        )

    def format_point(self, point: Point3D) -> str:
        fmt = self.float_format
        return f"{fmt.format(point.x)} {fmt.format(point.y)} {fmt.format(point.z)} {fmt.format(point.rgb)}\n"

    def write_stream(self, stream: TextIO, points: Iterable[Point3D], point_count: int) -> int:
        """
        Write header and points to an open text stream.

        Args:
            stream: Destination stream
            points: Points to write, consumed in a single forward pass
            point_count: Number of points announced in the header

        Returns:
            Number of point lines written
        """
        stream.write(self.format_header(point_count))

        written = 0
        for point in points:
            stream.write(self.format_point(point))
            written += 1

        if written != point_count:
            raise ValueError(f"Header announced {point_count} points but {written} were written")

        stream.flush()
        return written

    def write(self, path: Union[str, Path], cloud: SampledPointCloud) -> Path:
        """
        Write a sampled point cloud to a .pcd file.

        Args:
            path: Output file path
            cloud: Sampled point cloud

        Returns:
            Path of the written file
        """
        path = Path(path)
        partial_path = path.with_name(f".{path.name}.partial")

        # Only a complete file ever appears under the destination name
        try:
            with open(partial_path, 'w', encoding='ascii', newline='\n') as file:
                self.write_stream(file, cloud.points(), cloud.point_count)
            os.replace(partial_path, path)
        except BaseException:
            if partial_path.exists():
                partial_path.unlink()
            raise

        self.logger.info(f"Wrote {cloud.point_count} points to {path}")
        return path

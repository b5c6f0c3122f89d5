"""
Point Sampler

Decides which pixels of a depth grid become points, reprojects them and
applies the configured noise and color.
"""

import numpy as np
from typing import Iterator, Optional, Protocol, Tuple
import logging

from ..data_models import ConverterConfig, DepthGrid, SampledPointCloud
from ..exceptions import DegenerateInputError
from .pinhole_reprojector import PinholeReprojector


class RandomSource(Protocol):
    """Source of the random draws used while sampling."""

    def uniform(self, size: int) -> np.ndarray:
        """Draw `size` values uniformly from [0, 1)."""
        ...

    def normal(self, stddev: float, size: Tuple[int, ...]) -> np.ndarray:
        """Draw zero-mean Gaussian values with the given standard deviation."""
        ...


class NumpyRandomSource:
    """RandomSource backed by a numpy Generator."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def uniform(self, size: int) -> np.ndarray:
        return self.rng.random(size)

    def normal(self, stddev: float, size: Tuple[int, ...]) -> np.ndarray:
        return self.rng.normal(0.0, stddev, size)


class PointSampler:
    """Range-filters, subsamples and perturbs reprojected depth samples."""

    def __init__(self, config: Optional[ConverterConfig] = None,
                 random_source: Optional[RandomSource] = None):
        """
        Initialize point sampler.

        Args:
            config: Converter configuration (camera + sampling policy)
            random_source: Random draws; defaults to an entropy-seeded numpy
                generator unless the configuration fixes a seed
        """
        self.config = config or ConverterConfig()
        self.policy = self.config.sampling
        self.random_source = random_source or NumpyRandomSource(self.config.seed)
        self.reprojector = PinholeReprojector(self.config.camera)
        self.logger = logging.getLogger(__name__)

        self.logger.info(f"Point sampler initialized: cuts=({self.policy.lower_cut}, {self.policy.upper_cut}), "
                         f"keep_fraction={self.policy.keep_fraction}, noise_stddev={self.policy.noise_stddev}")

    def check_grid(self, grid: DepthGrid) -> None:
        """Reject grids whose samples are all identical (usually a failed decode)."""
        if grid.is_flat():
            raise DegenerateInputError(
                f"Depth grid is flat: all {grid.size} samples equal {grid.depth.flat[0]}")

    def iter_rows(self, grid: DepthGrid) -> Iterator[Tuple[int, np.ndarray, int]]:
        """
        Sample the grid one row at a time.

        Yields:
            Tuples of (row, Nx3 positions of kept pixels, candidate count)
        """
        self.check_grid(grid)

        policy = self.policy
        for y in range(grid.height):
            depths = grid.depth[y]

            # One keep draw per pixel, candidate or not
            draws = self.random_source.uniform(grid.width)

            # Strict on both sides; NaN never passes
            candidates = (depths > policy.lower_cut) & (depths < policy.upper_cut)
            kept = candidates & (draws < policy.keep_fraction)

            xs = np.flatnonzero(kept)
            if xs.size == 0:
                positions = np.empty((0, 3), dtype=np.float64)
            else:
                positions = self.reprojector.reproject_pixels(grid, xs, y)
                if policy.noise_stddev > 0:
                    positions = positions + self.random_source.normal(policy.noise_stddev, positions.shape)

            yield y, positions, int(np.count_nonzero(candidates))

    def sample(self, grid: DepthGrid) -> SampledPointCloud:
        """
        Run the full sampling pass over a depth grid.

        Args:
            grid: Source depth grid

        Returns:
            Sampled point cloud in raster order
        """
        blocks = []
        candidate_count = 0
        for _, positions, candidates in self.iter_rows(grid):
            blocks.append(positions)
            candidate_count += candidates

        positions = np.concatenate(blocks, axis=0)
        cloud = SampledPointCloud(
            positions=positions,
            point_color=self.policy.point_color,
            candidate_count=candidate_count,
            source_size=grid.size,
        )

        self.logger.info(f"Sampled {cloud.point_count}/{grid.size} pixels "
                         f"({candidate_count} inside depth range)")

        return cloud

"""
Tests for the pinhole camera reprojector
"""

import math
import pytest
import numpy as np
from hypothesis import given, settings, strategies as st

from depth_pointcloud.data_models import CameraModel, DepthGrid
from depth_pointcloud.exceptions import InputFormatError
from depth_pointcloud.reconstruction.pinhole_reprojector import PinholeReprojector


class TestPinholeReprojector:
    """Test suite for pinhole reprojection."""

    @pytest.fixture
    def reprojector(self, camera):
        """Fixture providing a unit-normalization reprojector."""
        return PinholeReprojector(camera)

    @pytest.fixture
    def legacy_reprojector(self, legacy_camera):
        """Fixture providing a focal-length normalization reprojector."""
        return PinholeReprojector(legacy_camera)

    def test_reprojector_initialization(self, reprojector, camera):
        assert reprojector.camera == camera
        assert hasattr(reprojector, 'logger')

    def test_two_pixel_scenario_focal(self, legacy_reprojector, two_pixel_grid):
        """Test the 2x1 grid against hand-computed legacy positions."""
        # sensor 36 x 18 mm; pixel corners at x = -18 and x = 0, y = +9
        left = legacy_reprojector.reproject(two_pixel_grid, 0, 0)
        right = legacy_reprojector.reproject(two_pixel_grid, 1, 0)

        np.testing.assert_allclose(left, [-3.6, 1.8, -10.0])
        np.testing.assert_allclose(right, [0.0, 3.6, -20.0])

    def test_two_pixel_scenario_unit(self, reprojector, two_pixel_grid):
        """Test that z scales with depth and x follows the pixel column."""
        left = reprojector.reproject(two_pixel_grid, 0, 0)
        right = reprojector.reproject(two_pixel_grid, 1, 0)

        assert left[2] < 0 and right[2] < 0
        assert left[0] < 0
        assert left[0] < right[0]
        assert right[0] == pytest.approx(0.0)

        # Distance from the focal point equals the depth value
        assert np.linalg.norm(left) == pytest.approx(10.0)
        assert np.linalg.norm(right) == pytest.approx(20.0)

        expected_left = np.array([-18.0, 9.0, -50.0]) / math.sqrt(2905.0) * 10.0
        np.testing.assert_allclose(left, expected_left)

    def test_optical_axis_pixel(self, reprojector, legacy_reprojector):
        """Test that the pixel at the sensor center lies on the optical axis."""
        grid = DepthGrid(np.full((2, 2), 7.0) + np.eye(2))
        for r in (reprojector, legacy_reprojector):
            np.testing.assert_allclose(r.reproject(grid, 1, 1), [0.0, 0.0, -8.0], atol=1e-12)

    def test_vertical_axis_is_flipped(self, reprojector):
        """Test that image rows grow downwards while Y grows upwards."""
        grid = DepthGrid(np.array([[10.0], [11.0], [12.0], [13.0]]))
        top = reprojector.reproject(grid, 0, 0)
        bottom = reprojector.reproject(grid, 0, 3)
        assert top[1] > 0
        assert bottom[1] < top[1]

    def test_sensor_height_follows_aspect_ratio(self, legacy_reprojector):
        """Test that the top row sits half a sensor height above the axis."""
        # 4x3 image on a 36mm sensor -> 27mm sensor height
        directions = legacy_reprojector.ray_directions(4, 3, 0, 0)
        np.testing.assert_allclose(directions, [-18.0 / 50.0, 13.5 / 50.0, -1.0])

    def test_unit_directions_have_unit_length(self, reprojector):
        y_coords, x_coords = np.mgrid[0:5, 0:7]
        directions = reprojector.ray_directions(7, 5, x_coords, y_coords)

        assert directions.shape == (5, 7, 3)
        np.testing.assert_allclose(np.linalg.norm(directions, axis=-1), 1.0)

    def test_zero_height_rejected(self, reprojector):
        with pytest.raises(InputFormatError):
            reprojector.ray_directions(4, 0, 0, 0)

    def test_pixel_outside_grid(self, reprojector, ramp_grid):
        with pytest.raises(IndexError):
            reprojector.reproject(ramp_grid, 4, 0)

    def test_reproject_pixels_matches_single_pixels(self, reprojector, ramp_grid):
        """Test the row path against the single-pixel path."""
        xs = np.array([0, 2, 3])
        positions = reprojector.reproject_pixels(ramp_grid, xs, 1)

        assert positions.shape == (3, 3)
        for row, x in zip(positions, xs):
            np.testing.assert_array_equal(row, reprojector.reproject(ramp_grid, int(x), 1))

    def test_reproject_grid(self, reprojector, ramp_grid):
        """Test dense reprojection against the single-pixel path."""
        positions = reprojector.reproject_grid(ramp_grid)

        assert positions.shape == (3, 4, 3)
        for y in range(ramp_grid.height):
            for x in range(ramp_grid.width):
                np.testing.assert_allclose(positions[y, x], reprojector.reproject(ramp_grid, x, y))

    def test_negative_depth_points_behind_sensor(self, legacy_reprojector):
        grid = DepthGrid(np.array([[-4.0, 4.0]]))
        assert legacy_reprojector.reproject(grid, 0, 0)[2] == pytest.approx(4.0)

    @given(
        depth=st.floats(min_value=1e-3, max_value=1e6),
        x=st.integers(min_value=0, max_value=31),
        y=st.integers(min_value=0, max_value=23),
        sensor_width=st.floats(min_value=1.0, max_value=100.0),
        focal_length=st.floats(min_value=1.0, max_value=500.0),
    )
    @settings(max_examples=50, deadline=None)
    def test_reprojection_is_deterministic(self, depth, x, y, sensor_width, focal_length):
        """Property: identical inputs give bit-identical positions."""
        grid = DepthGrid(np.full((24, 32), depth, dtype=np.float32))
        reprojector = PinholeReprojector(CameraModel(sensor_width, focal_length))

        first = reprojector.reproject(grid, x, y)
        second = reprojector.reproject(grid, x, y)

        np.testing.assert_array_equal(first, second)
        assert np.linalg.norm(first) == pytest.approx(float(np.float32(depth)), rel=1e-9)

    @given(
        depth=st.floats(min_value=1e-3, max_value=1e6),
        x=st.integers(min_value=0, max_value=15),
        y=st.integers(min_value=0, max_value=15),
    )
    @settings(max_examples=50, deadline=None)
    def test_focal_normalization_keeps_axial_depth(self, depth, x, y):
        """Property: legacy normalization puts every point at z = -depth."""
        grid = DepthGrid(np.full((16, 16), depth, dtype=np.float32))
        reprojector = PinholeReprojector(CameraModel(normalization="focal"))

        position = reprojector.reproject(grid, x, y)

        assert position[2] == -float(np.float32(depth))

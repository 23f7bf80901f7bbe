import math

import numpy as np
import pytest

from globeview_app.math import projection
from globeview_app.math.projection import ProjectionMode


def sample_points(limit: float, count: int = 25) -> np.ndarray:
    axis = np.linspace(-limit, limit, count)
    grid_x, grid_y = np.meshgrid(axis, axis)
    return np.stack([grid_x.ravel(), grid_y.ravel()], axis=-1)


def test_orthographic_points_are_unit_and_face_viewer():
    hits = 0
    for point in sample_points(1.0):
        result = projection.deproject(point, ProjectionMode.ORTHOGRAPHIC)
        if result is None:
            continue
        hits += 1
        assert math.isclose(float(np.dot(result, result)), 1.0, abs_tol=1e-12)
        assert result[2] >= 0.0
    assert hits > 0


def test_orthographic_discards_outside_disc():
    for point in sample_points(3.0):
        if point[0] ** 2 + point[1] ** 2 > 1.0:
            assert projection.deproject(point, ProjectionMode.ORTHOGRAPHIC) is None


def test_equirectangular_origin_maps_to_front():
    result = projection.deproject((0.0, 0.0), ProjectionMode.EQUIRECTANGULAR)
    np.testing.assert_allclose(result, [0.0, 0.0, 1.0], atol=1e-12)


@pytest.mark.parametrize("latitude", [math.pi / 2 + 1e-6, -math.pi / 2 - 1e-6, 2.0, -3.0])
def test_equirectangular_discards_beyond_poles(latitude):
    assert projection.deproject((0.3, latitude), ProjectionMode.EQUIRECTANGULAR) is None


def test_equirectangular_keeps_exact_pole():
    result = projection.deproject((0.0, math.pi / 2), ProjectionMode.EQUIRECTANGULAR)
    np.testing.assert_allclose(result, [0.0, 1.0, 0.0], atol=1e-12)


def test_perspective_centre_ray_hits_sub_observer_point():
    result = projection.deproject((0.0, 0.0), ProjectionMode.PERSPECTIVE, view_height=2.0)
    np.testing.assert_allclose(result, [0.0, 0.0, 1.0], atol=1e-12)


def test_perspective_miss_discards():
    assert projection.deproject((10.0, 10.0), ProjectionMode.PERSPECTIVE, view_height=2.0) is None
    assert projection.perspective_roots((10.0, 10.0), 2.0) is None


@pytest.mark.parametrize("view_height", [0.05, 0.5, 2.0, 6.0])
def test_perspective_selects_near_root(view_height):
    checked = 0
    for point in sample_points(1.5, count=15):
        roots = projection.perspective_roots(point, view_height)
        result = projection.deproject(point, ProjectionMode.PERSPECTIVE, view_height)
        if roots is None:
            assert result is None
            continue
        checked += 1
        t_near, t_far = roots
        assert t_near <= t_far
        far_z = (view_height + 1.0) - t_far * view_height
        # The near hit is closer to the observer on +Z.
        assert result[2] >= far_z - 1e-12
        assert math.isclose(result[2], (view_height + 1.0) - t_near * view_height, abs_tol=1e-12)
        assert math.isclose(float(np.linalg.norm(result)), 1.0, abs_tol=1e-9)
    assert checked > 0


@pytest.mark.parametrize("mode", list(ProjectionMode))
def test_grid_matches_scalar_deprojection(mode):
    points = sample_points(2.0, count=11)
    grid, valid = projection.deproject_grid(points, mode, view_height=1.5)
    for point, vector, hit in zip(points, grid, valid):
        scalar = projection.deproject(point, mode, view_height=1.5)
        if scalar is None:
            assert not hit
            np.testing.assert_array_equal(vector, [0.0, 0.0, 0.0])
        else:
            assert hit
            np.testing.assert_allclose(vector, scalar, atol=1e-12)
    assert np.all(np.isfinite(grid))


def test_screen_grid_is_centred_and_scaled():
    grid = projection.screen_grid(4, 2, zoom=1.0)
    assert grid.shape == (2, 4, 2)
    # 2 / min(4, 2) / zoom = 1 radian per pixel.
    np.testing.assert_allclose(grid[0, :, 0], [-1.5, -0.5, 0.5, 1.5])
    np.testing.assert_allclose(grid[:, 0, 1], [0.5, -0.5])
    np.testing.assert_allclose(projection.screen_point(3, 1, 4, 2, 1.0), grid[1, 3])


def test_rotation_centres_requested_point():
    longitude, latitude = 1.1, -0.4
    rotation = projection.rotation_from_center(longitude, latitude)
    centre = projection.apply_rotation(rotation, np.array([0.0, 0.0, 1.0]))
    np.testing.assert_allclose(centre, projection.angles_to_sphere(longitude, latitude), atol=1e-12)
    np.testing.assert_allclose(rotation @ rotation.T, np.eye(3), atol=1e-12)
    assert math.isclose(float(np.linalg.det(rotation)), 1.0, abs_tol=1e-12)


def test_rotation_keeps_north_up():
    for latitude in np.linspace(-1.5, 1.5, 7):
        rotation = projection.rotation_from_center(0.7, float(latitude))
        screen_up = rotation @ np.array([0.0, 1.0, 0.0])
        assert screen_up[1] >= 0.0
        screen_right = rotation @ np.array([1.0, 0.0, 0.0])
        assert math.isclose(float(screen_right[1]), 0.0, abs_tol=1e-12)


def test_sphere_angles_roundtrip():
    for longitude in [-3.0, -1.0, 0.0, 0.5, 3.1]:
        for latitude in [-1.5, -0.2, 0.0, 0.9]:
            lon2, lat2 = projection.sphere_to_angles(projection.angles_to_sphere(longitude, latitude))
            assert math.isclose(lon2, longitude, abs_tol=1e-12)
            assert math.isclose(lat2, latitude, abs_tol=1e-12)


def test_pole_angles_are_finite():
    longitude, latitude = projection.sphere_to_angles(np.array([0.0, 1.0, 0.0]))
    assert longitude == 0.0
    assert math.isclose(latitude, math.pi / 2)


def test_projection_mode_parse():
    assert ProjectionMode.parse("Perspective") is ProjectionMode.PERSPECTIVE
    assert ProjectionMode.parse(ProjectionMode.ORTHOGRAPHIC) is ProjectionMode.ORTHOGRAPHIC
    with pytest.raises(ValueError):
        ProjectionMode.parse("mercator")


def test_non_positive_viewport_rejected():
    with pytest.raises(ValueError):
        projection.radians_per_screen_pixel(0, 10, 1.0)
    with pytest.raises(ValueError):
        projection.radians_per_screen_pixel(10, 10, 0.0)

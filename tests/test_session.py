import math

import numpy as np
import pytest

from globeview_app.config import ViewerSettings
from globeview_app.math.projection import ProjectionMode
from globeview_app.session import GlobeSession


def test_frame_parameters_reflect_controller_state():
    session = GlobeSession(width=400, height=200)
    session.controller.set_projection("perspective")
    session.controller.zoom(1)
    params = session.frame_parameters()
    assert params.projection is ProjectionMode.PERSPECTIVE
    assert params.zoom == pytest.approx(1.1)
    assert params.aspect_ratio == 2.0
    assert (params.width, params.height) == (400, 200)
    assert params.lod == 0.0


def test_frame_parameters_are_a_snapshot():
    session = GlobeSession(width=100, height=100)
    params = session.frame_parameters()
    session.controller.begin_drag(0, 0)
    session.controller.continue_drag(10, 0)
    np.testing.assert_allclose(params.rotation, np.eye(3), atol=1e-12)


def test_render_requires_texture():
    session = GlobeSession(width=16, height=16)
    assert not session.has_texture
    with pytest.raises(ValueError):
        session.render_frame()


def test_render_frame_uses_viewport_size():
    session = GlobeSession(settings=ViewerSettings(background=(5, 5, 5)), width=40, height=30)
    session.set_texture(np.full((64, 128, 3), 120, dtype=np.uint8))
    frame = session.render_frame()
    assert frame.shape == (30, 40, 3)
    np.testing.assert_array_equal(frame[0, 0], [5, 5, 5])
    np.testing.assert_array_equal(frame[15, 20], [120, 120, 120])
    session.close()
    assert not session.has_texture


def test_angles_at_centre_follow_camera():
    session = GlobeSession(width=100, height=100)
    longitude, latitude = session.angles_at(49.5, 49.5)
    assert longitude == pytest.approx(0.0, abs=1e-12)
    assert latitude == pytest.approx(0.0, abs=1e-12)

    session.camera.set_center(1.0, -0.5)
    longitude, latitude = session.angles_at(49.5, 49.5)
    assert longitude == pytest.approx(1.0)
    assert latitude == pytest.approx(-0.5)


def test_angles_at_off_globe_is_none():
    session = GlobeSession(width=100, height=100)
    assert session.angles_at(0, 0) is None


def test_angles_above_centre_are_north():
    session = GlobeSession(projection="equirectangular", width=100, height=100)
    longitude, latitude = session.angles_at(49.5, 24.5)
    assert longitude == pytest.approx(0.0, abs=1e-12)
    # 25 px at 2 / 100 rad per pixel.
    assert latitude == pytest.approx(0.5)
    assert math.degrees(latitude) > 0.0

"""Deprojection of viewport coordinates onto the unit sphere.

Screen points are expressed in "radians at screen centre": pixel offsets from
the viewport centre scaled by ``2 / min(width, height) / zoom``. World space is
right-handed with +Y towards the north pole and longitude measured from +Z
towards +X, so ``(0, 0, 1)`` is the point at longitude 0, latitude 0.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

HALF_PI = 0.5 * math.pi


class ProjectionMode(Enum):
    """Projection models understood by the renderer and the controller."""

    EQUIRECTANGULAR = "equirectangular"
    ORTHOGRAPHIC = "orthographic"
    PERSPECTIVE = "perspective"

    def __str__(self) -> str:  # pragma: no cover - convenience for UI display
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Union["ProjectionMode", str]) -> "ProjectionMode":
        """Resolve a mode from an enum member or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Unsupported projection: {value!r} (expected one of {choices})") from None


DEFAULT_PROJECTION = ProjectionMode.ORTHOGRAPHIC


# ----------------------------------------------------------------------------
def radians_per_screen_pixel(width: int, height: int, zoom: float) -> float:
    """Angular size of one screen pixel at the view centre."""
    if width <= 0 or height <= 0:
        raise ValueError("Viewport dimensions must be positive")
    if zoom <= 0.0:
        raise ValueError("Zoom must be positive")
    return 2.0 / float(min(width, height)) / zoom


def screen_point(px: float, py: float, width: int, height: int, zoom: float) -> np.ndarray:
    """Convert a pixel position (origin top-left, y down) to a screen point."""
    scale = radians_per_screen_pixel(width, height, zoom)
    return np.array(
        [
            (px + 0.5 - 0.5 * width) * scale,
            (0.5 * height - (py + 0.5)) * scale,
        ],
        dtype=np.float64,
    )


def screen_grid(width: int, height: int, zoom: float) -> np.ndarray:
    """Return screen points for every pixel centre, shape ``(height, width, 2)``."""
    scale = radians_per_screen_pixel(width, height, zoom)
    xs = (np.arange(width, dtype=np.float64) + 0.5 - 0.5 * width) * scale
    ys = (0.5 * height - (np.arange(height, dtype=np.float64) + 0.5)) * scale
    grid_x, grid_y = np.meshgrid(xs, ys)
    return np.stack([grid_x, grid_y], axis=-1)


# ----------------------------------------------------------------------------
def angles_to_sphere(longitude: float, latitude: float) -> np.ndarray:
    """Return the unit vector for the given longitude/latitude in radians."""
    cos_lat = math.cos(latitude)
    return np.array(
        [
            cos_lat * math.sin(longitude),
            math.sin(latitude),
            cos_lat * math.cos(longitude),
        ],
        dtype=np.float64,
    )


def sphere_to_angles(point: np.ndarray) -> Tuple[float, float]:
    """Return ``(longitude, latitude)`` for a point on the sphere.

    ``atan2(0, 0)`` is 0, so the poles resolve to longitude 0 instead of NaN.
    """
    x, y, z = (float(c) for c in np.asarray(point, dtype=np.float64).reshape(3))
    longitude = math.atan2(x, z)
    latitude = math.atan2(y, math.hypot(x, z))
    return longitude, latitude


def perspective_roots(point: np.ndarray, view_height: float) -> Optional[Tuple[float, float]]:
    """Ray parameters ``(t_near, t_far)`` where a perspective ray meets the sphere.

    The observer sits at ``(0, 0, view_height + 1)`` looking down -Z; the ray
    through screen point ``(x, y)`` has direction ``(x, y, -view_height)``.
    Returns ``None`` when the ray misses the sphere.
    """
    x, y = (float(c) for c in np.asarray(point, dtype=np.float64).reshape(2))
    h = float(view_height)
    a = (x * x) + (y * y) + (h * h)
    b = -2.0 * ((h * h) + h)
    c = (h * h) + (2.0 * h)
    discriminant = (b * b) - (4.0 * a * c)
    if discriminant < 0.0 or a <= 0.0:
        return None
    root = math.sqrt(discriminant)
    return (-b - root) / (2.0 * a), (-b + root) / (2.0 * a)


def deproject(
    point: np.ndarray,
    mode: ProjectionMode,
    view_height: float = 0.0,
) -> Optional[np.ndarray]:
    """Map a screen point onto the unit sphere in camera-relative coordinates.

    Args:
        point: Screen point ``(x, y)`` in radians at screen centre.
        mode: Projection model to invert.
        view_height: Observer altitude in sphere radii; only read by
            ``ProjectionMode.PERSPECTIVE``.

    Returns:
        A unit 3-vector, or ``None`` when no surface point lies under the
        screen coordinate.
    """
    x, y = (float(c) for c in np.asarray(point, dtype=np.float64).reshape(2))

    if mode is ProjectionMode.EQUIRECTANGULAR:
        if abs(y) > HALF_PI:
            return None
        return angles_to_sphere(x, y)

    if mode is ProjectionMode.ORTHOGRAPHIC:
        z_sq = 1.0 - (x * x) - (y * y)
        if z_sq < 0.0:
            return None
        return np.array([x, y, math.sqrt(z_sq)], dtype=np.float64)

    if mode is ProjectionMode.PERSPECTIVE:
        roots = perspective_roots((x, y), view_height)
        if roots is None:
            return None
        # The far root is occluded by the near surface.
        t = roots[0]
        h = float(view_height)
        return np.array([t * x, t * y, (h + 1.0) - (t * h)], dtype=np.float64)

    raise ValueError(f"Unsupported projection: {mode!r}")


def deproject_grid(
    points: np.ndarray,
    mode: ProjectionMode,
    view_height: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised :func:`deproject` over an array of screen points.

    Returns ``(sphere_points, valid)`` where ``sphere_points`` has shape
    ``points.shape[:-1] + (3,)`` and ``valid`` flags entries that hit the
    sphere. Discarded entries are zero-filled.
    """
    pts = np.asarray(points, dtype=np.float64)
    x = pts[..., 0]
    y = pts[..., 1]
    out = np.zeros(pts.shape[:-1] + (3,), dtype=np.float64)

    if mode is ProjectionMode.EQUIRECTANGULAR:
        valid = np.abs(y) <= HALF_PI
        cos_lat = np.cos(y)
        out[..., 0] = cos_lat * np.sin(x)
        out[..., 1] = np.sin(y)
        out[..., 2] = cos_lat * np.cos(x)
    elif mode is ProjectionMode.ORTHOGRAPHIC:
        z_sq = 1.0 - (x * x) - (y * y)
        valid = z_sq >= 0.0
        out[..., 0] = x
        out[..., 1] = y
        out[..., 2] = np.sqrt(np.where(valid, z_sq, 0.0))
    elif mode is ProjectionMode.PERSPECTIVE:
        h = float(view_height)
        a = (x * x) + (y * y) + (h * h)
        b = -2.0 * ((h * h) + h)
        c = (h * h) + (2.0 * h)
        discriminant = (b * b) - (4.0 * a * c)
        valid = (discriminant >= 0.0) & (a > 0.0)
        safe_a = np.where(valid, a, 1.0)
        t = (-b - np.sqrt(np.where(valid, discriminant, 0.0))) / (2.0 * safe_a)
        out[..., 0] = t * x
        out[..., 1] = t * y
        out[..., 2] = (h + 1.0) - (t * h)
    else:
        raise ValueError(f"Unsupported projection: {mode!r}")

    out[~valid] = 0.0
    return out, valid


# ----------------------------------------------------------------------------
def rotation_from_center(longitude: float, latitude: float) -> np.ndarray:
    """Orientation that brings ``(longitude, latitude)`` to the view centre.

    Composes a longitude rotation about +Y with a latitude tilt about +X,
    ``R = Ry(longitude) @ Rx(-latitude)``. Camera +Y stays in the plane of the
    meridian, so north is up and there is no roll.
    """
    cos_lon = math.cos(longitude)
    sin_lon = math.sin(longitude)
    cos_lat = math.cos(latitude)
    sin_lat = math.sin(latitude)

    yaw = np.array(
        [
            [cos_lon, 0.0, sin_lon],
            [0.0, 1.0, 0.0],
            [-sin_lon, 0.0, cos_lon],
        ],
        dtype=np.float64,
    )
    tilt = np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, cos_lat, sin_lat],
            [0.0, -sin_lat, cos_lat],
        ],
        dtype=np.float64,
    )
    return yaw @ tilt


def apply_rotation(rotation: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Rotate camera-relative sphere points into world coordinates."""
    pts = np.asarray(points, dtype=np.float64)
    return pts @ np.asarray(rotation, dtype=np.float64).T

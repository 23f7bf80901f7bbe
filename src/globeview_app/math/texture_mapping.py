"""Sphere point to equirectangular texture coordinate mapping."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .projection import radians_per_screen_pixel, sphere_to_angles


@dataclass(frozen=True, slots=True)
class ImageCoordinate:
    """Normalised texture coordinate plus the mip level to sample at."""

    u: float
    v: float
    lod: float = 0.0


def angles_to_image_coordinate(longitude: float, latitude: float) -> Tuple[float, float]:
    """Map angles in radians onto ``[0, 1] x [0, 1]``; row 0 is the north pole."""
    u = 0.5 + 0.5 * longitude / math.pi
    v = 0.5 - latitude / math.pi
    return u, v


def image_coordinate_to_angles(u: float, v: float) -> Tuple[float, float]:
    """Inverse of :func:`angles_to_image_coordinate`."""
    longitude = (u - 0.5) * 2.0 * math.pi
    latitude = (0.5 - v) * math.pi
    return longitude, latitude


def to_image_coordinate(point: np.ndarray, lod: float = 0.0) -> ImageCoordinate:
    """Texture coordinate for a world-space sphere point."""
    longitude, latitude = sphere_to_angles(point)
    u, v = angles_to_image_coordinate(longitude, latitude)
    return ImageCoordinate(u, v, max(0.0, float(lod)))


def image_coordinates(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised texture coordinates for an array of sphere points ``(..., 3)``."""
    pts = np.asarray(points, dtype=np.float64)
    x = pts[..., 0]
    y = pts[..., 1]
    z = pts[..., 2]
    # np.arctan2(0, 0) == 0, which keeps the poles finite.
    longitude = np.arctan2(x, z)
    latitude = np.arctan2(y, np.hypot(x, z))
    u = 0.5 + 0.5 * longitude / math.pi
    v = 0.5 - latitude / math.pi
    return u, v


def max_mip_level(image_width: int, image_height: int) -> int:
    """Index of the last level in a full mip chain (the 1x1 level)."""
    largest = max(int(image_width), int(image_height))
    if largest <= 0:
        raise ValueError("Image dimensions must be positive")
    return int(math.floor(math.log2(largest)))


def sampling_level(
    width: int,
    height: int,
    zoom: float,
    image_height: int,
    max_level: int,
) -> float:
    """Mip level for a frame, derived from the projection's angular resolution.

    The longitude seam makes ``u`` discontinuous, so screen-space derivatives
    of the texture coordinate spike there. The level is instead taken from the
    ratio of the analytic radians per screen pixel to radians per image pixel,
    which is continuous everywhere on the globe.
    """
    if image_height <= 0:
        raise ValueError("Image height must be positive")
    per_screen_pixel = radians_per_screen_pixel(width, height, zoom)
    per_image_pixel = math.pi / float(image_height)
    lod = math.log2(per_screen_pixel / per_image_pixel)
    return float(min(max(lod, 0.0), float(max_level)))

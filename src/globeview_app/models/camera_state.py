"""Camera state domain models."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from ..config import DEFAULT_SETTINGS
from ..math.projection import HALF_PI, rotation_from_center


def wrap_longitude(value: float) -> float:
    """Wrap an angle in radians into ``(-pi, pi]``."""
    wrapped = math.fmod(value + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def clamp_latitude(value: float) -> float:
    return min(max(value, -HALF_PI), HALF_PI)


@dataclass(frozen=True, slots=True)
class CameraSnapshot:
    """Immutable copy of the camera read once per frame."""

    rotation: np.ndarray = field(compare=False)
    zoom: float
    view_height: float
    aspect_ratio: float
    width: int
    height: int
    center_longitude: float
    center_latitude: float


@dataclass(slots=True)
class CameraState:
    """Orientation, zoom and altitude of the globe view.

    ``rotation`` is derived from ``(center_longitude, center_latitude)`` each
    time the centre changes and cannot be assigned directly.
    """

    zoom: float = DEFAULT_SETTINGS.default_zoom
    view_height: float = DEFAULT_SETTINGS.default_view_height
    width: int = 1
    height: int = 1
    center_longitude: float = 0.0  # radians
    center_latitude: float = 0.0  # radians
    _rotation: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.zoom <= 0.0:
            raise ValueError("Zoom must be positive")
        if self.view_height <= 0.0:
            raise ValueError("View height must be positive")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Viewport dimensions must be positive")
        self.set_center(self.center_longitude, self.center_latitude)

    # ------------------------------------------------------------------
    @property
    def rotation(self) -> np.ndarray:
        """Sphere-to-view orientation; a read-only view of the derived matrix."""
        view = self._rotation.view()
        view.flags.writeable = False
        return view

    @property
    def aspect_ratio(self) -> float:
        return self.width / float(self.height)

    @property
    def drag_scale(self) -> float:
        """Radians of pan per pixel of pointer travel."""
        return 2.0 / float(min(self.width, self.height)) / self.zoom

    # ------------------------------------------------------------------
    def set_center(self, longitude: float, latitude: float) -> None:
        self.center_longitude = wrap_longitude(float(longitude))
        self.center_latitude = clamp_latitude(float(latitude))
        self._rotation = rotation_from_center(self.center_longitude, self.center_latitude)

    def set_zoom(self, zoom: float) -> None:
        if zoom <= 0.0:
            raise ValueError("Zoom must be positive")
        self.zoom = float(zoom)

    def set_view_height(self, view_height: float) -> None:
        if view_height <= 0.0:
            raise ValueError("View height must be positive")
        self.view_height = float(view_height)

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Viewport dimensions must be positive")
        self.width = int(width)
        self.height = int(height)

    def reset(self, zoom: float = DEFAULT_SETTINGS.default_zoom) -> None:
        self.set_zoom(zoom)
        self.set_center(0.0, 0.0)

    def snapshot(self) -> CameraSnapshot:
        return CameraSnapshot(
            rotation=self.rotation,
            zoom=self.zoom,
            view_height=self.view_height,
            aspect_ratio=self.aspect_ratio,
            width=self.width,
            height=self.height,
            center_longitude=self.center_longitude,
            center_latitude=self.center_latitude,
        )

    def to_dict(self) -> Dict[str, float]:
        """Return a loggable mapping in degrees."""
        return {
            "longitude": math.degrees(self.center_longitude),
            "latitude": math.degrees(self.center_latitude),
            "zoom": self.zoom,
            "view_height": self.view_height,
            "aspect_ratio": self.aspect_ratio,
        }

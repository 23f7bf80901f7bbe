"""Viewer configuration defaults."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

PLANET_RADIUS_M = 6_371_000.0  # metres, mean Earth radius


@dataclass(slots=True)
class ViewerSettings:
    """Tunable navigation and rendering parameters."""

    zoom_factor: float = 1.10
    drag_glitch_px: float = 30.0
    min_zoom: float = 0.25
    max_zoom: float = 512.0
    default_zoom: float = 1.0
    default_view_height: float = 2.0  # sphere radii above the surface
    min_view_height: float = 1e-4
    planet_radius_m: float = PLANET_RADIUS_M
    background: Tuple[int, int, int] = (8, 10, 16)

    def clamp_zoom(self, zoom: float) -> float:
        return min(max(zoom, self.min_zoom), self.max_zoom)

    def altitude_to_view_height(self, altitude_m: float) -> float:
        """Convert an altitude in metres to a view height in sphere radii."""
        view_height = altitude_m / self.planet_radius_m
        if not math.isfinite(view_height):
            return self.default_view_height
        return max(view_height, self.min_view_height)

    def view_height_to_altitude(self, view_height: float) -> float:
        return view_height * self.planet_radius_m


DEFAULT_SETTINGS = ViewerSettings()

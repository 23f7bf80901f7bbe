"""Pointer, touch and scroll navigation for the globe view."""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple, Union

from loguru import logger

from ..config import DEFAULT_SETTINGS, ViewerSettings
from ..math.projection import DEFAULT_PROJECTION, ProjectionMode
from ..models.camera_state import CameraState

Point = Tuple[float, float]


class NavigationController:
    """Translate discrete input events into :class:`CameraState` updates.

    Every operation is total: out-of-range input is clamped or ignored, never
    raised. Only single-point drags pan the globe; a second touch point ends
    the active drag session.
    """

    def __init__(
        self,
        camera: CameraState,
        settings: ViewerSettings = DEFAULT_SETTINGS,
        projection: ProjectionMode = DEFAULT_PROJECTION,
    ) -> None:
        self.camera = camera
        self.settings = settings
        self.projection = projection
        self._anchor: Optional[Point] = None

    # ------------------------------------------------------------------
    @property
    def dragging(self) -> bool:
        return self._anchor is not None

    @property
    def anchor(self) -> Optional[Point]:
        return self._anchor

    @property
    def altitude_editable(self) -> bool:
        """Altitude only affects the perspective projection."""
        return self.projection is ProjectionMode.PERSPECTIVE

    @property
    def altitude_m(self) -> float:
        return self.settings.view_height_to_altitude(self.camera.view_height)

    # Zoom -------------------------------------------------------------
    def zoom(self, direction: float) -> bool:
        """Zoom in for a positive ``direction``, out for a negative one."""
        if direction == 0 or math.isnan(direction):
            return False
        factor = self.settings.zoom_factor if direction > 0 else 1.0 / self.settings.zoom_factor
        previous = self.camera.zoom
        self.camera.set_zoom(self.settings.clamp_zoom(previous * factor))
        logger.debug("Zoom {:.4f} -> {:.4f}", previous, self.camera.zoom)
        return self.camera.zoom != previous

    # Drag session -----------------------------------------------------
    def begin_drag(self, x: float, y: float) -> None:
        self._anchor = (float(x), float(y))

    def continue_drag(self, x: float, y: float) -> bool:
        """Pan by the pointer travel since the anchor.

        Returns ``True`` when the camera moved. Zero deltas and jumps larger
        than ``settings.drag_glitch_px`` on either axis leave both the camera
        and the anchor untouched.
        """
        if self._anchor is None:
            return False
        dx = float(x) - self._anchor[0]
        dy = float(y) - self._anchor[1]
        if dx == 0.0 and dy == 0.0:
            return False
        limit = self.settings.drag_glitch_px
        if abs(dx) > limit or abs(dy) > limit:
            logger.debug("Rejected drag jump dx={:.1f}, dy={:.1f}", dx, dy)
            return False

        self._anchor = (float(x), float(y))
        scale = self.camera.drag_scale
        self.camera.set_center(
            self.camera.center_longitude - (dx * scale),
            self.camera.center_latitude + (dy * scale),
        )
        logger.debug(
            "Drag dx={:.1f}, dy={:.1f}, lon={:.4f}, lat={:.4f}",
            dx,
            dy,
            self.camera.center_longitude,
            self.camera.center_latitude,
        )
        return True

    def end_drag(self) -> None:
        self._anchor = None

    # Touch ------------------------------------------------------------
    def touch_begin(self, points: Sequence[Point]) -> None:
        if len(points) == 1:
            self.begin_drag(*points[0])
        else:
            self.end_drag()

    def touch_move(self, points: Sequence[Point]) -> bool:
        if len(points) != 1:
            if self.dragging:
                logger.debug("Drag cancelled by {} touch points", len(points))
            self.end_drag()
            return False
        return self.continue_drag(*points[0])

    def touch_end(self) -> None:
        self.end_drag()

    # View parameters --------------------------------------------------
    def set_projection(self, mode: Union[ProjectionMode, str]) -> ProjectionMode:
        self.projection = ProjectionMode.parse(mode)
        logger.debug("Projection set to {}", self.projection.value)
        return self.projection

    def set_altitude(self, meters: float) -> float:
        """Set the perspective observer altitude; returns the view height in radii."""
        view_height = self.settings.altitude_to_view_height(float(meters))
        self.camera.set_view_height(view_height)
        return view_height

    def resize(self, width: int, height: int) -> None:
        self.camera.resize(max(1, int(width)), max(1, int(height)))

    def reset_view(self) -> None:
        self.end_drag()
        self.camera.reset(self.settings.clamp_zoom(self.settings.default_zoom))
        logger.debug("View reset: {}", self.camera.to_dict())

"""Viewer session: the camera, its controller and the active texture."""
from __future__ import annotations

from typing import Optional, Tuple, Union

import numpy as np
from loguru import logger

from .config import DEFAULT_SETTINGS, ViewerSettings
from .math.projection import (
    DEFAULT_PROJECTION,
    ProjectionMode,
    apply_rotation,
    deproject,
    screen_point,
    sphere_to_angles,
)
from .models.camera_state import CameraState
from .render.software import FrameParameters, SoftwareRenderer
from .viewer.navigation import NavigationController


class GlobeSession:
    """Owns all mutable viewer state for the lifetime of one view.

    Input handlers mutate the camera through :attr:`controller`; the frame
    callback reads a :class:`FrameParameters` snapshot once per frame.
    """

    def __init__(
        self,
        settings: ViewerSettings = DEFAULT_SETTINGS,
        projection: Union[ProjectionMode, str] = DEFAULT_PROJECTION,
        width: int = 1,
        height: int = 1,
    ) -> None:
        self.settings = settings
        self.camera = CameraState(
            zoom=settings.clamp_zoom(settings.default_zoom),
            view_height=settings.default_view_height,
            width=max(1, int(width)),
            height=max(1, int(height)),
        )
        self.controller = NavigationController(
            self.camera,
            settings=settings,
            projection=ProjectionMode.parse(projection),
        )
        self._renderer: Optional[SoftwareRenderer] = None
        logger.info(
            "Globe session started ({} projection, {}x{})",
            self.projection.value,
            self.camera.width,
            self.camera.height,
        )

    # ------------------------------------------------------------------
    @property
    def projection(self) -> ProjectionMode:
        return self.controller.projection

    @property
    def has_texture(self) -> bool:
        return self._renderer is not None

    @property
    def renderer(self) -> SoftwareRenderer:
        if self._renderer is None:
            raise ValueError("Globe texture missing. Load an equirectangular image first.")
        return self._renderer

    def set_texture(self, image: np.ndarray) -> None:
        self._renderer = SoftwareRenderer(image, background=self.settings.background)
        width, height = self._renderer.image_size
        logger.info("Globe texture set ({}x{}, {} mip levels)", width, height, self._renderer.max_level + 1)

    def close(self) -> None:
        self._renderer = None
        self.controller.end_drag()
        logger.info("Globe session closed")

    # ------------------------------------------------------------------
    def frame_parameters(self) -> FrameParameters:
        """Snapshot the camera for one frame."""
        snapshot = self.camera.snapshot()
        lod = 0.0
        if self._renderer is not None:
            lod = self._renderer.level_of_detail(snapshot.width, snapshot.height, snapshot.zoom)
        return FrameParameters(
            rotation=snapshot.rotation,
            zoom=snapshot.zoom,
            projection=self.projection,
            view_height=snapshot.view_height,
            aspect_ratio=snapshot.aspect_ratio,
            width=snapshot.width,
            height=snapshot.height,
            lod=lod,
        )

    def render_frame(self) -> np.ndarray:
        return self.renderer.render(self.frame_parameters())

    def angles_at(self, px: float, py: float) -> Optional[Tuple[float, float]]:
        """World ``(longitude, latitude)`` under a viewport pixel, or ``None`` off the globe."""
        camera = self.camera
        point = screen_point(px, py, camera.width, camera.height, camera.zoom)
        local = deproject(point, self.projection, camera.view_height)
        if local is None:
            return None
        return sphere_to_angles(apply_rotation(camera.rotation, local))

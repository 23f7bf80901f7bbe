"""CPU rendering backend built on numpy and OpenCV."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Tuple

import cv2
import numpy as np
from loguru import logger

from ..math.projection import ProjectionMode, apply_rotation, deproject_grid, screen_grid
from ..math.texture_mapping import image_coordinates, max_mip_level, sampling_level


@dataclass(frozen=True, slots=True)
class FrameParameters:
    """Everything a backend needs to draw one frame."""

    rotation: np.ndarray = field(compare=False)
    zoom: float
    projection: ProjectionMode
    view_height: float
    aspect_ratio: float
    width: int
    height: int
    lod: float = 0.0


def validate_texture(image: np.ndarray) -> np.ndarray:
    if image.dtype != np.uint8:
        raise ValueError("Globe texture must be uint8 RGB data")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError("Globe texture must be an RGB image")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("Globe texture must not be empty")
    return np.ascontiguousarray(image)


def build_mip_chain(image: np.ndarray) -> List[np.ndarray]:
    """Return successively halved copies of ``image`` down to a single pixel."""
    levels = [np.ascontiguousarray(image)]
    height, width = image.shape[:2]
    while width > 1 or height > 1:
        width = max(1, width // 2)
        height = max(1, height // 2)
        resized = cv2.resize(levels[-1], (width, height), interpolation=cv2.INTER_AREA)
        levels.append(np.ascontiguousarray(resized))
    return levels


class SoftwareRenderer:
    """Draw the textured globe into an RGB array, one vectorised pass per frame."""

    def __init__(self, image: np.ndarray, background: Tuple[int, int, int] = (0, 0, 0)) -> None:
        texture = validate_texture(image)
        self._levels = build_mip_chain(texture)
        self._background = np.array(background, dtype=np.uint8)
        logger.debug(
            "Built mip chain for {}x{} texture with {} levels",
            texture.shape[1],
            texture.shape[0],
            len(self._levels),
        )

    @property
    def image_size(self) -> Tuple[int, int]:
        base = self._levels[0]
        return int(base.shape[1]), int(base.shape[0])

    @property
    def max_level(self) -> int:
        return max_mip_level(*self.image_size)

    def level_of_detail(self, width: int, height: int, zoom: float) -> float:
        return sampling_level(width, height, zoom, self.image_size[1], self.max_level)

    def render(self, params: FrameParameters) -> np.ndarray:
        """Return an ``(height, width, 3)`` uint8 frame for ``params``."""
        points = screen_grid(params.width, params.height, params.zoom)
        local, valid = deproject_grid(points, params.projection, params.view_height)
        world = apply_rotation(params.rotation, local)
        u, v = image_coordinates(world)

        colour = self._sample(u, v, params.lod)
        frame = np.empty((params.height, params.width, 3), dtype=np.uint8)
        frame[...] = self._background
        frame[valid] = colour[valid]
        return frame

    # ------------------------------------------------------------------
    def _sample(self, u: np.ndarray, v: np.ndarray, lod: float) -> np.ndarray:
        lod = min(max(float(lod), 0.0), float(self.max_level))
        lower = int(math.floor(lod))
        upper = min(lower + 1, self.max_level)
        weight = lod - lower

        base = self._sample_level(self._levels[lower], u, v)
        if weight <= 1e-6 or upper == lower:
            return np.clip(base, 0.0, 255.0).astype(np.uint8)
        coarse = self._sample_level(self._levels[upper], u, v)
        blended = (1.0 - weight) * base + weight * coarse
        return np.clip(np.rint(blended), 0.0, 255.0).astype(np.uint8)

    @staticmethod
    def _sample_level(level: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        height, width = level.shape[:2]
        map_x = (u * width - 0.5).astype(np.float32)
        # Rows clamp at the poles; columns wrap across the longitude seam.
        map_y = np.clip(v * height - 0.5, 0.0, height - 1).astype(np.float32)
        sampled = cv2.remap(
            level,
            map_x,
            map_y,
            interpolation=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_WRAP,
        )
        return sampled.astype(np.float32)

"""Texture loading helpers."""
from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
from loguru import logger


def load_equirectangular_image(path: Path, tolerance: float = 0.03) -> np.ndarray:
    """Load an equirectangular world image as a uint8 RGB array."""
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Unable to read globe texture: {path}")
    image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    height, width = image.shape[:2]
    ratio = width / float(height)
    if abs(ratio - 2.0) > tolerance:
        logger.warning(
            "Texture {} is {}x{} (ratio {:.3f}); equirectangular images are usually 2:1",
            path,
            width,
            height,
            ratio,
        )
    logger.debug("Loaded globe texture {} with shape {}", path, image.shape)
    return np.ascontiguousarray(image)


def make_graticule_texture(
    width: int = 1024,
    height: int = 512,
    step_deg: float = 15.0,
) -> np.ndarray:
    """Build a synthetic equirectangular texture with a latitude/longitude grid.

    The northern hemisphere is tinted blue and the southern green; the prime
    meridian and the equator are drawn in red.
    """
    if width <= 0 or height <= 0:
        raise ValueError("Texture dimensions must be positive")
    if step_deg <= 0.0:
        raise ValueError("Grid step must be positive")

    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[: height // 2] = (28, 52, 96)
    image[height // 2 :] = (30, 84, 44)

    px_per_deg_x = width / 360.0
    px_per_deg_y = height / 180.0
    lon = -180.0
    while lon <= 180.0:
        col = min(int(round((lon + 180.0) * px_per_deg_x)), width - 1)
        cv2.line(image, (col, 0), (col, height - 1), (200, 200, 200), 1)
        lon += step_deg
    lat = -90.0
    while lat <= 90.0:
        row = min(int(round((90.0 - lat) * px_per_deg_y)), height - 1)
        cv2.line(image, (0, row), (width - 1, row), (200, 200, 200), 1)
        lat += step_deg

    cv2.line(image, (width // 2, 0), (width // 2, height - 1), (220, 40, 40), 2)
    cv2.line(image, (0, height // 2), (width - 1, height // 2), (220, 40, 40), 2)
    return image

"""Input helpers for globe textures."""

from .loader import load_equirectangular_image, make_graticule_texture

__all__ = [
    "load_equirectangular_image",
    "make_graticule_texture",
]

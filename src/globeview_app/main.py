"""Application bootstrap utilities."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QGuiApplication
from PyQt6.QtWidgets import QApplication

from .io.loader import load_equirectangular_image, make_graticule_texture
from .logging import configure_logging
from .math.projection import DEFAULT_PROJECTION, ProjectionMode
from .session import GlobeSession
from .ui.main_window import MainWindow
from .viewer.globe_widget import RenderBackendUnavailable, ensure_opengl_available


def _configure_high_dpi() -> None:
    """Configure high-DPI handling before QApplication instantiation."""
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="globeview", description="Interactive globe viewer.")
    parser.add_argument("image", nargs="?", type=Path, help="Equirectangular world image.")
    parser.add_argument(
        "--projection",
        choices=[mode.value for mode in ProjectionMode],
        default=DEFAULT_PROJECTION.value,
    )
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Launch the Globeview desktop application."""
    argv = list(sys.argv if argv is None else argv)
    args, qt_args = build_parser().parse_known_args(argv[1:])
    configure_logging(args.log_level)

    _configure_high_dpi()
    app = QApplication(argv[:1] + qt_args)

    try:
        ensure_opengl_available()
    except RenderBackendUnavailable as exc:
        logger.error("{}", exc)
        return 1

    if args.image is not None:
        texture = load_equirectangular_image(args.image)
    else:
        logger.info("No image given; using a generated graticule texture")
        texture = make_graticule_texture()

    session = GlobeSession(projection=args.projection)
    window = MainWindow(session, texture)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())

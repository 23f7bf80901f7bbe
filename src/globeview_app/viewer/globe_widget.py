"""OpenGL-backed globe viewer widget."""
from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
from loguru import logger
from OpenGL.GL import (
    GL_COLOR_BUFFER_BIT,
    GL_LINEAR,
    GL_MODELVIEW,
    GL_PROJECTION,
    GL_RGB,
    GL_TEXTURE_2D,
    GL_TEXTURE_MAG_FILTER,
    GL_TEXTURE_MIN_FILTER,
    GL_TRIANGLE_STRIP,
    GL_UNPACK_ALIGNMENT,
    GL_UNSIGNED_BYTE,
    glBegin,
    glBindTexture,
    glClear,
    glClearColor,
    glDeleteTextures,
    glDisable,
    glEnable,
    glEnd,
    glGenTextures,
    glLoadIdentity,
    glMatrixMode,
    glPixelStorei,
    glTexCoord2f,
    glTexImage2D,
    glTexParameteri,
    glVertex2f,
    glViewport,
)
from PyQt6.QtCore import QEvent, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent, QMouseEvent, QOffscreenSurface, QOpenGLContext, QTouchEvent, QWheelEvent
from PyQt6.QtOpenGLWidgets import QOpenGLWidget

from ..math.projection import ProjectionMode
from ..session import GlobeSession


class RenderBackendUnavailable(RuntimeError):
    """Raised when the platform cannot provide an OpenGL context."""


def ensure_opengl_available() -> Tuple[int, int]:
    """Create a throwaway OpenGL context and return its ``(major, minor)`` version.

    Must be called after the ``QApplication`` exists.
    """
    context = QOpenGLContext()
    if not context.create():
        raise RenderBackendUnavailable("Unable to create an OpenGL context; graphics support is missing.")
    surface = QOffscreenSurface()
    surface.create()
    if not surface.isValid() or not context.makeCurrent(surface):
        raise RenderBackendUnavailable("Unable to activate an OpenGL context on this display.")
    version = context.format().version()
    context.doneCurrent()
    logger.info("OpenGL {}.{} context available", version[0], version[1])
    return version


class GlobeWidget(QOpenGLWidget):
    """Interactive globe view; input goes to the session's navigation controller."""

    pointHovered = pyqtSignal(float, float)  # longitude, latitude (radians)
    pointLeft = pyqtSignal()
    viewChanged = pyqtSignal()

    def __init__(self, session: GlobeSession, parent=None) -> None:
        super().__init__(parent)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)

        self._session = session
        self._texture_id: Optional[int] = None

    @property
    def session(self) -> GlobeSession:
        return self._session

    @property
    def controller(self):
        return self._session.controller

    # ------------------------------------------------------------------
    def set_texture(self, image: np.ndarray) -> None:
        self._session.set_texture(image)
        self.update()

    def set_projection(self, mode) -> ProjectionMode:
        projection = self.controller.set_projection(mode)
        self._view_changed()
        return projection

    def set_altitude(self, meters: float) -> None:
        self.controller.set_altitude(meters)
        if self.controller.altitude_editable:
            self._view_changed()

    def reset_view(self) -> None:
        self.controller.reset_view()
        self._view_changed()

    # ------------------------------------------------------------------
    def initializeGL(self) -> None:  # noqa: N802
        background = [channel / 255.0 for channel in self._session.settings.background]
        glClearColor(background[0], background[1], background[2], 1.0)

    def resizeGL(self, width: int, height: int) -> None:  # noqa: N802
        glViewport(0, 0, width, height)
        # Input positions arrive in logical pixels, so the camera tracks the logical size.
        self.controller.resize(self.width(), self.height())

    def paintGL(self) -> None:  # noqa: N802
        glClear(GL_COLOR_BUFFER_BIT)
        if not self._session.has_texture:
            return

        frame = self._session.render_frame()
        self._upload_frame(frame)

        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()

        glEnable(GL_TEXTURE_2D)
        glBindTexture(GL_TEXTURE_2D, self._texture_id or 0)
        # Frame row 0 is the top of the viewport.
        glBegin(GL_TRIANGLE_STRIP)
        glTexCoord2f(0.0, 1.0)
        glVertex2f(-1.0, -1.0)
        glTexCoord2f(1.0, 1.0)
        glVertex2f(1.0, -1.0)
        glTexCoord2f(0.0, 0.0)
        glVertex2f(-1.0, 1.0)
        glTexCoord2f(1.0, 0.0)
        glVertex2f(1.0, 1.0)
        glEnd()
        glBindTexture(GL_TEXTURE_2D, 0)
        glDisable(GL_TEXTURE_2D)

    # ------------------------------------------------------------------
    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self.controller.begin_drag(pos.x(), pos.y())
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        pos = event.position()
        if event.buttons() & Qt.MouseButton.LeftButton:
            if self.controller.continue_drag(pos.x(), pos.y()):
                self._view_changed()
        self._emit_hover(pos.x(), pos.y())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            self.controller.end_drag()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event) -> None:  # noqa: N802
        self.controller.end_drag()
        self.pointLeft.emit()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:  # noqa: N802
        # Positive angle delta is a scroll away from the user, which zooms in.
        if self.controller.zoom(event.angleDelta().y()):
            self._view_changed()
        event.accept()

    def event(self, event: QEvent) -> bool:
        kind = event.type()
        if kind == QEvent.Type.TouchBegin:
            self.controller.touch_begin(self._touch_points(event))
            event.accept()
            return True
        if kind == QEvent.Type.TouchUpdate:
            if self.controller.touch_move(self._touch_points(event)):
                self._view_changed()
            event.accept()
            return True
        if kind in (QEvent.Type.TouchEnd, QEvent.Type.TouchCancel):
            self.controller.touch_end()
            event.accept()
            return True
        return super().event(event)

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        if event.key() in (Qt.Key.Key_R, Qt.Key.Key_Home):
            self.reset_view()
            event.accept()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event) -> None:  # noqa: N802
        self._delete_texture()
        self._session.close()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    @staticmethod
    def _touch_points(event: QTouchEvent) -> List[Tuple[float, float]]:
        return [(point.position().x(), point.position().y()) for point in event.points()]

    def _emit_hover(self, x: float, y: float) -> None:
        angles = self._session.angles_at(x, y)
        if angles is None:
            self.pointLeft.emit()
        else:
            self.pointHovered.emit(*angles)

    def _view_changed(self) -> None:
        self.viewChanged.emit()
        self.update()

    def _upload_frame(self, frame: np.ndarray) -> None:
        height, width, _ = frame.shape
        if self._texture_id is None:
            self._texture_id = glGenTextures(1)
        glBindTexture(GL_TEXTURE_2D, self._texture_id)
        glPixelStorei(GL_UNPACK_ALIGNMENT, 1)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_LINEAR)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_LINEAR)
        glTexImage2D(
            GL_TEXTURE_2D,
            0,
            GL_RGB,
            width,
            height,
            0,
            GL_RGB,
            GL_UNSIGNED_BYTE,
            frame,
        )
        glBindTexture(GL_TEXTURE_2D, 0)

    def _delete_texture(self) -> None:
        if self._texture_id is not None:
            self.makeCurrent()
            glDeleteTextures([self._texture_id])
            self.doneCurrent()
            self._texture_id = None

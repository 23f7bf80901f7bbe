"""Main application window."""
from __future__ import annotations

import math
from typing import Optional

import numpy as np
from loguru import logger
from PyQt6.QtWidgets import (
    QComboBox,
    QDoubleSpinBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..math.projection import ProjectionMode
from ..session import GlobeSession
from ..viewer.globe_widget import GlobeWidget


class MainWindow(QMainWindow):
    """Globe viewer with projection and altitude controls."""

    def __init__(self, session: GlobeSession, texture: Optional[np.ndarray] = None) -> None:
        super().__init__()
        self.setWindowTitle("Globeview")
        self.resize(1100, 760)

        self.viewer = GlobeWidget(session, self)
        self._build_ui()
        self._connect_signals()
        if texture is not None:
            self.viewer.set_texture(texture)

        self._sync_projection_controls()
        self._update_view_label()
        logger.info("UI initialised")

    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        controls = QHBoxLayout()
        controls.setSpacing(8)

        self.projection_combo = QComboBox()
        for mode in ProjectionMode:
            self.projection_combo.addItem(str(mode), mode.value)

        self.altitude_spin = QDoubleSpinBox()
        self.altitude_spin.setRange(1.0, 1_000_000.0)
        self.altitude_spin.setDecimals(0)
        self.altitude_spin.setSingleStep(500.0)
        self.altitude_spin.setSuffix(" km")
        self.altitude_spin.setKeyboardTracking(False)
        self.altitude_spin.setValue(self.viewer.controller.altitude_m / 1000.0)

        self.reset_view_button = QPushButton("Reset View")

        controls.addWidget(QLabel("Projection:"))
        controls.addWidget(self.projection_combo)
        controls.addSpacing(12)
        controls.addWidget(QLabel("Altitude:"))
        controls.addWidget(self.altitude_spin)
        controls.addStretch(1)
        controls.addWidget(self.reset_view_button)

        layout.addLayout(controls)
        layout.addWidget(self.viewer, 1)
        self.setCentralWidget(central)

        self.hover_label = QLabel("-")
        self.view_label = QLabel("-")
        self.statusBar().addWidget(self.hover_label, 1)
        self.statusBar().addPermanentWidget(self.view_label)

    def _connect_signals(self) -> None:
        self.projection_combo.currentIndexChanged.connect(self._on_projection_changed)
        self.altitude_spin.valueChanged.connect(self._on_altitude_changed)
        self.reset_view_button.clicked.connect(self.viewer.reset_view)
        self.viewer.pointHovered.connect(self._on_point_hovered)
        self.viewer.pointLeft.connect(lambda: self.hover_label.setText("-"))
        self.viewer.viewChanged.connect(self._update_view_label)

    # ------------------------------------------------------------------
    def _sync_projection_controls(self) -> None:
        projection = self.viewer.session.projection
        index = self.projection_combo.findData(projection.value)
        if index >= 0 and index != self.projection_combo.currentIndex():
            self.projection_combo.blockSignals(True)
            self.projection_combo.setCurrentIndex(index)
            self.projection_combo.blockSignals(False)
        self.altitude_spin.setEnabled(self.viewer.controller.altitude_editable)

    def _on_projection_changed(self, index: int) -> None:
        name = self.projection_combo.itemData(index)
        if name is None:
            return
        mode = self.viewer.set_projection(name)
        self._sync_projection_controls()
        self.statusBar().showMessage(f"{mode} projection", 2000)

    def _on_altitude_changed(self, value_km: float) -> None:
        self.viewer.set_altitude(value_km * 1000.0)
        logger.debug("Altitude set to {:.0f} km", value_km)

    def _on_point_hovered(self, longitude: float, latitude: float) -> None:
        self.hover_label.setText(
            f"Lon {math.degrees(longitude):+08.3f} deg | Lat {math.degrees(latitude):+07.3f} deg"
        )

    def _update_view_label(self) -> None:
        camera = self.viewer.session.camera
        self.view_label.setText(
            f"Centre {math.degrees(camera.center_longitude):+07.2f}, "
            f"{math.degrees(camera.center_latitude):+06.2f} | Zoom {camera.zoom:.3f}"
        )

# src/presentation/components/qt_region_selector.py
"""
Qt-native region selection surface.

A frameless translucent window spanning every screen. The user drags a
rectangle; the selector reports it in global desktop coordinates together with
the id of the screen it was drawn on.
"""
from typing import Optional, Tuple

from PySide6.QtCore import QPoint, QRect, QSize, Qt, Signal
from PySide6.QtGui import QColor, QGuiApplication, QPainter, QPen
from PySide6.QtWidgets import QLabel, QMainWindow, QRubberBand, QWidget

from src.domain.models.region_model import Region
from src.infrastructure.platform.qt_screen_provider import screen_id

MIN_SELECTION_SIZE = 5


def virtual_desktop_geometry() -> QRect:
    """Bounding rectangle of all screens."""
    screens = QGuiApplication.screens()
    geometry = QRect()
    for screen in screens:
        geometry = geometry.united(screen.geometry())
    return geometry


class QtRegionSelector(QMainWindow):
    """
    A full-screen, semi-transparent overlay that lets the user click and drag
    to select a rectangular region.

    Signals:
        region_selected: (Region, display_id) in global coordinates
        selection_cancelled: The user pressed Escape
    """
    region_selected = Signal(object, object)
    selection_cancelled = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)

        self.setWindowFlags(
            Qt.FramelessWindowHint |
            Qt.WindowStaysOnTopHint |
            Qt.Tool  # So it doesn't appear in taskbar
        )
        self.setAttribute(Qt.WA_TranslucentBackground)
        self.setCursor(Qt.CrossCursor)

        self.central_widget = QWidget(self)
        self.setCentralWidget(self.central_widget)
        self.rubber_band = QRubberBand(QRubberBand.Rectangle, self)

        self.start_pos = QPoint()
        self.selection_rect: Optional[QRect] = None
        self.is_selecting = False

        self.instructions = QLabel("Click and drag to select a region. Press Esc to cancel.", self)
        self.instructions.setStyleSheet(
            "color: white; background-color: rgba(0, 0, 0, 150); padding: 10px; border-radius: 5px;"
        )
        self.instructions.setAlignment(Qt.AlignCenter)
        self.instructions.adjustSize()

        self.dimensions_label = QLabel(self)
        self.dimensions_label.setStyleSheet(
            "color: white; background-color: rgba(0, 0, 0, 150); padding: 5px; border-radius: 3px;"
        )
        self.dimensions_label.hide()

    def begin(self) -> None:
        """Reset any previous selection and cover the whole desktop."""
        self.setGeometry(virtual_desktop_geometry())
        self._reset_selection()

        # Instructions at the bottom of the primary screen
        primary = QGuiApplication.primaryScreen().geometry()
        top_left = self.mapFromGlobal(primary.topLeft())
        self.instructions.move(
            top_left.x() + (primary.width() - self.instructions.width()) // 2,
            top_left.y() + primary.height() - self.instructions.height() - 50
        )

        self.show()
        self.raise_()
        self.activateWindow()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), QColor(0, 0, 0, 80))

        if self.is_selecting and self.selection_rect:
            # Clear the selected area so the content underneath is visible
            painter.setCompositionMode(QPainter.CompositionMode_Clear)
            painter.fillRect(self.selection_rect, Qt.transparent)
            painter.setCompositionMode(QPainter.CompositionMode_SourceOver)

            painter.setPen(QPen(QColor(59, 130, 246), 2))
            painter.drawRect(self.selection_rect)

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.start_pos = event.position().toPoint()
            self.selection_rect = QRect(self.start_pos, QSize())
            self.rubber_band.setGeometry(self.selection_rect)
            self.rubber_band.show()
            self.is_selecting = True
            self.update()

    def mouseMoveEvent(self, event):
        if not self.is_selecting:
            return

        current = event.position().toPoint()
        self.selection_rect = QRect(self.start_pos, current).normalized()
        self.rubber_band.setGeometry(self.selection_rect)

        self.dimensions_label.setText(f"{self.selection_rect.width()} × {self.selection_rect.height()} px")
        self.dimensions_label.adjustSize()
        label_x = min(current.x() + 15, self.width() - self.dimensions_label.width() - 10)
        label_y = min(current.y() + 15, self.height() - self.dimensions_label.height() - 10)
        self.dimensions_label.move(label_x, label_y)
        self.dimensions_label.show()

        self.update()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.LeftButton or not self.is_selecting:
            return

        self.is_selecting = False
        selection = self._selection_in_global()
        if selection is None:
            # A click or tiny drag; let the user try again
            self._reset_selection()
            self.update()
            return

        region, display_id = selection
        self.region_selected.emit(region, display_id)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.selection_cancelled.emit()
        elif event.key() in (Qt.Key_Return, Qt.Key_Enter) and self.selection_rect:
            selection = self._selection_in_global()
            if selection is not None:
                self.region_selected.emit(*selection)

    def _reset_selection(self) -> None:
        self.rubber_band.hide()
        self.dimensions_label.hide()
        self.selection_rect = None
        self.is_selecting = False

    def _selection_in_global(self) -> Optional[Tuple[Region, Optional[str]]]:
        """
        The current selection as a global-coordinate Region clipped to the
        screen it started on, plus that screen's id.
        """
        if not self.selection_rect:
            return None
        if self.selection_rect.width() <= MIN_SELECTION_SIZE or self.selection_rect.height() <= MIN_SELECTION_SIZE:
            return None

        global_rect = QRect(self.mapToGlobal(self.selection_rect.topLeft()), self.selection_rect.size())
        screen = QGuiApplication.screenAt(global_rect.topLeft()) or QGuiApplication.primaryScreen()
        clipped = global_rect.intersected(screen.geometry())
        if clipped.isEmpty():
            return None

        display_id = screen_id(screen, QGuiApplication.screens().index(screen))
        return Region(clipped.x(), clipped.y(), clipped.width(), clipped.height()), display_id

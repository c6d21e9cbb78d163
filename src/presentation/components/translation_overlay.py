# src/presentation/components/translation_overlay.py
"""
Floating window showing a translation result next to the captured text.
"""
from typing import Any, Dict, Optional

from PySide6.QtCore import QPoint, Qt, QTimer, Signal
from PySide6.QtGui import QCursor, QFont, QGuiApplication
from PySide6.QtWidgets import QApplication, QFrame, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from src.domain.models.translation_result import TranslationResult

CURSOR_OFFSET = 16


class TranslationOverlay(QWidget):
    """
    Frameless always-on-top window with the translated text.

    Appearance and behaviour follow the ``overlay`` settings section and can be
    changed while the window is open with apply_settings().

    Signals:
        dismissed: The user closed the overlay or it auto-hid
    """
    dismissed = Signal()

    def __init__(self, overlay_settings: Dict[str, Any], parent=None):
        super().__init__(parent)
        self.setWindowFlags(
            Qt.FramelessWindowHint |
            Qt.WindowStaysOnTopHint |
            Qt.Tool
        )
        self.setAttribute(Qt.WA_TranslucentBackground)
        self.setAttribute(Qt.WA_ShowWithoutActivating)

        self.frame = QFrame(self)
        self.frame.setObjectName("overlayFrame")

        self.translated_label = QLabel(self.frame)
        self.translated_label.setTextFormat(Qt.PlainText)
        self.translated_label.setWordWrap(True)
        self.translated_label.setTextInteractionFlags(Qt.TextSelectableByMouse)

        self.source_label = QLabel(self.frame)
        self.source_label.setTextFormat(Qt.PlainText)
        self.source_label.setWordWrap(True)
        self.source_label.setTextInteractionFlags(Qt.TextSelectableByMouse)

        self.meta_label = QLabel(self.frame)

        self.copy_btn = QPushButton("Copy", self.frame)
        self.copy_btn.clicked.connect(self._copy_translation)
        self.close_btn = QPushButton("×", self.frame)
        self.close_btn.setFixedWidth(28)
        self.close_btn.clicked.connect(self.dismiss)

        header = QHBoxLayout()
        header.addWidget(self.meta_label, 1)
        header.addWidget(self.copy_btn)
        header.addWidget(self.close_btn)

        frame_layout = QVBoxLayout(self.frame)
        frame_layout.setContentsMargins(14, 10, 14, 12)
        frame_layout.addLayout(header)
        frame_layout.addWidget(self.translated_label)
        frame_layout.addWidget(self.source_label)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.addWidget(self.frame)

        self.auto_hide_timer = QTimer(self)
        self.auto_hide_timer.setSingleShot(True)
        self.auto_hide_timer.timeout.connect(self.dismiss)

        self.result: Optional[TranslationResult] = None
        self.settings: Dict[str, Any] = {}
        self.apply_settings(overlay_settings)

    def apply_settings(self, overlay_settings: Dict[str, Any]) -> None:
        self.settings = dict(overlay_settings)

        self.setWindowOpacity(max(0, min(100, int(self.settings.get("opacity", 90)))) / 100.0)
        self.setMaximumWidth(int(self.settings.get("max_width", 600)))
        self.setAttribute(Qt.WA_TransparentForMouseEvents, bool(self.settings.get("click_through", False)))

        font_size = int(self.settings.get("font_size", 16))
        self.translated_label.setFont(QFont(self.settings.get("font_family", "Sarabun"), font_size))
        self.source_label.setFont(QFont(self.settings.get("font_family", "Sarabun"), max(8, font_size - 4)))

        background = self.settings.get("background_color", "#0f172a")
        text_color = self.settings.get("text_color", "#f8fafc")
        self.frame.setStyleSheet(
            f"#overlayFrame {{ background-color: {background}; border-radius: 8px; }}"
            f"QLabel {{ color: {text_color}; background: transparent; }}"
            f"QPushButton {{ color: {text_color}; background: transparent; border: none; padding: 2px 6px; }}"
        )
        self.source_label.setStyleSheet("color: rgba(248, 250, 252, 160);")
        self.meta_label.setStyleSheet("color: rgba(248, 250, 252, 120); font-size: 11px;")

    def show_result(self, result: TranslationResult) -> None:
        self.result = result
        self.translated_label.setText(result.translated_text)
        self.source_label.setText(result.source_text)

        meta = f"{result.source_language} → {result.target_language}  ·  {round(result.confidence * 100)}%"
        if result.cached:
            meta += "  ·  cached"
        self.meta_label.setText(meta)

        self.adjustSize()
        self.move(self._initial_position())
        self.show()
        self.raise_()

        delay = int(self.settings.get("auto_hide_delay", 0) or 0)
        if delay > 0:
            self.auto_hide_timer.start(delay)
        else:
            self.auto_hide_timer.stop()

    def move_to(self, x: int, y: int) -> None:
        self.move(self._clamped(QPoint(x, y)))

    def dismiss(self) -> None:
        self.auto_hide_timer.stop()
        if self.isVisible():
            self.hide()
            self.dismissed.emit()

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.dismiss()
        else:
            super().keyPressEvent(event)

    def enterEvent(self, event):
        # Keep the overlay while the user is reading it
        self.auto_hide_timer.stop()
        super().enterEvent(event)

    def _initial_position(self) -> QPoint:
        position = self.settings.get("position", "cursor")
        custom = self.settings.get("custom_position")

        if position == "custom" and custom:
            return self._clamped(QPoint(int(custom.get("x", 0)), int(custom.get("y", 0))))

        if position == "center":
            screen = QGuiApplication.screenAt(QCursor.pos()) or QGuiApplication.primaryScreen()
            available = screen.availableGeometry()
            return self._clamped(QPoint(available.center().x() - self.width() // 2,
                                        available.center().y() - self.height() // 2))

        cursor = QCursor.pos()
        return self._clamped(QPoint(cursor.x() + CURSOR_OFFSET, cursor.y() + CURSOR_OFFSET))

    def _clamped(self, point: QPoint) -> QPoint:
        """Keep the whole window on the screen containing point."""
        screen = QGuiApplication.screenAt(point) or QGuiApplication.primaryScreen()
        available = screen.availableGeometry()
        x = max(available.left(), min(point.x(), available.right() - self.width()))
        y = max(available.top(), min(point.y(), available.bottom() - self.height()))
        return QPoint(x, y)

    def _copy_translation(self) -> None:
        if self.result is not None:
            QApplication.clipboard().setText(self.result.translated_text)

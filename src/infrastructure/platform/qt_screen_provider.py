# src/infrastructure/platform/qt_screen_provider.py
"""
Qt-native screen provider using QGuiApplication and QScreen.
"""
import io
import threading
from typing import Any, Callable, List, Optional, Tuple

from PIL import Image
from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QObject, Qt, QThread, Signal, Slot
from PySide6.QtGui import QGuiApplication, QPixmap, QScreen

from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_screen_provider import CaptureSource, IScreenProvider, PlatformScreen

GUI_CALL_TIMEOUT_SECONDS = 5.0


class _GuiThreadBridge(QObject):
    """Runs callables on the GUI thread and hands the outcome back to the caller."""
    call_signal = Signal(object)

    def __init__(self):
        super().__init__()
        self.call_signal.connect(self._call_impl, Qt.QueuedConnection)

    @Slot(object)
    def _call_impl(self, args_dict):
        try:
            args_dict["callback"](args_dict["func"](), None)
        except Exception as e:
            args_dict["callback"](None, e)

    def run(self, func: Callable[[], Any]) -> Any:
        """
        Call func on the GUI thread and return its value.

        Raises whatever func raised, or TimeoutError when the GUI thread does
        not respond in time.
        """
        if QThread.currentThread() == self.thread():
            return func()

        done = threading.Event()
        outcome = {"value": None, "error": None}

        def callback(value, error):
            outcome["value"] = value
            outcome["error"] = error
            done.set()

        self.call_signal.emit({"func": func, "callback": callback})
        if not done.wait(GUI_CALL_TIMEOUT_SECONDS):
            raise TimeoutError("GUI thread did not respond to screen request")
        if outcome["error"] is not None:
            raise outcome["error"]
        return outcome["value"]


def _qpixmap_to_pil(pixmap: QPixmap) -> Image.Image:
    """Convert QPixmap to PIL Image using an intermediate PNG buffer."""
    byte_array = QByteArray()
    buffer = QBuffer(byte_array)
    buffer.open(QIODevice.WriteOnly)
    pixmap.save(buffer, "PNG")
    buffer.close()

    image = Image.open(io.BytesIO(byte_array.data()))
    image.load()
    return image


def screen_id(screen: QScreen, index: int) -> str:
    return screen.name() or str(index + 1)


class QtCaptureSource(CaptureSource):
    """Whole-screen capture source backed by QScreen.grabWindow."""

    def __init__(self, screen: QScreen, source_id: str, bridge: _GuiThreadBridge, logger: ILoggerService):
        self._screen = screen
        self._source_id = source_id
        self._bridge = bridge
        self.logger = logger

    @property
    def source_id(self) -> str:
        return self._source_id

    def thumbnail(self, size: Tuple[int, int]) -> Optional[Image.Image]:
        # QPixmap is only usable on the GUI thread
        return self._bridge.run(lambda: self._grab(size))

    def _grab(self, size: Tuple[int, int]) -> Optional[Image.Image]:
        pixmap = self._screen.grabWindow(0)
        if pixmap.isNull():
            self.logger.warning("Screen grab returned an empty pixmap", source_id=self._source_id)
            return None

        width, height = size
        if width > 0 and height > 0 and (pixmap.width(), pixmap.height()) != (width, height):
            pixmap = pixmap.scaled(width, height, Qt.IgnoreAspectRatio, Qt.SmoothTransformation)

        image = _qpixmap_to_pil(pixmap)
        self.logger.debug(f"Screen grabbed with size {image.width}x{image.height}", source_id=self._source_id)
        return image


class QtScreenProvider(IScreenProvider):
    """
    Screen provider backed by the running QGuiApplication.

    Safe to call from worker threads: every Qt call is forwarded to the GUI
    thread. The provider must be constructed on the GUI thread.
    """

    def __init__(self, logger: ILoggerService):
        self.logger = logger
        self._bridge = _GuiThreadBridge()

    def list_screens(self) -> List[PlatformScreen]:
        return self._bridge.run(self._list_screens_impl)

    def primary_screen(self) -> Optional[PlatformScreen]:
        return self._bridge.run(self._primary_screen_impl)

    def list_capture_sources(self) -> List[CaptureSource]:
        screens = self._bridge.run(QGuiApplication.screens)
        return [QtCaptureSource(screen, f"screen:{index}", self._bridge, self.logger)
                for index, screen in enumerate(screens)]

    def _list_screens_impl(self) -> List[PlatformScreen]:
        return [self._describe(screen, index) for index, screen in enumerate(QGuiApplication.screens())]

    def _primary_screen_impl(self) -> Optional[PlatformScreen]:
        primary = QGuiApplication.primaryScreen()
        if primary is None:
            return None
        return self._describe(primary, QGuiApplication.screens().index(primary))

    @staticmethod
    def _describe(screen: QScreen, index: int) -> PlatformScreen:
        geometry = screen.geometry()
        return PlatformScreen(
            native_id=screen_id(screen, index),
            label=screen.name() or f"Display {index + 1}",
            x=geometry.x(),
            y=geometry.y(),
            width=geometry.width(),
            height=geometry.height(),
            scale_factor=screen.devicePixelRatio(),
        )

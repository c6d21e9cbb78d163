#!/usr/bin/env python3
"""
Screen Translator entry point.

Starts the Qt application with a system tray icon. Capturing a region runs the
OCR and translation pipeline and shows the result in a floating overlay.
"""
import argparse
import sys

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from src.application.app import initialize_app, shutdown_app
from src.domain.models.pipeline_events import ErrorEvent
from src.domain.services.i_capture_pipeline import ICapturePipeline
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_presentation_gateway import IPresentationGateway


def build_tray(app: QApplication, pipeline: ICapturePipeline, logger: ILoggerService) -> QSystemTrayIcon:
    tray = QSystemTrayIcon(app.style().standardIcon(QStyle.SP_DesktopIcon), app)
    tray.setToolTip("Screen Translator")

    menu = QMenu()
    capture_action = QAction("Capture", menu)
    hide_action = QAction("Hide overlay", menu)
    quit_action = QAction("Quit", menu)

    def on_capture():
        started = pipeline.start_capture()
        if started.is_failure:
            logger.warning(f"Capture not started: {started.error}")
            tray.showMessage("Screen Translator", started.error.message, QSystemTrayIcon.Warning)

    capture_action.triggered.connect(on_capture)
    hide_action.triggered.connect(pipeline.hide_overlay)
    quit_action.triggered.connect(app.quit)

    menu.addAction(capture_action)
    menu.addAction(hide_action)
    menu.addSeparator()
    menu.addAction(quit_action)

    tray.setContextMenu(menu)
    tray.activated.connect(
        lambda reason: on_capture() if reason == QSystemTrayIcon.Trigger else None
    )
    # setContextMenu does not take ownership of the menu
    tray._menu = menu
    return tray


def main() -> int:
    parser = argparse.ArgumentParser(description="Translate text captured from the screen")
    parser.add_argument("--data-dir", help="Directory for settings, history and logs")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    app = QApplication(sys.argv)
    app.setApplicationName("Screen Translator")
    app.setQuitOnLastWindowClosed(False)

    container = initialize_app(args.data_dir, debug=args.debug)
    logger = container.resolve(ILoggerService)
    pipeline = container.resolve(ICapturePipeline)
    gateway = container.resolve(IPresentationGateway)

    tray = build_tray(app, pipeline, logger)

    def on_event(event):
        if isinstance(event, ErrorEvent):
            tray.showMessage("Screen Translator", event.message, QSystemTrayIcon.Critical)

    gateway.add_listener(on_event)
    app.aboutToQuit.connect(lambda: shutdown_app(container))

    tray.show()
    logger.info("Screen Translator started")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())

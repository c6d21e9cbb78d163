#src/application/app.py

import logging
import os
from typing import Any, Optional

from src.application.capture_pipeline import CapturePipeline
from src.domain.common.di_container import DIContainer
from src.domain.services.i_background_task_service import IBackgroundTaskService
from src.domain.services.i_capture_pipeline import ICapturePipeline
from src.domain.services.i_capture_service import ICaptureService
from src.domain.services.i_display_service import IDisplayService
from src.domain.services.i_history_repository import IHistoryRepository
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_ocr_service import IOcrService
from src.domain.services.i_presentation_gateway import IPresentationGateway
from src.domain.services.i_screen_provider import IScreenProvider
from src.domain.services.i_settings_repository import ISettingsRepository
from src.domain.services.i_translation_service import ITranslationService
from src.domain.services.i_translator import ITranslator

from src.infrastructure.config.json_settings_repository import JsonSettingsRepository
from src.infrastructure.history.sqlalchemy_history_repository import SqlAlchemyHistoryRepository
from src.infrastructure.logging.logger_service import FileLoggerService
from src.infrastructure.ocr.tesseract_ocr_service import TesseractOcrService
from src.infrastructure.platform.capture_service import CaptureService
from src.infrastructure.platform.display_service import DisplayService
from src.infrastructure.platform.qt_screen_provider import QtScreenProvider
from src.infrastructure.threading.qt_background_task_service import QtBackgroundTaskService
from src.infrastructure.translation.google_translator import GoogleTranslator
from src.infrastructure.translation.translation_service import TranslationService
from src.infrastructure.ui.qt_presentation_gateway import QtPresentationGateway

DATA_DIR_ENV = "SCREEN_TRANSLATOR_HOME"


def default_data_dir() -> str:
    return os.environ.get(DATA_DIR_ENV) or os.path.join(os.path.expanduser("~"), ".screen-translator")


def initialize_app(data_dir: Optional[str] = None, debug: bool = False) -> DIContainer:
    """
    Construct every service and register it in a new container.

    Must be called on the GUI thread after the QApplication exists.
    """
    data_dir = data_dir or default_data_dir()
    os.makedirs(data_dir, exist_ok=True)

    container = DIContainer()

    # Core services
    logger = FileLoggerService(level=logging.DEBUG if debug else logging.INFO,
                               log_dir=os.path.join(data_dir, "logs"))
    container.register_instance(ILoggerService, logger)

    settings = JsonSettingsRepository(os.path.join(data_dir, "settings.json"), logger)
    container.register_instance(ISettingsRepository, settings)

    container.register_instance(IBackgroundTaskService, QtBackgroundTaskService(logger))

    # Platform services
    container.register_singleton(
        IScreenProvider,
        lambda: QtScreenProvider(container.resolve(ILoggerService))
    )

    container.register_singleton(
        IDisplayService,
        lambda: DisplayService(
            screen_provider=container.resolve(IScreenProvider),
            logger=container.resolve(ILoggerService)
        )
    )

    container.register_singleton(
        ICaptureService,
        lambda: CaptureService(
            display_service=container.resolve(IDisplayService),
            screen_provider=container.resolve(IScreenProvider),
            logger=container.resolve(ILoggerService)
        )
    )

    # OCR and translation
    container.register_singleton(
        IOcrService,
        lambda: TesseractOcrService(container.resolve(ILoggerService), container.resolve(ISettingsRepository))
    )

    container.register_singleton(
        ITranslator,
        lambda: GoogleTranslator(container.resolve(ILoggerService), container.resolve(ISettingsRepository))
    )

    container.register_singleton(
        ITranslationService,
        lambda: TranslationService(
            logger=container.resolve(ILoggerService),
            settings=container.resolve(ISettingsRepository),
            ocr_service=container.resolve(IOcrService),
            translator=container.resolve(ITranslator)
        )
    )

    # History
    database_url = settings.get_in("history", "database_url") or \
        f"sqlite:///{os.path.join(data_dir, 'history.db')}"
    container.register_singleton(
        IHistoryRepository,
        lambda: SqlAlchemyHistoryRepository(database_url, container.resolve(ILoggerService))
    )

    # Presentation
    container.register_singleton(
        IPresentationGateway,
        lambda: QtPresentationGateway(container.resolve(ILoggerService), container.resolve(ISettingsRepository))
    )

    container.register_singleton(
        ICapturePipeline,
        lambda: CapturePipeline(
            capture_service=container.resolve(ICaptureService),
            display_service=container.resolve(IDisplayService),
            translation_service=container.resolve(ITranslationService),
            history=container.resolve(IHistoryRepository),
            gateway=container.resolve(IPresentationGateway),
            task_service=container.resolve(IBackgroundTaskService),
            settings=container.resolve(ISettingsRepository),
            logger=container.resolve(ILoggerService)
        )
    )

    logger.info("Application dependencies initialized", data_dir=data_dir)

    return container


def _teardown(instance: Any) -> None:
    if isinstance(instance, ICapturePipeline):
        instance.shutdown()
    elif isinstance(instance, IBackgroundTaskService):
        instance.cancel_all_tasks()
    elif hasattr(instance, "close"):
        instance.close()


def shutdown_app(container: DIContainer) -> None:
    """Tear down every created service, most recently created first."""
    logger = container.resolve(ILoggerService)
    logger.info("Shutting down")
    container.dispose(_teardown)

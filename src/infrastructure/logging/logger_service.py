#src/infrastructure/logging/logger_service.py
"""
Implementation of the logger service using Python's built-in logging module.
"""
import logging
import logging.handlers
import os
import sys
from typing import Any, Dict

from src.domain.services.i_logger_service import ILoggerService

LOGGER_NAME = "ScreenTranslator"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ConsoleLoggerService(ILoggerService):
    """
    Logger service that writes to stdout.

    Keyword arguments given to the log methods are appended to the message as
    ``[key=value ...]``.
    """

    def __init__(self, level: int = logging.INFO, name: str = LOGGER_NAME):
        self.logger = logging.getLogger(name)
        self.set_level(level)

        # Don't add handlers if they already exist
        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(console_handler)

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(self._with_context(message, kwargs))

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(self._with_context(message, kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(self._with_context(message, kwargs))

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(self._with_context(message, kwargs))

    def critical(self, message: str, **kwargs) -> None:
        self.logger.critical(self._with_context(message, kwargs))

    def exception(self, message: str, **kwargs) -> None:
        self.logger.exception(self._with_context(message, kwargs))

    def set_level(self, level: int) -> None:
        """
        Set the minimum log level to display.

        Args:
            level: Minimum log level (e.g., logging.INFO, logging.DEBUG)
        """
        self.logger.setLevel(level)

    def _with_context(self, message: str, context: Dict[str, Any]) -> str:
        extra = self._format_extra(context)
        return f"{message} {extra}" if extra else message

    def _format_extra(self, extra: Dict[str, Any]) -> str:
        """
        Format extra context information for logging.

        Args:
            extra: Dictionary of extra context information

        Returns:
            Formatted string of context information
        """
        if not extra:
            return ""

        formatted = [f"{key}={value}" for key, value in extra.items()]
        return f"[{' '.join(formatted)}]"


class FileLoggerService(ConsoleLoggerService):
    """
    Extension of ConsoleLoggerService that also logs to a rotating file.
    """

    MAX_BYTES = 10 * 1024 * 1024
    BACKUP_COUNT = 5

    def __init__(self, level: int = logging.INFO, name: str = LOGGER_NAME,
                 log_dir: str = "logs"):
        """
        Initialize the file logger service.

        Args:
            level: Initial log level (default: INFO)
            name: Logger name
            log_dir: Directory to store log files
        """
        super().__init__(level, name)

        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{name}.log")

        # Only one file handler per log file, even if the service is created twice
        target = os.path.abspath(log_file)
        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
                return

        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=self.MAX_BYTES, backupCount=self.BACKUP_COUNT, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.logger.addHandler(file_handler)

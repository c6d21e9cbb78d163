#src/domain/services/i_logger_service.py
"""
Logger service interface for application-wide logging.

Every service receives an ILoggerService through its constructor. Keyword
arguments passed to the log methods are context fields rendered next to the
message.
"""
from abc import ABC, abstractmethod


class ILoggerService(ABC):
    """Interface for logging services."""

    @abstractmethod
    def debug(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def info(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def critical(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def exception(self, message: str, **kwargs) -> None:
        """
        Log an error message together with the traceback of the exception
        currently being handled.

        Args:
            message: The message to log
            **kwargs: Additional context information to log
        """
        pass

    @abstractmethod
    def set_level(self, level: int) -> None:
        """
        Set the minimum log level to display.

        Args:
            level: Minimum log level (e.g., logging.INFO, logging.DEBUG)
        """
        pass

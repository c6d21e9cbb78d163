#src/domain/services/i_background_task_service.py
"""
Background task service interface.

Workers run off the caller's thread and report back through callbacks. The
implementation decides on which thread those callbacks are delivered; the Qt
implementation delivers them on the GUI thread.
"""
from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Optional, TypeVar
import threading

from src.domain.common.errors import DomainError
from src.domain.common.result import Result

T = TypeVar('T')


class TaskCancelledException(Exception):
    """Raised inside a worker when its task was cancelled."""
    pass


class CancellationToken:
    """Thread-safe cancellation flag shared between a worker and its owner."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def throw_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise TaskCancelledException("Task was cancelled")


class Worker(Generic[T]):
    """
    Base class for background workers that can be executed by the task service.

    execute() runs on a background thread and returns a Result. A successful
    Result's value is passed to the completed callback; a failed Result's
    DomainError is passed to the error callback.
    """

    def __init__(self):
        self._cancellation_token = CancellationToken()

        self.on_progress_callback: Optional[Callable[[int, str], None]] = None
        self.on_completed_callback: Optional[Callable[[T], None]] = None
        self.on_error_callback: Optional[Callable[[DomainError], None]] = None

    def set_on_progress(self, callback: Callable[[int, str], None]) -> None:
        self.on_progress_callback = callback

    def set_on_completed(self, callback: Callable[[T], None]) -> None:
        self.on_completed_callback = callback

    def set_on_error(self, callback: Callable[[DomainError], None]) -> None:
        self.on_error_callback = callback

    def report_progress(self, percent: int, message: str = "") -> None:
        if self.on_progress_callback:
            self.on_progress_callback(percent, message)

    def report_completed(self, result: T) -> None:
        if self.on_completed_callback:
            self.on_completed_callback(result)

    def report_error(self, error: DomainError) -> None:
        if self.on_error_callback:
            self.on_error_callback(error)

    def check_cancellation(self) -> None:
        """
        Raises:
            TaskCancelledException: If cancellation has been requested
        """
        self._cancellation_token.throw_if_cancelled()

    @abstractmethod
    def execute(self) -> Result[T]:
        """
        Execute the worker's task on a background thread.

        Returns:
            Result of the worker's execution
        """
        pass

    def cancel(self) -> None:
        """Request cancellation of the worker's task."""
        self._cancellation_token.cancel()


class IBackgroundTaskService(ABC):
    """
    Interface for running workers in the background and managing their
    lifecycle.
    """

    @abstractmethod
    def execute_task(self, task_id: str, worker: Worker[T]) -> Result[bool]:
        """
        Execute a worker in a background thread.

        Args:
            task_id: Unique identifier for the task
            worker: Worker to execute

        Returns:
            Result indicating whether the task was started
        """
        pass

    @abstractmethod
    def cancel_task(self, task_id: str) -> Result[bool]:
        """
        Request cancellation of a background task.

        Args:
            task_id: Identifier of the task to cancel

        Returns:
            Result indicating success or failure
        """
        pass

    @abstractmethod
    def is_task_running(self, task_id: str) -> bool:
        pass

    @abstractmethod
    def get_running_tasks(self) -> List[str]:
        pass

    @abstractmethod
    def cancel_all_tasks(self) -> None:
        """Cancel all running background tasks."""
        pass

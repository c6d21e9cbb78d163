# src/infrastructure/threading/qt_background_task_service.py
"""
Qt implementation of the background task service.

Workers run in their own QThread. Their callbacks are delivered on the thread
that owns the task service (the GUI thread) through queued signal connections,
so completion handlers may touch widgets directly.
"""
import traceback
from typing import Dict, List, TypeVar

from PySide6.QtCore import QCoreApplication, QMutex, QMutexLocker, QObject, QThread, Qt, Signal, Slot

from src.domain.common.errors import DomainError, ErrorCategory
from src.domain.common.result import Result
from src.domain.services.i_background_task_service import IBackgroundTaskService, TaskCancelledException, Worker
from src.domain.services.i_logger_service import ILoggerService

T = TypeVar('T')


class WorkerSignals(QObject):
    """
    Signals available from a running worker thread.

    Signals:
        progress: Progress update (percent, message)
        completed: Success value of the worker's Result
        error: DomainError describing the failure
    """
    progress = Signal(int, str)
    completed = Signal(object)
    error = Signal(object)


class WorkerWrapper(QObject):
    """
    Runs a domain Worker inside a QThread and turns its Result into signals.
    """

    def __init__(self, worker: Worker[T], logger: ILoggerService, task_id: str):
        super().__init__()
        self.worker = worker
        self.logger = logger
        self.task_id = task_id
        # Created without a parent so the signals stay on the owner's thread
        self.signals = WorkerSignals()

    @Slot()
    def run(self):
        self.logger.debug("Worker starting execution", task_id=self.task_id)
        try:
            result = self.worker.execute()
        except TaskCancelledException:
            self.logger.info("Worker cancelled", task_id=self.task_id)
            return
        except Exception as e:
            self.logger.error(f"Unhandled error in worker: {e}", task_id=self.task_id)
            self.logger.debug(traceback.format_exc())
            self.signals.error.emit(DomainError.from_exception(e))
            return

        if not isinstance(result, Result):
            result = Result.ok(result)
        if result.is_success:
            self.signals.completed.emit(result.value)
        else:
            self.signals.error.emit(result.error)


class TaskInfo:
    """References that keep a running task's thread, wrapper and worker alive."""

    def __init__(self, task_id: str, thread: QThread, wrapper: WorkerWrapper, worker: Worker):
        self.task_id = task_id
        self.thread = thread
        self.wrapper = wrapper
        self.worker = worker

    def disconnect_signals(self):
        for signal_name in ['progress', 'completed', 'error']:
            signal = getattr(self.wrapper.signals, signal_name)
            try:
                signal.disconnect()
            except (TypeError, RuntimeError):
                pass  # Nothing connected


class QtBackgroundTaskService(IBackgroundTaskService):
    """
    Background task service built on QThread.

    Tasks are removed from the registry once their completion or error
    callback has run.
    """

    STOP_ATTEMPTS = 5
    STOP_WAIT_MS = 250

    def __init__(self, logger: ILoggerService):
        self.logger = logger
        self.tasks: Dict[str, TaskInfo] = {}
        self.mutex = QMutex()

    def execute_task(self, task_id: str, worker: Worker[T]) -> Result[bool]:
        locker = QMutexLocker(self.mutex)

        if task_id in self.tasks:
            self.logger.warning("Task is already running", task_id=task_id)
            return Result.fail(DomainError(f"Task '{task_id}' is already running", ErrorCategory.RESOURCE))

        try:
            thread = QThread()
            wrapper = WorkerWrapper(worker, self.logger, task_id)
            wrapper.moveToThread(thread)

            thread.started.connect(wrapper.run)
            thread.finished.connect(thread.deleteLater)
            thread.finished.connect(wrapper.deleteLater)

            if worker.on_progress_callback:
                wrapper.signals.progress.connect(worker.on_progress_callback, Qt.QueuedConnection)
            worker.set_on_progress(wrapper.signals.progress.emit)

            completed_callback = worker.on_completed_callback
            error_callback = worker.on_error_callback

            def on_completed(value):
                try:
                    if completed_callback:
                        completed_callback(value)
                finally:
                    self._cleanup_task(task_id)

            def on_error(error):
                try:
                    if error_callback:
                        error_callback(error)
                finally:
                    self._cleanup_task(task_id)

            wrapper.signals.completed.connect(on_completed, Qt.QueuedConnection)
            wrapper.signals.error.connect(on_error, Qt.QueuedConnection)

            self.tasks[task_id] = TaskInfo(task_id, thread, wrapper, worker)
            thread.start()

            self.logger.debug("Task started", task_id=task_id)
            return Result.ok(True)
        except Exception as e:
            self.tasks.pop(task_id, None)
            self.logger.error(f"Error starting task: {e}", task_id=task_id)
            self.logger.debug(traceback.format_exc())
            return Result.fail(DomainError.from_exception(e, ErrorCategory.RESOURCE))

    def cancel_task(self, task_id: str) -> Result[bool]:
        locker = QMutexLocker(self.mutex)

        task_info = self.tasks.pop(task_id, None)
        if task_info is None:
            self.logger.warning("Cannot cancel task - not found", task_id=task_id)
            return Result.fail(DomainError(f"Task '{task_id}' not found", ErrorCategory.RESOURCE))

        self.logger.debug("Cancelling task", task_id=task_id)
        task_info.worker.cancel()
        task_info.disconnect_signals()
        self._stop_thread(task_info)
        return Result.ok(True)

    def is_task_running(self, task_id: str) -> bool:
        locker = QMutexLocker(self.mutex)
        return task_id in self.tasks

    def get_running_tasks(self) -> List[str]:
        locker = QMutexLocker(self.mutex)
        return list(self.tasks.keys())

    def cancel_all_tasks(self) -> None:
        # cancel_task takes the mutex itself
        for task_id in self.get_running_tasks():
            self.cancel_task(task_id)

    def _cleanup_task(self, task_id: str) -> None:
        locker = QMutexLocker(self.mutex)
        task_info = self.tasks.pop(task_id, None)
        if task_info is None:
            return

        task_info.disconnect_signals()
        self._stop_thread(task_info)
        self.logger.debug("Task resources cleaned up", task_id=task_id)

    def _stop_thread(self, task_info: TaskInfo) -> None:
        task_info.thread.quit()

        for _ in range(self.STOP_ATTEMPTS):
            if task_info.thread.wait(self.STOP_WAIT_MS):
                break
            app = QCoreApplication.instance()
            if app is not None:
                app.processEvents()

        if not task_info.thread.isFinished():
            self.logger.warning("Forcing termination of task", task_id=task_info.task_id)
            task_info.thread.terminate()
            task_info.thread.wait(500)

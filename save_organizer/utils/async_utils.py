# save_organizer/utils/async_utils.py
import sys
import traceback
import inspect
from typing import Any, Callable
from PyQt6.QtCore import QObject, pyqtSignal, QRunnable, QThreadPool
from save_organizer.utils.logger_utils import logger


class WorkerSignals(QObject):
    """
    Signals emitted by a running Worker:
    - finished: No data, always emitted last
    - error: tuple (exctype, value, traceback.format_exc())
    - result: object returned by the task
    - progress: int current, int total
    """

    finished = pyqtSignal()
    error = pyqtSignal(tuple)  # exctype, value, traceback
    result = pyqtSignal(object)
    progress = pyqtSignal(int, int)  # current, total


class Worker(QRunnable):
    """Runs one callable on a QThreadPool thread and reports through signals."""

    def __init__(self, fn: Callable, *args: Any, **kwargs: Any):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()
        self.name = getattr(fn, "__qualname__", repr(fn))

        # Only inject progress_callback when the task declares it
        try:
            if "progress_callback" in inspect.signature(self.fn).parameters:
                self.kwargs["progress_callback"] = self.signals.progress
        except (ValueError, TypeError):
            pass

    def run(self):
        logger.debug(f"Worker '{self.name}' started.")
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception:
            exctype, value = sys.exc_info()[:2]
            logger.debug(f"Worker '{self.name}' failed: {value}")
            self.signals.error.emit((exctype, value, traceback.format_exc()))
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()


def start_worker(
    worker: Worker, thread_pool: QThreadPool | None = None
) -> bool:
    """
    Queues a worker on the given pool (the global pool by default).
    Returns False when no pool is available.
    """
    pool = thread_pool or QThreadPool.globalInstance()
    if pool is None:
        logger.critical(f"No QThreadPool available to run '{worker.name}'.")
        return False
    pool.start(worker)
    return True

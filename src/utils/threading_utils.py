"""
Qt threading utilities — QRunnable worker pattern.

Worker threads emit signals that Qt delivers safely on the main thread.
"""
from typing import Callable, Any, Optional

from PySide6.QtCore import QRunnable, QObject, QThreadPool, Signal, Slot

from utils.logger import logger


class WorkerSignals(QObject):
    """Signals emitted by Worker (must live in a QObject)."""

    result = Signal(object)   # successful return value
    error = Signal(str)       # error message string
    finished = Signal()       # always emitted last


class Worker(QRunnable):
    """
    Generic QRunnable for background calls.

    Usage::

        worker = Worker(coordinator.run)
        worker.signals.finished.connect(self._on_loaded)
        pool.start(worker)

    The result/error slots run on the main thread.
    """

    def __init__(self, fn: Callable, *args: Any, **kwargs: Any):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        try:
            result = self.fn(*self.args, **self.kwargs)
            self.signals.result.emit(result)
        except Exception as exc:
            logger.exception(f"Background task {getattr(self.fn, '__name__', self.fn)!r} failed")
            self.signals.error.emit(str(exc))
        finally:
            self.signals.finished.emit()


def single_thread_pool(name: Optional[str] = None) -> QThreadPool:
    """Dedicated pool whose tasks run strictly one after another."""
    pool = QThreadPool()
    pool.setMaxThreadCount(1)
    if name:
        pool.setObjectName(name)
    return pool

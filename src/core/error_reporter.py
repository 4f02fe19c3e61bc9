"""
Last-resort handling for exceptions nothing else caught.

Exceptions raised in Qt slots on the UI thread reach ``sys.excepthook``;
exceptions escaping other Python threads reach ``threading.excepthook``.
Both end up in :meth:`ErrorReporter.on_error`, which logs the failure, saves
the log and shows a blocking report.  The process is not recovered.
"""
import sys
import threading
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QCoreApplication, QObject, QThread, Qt, Signal, Slot

from config.settings import settings
from utils.logger import flush_log, logger


# presenter(failure, log_path, issues_url) -> None, blocking until dismissed
Presenter = Callable[[BaseException, Optional[Path], str], None]


def show_error_dialog(failure: BaseException, log_path: Optional[Path], issues_url: str) -> None:
    """Default presenter: modal ErrorDialog (imported lazily, needs a QApplication)."""
    from PySide6.QtWidgets import QApplication
    from ui.components.error_dialog import ErrorDialog

    if QApplication.instance() is None:
        return
    ErrorDialog(failure, log_path, issues_url).exec()


class _PresenterBridge(QObject):
    """Runs the presenter on the thread this object lives in (the application thread)."""

    requested = Signal(object, object, str)

    def __init__(self, presenter: "Presenter"):
        super().__init__()
        self._presenter = presenter
        # The emitting thread waits until the report is dismissed
        self.requested.connect(self._present, Qt.ConnectionType.BlockingQueuedConnection)

    @Slot(object, object, str)
    def _present(self, failure, log_path, issues_url):
        self._presenter(failure, log_path, issues_url)


class ErrorReporter:
    """
    Installs the global exception hooks.

    Args:
        log_path: Callable returning the log file path (None in sandbox mode)
        presenter: Shows the failure to the operator, blocking
    """

    def __init__(self, log_path: Callable[[], Optional[Path]],
                 presenter: Presenter = show_error_dialog,
                 issues_url: str = settings.ISSUES_URL):
        self._log_path = log_path
        self._presenter = presenter
        self._issues_url = issues_url
        self._reporting = threading.Lock()
        self._bridge = _PresenterBridge(presenter)
        app = QCoreApplication.instance()
        if app is not None:
            self._bridge.moveToThread(app.thread())
        self._previous_excepthook = None
        self._previous_threading_excepthook = None

    @property
    def installed(self) -> bool:
        return self._previous_excepthook is not None

    def install(self) -> None:
        if self.installed:
            return
        self._previous_excepthook = sys.excepthook
        self._previous_threading_excepthook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_excepthook

    def uninstall(self) -> None:
        if not self.installed:
            return
        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_threading_excepthook
        self._previous_excepthook = None
        self._previous_threading_excepthook = None

    def _excepthook(self, exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            self._previous_excepthook(exc_type, exc_value, exc_tb)
            return
        self.on_error(exc_value, thread_name=threading.current_thread().name)

    def _threading_excepthook(self, args):
        if issubclass(args.exc_type, SystemExit):
            return
        thread_name = args.thread.name if args.thread is not None else "unknown"
        self.on_error(args.exc_value, thread_name=thread_name)

    def on_error(self, failure: BaseException, thread_name: str = "") -> None:
        """Log ``failure``, save the log and block on the report."""
        logger.opt(exception=failure).critical(f"Unhandled exception in thread {thread_name or '?'}: {failure!r}")

        log_path = self._log_path()
        flush_log(log_path)

        # One report at a time; faults raised while it is open are only logged
        if not self._reporting.acquire(blocking=False):
            return
        try:
            self._present(failure, log_path)
        finally:
            self._reporting.release()

    def _present(self, failure: BaseException, log_path: Optional[Path]) -> None:
        app = QCoreApplication.instance()
        if app is None or QThread.currentThread() is app.thread():
            self._presenter(failure, log_path, self._issues_url)
            return
        # Widgets only live on the application thread
        if self._bridge.thread() is not app.thread():
            self._bridge.moveToThread(app.thread())
        self._bridge.requested.emit(failure, log_path, self._issues_url)

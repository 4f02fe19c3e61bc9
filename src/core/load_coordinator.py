"""
Background loading of the configuration documents.

The three stores load one after another on a dedicated worker.  Each one
opens its own gate as soon as it is done, so a consumer waits only for the
document it needs.  ProgramSettings goes first: it carries the default task
settings that everything else starts from.
"""
from typing import Optional

from PySide6.QtCore import QThreadPool

from config.stores import (
    ConfigIoError,
    ConfigStore,
    hotkey_settings_store,
    program_settings_store,
    uploader_settings_store,
)
from core.app_signals import AppSignals
from core.context import ApplicationContext
from core.load_gate import LoadGate
from utils.logger import logger
from utils.threading_utils import Worker, single_thread_pool


def _load_or_default(store: ConfigStore, path):
    try:
        return store.load(path)
    except ConfigIoError as e:
        logger.error(f"{store.name}: unable to read {e.path} ({e.cause}), using defaults")
        return store.default()
    except Exception:
        # The gate must still open, otherwise the UI thread waits forever
        logger.exception(f"{store.name}: load failed, using defaults")
        return store.default()


class LoadCoordinator:
    """
    Loads ProgramSettings, UploaderSettings and HotkeySettings into the context.

    Args:
        context: Receives the loaded documents and owns the gates
        signals: Optional hub notified after each store is ready
        pool: Thread pool to run on; defaults to a private single-thread pool
    """

    def __init__(self, context: ApplicationContext, signals: Optional[AppSignals] = None,
                 pool: Optional[QThreadPool] = None):
        self.context = context
        self.signals = signals
        self._pool = pool or single_thread_pool("config-loader")

    def start_load(self) -> Worker:
        """Schedule the load sequence on the background worker and return it."""
        worker = Worker(self.load_all)
        self._pool.start(worker)
        logger.debug("Configuration load scheduled")
        return worker

    def load_all(self) -> None:
        """Run the whole load sequence on the calling thread."""
        ctx = self.context
        paths = ctx.paths

        ctx.program_settings = _load_or_default(program_settings_store, paths.application_config_file_path)
        self._ready(program_settings_store, ctx.settings_gate)

        ctx.uploader_settings = _load_or_default(uploader_settings_store, paths.uploaders_config_file_path)
        self._ready(uploader_settings_store, ctx.uploader_settings_gate)

        ctx.hotkey_settings = _load_or_default(hotkey_settings_store, paths.hotkeys_config_file_path)
        self._ready(hotkey_settings_store, ctx.hotkey_settings_gate)

        if self.signals is not None:
            self.signals.all_settings_loaded.emit()

    def _ready(self, store: ConfigStore, gate: LoadGate) -> None:
        gate.set()
        logger.debug(f"{store.name} ready ({self.context.elapsed_ms} ms)")
        if self.signals is not None:
            self.signals.settings_loaded.emit(store.name)

    def wait_for_done(self, msecs: int = -1) -> bool:
        """Wait for the worker pool to drain (used at shutdown and in tests)."""
        return self._pool.waitForDone(msecs)

"""
Application entry point — decides the instance role, resolves the personal
path, loads configuration in the background and runs the main window.
"""
import platform
import sys
from typing import List, Optional

from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication

from config.paths import PathResolver
from config.settings import settings
from config.stores import (
    ConfigIoError,
    hotkey_settings_store,
    program_settings_store,
    uploader_settings_store,
)
from core.app_signals import AppSignals
from core.backup import backup_files_weekly
from core.context import ApplicationContext
from core.error_reporter import ErrorReporter
from core.instance import InstanceArbiter, InstanceRole, WindowReadyProbe
from core.load_coordinator import LoadCoordinator
from core.process_mode import ProcessMode
from utils.logger import flush_log, logger


def save_settings(context: ApplicationContext) -> int:
    """Persist the three documents.  Returns the number of files written."""
    paths = context.paths
    written = 0
    for store, document, path in (
        (program_settings_store, context.program_settings, paths.application_config_file_path),
        (uploader_settings_store, context.uploader_settings, paths.uploaders_config_file_path),
        (hotkey_settings_store, context.hotkey_settings, paths.hotkeys_config_file_path),
    ):
        try:
            if store.save(document, path):
                written += 1
        except ConfigIoError as e:
            logger.error(f"{store.name}: unable to save {e.path} ({e.cause})")
    return written


def backup_settings(context: ApplicationContext):
    paths = context.paths
    return backup_files_weekly(
        [
            paths.application_config_file_path,
            paths.hotkeys_config_file_path,
            paths.uploaders_config_file_path,
            paths.history_file_path,
        ],
        paths.backup_folder,
    )


def shutdown(context: ApplicationContext) -> None:
    """Teardown after the run loop returns."""
    if context.watch_folder_manager is not None:
        context.watch_folder_manager.dispose()
        context.watch_folder_manager = None

    save_settings(context)
    backup_settings(context)

    logger.info(f"{settings.APP_NAME} closing")
    flush_log(context.paths.log_file_path())


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    mode = ProcessMode.parse(argv[1:])

    arbiter = InstanceArbiter()
    if arbiter.acquire(mode) is InstanceRole.SECONDARY:
        # Only a socket is needed to hand the arguments over
        app = QCoreApplication.instance() or QCoreApplication(argv)
        arbiter.forward(mode.args)
        return 0

    try:
        app = QApplication.instance() or QApplication(argv)
        app.setOrganizationName(settings.ORGANIZATION)
        app.setApplicationName(settings.APP_NAME)
        app.setApplicationVersion(settings.APP_VERSION)

        # Listen right away; batches are held until the window reports ready
        signals = AppSignals()
        window_ready = WindowReadyProbe()
        arbiter.listen(on_arguments=signals.forwarded_arguments.emit, ready_probe=window_ready)

        return _run(app, mode, signals, window_ready)
    finally:
        arbiter.release()


def _run(app: QApplication, mode: ProcessMode, signals: AppSignals, window_ready: WindowReadyProbe) -> int:
    paths, mode = PathResolver().resolve(mode)
    context = ApplicationContext(mode=mode, paths=paths)

    reporter = ErrorReporter(log_path=context.paths.log_file_path)
    reporter.install()

    logger.info(f"{context.title} started")
    logger.info(f"Operating system: {platform.platform()}")
    logger.info(f"Command line: {' '.join(sys.argv)}")
    logger.info(f"Personal path: {'(sandbox)' if paths.sandbox else paths.personal_path}")

    coordinator = LoadCoordinator(context, signals)
    coordinator.start_load()

    # Imported here so the window module (and its widgets) load after QApplication exists
    from ui.app_window import AppWindow

    logger.debug("Main window init started")
    window = AppWindow(context, signals)
    context.main_window = window
    window_ready.window = window
    logger.debug("Main window init finished")

    context.wait_for_program_settings()
    window.apply_settings()
    if not mode.silent:
        window.show()
    window.use_command_line_args(list(mode.args))

    try:
        rc = app.exec()
    finally:
        coordinator.wait_for_done()
        shutdown(context)
        reporter.uninstall()
    return rc


if __name__ == "__main__":
    sys.exit(main())

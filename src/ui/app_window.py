"""
AppWindow — QMainWindow shell.

Manages:
  - tray icon (show / exit menu)
  - status bar widget
  - the "ready" probe used by the single-instance listener
  - the sink for command line arguments forwarded by later launches
"""
from typing import List

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QLabel, QListWidget, QMenu,
    QStyle, QSystemTrayIcon,
)
from PySide6.QtCore import Qt

from core.app_signals import AppSignals
from core.context import ApplicationContext
from ui.components.status_bar_widget import StatusBarWidget
from config.settings import settings
from utils.logger import logger


class AppWindow(QMainWindow):
    """Root application window."""

    def __init__(self, context: ApplicationContext, signals: AppSignals):
        super().__init__()
        self._context = context
        self._signals = signals
        self.is_ready = False
        self.command_line_args: List[str] = []

        self._setup_ui()
        self._setup_tray()
        self._wire_signals()

    # ------------------------------------------------------------------
    # UI setup
    # ------------------------------------------------------------------

    def _setup_ui(self):
        self.setWindowTitle(self._context.title)
        self.setMinimumSize(settings.MIN_WINDOW_WIDTH, settings.MIN_WINDOW_HEIGHT)
        self.resize(settings.WINDOW_WIDTH, settings.WINDOW_HEIGHT)

        central = QWidget()
        layout = QVBoxLayout(central)

        paths = self._context.paths
        location = "Sandbox (nothing is saved)" if paths.sandbox else str(paths.personal_path)
        self._path_label = QLabel(f"Personal folder: {location}")
        self._path_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self._path_label)

        layout.addWidget(QLabel("Files received:"))
        self._files_list = QListWidget()
        layout.addWidget(self._files_list, 1)

        self.setCentralWidget(central)

        # Status bar
        self._status_bar = StatusBarWidget(self._signals)
        self.statusBar().addPermanentWidget(self._status_bar, 1)

    def _setup_tray(self):
        icon = self.style().standardIcon(QStyle.StandardPixmap.SP_DesktopIcon)
        self.setWindowIcon(icon)

        self.tray_icon = QSystemTrayIcon(icon, self)
        self.tray_icon.setToolTip(self._context.title)

        menu = QMenu(self)
        menu.addAction("Show", self.show_activate)
        menu.addSeparator()
        menu.addAction("Exit", self._exit)
        self.tray_icon.setContextMenu(menu)
        self.tray_icon.activated.connect(self._on_tray_activated)

    def _wire_signals(self):
        self._signals.forwarded_arguments.connect(self.on_forwarded_arguments)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def apply_settings(self):
        """Finish setup once ProgramSettings is available, then report ready."""
        program_settings = self._context.program_settings

        if program_settings.show_tray and QSystemTrayIcon.isSystemTrayAvailable():
            self.tray_icon.show()

        if program_settings.first_run:
            if not self._context.mode.silent:
                self._signals.status_message.emit(
                    f"Welcome to {settings.APP_NAME}! Settings are stored in {self._context.paths.personal_path}",
                    "info",
                )
            program_settings.first_run = False

        self.is_ready = True
        logger.info(f"Main window ready ({self._context.elapsed_ms} ms)")

    def show_activate(self):
        if self.isMinimized():
            self.showNormal()
        self.show()
        self.raise_()
        self.activateWindow()

    def closeEvent(self, event):
        if self.tray_icon.isVisible():
            # Keep running in the tray
            event.ignore()
            self.hide()
            return
        super().closeEvent(event)

    def _exit(self):
        self.tray_icon.hide()
        QApplication.quit()

    def _on_tray_activated(self, reason):
        if reason in (QSystemTrayIcon.ActivationReason.Trigger,
                      QSystemTrayIcon.ActivationReason.DoubleClick):
            self.show_activate()

    # ------------------------------------------------------------------
    # Slots — single instance
    # ------------------------------------------------------------------

    def on_forwarded_arguments(self, args: List[str]):
        """A later launch handed us its command line."""
        if not args:
            if self.tray_icon.isVisible():
                # A tray icon created at login may not repaint until it is re-shown
                self.tray_icon.hide()
                self.tray_icon.show()
            self.show_activate()
        elif self.isVisible():
            self.show_activate()

        self.use_command_line_args(args)

    def use_command_line_args(self, args: List[str]):
        if not args:
            return
        self.command_line_args.extend(args)
        self._files_list.addItems(args)
        logger.info(f"Command line arguments: {args}")
        self._signals.status_message.emit(f"Received {len(args)} item(s)", "success")

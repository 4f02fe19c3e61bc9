"""
Error dialog — modal report for unhandled exceptions.
"""
import traceback
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPlainTextEdit, QPushButton,
)
from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QDesktopServices

from config.settings import settings


class ErrorDialog(QDialog):
    """Shows the failure, where the log was saved and where to report it."""

    def __init__(self, failure: BaseException, log_path: Optional[Path], issues_url: str, parent=None):
        super().__init__(parent)
        self._log_path = log_path
        self._issues_url = issues_url
        self.setWindowTitle(f"{settings.APP_NAME} - Error")
        self.setModal(True)
        self.resize(640, 420)
        self._setup_ui(failure)

    def _setup_ui(self, failure: BaseException):
        layout = QVBoxLayout(self)

        title = QLabel(f"{settings.APP_NAME} encountered an unexpected error.")
        title.setStyleSheet("font-weight: bold;")
        layout.addWidget(title)

        details = QPlainTextEdit()
        details.setReadOnly(True)
        details.setPlainText("".join(
            traceback.format_exception(type(failure), failure, failure.__traceback__)
        ))
        layout.addWidget(details, 1)

        if self._log_path is not None:
            log_label = QLabel(f"Log saved to: {self._log_path}")
            log_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            layout.addWidget(log_label)

        buttons = QHBoxLayout()
        buttons.addStretch(1)

        if self._log_path is not None:
            open_log = QPushButton("Open log")
            open_log.clicked.connect(self._open_log)
            buttons.addWidget(open_log)

        report = QPushButton("Report issue")
        report.clicked.connect(self._open_issues)
        buttons.addWidget(report)

        close = QPushButton("Close")
        close.setDefault(True)
        close.clicked.connect(self.accept)
        buttons.addWidget(close)

        layout.addLayout(buttons)

    def _open_log(self):
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(self._log_path)))

    def _open_issues(self):
        QDesktopServices.openUrl(QUrl(self._issues_url))

"""
Status bar widget — displays status messages and configuration load state.
"""
from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel
from PySide6.QtCore import Qt, QTimer

from core.app_signals import AppSignals


_LEVEL_STYLES = {
    'info':    "color: #333; background: transparent;",
    'success': "color: #1a7a1a; background: transparent;",
    'warning': "color: #856200; background: transparent;",
    'error':   "color: #c0392b; background: transparent;",
}


class StatusBarWidget(QWidget):
    """
    Persistent status strip at the bottom of the main window.

    Left side:  status messages (auto-clears after 6 s)
    Right side: configuration load indicator
    """

    _AUTO_CLEAR_MS = 6_000
    _STORE_COUNT = 3

    def __init__(self, signals: AppSignals, parent=None):
        super().__init__(parent)
        self._loaded = []
        self._setup_ui()
        self._wire_signals(signals)

    def _setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 2, 6, 2)
        layout.setSpacing(8)

        self._msg_label = QLabel("")
        self._msg_label.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)
        layout.addWidget(self._msg_label, 1)

        self._config_label = QLabel("● Loading settings")
        self._config_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self._config_label.setStyleSheet("color: gray; font-size: 11px;")
        layout.addWidget(self._config_label)

        self._clear_timer = QTimer(self)
        self._clear_timer.setSingleShot(True)
        self._clear_timer.timeout.connect(self._clear_message)

    def _wire_signals(self, signals: AppSignals):
        signals.status_message.connect(self.show_message)
        signals.settings_loaded.connect(self._on_settings_loaded)
        signals.all_settings_loaded.connect(self._on_all_settings_loaded)

    @property
    def config_status(self) -> str:
        return self._config_label.text()

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def show_message(self, message: str, level: str = 'info'):
        style = _LEVEL_STYLES.get(level, _LEVEL_STYLES['info'])
        self._msg_label.setStyleSheet(style)
        self._msg_label.setText(message)
        self._clear_timer.start(self._AUTO_CLEAR_MS)

    def _clear_message(self):
        self._msg_label.setText("")
        self._msg_label.setStyleSheet("")

    def _on_settings_loaded(self, name: str):
        if name not in self._loaded:
            self._loaded.append(name)
        self._config_label.setText(f"● Loading settings ({len(self._loaded)}/{self._STORE_COUNT})")

    def _on_all_settings_loaded(self):
        self._config_label.setText("● Settings loaded")
        self._config_label.setStyleSheet("color: green; font-size: 11px;")

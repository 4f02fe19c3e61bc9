from __future__ import annotations

import pytest

from core.app_signals import AppSignals
from core.load_coordinator import LoadCoordinator


@pytest.fixture
def window(qtbot, make_context):
    from ui.app_window import AppWindow

    ctx = make_context("--silent")
    LoadCoordinator(ctx).load_all()
    signals = AppSignals()
    w = AppWindow(ctx, signals)
    qtbot.addWidget(w)
    w.signals = signals
    return w


def test_ready_only_after_settings_applied(window):
    assert window.is_ready is False
    window.apply_settings()
    assert window.is_ready is True
    assert window.windowTitle().startswith("SnapShare")


def test_empty_batch_brings_window_forward(window):
    window.apply_settings()
    assert not window.isVisible()
    window.on_forwarded_arguments([])
    assert window.isVisible()
    assert window.command_line_args == []


def test_files_for_hidden_window_are_taken_without_showing(window):
    window.apply_settings()
    window.on_forwarded_arguments(["foo.png"])
    assert not window.isVisible()
    assert window.command_line_args == ["foo.png"]


def test_files_for_visible_window_are_taken(window):
    window.apply_settings()
    window.show()
    window.on_forwarded_arguments(["a.png", "b.png"])
    assert window.isVisible()
    assert window.command_line_args == ["a.png", "b.png"]


def test_forwarded_signal_reaches_window(window):
    window.apply_settings()
    window.signals.forwarded_arguments.emit(["from-signal.png"])
    assert window.command_line_args == ["from-signal.png"]


def test_status_bar_marks_settings_loaded_after_last_store(qtbot):
    from ui.components.status_bar_widget import StatusBarWidget

    signals = AppSignals()
    bar = StatusBarWidget(signals)
    qtbot.addWidget(bar)
    assert bar.config_status == "● Loading settings"

    for name in ("ApplicationConfig", "UploadersConfig", "HotkeysConfig"):
        signals.settings_loaded.emit(name)
    assert bar.config_status == "● Loading settings (3/3)"

    signals.all_settings_loaded.emit()
    assert bar.config_status == "● Settings loaded"


def test_status_bar_follows_background_load(qtbot, make_context):
    from ui.components.status_bar_widget import StatusBarWidget

    signals = AppSignals()
    bar = StatusBarWidget(signals)
    qtbot.addWidget(bar)

    LoadCoordinator(make_context(), signals).load_all()
    assert bar.config_status == "● Settings loaded"

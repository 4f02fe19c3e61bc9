"""
Central Qt signal hub.

Background work (configuration loading, the instance listener) reports to
the UI through these signals instead of touching widgets directly.
"""
from PySide6.QtCore import QObject, Signal


class AppSignals(QObject):
    """
    Signal hub — emit from any thread, connect slots in main thread.

    Qt's signal/slot mechanism ensures slot calls are delivered on the
    receiver's thread, so worker threads can safely emit these signals.
    """

    # Configuration lifecycle
    settings_loaded = Signal(str)        # store name ('ApplicationConfig', ...)
    all_settings_loaded = Signal()

    # Single instance
    forwarded_arguments = Signal(list)   # argument batch from a later launch

    # Status bar
    status_message = Signal(str, str)    # message, level ('info'|'success'|'warning'|'error')

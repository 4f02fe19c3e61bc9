"""
Static configuration settings for the SnapShare desktop application.

Everything here is fixed for the lifetime of the process.  User-editable
state lives in the JSON documents under the personal path (see config.stores).
"""
import os
import sys
import configparser
from pathlib import Path


def get_startup_path() -> Path:
    """Directory the application was started from."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    # Go up from src/config/ to the project root
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Get the path to the optional config.ini file."""
    return get_startup_path() / 'config.ini'


def load_config() -> configparser.ConfigParser:
    """Load configuration from config.ini file."""
    config = configparser.ConfigParser()
    config_path = get_config_path()
    if config_path.exists():
        config.read(config_path, encoding='utf-8')
    return config


_config = load_config()


class AppSettings:
    """Application configuration settings."""

    # Application metadata
    APP_NAME = "SnapShare"
    APP_VERSION = "9.4.0"
    ORGANIZATION = "SnapShare"
    ISSUES_URL = _config.get('app', 'issues_url',
                             fallback="https://github.com/snapshare/snapshare/issues")

    # Window dimensions
    WINDOW_WIDTH = 720
    WINDOW_HEIGHT = 480
    MIN_WINDOW_WIDTH = 480
    MIN_WINDOW_HEIGHT = 320

    # Personal path layout
    PERSONAL_PATH_CONFIG = "PersonalPath.cfg"
    APPLICATION_CONFIG_FILENAME = "ApplicationConfig.json"
    UPLOADERS_CONFIG_FILENAME = "UploadersConfig.json"
    HOTKEYS_CONFIG_FILENAME = "HotkeysConfig.json"
    HISTORY_FILENAME = "History.xml"
    LOGS_FOLDER = "Logs"
    BACKUP_FOLDER = "Backup"
    SCREENSHOTS_FOLDER = "Screenshots"
    SCREEN_RECORDER_CACHE_FILENAME = "ScreenRecorder.avi"

    # Logging
    LOG_LEVEL = _config.get('logging', 'level',
                            fallback=os.getenv("SNAPSHARE_LOG_LEVEL", "INFO"))
    LOG_FILE_PATTERN = APP_NAME + "-Log-{:%Y-%m}.txt"

    # Single instance
    INSTANCE_ID = "SnapShare-82E6AC09-0FEF-4390-AD9F-0DD3F5561EFC"
    INSTANCE_LOCK_FILENAME = INSTANCE_ID + ".lock"
    FORWARD_READY_TIMEOUT_MS = int(_config.get('instance', 'ready_timeout_ms', fallback="5000"))
    FORWARD_READY_POLL_MS = 10
    FORWARD_IO_TIMEOUT_MS = int(_config.get('instance', 'io_timeout_ms', fallback="3000"))
    FORWARD_CONNECT_RETRY_MS = 50
    LISTENER_POLL_MS = 200

    # Debug
    DEBUG = os.getenv("SNAPSHARE_DEBUG", "False").lower() in ("true", "1", "yes")

    @classmethod
    def get_title(cls, portable: bool = False) -> str:
        """Window/log title, e.g. ``SnapShare 9.4`` or ``SnapShare 9.4.1 Portable``."""
        major, minor, patch = (int(part) for part in cls.APP_VERSION.split('.')[:3])
        title = f"{cls.APP_NAME} {major}.{minor}"
        if patch > 0:
            title += f".{patch}"
        if portable:
            title += " Portable"
        return title

    @classmethod
    def get_startup_path(cls) -> Path:
        return get_startup_path()


# Global settings instance
settings = AppSettings()

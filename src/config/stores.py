"""
Configuration documents and their JSON stores.

Each document is owned and versioned independently and lives in its own
file under the personal path.  Loading never leaves a half-read document
behind: a missing or malformed file yields a fresh default instance.
"""
import json
import os
import tempfile
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from utils.logger import logger


class ConfigIoError(Exception):
    """A configuration file exists but could not be read or written."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


class ConfigParseFailure(ValueError):
    """A configuration file could not be interpreted as its document type."""


def _from_dict(document_type, data: Any):
    """Build a dataclass from ``data``, ignoring unknown keys."""
    if not isinstance(data, dict):
        raise ConfigParseFailure(f"{document_type.__name__} expects an object, got {type(data).__name__}")

    kwargs = {}
    for f in fields(document_type):
        if f.name not in data:
            continue
        value = data[f.name]
        nested = getattr(document_type, '_nested', {}).get(f.name)
        kwargs[f.name] = _from_dict(nested, value) if nested else value
    return document_type(**kwargs)


# ----------------------------------------------------------------------
# Documents
# ----------------------------------------------------------------------

@dataclass
class TaskSettings:
    """Default behaviour applied to each capture task."""
    after_capture_tasks: List[str] = field(default_factory=lambda: ["copy_image_to_clipboard", "save_image_to_file"])
    after_upload_tasks: List[str] = field(default_factory=lambda: ["copy_url_to_clipboard"])
    image_format: str = "png"
    upload_after_capture: bool = False


@dataclass
class ProgramSettings:
    first_run: bool = True
    show_tray: bool = True
    default_task_settings: TaskSettings = field(default_factory=TaskSettings)
    use_custom_screenshots_path: bool = False
    custom_screenshots_path: str = ""
    save_image_sub_folder_pattern: str = "%Y-%m"

    _nested = {'default_task_settings': TaskSettings}


@dataclass
class UploaderSettings:
    image_uploader: str = "Imgur"
    text_uploader: str = "Pastebin"
    file_uploader: str = "Dropbox"
    url_shortener: str = "bit.ly"
    custom_uploaders: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class HotkeySettings:
    hotkeys: List[Dict[str, str]] = field(default_factory=lambda: [
        {'task': 'capture_region', 'hotkey': 'Ctrl+PrintScreen'},
        {'task': 'capture_fullscreen', 'hotkey': 'PrintScreen'},
        {'task': 'capture_active_window', 'hotkey': 'Alt+PrintScreen'},
    ])


T = TypeVar('T')


class ConfigStore(Generic[T]):
    """
    Loads and saves one configuration document as JSON.

    Args:
        document_type: Dataclass to (de)serialise
        name: Short name used in logs and readiness notifications
    """

    def __init__(self, document_type: Type[T], name: str):
        self.document_type = document_type
        self.name = name

    def default(self) -> T:
        return self.document_type()

    def load(self, path: Optional[Path]) -> T:
        """
        Load the document stored at ``path``.

        A ``None`` path (sandbox), a missing file or an unparsable file all
        produce the default document.

        Raises:
            ConfigIoError: The file exists but could not be read
        """
        if path is None:
            return self.default()

        path = Path(path)
        try:
            raw = path.read_text(encoding='utf-8-sig')
        except FileNotFoundError:
            logger.info(f"{self.name}: {path} not found, using defaults")
            return self.default()
        except OSError as e:
            raise ConfigIoError(path, e) from e

        try:
            document = _from_dict(self.document_type, json.loads(raw))
        except (ValueError, TypeError) as e:
            # json.JSONDecodeError and ConfigParseFailure are ValueErrors
            logger.debug(f"{self.name}: could not parse {path} ({e}), using defaults")
            return self.default()

        logger.info(f"{self.name} loaded from {path}")
        return document

    def save(self, document: Optional[T], path: Optional[Path]) -> bool:
        """
        Atomically overwrite ``path`` with ``document``.

        Returns:
            True if a file was written

        Raises:
            ConfigIoError: The file could not be written
        """
        if document is None or path is None:
            return False

        path = Path(path)
        payload = json.dumps(asdict(document), indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=path.parent, prefix=path.name, suffix='.tmp', delete=False
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise ConfigIoError(path, e) from e

        logger.debug(f"{self.name} saved to {path}")
        return True


program_settings_store: ConfigStore[ProgramSettings] = ConfigStore(ProgramSettings, "ApplicationConfig")
uploader_settings_store: ConfigStore[UploaderSettings] = ConfigStore(UploaderSettings, "UploadersConfig")
hotkey_settings_store: ConfigStore[HotkeySettings] = ConfigStore(HotkeySettings, "HotkeysConfig")

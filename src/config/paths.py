"""
Personal path resolution.

The personal path is the root of all persisted state: configuration
documents, history, logs, backups and screenshots.  It is resolved once per
run from the process mode and the ``PersonalPath.cfg`` pointer file that sits
beside the executable.
"""
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QStandardPaths

from config.settings import settings
from core.process_mode import ProcessMode
from utils.logger import logger


def default_documents_path() -> Path:
    """Per-user documents directory for the application."""
    documents = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DocumentsLocation)
    if not documents:
        documents = str(Path.home() / "Documents")
    return Path(documents) / settings.APP_NAME


@dataclass(frozen=True)
class PersonalPaths:
    """
    Resolved locations for one run.

    In sandbox mode every derived path is ``None``; ``personal_path`` is still
    reported for display but nothing under it is ever created or touched.
    """

    personal_path: Path
    sandbox: bool = False
    portable: bool = False

    def _under(self, *parts: str) -> Optional[Path]:
        if self.sandbox:
            return None
        return self.personal_path.joinpath(*parts)

    @property
    def application_config_file_path(self) -> Optional[Path]:
        return self._under(settings.APPLICATION_CONFIG_FILENAME)

    @property
    def uploaders_config_file_path(self) -> Optional[Path]:
        return self._under(settings.UPLOADERS_CONFIG_FILENAME)

    @property
    def hotkeys_config_file_path(self) -> Optional[Path]:
        return self._under(settings.HOTKEYS_CONFIG_FILENAME)

    @property
    def history_file_path(self) -> Optional[Path]:
        return self._under(settings.HISTORY_FILENAME)

    @property
    def logs_folder(self) -> Optional[Path]:
        return self._under(settings.LOGS_FOLDER)

    @property
    def backup_folder(self) -> Optional[Path]:
        return self._under(settings.BACKUP_FOLDER)

    @property
    def screen_recorder_cache_file_path(self) -> Optional[Path]:
        return self._under(settings.SCREEN_RECORDER_CACHE_FILENAME)

    def log_file_path(self, now: Optional[datetime] = None) -> Optional[Path]:
        """Monthly log file, e.g. ``Logs/SnapShare-Log-2026-10.txt``."""
        folder = self.logs_folder
        if folder is None:
            return None
        return folder / settings.LOG_FILE_PATTERN.format(now or datetime.now())

    def screenshots_parent_folder(self, program_settings=None) -> Optional[Path]:
        if (program_settings is not None and program_settings.use_custom_screenshots_path
                and program_settings.custom_screenshots_path):
            return Path(program_settings.custom_screenshots_path)
        return self._under(settings.SCREENSHOTS_FOLDER)

    def screenshots_path(self, program_settings, now: Optional[datetime] = None) -> Optional[Path]:
        """Dated sub-folder of the screenshots folder, named by ``save_image_sub_folder_pattern``."""
        parent = self.screenshots_parent_folder(program_settings)
        if parent is None:
            return None
        pattern = program_settings.save_image_sub_folder_pattern
        if not pattern:
            return parent
        return parent / (now or datetime.now()).strftime(pattern)


class PathResolver:
    """
    Decides the personal path from mode flags and the pointer file.

    Args:
        startup_path: Directory holding the executable and ``PersonalPath.cfg``
        documents_path: Default personal path when no pointer is configured
    """

    def __init__(self, startup_path: Optional[Path] = None, documents_path: Optional[Path] = None):
        self.startup_path = Path(startup_path) if startup_path else settings.get_startup_path()
        self._documents_path = Path(documents_path) if documents_path else None

    @property
    def portable_personal_path(self) -> Path:
        return Path(os.path.normpath(os.path.abspath(self.startup_path / settings.APP_NAME)))

    @property
    def personal_path_config(self) -> Path:
        return self.startup_path / settings.PERSONAL_PATH_CONFIG

    @property
    def default_personal_path(self) -> Path:
        return self._documents_path or default_documents_path()

    def resolve(self, mode: ProcessMode):
        """
        Resolve the personal path for this run.

        Returns:
            Tuple of (PersonalPaths, ProcessMode).  The returned mode has
            ``portable`` set when the pointer file names the portable folder.
        """
        if mode.sandbox:
            return PersonalPaths(self.default_personal_path, sandbox=True), mode

        if mode.portable:
            personal_path = self.portable_personal_path
        else:
            personal_path = self.default_personal_path
            custom = self.read_personal_path_config()
            if custom:
                personal_path = Path(os.path.normpath(os.path.abspath(
                    os.path.join(self.startup_path, os.path.expanduser(custom)))))
                if str(personal_path).casefold() == str(self.portable_personal_path).casefold():
                    mode = mode.as_portable()

        if not personal_path.is_dir():
            logger.info(f"Creating personal folder: {personal_path}")
            personal_path.mkdir(parents=True, exist_ok=True)

        return PersonalPaths(personal_path, portable=mode.portable), mode

    def read_personal_path_config(self) -> str:
        """Contents of ``PersonalPath.cfg``, trimmed; empty when the file is absent."""
        try:
            return self.personal_path_config.read_text(encoding='utf-8-sig').strip()
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable {self.personal_path_config}: {e}")
            return ""

    def write_personal_path_config(self, path: Optional[str]) -> None:
        """
        Store a custom personal path for the next run.

        An empty path clears the customisation, but never creates the file.
        """
        path = path or ""
        if path or self.personal_path_config.exists():
            self.personal_path_config.write_text(path, encoding='utf-8')
            logger.info(f"Personal path config updated: {path!r}")

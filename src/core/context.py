"""
Application context — the process-wide state built once by the bootstrap
and handed to every component that needs it.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from config.paths import PersonalPaths
from config.settings import settings
from config.stores import HotkeySettings, ProgramSettings, TaskSettings, UploaderSettings
from core.load_gate import LoadGate
from core.process_mode import ProcessMode


@dataclass
class ApplicationContext:
    """
    Owner of the personal paths and the three configuration documents.

    The load coordinator writes the documents while loading; afterwards only
    the bootstrap writes them.  The UI reads through this object.
    """

    mode: ProcessMode
    paths: PersonalPaths
    program_settings: Optional[ProgramSettings] = None
    uploader_settings: Optional[UploaderSettings] = None
    hotkey_settings: Optional[HotkeySettings] = None

    settings_gate: LoadGate = field(default_factory=lambda: LoadGate("ApplicationConfig"))
    uploader_settings_gate: LoadGate = field(default_factory=lambda: LoadGate("UploadersConfig"))
    hotkey_settings_gate: LoadGate = field(default_factory=lambda: LoadGate("HotkeysConfig"))

    main_window: Any = None
    watch_folder_manager: Any = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def title(self) -> str:
        return settings.get_title(self.mode.portable)

    @property
    def default_task_settings(self) -> Optional[TaskSettings]:
        if self.program_settings is None:
            return None
        return self.program_settings.default_task_settings

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)

    def wait_for_program_settings(self, timeout: Optional[float] = None) -> bool:
        """Block until ProgramSettings is available (returns at once if it already is)."""
        if self.program_settings is not None:
            return True
        return self.settings_gate.wait(timeout)

"""
Weekly backups of configuration and history files.
"""
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from utils.logger import logger


def weekly_backup_name(source: Path, modified: datetime) -> str:
    """``ApplicationConfig.json`` modified in ISO week 42 of 2026 -> ``ApplicationConfig-2026-W42.json``."""
    year, week, _ = modified.isocalendar()
    return f"{source.stem}-{year}-W{week:02d}{source.suffix}"


def backup_weekly(source_file: Optional[Path], backup_folder: Optional[Path]) -> Optional[Path]:
    """
    Copy ``source_file`` into ``backup_folder`` unless this week's copy exists.

    Returns:
        Path of the new backup, or None if nothing was copied
    """
    if source_file is None or backup_folder is None:
        return None

    source_file = Path(source_file)
    if not source_file.is_file():
        return None

    modified = datetime.fromtimestamp(source_file.stat().st_mtime)
    target = Path(backup_folder) / weekly_backup_name(source_file, modified)
    if target.exists():
        return None

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source_file, target)
    logger.info(f"Backed up {source_file.name} to {target}")
    return target


def backup_files_weekly(sources: Iterable[Optional[Path]], backup_folder: Optional[Path]) -> List[Path]:
    """Run :func:`backup_weekly` for each source; one failing file does not stop the rest."""
    created = []
    for source in sources:
        try:
            target = backup_weekly(source, backup_folder)
        except OSError as e:
            logger.error(f"Backup of {source} failed: {e}")
            continue
        if target is not None:
            created.append(target)
    return created

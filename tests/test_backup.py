from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from core.backup import backup_files_weekly, backup_weekly, weekly_backup_name


def _touch(path: Path, when: datetime, content: str = "{}") -> Path:
    path.write_text(content, encoding="utf-8")
    ts = when.timestamp()
    os.utime(path, (ts, ts))
    return path


def test_backup_name_uses_iso_week():
    name = weekly_backup_name(Path("ApplicationConfig.json"), datetime(2026, 10, 19))
    assert name == "ApplicationConfig-2026-W43.json"


def test_missing_source_is_noop(tmp_path):
    backup = tmp_path / "Backup"
    assert backup_weekly(tmp_path / "missing.json", backup) is None
    assert not backup.exists()


def test_none_paths_are_noop(tmp_path):
    assert backup_weekly(None, tmp_path) is None
    assert backup_weekly(tmp_path / "x.json", None) is None


def test_one_backup_per_week(tmp_path):
    source = _touch(tmp_path / "ApplicationConfig.json", datetime(2026, 10, 19, 9, 0))
    backup = tmp_path / "Backup"

    first = backup_weekly(source, backup)
    assert first is not None and first.is_file()

    # Same week, file rewritten later in the week
    _touch(source, datetime(2026, 10, 23, 18, 0), content='{"changed": true}')
    assert backup_weekly(source, backup) is None
    assert len(list(backup.iterdir())) == 1


def test_new_week_creates_second_backup(tmp_path):
    source = _touch(tmp_path / "HotkeysConfig.json", datetime(2026, 10, 25, 23, 0))  # Sunday
    backup = tmp_path / "Backup"
    backup_weekly(source, backup)

    _touch(source, datetime(2026, 10, 26, 8, 0))  # Monday, next ISO week
    second = backup_weekly(source, backup)
    assert second is not None
    assert sorted(p.name for p in backup.iterdir()) == [
        "HotkeysConfig-2026-W43.json",
        "HotkeysConfig-2026-W44.json",
    ]


def test_backup_files_weekly_skips_missing_and_sandbox(tmp_path):
    a = _touch(tmp_path / "ApplicationConfig.json", datetime(2026, 1, 5))
    created = backup_files_weekly([a, None, tmp_path / "History.xml"], tmp_path / "Backup")
    assert [p.name for p in created] == ["ApplicationConfig-2026-W02.json"]
    assert backup_files_weekly([a], None) == []

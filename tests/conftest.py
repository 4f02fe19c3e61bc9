# Shared fixtures.  Qt runs headless; loguru output is captured through a
# temporary sink so tests can assert on log messages.

import os
import uuid

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from loguru import logger

from config.paths import PersonalPaths
from core.context import ApplicationContext
from core.process_mode import ProcessMode


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def personal_dir(tmp_path):
    path = tmp_path / "personal"
    path.mkdir()
    return path


@pytest.fixture
def make_context(personal_dir):
    def _make(*flags, personal_path=None):
        mode = ProcessMode.parse(flags)
        paths = PersonalPaths(personal_path or personal_dir, sandbox=mode.sandbox, portable=mode.portable)
        return ApplicationContext(mode=mode, paths=paths)
    return _make


@pytest.fixture
def instance_id():
    return f"snapshare-test-{uuid.uuid4().hex[:8]}"

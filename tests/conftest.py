"""Shared fixtures for the Newsdesk test-suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT_DIR = TESTS_DIR.parent
for path in (ROOT_DIR, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from newsdesk_fixtures import RecordingSleep, StubModuleLogger  # noqa: E402


@pytest.fixture
def stub_logger() -> StubModuleLogger:
    return StubModuleLogger()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()

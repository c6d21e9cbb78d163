# File: tests/conftest.py

import os

import pytest

from src.infrastructure.config.json_settings_repository import JsonSettingsRepository
from src.infrastructure.platform.capture_service import CaptureService
from src.infrastructure.platform.display_service import DisplayService
from tests.fakes import (
    FakeScreenProvider, FakeTranslationService, InlineTaskService, InMemoryHistoryRepository,
    RecordingGateway, RecordingLogger
)

# Widgets under test never need a real display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# --- FIXTURES ---

@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def screen_provider():
    return FakeScreenProvider()


@pytest.fixture
def display_service(screen_provider, logger):
    return DisplayService(screen_provider, logger)


@pytest.fixture
def capture_service(display_service, screen_provider, logger):
    return CaptureService(display_service, screen_provider, logger)


@pytest.fixture
def settings(tmp_path, logger):
    """Settings stored in a temporary JSON file."""
    return JsonSettingsRepository(str(tmp_path / "settings.json"), logger)


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def task_service():
    return InlineTaskService()


@pytest.fixture
def translation_service():
    return FakeTranslationService()


@pytest.fixture
def history():
    return InMemoryHistoryRepository()



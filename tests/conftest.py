"""
Pytest configuration and fixtures

Every test gets its own SQLite database and media directory under tmp_path.
"""
from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from studio.api import create_app
from studio.config import (
    DatabaseSettings,
    Environment,
    LeadSettings,
    LoggingSettings,
    MediaSettings,
    SearchSettings,
    Settings,
)
from studio.container import StudioContainer
from studio.errors import NotificationError
from studio.notifier import Message


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "api: API endpoint tests")


class RecordingNotifier:
    """Collects messages instead of sending them; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages: list[Message] = []
        self.closed = False

    async def send(self, message: Message) -> None:
        if self.fail:
            raise NotificationError("mail API unreachable")
        self.messages.append(message)

    async def aclose(self) -> None:
        self.closed = True


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        environment=Environment.TESTING,
        db=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'studio.db'}"),
        media=MediaSettings(root_dir=str(tmp_path / "uploads")),
        leads=LeadSettings(),
        search=SearchSettings(),
        logging=LoggingSettings(level="WARNING"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def container(settings, notifier):
    services = StudioContainer(settings, notifier=notifier)
    await services.open()
    try:
        yield services
    finally:
        await services.close()


@pytest.fixture
def client(settings, notifier):
    app = create_app(settings, notifier=notifier)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

from __future__ import annotations

import pytest

from studio.container import StudioContainer


class ExplodingNotifier:
    async def send(self, message) -> None:
        pass

    async def aclose(self) -> None:
        raise RuntimeError("client already closed")


class FakeEngine:
    def __init__(self):
        self.disposed = False

    async def dispose(self) -> None:
        self.disposed = True


async def test_engine_is_disposed_when_notifier_close_fails(settings):
    services = StudioContainer(settings, notifier=ExplodingNotifier())
    real_engine = services.engine
    services.engine = FakeEngine()
    try:
        with pytest.raises(RuntimeError):
            await services.close()
        assert services.engine.disposed
    finally:
        await real_engine.dispose()

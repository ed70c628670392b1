from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from autorestart.config import WatchdogConfig, get_settings
from autorestart.install import install_autorestart
from autorestart.sampler import MemorySample


class FakeSampler:
    def __init__(self, virtual_bytes: int | None = 100) -> None:
        self.virtual_bytes = virtual_bytes
        self.calls = 0

    def __call__(self) -> MemorySample | None:
        self.calls += 1
        if self.virtual_bytes is None:
            return None
        return MemorySample(
            pid=4242,
            virtual_bytes=self.virtual_bytes,
            resident_bytes=self.virtual_bytes // 2,
            command_line="gunicorn: worker [demo]",
        )


class FakeTerminator:
    def __init__(self) -> None:
        self.reasons: list[str] = []

    def __call__(self, reason: str) -> None:
        self.reasons.append(reason)


def build_app(config: WatchdogConfig, sampler: FakeSampler, terminator: FakeTerminator) -> FastAPI:
    app = FastAPI()
    install_autorestart(app, config, sampler=sampler, terminator=terminator)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @app.get("/boom")
    async def boom() -> dict[str, str]:
        raise RuntimeError("downstream failure")

    return app


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Keep a developer's .env or shell settings out of the tests.
    monkeypatch.chdir(tmp_path)
    for name in (
        "AUTORESTART_ACTIVE",
        "AUTORESTART_CHECK_INTERVAL",
        "AUTORESTART_MIN_HANDLED_REQUESTS",
        "AUTORESTART_MAX_MEMORY_BYTES",
        "AUTORESTART_ENABLE_STATUS_ENDPOINT",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sampler() -> FakeSampler:
    return FakeSampler()


@pytest.fixture
def terminator() -> FakeTerminator:
    return FakeTerminator()


@pytest.fixture
def watchdog_config() -> WatchdogConfig:
    return WatchdogConfig(active=True, check_interval=5, min_handled_requests=10, max_memory_bytes=1000)


@pytest.fixture
def watchdog_app(watchdog_config: WatchdogConfig, sampler: FakeSampler, terminator: FakeTerminator) -> FastAPI:
    return build_app(watchdog_config, sampler, terminator)


@pytest.fixture
async def api_client(watchdog_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=watchdog_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

"""Shared test fixtures."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

import aw_watcher_network.config as config_module
from aw_watcher_network.sink import Event, SinkError


class FakeSink:
    """Records buckets and heartbeats instead of talking to aw-server."""

    def __init__(self, fail_buckets: bool = False, fail_heartbeats: bool = False) -> None:
        self.fail_buckets = fail_buckets
        self.fail_heartbeats = fail_heartbeats
        self.buckets: list[tuple[str, str]] = []
        self.heartbeats: list[tuple[str, Event, float]] = []
        self.closed = False

    async def ensure_bucket(self, bucket_id: str, event_type: str) -> None:
        if self.fail_buckets:
            raise SinkError("connection refused")
        self.buckets.append((bucket_id, event_type))

    async def heartbeat(self, bucket_id: str, event: Event, pulsetime: float) -> None:
        if self.fail_heartbeats:
            raise SinkError("HTTP 500")
        self.heartbeats.append((bucket_id, event, pulsetime))

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def failing_sink() -> FakeSink:
    """A sink whose heartbeats are all rejected."""
    return FakeSink(fail_heartbeats=True)


@pytest.fixture(autouse=True)
def config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Use a temporary TOML config file instead of the user's real one."""
    path = tmp_path / "activitywatch" / "aw-watcher-network.toml"
    original = config_module._CONFIG_FILE
    config_module._CONFIG_FILE = path
    yield path
    config_module._CONFIG_FILE = original


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep AW_WATCHER_NETWORK_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("AW_WATCHER_NETWORK_"):
            monkeypatch.delenv(key)

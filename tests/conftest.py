"""Fixtures compartidos."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import httpx
import pytest
from rich.console import Console

from adapters.http_client import HttpRelay, PlainTransport, TlsTransport
from core.services.bridge import BridgeServices


class FixedClock:
    """Reloj de milisegundos controlable desde el test."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now


class DirPaths:
    def __init__(self, downloads: Path) -> None:
        self.downloads = downloads

    def get_path(self, name: str) -> Path:
        assert name == "downloads"
        return self.downloads


def mock_relay(handler: Callable[[httpx.Request], httpx.Response]) -> HttpRelay:
    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return HttpRelay(
        transports=(
            PlainTransport(client_factory=factory),
            TlsTransport(client_factory=factory),
        )
    )


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("HOSTBRIDGE_DOWNLOADS_DIR", "HOSTBRIDGE_HTTP_TIMEOUT_SECONDS", "HOSTBRIDGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def downloads(tmp_path: Path) -> Path:
    path = tmp_path / "downloads"
    path.mkdir()
    return path


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def make_bridge(downloads: Path, clock: FixedClock):
    def _make(handler: Callable[[httpx.Request], httpx.Response] | None = None) -> BridgeServices:
        handler = handler or (lambda request: httpx.Response(204))
        return BridgeServices(paths=DirPaths(downloads), relay=mock_relay(handler), clock=clock)

    return _make

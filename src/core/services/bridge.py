"""Superficie del bridge expuesta al front-end.

This module composes the file helpers and the HTTP relay into the capability
set the sandboxed front-end can call. Names exposed to the front-end keep the
camelCase contract (`readFile`, `writeTextFile`, `writeImageFile`,
`httpRequest`); the Python side uses snake_case.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping

from adapters.file_writer import Clock, epoch_millis, read_file, write_image_file, write_text_file
from adapters.host_paths import SystemHostPaths
from adapters.http_client import HttpRelay
from core.config import AppSettings
from core.domain.models import RelayResponse, RequestOptions
from core.interfaces.host import HostPaths


class BridgeServices:
    """Capabilities callable from the front-end."""

    def __init__(
        self,
        *,
        paths: HostPaths,
        relay: HttpRelay,
        clock: Clock = epoch_millis,
    ) -> None:
        self._paths = paths
        self._relay = relay
        self._clock = clock

    @property
    def downloads_dir(self) -> Path:
        return self._paths.get_path("downloads")

    def read_file(self, path: str) -> str:
        return read_file(path)

    def write_text_file(self, text: str) -> str:
        return write_text_file(text, directory=self.downloads_dir, clock=self._clock)

    def write_image_file(self, base64_url: str) -> str | None:
        """Returns the written path, or `None` when the data URL is malformed."""

        outcome = write_image_file(base64_url, directory=self.downloads_dir, clock=self._clock)
        return outcome.path if outcome.ok else None

    async def http_request(
        self,
        url: str,
        options: RequestOptions | Mapping[str, Any] | None = None,
    ) -> RelayResponse:
        return await self._relay.request(url, options)

    def expose(self) -> dict[str, Callable[..., Any]]:
        """The mapping injected into the front-end as its `services` object."""

        return {
            "readFile": self.read_file,
            "writeTextFile": self.write_text_file,
            "writeImageFile": self.write_image_file,
            "httpRequest": self.http_request,
        }


def build_bridge(settings: AppSettings | None = None, *, clock: Clock = epoch_millis) -> BridgeServices:
    settings = settings or AppSettings()
    return BridgeServices(
        paths=SystemHostPaths(settings),
        relay=HttpRelay(settings),
        clock=clock,
    )

"""Servicios del host consumidos por el bridge."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class HostPaths(Protocol):
    """Resolución de directorios con nombre (p.ej. `downloads`)."""

    def get_path(self, name: str) -> Path:
        ...

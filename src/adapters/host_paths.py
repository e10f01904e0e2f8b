"""Resolución de directorios del host (`downloads`, `home`, `temp`)."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

from core.config import AppSettings


def get_user_downloads_dir() -> Path:
    """Directorio de descargas del usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("USERPROFILE", str(Path.home())))
        return base / "Downloads"

    xdg = os.environ.get("XDG_DOWNLOAD_DIR")
    if xdg:
        return Path(os.path.expandvars(xdg)).expanduser()
    return Path.home() / "Downloads"


class SystemHostPaths:
    """Implementación de `HostPaths` sobre el sistema y `AppSettings`."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def get_path(self, name: str) -> Path:
        key = name.strip().lower()
        if key == "downloads":
            return self._settings.downloads_dir or get_user_downloads_dir()
        if key == "home":
            return Path.home()
        if key == "temp":
            return Path(tempfile.gettempdir())
        raise ValueError(f"Unknown host path: {name!r}")

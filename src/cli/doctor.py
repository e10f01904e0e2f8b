"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.host_paths import SystemHostPaths
from adapters.http_client import HttpRelay
from cli.ui_components import print_banner
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import RelayError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(relay: HttpRelay, url: str) -> tuple[bool, str]:
    try:
        response = await relay.request(url, {"method": "HEAD"})
    except RelayError as exc:
        return False, str(exc)
    return True, f"HTTP {response.status}"


def _check_downloads(path: Path) -> tuple[bool, str]:
    if not path.is_dir():
        return False, f"{path} does not exist"
    if not os.access(path, os.W_OK):
        return False, f"{path} is not writable"
    return True, str(path)


@app.command()
def run(
    url: str = typer.Option("https://example.com", "--url", help="URL usada para probar conectividad."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    print_banner(_console)

    table = Table(title="hostbridge Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    downloads = SystemHostPaths(settings).get_path("downloads")
    ok_dl, detail_dl = _check_downloads(downloads)
    table.add_row("Downloads dir", "OK" if ok_dl else "FAIL", detail_dl)

    timeout = settings.http_timeout_seconds
    table.add_row("HTTP timeout", "OK", "none" if timeout is None else f"{timeout}s")
    table.add_row("Overlay", "OK", "enabled" if settings.overlay_enabled else "disabled")

    ok_http, detail_http = asyncio.run(_check_http(HttpRelay(settings), url))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_dl:
        _console.print(
            "\n[yellow]Note:[/yellow] Run `hostbridge doctor set-downloads` or set HOSTBRIDGE_DOWNLOADS_DIR."
        )


@app.command(name="set-downloads")
def set_downloads(
    path: Path = typer.Argument(None, help="Directorio de descargas a usar."),
) -> None:
    """Store the downloads directory in the user config .env."""

    if path is None:
        default = str(SystemHostPaths(AppSettings()).get_path("downloads"))
        path = Path(typer.prompt("Downloads directory", default=default, show_default=True).strip())

    path = path.expanduser().resolve()
    if not path.is_dir():
        raise typer.BadParameter(f"{path} is not a directory")

    env_path = write_user_env_vars({"HOSTBRIDGE_DOWNLOADS_DIR": str(path)})
    _console.print(f"[green]Saved downloads dir to:[/green] {env_path}")

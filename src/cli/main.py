"""CLI de hostbridge (Typer).

Expone cada operación del bridge como comando y `serve` para montar el
bridge sobre stdio. Los datos van a stdout; estado y errores a stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.app import bootstrap
from cli.ui_components import build_response_table
from core.config import AppSettings
from core.domain.errors import BridgeError
from core.services.bridge import build_bridge

app = typer.Typer(no_args_is_help=True, help="Host bridge: file system and HTTP capabilities for a sandboxed front-end.")
app.add_typer(doctor.app, name="doctor")

_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(exc: Exception) -> NoReturn:
    _console.print(f"[red]Error:[/red] {exc}", highlight=False)
    raise typer.Exit(code=1)


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        if ":" not in raw:
            raise typer.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
        name, value = raw.split(":", 1)
        headers[name.strip()] = value.strip()
    return headers


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Nivel de logs (DEBUG, INFO, WARNING...)."),
) -> None:
    configure_logging(log_level or AppSettings().log_level)


@app.command("read-file")
def read_file_cmd(path: str = typer.Argument(..., help="Archivo a leer (UTF-8).")) -> None:
    """Print the full contents of a file."""

    try:
        text = build_bridge().read_file(path)
    except OSError as exc:
        _fail(exc)
    typer.echo(text, nl=False)


@app.command("write-text")
def write_text_cmd(text: str = typer.Argument(..., help="Texto a guardar.")) -> None:
    """Write text to <downloads>/<epoch-millis>.txt and print the path."""

    try:
        path = build_bridge().write_text_file(text)
    except OSError as exc:
        _fail(exc)
    typer.echo(path)


@app.command("write-image")
def write_image_cmd(data_url: str = typer.Argument(..., help="data:image/<subtype>;base64,<payload>")) -> None:
    """Decode an image data URL into the downloads directory and print the path."""

    try:
        path = build_bridge().write_image_file(data_url)
    except OSError as exc:
        _fail(exc)
    if path is None:
        _fail(ValueError("not an image data URL (expected data:image/<subtype>;base64,...)"))
    typer.echo(path)


@app.command("request")
def request_cmd(
    url: str = typer.Argument(..., help="URL http:// o https://"),
    method: str = typer.Option("GET", "--method", "-X"),
    header: list[str] = typer.Option([], "--header", "-H", help="Header 'Name: value' (repetible)."),
    data: str = typer.Option(None, "--data", "-d", help="Cuerpo crudo de la request."),
    as_json: bool = typer.Option(False, "--json", help="Decodificar la respuesta como JSON."),
    show_headers: bool = typer.Option(False, "--include", "-i", help="Mostrar status y headers."),
) -> None:
    """Perform one HTTP request and print the buffered body."""

    options = {"method": method, "headers": _parse_headers(header), "body": data}
    try:
        response = asyncio.run(build_bridge().http_request(url, options))
    except BridgeError as exc:
        _fail(exc)

    if show_headers:
        _console.print(build_response_table(response))
    if as_json:
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            _fail(exc)
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        typer.echo(response.data, nl=False)


@app.command("serve")
def serve_cmd() -> None:
    """Serve bridge calls over stdio (length-prefixed JSON frames)."""

    settings = AppSettings()
    bootstrap(settings, console=_console)


def run() -> None:
    app()

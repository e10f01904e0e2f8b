"""UI bootstrap: aplicación que monta el bridge sobre el canal stdio.

`BridgeApp` plays the role of the view application: it owns an error hook
(`config.error_handler`) and a `mount()` loop that serves front-end calls.
`bootstrap()` wires app, overlay and crash reporter together and runs it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import IO, Any, Callable

from rich.console import Console

from adapters.bridge_channel import StdioChannel
from cli.crash_reporter import CrashReporter, ErrorOverlay
from core.config import AppSettings
from core.domain.errors import BridgeError, ChannelError
from core.domain.models import RelayResponse
from core.services.bridge import BridgeServices, build_bridge

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[BaseException, Any, str], None]


@dataclass
class AppConfig:
    error_handler: ErrorHandler | None = None


def _to_wire(value: Any) -> Any:
    if isinstance(value, RelayResponse):
        return value.to_payload()
    return value


class BridgeApp:
    """Sirve llamadas del front-end contra `BridgeServices`."""

    def __init__(self, bridge: BridgeServices, *, channel: StdioChannel) -> None:
        self.bridge = bridge
        self.channel = channel
        self.config = AppConfig()
        self._services = bridge.expose()
        self._pending: set[asyncio.Task] = set()

    def handle_error(self, err: BaseException, info: str) -> None:
        """Entrega el error al hook de la app; sin hook, se propaga."""

        if self.config.error_handler is None:
            raise err
        self.config.error_handler(err, self, info)

    async def call(self, method: str, params: list[Any]) -> Any:
        service = self._services.get(method)
        if service is None:
            raise BridgeError(f"Unknown method: {method}")
        result = service(*params)
        if inspect.isawaitable(result):
            result = await result
        return _to_wire(result)

    async def dispatch(self, message: dict[str, Any]) -> dict[str, Any]:
        """Ejecuta una llamada y arma la respuesta; un fallo es una respuesta `ok: false`."""

        call_id = message.get("id")
        method = str(message.get("method") or "")
        params = message.get("params") or []
        if not isinstance(params, list):
            params = [params]
        try:
            result = await self.call(method, params)
        except Exception as exc:
            logger.info("Call %s(%r) rejected: %s", method, call_id, exc)
            return {"id": call_id, "ok": False, "error": str(exc) or exc.__class__.__name__}
        return {"id": call_id, "ok": True, "result": result}

    async def _serve_one(self, message: dict[str, Any]) -> None:
        reply = await self.dispatch(message)
        self.channel.write_message(reply)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            task.get_loop().call_exception_handler(
                {"message": "Unhandled error in bridge call", "exception": exc, "task": task}
            )

    async def mount(self) -> None:
        """Lee frames hasta EOF; cada llamada corre en su propia tarea."""

        logger.info("Bridge mounted: %s", ", ".join(sorted(self._services)))
        while True:
            try:
                message = await asyncio.to_thread(self.channel.read_message)
            except ChannelError as exc:
                self.handle_error(exc, "channel")
                continue
            if message is None:
                break
            task = asyncio.create_task(self._serve_one(message))
            self._pending.add(task)
            task.add_done_callback(self._on_task_done)

        if self._pending:
            await asyncio.wait(set(self._pending))
        logger.info("Bridge channel closed")


def create_app(bridge: BridgeServices, *, channel: StdioChannel | None = None) -> BridgeApp:
    return BridgeApp(bridge, channel=channel or StdioChannel())


def bootstrap(
    settings: AppSettings | None = None,
    *,
    stdin: IO[bytes] | None = None,
    stdout: IO[bytes] | None = None,
    console: Console | None = None,
) -> ErrorOverlay:
    """Crea la app, instala el crash reporter y monta el bridge hasta EOF."""

    settings = settings or AppSettings()
    overlay = ErrorOverlay(console, enabled=settings.overlay_enabled)
    app = create_app(build_bridge(settings), channel=StdioChannel(stdin, stdout))

    async def _main() -> None:
        reporter = CrashReporter(overlay).install(app=app, loop=asyncio.get_running_loop())
        try:
            await app.mount()
        finally:
            reporter.uninstall()
            overlay.close()

    asyncio.run(_main())
    return overlay

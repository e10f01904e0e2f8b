"""Overlay de errores y listeners globales.

The overlay shows only the most recent uncaught error: its box is created on
the first error and every later error overwrites its text in place. There is
no history and no dismissal.

Three listeners route into the same render function:

- the view application's error hook (`app.config.error_handler`);
- the uncaught-exception hooks (`sys.excepthook`, `threading.excepthook`);
- the unhandled-rejection listener (the asyncio loop exception handler).
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
import traceback
from typing import Any

from rich.console import Console
from rich.live import Live
from rich.text import Text

from cli.ui_components import build_error_panel
from core.domain.models import ErrorReport

logger = logging.getLogger(__name__)


class ErrorOverlay:
    """Handle del overlay. Se pasa explícitamente a quien tenga que dibujar errores.

    El panel vive en un único `rich.live.Live`: cada error lo redibuja en su
    sitio, no se apila debajo del anterior.
    """

    def __init__(self, console: Console | None = None, *, enabled: bool = True) -> None:
        self._console = console or Console(stderr=True)
        self._enabled = enabled
        self._box: Text | None = None
        self._live: Live | None = None
        self.last_report: ErrorReport | None = None

    def ensure_box(self) -> Text:
        if self._box is None:
            self._box = Text(style="#990000")
        return self._box

    @property
    def created(self) -> bool:
        return self._box is not None

    @property
    def text(self) -> str:
        return self._box.plain if self._box is not None else ""

    def render(self) -> None:
        if not self._enabled:
            return
        panel = build_error_panel(self.ensure_box())
        if self._live is None:
            self._live = Live(
                panel,
                console=self._console,
                auto_refresh=False,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self._live.start(refresh=True)
        else:
            self._live.update(panel, refresh=True)

    def close(self) -> None:
        """Deja el último panel en pantalla y libera la consola."""

        if self._live is not None:
            self._live.stop()
            self._live = None


def describe_error(err: Any) -> ErrorReport:
    if isinstance(err, BaseException):
        message = str(err) or err.__class__.__name__
        stack = "".join(traceback.format_exception(type(err), err, err.__traceback__)).rstrip()
        return ErrorReport(message=message, stack=stack)
    return ErrorReport(message=str(err))


def show_error_overlay(overlay: ErrorOverlay, err: Any, context: str | None = None) -> ErrorReport:
    """Sobrescribe el overlay con el último error (mensaje, contexto y stack)."""

    report = describe_error(err).model_copy(update={"context": context})
    ctx = f"\n[Context] {context}" if context else ""
    box = overlay.ensure_box()
    box.plain = f"Render error: {report.message}{ctx}\n{report.stack}"
    overlay.last_report = report
    overlay.render()
    return report


class CrashReporter:
    """Instala/desinstala los listeners globales sobre un `ErrorOverlay`."""

    def __init__(self, overlay: ErrorOverlay) -> None:
        self.overlay = overlay
        self._app: Any = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._prev_excepthook = None
        self._prev_threading_hook = None
        self._prev_loop_handler = None
        self._installed = False

    def install(self, *, app: Any = None, loop: asyncio.AbstractEventLoop | None = None) -> "CrashReporter":
        if self._installed:
            return self
        if app is not None:
            app.config.error_handler = self.on_view_error
            self._app = app

        self._prev_excepthook = sys.excepthook
        sys.excepthook = self.on_uncaught
        self._prev_threading_hook = threading.excepthook
        threading.excepthook = self.on_thread_exception

        if loop is not None:
            self._prev_loop_handler = loop.get_exception_handler()
            loop.set_exception_handler(self.on_unhandled_rejection)
            self._loop = loop

        self._installed = True
        return self

    def uninstall(self) -> None:
        if not self._installed:
            return
        sys.excepthook = self._prev_excepthook or sys.__excepthook__
        threading.excepthook = self._prev_threading_hook or threading.__excepthook__
        if self._loop is not None:
            self._loop.set_exception_handler(self._prev_loop_handler)
            self._loop = None
        if self._app is not None and self._app.config.error_handler == self.on_view_error:
            self._app.config.error_handler = None
        self._app = None
        self._installed = False

    def on_view_error(self, err: BaseException, instance: Any, info: str) -> None:
        logger.error("[View Error] %s (%s)", err, info)
        show_error_overlay(self.overlay, err, info)

    def on_uncaught(self, exc_type, exc, tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            (self._prev_excepthook or sys.__excepthook__)(exc_type, exc, tb)
            return
        if exc is not None and exc.__traceback__ is None:
            exc = exc.with_traceback(tb)
        logger.error("[Window Error] %s", exc if exc is not None else exc_type.__name__)
        show_error_overlay(self.overlay, exc if exc is not None else exc_type.__name__, "window.onerror")

    def on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        self.on_uncaught(args.exc_type, args.exc_value, args.exc_traceback)

    def on_unhandled_rejection(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        reason = context.get("exception") or context.get("message", "unhandled rejection")
        logger.error("[Unhandled Rejection] %s", reason)
        show_error_overlay(self.overlay, reason, "unhandledrejection")

"""Tests for cli.app: serving front-end calls over the stdio channel."""

from __future__ import annotations

import asyncio
import base64
import io
import json
from pathlib import Path

import httpx
import pytest

from adapters.bridge_channel import StdioChannel, decode_frames, encode_frame
from cli.app import BridgeApp, bootstrap
from cli.crash_reporter import CrashReporter, ErrorOverlay
from core.config import AppSettings
from core.domain.errors import ChannelError


def _channel(*frames: bytes) -> tuple[StdioChannel, io.BytesIO]:
    stdout = io.BytesIO()
    return StdioChannel(io.BytesIO(b"".join(frames)), stdout), stdout


def _serve(app: BridgeApp, overlay: ErrorOverlay | None = None) -> None:
    async def scenario() -> None:
        reporter = None
        if overlay is not None:
            reporter = CrashReporter(overlay).install(app=app, loop=asyncio.get_running_loop())
        try:
            await app.mount()
        finally:
            if reporter is not None:
                reporter.uninstall()
                overlay.close()

    asyncio.run(scenario())


class TestChannel:
    def test_frame_roundtrip(self) -> None:
        channel, stdout = _channel(encode_frame({"id": 1, "method": "readFile"}))
        assert channel.read_message() == {"id": 1, "method": "readFile"}
        assert channel.read_message() is None
        channel.write_message({"id": 1, "ok": True, "result": "ñ"})
        assert decode_frames(stdout.getvalue()) == [{"id": 1, "ok": True, "result": "ñ"}]

    def test_truncated_frame_is_eof(self) -> None:
        channel, _ = _channel(encode_frame({"id": 1})[:-2])
        assert channel.read_message() is None

    def test_malformed_json(self) -> None:
        body = b"{nope"
        channel, _ = _channel(len(body).to_bytes(4, "little") + body)
        with pytest.raises(ChannelError, match="Malformed frame"):
            channel.read_message()

    def test_non_object_frame(self) -> None:
        channel, _ = _channel(encode_frame([1, 2]))  # type: ignore[arg-type]
        with pytest.raises(ChannelError, match="expected an object"):
            channel.read_message()


class TestBridgeApp:
    def test_serves_all_operations(self, make_bridge, tmp_path: Path, downloads: Path) -> None:
        source = tmp_path / "in.txt"
        source.write_text("leído", encoding="utf-8")
        png = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode("ascii")

        channel, stdout = _channel(
            encode_frame({"id": 1, "method": "readFile", "params": [str(source)]}),
            encode_frame({"id": 2, "method": "writeTextFile", "params": ["guardado"]}),
            encode_frame({"id": 3, "method": "writeImageFile", "params": ["not-a-data-url"]}),
            encode_frame({"id": 4, "method": "httpRequest", "params": ["http://llm.local/api", {"method": "POST"}]}),
            encode_frame({"id": 5, "method": "writeImageFile", "params": [png]}),
        )
        bridge = make_bridge(lambda request: httpx.Response(200, json={"a": 1}))
        _serve(BridgeApp(bridge, channel=channel))

        replies = {reply["id"]: reply for reply in decode_frames(stdout.getvalue())}
        assert replies[1] == {"id": 1, "ok": True, "result": "leído"}
        assert replies[2]["ok"] and Path(replies[2]["result"]).read_text(encoding="utf-8") == "guardado"
        assert replies[3] == {"id": 3, "ok": True, "result": None}
        assert replies[4]["ok"]
        assert replies[4]["result"]["status"] == 200
        assert json.loads(replies[4]["result"]["data"]) == {"a": 1}
        assert replies[5]["result"].endswith(".png")

    def test_failures_become_error_replies(self, make_bridge, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        channel, stdout = _channel(
            encode_frame({"id": "a", "method": "readFile", "params": [str(tmp_path / "missing")]}),
            encode_frame({"id": "b", "method": "httpRequest", "params": ["http://127.0.0.1:9/"]}),
            encode_frame({"id": "c", "method": "deleteEverything", "params": []}),
        )
        _serve(BridgeApp(make_bridge(handler), channel=channel))

        replies = {reply["id"]: reply for reply in decode_frames(stdout.getvalue())}
        assert replies["a"]["ok"] is False and "No such file" in replies["a"]["error"]
        assert replies["b"] == {"id": "b", "ok": False, "error": "Request failed: connection refused"}
        assert replies["c"] == {"id": "c", "ok": False, "error": "Unknown method: deleteEverything"}

    def test_malformed_frame_goes_to_overlay(self, make_bridge, console) -> None:
        bad = b"{oops"
        channel, stdout = _channel(
            len(bad).to_bytes(4, "little") + bad,
            encode_frame({"id": 9, "method": "writeImageFile", "params": ["x"]}),
        )
        overlay = ErrorOverlay(console)
        _serve(BridgeApp(make_bridge(), channel=channel), overlay)

        assert "Malformed frame" in overlay.text
        assert "[Context] channel" in overlay.text
        assert decode_frames(stdout.getvalue()) == [{"id": 9, "ok": True, "result": None}]

    def test_malformed_frame_without_hook_propagates(self, make_bridge) -> None:
        bad = b"]"
        channel, _ = _channel(len(bad).to_bytes(4, "little") + bad)
        with pytest.raises(ChannelError):
            _serve(BridgeApp(make_bridge(), channel=channel))

    def test_reply_failure_is_an_unhandled_rejection(self, make_bridge, console) -> None:
        class BrokenPipe(io.BytesIO):
            def write(self, data) -> int:  # type: ignore[override]
                raise BrokenPipeError("front-end went away")

        channel = StdioChannel(io.BytesIO(encode_frame({"id": 1, "method": "writeImageFile", "params": ["x"]})), BrokenPipe())
        overlay = ErrorOverlay(console)
        _serve(BridgeApp(make_bridge(), channel=channel), overlay)

        assert "front-end went away" in overlay.text
        assert "[Context] unhandledrejection" in overlay.text


def test_bootstrap_runs_until_eof(tmp_path: Path, console) -> None:
    stdout = io.BytesIO()
    stdin = io.BytesIO(encode_frame({"id": 1, "method": "writeTextFile", "params": ["hola"]}))
    overlay = bootstrap(AppSettings(downloads_dir=tmp_path), stdin=stdin, stdout=stdout, console=console)

    [reply] = decode_frames(stdout.getvalue())
    assert reply["ok"] is True
    assert Path(reply["result"]).parent == tmp_path.resolve()
    assert not overlay.created

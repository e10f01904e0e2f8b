"""Canal stdio entre el front-end y el bridge.

Framing estilo native-messaging: 4 bytes little-endian con la longitud y
luego el JSON UTF-8.

- Request: `{"id": ..., "method": "<op>", "params": [...]}`
- Reply:   `{"id": ..., "ok": true, "result": ...}` / `{"id": ..., "ok": false, "error": "..."}`
"""

from __future__ import annotations

import json
import struct
import sys
from typing import IO, Any

from core.domain.errors import ChannelError

_HEADER = struct.Struct("<I")


class StdioChannel:
    def __init__(self, stdin: IO[bytes] | None = None, stdout: IO[bytes] | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer

    def read_message(self) -> dict[str, Any] | None:
        """Lee un frame. Devuelve `None` en EOF (o frame truncado)."""

        header = self._stdin.read(_HEADER.size)
        if len(header) < _HEADER.size:
            return None
        (length,) = _HEADER.unpack(header)
        body = self._stdin.read(length)
        if len(body) != length:
            return None
        try:
            message = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ChannelError(f"Malformed frame: {exc}") from exc
        if not isinstance(message, dict):
            raise ChannelError(f"Malformed frame: expected an object, got {type(message).__name__}")
        return message

    def write_message(self, message: dict[str, Any]) -> None:
        self._stdout.write(encode_frame(message))
        self._stdout.flush()


def encode_frame(message: dict[str, Any]) -> bytes:
    body = json.dumps(message, ensure_ascii=False).encode("utf-8")
    return _HEADER.pack(len(body)) + body


def decode_frames(data: bytes) -> list[dict[str, Any]]:
    """Parte un buffer en frames (útil para leer lo que el bridge escribió)."""

    out: list[dict[str, Any]] = []
    offset = 0
    while offset + _HEADER.size <= len(data):
        (length,) = _HEADER.unpack_from(data, offset)
        offset += _HEADER.size
        out.append(json.loads(data[offset : offset + length].decode("utf-8")))
        offset += length
    return out

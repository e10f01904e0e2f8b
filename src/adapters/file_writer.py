"""Lectura y escritura de archivos para el bridge.

Todas las operaciones son bloqueantes: cuando la función retorna, el archivo
ya fue leído/escrito.

Nombres de archivo: `<epoch-millis>.<ext>`. Dos escrituras en el mismo
milisegundo apuntan al mismo archivo y la segunda sobrescribe a la primera.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from pathlib import Path
from typing import Callable

from core.domain.models import ImageWriteOutcome, WriteStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

_IMAGE_DATA_URL_RE = re.compile(r"^data:image/([a-z]{1,20});base64,", re.IGNORECASE)


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def _target_path(directory: Path, ext: str, clock: Clock) -> Path:
    return Path(directory).resolve() / f"{clock()}.{ext}"


def read_file(path: str | Path) -> str:
    """Lee el archivo completo como UTF-8 (bytes inválidos -> U+FFFD).

    `FileNotFoundError`/`PermissionError` se propagan sin tocar.
    """

    return Path(path).read_text(encoding="utf-8", errors="replace")


def write_text_file(text: str, *, directory: Path, clock: Clock = epoch_millis) -> str:
    """Escribe `text` en `<directory>/<millis>.txt` y devuelve la ruta absoluta."""

    target = _target_path(directory, "txt", clock)
    target.write_text(text, encoding="utf-8")
    logger.info("Wrote text file %s (%d chars)", target, len(text))
    return str(target)


def _decode_base64(payload: str) -> bytes:
    cleaned = "".join(payload.split()).rstrip("=")
    return base64.b64decode(cleaned + "=" * (-len(cleaned) % 4))


def write_image_file(
    data_url: str,
    *,
    directory: Path,
    clock: Clock = epoch_millis,
) -> ImageWriteOutcome:
    """Escribe la imagen de un data URL `data:image/<subtype>;base64,<payload>`.

    Si el prefijo no coincide (o el payload no es base64), no se crea ningún
    archivo y el resultado es `invalid_input`.
    """

    match = _IMAGE_DATA_URL_RE.match(data_url or "")
    if not match:
        logger.debug("Rejected image data URL with unexpected prefix")
        return ImageWriteOutcome(
            status=WriteStatus.INVALID_INPUT,
            reason="expected data:image/<subtype>;base64,<payload>",
        )

    try:
        raw = _decode_base64(data_url[match.end() :])
    except (binascii.Error, ValueError) as exc:
        logger.debug("Rejected image data URL with bad payload: %s", exc)
        return ImageWriteOutcome(status=WriteStatus.INVALID_INPUT, reason=f"invalid base64 payload: {exc}")

    target = _target_path(directory, match.group(1), clock)
    target.write_bytes(raw)
    logger.info("Wrote image file %s (%d bytes)", target, len(raw))
    return ImageWriteOutcome(status=WriteStatus.WRITTEN, path=str(target))

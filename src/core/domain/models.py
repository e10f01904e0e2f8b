"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de lo que llega desde el front-end (opciones HTTP)
  antes de tocar la red o el disco.
- Los modelos describen *qué* se pide y *qué* se devuelve, no *cómo*.

Nota:
- `RelayResponse` es un dataclass: expone `json()` como accessor perezoso y
  ese nombre choca con la API de `BaseModel`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

# Campos de transporte que se pasan tal cual al cliente HTTP.
PASSTHROUGH_FIELDS: frozenset[str] = frozenset(
    {"params", "cookies", "auth", "follow_redirects", "timeout", "extensions"}
)

_RECOGNIZED_FIELDS = ("method", "headers", "body")


class RequestOptions(BaseModel):
    """Opciones de una request del relay HTTP.

    Campos reconocidos (`method`, `headers`, `body`) más un mapping explícito
    `extra` para campos específicos del transporte.

    `timeout` en `extra` va en segundos (semántica de httpx), no en milisegundos.
    Los valores numéricos o booleanos de `headers` se convierten a string.
    """

    model_config = ConfigDict(extra="forbid")

    method: str = Field(
        default="GET",
        min_length=1,
        description="Método HTTP (se normaliza a mayúsculas).",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers salientes; se conserva el case de las claves.",
    )
    body: str | None = Field(
        default=None,
        description="Cuerpo crudo. Un string vacío no se escribe.",
    )
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Campos de transporte pasados directamente al cliente HTTP.",
    )

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("headers", mode="before")
    @classmethod
    def _stringify_headers(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        out: dict[Any, Any] = {}
        for key, item in value.items():
            if isinstance(item, bool):
                item = "true" if item else "false"
            elif isinstance(item, (int, float)):
                item = str(item)
            out[key] = item
        return out

    @field_validator("extra")
    @classmethod
    def _known_passthrough(cls, value: dict[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(value) - PASSTHROUGH_FIELDS)
        if unknown:
            raise ValueError(f"unsupported transport options: {', '.join(unknown)}")
        return value

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "RequestOptions":
        """Construye opciones desde el dict plano que manda el front-end.

        `{"method": "POST", "body": "...", "timeout": 5}` -> `timeout` va a `extra`.
        Los valores `None` se tratan como ausentes.
        """

        if isinstance(options, RequestOptions):
            return options
        data: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in (options or {}).items():
            if value is None:
                continue
            if key in _RECOGNIZED_FIELDS:
                data[key] = value
            elif key == "extra" and isinstance(value, Mapping):
                extra.update(value)
            else:
                extra[key] = value
        return cls(**data, extra=extra)


@dataclass(frozen=True)
class RelayResponse:
    """Respuesta completa (ya bufferizada) del relay HTTP."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    data: str = ""

    def json(self) -> Any:
        """Decodifica `data` bajo demanda; lanza `json.JSONDecodeError` si no es JSON."""

        return json.loads(self.data)

    def to_payload(self) -> dict[str, Any]:
        return {"status": self.status, "headers": dict(self.headers), "data": self.data}


class WriteStatus(str, Enum):
    WRITTEN = "written"
    INVALID_INPUT = "invalid_input"


class ImageWriteOutcome(BaseModel):
    """Resultado de escribir una imagen desde un data URL."""

    status: WriteStatus = Field(
        ...,
        description="`written` si se creó el archivo; `invalid_input` si el data URL no es válido.",
    )
    path: str | None = Field(
        default=None,
        description="Ruta absoluta del archivo escrito.",
    )
    reason: str | None = Field(
        default=None,
        description="Motivo del rechazo cuando `status` es `invalid_input`.",
    )

    @property
    def ok(self) -> bool:
        return self.status is WriteStatus.WRITTEN


class ErrorReport(BaseModel):
    """Último error mostrado en el overlay."""

    message: str = Field(..., description="Mensaje del error.")
    context: str | None = Field(default=None, description="Etiqueta de contexto del listener.")
    stack: str = Field(default="", description="Traceback formateado, si existe.")

"""Contrato de transporte HTTP.

Por qué Protocol:
- Un transporte por esquema (`http`, `https`), intercambiables y testeables
  sin acoplar el Core a httpx.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import RelayResponse, RequestOptions


@runtime_checkable
class HttpTransport(Protocol):
    """Contrato mínimo para un transporte del relay.

    Reglas de diseño:
    - `request` es asíncrono y devuelve la respuesta completa, ya bufferizada.
    - Los fallos de red se elevan como `RelayError`.
    """

    scheme: str

    async def request(self, url: str, options: RequestOptions) -> RelayResponse:
        """Ejecuta una única request y devuelve la respuesta completa."""

        ...

"""Relay HTTP sobre httpx.

Responsabilidad:
- Elegir transporte por esquema (`http://` plano, `https://` TLS).
- Ejecutar exactamente una request y bufferizar la respuesta completa.
- Envolver los fallos de red como `RelayError` con el mensaje original.

Sin pooling, sin reintentos, sin streaming hacia el llamador: cada llamada
abre su propio cliente y lo cierra al terminar.
"""

from __future__ import annotations

import codecs
import logging
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import urlsplit

import httpx

from core.config import AppSettings
from core.domain.errors import RelayError, UnsupportedSchemeError
from core.domain.models import RelayResponse, RequestOptions
from core.interfaces.transport import HttpTransport

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` de un solo uso.

    - Sin redirecciones automáticas ni headers extra: la request sale como la pide el front-end.
    - Timeout solo si está configurado (`None` = sin límite).
    """

    settings = settings or AppSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=False,
        transport=transport,
    )


class _BufferedTransport:
    """Base común: abre la request, acumula chunks y arma la `RelayResponse`."""

    scheme = ""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        return build_async_client(self._settings)

    async def request(self, url: str, options: RequestOptions) -> RelayResponse:
        logger.debug("%s %s (%s transport)", options.method, url, self.scheme)

        # El cuerpo se decodifica siempre como UTF-8, ignorando el charset del Content-Type.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        chunks: list[str] = []
        try:
            async with self._client_factory() as client:
                async with client.stream(
                    options.method,
                    url,
                    headers=options.headers,
                    content=options.body or None,
                    **options.extra,
                ) as response:
                    async for raw in response.aiter_bytes():
                        chunks.append(decoder.decode(raw))
                    chunks.append(decoder.decode(b"", final=True))
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            detail = str(exc) or exc.__class__.__name__
            logger.warning("Request to %s failed: %s", url, detail)
            raise RelayError(f"Request failed: {detail}") from exc

        data = "".join(chunks)
        logger.debug("%s %s -> %s (%d chars)", options.method, url, response.status_code, len(data))
        return RelayResponse(
            status=response.status_code,
            headers=dict(response.headers),
            data=data,
        )


class PlainTransport(_BufferedTransport):
    """Transporte para `http://`."""

    scheme = "http"


class TlsTransport(_BufferedTransport):
    """Transporte para `https://` (verificación TLS por defecto de httpx)."""

    scheme = "https"


def url_scheme(url: str) -> str:
    return urlsplit(url).scheme.lower()


class HttpRelay:
    """Despacha cada request al transporte de su esquema."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transports: Iterable[HttpTransport] | None = None,
    ) -> None:
        if transports is None:
            settings = settings or AppSettings()
            transports = (PlainTransport(settings), TlsTransport(settings))
        self._transports: dict[str, HttpTransport] = {t.scheme: t for t in transports}

    def select_transport(self, url: str) -> HttpTransport:
        try:
            scheme = url_scheme(url)
        except ValueError as exc:
            raise RelayError(f"Request failed: invalid URL {url!r}: {exc}") from exc
        transport = self._transports.get(scheme)
        if transport is None:
            raise UnsupportedSchemeError(url)
        return transport

    async def request(
        self,
        url: str,
        options: RequestOptions | Mapping[str, Any] | None = None,
    ) -> RelayResponse:
        """Una request, una respuesta completa. Los fallos de red son `RelayError`."""

        opts = RequestOptions.from_mapping(options)
        transport = self.select_transport(url)
        return await transport.request(url, opts)

"""Errores del bridge.

Los errores de I/O (`OSError`) no se envuelven: se propagan tal cual al
llamador. Solo la capa HTTP y el canal tienen errores propios.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base de los errores propios del bridge."""


class RelayError(BridgeError):
    """Fallo de transporte en una request HTTP (DNS, conexión, TLS, cierre prematuro)."""


class UnsupportedSchemeError(RelayError, ValueError):
    """La URL no usa `http://` ni `https://`."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Unsupported URL scheme: {url!r} (expected http:// or https://)")
        self.url = url


class ChannelError(BridgeError):
    """Frame ilegible en el canal stdio."""

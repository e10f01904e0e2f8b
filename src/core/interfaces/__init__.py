"""Interfaces/abstracciones del Core.

Por qué:
- Contratos (Protocol) para los servicios del host y los transportes HTTP.
- El bridge depende de estas abstracciones, no de httpx ni del sistema.
"""

from core.interfaces.host import HostPaths
from core.interfaces.transport import HttpTransport

__all__ = ["HostPaths", "HttpTransport"]

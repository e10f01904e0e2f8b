"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos del bridge (Pydantic v2 y dataclasses).
- El dominio no conoce httpx, typer ni el sistema de archivos.
"""

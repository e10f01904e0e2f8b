"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos (overlay, request, doctor).
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import RelayResponse


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (solo en modos interactivos)."""

    title = Text("hostbridge", style="bold cyan")
    subtitle = Text("File system • HTTP relay • Crash overlay", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_error_panel(box: Text) -> Panel:
    """Panel fijo del overlay de errores; `box` es el contenido que se sobrescribe."""

    return Panel(
        box,
        title=Text("Error", style="bold red"),
        title_align="left",
        border_style="red",
        style="on #ffecec",
        padding=(0, 1),
    )


def build_response_table(response: RelayResponse) -> Table:
    """Tabla con status y headers de una `RelayResponse`."""

    style = "green" if 200 <= response.status < 300 else "yellow"
    table = Table(title=Text(f"HTTP {response.status}", style=f"bold {style}"))
    table.add_column("Header", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for name, value in response.headers.items():
        table.add_row(name, value)
    return table

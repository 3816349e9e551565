"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console, Group
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich.text import Text

from core.services.codec import RoundTripResult
from core.services.registry import BUILTIN_TAGS, TagRegistry


def print_banner(console: Console) -> None:
    """Imprime el banner de la herramienta (solo en modos interactivos)."""

    title = Text("edn-tags", style="bold cyan")
    subtitle = Text("Tagged literals • Records • Round-trip", style="dim")
    console.print(Panel(Text.assemble(title, "\n", subtitle), border_style="cyan", padding=(0, 2)))


def build_tags_table(registry: TagRegistry) -> Table:
    """Tabla de tags registrados y el callable que los reconstruye."""

    table = Table(title="Registered tags")
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Reader", style="white")
    table.add_column("Kind", style="dim")
    for tag, reader in registry.items():
        name = getattr(reader, "__qualname__", None) or repr(reader)
        module = getattr(reader, "__module__", None)
        kind = "builtin" if tag in BUILTIN_TAGS else "user"
        table.add_row(f"#{tag}", f"{module}.{name}" if module else name, kind)
    return table


def build_value_panel(value: Any, *, title: str = "Decoded value") -> Panel:
    """Panel con la representación Python del valor decodificado."""

    return Panel(Pretty(value, expand_all=False), title=title, border_style="green")


def build_roundtrip_panel(result: RoundTripResult) -> Panel:
    """Panel con el resultado de `check_roundtrip`."""

    status = Text("stable", style="bold green") if result.stable else Text("drift", style="bold red")
    body = Group(
        Text.assemble("Status: ", status),
        Text.assemble("Values equal: ", str(result.values_equal)),
        Text("\nCanonical text:", style="bold"),
        Text(result.encoded),
    )
    if not result.stable:
        body = Group(body, Text("\nRe-encoded text:", style="bold"), Text(result.reencoded))
    return Panel(body, title="Round-trip", border_style="green" if result.stable else "red")

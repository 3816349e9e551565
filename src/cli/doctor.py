"""Doctor command for configuration diagnostics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

import typer
from rich.console import Console
from rich.table import Table

from adapters.data_readers import install_data_readers
from cli.ui_components import print_banner
from core.config import CodecSettings, find_data_readers_file, get_user_env_file
from core.domain.records import Record
from core.errors import EdnError
from core.services.codec import TaggedCodec
from core.services.registry import BUILTIN_TAGS, default_registry

app = typer.Typer(no_args_is_help=True, help="Configuration diagnostics and codec self-checks.")

_console = Console()


class DoctorProbe(Record):
    """Record used for the self-check round-trip."""

    edn_namespace: ClassVar[str | None] = "edn-tags"

    label: str
    checked_at: datetime
    tags: tuple[str, ...] = ()


def _check_readers(settings: CodecSettings) -> tuple[str, str]:
    path = find_data_readers_file(settings)
    if path is None:
        return "OPTIONAL", "No data_readers.edn found (only builtin tags)"
    try:
        installed = install_data_readers(path, default_registry(default_namespace=settings.default_namespace))
    except EdnError as exc:
        return "FAIL", f"{path}: {exc}"
    return "OK", f"{path} ({len(installed)} tags)"


def _check_roundtrip(settings: CodecSettings) -> tuple[bool, str]:
    """Encode and decode a probe record to detect a broken setup."""

    registry = default_registry(default_namespace=settings.default_namespace)
    registry.register_record(DoctorProbe)
    codec = TaggedCodec(registry, settings)
    probe = DoctorProbe(
        label="doctor",
        checked_at=datetime.now(timezone.utc),
        tags=tuple(sorted(BUILTIN_TAGS)),
    )
    try:
        result = codec.check_roundtrip(codec.encode(probe))
    except EdnError as exc:
        return False, str(exc)
    if not result.stable or result.value != probe:
        return False, f"drift: {result.reencoded}"
    return True, result.encoded


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    print_banner(_console)
    settings = CodecSettings()

    table = Table(title="edn-tags Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Default namespace", "OK", settings.default_namespace)
    table.add_row("Unknown tags", "OK", settings.unknown_tags.label())
    table.add_row("Max depth", "OK", str(settings.max_depth))
    env_file = get_user_env_file()
    table.add_row("User .env", "OK" if env_file.exists() else "OPTIONAL", str(env_file))

    status, detail = _check_readers(settings)
    table.add_row("Data readers", status, detail)
    table.add_row("Builtin tags", "OK", ", ".join(f"#{t}" for t in sorted(BUILTIN_TAGS)))

    ok_rt, detail_rt = _check_roundtrip(settings)
    table.add_row("Round-trip", "OK" if ok_rt else "FAIL", detail_rt)

    _console.print(table)

    if status == "FAIL" or not ok_rt:
        raise typer.Exit(code=1)

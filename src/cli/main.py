"""CLI principal (Typer + Rich).

Comandos:
- decode: muestra el valor decodificado (y opcionalmente lo exporta a JSON).
- encode: normaliza un documento (decode + encode) y lo imprime.
- check: verifica que el round-trip sea estable.
- tags: lista los tags registrados.
- doctor: diagnóstico de configuración.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.data_readers import install_data_readers
from adapters.json_exporter import export_value_json
from cli import doctor
from cli.ui_components import build_roundtrip_panel, build_tags_table, build_value_panel
from core.config import CodecSettings, find_data_readers_file
from core.domain.policy import UnknownTagPolicy
from core.errors import EdnError
from core.services.codec import TaggedCodec
from core.services.registry import default_registry

app = typer.Typer(no_args_is_help=True, help="Read, write and verify EDN tagged literals.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

PreserveOption = typer.Option(
    None,
    "--preserve-unknown/--error-unknown",
    help="Conservar tags sin reader como TaggedLiteral (o fallar). Por defecto: EDN_TAGS_UNKNOWN_TAGS.",
)

ReadersOption = typer.Option(
    None,
    "--readers",
    "-r",
    help="data_readers.edn con tag -> módulo:callable.",
    dir_okay=False,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def build_codec(
    readers: Path | None = None,
    *,
    preserve_unknown: bool | None = None,
    settings: CodecSettings | None = None,
) -> TaggedCodec:
    """Construye el codec: builtins + data_readers (flag, config o ubicación por defecto).

    `preserve_unknown=None` respeta `unknown_tags` de la configuración; un
    booleano la sobrescribe (`--preserve-unknown` / `--error-unknown`).
    """

    settings = settings or CodecSettings()
    if preserve_unknown is not None:
        policy = UnknownTagPolicy.from_bool(preserve_unknown)
        settings = settings.model_copy(update={"unknown_tags": policy})

    registry = default_registry(default_namespace=settings.default_namespace)
    path = readers or find_data_readers_file(settings)
    if path is not None:
        installed = install_data_readers(path, registry)
        logger.info("Loaded %d readers from %s", len(installed), path)
    return TaggedCodec(registry, settings)


def _read_input(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    if not path.is_file():
        _err_console.print(f"[red]Error:[/red] input file not found: {path}")
        raise typer.Exit(code=2)
    return path.read_text(encoding="utf-8")


@contextmanager
def _codec_errors() -> Iterator[None]:
    try:
        yield
    except EdnError as exc:
        _err_console.print(f"[red]{type(exc).__name__}:[/red] {exc}", markup=True, highlight=False)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logging DEBUG."),
) -> None:
    settings = CodecSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def decode(
    path: Path = typer.Argument(..., help="Archivo EDN ('-' para stdin)."),
    readers: Path | None = ReadersOption,
    preserve_unknown: bool | None = PreserveOption,
    all_forms: bool = typer.Option(False, "--all", help="Decodificar todos los forms top-level."),
    json_out: Path | None = typer.Option(None, "--json", help="Exportar el valor a JSON."),
) -> None:
    """Decode an EDN document and show the resulting Python value."""

    text = _read_input(path)
    with _codec_errors():
        codec = build_codec(readers, preserve_unknown=preserve_unknown)
        value = codec.decode_all(text) if all_forms else codec.decode(text)
        _console.print(build_value_panel(value))
        if json_out is not None:
            out = export_value_json(
                value=value,
                output_path=json_out,
                indent=codec.settings.indent_json,
                default_namespace=codec.settings.default_namespace,
            )
            _console.print(f"[green]JSON written to:[/green] {out}")


@app.command()
def encode(
    path: Path = typer.Argument(..., help="Archivo EDN ('-' para stdin)."),
    readers: Path | None = ReadersOption,
    preserve_unknown: bool | None = PreserveOption,
) -> None:
    """Print the canonical text of every form in a document."""

    text = _read_input(path)
    with _codec_errors():
        codec = build_codec(readers, preserve_unknown=preserve_unknown)
        for value in codec.decode_all(text):
            typer.echo(codec.encode(value))


@app.command()
def check(
    path: Path = typer.Argument(..., help="Archivo EDN ('-' para stdin)."),
    readers: Path | None = ReadersOption,
    preserve_unknown: bool | None = PreserveOption,
) -> None:
    """Verify that decoding and re-encoding a document is stable."""

    text = _read_input(path)
    with _codec_errors():
        codec = build_codec(readers, preserve_unknown=preserve_unknown)
        result = codec.check_roundtrip(text)
    _console.print(build_roundtrip_panel(result))
    if not result.stable:
        raise typer.Exit(code=1)


@app.command()
def tags(readers: Path | None = ReadersOption) -> None:
    """List the tags known to the codec."""

    with _codec_errors():
        codec = build_codec(readers)
    _console.print(build_tags_table(codec.registry))


def run() -> None:
    app()


if __name__ == "__main__":
    run()

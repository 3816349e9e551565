"""Carga de `data_readers.edn`.

Formato:
    {user/SimpleRecord myapp.models:SimpleRecord
     geo/point         myapp.readers:read_point}

Las claves y los valores son símbolos; el archivo en sí se lee con el mismo
reader EDN del codec (sin tags: un tag dentro del archivo es un error).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from adapters.data_readers.models import DataReadersFile
from adapters.data_readers.operations import install_entries
from core.domain.values import Symbol
from core.errors import EdnError, ReaderConfigError
from core.services.reader import decode
from core.services.registry import TagRegistry


def parse_data_readers(text: str, *, source: str = "<string>") -> DataReadersFile:
    try:
        data = decode(text, TagRegistry())
    except EdnError as exc:
        raise ReaderConfigError(f"{source}: {exc}") from exc

    if not isinstance(data, dict):
        raise ReaderConfigError(f"{source}: top-level form must be a map of tag -> target")

    entries = []
    for key, value in data.items():
        if not isinstance(key, Symbol) or not isinstance(value, Symbol):
            raise ReaderConfigError(f"{source}: entries must be symbol -> symbol, got {key!r} -> {value!r}")
        entries.append({"tag": str(key), "target": str(value)})

    try:
        return DataReadersFile.model_validate({"entries": entries})
    except ValidationError as exc:
        raise ReaderConfigError(f"{source}: {exc}") from exc


def load_data_readers(path: Path) -> DataReadersFile:
    if not path.is_file():
        raise ReaderConfigError(f"data readers file not found: {path}")
    raw = path.read_text(encoding="utf-8")
    return parse_data_readers(raw, source=str(path))


def install_data_readers(path: Path, registry: TagRegistry, *, replace: bool = False) -> list[str]:
    """Carga el archivo y registra sus readers en `registry`."""

    return install_entries(load_data_readers(path), registry, replace=replace)

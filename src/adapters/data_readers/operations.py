"""Resolución de targets e instalación en un `TagRegistry`."""

from __future__ import annotations

import importlib
import logging
from typing import Any

from adapters.data_readers.models import DataReadersFile
from core.domain.records import Record
from core.errors import ReaderConfigError
from core.services.registry import TagRegistry

logger = logging.getLogger(__name__)


def resolve_target(target: str) -> Any:
    """Importa `modulo:atributo` (o `modulo.atributo`) y devuelve el objeto."""

    if ":" in target:
        module_name, _, attr_path = target.partition(":")
    else:
        module_name, _, attr_path = target.rpartition(".")
    if not module_name or not attr_path:
        raise ReaderConfigError(f"Invalid reader target {target!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ReaderConfigError(f"Cannot import module {module_name!r} for {target!r}: {exc}") from exc

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            raise ReaderConfigError(f"{module_name!r} has no attribute {attr_path!r}") from exc
    return obj


def install_entries(readers: DataReadersFile, registry: TagRegistry, *, replace: bool = False) -> list[str]:
    """Registra cada entrada. Devuelve los tags instalados, en orden."""

    installed: list[str] = []
    for entry in readers.entries:
        target = resolve_target(entry.target)
        if isinstance(target, type) and issubclass(target, Record):
            reader = target.from_map
        elif callable(target):
            reader = target
        else:
            raise ReaderConfigError(f"Reader target {entry.target!r} for #{entry.tag} is not callable")

        try:
            registry.register(entry.tag, reader, replace=replace)
        except ValueError as exc:
            raise ReaderConfigError(str(exc)) from exc
        installed.append(entry.tag)
    logger.debug("Installed %d data readers: %s", len(installed), ", ".join(installed))
    return installed

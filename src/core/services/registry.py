"""Registro de readers (y writers) por tag.

Un tag se resuelve en tiempo de decode consultando un mapa abierto
`tag -> callable`; registrar un tipo nuevo no toca el reader.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

from core.domain.records import DEFAULT_NAMESPACE, Record
from core.domain.values import Symbol, is_valid_tag
from core.interfaces.readers import TagReader, TagWriter

logger = logging.getLogger(__name__)

BUILTIN_TAGS = frozenset({"inst", "uuid"})


def normalize_tag(tag: str | Symbol, *, allow_builtin: bool = False) -> str:
    """Valida un tag y lo devuelve sin `#`.

    Reglas:
    - Debe ser un símbolo EDN que empieza por letra.
    - Debe llevar namespace (`ns/name`); sin prefijo solo se admiten `inst` y
      `uuid` cuando `allow_builtin=True`.
    """

    text = str(tag).strip()
    if text.startswith("#"):
        text = text[1:]
    if not is_valid_tag(text):
        raise ValueError(f"Invalid tag: {tag!r}")
    if "/" not in text and not (allow_builtin and text in BUILTIN_TAGS):
        raise ValueError(f"Tag {text!r} must be namespace-qualified (namespace/name)")
    return text


def read_inst(form: Any) -> datetime:
    """`#inst "1985-04-12T23:20:50.52Z"` -> datetime con zona (UTC si no trae)."""

    if not isinstance(form, str):
        raise TypeError(f"#inst expects a string, got {type(form).__name__}")
    text = form.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def read_uuid(form: Any) -> uuid.UUID:
    if not isinstance(form, str):
        raise TypeError(f"#uuid expects a string, got {type(form).__name__}")
    return uuid.UUID(form)


class TagRegistry:
    """Mapa de tag -> reader consultado durante el decode.

    También guarda writers opcionales (`tipo Python -> (tag, to_form)`) para
    tipos que no son `Record` pero deben escribirse como literal etiquetado.
    """

    def __init__(
        self,
        readers: Mapping[str, TagReader] | None = None,
        *,
        default_namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.default_namespace = default_namespace
        self._readers: dict[str, TagReader] = {}
        self._writers: dict[type, tuple[str, TagWriter]] = {}
        for tag, reader in (readers or {}).items():
            self.register(tag, reader)

    def register(self, tag: str | Symbol, reader: TagReader, *, replace: bool = False) -> TagReader:
        key = normalize_tag(tag, allow_builtin=True)
        if not callable(reader):
            raise TypeError(f"Reader for #{key} must be callable, got {type(reader).__name__}")
        if key in self._readers and not replace:
            raise ValueError(f"Tag #{key} is already registered")
        self._readers[key] = reader
        logger.debug("Registered reader for #%s -> %r", key, reader)
        return reader

    def register_record(self, cls: type[Record] | None = None, *, replace: bool = False) -> Any:
        """Registra un `Record` por su tag. Usable como decorador:

            @registry.register_record
            class SimpleRecord(Record):
                a: int
        """

        if cls is None:
            return lambda c: self.register_record(c, replace=replace)
        if not (isinstance(cls, type) and issubclass(cls, Record)):
            raise TypeError(f"register_record expects a Record subclass, got {cls!r}")
        self.register(cls.tag(self.default_namespace), cls.from_map, replace=replace)
        return cls

    def register_writer(self, py_type: type, tag: str | Symbol, to_form: TagWriter) -> None:
        """Escribe instancias de `py_type` como `#tag <to_form(value)>`."""

        key = normalize_tag(tag, allow_builtin=True)
        self._writers[py_type] = (key, to_form)
        logger.debug("Registered writer for %s -> #%s", py_type.__name__, key)

    def unregister(self, tag: str | Symbol) -> None:
        key = normalize_tag(tag, allow_builtin=True)
        if self._readers.pop(key, None) is None:
            raise KeyError(key)

    def resolve(self, tag: str) -> TagReader | None:
        return self._readers.get(tag)

    def writer_for(self, value: Any) -> tuple[str, TagWriter] | None:
        if not self._writers:
            return None
        for klass in type(value).__mro__:
            hook = self._writers.get(klass)
            if hook is not None:
                return hook
        return None

    def tags(self) -> list[str]:
        return sorted(self._readers)

    def items(self) -> Iterator[tuple[str, TagReader]]:
        for tag in self.tags():
            yield tag, self._readers[tag]

    def copy(self) -> "TagRegistry":
        clone = TagRegistry(default_namespace=self.default_namespace)
        clone._readers = dict(self._readers)
        clone._writers = dict(self._writers)
        return clone

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.lstrip("#") in self._readers

    def __len__(self) -> int:
        return len(self._readers)

    def __repr__(self) -> str:
        return f"TagRegistry(tags={self.tags()!r})"


def default_registry(*, default_namespace: str = DEFAULT_NAMESPACE) -> TagRegistry:
    """Registro con los tags estándar de EDN (`#inst`, `#uuid`)."""

    registry = TagRegistry(default_namespace=default_namespace)
    registry.register("inst", read_inst)
    registry.register("uuid", read_uuid)
    return registry


def registry_with(*records: type[Record], default_namespace: str = DEFAULT_NAMESPACE) -> TagRegistry:
    """Atajo: registro por defecto más los records indicados."""

    registry = default_registry(default_namespace=default_namespace)
    for cls in records:
        registry.register_record(cls)
    return registry

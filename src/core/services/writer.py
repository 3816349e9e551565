"""Writer EDN.

Por qué `functools.singledispatch`:
- El conjunto de tipos escribibles es abierto: una aplicación agrega el suyo con
  `@write_form.register` sin tocar este módulo.
- Los hooks por registro (`TagRegistry.register_writer`) tienen prioridad y
  cubren tipos ajenos que deben salir como literal etiquetado.

El texto es determinista: records en orden declarado, mapas en orden de
inserción y sets ordenados por su representación.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from functools import singledispatch
from typing import Any, TextIO

from core.domain.records import DEFAULT_NAMESPACE, Record
from core.domain.values import Char, EdnList, Keyword, Symbol, TaggedLiteral, Vector, is_valid_tag
from core.errors import EncodeError
from core.services.reader import DEFAULT_MAX_DEPTH
from core.services.registry import TagRegistry

_CHAR_NAMES = {
    "\n": "newline",
    "\r": "return",
    " ": "space",
    "\t": "tab",
    "\f": "formfeed",
    "\b": "backspace",
}
_RESERVED_TOKENS = frozenset({"nil", "true", "false"})
_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\b": "\\b",
    "\f": "\\f",
}


@dataclass
class WriteContext:
    """Estado de una escritura: registro, namespace por defecto y profundidad."""

    registry: TagRegistry | None = None
    default_namespace: str = DEFAULT_NAMESPACE
    max_depth: int = DEFAULT_MAX_DEPTH
    depth: int = 0

    def write(self, value: Any) -> str:
        if self.depth > self.max_depth:
            raise EncodeError(f"Maximum nesting depth of {self.max_depth} exceeded")
        self.depth += 1
        try:
            if self.registry is not None:
                hook = self.registry.writer_for(value)
                if hook is not None:
                    tag, to_form = hook
                    return f"#{tag} {self.write(to_form(value))}"
            return write_form.dispatch(type(value))(value, self)
        finally:
            self.depth -= 1


@singledispatch
def write_form(value: Any, ctx: WriteContext) -> str:
    raise EncodeError(f"Cannot encode value of type {type(value).__name__}: {value!r}")


@write_form.register(type(None))
def _(value: None, ctx: WriteContext) -> str:
    return "nil"


@write_form.register(bool)
def _(value: bool, ctx: WriteContext) -> str:
    return "true" if value else "false"


@write_form.register(int)
def _(value: int, ctx: WriteContext) -> str:
    return str(value)


@write_form.register(float)
def _(value: float, ctx: WriteContext) -> str:
    if not math.isfinite(value):
        raise EncodeError(f"Cannot encode non-finite float {value!r}")
    return repr(value)


@write_form.register(Decimal)
def _(value: Decimal, ctx: WriteContext) -> str:
    if not value.is_finite():
        raise EncodeError(f"Cannot encode non-finite decimal {value!r}")
    return f"{value}M"


@write_form.register(str)
def _(value: str, ctx: WriteContext) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in value) + '"'


@write_form.register(Char)
def _(value: Char, ctx: WriteContext) -> str:
    return "\\" + _CHAR_NAMES.get(value, str(value))


def _check_tag(tag: str) -> str:
    if not is_valid_tag(tag):
        raise EncodeError(f"Tag {tag!r} cannot be read back as an EDN tag")
    return tag


@write_form.register(Keyword)
def _(value: Keyword, ctx: WriteContext) -> str:
    text = str(value)
    try:
        readable = Keyword.parse(text) == value
    except ValueError:
        readable = False
    if not readable:
        raise EncodeError(f"Keyword {value!r} has no EDN representation")
    return text


@write_form.register(Symbol)
def _(value: Symbol, ctx: WriteContext) -> str:
    text = str(value)
    try:
        readable = text not in _RESERVED_TOKENS and Symbol.parse(text) == value
    except ValueError:
        readable = False
    if not readable:
        raise EncodeError(f"Symbol {value!r} has no EDN representation")
    return text


# Colecciones: dos frames por nivel (`WriteContext.write` + implementación), como el reader.


@write_form.register(list)
@write_form.register(Vector)
def _(value: Any, ctx: WriteContext) -> str:
    parts = []
    for item in value:
        parts.append(ctx.write(item))
    return "[" + " ".join(parts) + "]"


@write_form.register(tuple)
@write_form.register(EdnList)
def _(value: Any, ctx: WriteContext) -> str:
    parts = []
    for item in value:
        parts.append(ctx.write(item))
    return "(" + " ".join(parts) + ")"


@write_form.register(set)
@write_form.register(frozenset)
def _(value: Any, ctx: WriteContext) -> str:
    parts = []
    for item in value:
        parts.append(ctx.write(item))
    parts.sort()
    return "#{" + " ".join(parts) + "}"


@write_form.register(dict)
def _(value: dict, ctx: WriteContext) -> str:
    pairs = []
    for key, item in value.items():
        pairs.append(ctx.write(key) + " " + ctx.write(item))
    return "{" + ", ".join(pairs) + "}"


@write_form.register(datetime)
def _(value: datetime, ctx: WriteContext) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat()
    return f'#inst "{text.replace("+00:00", "Z")}"'


@write_form.register(uuid.UUID)
def _(value: uuid.UUID, ctx: WriteContext) -> str:
    return f'#uuid "{value}"'


@write_form.register(TaggedLiteral)
def _(value: TaggedLiteral, ctx: WriteContext) -> str:
    return f"#{_check_tag(value.tag)} {ctx.write(value.form)}"


@write_form.register(Record)
def _(value: Record, ctx: WriteContext) -> str:
    tag = _check_tag(type(value).tag(ctx.default_namespace))
    pairs = []
    for name, field_value in value.field_items():
        pairs.append(f":{name} " + ctx.write(field_value))
    return f"#{tag} " + "{" + ", ".join(pairs) + "}"


def encode(
    value: Any,
    *,
    registry: TagRegistry | None = None,
    default_namespace: str | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Escribe `value` como texto EDN.

    `SimpleRecord(a=42)` -> `#user/SimpleRecord {:a 42}`.
    """

    if default_namespace is None:
        default_namespace = registry.default_namespace if registry is not None else DEFAULT_NAMESPACE
    ctx = WriteContext(registry=registry, default_namespace=default_namespace, max_depth=max_depth)
    try:
        return ctx.write(value)
    except RecursionError:
        raise EncodeError("Value is nested too deeply for the interpreter stack") from None


def encode_to(value: Any, sink: TextIO, **kwargs: Any) -> None:
    """Escribe el texto EDN de `value` en un stream de texto."""

    sink.write(encode(value, **kwargs))

"""Valores EDN sin equivalente directo en Python.

Keywords, símbolos, caracteres y las dos colecciones secuenciales (vector y
lista) necesitan un tipo propio para que `encode(decode(text))` reproduzca la
misma notación. El resto (mapas, sets, números, strings) usa tipos nativos.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# Letras Unicode permitidas (como el reader de Clojure): `user/Café` es válido.
_NAME_RE = re.compile(r"^(?:[^\W\d]|[*!?$%&=<>.+\-])[\w*!?$%&=<>.+\-:#']*$")


def _split_qualified(text: str) -> tuple[str | None, str]:
    if text == "/":
        return None, "/"
    if "/" in text:
        namespace, name = text.split("/", 1)
        return namespace, name
    return None, text


def is_valid_symbol(text: str) -> bool:
    """True si `text` es un símbolo EDN (con o sin namespace)."""

    if not text:
        return False
    if text == "/":
        return True
    namespace, name = _split_qualified(text)
    parts = [name] if namespace is None else [namespace, name]
    for part in parts:
        if not part or not _NAME_RE.match(part):
            return False
        # "-1" o "+2" serían números, no símbolos.
        if part[0] in "+-." and len(part) > 1 and part[1].isdigit():
            return False
    return True


def is_valid_tag(text: str) -> bool:
    """True si `text` puede ir tras `#`: símbolo que empieza por letra."""

    return bool(text) and text[0].isalpha() and is_valid_symbol(text)


@dataclass(frozen=True)
class Symbol:
    """Símbolo EDN, p.ej. `user/SimpleRecord`."""

    name: str
    namespace: str | None = None

    @classmethod
    def parse(cls, text: str) -> "Symbol":
        if not is_valid_symbol(text):
            raise ValueError(f"Invalid symbol: {text!r}")
        namespace, name = _split_qualified(text)
        return cls(name=name, namespace=namespace)

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@dataclass(frozen=True)
class Keyword:
    """Keyword EDN, p.ej. `:a` o `:geo/lat`."""

    name: str
    namespace: str | None = None

    @classmethod
    def parse(cls, text: str) -> "Keyword":
        raw = text[1:] if text.startswith(":") else text
        if raw.startswith(":") or raw == "/" or not is_valid_symbol(raw):
            raise ValueError(f"Invalid keyword: {text!r}")
        namespace, name = _split_qualified(raw)
        return cls(name=name, namespace=namespace)

    def __str__(self) -> str:
        if self.namespace:
            return f":{self.namespace}/{self.name}"
        return f":{self.name}"


class Char(str):
    """Carácter EDN (`\\a`, `\\newline`). Se compara como un `str` de largo 1."""

    def __new__(cls, value: str) -> "Char":
        if len(value) != 1:
            raise ValueError(f"Char must be a single character, got {value!r}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Char({str.__repr__(self)})"


class _Sequential(tuple):
    """Secuencia EDN: igual a cualquier tupla o `list` con los mismos elementos."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, list):
            return list(self) == other
        return tuple.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = tuple.__hash__


class Vector(_Sequential):
    """Vector EDN `[...]`. Inmutable y hashable (puede ser clave de mapa)."""

    def __repr__(self) -> str:
        return f"Vector({list(self)!r})"


class EdnList(_Sequential):
    """Lista EDN `(...)`."""

    def __repr__(self) -> str:
        return f"EdnList({list(self)!r})"


@dataclass(frozen=True)
class TaggedLiteral:
    """Par (tag, form) sin reader: se conserva tal cual para no perder datos."""

    tag: str
    form: Any

    def __str__(self) -> str:
        return f"#{self.tag} {self.form!r}"

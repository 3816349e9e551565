"""Contratos de readers y fallbacks de tags.

Por qué Protocol:
- Un reader puede ser una función, una clase o un `Record.from_map`; basta
  con que sea invocable con el payload ya decodificado.
- Permite que el archivo `data_readers.edn` apunte a cualquier callable sin
  herencia rígida.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TagReader(Protocol):
    """Reader de un tag: recibe el form decodificado y devuelve el valor.

    Reglas de diseño:
    - Se invoca después de decodificar el payload (tags internos ya resueltos).
    - Si rechaza el payload (TypeError/ValueError), el decoder lo reporta como
      `ConstructorArityError`.
    """

    def __call__(self, form: Any) -> Any:
        ...


@runtime_checkable
class DefaultTagReader(Protocol):
    """Fallback para tags sin reader: recibe el tag y el form decodificado."""

    def __call__(self, tag: str, form: Any) -> Any:
        ...


@runtime_checkable
class TagWriter(Protocol):
    """Convierte un valor Python en el form que acompaña a su tag al escribir."""

    def __call__(self, value: Any) -> Any:
        ...

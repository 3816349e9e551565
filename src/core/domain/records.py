"""Records: valores inmutables, con nombre y campos fijos (Pydantic v2).

Por qué Pydantic:
- Validación estricta del payload al reconstruir un record desde un literal
  (campos faltantes o sobrantes fallan explícitamente).
- `model_fields` conserva el orden declarado, que es el orden de escritura.

Nota:
- La igualdad compara el conjunto de campos, no su orden; el orden solo
  importa para presentar el literal.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel
from pydantic.config import ConfigDict

from core.domain.values import Keyword

DEFAULT_NAMESPACE = "user"


class Record(BaseModel):
    """Base de los records serializables como `#namespace/Name {...}`.

    Ejemplo:

        class SimpleRecord(Record):
            a: int

        SimpleRecord(a=42)  ->  #user/SimpleRecord {:a 42}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    edn_namespace: ClassVar[str | None] = None
    edn_tag: ClassVar[str | None] = None

    @classmethod
    def tag(cls, default_namespace: str = DEFAULT_NAMESPACE) -> str:
        """Tag calificado del record (`edn_tag` tiene prioridad)."""

        if cls.edn_tag:
            return cls.edn_tag
        return f"{cls.edn_namespace or default_namespace}/{cls.__name__}"

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields)

    def field_items(self) -> list[tuple[str, Any]]:
        """Pares (campo, valor) en orden declarado, sin volcar records anidados."""

        return [(name, getattr(self, name)) for name in type(self).model_fields]

    @classmethod
    def from_map(cls, payload: Any) -> "Record":
        """Construye el record desde el mapa decodificado `{:campo valor}`.

        Lanza `TypeError` si el payload no es un mapa o tiene claves que no son
        nombres de campo, y `pydantic.ValidationError` si los campos no encajan.
        """

        if not isinstance(payload, Mapping):
            raise TypeError(f"{cls.__name__} expects a map payload, got {type(payload).__name__}")

        kwargs: dict[str, Any] = {}
        for key, value in payload.items():
            if isinstance(key, Keyword) and key.namespace is None:
                kwargs[key.name] = value
            elif isinstance(key, str):
                kwargs[key] = value
            else:
                raise TypeError(f"{cls.__name__} field keys must be simple keywords, got {key!r}")
        return cls(**kwargs)

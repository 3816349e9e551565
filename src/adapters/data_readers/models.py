"""Modelos del archivo `data_readers.edn`.

Idea:
- En vez de registrar cada tag a mano, un mapa EDN `{tag target}` declara qué
  callable reconstruye cada tag (convención `data_readers` de Clojure).
- El target es una ruta de import: `paquete.modulo:Nombre` o `paquete.modulo.Nombre`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core.services.registry import normalize_tag


class ReaderEntry(BaseModel):
    tag: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1, pattern=r"^[A-Za-z_][\w.]*(:[A-Za-z_][\w.]*)?$")

    @field_validator("tag")
    @classmethod
    def _check_tag(cls, value: str) -> str:
        return normalize_tag(value)


class DataReadersFile(BaseModel):
    entries: list[ReaderEntry] = Field(default_factory=list)

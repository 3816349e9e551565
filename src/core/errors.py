"""Errores del codec.

Por qué una jerarquía propia:
- La CLI puede capturar `EdnError` en un único punto y mostrar un mensaje limpio.
- Cada fallo del decode se distingue por tipo (tag desconocido, texto roto,
  constructor que rechaza el payload) sin parsear mensajes.
"""

from __future__ import annotations


class EdnError(Exception):
    """Base de todos los errores del codec."""


class MalformedLiteralError(EdnError):
    """El texto no es EDN válido (o el payload de un tag no parsea)."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        source: str | None = None,
    ) -> None:
        self.line = line
        self.column = column
        self.source = source
        location = ""
        if line is not None and column is not None:
            location = f" (line {line}, column {column})"
        super().__init__(f"{message}{location}")


class UnknownTagError(EdnError):
    """Tag sin reader registrado y sin fallback."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"No reader function for tag #{tag}")


class ConstructorArityError(EdnError):
    """El reader registrado rechazó el payload decodificado."""

    def __init__(self, tag: str, cause: BaseException) -> None:
        self.tag = tag
        self.cause = cause
        super().__init__(f"Reader for #{tag} rejected its payload: {cause}")


class EncodeError(EdnError):
    """Valor sin representación EDN."""


class ReaderConfigError(EdnError):
    """Archivo `data_readers.edn` inválido o con targets no importables."""

"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) para readers, fallbacks y writers de tags.
- Permite invertir dependencias: el Core depende de abstracciones.
"""

from core.interfaces.readers import DefaultTagReader, TagReader, TagWriter

__all__ = ["DefaultTagReader", "TagReader", "TagWriter"]

"""Modelos y valores del dominio.

Por qué:
- Aquí viven los tipos puros del codec: valores EDN, records y políticas.
- El dominio no conoce archivos, CLI ni importlib: solo conceptos del formato.
"""

from core.domain.policy import UnknownTagPolicy
from core.domain.records import Record
from core.domain.values import Char, EdnList, Keyword, Symbol, TaggedLiteral, Vector

__all__ = [
    "Char",
    "EdnList",
    "Keyword",
    "Record",
    "Symbol",
    "TaggedLiteral",
    "UnknownTagPolicy",
    "Vector",
]

"""Reader EDN con soporte de literales etiquetados.

Responsabilidad:
- Parsear texto EDN (colecciones, escalares, comentarios, `#_`).
- Resolver `#tag form` contra un `TagRegistry`: primero se decodifica el form
  (tags internos incluidos) y después se invoca el reader del tag externo.
- Reportar texto inválido como `MalformedLiteralError` con línea/columna.
"""

from __future__ import annotations

import inspect
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from core.domain.policy import UnknownTagPolicy
from core.domain.values import Char, EdnList, Keyword, Symbol, TaggedLiteral, Vector, is_valid_tag
from core.errors import ConstructorArityError, EdnError, MalformedLiteralError, UnknownTagError
from core.interfaces.readers import DefaultTagReader
from core.services.registry import TagRegistry, default_registry

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200

_WHITESPACE = " \t\n\r\f,"
_TOKEN_END = _WHITESPACE + '()[]{}";\\'
_CLOSERS = {"(": ")", "[": "]", "{": "}"}

_INT_RE = re.compile(r"^[+-]?(0|[1-9][0-9]*)N?$")
_FLOAT_RE = re.compile(r"^[+-]?(0|[1-9][0-9]*)(\.[0-9]*)?([eE][+-]?[0-9]+)?M?$")

_NAMED_CHARS = {
    "newline": "\n",
    "return": "\r",
    "space": " ",
    "tab": "\t",
    "formfeed": "\f",
    "backspace": "\b",
}
_STRING_ESCAPES = {
    "t": "\t",
    "r": "\r",
    "n": "\n",
    "b": "\b",
    "f": "\f",
    "\\": "\\",
    '"': '"',
}


class _Discard:
    """Marca de un form descartado con `#_`."""


_DISCARD = _Discard()

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


def _takes_no_arguments(reader: Any) -> bool:
    try:
        params = inspect.signature(reader).parameters.values()
    except (TypeError, ValueError):
        # Builtins sin firma introspectable: se asume un argumento.
        return False
    return not any(p.kind in _POSITIONAL for p in params)


def _collision(existing: Any, key: Any) -> str:
    """Sufijo del error cuando la clave repetida es otra igual en Python (`1`, `1.0`, `true`)."""

    for other in existing:
        if other == key:
            if type(other) is type(key):
                return ""
            return f" (equal to {other!r} in Python)"
    return ""


class EdnReader:
    """Parser de un documento EDN.

    Una instancia por documento: guarda la posición y la configuración de
    resolución de tags (registro, fallback, política, profundidad máxima).
    """

    def __init__(
        self,
        text: str,
        registry: TagRegistry | None = None,
        *,
        default: DefaultTagReader | None = None,
        policy: UnknownTagPolicy = UnknownTagPolicy.ERROR,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if not isinstance(text, str):
            raise TypeError(f"EDN input must be str, got {type(text).__name__}")
        self._text = text
        self._pos = 0
        self._registry = registry if registry is not None else default_registry()
        self._default = default
        self._policy = policy
        self._max_depth = max_depth

    # -- API -----------------------------------------------------------------

    def read_one(self) -> Any:
        value = self._next_top_level()
        if value is _DISCARD:
            raise self._error("No form to decode")
        if self._next_top_level() is not _DISCARD:
            raise self._error("Unexpected trailing form after the first value")
        return value

    def read_all(self) -> list[Any]:
        values: list[Any] = []
        while True:
            value = self._next_top_level()
            if value is _DISCARD:
                return values
            values.append(value)

    def _next_top_level(self) -> Any:
        try:
            return self._next_value(depth=0)
        except RecursionError:
            raise self._error("Input is nested too deeply for the interpreter stack") from None

    # -- helpers de posición --------------------------------------------------

    def _location(self, pos: int) -> tuple[int, int]:
        line = self._text.count("\n", 0, pos) + 1
        column = pos - (self._text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def _error(self, message: str, pos: int | None = None) -> MalformedLiteralError:
        at = self._pos if pos is None else pos
        line, column = self._location(at)
        return MalformedLiteralError(
            message,
            line=line,
            column=column,
            source=self._text[at : at + 20] or None,
        )

    def _peek(self) -> str:
        if self._pos < len(self._text):
            return self._text[self._pos]
        return ""

    def _skip_whitespace(self) -> None:
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            if ch in _WHITESPACE:
                self._pos += 1
            elif ch == ";":
                end = text.find("\n", self._pos)
                self._pos = len(text) if end == -1 else end + 1
            else:
                return

    def _read_token(self) -> str:
        start = self._pos
        text = self._text
        while self._pos < len(text) and text[self._pos] not in _TOKEN_END:
            self._pos += 1
        return text[start : self._pos]

    # -- forms ----------------------------------------------------------------

    def _next_value(self, depth: int) -> Any:
        """Siguiente valor real, saltando forms descartados.

        Devuelve `_DISCARD` al final del input.
        """

        while True:
            self._skip_whitespace()
            if self._pos >= len(self._text):
                return _DISCARD
            value = self._read_form(depth)
            if value is not _DISCARD:
                return value

    def _read_form(self, depth: int) -> Any:
        if depth > self._max_depth:
            raise self._error(f"Maximum nesting depth of {self._max_depth} exceeded")

        ch = self._peek()
        if ch in _CLOSERS:
            start = self._pos
            self._pos += 1
            items = self._read_items(_CLOSERS[ch], start, depth + 1)
            if ch == "(":
                return EdnList(items)
            if ch == "[":
                return Vector(items)
            return self._build_map(items, start)
        if ch in ")]}":
            raise self._error(f"Unmatched delimiter {ch!r}")
        if ch == "#":
            return self._read_dispatch(depth)
        if ch == '"':
            return self._read_string()
        if ch == "\\":
            return self._read_char()

        start = self._pos
        token = self._read_token()
        if not token:
            raise self._error(f"Unexpected character {ch!r}")
        return self._parse_atom(token, start)

    def _read_items(self, closer: str, start: int, depth: int) -> list[Any]:
        items: list[Any] = []
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if not ch:
                raise self._error(f"Unexpected end of input: missing {closer!r}", start)
            if ch == closer:
                self._pos += 1
                return items
            value = self._read_form(depth)
            if value is not _DISCARD:
                items.append(value)

    def _build_map(self, items: list[Any], start: int) -> dict[Any, Any]:
        if len(items) % 2:
            raise self._error("Map literal must contain an even number of forms", start)
        result: dict[Any, Any] = {}
        for key, value in zip(items[::2], items[1::2]):
            try:
                duplicate = key in result
            except TypeError:
                raise self._error(f"Unhashable map key {key!r}", start) from None
            if duplicate:
                raise self._error(f"Duplicate map key {key!r}{_collision(result, key)}", start)
            result[key] = value
        return result

    def _build_set(self, items: list[Any], start: int) -> frozenset[Any]:
        seen: set[Any] = set()
        for item in items:
            try:
                duplicate = item in seen
            except TypeError:
                raise self._error(f"Unhashable set member {item!r}", start) from None
            if duplicate:
                raise self._error(f"Duplicate set member {item!r}{_collision(seen, item)}", start)
            seen.add(item)
        return frozenset(seen)

    def _read_dispatch(self, depth: int) -> Any:
        start = self._pos
        self._pos += 1
        ch = self._peek()
        if ch == "{":
            self._pos += 1
            items = self._read_items("}", start, depth + 1)
            return self._build_set(items, start)
        if ch == "_":
            self._pos += 1
            # `#_ #_ a b` descarta a y b: el form descartado es el siguiente valor real.
            if self._next_value(depth + 1) is _DISCARD:
                raise self._error("Discard #_ is missing its form", start)
            return _DISCARD

        tag = self._read_token()
        if not is_valid_tag(tag):
            raise self._error(f"Invalid tag #{tag}" if tag else "Invalid dispatch character after '#'", start)

        form = self._next_value(depth + 1)
        if form is _DISCARD:
            raise self._error(f"Tag #{tag} is missing its form", start)
        return self._resolve_tag(tag, form)

    def _resolve_tag(self, tag: str, form: Any) -> Any:
        reader = self._registry.resolve(tag)
        if reader is None:
            if self._default is not None:
                return self._call_reader(tag, lambda f: self._default(tag, f), form)
            if self._policy is UnknownTagPolicy.PRESERVE:
                logger.info("No reader for #%s, keeping it as TaggedLiteral", tag)
                return TaggedLiteral(tag=tag, form=form)
            raise UnknownTagError(tag)
        return self._call_reader(tag, reader, form)

    @staticmethod
    def _call_reader(tag: str, reader: Any, form: Any) -> Any:
        """Invoca el reader con el form decodificado.

        Un reader sin parámetros (p.ej. una fábrica) se llama sin argumentos
        cuando el payload está vacío (`nil` o `{}`); con otro payload falla.
        """

        try:
            if (form is None or (isinstance(form, dict) and not form)) and _takes_no_arguments(reader):
                return reader()
            return reader(form)
        except EdnError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConstructorArityError(tag, exc) from exc

    def _read_string(self) -> str:
        start = self._pos
        self._pos += 1
        text = self._text
        chunks: list[str] = []
        while True:
            if self._pos >= len(text):
                raise self._error("Unterminated string literal", start)
            ch = text[self._pos]
            if ch == '"':
                self._pos += 1
                return "".join(chunks)
            if ch == "\\":
                escape = text[self._pos + 1 : self._pos + 2]
                if escape == "u":
                    digits = text[self._pos + 2 : self._pos + 6]
                    if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                        raise self._error("Invalid unicode escape in string")
                    chunks.append(chr(int(digits, 16)))
                    self._pos += 6
                    continue
                if escape not in _STRING_ESCAPES:
                    raise self._error(f"Invalid escape sequence \\{escape} in string")
                chunks.append(_STRING_ESCAPES[escape])
                self._pos += 2
                continue
            chunks.append(ch)
            self._pos += 1

    def _read_char(self) -> Char:
        start = self._pos
        self._pos += 1
        if self._pos >= len(self._text):
            raise self._error("Backslash at end of input", start)
        # El primer carácter se toma siempre (permite `\(`, `\;`, `\\`).
        self._pos += 1
        while self._pos < len(self._text) and self._text[self._pos] not in _TOKEN_END:
            self._pos += 1
        token = self._text[start + 1 : self._pos]
        if len(token) == 1:
            return Char(token)
        if token in _NAMED_CHARS:
            return Char(_NAMED_CHARS[token])
        if len(token) == 5 and token[0] == "u":
            try:
                return Char(chr(int(token[1:], 16)))
            except ValueError:
                pass
        raise self._error(f"Invalid character literal \\{token}", start)

    def _parse_atom(self, token: str, start: int) -> Any:
        if token == "nil":
            return None
        if token == "true":
            return True
        if token == "false":
            return False

        first = token[0]
        if first.isdigit() or (first in "+-" and len(token) > 1 and token[1].isdigit()):
            return self._parse_number(token, start)
        if first == ":":
            try:
                return Keyword.parse(token)
            except ValueError:
                raise self._error(f"Invalid keyword {token}", start) from None
        try:
            return Symbol.parse(token)
        except ValueError:
            raise self._error(f"Invalid token {token}", start) from None

    def _parse_number(self, token: str, start: int) -> Any:
        if _INT_RE.match(token):
            return int(token.rstrip("N"))
        if _FLOAT_RE.match(token):
            if token.endswith("M"):
                try:
                    return Decimal(token[:-1])
                except InvalidOperation:
                    raise self._error(f"Invalid decimal {token}", start) from None
            return float(token)
        raise self._error(f"Invalid number {token}", start)


def decode(
    text: str,
    registry: TagRegistry | None = None,
    *,
    default: DefaultTagReader | None = None,
    policy: UnknownTagPolicy = UnknownTagPolicy.ERROR,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """Decodifica exactamente un valor EDN.

    Si `registry` es None se usa `default_registry()` (`#inst`, `#uuid`).
    """

    reader = EdnReader(text, registry, default=default, policy=policy, max_depth=max_depth)
    return reader.read_one()


def decode_all(
    text: str,
    registry: TagRegistry | None = None,
    *,
    default: DefaultTagReader | None = None,
    policy: UnknownTagPolicy = UnknownTagPolicy.ERROR,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Any]:
    """Decodifica todos los valores top-level de un stream EDN."""

    reader = EdnReader(text, registry, default=default, policy=policy, max_depth=max_depth)
    return reader.read_all()

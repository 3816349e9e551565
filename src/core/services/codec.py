"""Fachada del codec de literales etiquetados.

Por qué una fachada:
- Une el registro y la configuración en un solo objeto.
- Los entry points (CLI, aplicaciones, tests) no tienen que pasar `policy`,
  `max_depth` y `default_namespace` en cada llamada.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TextIO

from core.config import CodecSettings
from core.interfaces.readers import DefaultTagReader
from core.services.reader import decode, decode_all
from core.services.registry import TagRegistry, default_registry
from core.services.writer import encode, encode_to


@dataclass
class RoundTripResult:
    """Outcome of decoding a document and encoding it back twice."""

    value: Any
    encoded: str
    reencoded: str
    values_equal: bool

    @property
    def stable(self) -> bool:
        return self.values_equal and self.encoded == self.reencoded


class TaggedCodec:
    """Encode/decode with a fixed registry and configuration."""

    def __init__(
        self,
        registry: TagRegistry | None = None,
        settings: CodecSettings | None = None,
        *,
        default: DefaultTagReader | None = None,
    ) -> None:
        self.settings = settings or CodecSettings()
        if registry is None:
            registry = default_registry(default_namespace=self.settings.default_namespace)
        self.registry = registry
        self._default = default

    def decode(self, text: str) -> Any:
        return decode(
            text,
            self.registry,
            default=self._default,
            policy=self.settings.unknown_tags,
            max_depth=self.settings.max_depth,
        )

    def decode_all(self, text: str) -> list[Any]:
        return decode_all(
            text,
            self.registry,
            default=self._default,
            policy=self.settings.unknown_tags,
            max_depth=self.settings.max_depth,
        )

    def encode(self, value: Any) -> str:
        return encode(
            value,
            registry=self.registry,
            default_namespace=self.settings.default_namespace,
            max_depth=self.settings.max_depth,
        )

    def encode_to(self, value: Any, sink: TextIO) -> None:
        encode_to(
            value,
            sink,
            registry=self.registry,
            default_namespace=self.settings.default_namespace,
            max_depth=self.settings.max_depth,
        )

    def roundtrip(self, value: Any) -> Any:
        """`decode(encode(value))` with this codec's registry."""

        return self.decode(self.encode(value))

    def check_roundtrip(self, text: str) -> RoundTripResult:
        """Decode `text`, then verify that encoding is a fixed point."""

        value = self.decode(text)
        encoded = self.encode(value)
        again = self.decode(encoded)
        return RoundTripResult(
            value=value,
            encoded=encoded,
            reencoded=self.encode(again),
            values_equal=again == value,
        )

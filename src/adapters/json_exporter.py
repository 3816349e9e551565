"""Exportación JSON de valores decodificados.

Por qué JSON:
- Interoperabilidad con herramientas que no hablan EDN.
- Permite inspeccionar un documento sin depender de los readers de Python.

Los records y literales etiquetados conservan su tag en la clave `"#tag"`.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from core.domain.records import DEFAULT_NAMESPACE, Record
from core.domain.values import Keyword, Symbol, TaggedLiteral
from core.errors import EncodeError


def to_json_data(value: Any, *, default_namespace: str = DEFAULT_NAMESPACE) -> Any:
    """Convierte un valor decodificado en datos serializables con `json`."""

    def convert(v: Any) -> Any:
        if isinstance(v, str):
            return str(v)
        if v is None or isinstance(v, (bool, int, float)):
            return v
        if isinstance(v, (Keyword, Symbol, uuid.UUID, Decimal)):
            return str(v)
        if isinstance(v, datetime):
            return v.isoformat()
        if isinstance(v, Record):
            return {
                "#tag": type(v).tag(default_namespace),
                "fields": {name: convert(field) for name, field in v.field_items()},
            }
        if isinstance(v, TaggedLiteral):
            return {"#tag": v.tag, "value": convert(v.form)}
        if isinstance(v, dict):
            return {_key(k): convert(item) for k, item in v.items()}
        if isinstance(v, (set, frozenset)):
            items = [convert(item) for item in v]
            try:
                return sorted(items)
            except TypeError:
                return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))
        if isinstance(v, (list, tuple)):
            return [convert(item) for item in v]
        raise EncodeError(f"Cannot export value of type {type(v).__name__} to JSON")

    def _key(k: Any) -> str:
        if isinstance(k, Keyword):
            return str(k)[1:]
        if isinstance(k, str):
            return str(k)
        converted = convert(k)
        return converted if isinstance(converted, str) else json.dumps(converted, sort_keys=True)

    return convert(value)


def export_value_json(
    *,
    value: Any,
    output_path: Path,
    indent: int = 2,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> Path:
    """Exporta un valor decodificado a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = to_json_data(value, default_namespace=default_namespace)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=indent or None, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path

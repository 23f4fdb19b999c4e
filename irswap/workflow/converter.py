"""Custom Temporal DataConverter for irswap frozen-dataclass types.

Handles serialization of: UtcDatetime/Address (and any other tagged
dataclass), datetime, timedelta, Enum and tuples. Dataclasses carry a
``__type__`` tag so they can be rebuilt on the other side. WAD amounts are
plain ints and round-trip through JSON unchanged.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, get_type_hints

from temporalio.converter import (
    CompositePayloadConverter,
    DataConverter,
    DefaultPayloadConverter,
    JSONPlainPayloadConverter,
    JSONTypeConverter,
)

# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _to_json(obj: Any) -> Any:
    """Recursively convert irswap objects to JSON-compatible values."""
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return {"__timedelta_us__": obj // timedelta(microseconds=1)}
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        d: dict[str, Any] = {
            "__type__": f"{type(obj).__module__}.{type(obj).__qualname__}",
        }
        for field in dataclasses.fields(obj):
            d[field.name] = _to_json(getattr(obj, field.name))
        return d
    if isinstance(obj, (tuple, list)):
        return [_to_json(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_json(v) for k, v in obj.items()}
    raise TypeError(f"Cannot serialize {type(obj).__name__} for Temporal")


class IrswapJSONEncoder(json.JSONEncoder):
    """JSON encoder using _to_json for irswap types."""

    def default(self, o: Any) -> Any:
        return _to_json(o)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

# Only classes from these modules are ever instantiated from a payload.
_ALLOWED_MODULES: frozenset[str] = frozenset({
    "irswap.core.types",
    "irswap.workflow.types",
})

_CLASS_CACHE: dict[str, type] = {}


def _resolve_class(fqn: str) -> type | None:
    """Resolve a fully qualified class name from _ALLOWED_MODULES, else None."""
    if fqn in _CLASS_CACHE:
        return _CLASS_CACHE[fqn]
    module_name, _, class_name = fqn.rpartition(".")
    if module_name not in _ALLOWED_MODULES:
        return None
    cls = getattr(importlib.import_module(module_name), class_name, None)
    if not isinstance(cls, type):
        return None
    _CLASS_CACHE[fqn] = cls
    return cls


def _from_json(hint: Any, value: Any) -> Any:
    """Recursively convert JSON values back to irswap types."""
    if value is None:
        return None

    if isinstance(value, dict) and "__type__" in value:
        cls = _resolve_class(value["__type__"])
        if cls is None or not dataclasses.is_dataclass(cls):
            raise TypeError(f"Refusing to decode type {value['__type__']!r}")
        hints = get_type_hints(cls)
        kwargs: dict[str, Any] = {
            field.name: _from_json(hints.get(field.name, Any), value[field.name])
            for field in dataclasses.fields(cls)
            if field.name in value
        }
        return cls(**kwargs)

    if isinstance(value, dict) and "__timedelta_us__" in value:
        return timedelta(microseconds=value["__timedelta_us__"])

    if hint is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)

    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)

    if isinstance(value, list):
        return tuple(_from_json(Any, x) for x in value)

    return value


class IrswapJSONTypeConverter(JSONTypeConverter):
    """Deserialize tagged JSON values back to irswap types."""

    def to_typed_value(self, hint: type, value: Any) -> Any:
        if isinstance(value, dict) and ("__type__" in value or "__timedelta_us__" in value):
            return _from_json(hint, value)
        return JSONTypeConverter.Unhandled


# ---------------------------------------------------------------------------
# Wire up
# ---------------------------------------------------------------------------


class IrswapPayloadConverter(CompositePayloadConverter):
    """Payload converter with irswap-aware JSON handling."""

    def __init__(self) -> None:
        json_converter = JSONPlainPayloadConverter(
            encoder=IrswapJSONEncoder,
            custom_type_converters=[IrswapJSONTypeConverter()],
        )
        super().__init__(
            *(
                c
                for c in DefaultPayloadConverter.default_encoding_payload_converters
                if not isinstance(c, JSONPlainPayloadConverter)
            ),
            json_converter,
        )


IRSWAP_DATA_CONVERTER = DataConverter(
    payload_converter_class=IrswapPayloadConverter,
)

"""Value codecs mapping Python values onto Data API wire fields.

A wire field is a single-member dict such as ``{"stringValue": "u1"}`` or
``{"isNull": True}``. Codecs are total over the values they are declared
for; feeding one a value of another type is a programming error and the
resulting field is whatever the wire conversion produces.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from aurora_store.errors import MalformedRecord

WireField = Dict[str, Any]
Parameter = Dict[str, Any]

NULL_FIELD: WireField = {"isNull": True}


@dataclass(frozen=True)
class Codec:
    """Encoder for one value kind plus the type hint bound parameters carry."""

    encode: Callable[[Any], WireField]
    type_hint: Optional[str] = None

    def __call__(self, value: Any) -> WireField:
        return self.encode(value)


def parameter(name: str, field: WireField, type_hint: Optional[str] = None) -> Parameter:
    """Build a named wire parameter, leaving ``typeHint`` out when unset."""

    param: Parameter = {"name": name, "value": field}
    if type_hint:
        param["typeHint"] = type_hint
    return param


def _timestamp_text(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(sep=" ")


string_value = Codec(lambda value: {"stringValue": value})
long_value = Codec(lambda value: {"longValue": int(value)})
double_value = Codec(lambda value: {"doubleValue": float(value)})
boolean_value = Codec(lambda value: {"booleanValue": bool(value)})

date_value = Codec(lambda value: {"stringValue": value.isoformat()}, "DATE")
time_value = Codec(lambda value: {"stringValue": value.isoformat()}, "TIME")
timestamp_value = Codec(lambda value: {"stringValue": _timestamp_text(value)}, "TIMESTAMP")
decimal_value = Codec(lambda value: {"stringValue": str(Decimal(value))}, "DECIMAL")
uuid_value = Codec(lambda value: {"stringValue": str(value)}, "UUID")
json_value = Codec(
    lambda value: {"stringValue": json.dumps(value, separators=(",", ":"))}, "JSON"
)


def nullable(codec: Codec) -> Codec:
    """Wrap ``codec`` so that ``None`` encodes as an explicit SQL NULL."""

    def encode(value: Any) -> WireField:
        if value is None:
            return dict(NULL_FIELD)
        return codec(value)

    return Codec(encode, codec.type_hint)


def to_field(value: Any) -> WireField:
    """Convert a plain Python value (e.g. a driver result column) into a wire field."""

    if value is None:
        return dict(NULL_FIELD)
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"longValue": value}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"blobValue": bytes(value)}
    if isinstance(value, datetime):
        return {"stringValue": _timestamp_text(value)}
    if isinstance(value, date):
        return {"stringValue": value.isoformat()}
    if isinstance(value, time):
        return {"stringValue": value.isoformat()}
    if isinstance(value, (Decimal, uuid.UUID)):
        return {"stringValue": str(value)}
    if isinstance(value, (dict, list)):
        return {"stringValue": json.dumps(value, separators=(",", ":"))}
    raise TypeError(f"cannot encode {type(value).__name__} as a wire field")


_FIELD_KINDS = ("stringValue", "longValue", "doubleValue", "booleanValue", "blobValue")


def from_field(field: WireField) -> Any:
    """Return the Python value carried by a wire field."""

    if field.get("isNull"):
        return None
    for kind in _FIELD_KINDS:
        if kind in field:
            return field[kind]
    raise MalformedRecord("unsupported wire field", {"kinds": sorted(field)})


__all__ = [
    "Codec",
    "NULL_FIELD",
    "Parameter",
    "WireField",
    "boolean_value",
    "date_value",
    "decimal_value",
    "double_value",
    "from_field",
    "json_value",
    "long_value",
    "nullable",
    "parameter",
    "string_value",
    "timestamp_value",
    "time_value",
    "to_field",
    "uuid_value",
]

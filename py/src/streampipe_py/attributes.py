from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, cast

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer

from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinaryValue:
    data: bytes


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class BinarySetValue:
    items: tuple[bytes, ...]


@dataclass(frozen=True)
class NumberValue:
    number: str


@dataclass(frozen=True)
class NumberSetValue:
    items: tuple[str, ...]


@dataclass(frozen=True)
class NullValue:
    pass


@dataclass(frozen=True)
class StringValue:
    text: str


@dataclass(frozen=True)
class StringSetValue:
    items: tuple[str, ...]


@dataclass(frozen=True)
class ListValue:
    items: tuple[AttributeValue, ...]


@dataclass(frozen=True)
class MapValue:
    entries: Mapping[str, AttributeValue]


AttributeValue = (
    BinaryValue
    | BoolValue
    | BinarySetValue
    | NumberValue
    | NumberSetValue
    | NullValue
    | StringValue
    | StringSetValue
    | ListValue
    | MapValue
)


def _reject(path: str, message: str, strict: bool) -> None:
    if strict:
        raise ValidationError(f"{path}: {message}")
    logger.warning("dropping malformed attribute value at %s: %s", path, message)


def _as_bytes(value: Any) -> bytes | None:
    if isinstance(value, Binary):
        return bytes(value.value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error:
            return None
    return None


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _parse(raw: Any, path: str, strict: bool) -> AttributeValue | None:
    if not isinstance(raw, Mapping):
        _reject(path, "attribute value must be a map", strict)
        return None

    populated = [tag for tag, payload in raw.items() if payload is not None]
    if len(populated) != 1:
        _reject(path, f"attribute value must have exactly one type, got {sorted(populated)}", strict)
        return None

    tag = populated[0]
    payload = raw[tag]

    if tag == "B":
        data = _as_bytes(payload)
        if data is None:
            _reject(path, "B must be bytes or base64 text", strict)
            return None
        return BinaryValue(data)
    if tag == "BOOL":
        if not isinstance(payload, bool):
            _reject(path, "BOOL must be a bool", strict)
            return None
        return BoolValue(payload)
    if tag == "BS":
        blobs = [_as_bytes(v) for v in payload] if isinstance(payload, list) else None
        if blobs is None or any(b is None for b in blobs):
            _reject(path, "BS must be a list of bytes or base64 text", strict)
            return None
        return BinarySetValue(tuple(b for b in blobs if b is not None))
    if tag == "N":
        if not isinstance(payload, str):
            _reject(path, "N must be a string", strict)
            return None
        return NumberValue(payload)
    if tag == "NS":
        if not _is_str_list(payload):
            _reject(path, "NS must be a list of strings", strict)
            return None
        return NumberSetValue(tuple(payload))
    if tag == "NULL":
        if payload is not True:
            _reject(path, "NULL must be true", strict)
            return None
        return NullValue()
    if tag == "S":
        if not isinstance(payload, str):
            _reject(path, "S must be a string", strict)
            return None
        return StringValue(payload)
    if tag == "SS":
        if not _is_str_list(payload):
            _reject(path, "SS must be a list of strings", strict)
            return None
        return StringSetValue(tuple(payload))
    if tag == "L":
        if not isinstance(payload, list):
            _reject(path, "L must be a list", strict)
            return None
        items = [_parse(v, f"{path}[{i}]", strict) for i, v in enumerate(payload)]
        return ListValue(tuple(v for v in items if v is not None))
    if tag == "M":
        if not isinstance(payload, Mapping):
            _reject(path, "M must be a map", strict)
            return None
        return MapValue(_parse_map(payload, path, strict))

    _reject(path, f"unsupported attribute type {tag!r}", strict)
    return None


def _parse_map(raw: Mapping[str, Any], path: str, strict: bool) -> dict[str, AttributeValue]:
    out: dict[str, AttributeValue] = {}
    for name, member in raw.items():
        parsed = _parse(member, f"{path}.{name}", strict)
        if parsed is not None:
            out[name] = parsed
    return out


def parse_attribute_value(raw: Any, *, strict: bool = True) -> AttributeValue | None:
    return _parse(raw, "$", strict)


def parse_attribute_map(raw: Any, *, strict: bool = True) -> dict[str, AttributeValue]:
    if not isinstance(raw, Mapping):
        raise ValidationError("attribute map must be a map")
    return _parse_map(raw, "$", strict)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _encode(value: AttributeValue, binary: Callable[[bytes], Any]) -> dict[str, Any]:
    match value:
        case BinaryValue(data=data):
            return {"B": binary(data)}
        case BoolValue(value=flag):
            return {"BOOL": flag}
        case BinarySetValue(items=items):
            return {"BS": [binary(b) for b in items]}
        case NumberValue(number=number):
            return {"N": number}
        case NumberSetValue(items=items):
            return {"NS": list(items)}
        case NullValue():
            return {"NULL": True}
        case StringValue(text=text):
            return {"S": text}
        case StringSetValue(items=items):
            return {"SS": list(items)}
        case ListValue(items=items):
            return {"L": [_encode(v, binary) for v in items]}
        case MapValue(entries=entries):
            return {"M": {k: _encode(entries[k], binary) for k in sorted(entries)}}
    raise ValidationError(f"not an attribute value: {type(value).__name__}")


def encode_attribute_value(value: AttributeValue) -> dict[str, Any]:
    return _encode(value, _b64)


def encode_attribute_map(values: Mapping[str, AttributeValue]) -> dict[str, dict[str, Any]]:
    return {name: _encode(values[name], _b64) for name in sorted(values)}


def to_python(value: AttributeValue) -> Any:
    return TypeDeserializer().deserialize(_encode(value, bytes))


def from_python(value: Any) -> AttributeValue:
    return cast(AttributeValue, parse_attribute_value(TypeSerializer().serialize(value)))

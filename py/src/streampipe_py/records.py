from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from .attributes import AttributeValue, encode_attribute_map, parse_attribute_map
from .errors import ValidationError

logger = logging.getLogger(__name__)

EVENT_NAMES = frozenset({"INSERT", "MODIFY", "REMOVE"})

# Images carried by each StreamViewType; Keys are always present.
VIEW_TYPE_IMAGES: dict[str, tuple[str, ...]] = {
    "KEYS_ONLY": (),
    "NEW_IMAGE": ("NewImage",),
    "OLD_IMAGE": ("OldImage",),
    "NEW_AND_OLD_IMAGES": ("NewImage", "OldImage"),
}


@dataclass(frozen=True)
class UserIdentity:
    type: str | None = None
    principal_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.principal_id is not None:
            out["principalId"] = self.principal_id
        if self.type is not None:
            out["type"] = self.type
        return out


@dataclass(frozen=True)
class StreamRecordBody:
    keys: Mapping[str, AttributeValue] = field(default_factory=dict)
    new_image: Mapping[str, AttributeValue] | None = None
    old_image: Mapping[str, AttributeValue] | None = None
    approximate_creation_date_time: int | None = None
    sequence_number: str | None = None
    size_bytes: int | None = None
    stream_view_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.approximate_creation_date_time is not None:
            out["ApproximateCreationDateTime"] = self.approximate_creation_date_time
        out["Keys"] = encode_attribute_map(self.keys)
        if self.new_image is not None:
            out["NewImage"] = encode_attribute_map(self.new_image)
        if self.old_image is not None:
            out["OldImage"] = encode_attribute_map(self.old_image)
        if self.sequence_number is not None:
            out["SequenceNumber"] = self.sequence_number
        if self.size_bytes is not None:
            out["SizeBytes"] = self.size_bytes
        if self.stream_view_type is not None:
            out["StreamViewType"] = self.stream_view_type
        return out


@dataclass(frozen=True)
class ChangeRecord:
    dynamodb: StreamRecordBody
    aws_region: str | None = None
    event_id: str | None = None
    event_name: str | None = None
    event_source: str | None = None
    event_version: str | None = None
    event_source_arn: str | None = None
    user_identity: UserIdentity | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.aws_region is not None:
            out["awsRegion"] = self.aws_region
        out["dynamodb"] = self.dynamodb.to_dict()
        for key, value in (
            ("eventID", self.event_id),
            ("eventName", self.event_name),
            ("eventSource", self.event_source),
            ("eventVersion", self.event_version),
            ("eventSourceARN", self.event_source_arn),
        ):
            if value is not None:
                out[key] = value
        if self.user_identity is not None:
            out["userIdentity"] = self.user_identity.to_dict()
        return out


@dataclass(frozen=True)
class EventEnvelope:
    records: tuple[ChangeRecord, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"Records": [r.to_dict() for r in self.records]}


def _epoch_seconds(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, bool):
        raise ValidationError("ApproximateCreationDateTime must be a timestamp")
    if isinstance(value, (int, float, Decimal)):
        return int(value)
    raise ValidationError("ApproximateCreationDateTime must be a timestamp")


def _optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _user_identity(raw: Any) -> UserIdentity | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ValidationError("userIdentity must be a map")
    return UserIdentity(
        type=raw.get("type", raw.get("Type")),
        principal_id=raw.get("principalId", raw.get("PrincipalId")),
    )


def _image(raw: Mapping[str, Any], name: str, *, strict: bool) -> dict[str, AttributeValue] | None:
    image = raw.get(name)
    if image is None:
        return None
    if not strict and not isinstance(image, Mapping):
        logger.warning("dropping malformed %s: attribute map must be a map", name)
        return None
    return parse_attribute_map(image, strict=strict)


def _stream_record_body(raw: Any, *, strict: bool) -> StreamRecordBody:
    if not isinstance(raw, Mapping):
        raise ValidationError("record is missing its dynamodb body")

    view_type = _optional_str(raw, "StreamViewType")
    if view_type is None:
        allowed: tuple[str, ...] = ("NewImage", "OldImage")
    elif view_type in VIEW_TYPE_IMAGES:
        allowed = VIEW_TYPE_IMAGES[view_type]
    elif strict:
        raise ValidationError(f"unsupported StreamViewType {view_type!r}")
    else:
        allowed = ("NewImage", "OldImage")

    images: dict[str, dict[str, AttributeValue] | None] = {"NewImage": None, "OldImage": None}
    for name in allowed:
        images[name] = _image(raw, name, strict=strict)

    size = raw.get("SizeBytes")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
        raise ValidationError("SizeBytes must be an integer")

    return StreamRecordBody(
        keys=_image(raw, "Keys", strict=strict) or {},
        new_image=images["NewImage"],
        old_image=images["OldImage"],
        approximate_creation_date_time=_epoch_seconds(raw.get("ApproximateCreationDateTime")),
        sequence_number=_optional_str(raw, "SequenceNumber"),
        size_bytes=size,
        stream_view_type=view_type,
    )


def transform_record(raw: Any, stream_arn: str | None, *, strict: bool = True) -> ChangeRecord:
    if not isinstance(raw, Mapping):
        raise ValidationError("stream record must be a map")

    event_name = _optional_str(raw, "eventName")
    if strict and event_name is not None and event_name not in EVENT_NAMES:
        raise ValidationError(f"unsupported eventName {event_name!r}")

    return ChangeRecord(
        dynamodb=_stream_record_body(raw.get("dynamodb"), strict=strict),
        aws_region=_optional_str(raw, "awsRegion"),
        event_id=_optional_str(raw, "eventID"),
        event_name=event_name,
        event_source=_optional_str(raw, "eventSource"),
        event_version=_optional_str(raw, "eventVersion"),
        event_source_arn=stream_arn,
        user_identity=_user_identity(raw.get("userIdentity")),
    )


def transform(raw: Any, stream_arn: str | None, *, strict: bool = True) -> EventEnvelope:
    return EventEnvelope(records=(transform_record(raw, stream_arn, strict=strict),))


def load_envelope(data: Any, *, strict: bool = True) -> EventEnvelope:
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError as err:
            raise ValidationError("envelope is not valid JSON") from err
    if not isinstance(data, Mapping) or not isinstance(data.get("Records"), list):
        raise ValidationError("envelope must be a map with a Records list")
    return EventEnvelope(
        records=tuple(
            transform_record(r, r.get("eventSourceARN") if isinstance(r, Mapping) else None, strict=strict)
            for r in data["Records"]
        )
    )


def dumps(envelope: EventEnvelope) -> str:
    return json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False)

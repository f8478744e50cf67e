from __future__ import annotations

import json
import re
from importlib.resources import files
from typing import TYPE_CHECKING, Any

from .attributes import (
    AttributeValue,
    BinarySetValue,
    BinaryValue,
    BoolValue,
    ListValue,
    MapValue,
    NullValue,
    NumberSetValue,
    NumberValue,
    StringSetValue,
    StringValue,
    encode_attribute_map,
    encode_attribute_value,
    from_python,
    parse_attribute_map,
    parse_attribute_value,
    to_python,
)
from .errors import (
    AwsError,
    DescribeFailedError,
    DispatchFailedError,
    IteratorFailedError,
    PollFailedError,
    SequenceOrderError,
    StreamPipeError,
    StreamUnavailableError,
    ValidationError,
)
from .records import (
    ChangeRecord,
    EventEnvelope,
    StreamRecordBody,
    UserIdentity,
    dumps,
    load_envelope,
    transform,
    transform_record,
)

if TYPE_CHECKING:
    from .clients import create_boto3_config, get_dynamodb_client, get_streams_client
    from .config import PipeConfig, split_args
    from .cursor import Batch, ShardCursor, ShardPosition, select_shard
    from .pacing import FixedDelayPacer, NoDelayPacer, Pacer
    from .pipe import Pipe, RunStats
    from .sink import SinkDispatcher


def _read_repo_version() -> str:
    try:
        data = json.loads(files(__package__).joinpath("version.json").read_text(encoding="utf-8"))
    except Exception:
        return "0.0.0"

    version = data.get("version")
    return version if isinstance(version, str) and version else "0.0.0"


def _normalize_repo_version(repo_version: str) -> str:
    match = re.match(r"^(\d+\.\d+\.\d+)-rc\.?([0-9]+)$", repo_version)
    if match:
        return f"{match.group(1)}rc{match.group(2)}"
    return repo_version


__repo_version__ = _read_repo_version()
__version__ = _normalize_repo_version(__repo_version__)


def __getattr__(name: str) -> Any:
    if name in {"create_boto3_config", "get_dynamodb_client", "get_streams_client"}:
        from . import clients

        return getattr(clients, name)
    if name in {"PipeConfig", "split_args"}:
        from . import config

        return getattr(config, name)
    if name in {"Batch", "ShardCursor", "ShardPosition", "select_shard"}:
        from . import cursor

        return getattr(cursor, name)
    if name in {"FixedDelayPacer", "NoDelayPacer", "Pacer"}:
        from . import pacing

        return getattr(pacing, name)
    if name in {"Pipe", "RunStats"}:
        from . import pipe

        return getattr(pipe, name)
    if name == "SinkDispatcher":
        from .sink import SinkDispatcher

        return SinkDispatcher
    raise AttributeError(name)


__all__ = [
    "AttributeValue",
    "AwsError",
    "Batch",
    "BinarySetValue",
    "BinaryValue",
    "BoolValue",
    "ChangeRecord",
    "create_boto3_config",
    "DescribeFailedError",
    "DispatchFailedError",
    "dumps",
    "encode_attribute_map",
    "encode_attribute_value",
    "EventEnvelope",
    "FixedDelayPacer",
    "from_python",
    "get_dynamodb_client",
    "get_streams_client",
    "IteratorFailedError",
    "ListValue",
    "load_envelope",
    "MapValue",
    "NoDelayPacer",
    "NullValue",
    "NumberSetValue",
    "NumberValue",
    "Pacer",
    "parse_attribute_map",
    "parse_attribute_value",
    "Pipe",
    "PipeConfig",
    "PollFailedError",
    "RunStats",
    "select_shard",
    "SequenceOrderError",
    "ShardCursor",
    "ShardPosition",
    "SinkDispatcher",
    "split_args",
    "StreamPipeError",
    "StreamRecordBody",
    "StreamUnavailableError",
    "StringSetValue",
    "StringValue",
    "to_python",
    "transform",
    "transform_record",
    "UserIdentity",
    "ValidationError",
    "__repo_version__",
    "__version__",
]

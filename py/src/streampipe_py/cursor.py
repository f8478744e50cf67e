from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from .errors import (
    AwsError,
    DescribeFailedError,
    IteratorFailedError,
    PollFailedError,
    StreamUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

TRIM_HORIZON = "TRIM_HORIZON"


@dataclass(frozen=True)
class ShardPosition:
    stream_arn: str
    shard_id: str
    iterator: str


@dataclass(frozen=True)
class Batch:
    records: list[dict[str, Any]]
    next_iterator: str | None


def select_shard(shards: Sequence[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Pick the shard to drain: the last one in listing order.

    Parent/child lineage is ignored, so records left in a closed parent shard
    are not read once a split has produced a newer shard.
    """
    if not shards:
        raise StreamUnavailableError("stream has no shards")
    return shards[-1]


def _map_error(err: Exception, error_type: type[AwsError], stage: str) -> AwsError:
    if isinstance(err, ClientError):
        code = str(err.response.get("Error", {}).get("Code", ""))
        message = str(err.response.get("Error", {}).get("Message", ""))
        return error_type(code=code or "UnknownError", message=message or str(err), stage=stage)
    return error_type(code=type(err).__name__, message=str(err), stage=stage)


class ShardCursor:
    def __init__(
        self,
        table_name: str,
        *,
        dynamodb_client: Any,
        streams_client: Any,
        limit: int | None = None,
    ) -> None:
        if not table_name:
            raise ValidationError("table_name is required")
        if limit is not None and limit <= 0:
            raise ValidationError("limit must be > 0")

        self._table_name = table_name
        self._dynamodb = dynamodb_client
        self._streams = streams_client
        self._limit = limit

    @property
    def table_name(self) -> str:
        return self._table_name

    def describe_stream_arn(self) -> str:
        try:
            resp = self._dynamodb.describe_table(TableName=self._table_name)
        except (ClientError, BotoCoreError) as err:
            raise _map_error(err, DescribeFailedError, "describe table") from err

        stream_arn = (resp.get("Table") or {}).get("LatestStreamArn") or ""
        if not stream_arn:
            raise StreamUnavailableError(f"table {self._table_name} has no stream enabled")
        return str(stream_arn)

    def list_shards(self, stream_arn: str) -> list[dict[str, Any]]:
        try:
            resp = self._streams.describe_stream(StreamArn=stream_arn)
        except (ClientError, BotoCoreError) as err:
            raise _map_error(err, DescribeFailedError, "describe stream") from err
        return list((resp.get("StreamDescription") or {}).get("Shards") or [])

    def acquire(self) -> ShardPosition:
        stream_arn = self.describe_stream_arn()
        shard_id = str(select_shard(self.list_shards(stream_arn))["ShardId"])

        try:
            resp = self._streams.get_shard_iterator(
                StreamArn=stream_arn,
                ShardId=shard_id,
                ShardIteratorType=TRIM_HORIZON,
            )
        except (ClientError, BotoCoreError) as err:
            raise _map_error(err, IteratorFailedError, "get shard iterator") from err

        iterator = resp.get("ShardIterator") or ""
        if not iterator:
            raise IteratorFailedError(
                code="MissingShardIterator",
                message=f"no iterator returned for shard {shard_id}",
            )

        logger.info("reading stream %s shard %s from %s", stream_arn, shard_id, TRIM_HORIZON)
        return ShardPosition(stream_arn=stream_arn, shard_id=shard_id, iterator=str(iterator))

    def poll(self, iterator: str) -> Batch:
        req: dict[str, Any] = {"ShardIterator": iterator}
        if self._limit is not None:
            req["Limit"] = self._limit

        try:
            resp = self._streams.get_records(**req)
        except (ClientError, BotoCoreError) as err:
            raise _map_error(err, PollFailedError, "get records") from err

        return Batch(records=list(resp.get("Records") or []), next_iterator=resp.get("NextShardIterator") or None)

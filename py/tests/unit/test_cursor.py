from __future__ import annotations

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from streampipe_py import (
    DescribeFailedError,
    IteratorFailedError,
    PollFailedError,
    ShardCursor,
    StreamUnavailableError,
    ValidationError,
    select_shard,
)
from streampipe_py.mocks import ANY, FakeDynamoDBClient, FakeStreamsClient

STREAM_ARN = "arn:aws:dynamodb:us-east-1:111111111111:table/notes/stream/label"


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


def _cursor(ddb: FakeDynamoDBClient, streams: FakeStreamsClient, **kwargs: object) -> ShardCursor:
    return ShardCursor("notes", dynamodb_client=ddb, streams_client=streams, **kwargs)


def test_select_shard_picks_last_in_listing_order() -> None:
    shards = [{"ShardId": "shard-1"}, {"ShardId": "shard-2"}, {"ShardId": "shard-3"}]
    assert select_shard(shards)["ShardId"] == "shard-3"

    with pytest.raises(StreamUnavailableError):
        select_shard([])


def test_acquire_requests_trim_horizon_on_last_shard() -> None:
    ddb = FakeDynamoDBClient()
    streams = FakeStreamsClient()
    ddb.expect("describe_table", {"TableName": "notes"}, response={"Table": {"LatestStreamArn": STREAM_ARN}})
    streams.expect(
        "describe_stream",
        {"StreamArn": STREAM_ARN},
        response={"StreamDescription": {"Shards": [{"ShardId": "old"}, {"ShardId": "new", "ParentShardId": "old"}]}},
    )
    streams.expect(
        "get_shard_iterator",
        {"StreamArn": STREAM_ARN, "ShardId": "new", "ShardIteratorType": "TRIM_HORIZON"},
        response={"ShardIterator": "itr-0"},
    )

    position = _cursor(ddb, streams).acquire()

    assert position.stream_arn == STREAM_ARN
    assert position.shard_id == "new"
    assert position.iterator == "itr-0"
    ddb.assert_no_pending()
    streams.assert_no_pending()


@pytest.mark.parametrize("table", [{"Table": {}}, {"Table": {"LatestStreamArn": ""}}, {}])
def test_acquire_without_stream_raises_stream_unavailable(table: dict) -> None:
    ddb = FakeDynamoDBClient()
    ddb.expect("describe_table", ANY, response=table)

    with pytest.raises(StreamUnavailableError, match="no stream"):
        _cursor(ddb, FakeStreamsClient()).acquire()


def test_acquire_maps_describe_table_errors() -> None:
    ddb = FakeDynamoDBClient()
    ddb.expect("describe_table", ANY, error=_client_error("ResourceNotFoundException", "DescribeTable"))

    with pytest.raises(DescribeFailedError) as excinfo:
        _cursor(ddb, FakeStreamsClient()).acquire()

    assert excinfo.value.code == "ResourceNotFoundException"
    assert "failed describe table" in str(excinfo.value)


def test_acquire_maps_describe_stream_and_iterator_errors() -> None:
    ddb = FakeDynamoDBClient()
    streams = FakeStreamsClient()
    ddb.expect("describe_table", ANY, response={"Table": {"LatestStreamArn": STREAM_ARN}})
    streams.expect("describe_stream", ANY, error=EndpointConnectionError(endpoint_url="http://localhost:8000"))

    with pytest.raises(DescribeFailedError, match="failed describe stream"):
        _cursor(ddb, streams).acquire()

    ddb.expect("describe_table", ANY, response={"Table": {"LatestStreamArn": STREAM_ARN}})
    streams.expect("describe_stream", ANY, response={"StreamDescription": {"Shards": [{"ShardId": "s"}]}})
    streams.expect("get_shard_iterator", ANY, error=_client_error("TrimmedDataAccessException", "GetShardIterator"))

    with pytest.raises(IteratorFailedError) as excinfo:
        _cursor(ddb, streams).acquire()
    assert excinfo.value.code == "TrimmedDataAccessException"


def test_acquire_with_no_shards_raises_stream_unavailable() -> None:
    ddb = FakeDynamoDBClient()
    streams = FakeStreamsClient()
    ddb.expect("describe_table", ANY, response={"Table": {"LatestStreamArn": STREAM_ARN}})
    streams.expect("describe_stream", ANY, response={"StreamDescription": {"Shards": []}})

    with pytest.raises(StreamUnavailableError):
        _cursor(ddb, streams).acquire()


def test_poll_returns_records_and_successor_token() -> None:
    streams = FakeStreamsClient()
    streams.expect(
        "get_records",
        {"ShardIterator": "itr-0"},
        response={"Records": [{"eventID": "1"}], "NextShardIterator": "itr-1"},
    )
    streams.expect("get_records", {"ShardIterator": "itr-1"}, response={"Records": []})

    cursor = _cursor(FakeDynamoDBClient(), streams)
    first = cursor.poll("itr-0")
    assert first.records == [{"eventID": "1"}]
    assert first.next_iterator == "itr-1"

    last = cursor.poll("itr-1")
    assert last.records == []
    assert last.next_iterator is None
    streams.assert_no_pending()


def test_poll_passes_limit_and_maps_errors() -> None:
    streams = FakeStreamsClient()
    streams.expect(
        "get_records",
        {"ShardIterator": "itr-0", "Limit": 10},
        error=_client_error("ExpiredIteratorException", "GetRecords"),
    )

    with pytest.raises(PollFailedError) as excinfo:
        _cursor(FakeDynamoDBClient(), streams, limit=10).poll("itr-0")

    assert excinfo.value.code == "ExpiredIteratorException"
    assert "failed get records" in str(excinfo.value)


def test_cursor_validates_arguments() -> None:
    with pytest.raises(ValidationError):
        ShardCursor("", dynamodb_client=object(), streams_client=object())
    with pytest.raises(ValidationError):
        ShardCursor("notes", dynamodb_client=object(), streams_client=object(), limit=0)

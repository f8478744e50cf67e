from __future__ import annotations

import logging
from dataclasses import dataclass

from .cursor import ShardCursor
from .errors import SequenceOrderError
from .pacing import FixedDelayPacer, Pacer
from .records import dumps, transform
from .sink import SinkDispatcher

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    stream_arn: str = ""
    shard_id: str = ""
    polls: int = 0
    records: int = 0


def _sequence_key(sequence_number: str) -> tuple[int, str]:
    # Sequence numbers are unpadded decimal strings, so length orders before text.
    return (len(sequence_number), sequence_number)


class SequenceGuard:
    def __init__(self) -> None:
        self.last: str | None = None

    def check(self, sequence_number: str | None) -> None:
        if sequence_number is None:
            return
        if self.last is not None and _sequence_key(sequence_number) <= _sequence_key(self.last):
            raise SequenceOrderError(previous=self.last, current=sequence_number)
        self.last = sequence_number


class Pipe:
    def __init__(
        self,
        cursor: ShardCursor,
        dispatcher: SinkDispatcher,
        *,
        pacer: Pacer | None = None,
        strict: bool = True,
    ) -> None:
        self._cursor = cursor
        self._dispatcher = dispatcher
        self._pacer: Pacer = pacer or FixedDelayPacer()
        self._strict = strict

    def run(self) -> RunStats:
        logger.info("run dynamodb streams piper for table %s", self._cursor.table_name)
        position = self._cursor.acquire()
        stats = RunStats(stream_arn=position.stream_arn, shard_id=position.shard_id)
        guard = SequenceGuard()

        iterator = position.iterator
        while True:
            logger.info("iterator %s", iterator)
            batch = self._cursor.poll(iterator)
            stats.polls += 1
            logger.info("num records: %d", len(batch.records))

            for raw in batch.records:
                envelope = transform(raw, position.stream_arn, strict=self._strict)
                record = envelope.records[0]
                guard.check(record.dynamodb.sequence_number)

                payload = dumps(envelope)
                logger.debug("record: \n%s", payload)
                logger.info("dispatching %s event %s", record.event_name, record.event_id)
                self._dispatcher.dispatch(payload)
                stats.records += 1
                self._pacer.pause()

            if not batch.next_iterator:
                break
            iterator = batch.next_iterator
            self._pacer.pause()

        logger.info("shard %s closed after %d polls, %d records", stats.shard_id, stats.polls, stats.records)
        return stats

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from botocore.exceptions import BotoCoreError

from .clients import get_dynamodb_client, get_streams_client
from .config import PipeConfig, split_args
from .cursor import ShardCursor
from .errors import DispatchFailedError, StreamPipeError
from .pacing import DEFAULT_INTERVAL_SECONDS, FixedDelayPacer
from .pipe import Pipe
from .sink import SinkDispatcher

logger = logging.getLogger("streampipe_py")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynamodb-stream-pipe",
        description="Pipe each DynamoDB stream record, as a JSON event, to a command's stdin.",
    )
    parser.add_argument("--endpoint", default="", help="dynamodb endpoint (optional)")
    parser.add_argument("--table", required=True, help="dynamodb table name")
    parser.add_argument("--command", required=True, help="execute command, ex --command=wc")
    parser.add_argument("--args", default="", help="comma separated command args (optional), ex --args=-l")
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL_SECONDS,
        help="seconds to wait after each record and between polls",
    )
    parser.add_argument("--region", default=None, help="AWS region override (optional)")
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="drop malformed attribute values instead of failing",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def build_pipe(config: PipeConfig) -> Pipe:
    cursor = ShardCursor(
        config.table,
        dynamodb_client=get_dynamodb_client(endpoint_url=config.endpoint_url, region_name=config.region_name),
        streams_client=get_streams_client(endpoint_url=config.endpoint_url, region_name=config.region_name),
    )
    return Pipe(
        cursor,
        SinkDispatcher(config.command, config.args),
        pacer=FixedDelayPacer(config.poll_interval_seconds),
        strict=config.strict,
    )


def main(argv: Sequence[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    logging.basicConfig(level=ns.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    try:
        config = PipeConfig(
            table=ns.table,
            command=ns.command,
            args=split_args(ns.args),
            endpoint_url=ns.endpoint or None,
            region_name=ns.region,
            poll_interval_seconds=ns.interval,
            strict=not ns.lenient,
        )
        build_pipe(config).run()
    except (StreamPipeError, BotoCoreError) as err:
        logger.error("%s", err)
        if isinstance(err, DispatchFailedError) and err.output:
            logger.error("cmd output: %s", err.output.decode("utf-8", errors="replace"))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

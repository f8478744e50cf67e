from __future__ import annotations


class StreamPipeError(Exception):
    pass


class ValidationError(StreamPipeError):
    pass


class StreamUnavailableError(StreamPipeError):
    pass


class SequenceOrderError(StreamPipeError):
    def __init__(self, *, previous: str, current: str) -> None:
        super().__init__(f"sequence number {current} does not follow {previous}")
        self.previous = previous
        self.current = current


class AwsError(StreamPipeError):
    stage = "aws"

    def __init__(self, *, code: str, message: str, stage: str | None = None) -> None:
        if stage is not None:
            self.stage = stage
        super().__init__(f"failed {self.stage}: {code}: {message}")
        self.code = code
        self.message = message


class DescribeFailedError(AwsError):
    stage = "describe"


class IteratorFailedError(AwsError):
    stage = "get shard iterator"


class PollFailedError(AwsError):
    stage = "get records"


class DispatchFailedError(StreamPipeError):
    def __init__(self, *, command: str, returncode: int | None, output: bytes = b"", reason: str = "") -> None:
        detail = reason or f"exit status {returncode}"
        super().__init__(f"failed cmd {command}: {detail}")
        self.command = command
        self.returncode = returncode
        self.output = output

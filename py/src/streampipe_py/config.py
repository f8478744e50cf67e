from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ValidationError
from .pacing import DEFAULT_INTERVAL_SECONDS


def split_args(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(raw.split(","))


@dataclass(frozen=True)
class PipeConfig:
    table: str
    command: str
    args: tuple[str, ...] = ()
    endpoint_url: str | None = None
    region_name: str | None = None
    poll_interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    strict: bool = True

    def __post_init__(self) -> None:
        if not self.table:
            raise ValidationError("table is required")
        if not self.command:
            raise ValidationError("command is required")
        if self.poll_interval_seconds < 0:
            raise ValidationError("poll interval must be >= 0")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PipeConfig:
        env = os.environ if environ is None else environ

        interval_raw = (env.get("STREAMPIPE_INTERVAL") or "").strip()
        try:
            interval = float(interval_raw) if interval_raw else DEFAULT_INTERVAL_SECONDS
        except ValueError as err:
            raise ValidationError(f"STREAMPIPE_INTERVAL is not a number: {interval_raw!r}") from err

        return cls(
            table=(env.get("STREAMPIPE_TABLE") or "").strip(),
            command=(env.get("STREAMPIPE_COMMAND") or "").strip(),
            args=split_args(env.get("STREAMPIPE_ARGS")),
            endpoint_url=(env.get("STREAMPIPE_ENDPOINT") or "").strip() or None,
            region_name=(env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or "").strip() or None,
            poll_interval_seconds=interval,
        )

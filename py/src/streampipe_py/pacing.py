from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from .errors import ValidationError

DEFAULT_INTERVAL_SECONDS = 5.0


class Pacer(Protocol):
    def pause(self) -> None: ...


class FixedDelayPacer:
    def __init__(
        self,
        seconds: float = DEFAULT_INTERVAL_SECONDS,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if seconds < 0:
            raise ValidationError("seconds must be >= 0")
        self.seconds = seconds
        self._sleep = sleep

    def pause(self) -> None:
        if self.seconds > 0:
            self._sleep(self.seconds)


class NoDelayPacer:
    def pause(self) -> None:
        return None

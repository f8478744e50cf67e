from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from .errors import DispatchFailedError, ValidationError

logger = logging.getLogger(__name__)


class SinkDispatcher:
    def __init__(self, command: str, args: Sequence[str] = (), *, timeout: float | None = None) -> None:
        if not command:
            raise ValidationError("command is required")
        self.command = command
        self.args = tuple(args)
        self._timeout = timeout

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    def dispatch(self, payload: str | bytes) -> bytes:
        try:
            data = payload.encode("utf-8") if isinstance(payload, str) else payload
            # stdin is closed once the payload is written, so the child sees EOF.
            proc = subprocess.run(
                self.argv,
                input=data,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as err:
            raise DispatchFailedError(
                command=self.command,
                returncode=None,
                output=err.output or b"",
                reason=f"timed out after {self._timeout}s",
            ) from err
        except UnicodeEncodeError as err:
            raise DispatchFailedError(command=self.command, returncode=None, reason=f"payload is not UTF-8: {err}") from err
        except OSError as err:
            raise DispatchFailedError(command=self.command, returncode=None, reason=str(err)) from err

        if proc.returncode != 0:
            raise DispatchFailedError(command=self.command, returncode=proc.returncode, output=proc.stdout)

        logger.info("cmd results: %s", proc.stdout.decode("utf-8", errors="replace"))
        return proc.stdout

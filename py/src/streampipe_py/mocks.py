from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


class _Any:
    def __eq__(self, other: object) -> bool:
        return True

    def __repr__(self) -> str:
        return "ANY"


ANY: Any = _Any()

Expected = Mapping[str, Any] | Callable[[Mapping[str, Any]], None] | None


@dataclass
class _Expectation:
    operation: str
    expected: Expected
    response: Mapping[str, Any]
    error: BaseException | None = None


def _matches(expected: Any, actual: Any) -> bool:
    if expected is ANY:
        return True
    if isinstance(expected, Mapping) and isinstance(actual, Mapping):
        if set(expected) != set(actual):
            return False
        return all(_matches(expected[k], actual[k]) for k in expected)
    return bool(expected == actual)


@dataclass
class _FakeClient:
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    _pending: list[_Expectation] = field(default_factory=list)

    def expect(
        self,
        operation: str,
        expected: Expected = None,
        *,
        response: Mapping[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> None:
        self._pending.append(
            _Expectation(operation=operation, expected=expected, response=response or {}, error=error)
        )

    def assert_no_pending(self) -> None:
        if self._pending:
            ops = [e.operation for e in self._pending]
            raise AssertionError(f"pending expectations not met: {ops}")

    def _handle(self, operation: str, req: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((operation, req))
        if not self._pending:
            raise AssertionError(f"unexpected call: {operation}")

        exp = self._pending.pop(0)
        if exp.operation != operation:
            raise AssertionError(f"expected call {exp.operation}, got {operation}")
        if callable(exp.expected):
            exp.expected(req)
        elif exp.expected is not None and not _matches(exp.expected, req):
            raise AssertionError(f"{operation} request mismatch: expected {exp.expected!r}, got {req!r}")

        if exp.error is not None:
            raise exp.error
        return dict(exp.response)


class FakeDynamoDBClient(_FakeClient):
    def describe_table(self, **req: Any) -> dict[str, Any]:
        return self._handle("describe_table", req)


class FakeStreamsClient(_FakeClient):
    def describe_stream(self, **req: Any) -> dict[str, Any]:
        return self._handle("describe_stream", req)

    def get_shard_iterator(self, **req: Any) -> dict[str, Any]:
        return self._handle("get_shard_iterator", req)

    def get_records(self, **req: Any) -> dict[str, Any]:
        return self._handle("get_records", req)

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

SUCCESS = 0
NOT_FOUND = -1


@dataclass(frozen=True)
class ProtocolResult:
    """Raw outcome of one protocol action.

    `status` is a legacy field that newer backends omit; absent means success.
    """
    value: Any = None
    status: int | None = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ProtocolResult":
        if isinstance(raw, ProtocolResult):
            return raw
        if isinstance(raw, Mapping):
            return cls(value=raw.get("value"), status=raw.get("status"))
        raise TypeError(f"Cannot interpret protocol result: {raw!r}")


@dataclass(frozen=True)
class CommandResult:
    """Value delivered to a command's caller."""
    status: int
    value: Any

    @classmethod
    def not_found(cls) -> "CommandResult":
        return cls(status=NOT_FOUND, value=None)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "value": self.value}


def _identity(value: Any) -> Any:
    return value


def _normalize_status(status: Any) -> int:
    if isinstance(status, bool) or not isinstance(status, (int, float)):
        return SUCCESS
    if isinstance(status, float) and not math.isfinite(status):
        return SUCCESS
    return int(status)


def normalize(raw: ProtocolResult | Mapping[str, Any], value_transform: Callable[[Any], Any] = _identity) -> CommandResult:
    """Map a protocol result onto the command result contract.

    A missing or non-numeric status becomes 0. The value is passed through
    `value_transform`, which lets an action that reports a predicate in
    inverted or differently typed form produce the same result shape.
    """
    result = ProtocolResult.from_raw(raw)
    return CommandResult(status=_normalize_status(result.status), value=value_transform(result.value))


def invert_hidden(hidden: Any) -> bool:
    """Turn a "hidden" property value into a "displayed" flag."""
    return hidden is False

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(slots=True)
class OpResult(Generic[T]):
    """Outcome of one call across the Discord or database boundary."""

    ok: bool
    value: T | None = None
    reason: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "OpResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "OpResult[T]":
        return cls(ok=False, reason=reason)

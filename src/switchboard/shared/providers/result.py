"""Uniform success/failure result returned by every pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from switchboard.shared.providers.types import utcnow

T = TypeVar("T")


@dataclass(frozen=True)
class ExecutionResult(Generic[T]):
    """Either a value or one-or-more error messages, never both.

    Build instances through :meth:`success` and :meth:`failure`.
    """

    value: T | None = None
    errors: tuple[str, ...] = ()
    provider_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.errors and self.value is not None:
            raise ValueError("ExecutionResult cannot carry both a value and errors")

    @classmethod
    def success(
        cls, value: T, *, provider_name: str | None = None, **metadata: Any
    ) -> ExecutionResult[T]:
        return cls(value=value, provider_name=provider_name, metadata=metadata)

    @classmethod
    def failure(
        cls, *errors: str, provider_name: str | None = None, **metadata: Any
    ) -> ExecutionResult[T]:
        if not errors:
            raise ValueError("A failure result needs at least one error message")
        return cls(errors=tuple(errors), provider_name=provider_name, metadata=metadata)

    @property
    def is_success(self) -> bool:
        return not self.errors

    @property
    def is_failure(self) -> bool:
        return bool(self.errors)

    @property
    def error(self) -> str | None:
        """All error messages joined, or ``None`` on success."""
        return "; ".join(self.errors) if self.errors else None

    def unwrap(self) -> T:
        if self.errors:
            raise ValueError(f"Cannot unwrap a failed result: {self.error}")
        return self.value  # type: ignore[return-value]

"""Domain-specific exception hierarchy.

All exceptions inherit from ``SwitchboardError`` so callers can catch the
entire family in one clause while still discriminating on subclass.
``asyncio.CancelledError`` is never wrapped and unwinds through every layer.
"""

from __future__ import annotations

from typing import Iterable


class SwitchboardError(Exception):
    """Base class for all provider-engine errors."""

    def __init__(self, message: str, *, code: str = "SWITCHBOARD_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Selection ────────────────────────────────────────────────
class NoSuitableProviderError(SwitchboardError):
    """No registered provider is available and satisfies the request."""

    def __init__(self, required: Iterable[str] = (), *, reason: str | None = None) -> None:
        self.required = tuple(sorted(required))
        if reason is None:
            reason = "No suitable provider available"
            if self.required:
                reason += f" for capabilities: {', '.join(self.required)}"
        super().__init__(reason, code="NO_SUITABLE_PROVIDER")


class ProviderNotFoundError(SwitchboardError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Provider {name!r} not found", code="PROVIDER_NOT_FOUND")


# ── Execution ────────────────────────────────────────────────
class TransientExecutionError(SwitchboardError):
    """An adapter call failed during a single attempt."""

    def __init__(self, provider: str, cause: BaseException) -> None:
        self.provider = provider
        self.cause = cause
        super().__init__(
            f"{type(cause).__name__}: {cause}",
            code="TRANSIENT_EXECUTION_ERROR",
        )


# ── Configuration ────────────────────────────────────────────
class ConfigurationError(SwitchboardError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")

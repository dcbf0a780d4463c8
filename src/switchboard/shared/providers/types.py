"""Core types for provider selection and resilient execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from switchboard.domain.enums import Capability
from switchboard.domain.exceptions import ConfigurationError


def _to_decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProviderCapabilities:
    """Static facts about a provider.

    Attributes:
        features:                Supported optional capabilities.
        cost_per_request:        Flat cost charged per call.
        cost_per_unit:           Cost per unit of input (token or byte).
        average_response_time:   Typical latency in seconds.
        max_input_size:          Largest accepted payload in bytes (0 = unlimited).
        max_requests_per_minute: Vendor rate limit (0 = unlimited).
        max_requests_per_day:    Vendor daily limit (0 = unlimited).
        requires_internet:       Whether the provider needs network access.
        reliability_score:       Self-reported reliability in [0, 1].
    """

    features: frozenset[Capability] = frozenset()
    cost_per_request: Decimal = Decimal("0")
    cost_per_unit: Decimal = Decimal("0")
    average_response_time: float = 0.0
    max_input_size: int = 0
    max_requests_per_minute: int = 0
    max_requests_per_day: int = 0
    requires_internet: bool = True
    reliability_score: float = 0.8

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", frozenset(self.features))
        object.__setattr__(self, "cost_per_request", _to_decimal(self.cost_per_request))
        object.__setattr__(self, "cost_per_unit", _to_decimal(self.cost_per_unit))

        for name in (
            "cost_per_request",
            "cost_per_unit",
            "average_response_time",
            "max_input_size",
            "max_requests_per_minute",
            "max_requests_per_day",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative")
        if not 0.0 <= self.reliability_score <= 1.0:
            raise ConfigurationError("reliability_score must be between 0.0 and 1.0")

    def supports(self, capability: Capability) -> bool:
        return capability in self.features

    def supports_all(self, capabilities: Iterable[Capability]) -> bool:
        return self.features.issuperset(capabilities)

    def accepts_size(self, size_bytes: int) -> bool:
        return self.max_input_size <= 0 or size_bytes <= self.max_input_size


@dataclass(frozen=True)
class RequestDescriptor:
    """The caller's logical ask, as seen by the selector.

    ``required`` capabilities are hard constraints; ``preferred`` ones only
    influence ranking under the capability strategy.
    """

    required: frozenset[Capability] = frozenset()
    preferred: frozenset[Capability] = frozenset()
    payload_size: int = 0
    estimated_tokens: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "required", frozenset(self.required))
        object.__setattr__(self, "preferred", frozenset(self.preferred))
        if self.payload_size < 0:
            raise ValueError("payload_size must be non-negative")
        if self.estimated_tokens < 0:
            raise ValueError("estimated_tokens must be non-negative")


@dataclass(frozen=True)
class CostRecord:
    provider_name: str
    amount: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class HealthStatus:
    """Latest liveness/latency check result for a single provider."""

    provider_name: str
    is_healthy: bool
    status: str = "healthy"
    response_time: float = 0.0
    last_checked: datetime = field(default_factory=utcnow)
    error_message: str | None = None

    @classmethod
    def not_found(cls, provider_name: str) -> HealthStatus:
        return cls(
            provider_name=provider_name,
            is_healthy=False,
            status="Provider not found",
            error_message=f"Provider {provider_name!r} not found",
        )

    @classmethod
    def check_failed(cls, provider_name: str, error: BaseException) -> HealthStatus:
        return cls(
            provider_name=provider_name,
            is_healthy=False,
            status="Health check failed",
            error_message=str(error),
        )


@dataclass(frozen=True)
class PipelineConfiguration:
    """Per-pipeline execution settings, read-only for the pipeline's lifetime.

    An empty ``provider`` lets the selector decide.
    """

    provider: str | None = None
    model: str | None = None
    fallback_provider: str | None = None
    fallback_model: str | None = None
    max_retries: int = 3
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be > 0 when set")

    @property
    def has_fallback(self) -> bool:
        return bool(self.fallback_provider and self.fallback_provider.strip())


@dataclass(frozen=True)
class BalancedWeights:
    """Weights for the balanced composite score."""

    speed: float = 0.4
    cost: float = 0.3
    reliability: float = 0.3

    def __post_init__(self) -> None:
        if min(self.speed, self.cost, self.reliability) < 0:
            raise ConfigurationError("balanced weights must be non-negative")
        if abs(self.speed + self.cost + self.reliability - 1.0) > 1e-9:
            raise ConfigurationError("balanced weights must sum to 1.0")

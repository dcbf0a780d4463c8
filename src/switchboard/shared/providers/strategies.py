"""Selection policies — one ranking implementation per strategy.

Each policy orders an already-filtered candidate list best-first.  All
sorts are stable, so ties keep registration order.  Policies register
themselves against a ``SelectionStrategy`` member; adding a strategy means
adding one class here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Sequence, TypeVar

from switchboard.domain.enums import SelectionStrategy
from switchboard.domain.exceptions import (
    ConfigurationError,
    NoSuitableProviderError,
    ProviderNotFoundError,
)
from switchboard.shared.providers.types import BalancedWeights, RequestDescriptor

if TYPE_CHECKING:
    from switchboard.ports.outbound import ProviderAdapter
    from switchboard.shared.providers.registry import ProviderRegistry


@dataclass(frozen=True)
class PolicyOptions:
    """Inputs a policy may need at construction time."""

    weights: BalancedWeights = field(default_factory=BalancedWeights)
    configured_provider: str | None = None
    registry: ProviderRegistry | None = None


class SelectionPolicy(ABC):
    strategy: SelectionStrategy

    @classmethod
    def create(cls, options: PolicyOptions) -> SelectionPolicy:
        return cls()

    @abstractmethod
    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        """Return candidates ordered best-first."""


_POLICIES: dict[SelectionStrategy, type[SelectionPolicy]] = {}

P = TypeVar("P", bound=type[SelectionPolicy])


def register_policy(strategy: SelectionStrategy) -> Callable[[P], P]:
    def decorator(cls: P) -> P:
        cls.strategy = strategy
        _POLICIES[strategy] = cls
        return cls

    return decorator


def build_policy(
    strategy: SelectionStrategy, options: PolicyOptions | None = None
) -> SelectionPolicy:
    try:
        policy_cls = _POLICIES[strategy]
    except KeyError:
        raise ConfigurationError(f"No selection policy registered for {strategy!r}") from None
    return policy_cls.create(options or PolicyOptions())


# ── Strategy implementations ─────────────────────────────────
@register_policy(SelectionStrategy.COST_OPTIMIZED)
class CostOptimizedPolicy(SelectionPolicy):
    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        return sorted(candidates, key=lambda p: p.capabilities.cost_per_request)


@register_policy(SelectionStrategy.PERFORMANCE_OPTIMIZED)
class PerformanceOptimizedPolicy(SelectionPolicy):
    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        return sorted(candidates, key=lambda p: p.capabilities.average_response_time)


@register_policy(SelectionStrategy.RELIABILITY_OPTIMIZED)
class ReliabilityOptimizedPolicy(SelectionPolicy):
    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        return sorted(
            candidates, key=lambda p: p.capabilities.reliability_score, reverse=True
        )


@register_policy(SelectionStrategy.CAPABILITY_OPTIMIZED)
class CapabilityOptimizedPolicy(SelectionPolicy):
    """Most preferred-capability matches first; reliability breaks ties."""

    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        def score(p: ProviderAdapter) -> tuple[int, float]:
            matched = len(request.preferred & p.capabilities.features)
            return matched, p.capabilities.reliability_score

        return sorted(candidates, key=score, reverse=True)


@register_policy(SelectionStrategy.BALANCED)
class BalancedPolicy(SelectionPolicy):
    """Weighted composite of normalised speed, cost, and reliability.

    Every metric is min-max normalised across the candidate set before
    weighting: lower response time and cost score higher, higher
    reliability scores higher.  An all-equal metric scores 1.0 for everyone.
    """

    def __init__(self, weights: BalancedWeights | None = None) -> None:
        self._weights = weights or BalancedWeights()

    @classmethod
    def create(cls, options: PolicyOptions) -> SelectionPolicy:
        return cls(options.weights)

    @property
    def weights(self) -> BalancedWeights:
        return self._weights

    def scores(self, candidates: Sequence[ProviderAdapter]) -> list[float]:
        speed = _inverse_normalise([p.capabilities.average_response_time for p in candidates])
        cost = _inverse_normalise([float(p.capabilities.cost_per_request) for p in candidates])
        reliability = _normalise([p.capabilities.reliability_score for p in candidates])
        w = self._weights
        return [
            w.speed * s + w.cost * c + w.reliability * r
            for s, c, r in zip(speed, cost, reliability)
        ]

    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        scored = zip(self.scores(candidates), range(len(candidates)), candidates)
        ordered = sorted(scored, key=lambda item: (-item[0], item[1]))
        return [p for _, _, p in ordered]


@register_policy(SelectionStrategy.CONFIGURATION)
class ConfiguredProviderPolicy(SelectionPolicy):
    """Pick the configured provider by name; never substitute another."""

    def __init__(self, provider_name: str, registry: ProviderRegistry) -> None:
        self._provider_name = provider_name
        self._registry = registry

    @classmethod
    def create(cls, options: PolicyOptions) -> SelectionPolicy:
        if not options.configured_provider or options.registry is None:
            raise ConfigurationError(
                "The configuration strategy requires a configured provider name"
            )
        return cls(options.configured_provider, options.registry)

    def rank(
        self, candidates: Sequence[ProviderAdapter], request: RequestDescriptor
    ) -> list[ProviderAdapter]:
        provider = self._registry.resolve(self._provider_name)
        if provider is None:
            raise ProviderNotFoundError(self._provider_name)
        if provider not in candidates:
            raise NoSuitableProviderError(
                (c.value for c in request.required),
                reason=(
                    f"Configured provider {provider.provider_name!r} is unavailable "
                    "or lacks the required capabilities"
                ),
            )
        return [provider]


def _normalise(values: Sequence[float]) -> list[float]:
    if not values:
        return []
    lo, hi = min(values), max(values)
    if hi == lo:
        return [1.0] * len(values)
    return [(v - lo) / (hi - lo) for v in values]


def _inverse_normalise(values: Sequence[float]) -> list[float]:
    return _normalise([-v for v in values])

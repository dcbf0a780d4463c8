"""Provider selector — filters providers on hard constraints, then ranks them.

Filters out unavailable providers, providers missing a required
capability or unable to accept the payload size, and providers whose
fresh health snapshot is unhealthy; then applies the configured
selection policy to whatever remains.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from switchboard.domain.enums import SelectionStrategy
from switchboard.domain.exceptions import NoSuitableProviderError
from switchboard.shared.observability.metrics import NO_SUITABLE_PROVIDER, PROVIDER_SELECTIONS
from switchboard.shared.providers.cost import CostAnalyzer
from switchboard.shared.providers.health import HealthTracker
from switchboard.shared.providers.registry import ProviderRegistry
from switchboard.shared.providers.strategies import (
    PolicyOptions,
    SelectionPolicy,
    build_policy,
)
from switchboard.shared.providers.types import (
    BalancedWeights,
    HealthStatus,
    RequestDescriptor,
)

if TYPE_CHECKING:
    from switchboard.ports.outbound import ProviderAdapter

logger = structlog.get_logger(__name__)


class ProviderSelector:
    """Chooses the best eligible provider for a request."""

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        strategy: SelectionStrategy = SelectionStrategy.BALANCED,
        health_tracker: HealthTracker | None = None,
        cost_analyzer: CostAnalyzer | None = None,
        weights: BalancedWeights | None = None,
        configured_provider: str | None = None,
    ) -> None:
        self._registry = registry
        self._strategy = strategy
        self._health = health_tracker or HealthTracker()
        self._costs = cost_analyzer or CostAnalyzer()
        self._policy: SelectionPolicy = build_policy(
            strategy,
            PolicyOptions(
                weights=weights or BalancedWeights(),
                configured_provider=configured_provider,
                registry=registry,
            ),
        )

    @property
    def strategy(self) -> SelectionStrategy:
        return self._strategy

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def health_tracker(self) -> HealthTracker:
        return self._health

    @property
    def cost_analyzer(self) -> CostAnalyzer:
        return self._costs

    # ── Selection ────────────────────────────────────────────
    def select_best_provider(self, request: RequestDescriptor | None = None) -> ProviderAdapter:
        """Return the top-ranked eligible provider.

        Raises:
            NoSuitableProviderError: If no provider survives filtering.
            ProviderNotFoundError: Configuration strategy with an unknown name.
        """
        provider = self.rank_providers(request)[0]
        PROVIDER_SELECTIONS.labels(
            strategy=self._strategy.value, provider=provider.provider_name
        ).inc()
        logger.info(
            "provider_selected",
            provider=provider.provider_name,
            strategy=self._strategy.value,
        )
        return provider

    def rank_providers(self, request: RequestDescriptor | None = None) -> list[ProviderAdapter]:
        """All eligible providers, best first."""
        request = request or RequestDescriptor()
        candidates = self._filter_candidates(request)

        if not candidates:
            NO_SUITABLE_PROVIDER.labels(strategy=self._strategy.value).inc()
            logger.warning(
                "no_suitable_provider",
                strategy=self._strategy.value,
                required=sorted(c.value for c in request.required),
                total_registered=len(self._registry),
            )
            raise NoSuitableProviderError(c.value for c in request.required)

        return self._policy.rank(candidates, request)

    def get_available_providers(self) -> list[ProviderAdapter]:
        available: list[ProviderAdapter] = []
        for provider in self._registry:
            if _is_available(provider):
                available.append(provider)
        logger.debug("available_providers", count=len(available))
        return available

    # ── Health & cost ────────────────────────────────────────
    async def get_provider_health(self, provider_name: str) -> HealthStatus:
        """Health snapshot for a provider; never raises for unknown names."""
        if provider_name not in self._registry:
            return HealthStatus.not_found(provider_name)
        return await self._health.check(self._registry.get(provider_name))

    def get_cost_estimate(self, request: RequestDescriptor | None = None) -> Decimal:
        """Lowest quote across eligible providers, 0 when none qualify.

        Each adapter prices the payload itself; an adapter whose quote
        raises is logged and left out.
        """
        request = request or RequestDescriptor()
        cheapest: ProviderAdapter | None = None
        lowest: Decimal | None = None

        for provider in self._filter_candidates(request):
            try:
                quote = provider.estimate_cost(request.payload_size)
            except Exception as exc:
                logger.warning(
                    "provider_cost_estimate_failed",
                    provider=provider.provider_name,
                    error=f"{type(exc).__name__}: {exc}",
                )
                continue
            if lowest is None or quote < lowest:
                cheapest, lowest = provider, quote

        if cheapest is None or lowest is None:
            return Decimal("0")
        logger.debug("cost_estimated", provider=cheapest.provider_name, estimate=str(lowest))
        return lowest

    # ── Filtering ────────────────────────────────────────────
    def _filter_candidates(self, request: RequestDescriptor) -> list[ProviderAdapter]:
        candidates: list[ProviderAdapter] = []

        for provider in self.get_available_providers():
            name = provider.provider_name
            caps = provider.capabilities

            if not caps.supports_all(request.required):
                logger.debug(
                    "provider_missing_capabilities",
                    provider=name,
                    missing=sorted(c.value for c in request.required - caps.features),
                )
                continue

            if not caps.accepts_size(request.payload_size):
                logger.debug(
                    "provider_payload_too_large",
                    provider=name,
                    payload_size=request.payload_size,
                    max_input_size=caps.max_input_size,
                )
                continue

            if self._health.is_known_unhealthy(name):
                logger.debug("provider_unhealthy_skipped", provider=name)
                continue

            candidates.append(provider)

        return candidates


def _is_available(provider: ProviderAdapter) -> bool:
    try:
        return bool(provider.is_available)
    except Exception as exc:
        logger.warning(
            "provider_availability_check_failed",
            provider=provider.provider_name,
            error=f"{type(exc).__name__}: {exc}",
        )
        return False

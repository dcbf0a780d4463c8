"""Composition root: builds the provider machinery from settings.

The registry is built once from the adapters handed in and never mutated
afterwards. Pipelines created here share one cost ledger and health cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import structlog

from switchboard.application.pipelines import CompletionPipeline, TextExtractionPipeline
from switchboard.config import Settings, get_settings
from switchboard.ports.outbound import ProviderAdapter
from switchboard.shared.observability import configure_logging
from switchboard.shared.providers.cost import CostAnalyzer
from switchboard.shared.providers.health import HealthTracker
from switchboard.shared.providers.registry import ProviderRegistry
from switchboard.shared.providers.selector import ProviderSelector
from switchboard.shared.providers.types import PipelineConfiguration

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Switchboard:
    settings: Settings
    registry: ProviderRegistry
    health: HealthTracker
    costs: CostAnalyzer
    selector: ProviderSelector

    def pipeline_configuration(self, **overrides: Any) -> PipelineConfiguration:
        return self.settings.pipeline_configuration(**overrides)

    def text_extraction_pipeline(
        self,
        config: PipelineConfiguration | None = None,
        *,
        min_confidence: float = 0.0,
    ) -> TextExtractionPipeline:
        return TextExtractionPipeline(
            self.selector,
            config or self.pipeline_configuration(),
            min_confidence=min_confidence,
            cost_analyzer=self.costs,
            backoff_base=self.settings.backoff_base_seconds,
        )

    def completion_pipeline(self, config: PipelineConfiguration | None = None) -> CompletionPipeline:
        return CompletionPipeline(
            self.selector,
            config or self.pipeline_configuration(),
            cost_analyzer=self.costs,
            backoff_base=self.settings.backoff_base_seconds,
        )


def create_switchboard(
    providers: Iterable[ProviderAdapter],
    settings: Settings | None = None,
    *,
    setup_logging: bool = False,
) -> Switchboard:
    """Build the shared provider machinery from settings."""
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(log_level=settings.log_level, json_logs=settings.is_production)

    registry = ProviderRegistry(providers)
    health = HealthTracker(ttl=settings.health_cache_ttl)
    costs = CostAnalyzer(
        surcharge_per_mib=settings.cost_surcharge_per_mib,
        surcharge_threshold_mib=settings.cost_surcharge_threshold_mib,
        retention=settings.cost_retention,
    )
    selector = ProviderSelector(
        registry,
        strategy=settings.selection_strategy,
        health_tracker=health,
        cost_analyzer=costs,
        weights=settings.balanced_weights(),
        configured_provider=settings.default_provider,
    )

    logger.info(
        "switchboard_ready",
        providers=registry.names,
        strategy=settings.selection_strategy.value,
        default_provider=settings.default_provider,
        fallback_provider=settings.fallback_provider,
    )
    return Switchboard(
        settings=settings,
        registry=registry,
        health=health,
        costs=costs,
        selector=selector,
    )

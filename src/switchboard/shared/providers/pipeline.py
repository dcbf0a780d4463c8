"""Execution pipeline — the caller-facing entry-point for provider calls.

Resolves a primary provider (configuration first, selector otherwise),
runs a bounded retry loop with exponential backoff, and on exhaustion
repeats the loop once against a configured fallback.  Every outcome is
returned as an ``ExecutionResult``; only cancellation escapes.

Usage::

    class SummarisePipeline(ExecutionPipeline[str, Completion]):
        pipeline_name = "summarise"

        async def execute_with_provider(self, provider, payload, *, model=None):
            completion = await provider.complete(payload, self.describe(payload), model=model)
            return ExecutionResult.success(completion)

    result = await SummarisePipeline(selector, config).execute("...")
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Generic, Iterable, TypeVar

import structlog

from switchboard.domain.enums import AttemptOutcome
from switchboard.domain.exceptions import SwitchboardError, TransientExecutionError
from switchboard.shared.observability.metrics import (
    PIPELINE_ATTEMPTS,
    PIPELINE_DURATION,
    PIPELINE_FALLBACKS,
)
from switchboard.shared.providers.cost import CostAnalyzer
from switchboard.shared.providers.result import ExecutionResult
from switchboard.shared.providers.selector import ProviderSelector
from switchboard.shared.providers.types import PipelineConfiguration, RequestDescriptor

if TYPE_CHECKING:
    from switchboard.ports.outbound import ProviderAdapter

logger = structlog.get_logger(__name__)

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")

DEFAULT_MAX_BATCH_SIZE = 10


class ExecutionPipeline(ABC, Generic[TInput, TOutput]):
    """Retry-with-fallback executor for one logical task."""

    pipeline_name: str = "pipeline"

    def __init__(
        self,
        selector: ProviderSelector,
        config: PipelineConfiguration | None = None,
        *,
        cost_analyzer: CostAnalyzer | None = None,
        backoff_base: float = 1.0,
    ) -> None:
        if backoff_base < 0:
            raise ValueError("backoff_base must be non-negative")
        self._selector = selector
        self._config = config or PipelineConfiguration()
        self._costs = cost_analyzer or selector.cost_analyzer
        self._backoff_base = backoff_base

    @property
    def config(self) -> PipelineConfiguration:
        return self._config

    @property
    def cost_analyzer(self) -> CostAnalyzer:
        return self._costs

    # ── Task hooks ───────────────────────────────────────────
    def describe(self, payload: TInput) -> RequestDescriptor:
        """Capabilities and size hint the payload needs from a provider."""
        return RequestDescriptor()

    @abstractmethod
    async def execute_with_provider(
        self,
        provider: ProviderAdapter,
        payload: TInput,
        *,
        model: str | None = None,
    ) -> ExecutionResult[TOutput]:
        """Perform one provider call; raise or return a failure to trigger a retry."""

    def actual_cost(
        self, provider: ProviderAdapter, request: RequestDescriptor, value: TOutput
    ) -> Decimal:
        """Amount charged to the ledger for a successful call."""
        return self._costs.estimate_cost(provider, request)

    # ── Main entry-point ─────────────────────────────────────
    async def execute(self, payload: TInput) -> ExecutionResult[TOutput]:
        start = time.monotonic()
        request = self.describe(payload)
        log = logger.bind(pipeline=self.pipeline_name)

        try:
            primary = self._resolve_primary(request)
        except SwitchboardError as exc:
            log.warning("pipeline_no_provider", code=exc.code, error=exc.message)
            self._observe(start, "failure")
            return ExecutionResult.failure(exc.message)

        log.info("pipeline_executing", provider=primary.provider_name)
        result = await self._execute_with_retry(primary, payload, request, model=self._config.model)

        if result.is_failure and self._config.has_fallback:
            fallback = self._resolve_fallback()
            if fallback is not None:
                PIPELINE_FALLBACKS.labels(pipeline=self.pipeline_name).inc()
                log.warning(
                    "pipeline_fallback",
                    primary=primary.provider_name,
                    fallback=fallback.provider_name,
                    error=result.error,
                )
                result = await self._execute_with_retry(
                    fallback, payload, request, model=self._config.fallback_model
                )

        if result.is_success:
            log.info("pipeline_succeeded", provider=result.provider_name)
        else:
            log.error("pipeline_failed", error=result.error)
        self._observe(start, "success" if result.is_success else "failure")
        return result

    async def execute_batch(
        self,
        payloads: Iterable[TInput],
        *,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ) -> ExecutionResult[list[TOutput]]:
        """Run each payload through ``execute`` in order.

        Items that fail are logged and left out of the returned list, so
        the batch succeeds even when every item fails.  A batch larger
        than ``max_batch_size`` is rejected without calling any provider.
        """
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")

        items = list(payloads)
        log = logger.bind(pipeline=self.pipeline_name, batch_size=len(items))
        if len(items) > max_batch_size:
            log.warning("batch_rejected", max_batch_size=max_batch_size)
            return ExecutionResult.failure(
                f"Batch size exceeds maximum allowed: {max_batch_size}"
            )

        values: list[TOutput] = []
        failed = 0
        for index, payload in enumerate(items):
            result = await self.execute(payload)
            if result.is_success:
                values.append(result.value)
            else:
                failed += 1
                log.warning("batch_item_failed", index=index, error=result.error)

        log.info("batch_completed", processed=len(values), failed=failed)
        return ExecutionResult.success(values, processed=len(values), failed=failed)

    # ── Provider resolution ──────────────────────────────────
    def _resolve_primary(self, request: RequestDescriptor) -> ProviderAdapter:
        configured = self._config.provider
        if configured and configured.strip():
            provider = self._selector.registry.resolve(configured)
            if provider is not None:
                return provider
            logger.warning(
                "configured_provider_not_found",
                pipeline=self.pipeline_name,
                provider=configured,
                registered=self._selector.registry.names,
            )
        return self._selector.select_best_provider(request)

    def _resolve_fallback(self) -> ProviderAdapter | None:
        name = self._config.fallback_provider
        provider = self._selector.registry.resolve(name)
        if provider is None:
            logger.warning(
                "fallback_provider_not_found",
                pipeline=self.pipeline_name,
                provider=name,
            )
        return provider

    # ── Attempt loop ─────────────────────────────────────────
    async def _execute_with_retry(
        self,
        provider: ProviderAdapter,
        payload: TInput,
        request: RequestDescriptor,
        *,
        model: str | None,
    ) -> ExecutionResult[TOutput]:
        name = provider.provider_name
        max_retries = self._config.max_retries
        last: ExecutionResult[TOutput] | None = None

        for attempt in range(max_retries + 1):
            log = logger.bind(pipeline=self.pipeline_name, provider=name, attempt=attempt + 1)

            if attempt > 0:
                delay = self._backoff_base * (2 ** (attempt - 1))
                log.warning("pipeline_retry", max_retries=max_retries, delay_s=delay)
                await asyncio.sleep(delay)

            started = time.monotonic()
            try:
                result = await self._call(provider, payload, model)
            except Exception as exc:
                message, outcome = self._describe_failure(provider, exc)
                log.error("pipeline_attempt_exception", error=message, exc_info=True)
                PIPELINE_ATTEMPTS.labels(self.pipeline_name, name, outcome.value).inc()
                last = ExecutionResult.failure(message, provider_name=name)
                continue

            latency_ms = (time.monotonic() - started) * 1000
            if result.is_success:
                PIPELINE_ATTEMPTS.labels(self.pipeline_name, name, AttemptOutcome.SUCCESS.value).inc()
                self._costs.record_cost(name, self.actual_cost(provider, request, result.value))
                log.info("pipeline_attempt_succeeded", latency_ms=float(f"{latency_ms:.1f}"))
                return dataclasses.replace(
                    result,
                    provider_name=result.provider_name or name,
                    metadata={**result.metadata, "attempts": attempt + 1},
                )

            PIPELINE_ATTEMPTS.labels(self.pipeline_name, name, AttemptOutcome.FAILURE.value).inc()
            log.warning("pipeline_attempt_failed", error=result.error)
            last = result

        return last or ExecutionResult.failure("Pipeline execution failed with no result")

    async def _call(
        self, provider: ProviderAdapter, payload: TInput, model: str | None
    ) -> ExecutionResult[TOutput]:
        call = self.execute_with_provider(provider, payload, model=model)
        if self._config.timeout_seconds is None:
            return await call
        return await asyncio.wait_for(call, timeout=self._config.timeout_seconds)

    def _describe_failure(
        self, provider: ProviderAdapter, exc: Exception
    ) -> tuple[str, AttemptOutcome]:
        timeout = self._config.timeout_seconds
        if isinstance(exc, asyncio.TimeoutError) and timeout is not None:
            return f"TimeoutError: no response after {timeout}s", AttemptOutcome.TIMEOUT
        return TransientExecutionError(provider.provider_name, exc).message, AttemptOutcome.FAILURE

    def _observe(self, start: float, status: str) -> None:
        PIPELINE_DURATION.labels(pipeline=self.pipeline_name, status=status).observe(
            time.monotonic() - start
        )

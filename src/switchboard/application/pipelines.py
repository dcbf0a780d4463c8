"""Task pipelines, one ``ExecutionPipeline`` per logical caller task.

Each pipeline translates its payload into a ``RequestDescriptor`` and
knows which adapter call to make; retry, fallback, and cost recording
come from the base class.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from switchboard.domain.enums import Capability
from switchboard.domain.models import Completion, TextExtraction
from switchboard.ports.outbound import (
    CompletionProvider,
    ProviderAdapter,
    TextExtractionProvider,
)
from switchboard.shared.providers.cost import CostAnalyzer
from switchboard.shared.providers.pipeline import ExecutionPipeline
from switchboard.shared.providers.result import ExecutionResult
from switchboard.shared.providers.selector import ProviderSelector
from switchboard.shared.providers.types import PipelineConfiguration, RequestDescriptor


# ═══════════════════════════════════════════════════════════════
#  Inputs
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class ImageInput:
    data: bytes
    required: frozenset[Capability] = frozenset()
    preferred: frozenset[Capability] = frozenset()


@dataclass(frozen=True)
class CompletionInput:
    prompt: str
    required: frozenset[Capability] = frozenset()
    preferred: frozenset[Capability] = frozenset()
    estimated_tokens: int = 0


# ═══════════════════════════════════════════════════════════════
#  Text extraction
# ═══════════════════════════════════════════════════════════════
class TextExtractionPipeline(ExecutionPipeline[ImageInput, TextExtraction]):
    """Extract text from an image through any OCR-capable provider.

    Results under ``min_confidence`` count as failed attempts, so they are
    retried and can trigger the fallback provider.
    """

    pipeline_name = "text_extraction"

    def __init__(
        self,
        selector: ProviderSelector,
        config: PipelineConfiguration | None = None,
        *,
        min_confidence: float = 0.0,
        cost_analyzer: CostAnalyzer | None = None,
        backoff_base: float = 1.0,
    ) -> None:
        if not 0.0 <= min_confidence <= 1.0:
            raise ValueError("min_confidence must be between 0.0 and 1.0")
        super().__init__(
            selector, config, cost_analyzer=cost_analyzer, backoff_base=backoff_base
        )
        self._min_confidence = min_confidence

    def describe(self, payload: ImageInput) -> RequestDescriptor:
        return RequestDescriptor(
            required=payload.required,
            preferred=payload.preferred,
            payload_size=len(payload.data),
        )

    async def execute(self, payload: ImageInput) -> ExecutionResult[TextExtraction]:
        if not payload.data:
            return ExecutionResult.failure("Image data cannot be empty")
        return await super().execute(payload)

    async def execute_with_provider(
        self,
        provider: ProviderAdapter,
        payload: ImageInput,
        *,
        model: str | None = None,
    ) -> ExecutionResult[TextExtraction]:
        if not isinstance(provider, TextExtractionProvider):
            return ExecutionResult.failure(
                f"Provider {provider.provider_name!r} does not support text extraction"
            )

        extraction = await provider.process_image(payload.data, self.describe(payload))
        if extraction.confidence < self._min_confidence:
            return ExecutionResult.failure(
                f"Low confidence {extraction.confidence:.2f} from "
                f"{provider.provider_name!r} (minimum {self._min_confidence:.2f})"
            )
        return ExecutionResult.success(extraction, provider_name=provider.provider_name)


# ═══════════════════════════════════════════════════════════════
#  Completion
# ═══════════════════════════════════════════════════════════════
class CompletionPipeline(ExecutionPipeline[CompletionInput, Completion]):
    """Run a prompt through a text-completion provider."""

    pipeline_name = "completion"

    def describe(self, payload: CompletionInput) -> RequestDescriptor:
        return RequestDescriptor(
            required=payload.required,
            preferred=payload.preferred,
            payload_size=len(payload.prompt.encode("utf-8")),
            estimated_tokens=payload.estimated_tokens,
        )

    async def execute(self, payload: CompletionInput) -> ExecutionResult[Completion]:
        if not payload.prompt.strip():
            return ExecutionResult.failure("Prompt cannot be empty")
        return await super().execute(payload)

    async def execute_with_provider(
        self,
        provider: ProviderAdapter,
        payload: CompletionInput,
        *,
        model: str | None = None,
    ) -> ExecutionResult[Completion]:
        if not isinstance(provider, CompletionProvider):
            return ExecutionResult.failure(
                f"Provider {provider.provider_name!r} does not support completions"
            )

        completion = await provider.complete(
            payload.prompt, self.describe(payload), model=model
        )
        if not completion.text.strip():
            return ExecutionResult.failure(
                f"Empty completion from {provider.provider_name!r}"
            )
        return ExecutionResult.success(completion, provider_name=provider.provider_name)

    def actual_cost(
        self, provider: ProviderAdapter, request: RequestDescriptor, value: Completion
    ) -> Decimal:
        # Providers that report no token usage fall back to the flat estimate.
        if value.input_tokens or value.output_tokens:
            return self._costs.calculate_usage_cost(
                provider, value.input_tokens, value.output_tokens
            )
        return super().actual_cost(provider, request, value)

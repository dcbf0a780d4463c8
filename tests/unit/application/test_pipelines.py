"""Tests for the text-extraction and completion task pipelines."""

from __future__ import annotations

from decimal import Decimal
from datetime import timedelta

import pytest

from fakes import FakeCompletionProvider, FakeOcrProvider, make_capabilities
from switchboard.application.pipelines import (
    CompletionInput,
    CompletionPipeline,
    ImageInput,
    TextExtractionPipeline,
)
from switchboard.domain.enums import Capability, SelectionStrategy
from switchboard.domain.models import Completion, TextExtraction
from switchboard.shared.providers.cost import MIB
from switchboard.shared.providers.registry import ProviderRegistry
from switchboard.shared.providers.selector import ProviderSelector
from switchboard.shared.providers.types import PipelineConfiguration


def _selector(*providers, strategy=SelectionStrategy.COST_OPTIMIZED) -> ProviderSelector:
    return ProviderSelector(ProviderRegistry(providers), strategy=strategy)


# ═══════════════════════════════════════════════════════════════
#  TextExtractionPipeline
# ═══════════════════════════════════════════════════════════════
class TestTextExtractionPipeline:
    @pytest.mark.asyncio
    async def test_extracts_with_cheapest_capable_provider(self, registry: ProviderRegistry) -> None:
        pipeline = TextExtractionPipeline(
            ProviderSelector(registry, strategy=SelectionStrategy.COST_OPTIMIZED),
            backoff_base=0.0,
        )
        result = await pipeline.execute(
            ImageInput(b"\x89PNG...", required=frozenset({Capability.TABLE_DETECTION}))
        )
        assert result.is_success
        assert result.provider_name == "AWS Textract"
        assert result.unwrap().text == "text from AWS Textract"

    def test_describe_uses_image_size(self) -> None:
        pipeline = TextExtractionPipeline(_selector())
        request = pipeline.describe(ImageInput(b"x" * 2048, preferred=frozenset({Capability.HANDWRITING})))
        assert request.payload_size == 2048
        assert request.preferred == {Capability.HANDWRITING}

    @pytest.mark.asyncio
    async def test_empty_image_rejected_without_calling_providers(self) -> None:
        provider = FakeOcrProvider("Tesseract")
        result = await TextExtractionPipeline(_selector(provider)).execute(ImageInput(b""))
        assert result.error == "Image data cannot be empty"
        assert provider.calls == 0

    @pytest.mark.asyncio
    async def test_low_confidence_triggers_fallback(self) -> None:
        weak = FakeOcrProvider(
            "Tesseract",
            make_capabilities(cost="0.0001"),
            script=[TextExtraction("bl0rry", confidence=0.3)] * 5,
        )
        strong = FakeOcrProvider("Azure", make_capabilities(cost="0.0015"))
        pipeline = TextExtractionPipeline(
            _selector(weak, strong),
            PipelineConfiguration(fallback_provider="Azure", max_retries=1),
            min_confidence=0.8,
            backoff_base=0.0,
        )
        result = await pipeline.execute(ImageInput(b"scan"))

        assert result.is_success
        assert result.provider_name == "Azure"
        assert weak.calls == 2
        assert strong.calls == 1

    @pytest.mark.asyncio
    async def test_low_confidence_error_message(self) -> None:
        weak = FakeOcrProvider("Tesseract", script=[TextExtraction("?", confidence=0.25)])
        pipeline = TextExtractionPipeline(
            _selector(weak), PipelineConfiguration(max_retries=0), min_confidence=0.5
        )
        result = await pipeline.execute(ImageInput(b"scan"))
        assert result.error == "Low confidence 0.25 from 'Tesseract' (minimum 0.50)"

    def test_min_confidence_range(self) -> None:
        with pytest.raises(ValueError):
            TextExtractionPipeline(_selector(), min_confidence=1.5)

    @pytest.mark.asyncio
    async def test_wrong_provider_kind_is_a_failed_attempt(self) -> None:
        llm = FakeCompletionProvider("OpenAI")
        pipeline = TextExtractionPipeline(_selector(llm), PipelineConfiguration(max_retries=0))
        result = await pipeline.execute(ImageInput(b"scan"))
        assert result.error == "Provider 'OpenAI' does not support text extraction"

    @pytest.mark.asyncio
    async def test_large_image_cost_includes_surcharge(self) -> None:
        provider = FakeOcrProvider("Azure", make_capabilities(cost="0.001"))
        pipeline = TextExtractionPipeline(_selector(provider))
        await pipeline.execute(ImageInput(b"x" * (2 * MIB)))
        assert pipeline.cost_analyzer.get_total_cost(timedelta(hours=1)) == Decimal("0.0011")

    @pytest.mark.asyncio
    async def test_batch_skips_empty_images(self) -> None:
        provider = FakeOcrProvider("Tesseract")
        pipeline = TextExtractionPipeline(_selector(provider))
        result = await pipeline.execute_batch(
            [ImageInput(b"page 1"), ImageInput(b""), ImageInput(b"page 3")]
        )

        assert result.is_success
        assert [e.text for e in result.unwrap()] == ["text from Tesseract"] * 2
        assert result.metadata == {"processed": 2, "failed": 1}
        assert provider.calls == 2


# ═══════════════════════════════════════════════════════════════
#  CompletionPipeline
# ═══════════════════════════════════════════════════════════════
class TestCompletionPipeline:
    @pytest.mark.asyncio
    async def test_passes_configured_model(self) -> None:
        provider = FakeCompletionProvider("OpenAI")
        pipeline = CompletionPipeline(
            _selector(provider), PipelineConfiguration(provider="openai", model="gpt-4o-mini")
        )
        result = await pipeline.execute(CompletionInput("Summarise this"))

        assert result.unwrap().model == "gpt-4o-mini"
        assert provider.models == ["gpt-4o-mini"]

    def test_describe(self) -> None:
        pipeline = CompletionPipeline(_selector())
        request = pipeline.describe(
            CompletionInput(
                "héllo",
                required=frozenset({Capability.FUNCTION_CALLING}),
                estimated_tokens=12,
            )
        )
        assert request.payload_size == 6
        assert request.estimated_tokens == 12
        assert request.required == {Capability.FUNCTION_CALLING}

    @pytest.mark.asyncio
    async def test_blank_prompt_rejected(self) -> None:
        result = await CompletionPipeline(_selector(FakeCompletionProvider("OpenAI"))).execute(
            CompletionInput("   ")
        )
        assert result.error == "Prompt cannot be empty"

    @pytest.mark.asyncio
    async def test_empty_completion_is_retried(self) -> None:
        provider = FakeCompletionProvider("OpenAI", script=[Completion(text="")])
        pipeline = CompletionPipeline(_selector(provider), backoff_base=0.0)
        result = await pipeline.execute(CompletionInput("hi"))

        assert result.is_success
        assert result.metadata["attempts"] == 2

    @pytest.mark.asyncio
    async def test_capability_requirement_selects_provider(self) -> None:
        plain = FakeCompletionProvider("Groq", make_capabilities(cost="0.0001"))
        tools = FakeCompletionProvider(
            "OpenAI", make_capabilities(Capability.FUNCTION_CALLING, cost="0.01")
        )
        pipeline = CompletionPipeline(_selector(plain, tools))
        result = await pipeline.execute(
            CompletionInput("call a tool", required=frozenset({Capability.FUNCTION_CALLING}))
        )
        assert result.provider_name == "OpenAI"
        assert plain.calls == 0

    @pytest.mark.asyncio
    async def test_unmet_requirement_is_a_failure_result(self) -> None:
        pipeline = CompletionPipeline(_selector(FakeCompletionProvider("Groq")))
        result = await pipeline.execute(
            CompletionInput("look", required=frozenset({Capability.VISION}))
        )
        assert result.is_failure
        assert result.error == "No suitable provider available for capabilities: vision"

    @pytest.mark.asyncio
    async def test_reported_tokens_are_charged_by_usage(self) -> None:
        provider = FakeCompletionProvider(
            "OpenAI",
            make_capabilities(cost="0.01", cost_per_unit=Decimal("0.00002")),
            script=[Completion(text="hi", input_tokens=1000, output_tokens=500)],
        )
        pipeline = CompletionPipeline(_selector(provider))
        result = await pipeline.execute(CompletionInput("hello"))

        assert result.is_success
        assert pipeline.cost_analyzer.get_total_cost(timedelta(hours=1)) == Decimal("0.04")

    @pytest.mark.asyncio
    async def test_no_reported_tokens_charges_the_estimate(self) -> None:
        provider = FakeCompletionProvider(
            "OpenAI", make_capabilities(cost="0.01", cost_per_unit=Decimal("0.00002"))
        )
        pipeline = CompletionPipeline(_selector(provider))
        await pipeline.execute(CompletionInput("hello"))
        assert pipeline.cost_analyzer.get_total_cost(timedelta(hours=1)) == Decimal("0.01")

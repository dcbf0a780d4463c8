"""Tests for ProviderRegistry lookup layers."""

from __future__ import annotations

import pytest

from fakes import FakeCompletionProvider, FakeOcrProvider
from switchboard.domain.exceptions import ConfigurationError, ProviderNotFoundError
from switchboard.shared.providers.registry import PROVIDER_ALIASES, ProviderRegistry


# ═══════════════════════════════════════════════════════════════
#  Construction
# ═══════════════════════════════════════════════════════════════
class TestRegistryConstruction:
    def test_preserves_registration_order(self, registry: ProviderRegistry) -> None:
        assert registry.names == ["Azure", "Tesseract", "AWS Textract"]
        assert len(registry) == 3
        assert [p.provider_name for p in registry] == registry.names

    def test_duplicate_names_rejected_case_insensitively(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate"):
            ProviderRegistry([FakeOcrProvider("Azure"), FakeOcrProvider("azure")])

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            ProviderRegistry([FakeOcrProvider("   ")])

    def test_contains_is_exact(self, registry: ProviderRegistry) -> None:
        assert "azure" in registry
        assert " TESSERACT " in registry
        assert "Textract" not in registry
        assert 42 not in registry


# ═══════════════════════════════════════════════════════════════
#  Lookup
# ═══════════════════════════════════════════════════════════════
class TestRegistryLookup:
    def test_get_exact(self, registry: ProviderRegistry) -> None:
        assert registry.get("AZURE").provider_name == "Azure"

    def test_get_unknown_raises(self, registry: ProviderRegistry) -> None:
        with pytest.raises(ProviderNotFoundError) as exc_info:
            registry.get("Mistral")
        assert exc_info.value.code == "PROVIDER_NOT_FOUND"
        assert "Mistral" in exc_info.value.message

    def test_resolve_exact_wins_over_substring(self) -> None:
        registry = ProviderRegistry(
            [FakeCompletionProvider("Azure OpenAI"), FakeCompletionProvider("OpenAI")]
        )
        assert registry.resolve("openai").provider_name == "OpenAI"

    def test_resolve_registry_name_contains_query(self, registry: ProviderRegistry) -> None:
        assert registry.resolve("textract").provider_name == "AWS Textract"

    def test_resolve_query_contains_registry_name(self, registry: ProviderRegistry) -> None:
        assert registry.resolve("Azure Computer Vision").provider_name == "Azure"

    def test_resolve_alias(self) -> None:
        registry = ProviderRegistry(
            [FakeCompletionProvider("Anthropic"), FakeCompletionProvider("OpenAI")]
        )
        assert "gpt4" not in registry
        assert registry.resolve("gpt4").provider_name == "OpenAI"
        assert registry.resolve("Claude").provider_name == "Anthropic"

    def test_resolve_alias_target_by_substring(self) -> None:
        registry = ProviderRegistry([FakeOcrProvider("Google Cloud Vision OCR")])
        assert registry.resolve("gcp").provider_name == "Google Cloud Vision OCR"

    @pytest.mark.parametrize("query", [None, "", "   ", "mistral"])
    def test_resolve_miss_returns_none(self, registry: ProviderRegistry, query) -> None:
        assert registry.resolve(query) is None

    def test_custom_alias_table(self) -> None:
        registry = ProviderRegistry(
            [FakeOcrProvider("Tesseract")], aliases={"Local": ("tesseract",)}
        )
        assert registry.resolve("local").provider_name == "Tesseract"

    def test_alias_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            PROVIDER_ALIASES["new"] = ("X",)  # type: ignore[index]

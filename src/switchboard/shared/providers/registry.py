"""Provider registry — ordered name → adapter map with tolerant lookup.

Configured provider names are typed by humans, so ``resolve`` accepts
minor drift: exact (case-insensitive) → substring → alias table.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

import structlog

from switchboard.domain.exceptions import ConfigurationError, ProviderNotFoundError

if TYPE_CHECKING:
    from switchboard.ports.outbound import ProviderAdapter

logger = structlog.get_logger(__name__)


# Keys are normalised (lower-case, stripped); values are canonical name
# fragments tried in order against registered providers.
PROVIDER_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "gpt": ("OpenAI",),
        "gpt4": ("OpenAI",),
        "gpt-4": ("OpenAI",),
        "gpt4o": ("OpenAI",),
        "gpt-4o": ("OpenAI",),
        "chatgpt": ("OpenAI",),
        "openai": ("OpenAI",),
        "azureopenai": ("Azure OpenAI", "AzureOpenAI"),
        "azure openai": ("Azure OpenAI", "AzureOpenAI"),
        "claude": ("Anthropic", "Claude"),
        "anthropic": ("Anthropic", "Claude"),
        "gemini": ("Google", "Gemini"),
        "grok": ("Grok", "xAI"),
        "xai": ("Grok", "xAI"),
        "groq": ("Groq",),
        "llama": ("Ollama", "Groq"),
        "ollama": ("Ollama",),
        "lmstudio": ("LM Studio", "LMStudio"),
        "hf": ("HuggingFace", "Hugging Face"),
        "huggingface": ("HuggingFace", "Hugging Face"),
        "perplexity": ("Perplexity",),
        "bedrock": ("Bedrock",),
        "aws bedrock": ("Bedrock",),
        "azure": ("Azure",),
        "azure computer vision": ("Azure",),
        "aws": ("AWS", "Textract"),
        "textract": ("AWS", "Textract"),
        "google": ("Google", "GCP"),
        "gcp": ("Google", "GCP"),
        "google cloud vision": ("Google", "GCP"),
        "gcpvision": ("Google", "GCP"),
        "paddle": ("Paddle",),
        "paddleocr": ("Paddle",),
        "documentai": ("DocumentAI",),
        "gcp document ai": ("DocumentAI",),
        "tesseract": ("Tesseract",),
    }
)


class ProviderRegistry:
    """Immutable, ordered collection of provider adapters keyed by name."""

    def __init__(
        self,
        providers: Iterable[ProviderAdapter],
        *,
        aliases: Mapping[str, tuple[str, ...]] = PROVIDER_ALIASES,
    ) -> None:
        ordered: dict[str, ProviderAdapter] = {}
        for provider in providers:
            key = provider.provider_name.strip().lower()
            if not key:
                raise ConfigurationError("provider_name must not be blank")
            if key in ordered:
                raise ConfigurationError(
                    f"Duplicate provider name: {provider.provider_name!r}"
                )
            ordered[key] = provider

        self._providers = MappingProxyType(ordered)
        self._aliases = MappingProxyType(
            {k.strip().lower(): tuple(v) for k, v in aliases.items()}
        )

    def __iter__(self) -> Iterator[ProviderAdapter]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self._providers

    @property
    def names(self) -> list[str]:
        return [p.provider_name for p in self._providers.values()]

    def get(self, name: str) -> ProviderAdapter:
        """Exact (case-insensitive) lookup."""
        provider = self._providers.get(name.strip().lower())
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def resolve(self, name: str | None) -> ProviderAdapter | None:
        """Layered lookup: exact → substring → alias table."""
        if not name or not name.strip():
            return None
        query = name.strip().lower()

        provider = self._providers.get(query)
        if provider is not None:
            return provider

        provider = self._match_fragment(query)
        if provider is not None:
            logger.debug("provider_resolved_by_substring", query=name, provider=provider.provider_name)
            return provider

        for target in self._aliases.get(query, ()):
            provider = self._match_target(target.lower())
            if provider is not None:
                logger.debug("provider_resolved_by_alias", query=name, provider=provider.provider_name)
                return provider

        logger.debug("provider_not_resolved", query=name, registered=self.names)
        return None

    # ── Internals ────────────────────────────────────────────
    def _match_fragment(self, query: str) -> ProviderAdapter | None:
        for key, provider in self._providers.items():
            if query in key or key in query:
                return provider
        return None

    def _match_target(self, target: str) -> ProviderAdapter | None:
        exact = self._providers.get(target)
        if exact is not None:
            return exact
        return next(
            (p for key, p in self._providers.items() if target in key),
            None,
        )

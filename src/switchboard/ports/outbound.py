"""Outbound ports: the contract every provider adapter implements.

The selection and execution core depends only on these abstractions,
never on vendor SDKs or HTTP payloads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from switchboard.domain.models import Completion, TextExtraction
from switchboard.shared.providers.types import (
    HealthStatus,
    ProviderCapabilities,
    RequestDescriptor,
)


# ═══════════════════════════════════════════════════════════════
#  Provider ports
# ═══════════════════════════════════════════════════════════════
class ProviderAdapter(ABC):
    """A named, addressable provider instance."""

    @property
    @abstractmethod
    def provider_name(self) -> str: ...

    @property
    @abstractmethod
    def capabilities(self) -> ProviderCapabilities: ...

    @property
    def requires_internet(self) -> bool:
        return self.capabilities.requires_internet

    @property
    def is_available(self) -> bool:
        """Cheap local check; must not perform network I/O."""
        return True

    @abstractmethod
    async def check_health(self) -> HealthStatus:
        """Live call measuring availability and latency."""

    def estimate_cost(self, size_bytes: int = 0) -> Decimal:
        caps = self.capabilities
        return caps.cost_per_request + caps.cost_per_unit * size_bytes

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.provider_name!r}>"


class TextExtractionProvider(ProviderAdapter):
    """OCR / vision backend."""

    @abstractmethod
    async def process_image(
        self, data: bytes, request: RequestDescriptor
    ) -> TextExtraction: ...


class CompletionProvider(ProviderAdapter):
    """Text-completion backend."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        request: RequestDescriptor,
        *,
        model: str | None = None,
    ) -> Completion: ...

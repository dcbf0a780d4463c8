from switchboard.ports.outbound import (
    CompletionProvider,
    ProviderAdapter,
    TextExtractionProvider,
)

__all__ = ["CompletionProvider", "ProviderAdapter", "TextExtractionProvider"]

"""Payloads returned by provider adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TextExtraction:
    """Text recognised in an image by an OCR-capable provider."""

    text: str
    confidence: float = 1.0
    provider_name: str = ""
    language: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Completion:
    """Text produced by a completion backend."""

    text: str
    provider_name: str = ""
    model: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0

"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from fakes import FakeOcrProvider, make_capabilities
from switchboard.domain.enums import Capability
from switchboard.shared.providers.registry import ProviderRegistry


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ocr_providers() -> list[FakeOcrProvider]:
    return [
        FakeOcrProvider(
            "Azure",
            make_capabilities(
                Capability.HANDWRITING,
                Capability.TABLE_DETECTION,
                cost="0.0015",
                response_time=2.0,
                reliability=0.95,
            ),
        ),
        FakeOcrProvider(
            "Tesseract",
            make_capabilities(
                Capability.LANGUAGE_DETECTION,
                cost="0.0005",
                response_time=3.0,
                reliability=0.7,
                requires_internet=False,
            ),
        ),
        FakeOcrProvider(
            "AWS Textract",
            make_capabilities(
                Capability.TABLE_DETECTION,
                Capability.FORM_DETECTION,
                cost="0.0010",
                response_time=1.0,
                reliability=0.9,
            ),
        ),
    ]


@pytest.fixture
def registry(ocr_providers: list[FakeOcrProvider]) -> ProviderRegistry:
    return ProviderRegistry(ocr_providers)

"""Tests for HealthTracker snapshots and cached live checks."""

from __future__ import annotations

from datetime import timedelta

import pytest

from fakes import StubProvider
from switchboard.shared.providers.health import HealthTracker
from switchboard.shared.providers.types import HealthStatus


@pytest.fixture
def tracker(clock) -> HealthTracker:
    return HealthTracker(ttl=timedelta(minutes=5), clock=clock)


class TestHealthTracker:
    def test_unknown_provider_has_no_snapshot(self, tracker: HealthTracker) -> None:
        assert tracker.snapshot("Azure") is None
        assert tracker.fresh_snapshot("Azure") is None
        assert not tracker.is_known_unhealthy("Azure")

    def test_update_overwrites(self, tracker: HealthTracker) -> None:
        tracker.update(HealthStatus("Azure", is_healthy=True))
        tracker.update(HealthStatus("Azure", is_healthy=False, status="Degraded"))
        assert tracker.snapshot("Azure").status == "Degraded"
        assert len(tracker.all_snapshots()) == 1
        assert tracker.is_known_unhealthy("Azure")

    def test_snapshot_goes_stale_after_ttl(self, tracker: HealthTracker, clock) -> None:
        tracker.update(HealthStatus("Azure", is_healthy=False))
        clock.advance(minutes=4, seconds=59)
        assert tracker.is_known_unhealthy("Azure")
        clock.advance(seconds=1)
        assert tracker.fresh_snapshot("Azure") is None
        assert not tracker.is_known_unhealthy("Azure")
        assert tracker.snapshot("Azure") is not None

    def test_clear(self, tracker: HealthTracker) -> None:
        tracker.update(HealthStatus("Azure", is_healthy=True))
        tracker.update(HealthStatus("Tesseract", is_healthy=True))
        tracker.clear("Azure")
        assert tracker.snapshot("Azure") is None
        tracker.clear()
        assert tracker.all_snapshots() == []

    @pytest.mark.asyncio
    async def test_check_uses_cache_within_ttl(self, tracker: HealthTracker, clock) -> None:
        provider = StubProvider("Azure")
        first = await tracker.check(provider)
        second = await tracker.check(provider)
        assert first is second
        assert provider.health_checks == 1

        clock.advance(minutes=5)
        await tracker.check(provider)
        assert provider.health_checks == 2

    @pytest.mark.asyncio
    async def test_force_bypasses_cache(self, tracker: HealthTracker) -> None:
        provider = StubProvider("Azure")
        await tracker.check(provider)
        await tracker.check(provider, force=True)
        assert provider.health_checks == 2

    @pytest.mark.asyncio
    async def test_check_failure_recorded_as_unhealthy(self, tracker: HealthTracker) -> None:
        provider = StubProvider("Azure", health=ConnectionError("dns lookup failed"))
        status = await tracker.check(provider)
        assert not status.is_healthy
        assert status.status == "Health check failed"
        assert status.error_message == "dns lookup failed"
        assert tracker.is_known_unhealthy("Azure")

    @pytest.mark.asyncio
    async def test_check_all(self, tracker: HealthTracker) -> None:
        providers = [
            StubProvider("Azure"),
            StubProvider("Tesseract", health=HealthStatus("Tesseract", is_healthy=False, status="Down")),
        ]
        statuses = await tracker.check_all(providers)
        assert [s.is_healthy for s in statuses] == [True, False]
        assert {s.provider_name for s in tracker.all_snapshots()} == {"Azure", "Tesseract"}

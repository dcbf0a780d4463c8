"""Health tracker — latest health snapshot per provider with a freshness TTL.

One record per provider, overwritten on every check; no history is kept.
Live checks are expensive, so a snapshot younger than the TTL is served
from the cache.
"""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Iterable

import structlog

from switchboard.shared.providers.types import HealthStatus, utcnow

if TYPE_CHECKING:
    from switchboard.ports.outbound import ProviderAdapter

logger = structlog.get_logger(__name__)

DEFAULT_TTL = timedelta(minutes=5)


class HealthTracker:
    """Thread-safe cache of provider health snapshots."""

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._snapshots: dict[str, tuple[HealthStatus, datetime]] = {}
        self._lock = threading.Lock()

    # ── Recording ────────────────────────────────────────────
    def update(self, status: HealthStatus) -> None:
        with self._lock:
            self._snapshots[status.provider_name] = (status, self._clock())

    def clear(self, provider_name: str | None = None) -> None:
        with self._lock:
            if provider_name is None:
                self._snapshots.clear()
            else:
                self._snapshots.pop(provider_name, None)

    # ── Reads ────────────────────────────────────────────────
    def snapshot(self, provider_name: str) -> HealthStatus | None:
        """Latest snapshot, fresh or not."""
        with self._lock:
            entry = self._snapshots.get(provider_name)
        return entry[0] if entry else None

    def fresh_snapshot(self, provider_name: str) -> HealthStatus | None:
        with self._lock:
            entry = self._snapshots.get(provider_name)
        if entry is None:
            return None
        status, stored_at = entry
        if self._clock() - stored_at >= self._ttl:
            return None
        return status

    def is_known_unhealthy(self, provider_name: str) -> bool:
        status = self.fresh_snapshot(provider_name)
        return status is not None and not status.is_healthy

    def all_snapshots(self) -> list[HealthStatus]:
        with self._lock:
            return [status for status, _ in self._snapshots.values()]

    # ── Live checks ──────────────────────────────────────────
    async def check(self, provider: ProviderAdapter, *, force: bool = False) -> HealthStatus:
        """Return a fresh snapshot, running a live check when the cache is stale."""
        name = provider.provider_name
        if not force:
            cached = self.fresh_snapshot(name)
            if cached is not None:
                return cached

        try:
            status = await provider.check_health()
        except Exception as exc:
            logger.warning(
                "provider_health_check_failed",
                provider=name,
                error=f"{type(exc).__name__}: {exc}",
            )
            status = HealthStatus.check_failed(name, exc)

        self.update(status)
        log = logger.bind(provider=name, healthy=status.is_healthy)
        if status.is_healthy:
            log.debug("provider_health_checked", response_time_s=status.response_time)
        else:
            log.warning("provider_unhealthy", status=status.status, error=status.error_message)
        return status

    async def check_all(
        self, providers: Iterable[ProviderAdapter], *, force: bool = False
    ) -> list[HealthStatus]:
        return list(
            await asyncio.gather(*(self.check(p, force=force) for p in providers))
        )

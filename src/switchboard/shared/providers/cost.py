"""Cost analyzer — per-call estimates and a time-windowed cost ledger.

The ledger is append-only and guarded by a single lock.  Aggregations
copy the in-window records under the lock and sum outside it, so a
report may miss a record written a moment earlier but never sees a
partial one.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

import structlog

from switchboard.shared.observability.metrics import PROVIDER_COST_TOTAL
from switchboard.shared.providers.types import CostRecord, RequestDescriptor, _to_decimal, utcnow

if TYPE_CHECKING:
    from switchboard.ports.outbound import ProviderAdapter

logger = structlog.get_logger(__name__)

MIB = 1024 * 1024
DEFAULT_SURCHARGE_PER_MIB = Decimal("0.0001")
DEFAULT_THRESHOLD_MIB = Decimal("1")
DEFAULT_RETENTION = timedelta(days=30)


@dataclass(frozen=True)
class CostBreakdown:
    provider_name: str
    total_cost: Decimal
    request_count: int
    average_cost_per_request: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class CostReport:
    window: timedelta
    generated_at: datetime
    total_cost: Decimal = Decimal("0")
    total_requests: int = 0
    average_cost_per_request: Decimal = Decimal("0")
    provider_breakdown: dict[str, Decimal] = field(default_factory=dict)
    daily_breakdown: dict[date, Decimal] = field(default_factory=dict)


class CostAnalyzer:
    """Thread-safe cost estimator and ledger."""

    def __init__(
        self,
        *,
        surcharge_per_mib: Decimal | float | str = DEFAULT_SURCHARGE_PER_MIB,
        surcharge_threshold_mib: Decimal | float | str = DEFAULT_THRESHOLD_MIB,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._surcharge = _to_decimal(surcharge_per_mib)
        self._threshold_mib = _to_decimal(surcharge_threshold_mib)
        self._retention = retention
        self._clock = clock

        self._records: list[CostRecord] = []
        self._lock = threading.Lock()

    # ── Estimation ───────────────────────────────────────────
    def estimate_cost(self, provider: ProviderAdapter, request: RequestDescriptor) -> Decimal:
        """Flat per-request cost plus a surcharge for each MiB past the threshold."""
        cost = provider.capabilities.cost_per_request
        size_mib = Decimal(request.payload_size) / MIB
        if size_mib > self._threshold_mib:
            cost += (size_mib - self._threshold_mib) * self._surcharge
        return cost

    def calculate_usage_cost(
        self,
        provider: ProviderAdapter,
        input_units: int,
        output_units: int = 0,
    ) -> Decimal:
        """Token-metered cost: flat fee plus every input and output unit."""
        caps = provider.capabilities
        total = caps.cost_per_request + caps.cost_per_unit * (input_units + output_units)
        logger.debug(
            "usage_cost_calculated",
            provider=provider.provider_name,
            input_units=input_units,
            output_units=output_units,
            total=str(total),
        )
        return total

    # ── Recording ────────────────────────────────────────────
    def record_cost(
        self,
        provider_name: str,
        amount: Decimal | float | str,
        timestamp: datetime | None = None,
    ) -> CostRecord:
        amount = _to_decimal(amount)
        if amount < 0:
            raise ValueError("cost amount must be non-negative")
        # Naive timestamps are local time; the ledger compares in UTC.
        when = (timestamp or self._now()).astimezone(timezone.utc)
        record = CostRecord(provider_name, amount, when)

        with self._lock:
            self._records.append(record)
            self._prune()

        PROVIDER_COST_TOTAL.labels(provider=provider_name).inc(float(amount))
        logger.info(
            "cost_recorded",
            provider=provider_name,
            amount=str(amount),
            timestamp=record.timestamp.isoformat(),
        )
        return record

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
        logger.info("cost_ledger_reset")

    # ── Aggregation ──────────────────────────────────────────
    def get_total_cost(self, window: timedelta) -> Decimal:
        return sum((r.amount for r in self._snapshot(window)), Decimal("0"))

    def get_request_counts(self, window: timedelta) -> dict[str, int]:
        counts: dict[str, int] = defaultdict(int)
        for record in self._snapshot(window):
            counts[record.provider_name] += 1
        return dict(counts)

    def get_cost_breakdown(self, window: timedelta) -> list[CostBreakdown]:
        records = self._snapshot(window)
        grand_total = sum((r.amount for r in records), Decimal("0"))

        totals: dict[str, Decimal] = defaultdict(Decimal)
        counts: dict[str, int] = defaultdict(int)
        for record in records:
            totals[record.provider_name] += record.amount
            counts[record.provider_name] += 1

        breakdown = [
            CostBreakdown(
                provider_name=name,
                total_cost=total,
                request_count=counts[name],
                average_cost_per_request=total / counts[name],
                percentage=(total / grand_total * 100) if grand_total else Decimal("0"),
            )
            for name, total in totals.items()
        ]
        return sorted(breakdown, key=lambda b: b.total_cost, reverse=True)

    def generate_cost_report(self, window: timedelta) -> CostReport:
        records = self._snapshot(window)
        total = sum((r.amount for r in records), Decimal("0"))

        by_provider: dict[str, Decimal] = defaultdict(Decimal)
        by_day: dict[date, Decimal] = defaultdict(Decimal)
        for record in records:
            by_provider[record.provider_name] += record.amount
            by_day[record.timestamp.date()] += record.amount

        report = CostReport(
            window=window,
            generated_at=self._now(),
            total_cost=total,
            total_requests=len(records),
            average_cost_per_request=total / len(records) if records else Decimal("0"),
            provider_breakdown=dict(by_provider),
            daily_breakdown=dict(by_day),
        )
        logger.info(
            "cost_report_generated",
            window_s=window.total_seconds(),
            total_cost=str(report.total_cost),
            total_requests=report.total_requests,
        )
        return report

    # ── Internals ────────────────────────────────────────────
    def _now(self) -> datetime:
        return self._clock().astimezone(timezone.utc)

    def _snapshot(self, window: timedelta) -> list[CostRecord]:
        now = self._now()
        cutoff = now - window
        with self._lock:
            records = list(self._records)
        return [r for r in records if cutoff <= r.timestamp <= now]

    def _prune(self) -> None:
        """Drop records past the retention period. Caller holds lock."""
        cutoff = self._now() - self._retention
        if self._records and self._records[0].timestamp < cutoff:
            self._records = [r for r in self._records if r.timestamp >= cutoff]

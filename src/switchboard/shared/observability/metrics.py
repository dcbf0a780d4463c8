"""Prometheus metrics for provider selection and execution."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


# ── Selection metrics ────────────────────────────────────────
PROVIDER_SELECTIONS = Counter(
    "switchboard_provider_selections_total",
    "Providers chosen by the selector",
    ["strategy", "provider"],
)

NO_SUITABLE_PROVIDER = Counter(
    "switchboard_no_suitable_provider_total",
    "Selections that found no eligible provider",
    ["strategy"],
)

# ── Pipeline metrics ─────────────────────────────────────────
PIPELINE_ATTEMPTS = Counter(
    "switchboard_pipeline_attempts_total",
    "Provider call attempts made by pipelines",
    ["pipeline", "provider", "outcome"],
)

PIPELINE_FALLBACKS = Counter(
    "switchboard_pipeline_fallbacks_total",
    "Pipelines that switched to their fallback provider",
    ["pipeline"],
)

PIPELINE_DURATION = Histogram(
    "switchboard_pipeline_duration_seconds",
    "End-to-end pipeline execution time",
    ["pipeline", "status"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)

# ── Cost metrics ─────────────────────────────────────────────
PROVIDER_COST_TOTAL = Counter(
    "switchboard_provider_cost_total",
    "Accumulated recorded cost per provider",
    ["provider"],
)

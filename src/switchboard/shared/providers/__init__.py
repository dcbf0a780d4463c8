"""Provider selection and resilient execution.

Capability filtering, selection strategies, cost accounting, health
tracking, and retry-with-fallback execution for interchangeable
provider backends.
"""

from switchboard.shared.providers.types import (
    BalancedWeights,
    CostRecord,
    HealthStatus,
    PipelineConfiguration,
    ProviderCapabilities,
    RequestDescriptor,
)
from switchboard.shared.providers.registry import PROVIDER_ALIASES, ProviderRegistry
from switchboard.shared.providers.cost import CostAnalyzer, CostBreakdown, CostReport
from switchboard.shared.providers.health import HealthTracker
from switchboard.shared.providers.strategies import SelectionPolicy, build_policy
from switchboard.shared.providers.selector import ProviderSelector
from switchboard.shared.providers.result import ExecutionResult
from switchboard.shared.providers.pipeline import ExecutionPipeline

__all__ = [
    "PROVIDER_ALIASES",
    "BalancedWeights",
    "CostAnalyzer",
    "CostBreakdown",
    "CostRecord",
    "CostReport",
    "ExecutionPipeline",
    "ExecutionResult",
    "HealthStatus",
    "HealthTracker",
    "PipelineConfiguration",
    "ProviderCapabilities",
    "ProviderRegistry",
    "ProviderSelector",
    "RequestDescriptor",
    "SelectionPolicy",
    "build_policy",
]

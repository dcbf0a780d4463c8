"""Capability-aware provider selection with retry and fallback."""

from switchboard.bootstrap import Switchboard, create_switchboard
from switchboard.domain import (
    Capability,
    ConfigurationError,
    NoSuitableProviderError,
    ProviderNotFoundError,
    SelectionStrategy,
    SwitchboardError,
    TransientExecutionError,
)
from switchboard.shared.providers import (
    ExecutionPipeline,
    ExecutionResult,
    PipelineConfiguration,
    ProviderCapabilities,
    ProviderRegistry,
    ProviderSelector,
    RequestDescriptor,
)

__all__ = [
    "Capability",
    "ConfigurationError",
    "ExecutionPipeline",
    "ExecutionResult",
    "NoSuitableProviderError",
    "PipelineConfiguration",
    "ProviderCapabilities",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "ProviderSelector",
    "RequestDescriptor",
    "SelectionStrategy",
    "Switchboard",
    "SwitchboardError",
    "TransientExecutionError",
    "create_switchboard",
]

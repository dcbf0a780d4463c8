"""Domain enums and the exception hierarchy."""

from switchboard.domain.enums import AttemptOutcome, Capability, SelectionStrategy
from switchboard.domain.exceptions import (
    ConfigurationError,
    NoSuitableProviderError,
    ProviderNotFoundError,
    SwitchboardError,
    TransientExecutionError,
)

__all__ = [
    "AttemptOutcome",
    "Capability",
    "ConfigurationError",
    "NoSuitableProviderError",
    "ProviderNotFoundError",
    "SelectionStrategy",
    "SwitchboardError",
    "TransientExecutionError",
]

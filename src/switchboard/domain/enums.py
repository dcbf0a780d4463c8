"""Domain enumerations for provider selection."""

from __future__ import annotations

import enum


class Capability(str, enum.Enum):
    """Optional feature a provider may or may not support."""

    LANGUAGE_DETECTION = "language_detection"
    HANDWRITING = "handwriting"
    TABLE_DETECTION = "table_detection"
    FORM_DETECTION = "form_detection"
    STREAMING = "streaming"
    CUSTOM_MODELS = "custom_models"
    VISION = "vision"
    FUNCTION_CALLING = "function_calling"
    LONG_CONTEXT = "long_context"


class SelectionStrategy(str, enum.Enum):
    """How the selector ranks eligible providers."""

    COST_OPTIMIZED = "cost_optimized"
    PERFORMANCE_OPTIMIZED = "performance_optimized"
    CAPABILITY_OPTIMIZED = "capability_optimized"
    RELIABILITY_OPTIMIZED = "reliability_optimized"
    BALANCED = "balanced"
    CONFIGURATION = "configuration"


class AttemptOutcome(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"

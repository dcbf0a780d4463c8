"""Switchboard — Application Configuration."""

from __future__ import annotations

import enum
from datetime import timedelta
from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from switchboard.domain.enums import SelectionStrategy
from switchboard.shared.providers.types import BalancedWeights, PipelineConfiguration


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SWITCHBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "switchboard"
    app_env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # ── Selection ────────────────────────────────────────────
    selection_strategy: SelectionStrategy = SelectionStrategy.BALANCED
    balanced_speed_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    balanced_cost_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    balanced_reliability_weight: float = Field(default=0.3, ge=0.0, le=1.0)

    # ── Pipeline ─────────────────────────────────────────────
    default_provider: str | None = None
    default_model: str | None = None
    fallback_provider: str | None = None
    fallback_model: str | None = None
    max_retries: int = Field(default=3, ge=0)
    provider_timeout_seconds: float | None = Field(default=None, gt=0)
    backoff_base_seconds: float = Field(default=1.0, ge=0)

    # ── Cost accounting ──────────────────────────────────────
    cost_surcharge_per_mib: Decimal = Field(default=Decimal("0.0001"), ge=0)
    cost_surcharge_threshold_mib: Decimal = Field(default=Decimal("1"), ge=0)
    cost_retention_days: int = Field(default=30, ge=1)

    # ── Health ───────────────────────────────────────────────
    health_cache_ttl_seconds: float = Field(default=300.0, gt=0)

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def health_cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.health_cache_ttl_seconds)

    @property
    def cost_retention(self) -> timedelta:
        return timedelta(days=self.cost_retention_days)

    def balanced_weights(self) -> BalancedWeights:
        return BalancedWeights(
            speed=self.balanced_speed_weight,
            cost=self.balanced_cost_weight,
            reliability=self.balanced_reliability_weight,
        )

    def pipeline_configuration(self, **overrides: Any) -> PipelineConfiguration:
        values: dict[str, Any] = {
            "provider": self.default_provider,
            "model": self.default_model,
            "fallback_provider": self.fallback_provider,
            "fallback_model": self.fallback_model,
            "max_retries": self.max_retries,
            "timeout_seconds": self.provider_timeout_seconds,
        }
        values.update(overrides)
        return PipelineConfiguration(**values)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("default_provider", "fallback_provider", "default_model", "fallback_model")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def _validate_selection(self) -> Settings:
        total = (
            self.balanced_speed_weight
            + self.balanced_cost_weight
            + self.balanced_reliability_weight
        )
        if abs(total - 1.0) > 1e-9:
            raise ValueError("balanced weights must sum to 1.0")
        if (
            self.selection_strategy == SelectionStrategy.CONFIGURATION
            and not self.default_provider
        ):
            raise ValueError(
                "default_provider must be set when selection_strategy is 'configuration'"
            )
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)

"""
Centralized configuration for fieldlineage.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (FIELDLINEAGE_*)
3. .env file
4. Default values

Example:
    from fieldlineage.config import get_config

    config = get_config()
    print(config.compute_summaries)  # From FIELDLINEAGE_COMPUTE_SUMMARIES or default

    # Override at runtime
    config = get_config(log_format="text")
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FieldLineageConfig(BaseSettings):
    """
    Central configuration for fieldlineage.

    All settings can be overridden via environment variables
    prefixed with FIELDLINEAGE_.

    Example:
        export FIELDLINEAGE_COMPUTE_SUMMARIES=false
        export FIELDLINEAGE_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="FIELDLINEAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = Field(
        default="fieldlineage",
        description="Service name used in structured log records",
    )

    # Snapshot construction
    compute_summaries: bool = Field(
        default=True,
        description="Compute destination fields and summaries at construction",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level for the fieldlineage logger",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format (json for log pipelines, text for console)",
    )

    # Telemetry
    emit_span_events: bool = Field(
        default=True,
        description="Attach lineage events to the current OpenTelemetry span",
    )

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def lowercase(cls, v: object) -> object:
        """Accept DEBUG/Json style values from the environment."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


# Global singleton
_config: Optional[FieldLineageConfig] = None


def get_config(**overrides) -> FieldLineageConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        FieldLineageConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = FieldLineageConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None

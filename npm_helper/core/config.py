"""
Core configuration module for the npm helper MCP server.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the NPM_HELPER_ prefix.

Pattern: Pydantic BaseSettings with an lru_cache singleton accessor
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the NPM_HELPER_ prefix for environment variables.
    Example: NPM_HELPER_REQUESTS_PER_SECOND=4
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="npm-helper-mcp",
        description="Name advertised to MCP clients and used in logs",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level written to stderr",
    )
    log_json: bool = Field(
        default=True,
        description="Render log events as JSON (console rendering otherwise)",
    )

    # =========================================================================
    # Upstream Endpoints
    # =========================================================================
    registry_url: str = Field(
        default="https://registry.npmjs.org",
        description="Base URL of the npm registry JSON API",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent sent with every upstream request",
    )

    # =========================================================================
    # Pacing
    # =========================================================================
    requests_per_second: float = Field(
        default=2.0,
        gt=0.0,
        le=100.0,
        description="Registry request budget; spacing is 1/requests_per_second",
    )

    # =========================================================================
    # Timeouts (seconds)
    # =========================================================================
    search_timeout_seconds: float = Field(default=15.0, gt=0.0, le=300.0)
    versions_timeout_seconds: float = Field(default=15.0, gt=0.0, le=300.0)
    details_timeout_seconds: float = Field(default=20.0, gt=0.0, le=300.0)
    content_timeout_seconds: float = Field(default=20.0, gt=0.0, le=300.0)
    tool_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=3600.0,
        description="Budget for a whole tool invocation, queueing included",
    )

    # =========================================================================
    # Result Shaping Bounds
    # =========================================================================
    max_listed_versions: int = Field(default=15, ge=1)
    max_detail_versions: int = Field(default=10, ge=1)
    max_time_entries: int = Field(default=10, ge=0)
    max_readme_chars: int = Field(default=4000, ge=1)
    max_search_results: int = Field(
        default=250,
        ge=1,
        description="Largest page size accepted by the registry search endpoint",
    )

    # =========================================================================
    # Memory Housekeeping
    # =========================================================================
    memory_threshold_mb: int = Field(
        default=200,
        ge=1,
        description="Resident memory above which a gc.collect() pass is requested",
    )
    memory_check_interval_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="Interval of the background memory monitor",
    )
    memory_reclaim_cooldown_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="Minimum time between two threshold-triggered collections",
    )

    # =========================================================================
    # npm-check-updates
    # =========================================================================
    ncu_command: str = Field(
        default="npx --yes npm-check-updates",
        description="Command line used to launch npm-check-updates",
    )

    model_config = {
        "env_prefix": "NPM_HELPER_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("registry_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL scheme and strip the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def validate_timeout_budget(self) -> "Settings":
        """The invocation budget must leave room for the slowest network call."""
        slowest = max(
            self.search_timeout_seconds,
            self.versions_timeout_seconds,
            self.details_timeout_seconds,
            self.content_timeout_seconds,
        )
        if self.tool_timeout_seconds <= slowest:
            raise ValueError(
                f"tool_timeout_seconds ({self.tool_timeout_seconds}) must exceed "
                f"the slowest network timeout ({slowest})"
            )
        return self

    @property
    def min_request_interval(self) -> float:
        """Minimum spacing in seconds between two registry requests."""
        return 1.0 / self.requests_per_second


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()

"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class StoreConfig(BaseModel):
    """Identifier store retention (YAML section: store.*)."""

    max_age_seconds: float = Field(
        default=86400.0,
        description="Entries older than this are evicted by the sweep. Default 24h.",
    )
    sweep_interval_seconds: float = Field(
        default=3600.0,
        description="Wall-clock interval between sweeps. Default hourly.",
    )

    @field_validator("max_age_seconds", "sweep_interval_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v


class SearchConfig(BaseModel):
    """Fan-out search behaviour (YAML section: search.*)."""

    max_results: int = Field(
        default=20,
        description="Cap on merged results across all sources.",
    )
    concurrent: bool = Field(
        default=True,
        description="Query sources in parallel (True) or one after another.",
    )
    source_timeout_seconds: Optional[float] = Field(
        default=30.0,
        description="Per-source search timeout. None disables the limit.",
    )

    @field_validator("max_results")
    @classmethod
    def _validate_max_results(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_results must be > 0")
        return v

    @field_validator("source_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("source_timeout_seconds must be > 0")
        return v


class SourcesConfig(BaseModel):
    """Which built-in sources to register (YAML section: sources.*)."""

    enabled: Optional[list[str]] = Field(
        default=None,
        description="Source names to register (case-insensitive). None = all.",
    )
    base_urls: dict[str, str] = Field(
        default_factory=dict,
        description="Per-source base URL override, keyed by source name.",
    )

    @field_validator("enabled", mode="before")
    @classmethod
    def _split_csv(cls, v: Any) -> Any:
        # ENV values arrive as "VegaMovies,Bollyflix".
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class AppConfig(BaseModel):
    """Validated runtime configuration.

    Built once by ``load_config`` and treated as read-only afterwards. HTTP
    and logging settings are flat fields that also accept the sectioned
    config.yaml spelling (``http.timeout_seconds``); store, search and sources
    stay nested models.
    """

    # General
    app_name: str = Field(default="cinestream", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP fetcher (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request timeout in seconds.",
    )
    http_max_redirects: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "http_max_redirects",
            AliasPath("http", "max_redirects"),
        ),
        description="Maximum number of redirect hops followed per request.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser-like User-Agent sent to content sites.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_max_redirects")
    @classmethod
    def _validate_max_redirects(cls, v: int) -> int:
        if v < 0:
            raise ValueError("http_max_redirects must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Inverse of the YAML layout: the same sections config.yaml uses."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "max_redirects": self.http_max_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "store": self.store.model_dump(),
            "search": self.search.model_dump(),
            "sources": self.sources.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """``CINESTREAM_*`` variables, one per flat config key.

    Unset variables stay ``None`` and are left out of the merge, so an empty
    environment changes nothing. Examples:

    - CINESTREAM_HTTP_TIMEOUT_SECONDS
    - CINESTREAM_LOG_LEVEL
    - CINESTREAM_STORE_MAX_AGE_SECONDS
    - CINESTREAM_SOURCES_ENABLED=VegaMovies,Bollyflix
    """

    model_config = SettingsConfigDict(
        env_prefix="CINESTREAM_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_max_redirects: Optional[int] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    store_max_age_seconds: Optional[float] = None
    store_sweep_interval_seconds: Optional[float] = None

    search_max_results: Optional[int] = None
    search_concurrent: Optional[bool] = None
    search_source_timeout_seconds: Optional[float] = None

    # Comma separated; split by SourcesConfig.
    sources_enabled: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Variables that were actually set."""
        return self.model_dump(exclude_none=True)

"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
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

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
UserRole = Literal["user", "vip", "admin", "owner"]

DEFAULT_ADULT_KEYWORDS: tuple[str, ...] = (
    "成人",
    "情色",
    "三级",
    "限制级",
    "R级",
    "18+",
    "成人版",
    "伦理",
)


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class SearchConfig(BaseModel):
    """Fan-out, pagination and content-policy settings for searches."""

    max_pages: int = Field(
        default=5,
        description="Site-wide upper bound on pages fetched per source.",
    )
    long_query_threshold: int = Field(
        default=10,
        description="Queries longer than this many characters count as precise.",
    )
    long_query_max_pages: int = Field(
        default=2,
        description="Page cap for precise (long) queries.",
    )
    short_query_max_pages: int = Field(
        default=3,
        description="Page cap for short queries.",
    )
    concurrency_limit: int = Field(
        default=3,
        description="Max sources searched at the same time.",
    )
    retry_attempts: int = Field(
        default=1,
        description="Retries per upstream request on network error or non-2xx.",
    )
    retry_backoff_seconds: float = Field(
        default=1.0,
        description="Linear backoff unit: wait backoff * attempt before a retry.",
    )
    adult_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ADULT_KEYWORDS),
        description="Case-insensitive substrings that mark an item as adult.",
    )
    strict_episode_patterns: dict[str, str] = Field(
        default_factory=lambda: {
            "ffzy": r"\$(https?://[^\"'\s]+?/\d{8}/\d+_[a-f0-9]+/index\.m3u8)",
        },
        description="Per-source stricter stream pattern for HTML detail pages.",
    )

    @field_validator("max_pages", "concurrency_limit", "long_query_max_pages")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def _validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retry_attempts must be >= 0")
        return v


class CacheConfig(BaseModel):
    """In-memory search cache configuration."""

    ttl_seconds: int = Field(
        default=300,
        description="Lifetime of a cached search answer (seconds).",
    )
    max_entries: int = Field(
        default=1000,
        description="Soft cap on cached search answers.",
    )

    @field_validator("ttl_seconds", "max_entries")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v


class SourceEntry(BaseModel):
    """One source as written in the config file."""

    key: str
    name: str
    api: str
    detail: Optional[str] = None
    is_adult: bool = False
    disabled: bool = False
    sort_order: int = 0


class SourcesConfig(BaseModel):
    backend: Literal["memory", "diskcache"] = Field(
        default="memory",
        description="Source store: 'memory' (config only) or 'diskcache' (SQLite).",
    )
    directory: Path = Field(
        default=Path("./.cache/vodarr/sources"),
        alias="dir",
        description="Diskcache directory for the source store.",
    )
    entries: list[SourceEntry] = Field(
        default_factory=list,
        description="Sources seeded from configuration.",
    )

    model_config = {"populate_by_name": True}

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("entries")
    @classmethod
    def _validate_unique_keys(cls, v: list[SourceEntry]) -> list[SourceEntry]:
        seen: set[str] = set()
        for entry in v:
            if entry.key in seen:
                raise ValueError(f"duplicate source key: {entry.key!r}")
            seen.add(entry.key)
        return v


class UserEntry(BaseModel):
    role: UserRole = "user"
    filter_adult_content: bool = True


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/search/cache/sources/users).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="vodarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=6.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout for upstream search requests (seconds).",
    )
    http_detail_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_detail_timeout_seconds",
            AliasPath("http", "detail_timeout_seconds"),
        ),
        description="Timeout for upstream detail requests (seconds).",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="vodarr/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
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

    search: SearchConfig = Field(default_factory=SearchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    users: dict[str, UserEntry] = Field(
        default_factory=dict,
        description="Known callers with role and content-filter preference.",
    )

    @field_validator("http_timeout_seconds", "http_detail_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Supported env var examples (flat, explicit):
    - VODARR_HTTP_TIMEOUT_SECONDS
    - VODARR_LOG_LEVEL
    - VODARR_SEARCH_MAX_PAGES
    - VODARR_CACHE_TTL_SECONDS
    - VODARR_SOURCES_BACKEND
    """

    model_config = SettingsConfigDict(
        env_prefix="VODARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_detail_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    search_max_pages: Optional[int] = None
    search_concurrency_limit: Optional[int] = None

    cache_ttl_seconds: Optional[int] = None
    cache_max_entries: Optional[int] = None

    sources_backend: Optional[Literal["memory", "diskcache"]] = None
    sources_dir: Optional[Path] = None

    @field_validator("sources_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)

"""Pydantic configuration models with validation."""

from __future__ import annotations

import shlex
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
VariantName = Literal["SUB", "DUB"]


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


def _split_command(value: Any) -> Any:
    """Accept the scraper command as argv list or as a shell-style string."""
    if isinstance(value, str):
        return shlex.split(value)
    return value


class ScraperConfig(BaseModel):
    """External scraper command invocation."""

    command: list[str] = Field(
        default_factory=lambda: ["python3", "animeunity_scraper.py"],
        description="Argv prefix of the scraper; the verb and its flags are appended.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Per-call timeout; the child process is killed when exceeded.",
    )
    cwd: Optional[Path] = Field(
        default=None,
        description="Working directory for the scraper process.",
    )

    @field_validator("command", mode="before")
    @classmethod
    def _validate_command(cls, v: Any) -> Any:
        return _split_command(v)

    @field_validator("command")
    @classmethod
    def _require_command(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("scraper.command must not be empty")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("scraper.timeout_seconds must be > 0")
        return v

    @field_validator("cwd", mode="before")
    @classmethod
    def _validate_cwd(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)


class ProviderConfig(BaseModel):
    """Upstream anime provider behaviour (search variants, labels, limits)."""

    enabled: bool = Field(
        default=True,
        description="Process-wide default for serving anime streams.",
    )
    label: str = Field(
        default="AnimeUnity",
        description="Stream name shown in the client.",
    )
    dub_marker: str = Field(
        default="(ita)",
        description="Case-insensitive substring marking a dubbed listing name.",
    )
    dub_label: str = Field(
        default="ITA",
        description="Language label used in titles for dubbed listings.",
    )
    sub_label: str = Field(
        default="SUB",
        description="Language label used in titles for subtitled listings.",
    )
    variants: list[VariantName] = Field(
        default_factory=lambda: ["SUB", "DUB"],
        description="Search variants issued in parallel, in merge order.",
    )
    namespaces: list[Literal["kitsu", "imdb"]] = Field(
        default_factory=lambda: ["kitsu"],
        description="Catalog id namespaces served by the provider.",
    )
    max_concurrent_versions: int = Field(
        default=4,
        description="Max versions resolved in parallel per request.",
    )
    version_timeout_seconds: float = Field(
        default=60.0,
        description="Budget for one version's episode lookup + stream resolve.",
    )

    @field_validator("dub_marker")
    @classmethod
    def _validate_marker(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("provider.dub_marker must not be blank")
        return v

    @field_validator("variants")
    @classmethod
    def _validate_variants(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("provider.variants must not be empty")
        return list(dict.fromkeys(v))

    @field_validator("max_concurrent_versions")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("provider.max_concurrent_versions must be >= 1")
        return v


class ProxyConfig(BaseModel):
    """MediaFlow proxy defaults (overridable per request)."""

    url: str = Field(default="", description="Proxy base URL.")
    password: str = Field(default="", description="Proxy api_password.")
    both_links: bool = Field(
        default=False,
        description="Emit the direct URL next to the proxied one.",
    )
    include_embed: bool = Field(
        default=False,
        description="Emit the embed page URL as an extra stream.",
    )


class AddonManifestConfig(BaseModel):
    """Stremio manifest overrides."""

    id: str = "org.stremio.vixgate"
    name: str = "VixGate"
    description: str = "Anime streams resolved from Kitsu ids"
    version: str = "0.1.0"
    logo: str = ""


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/scraper/...).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="vixgate", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP client for metadata lookups (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for metadata APIs.",
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
        default="VixGate/0.1.0",
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

    # Cache (YAML section: cache.*)
    cache_dir: Path = Field(
        default=Path("./.cache/vixgate"),
        validation_alias=AliasChoices(
            "cache_dir",
            AliasPath("cache", "dir"),
        ),
        description="Diskcache directory.",
    )
    cache_ttl_seconds: int = Field(
        default=86_400,
        validation_alias=AliasChoices(
            "cache_ttl_seconds",
            AliasPath("cache", "ttl_seconds"),
        ),
        description="TTL for cached metadata titles (seconds).",
    )
    cache_max_concurrent: int = Field(
        default=10,
        validation_alias=AliasChoices(
            "cache_max_concurrent",
            AliasPath("cache", "max_concurrent"),
        ),
        description="Max parallel cache ops (semaphore limit).",
    )

    # TMDB API key (enables tt* lookups when "imdb" is a served namespace)
    tmdb_api_key: str | None = Field(
        default=None,
        description="TMDB API key for IMDb id title lookup.",
    )

    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    addon: AddonManifestConfig = Field(default_factory=AddonManifestConfig)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "dir": str(self.cache_dir),
                "ttl_seconds": self.cache_ttl_seconds,
                "max_concurrent": self.cache_max_concurrent,
            },
            "scraper": self.scraper.model_dump(mode="json"),
            "provider": self.provider.model_dump(),
            "proxy": self.proxy.model_dump(),
            "addon": self.addon.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read VIXGATE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - VIXGATE_LOG_LEVEL
    - VIXGATE_SCRAPER_COMMAND ("python3 /opt/scraper.py")
    - VIXGATE_PROXY_URL (or legacy MFP_URL)
    - VIXGATE_PROXY_PASSWORD (or legacy MFP_PSW)
    - VIXGATE_PROVIDER_ENABLED (or legacy ANIMEUNITY_ENABLED)
    - VIXGATE_PROXY_BOTH_LINKS (or legacy BOTHLINK)
    """

    model_config = SettingsConfigDict(
        env_prefix="VIXGATE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_dir: Optional[Path] = None
    cache_ttl_seconds: Optional[int] = None

    scraper_command: Optional[str] = None
    scraper_timeout_seconds: Optional[float] = None

    provider_enabled: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("VIXGATE_PROVIDER_ENABLED", "ANIMEUNITY_ENABLED"),
    )
    proxy_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VIXGATE_PROXY_URL", "MFP_URL"),
    )
    proxy_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VIXGATE_PROXY_PASSWORD", "MFP_PSW"),
    )
    proxy_both_links: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("VIXGATE_PROXY_BOTH_LINKS", "BOTHLINK"),
    )

    tmdb_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VIXGATE_TMDB_API_KEY", "TMDB_API_KEY"),
    )

    @field_validator("cache_dir", mode="before")
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

"""Configuration management for NoVague.

This module defines the configuration schema using Pydantic settings,
supporting TOML files, environment variables, and programmatic overrides.

Configuration loading priority (highest to lowest):
1. Programmatic overrides and TOML values (both reach NovagueConfig as
   constructor arguments)
2. Environment variables (NOVAGUE_* prefix)
3. Default values defined in this module

Example TOML configuration:
    [generation]
    provider = "anthropic"
    model = "claude-sonnet-4-5"
    api_key = "sk-..."

    [pipeline]
    validator_injection_rate = 0.1
    validator_seed = 42

Example environment variable override:
    NOVAGUE_GENERATION__API_KEY="sk-..."
    NOVAGUE_PIPELINE__MOCK_DELAY_SECONDS=1.5
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomli
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_PROVIDERS = {"openai", "anthropic", "google", "custom"}


class GenerationConfig(BaseSettings):
    """Generation backend configuration.

    Without an api_key every stage runs on the deterministic mock generators.

    Attributes:
        provider: Provider selector (openai, anthropic, google, custom)
        model: Model identifier passed to the provider
        api_key: Provider credential
        base_url: Override for the provider API root (required for custom)
        temperature: Sampling temperature
        max_tokens: Maximum output tokens per generation
        timeout_seconds: HTTP request timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="NOVAGUE_GENERATION__",
        extra="forbid",
    )

    provider: str = Field(default="openai")
    model: str = Field(default="gpt-4o-mini")
    api_key: SecretStr | None = Field(default=None)
    base_url: str | None = Field(default=None)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4000, ge=1, le=200000)
    timeout_seconds: int = Field(default=60, ge=1, le=600)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Validate provider is recognized."""
        v_lower = v.lower()
        if v_lower not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Invalid provider: {v}. Must be one of {SUPPORTED_PROVIDERS}"
            )
        return v_lower

    @property
    def has_credential(self) -> bool:
        """Whether a non-empty API key is configured."""
        return self.api_key is not None and bool(self.api_key.get_secret_value())


class PipelineConfig(BaseSettings):
    """Design pipeline configuration.

    Attributes:
        mock_delay_seconds: Simulated latency applied on the mock path
        validator_injection_rate: Probability of injecting a synthetic issue
            per feature component during validation (0 disables injection)
        validator_seed: Seed for the injection random generator
    """

    model_config = SettingsConfigDict(
        env_prefix="NOVAGUE_PIPELINE__",
        extra="forbid",
    )

    mock_delay_seconds: float = Field(default=0.0, ge=0.0, le=30.0)
    validator_injection_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    validator_seed: int | None = Field(default=None)


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json or console)
        file: Optional log file path (None for stdout only)
        rotation_size_mb: Log file rotation size in megabytes
        retention_count: Number of rotated log files to keep
    """

    model_config = SettingsConfigDict(
        env_prefix="NOVAGUE_LOGGING__",
        extra="forbid",
    )

    level: str = Field(default="INFO")
    format: str = Field(default="json")
    file: Path | None = Field(default=None)
    rotation_size_mb: int = Field(default=50, ge=1, le=1000)
    retention_count: int = Field(default=10, ge=1, le=100)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format is recognized."""
        valid_formats = {"json", "console"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower


class WebConfig(BaseSettings):
    """Web API configuration.

    Attributes:
        host: Bind host address
        port: Bind port number
        cors_origins: Allowed CORS origins
    """

    model_config = SettingsConfigDict(
        env_prefix="NOVAGUE_WEB__",
        extra="forbid",
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])


class NovagueConfig(BaseSettings):
    """Root configuration for NoVague.

    Aggregates all subsystem configurations. Configuration can be loaded from:
    1. TOML files (using load_config function)
    2. Environment variables (NOVAGUE_* prefix)
    3. Direct instantiation with keyword arguments

    Environment variable format for nested config:
        NOVAGUE_<SECTION>__<KEY>=value

    Example:
        NOVAGUE_GENERATION__PROVIDER="anthropic"
        NOVAGUE_WEB__PORT=9000
    """

    model_config = SettingsConfigDict(
        env_prefix="NOVAGUE_",
        env_nested_delimiter="__",
        extra="forbid",
    )

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


def load_config(config_path: Path | None = None) -> NovagueConfig:
    """Load configuration from TOML file with environment variable overrides.

    Configuration search order (first found is used):
    1. config_path if explicitly provided
    2. ./novague.toml (current directory)
    3. ~/.config/novague/config.toml (user config directory)

    Args:
        config_path: Explicit path to TOML config file. If None, searches
                    default locations.

    Returns:
        NovagueConfig: Fully resolved configuration instance.

    Raises:
        FileNotFoundError: If config_path is explicitly provided but doesn't exist.
        ValueError: If TOML file contains invalid configuration.
    """
    toml_data: dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        selected_path: Path | None = config_path
    else:
        search_paths = [
            Path.cwd() / "novague.toml",
            Path.home() / ".config" / "novague" / "config.toml",
        ]
        selected_path = next((path for path in search_paths if path.exists()), None)

    if selected_path is not None:
        with open(selected_path, "rb") as f:
            try:
                toml_data = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {selected_path}: {e}") from e

    # Environment variables fill the keys the TOML data leaves unset
    try:
        return NovagueConfig(**toml_data)
    except Exception as e:
        if selected_path:
            raise ValueError(f"Invalid configuration in {selected_path}: {e}") from e
        raise ValueError(f"Invalid configuration: {e}") from e

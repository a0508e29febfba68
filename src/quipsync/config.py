"""
Typed application configuration using Pydantic.

Secrets come from the environment (populated from .env via load_dotenv);
everything else comes from YAML, defaulting to the packaged
default_config.yaml.

Usage:
    from quipsync.config import get_config, AppConfig

    config = get_config()
    config.anthropic.api_key
    config.completion.for_mode("script").max_output_tokens

    # Explicit file + dot-notation overrides (from the CLI)
    config = AppConfig.from_yaml("config.yaml", overrides={"server": {"port": 9000}})
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"


# =============================================================================
# Sections
# =============================================================================

class AnthropicConfig(BaseModel):
    """Model service credentials and model selection."""
    api_key: str = Field(default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", ""))
    model: str = Field(default_factory=lambda: os.environ.get("CLAUDE_MODEL", ""))
    timeout: float = 120.0

    model_config = ConfigDict(extra="allow")


class ModeConfig(BaseModel):
    """Generation defaults for one request mode."""
    max_output_tokens: int = Field(1600, gt=0)
    temperature: float = Field(0.7, ge=0.0, le=1.0)
    max_retries: int = Field(2, ge=0)

    model_config = ConfigDict(extra="allow")


class CompletionConfig(BaseModel):
    """Per-mode generation defaults."""
    script: ModeConfig = Field(default_factory=lambda: ModeConfig(max_output_tokens=1800, temperature=0.7))
    style: ModeConfig = Field(default_factory=lambda: ModeConfig(max_output_tokens=1200, temperature=0.5))
    style_analysis: ModeConfig = Field(default_factory=lambda: ModeConfig(max_output_tokens=1200, temperature=0.6))

    model_config = ConfigDict(extra="allow")

    def for_mode(self, mode: str) -> ModeConfig:
        return getattr(self, mode)


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = ConfigDict(extra="allow")


class StoreConfig(BaseModel):
    """Style-profile store settings."""
    path: str = Field(default_factory=lambda: os.environ.get("QUIPSYNC_STYLE_STORE", "data/styles.jsonl"))

    model_config = ConfigDict(extra="allow")


class ExtractConfig(BaseModel):
    """URL text-extraction settings."""
    timeout: float = 30.0
    user_agent: str = "Mozilla/5.0 (compatible; QuipSync Extractor/1.0)"
    max_chars: int = 4000

    model_config = ConfigDict(extra="allow")


class TelemetryConfig(BaseModel):
    """Logging settings."""
    level: str = "INFO"

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Main Config
# =============================================================================

class AppConfig(BaseModel):
    """
    Application configuration with typed access.

    Usage:
        config = AppConfig.from_yaml("config.yaml")
        config.anthropic.model
        config.server.port
    """
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    completion: CompletionConfig = Field(default_factory=CompletionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    # Keep raw dict for any custom/unknown keys
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_yaml(cls, config_path: str | Path | None = None, overrides: dict | None = None) -> "AppConfig":
        """Load configuration from YAML file with optional overrides.

        Args:
            config_path: Path to YAML config file (packaged default if None)
            overrides: Optional dict of overrides (supports nested keys)
        """
        path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        return cls.from_dict(raw_config, overrides)

    @classmethod
    def from_dict(cls, config_dict: dict, overrides: dict | None = None) -> "AppConfig":
        """Load configuration from dict with optional overrides."""
        if overrides:
            config_dict = cls._deep_merge(config_dict, overrides)
        # Empty YAML values mean "use the environment / default"
        config_dict = _drop_nulls(config_dict)
        instance = cls.model_validate(config_dict)
        instance.raw = config_dict
        return instance

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Deep merge override dict into base dict."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = AppConfig._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def with_overrides(self, overrides: dict) -> "AppConfig":
        """Return new config with overrides applied."""
        merged = self._deep_merge(self.raw, overrides)
        return AppConfig.from_dict(merged)

    def to_dict(self) -> dict:
        """Export configuration as dict (API key masked)."""
        data = self.model_dump(exclude={"raw"})
        if data["anthropic"].get("api_key"):
            data["anthropic"]["api_key"] = "***"
        return data


def _drop_nulls(d: dict) -> dict:
    result = {}
    for key, value in d.items():
        if value is None:
            continue
        result[key] = _drop_nulls(value) if isinstance(value, dict) else value
    return result


# =============================================================================
# Process-wide instance
# =============================================================================

_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get cached config or load the packaged default."""
    global _config
    if _config is None:
        _config = AppConfig.from_yaml()
    return _config


def set_config(config: AppConfig) -> AppConfig:
    """Install an explicitly built config (CLI overrides, tests)."""
    global _config
    _config = config
    return _config


def reset_config() -> None:
    """Forget the cached config (mainly for testing)."""
    global _config
    _config = None


__all__ = [
    "AnthropicConfig",
    "ModeConfig",
    "CompletionConfig",
    "ServerConfig",
    "StoreConfig",
    "ExtractConfig",
    "TelemetryConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "get_config",
    "set_config",
    "reset_config",
]

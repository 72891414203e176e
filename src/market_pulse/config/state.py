"""
Unified configuration state management.

Single source of truth for application configuration, combining hierarchical
YAML files with environment overrides, type validation, and sensible defaults.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("postgresql://", "postgres://", "sqlite://")


# =============================================================================
# PYDANTIC MODELS - Type-Safe Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection and tuning configuration."""

    model_config = ConfigDict(extra="allow")

    url: str = Field(default="sqlite:///./data/pulse.db")
    pool_size: int = Field(default=10, ge=1, le=500)
    command_timeout: float = Field(default=10.0, gt=0, le=300)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if v.startswith(SUPPORTED_SCHEMES):
            return v
        raise ValueError(
            "Database URL must start with one of: " + ", ".join(SUPPORTED_SCHEMES)
        )

    @property
    def backend(self) -> str:
        return "sqlite" if self.url.startswith("sqlite://") else "postgresql"


class ApiConfig(BaseModel):
    """HTTP surface and query window settings."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(default="Market Pulse API")
    default_limit: int = Field(default=100, ge=1)
    max_limit: int = Field(default=1000, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="allow")

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)


class ConfigState(BaseModel):
    """
    Root configuration state - single source of truth for all app config.
    """

    model_config = ConfigDict(extra="allow")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    env: str = Field(default="dev")
    config_dir: str = Field(default="./config")


# =============================================================================
# CONFIG LOADER - Clean, Validated Loading
# =============================================================================


class ConfigLoader:
    """
    Load and validate configuration from hierarchical YAML files.

    Merges:
      1. Global defaults (model defaults)
      2. YAML files from config_dir
      3. Environment-specific YAML (env/<env>.yaml)
      4. Environment variable overrides
    """

    CONFIG_FILES = ("database.yaml", "api.yaml", "logging.yaml")

    def __init__(self, config_dir: str = "./config", env: str | None = None):
        self.config_dir = Path(config_dir)
        self._yaml_cache: dict[Path, Any] = {}
        self.env = env or os.getenv("PULSE_ENV", "dev")

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file with caching."""
        if path in self._yaml_cache:
            return self._yaml_cache[path]

        if not path.exists():
            logger.debug(f"Config file not found (using defaults): {path}")
            return {}

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        self._yaml_cache[path] = data
        logger.debug(f"Loaded config: {path}")
        return data

    def _apply_env_overrides(self, config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config."""
        if db_url := os.getenv("PULSE_DATABASE_URL"):
            config.setdefault("database", {})["url"] = db_url

        if timeout := os.getenv("PULSE_DB_TIMEOUT"):
            config.setdefault("database", {})["command_timeout"] = float(timeout)

        if max_limit := os.getenv("PULSE_MAX_LIMIT"):
            config.setdefault("api", {})["max_limit"] = int(max_limit)

        if log_level := os.getenv("LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level

        if json_logs := os.getenv("LOG_JSON"):
            config.setdefault("logging", {})["json_logs"] = json_logs.lower() in (
                "1",
                "true",
                "yes",
            )

        return config

    def _merge_dicts(self, base: dict, override: dict) -> dict:
        """Deep merge override into base dict."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def load(self) -> ConfigState:
        """
        Load complete configuration state.

        Returns:
            ConfigState: Validated configuration object

        Raises:
            pydantic.ValidationError: If configuration is invalid
        """
        logger.info(f"Loading configuration from {self.config_dir} (env: {self.env})")

        config: dict[str, Any] = {}

        for config_file in self.CONFIG_FILES:
            file_config = self._load_yaml(self.config_dir / config_file)
            config = self._merge_dicts(config, file_config)

        env_config = self._load_yaml(self.config_dir / "env" / f"{self.env}.yaml")
        config = self._merge_dicts(config, env_config)

        config = self._apply_env_overrides(config)

        try:
            state = ConfigState(env=self.env, config_dir=str(self.config_dir), **config)
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        logger.info(
            f"Configuration loaded: backend={state.database.backend}, "
            f"max_limit={state.api.max_limit}, log_level={state.logging.level}"
        )
        return state


def get_config(config_dir: str | None = None) -> ConfigState:
    """
    Load and return the configuration state.

    Args:
        config_dir: Override config directory. Defaults to $PULSE_CONFIG_DIR or ./config
    """
    if config_dir is None:
        config_dir = os.getenv("PULSE_CONFIG_DIR", "./config")
        if not Path(config_dir).exists():
            logger.warning(f"Config directory not found at {config_dir}, using defaults")

    return ConfigLoader(config_dir=config_dir).load()

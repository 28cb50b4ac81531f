"""tradebook.core.config

Two config surfaces only:
1) `config/default.yaml`
2) Environment variables (`TRADEBOOK_` prefix, `__` for nesting)

Everything else is derived.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tradebook.core.exceptions import ConfigError

UnsupportedStrategyPolicy = Literal["raise", "hold"]


class BacktestSettings(BaseModel):
    initial_capital: float = 10000.0
    commission: float = 0.001  # fraction per leg, 0.001 = 0.1%

    # What to do with a strategy kind that has no signal generator.
    unsupported_strategy: UnsupportedStrategyPolicy = "raise"

    # Force-close a position still open on the last candle.
    close_open_position: bool = False

    @field_validator("initial_capital")
    @classmethod
    def capital_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("initial_capital must be > 0")
        return v

    @field_validator("commission")
    @classmethod
    def commission_must_be_a_fraction(cls, v: float) -> float:
        # Two legs at 0.5 would zero every trade.
        if not 0.0 <= v < 0.5:
            raise ValueError(f"commission must be in [0, 0.5), got {v}")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    backtest: BacktestSettings = Field(default_factory=BacktestSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "TRADEBOOK_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; env vars override them per key.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")

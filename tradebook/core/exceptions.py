"""tradebook.core.exceptions

Errors are part of the interface.

Numeric edge cases never raise. Configuration and input files do.
"""

from __future__ import annotations


class TradebookError(Exception):
    """Base exception for tradebook."""


class ConfigError(TradebookError):
    """Configuration is missing, invalid, or inconsistent."""


class StrategyConfigError(ConfigError):
    """Strategy parameters failed validation."""


class UnsupportedStrategyError(StrategyConfigError):
    """Strategy kind has no signal generator."""


class DataError(TradebookError):
    """Candle or strategy input could not be read."""

"""tradebook.backtest.strategies

Strategy library and the signal generator.

``Strategy.type`` is a tag. ``build_strategy`` maps every ``StrategyType`` to
either a concrete strategy or an explicit "no generator" entry, so adding a
tag without deciding what it does fails at import time.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tradebook.backtest.strategies.base import (
    SignalStrategy,
    Strategy,
    StrategyParams,
    StrategyResult,
    StrategyType,
    cross_signals,
)
from tradebook.backtest.strategies.ma_crossover import MACrossoverParams, MACrossoverStrategy
from tradebook.backtest.strategies.macd import MACDParams, MACDStrategy
from tradebook.backtest.strategies.rsi import RSIParams, RSIStrategy
from tradebook.backtest.types import Candle, Signal, closes
from tradebook.core.config import UnsupportedStrategyPolicy
from tradebook.core.exceptions import UnsupportedStrategyError

__all__ = [
    "SUPPORTED",
    "MACDStrategy",
    "MACrossoverStrategy",
    "RSIStrategy",
    "SignalStrategy",
    "Strategy",
    "StrategyParams",
    "StrategyResult",
    "StrategyType",
    "build_strategy",
    "cross_signals",
    "default_parameters",
    "generate_signals",
]

logger = logging.getLogger(__name__)

_REGISTRY: dict[StrategyType, tuple[type[StrategyParams], type[SignalStrategy]] | None] = {
    StrategyType.SMA_CROSS: (MACrossoverParams, MACrossoverStrategy),
    StrategyType.RSI: (RSIParams, RSIStrategy),
    StrategyType.MACD: (MACDParams, MACDStrategy),
    StrategyType.BOLLINGER: None,
    StrategyType.CUSTOM: None,
}

_missing = set(StrategyType) - set(_REGISTRY)
if _missing:
    raise RuntimeError(f"strategy tags without a registry entry: {sorted(_missing)}")

SUPPORTED: tuple[StrategyType, ...] = tuple(t for t, entry in _REGISTRY.items() if entry is not None)


def build_strategy(strategy: Strategy) -> SignalStrategy:
    """Resolve a declarative strategy into a concrete one.

    Raises:
        UnsupportedStrategyError: unknown tag, or a tag with no generator.
        StrategyConfigError: parameters fail validation.
    """

    try:
        kind = StrategyType(strategy.type)
    except ValueError:
        raise UnsupportedStrategyError(f"unknown strategy type: {strategy.type!r}") from None

    entry = _REGISTRY[kind]
    if entry is None:
        raise UnsupportedStrategyError(f"strategy type {kind} has no signal generator")

    params_cls, strategy_cls = entry
    params = params_cls.parse(kind, strategy.parameters)
    return strategy_cls.from_params(params)


def default_parameters(kind: StrategyType) -> dict[str, float]:
    """Default parameter record for a supported tag, keyed the way the journal stores it."""

    entry = _REGISTRY[kind]
    if entry is None:
        raise UnsupportedStrategyError(f"strategy type {kind} has no signal generator")
    return entry[0]().model_dump(by_alias=True)


def generate_signals(
    candles: Sequence[Candle],
    strategy: Strategy,
    *,
    unsupported: UnsupportedStrategyPolicy = "raise",
) -> tuple[Signal, ...]:
    """One signal per candle.

    ``unsupported="hold"`` turns an unknown or generator-less tag into an
    all-HOLD sequence instead of raising. Parameter errors always raise.
    """

    try:
        concrete = build_strategy(strategy)
    except UnsupportedStrategyError:
        if unsupported != "hold":
            raise
        logger.warning("strategy_unsupported", extra={"strategy_type": strategy.type, "strategy_name": strategy.name})
        return tuple(Signal.HOLD for _ in candles)

    res = concrete.generate(close=closes(candles))
    return res.signals

"""tradebook.backtest.strategies.macd

MACD crossover:
- BUY when the MACD line crosses above its signal line
- SELL when it crosses below

HOLD until ``slow_period + signal_period`` candles have passed.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from pydantic import Field

from tradebook.backtest.indicators import macd
from tradebook.backtest.strategies.base import (
    SignalStrategy,
    StrategyParams,
    StrategyResult,
    StrategyType,
    cross_signals,
)


class MACDParams(StrategyParams):
    fast_period: int = Field(12, alias="fastPeriod", ge=1)
    slow_period: int = Field(26, alias="slowPeriod", ge=1)
    signal_period: int = Field(9, alias="signalPeriod", ge=1)


@dataclass(frozen=True, slots=True)
class MACDStrategy(SignalStrategy):
    kind = StrategyType.MACD
    fast: int = 12
    slow: int = 26
    signal: int = 9

    @classmethod
    def from_params(cls, p: MACDParams) -> MACDStrategy:
        return cls(fast=p.fast_period, slow=p.slow_period, signal=p.signal_period)

    @property
    def warmup(self) -> int:
        return int(self.slow) + int(self.signal)

    def generate(self, *, close: np.ndarray) -> StrategyResult:
        m = macd(close, self.fast, self.slow, self.signal)
        return StrategyResult(signals=cross_signals(m.macd, buy_level=m.signal, sell_level=m.signal, warmup=self.warmup))

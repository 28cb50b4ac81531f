"""tradebook.backtest.strategies.ma_crossover

Moving average crossover (SMA_CROSS):
- BUY on a golden cross (fast SMA crosses above slow SMA)
- SELL on a death cross (fast SMA crosses below slow SMA)

HOLD until ``slow_period`` candles have passed.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from pydantic import Field

from tradebook.backtest.indicators import sma
from tradebook.backtest.strategies.base import (
    SignalStrategy,
    StrategyParams,
    StrategyResult,
    StrategyType,
    cross_signals,
)


class MACrossoverParams(StrategyParams):
    fast_period: int = Field(10, alias="fastPeriod", ge=1)
    slow_period: int = Field(20, alias="slowPeriod", ge=1)


@dataclass(frozen=True, slots=True)
class MACrossoverStrategy(SignalStrategy):
    kind = StrategyType.SMA_CROSS
    fast: int = 10
    slow: int = 20

    @classmethod
    def from_params(cls, p: MACrossoverParams) -> MACrossoverStrategy:
        return cls(fast=p.fast_period, slow=p.slow_period)

    @property
    def warmup(self) -> int:
        return int(self.slow)

    def generate(self, *, close: np.ndarray) -> StrategyResult:
        f = sma(close, self.fast)
        s = sma(close, self.slow)
        return StrategyResult(signals=cross_signals(f, buy_level=s, sell_level=s, warmup=self.warmup))

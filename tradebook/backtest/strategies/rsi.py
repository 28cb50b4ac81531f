"""tradebook.backtest.strategies.rsi

RSI threshold (long-only):
- BUY when RSI climbs back above oversold
- SELL when RSI falls back below overbought

HOLD until ``period`` candles have passed.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from pydantic import Field

from tradebook.backtest.indicators import rsi
from tradebook.backtest.strategies.base import (
    SignalStrategy,
    StrategyParams,
    StrategyResult,
    StrategyType,
    cross_signals,
)


class RSIParams(StrategyParams):
    period: int = Field(14, ge=1)
    oversold: float = Field(30.0, ge=0.0, le=100.0)
    overbought: float = Field(70.0, ge=0.0, le=100.0)


@dataclass(frozen=True, slots=True)
class RSIStrategy(SignalStrategy):
    kind = StrategyType.RSI
    period: int = 14
    oversold: float = 30.0
    overbought: float = 70.0

    @classmethod
    def from_params(cls, p: RSIParams) -> RSIStrategy:
        return cls(period=p.period, oversold=p.oversold, overbought=p.overbought)

    @property
    def warmup(self) -> int:
        return int(self.period)

    def generate(self, *, close: np.ndarray) -> StrategyResult:
        r = rsi(close, self.period)
        lo = np.full_like(r, float(self.oversold))
        hi = np.full_like(r, float(self.overbought))
        return StrategyResult(signals=cross_signals(r, buy_level=lo, sell_level=hi, warmup=self.warmup))

"""tradebook.backtest.types

Value types shared by every backtest stage.

All of them are frozen. A run never edits what it was given.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

import numpy as np


class Signal(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class Direction(StrEnum):
    LONG = "LONG"
    SHORT = "SHORT"


@dataclass(frozen=True, slots=True)
class Candle:
    """One OHLCV bar.

    ``time`` is epoch milliseconds. Providers guarantee ascending unique times
    and ``low <= open, close <= high``; the core does not check.
    ``volume`` may be 0 for venues that do not report it (forex).
    """

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True, slots=True)
class Position:
    entry_time: int
    entry_price: float
    direction: Direction = Direction.LONG


@dataclass(frozen=True, slots=True)
class BacktestTrade:
    entry_time: int
    exit_time: int
    entry_price: float
    exit_price: float
    direction: Direction
    pnl: float  # currency, after commission
    pnl_percent: float  # price return only, before commission
    quantity: float = 1.0


@dataclass(frozen=True, slots=True)
class EquityPoint:
    time: int
    equity: float


def closes(candles: Sequence[Candle]) -> np.ndarray:
    return np.fromiter((c.close for c in candles), dtype=np.float64, count=len(candles))

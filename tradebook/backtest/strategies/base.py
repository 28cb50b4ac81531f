"""tradebook.backtest.strategies.base

Backtest strategy contract.

A ``Strategy`` is configuration only: a display name, a kind tag and a bag of
numeric parameters, the shape the journal stores and the UI edits. It is
validated lazily, when a concrete strategy is built from it.

A concrete strategy is a pure function over closing prices. It outputs one
``Signal`` per candle.

Every supported kind is a crossing detector: a line crossing up through a
buy level is BUY, crossing down through a sell level is SELL. A line that
sits on a level for two steps produces nothing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from dataclasses import dataclass
from enum import StrEnum

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tradebook.backtest.types import Signal
from tradebook.core.exceptions import StrategyConfigError


class StrategyType(StrEnum):
    SMA_CROSS = "SMA_CROSS"
    RSI = "RSI"
    MACD = "MACD"
    # Offered by the journal UI, no generator yet.
    BOLLINGER = "BOLLINGER"
    CUSTOM = "CUSTOM"


class Strategy(BaseModel):
    """Declarative strategy as stored by the journal."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class StrategyParams(BaseModel):
    """Base for per-kind parameter records. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @classmethod
    def parse(cls, kind: str, parameters: Mapping[str, Any]):
        try:
            return cls.model_validate(dict(parameters))
        except ValidationError as e:
            raise StrategyConfigError(f"invalid parameters for {kind}: {e}") from e


@dataclass(frozen=True, slots=True)
class StrategyResult:
    signals: tuple[Signal, ...]


class SignalStrategy:
    kind: StrategyType

    @classmethod
    def from_params(cls, p):
        raise NotImplementedError

    @property
    def warmup(self) -> int:
        """Indices below this are always HOLD."""
        raise NotImplementedError

    def generate(self, *, close: np.ndarray) -> StrategyResult:
        raise NotImplementedError


_BUY = np.int8(1)
_SELL = np.int8(-1)
_CODES = {1: Signal.BUY, -1: Signal.SELL, 0: Signal.HOLD}


def cross_signals(
    line: np.ndarray,
    *,
    buy_level: np.ndarray,
    sell_level: np.ndarray,
    warmup: int,
) -> tuple[Signal, ...]:
    """Signal per index from previous-vs-current crossings.

    BUY:  line[i-1] <= buy_level[i-1]  and line[i] > buy_level[i]
    SELL: line[i-1] >= sell_level[i-1] and line[i] < sell_level[i]

    BUY takes precedence when both match. Indices ``< warmup`` (and index 0,
    which has no previous step) are HOLD.
    """

    t_len = line.shape[0]
    codes = np.zeros(t_len, dtype=np.int8)
    if t_len < 2:
        return tuple(Signal.HOLD for _ in range(t_len))

    up = (line[:-1] <= buy_level[:-1]) & (line[1:] > buy_level[1:])
    down = (line[:-1] >= sell_level[:-1]) & (line[1:] < sell_level[1:])
    codes[1:] = np.where(up, _BUY, np.where(down, _SELL, np.int8(0)))
    codes[: max(int(warmup), 1)] = 0

    return tuple(_CODES[int(c)] for c in codes)

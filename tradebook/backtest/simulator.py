"""tradebook.backtest.simulator

Single-position trade simulator.

Rules:
- long only, one position at a time
- BUY while flat opens at the candle close
- SELL while long closes at the candle close
- BUY while long and SELL while flat are ignored
- quantity is always 1 unit

Commission is a fraction charged on both legs against the price move, not
against notional: ``pnl = (exit - entry) * (1 - 2 * commission)``.
``pnl_percent`` is the raw price return and ignores commission.

A position still open after the last candle is abandoned unless
``close_open_position`` is set, in which case it closes at the last close.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from tradebook.backtest.types import BacktestTrade, Candle, Direction, Position, Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SimResult:
    trades: tuple[BacktestTrade, ...]
    open_position: Position | None = None  # abandoned at end of series


def close_trade(position: Position, candle: Candle, *, commission: float) -> BacktestTrade:
    exit_price = float(candle.close)
    move = exit_price - position.entry_price
    return BacktestTrade(
        entry_time=position.entry_time,
        exit_time=int(candle.time),
        entry_price=position.entry_price,
        exit_price=exit_price,
        direction=position.direction,
        pnl=move * (1.0 - commission * 2.0),
        pnl_percent=(move / position.entry_price) * 100.0,
        quantity=1.0,
    )


def simulate(
    *,
    candles: Sequence[Candle],
    signals: Sequence[Signal],
    commission: float = 0.001,
    close_open_position: bool = False,
) -> SimResult:
    if len(candles) != len(signals):
        raise ValueError("candles and signals must have the same length")

    trades: list[BacktestTrade] = []
    position: Position | None = None

    for candle, sig in zip(candles, signals, strict=True):
        if position is None:
            if sig == Signal.BUY:
                position = Position(entry_time=int(candle.time), entry_price=float(candle.close), direction=Direction.LONG)
        elif sig == Signal.SELL:
            trades.append(close_trade(position, candle, commission=commission))
            position = None

    if position is not None and close_open_position:
        last = candles[-1]
        # Opened on the last candle: nothing to close against.
        if int(last.time) > position.entry_time:
            trades.append(close_trade(position, last, commission=commission))
            position = None

    if position is not None:
        logger.debug(
            "position_abandoned",
            extra={"entry_time": position.entry_time, "entry_price": position.entry_price},
        )

    return SimResult(trades=tuple(trades), open_position=position)

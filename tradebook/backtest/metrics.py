"""tradebook.backtest.metrics

Performance metrics and equity curve over closed trades.

Pure and deterministic: the same trade list always yields the same numbers.
An empty trade list yields ``Metrics.empty()``, never NaN or infinity.

Notes:
- trades with ``pnl == 0`` count toward ``total_trades`` only
- ``profit_factor`` is ``inf`` when there are profits and no losses
- ``sharpe_ratio`` is a per-trade approximation (mean / population std of
  ``pnl_percent``, times sqrt(252)). It is not a time-weighted return series.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from tradebook.backtest.types import BacktestTrade, EquityPoint

PERIODS_PER_YEAR = 252


@dataclass(frozen=True, slots=True)
class Metrics:
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float  # percent
    total_profit: float
    total_loss: float  # magnitude, >= 0
    net_profit: float
    profit_factor: float
    average_win: float
    average_loss: float  # magnitude, >= 0
    largest_win: float
    largest_loss: float  # <= 0
    max_drawdown: float
    max_drawdown_percent: float
    sharpe_ratio: float

    @classmethod
    def empty(cls) -> Metrics:
        return cls(
            total_trades=0,
            winning_trades=0,
            losing_trades=0,
            win_rate=0.0,
            total_profit=0.0,
            total_loss=0.0,
            net_profit=0.0,
            profit_factor=0.0,
            average_win=0.0,
            average_loss=0.0,
            largest_win=0.0,
            largest_loss=0.0,
            max_drawdown=0.0,
            max_drawdown_percent=0.0,
            sharpe_ratio=0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def format_profit_factor(value: float, *, digits: int = 2) -> str:
    if math.isinf(value):
        return "∞"
    return f"{value:.{digits}f}"


def profit_factor(total_profit: float, total_loss: float) -> float:
    if total_loss > 0:
        return total_profit / total_loss
    return math.inf if total_profit > 0 else 0.0


def max_drawdown(pnls: Sequence[float] | np.ndarray, *, initial_capital: float) -> tuple[float, float]:
    """Largest peak-to-trough equity drop as ``(absolute, percent_of_peak)``.

    Equity starts at ``initial_capital``; the peak includes it. The percent is
    taken against the peak at the step where the absolute drop is largest.
    """

    p = np.asarray(pnls, dtype=np.float64)
    if p.size == 0:
        return 0.0, 0.0

    equity = float(initial_capital) + np.cumsum(p)
    peak = np.maximum.accumulate(np.concatenate(([float(initial_capital)], equity)))[1:]
    dd = peak - equity
    k = int(np.argmax(dd))  # first occurrence wins ties
    if dd[k] <= 0.0:
        return 0.0, 0.0
    return float(dd[k]), float(dd[k] / peak[k] * 100.0)


def sharpe_ratio(pnl_percents: Sequence[float] | np.ndarray, *, periods_per_year: int = PERIODS_PER_YEAR) -> float:
    r = np.asarray(pnl_percents, dtype=np.float64)
    if r.size == 0:
        return 0.0
    mu = float(np.mean(r))
    sd = float(np.std(r))  # population
    if sd == 0.0:
        return 0.0
    return (mu / sd) * math.sqrt(periods_per_year)


def compute_metrics(trades: Sequence[BacktestTrade], *, initial_capital: float = 10000.0) -> Metrics:
    if not trades:
        return Metrics.empty()

    pnl = np.array([t.pnl for t in trades], dtype=np.float64)
    wins = pnl[pnl > 0]
    losses = pnl[pnl < 0]

    total_profit = float(np.sum(wins)) if wins.size else 0.0
    total_loss = abs(float(np.sum(losses))) if losses.size else 0.0
    dd_abs, dd_pct = max_drawdown(pnl, initial_capital=initial_capital)

    return Metrics(
        total_trades=len(trades),
        winning_trades=int(wins.size),
        losing_trades=int(losses.size),
        win_rate=wins.size / len(trades) * 100.0,
        total_profit=total_profit,
        total_loss=total_loss,
        net_profit=total_profit - total_loss,
        profit_factor=profit_factor(total_profit, total_loss),
        average_win=total_profit / wins.size if wins.size else 0.0,
        average_loss=total_loss / losses.size if losses.size else 0.0,
        largest_win=float(np.max(wins)) if wins.size else 0.0,
        largest_loss=float(np.min(losses)) if losses.size else 0.0,
        max_drawdown=dd_abs,
        max_drawdown_percent=dd_pct,
        sharpe_ratio=sharpe_ratio([t.pnl_percent for t in trades]),
    )


def equity_curve(
    trades: Sequence[BacktestTrade],
    *,
    initial_capital: float = 10000.0,
    start_time: int,
) -> tuple[EquityPoint, ...]:
    """Starting point plus one point per closed trade.

    The starting point is stamped with the first trade's exit time when there
    are trades, else ``start_time``.
    """

    first = int(trades[0].exit_time) if trades else int(start_time)
    points = [EquityPoint(time=first, equity=float(initial_capital))]
    equity = float(initial_capital)
    for t in trades:
        equity += t.pnl
        points.append(EquityPoint(time=int(t.exit_time), equity=equity))
    return tuple(points)

"""tradebook.backtest.engine

Backtest entry point.

The loop:
- strategy generates one signal per candle
- simulator converts signals + candles into closed trades
- metrics summarise the trades; the equity curve replays them

Candle retrieval is the caller's job. The engine takes an already
materialised series, performs no I/O and keeps nothing between runs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from tradebook.backtest.metrics import Metrics, compute_metrics, equity_curve
from tradebook.backtest.simulator import simulate
from tradebook.backtest.strategies import Strategy, generate_signals
from tradebook.backtest.types import BacktestTrade, Candle, EquityPoint, Position, Signal
from tradebook.core.config import BacktestSettings, UnsupportedStrategyPolicy
from tradebook.core.exceptions import ConfigError
from tradebook.core.time import now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BacktestConfig:
    initial_capital: float = 10000.0
    commission: float = 0.001
    unsupported_strategy: UnsupportedStrategyPolicy = "raise"
    close_open_position: bool = False

    def __post_init__(self) -> None:
        if self.initial_capital <= 0:
            raise ConfigError("initial_capital must be > 0")
        if not 0.0 <= self.commission < 0.5:
            raise ConfigError(f"commission must be in [0, 0.5), got {self.commission}")
        if self.unsupported_strategy not in ("raise", "hold"):
            raise ConfigError(f"unsupported_strategy must be 'raise' or 'hold', got {self.unsupported_strategy!r}")

    @classmethod
    def from_settings(cls, settings: BacktestSettings) -> BacktestConfig:
        return cls(
            initial_capital=settings.initial_capital,
            commission=settings.commission,
            unsupported_strategy=settings.unsupported_strategy,
            close_open_position=settings.close_open_position,
        )


@dataclass(frozen=True, slots=True)
class BacktestResult:
    trades: tuple[BacktestTrade, ...]
    metrics: Metrics
    equity_curve: tuple[EquityPoint, ...]
    signals: tuple[Signal, ...] = ()
    open_position: Position | None = None


def run_backtest(
    *,
    candles: Sequence[Candle],
    strategy: Strategy,
    cfg: BacktestConfig | None = None,
) -> BacktestResult:
    cfg = cfg or BacktestConfig()

    signals = generate_signals(candles, strategy, unsupported=cfg.unsupported_strategy)
    sim = simulate(
        candles=candles,
        signals=signals,
        commission=cfg.commission,
        close_open_position=cfg.close_open_position,
    )
    metrics = compute_metrics(sim.trades, initial_capital=cfg.initial_capital)

    # Wall clock only when there is nothing to stamp the start with.
    start_time = int(candles[0].time) if len(candles) else now_ms()
    curve = equity_curve(sim.trades, initial_capital=cfg.initial_capital, start_time=start_time)

    logger.debug(
        "backtest_completed",
        extra={
            "strategy_type": strategy.type,
            "candles": len(candles),
            "trades": metrics.total_trades,
            "net_profit": metrics.net_profit,
        },
    )
    return BacktestResult(
        trades=sim.trades,
        metrics=metrics,
        equity_curve=curve,
        signals=signals,
        open_position=sim.open_position,
    )


class BacktestEngine:
    """Holds a config; ``run`` is ``run_backtest`` with that config."""

    def __init__(
        self,
        initial_capital: float = 10000.0,
        commission: float = 0.001,
        *,
        unsupported_strategy: UnsupportedStrategyPolicy = "raise",
        close_open_position: bool = False,
    ) -> None:
        self.cfg = BacktestConfig(
            initial_capital=initial_capital,
            commission=commission,
            unsupported_strategy=unsupported_strategy,
            close_open_position=close_open_position,
        )

    @classmethod
    def from_config(cls, cfg: BacktestConfig) -> BacktestEngine:
        return cls(
            cfg.initial_capital,
            cfg.commission,
            unsupported_strategy=cfg.unsupported_strategy,
            close_open_position=cfg.close_open_position,
        )

    def run(self, candles: Sequence[Candle], strategy: Strategy) -> BacktestResult:
        return run_backtest(candles=candles, strategy=strategy, cfg=self.cfg)

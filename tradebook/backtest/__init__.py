"""tradebook.backtest

Backtest engine.

Data flows one way:
candles + strategy -> signals -> trades -> metrics / equity curve.
No stage holds state between runs.
"""

from tradebook.backtest.engine import BacktestConfig, BacktestEngine, BacktestResult, run_backtest
from tradebook.backtest.metrics import Metrics, compute_metrics, equity_curve
from tradebook.backtest.strategies import Strategy, StrategyType, generate_signals
from tradebook.backtest.types import BacktestTrade, Candle, Direction, EquityPoint, Signal

__all__ = [
    "BacktestConfig",
    "BacktestEngine",
    "BacktestResult",
    "BacktestTrade",
    "Candle",
    "Direction",
    "EquityPoint",
    "Metrics",
    "Signal",
    "Strategy",
    "StrategyType",
    "compute_metrics",
    "equity_curve",
    "generate_signals",
    "run_backtest",
]

from __future__ import annotations

import copy

import numpy as np
import pytest

from tradebook.backtest.engine import BacktestConfig, BacktestEngine, run_backtest
from tradebook.backtest.metrics import Metrics
from tradebook.backtest.strategies import Strategy
from tradebook.backtest.types import Signal
from tradebook.core.exceptions import ConfigError, UnsupportedStrategyError

GOLDEN_DEATH = [10, 10, 10, 10, 10, 13, 16, 16, 16, 16, 7, 4, 4, 4]
SMA_2_3 = Strategy(name="sma 2/3", type="SMA_CROSS", parameters={"fastPeriod": 2, "slowPeriod": 3})


def test_backtest_runs_and_metrics(candles_from_closes):
    candles = candles_from_closes(GOLDEN_DEATH)
    res = run_backtest(candles=candles, strategy=SMA_2_3, cfg=BacktestConfig(initial_capital=1000.0, commission=0.001))

    assert len(res.signals) == len(candles)
    assert len(res.trades) == 1
    t = res.trades[0]
    assert (t.entry_time, t.exit_time) == (candles[5].time, candles[10].time)
    assert t.pnl == pytest.approx(-6.0 * 0.998)
    assert t.pnl_percent == pytest.approx(-6.0 / 13.0 * 100.0)

    assert res.metrics.total_trades == 1
    assert res.metrics.losing_trades == 1
    assert res.metrics.profit_factor == 0.0
    assert res.metrics.max_drawdown == pytest.approx(5.988)

    assert [p.time for p in res.equity_curve] == [candles[10].time, candles[10].time]
    assert res.equity_curve[-1].equity == pytest.approx(1000.0 - 5.988)


def test_backtest_empty_series():
    res = run_backtest(candles=[], strategy=SMA_2_3)
    assert res.trades == ()
    assert res.metrics == Metrics.empty()
    assert len(res.equity_curve) == 1
    assert res.equity_curve[0].equity == 10000.0


def test_backtest_without_trades_starts_curve_at_first_candle(candles_from_closes):
    candles = candles_from_closes([5.0] * 10)
    res = run_backtest(candles=candles, strategy=SMA_2_3)
    assert res.trades == ()
    assert res.equity_curve[0].time == candles[0].time
    assert set(res.signals) == {Signal.HOLD}


def test_backtest_is_deterministic(candles_from_closes):
    candles = candles_from_closes(100.0 + 10.0 * np.sin(np.arange(300) / 8.0))
    strat = Strategy(type="MACD")

    a = run_backtest(candles=candles, strategy=strat)
    b = run_backtest(candles=candles, strategy=strat)
    assert a == b
    assert a.metrics.total_trades > 0


def test_backtest_does_not_mutate_candles(candles_from_closes):
    candles = candles_from_closes(GOLDEN_DEATH)
    before = copy.deepcopy(candles)
    run_backtest(candles=candles, strategy=SMA_2_3)
    assert candles == before


def test_engine_matches_functional_entry_point(candles_from_closes):
    candles = candles_from_closes(GOLDEN_DEATH)
    engine = BacktestEngine(initial_capital=5000.0, commission=0.002)
    cfg = BacktestConfig(initial_capital=5000.0, commission=0.002)
    assert engine.run(candles, SMA_2_3) == run_backtest(candles=candles, strategy=SMA_2_3, cfg=cfg)
    assert BacktestEngine.from_config(cfg).cfg == cfg


def test_backtest_force_close_open_position(candles_from_closes):
    # golden cross at index 5, no death cross afterwards
    candles = candles_from_closes([10, 10, 10, 10, 10, 13, 16, 17, 18])
    default = run_backtest(candles=candles, strategy=SMA_2_3)
    forced = run_backtest(candles=candles, strategy=SMA_2_3, cfg=BacktestConfig(close_open_position=True))

    assert default.trades == ()
    assert default.open_position is not None
    assert len(forced.trades) == 1
    assert forced.trades[0].exit_price == 18.0
    assert forced.open_position is None


def test_backtest_unsupported_strategy_policy(candles_from_closes):
    candles = candles_from_closes([1.0, 2.0, 3.0])
    with pytest.raises(UnsupportedStrategyError):
        run_backtest(candles=candles, strategy=Strategy(type="CUSTOM"))

    res = run_backtest(candles=candles, strategy=Strategy(type="CUSTOM"), cfg=BacktestConfig(unsupported_strategy="hold"))
    assert res.trades == ()
    assert res.metrics == Metrics.empty()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"initial_capital": 0.0},
        {"commission": -0.1},
        {"commission": 0.5},
        {"unsupported_strategy": "ignore"},
    ],
)
def test_backtest_config_validation(kwargs):
    with pytest.raises(ConfigError):
        BacktestConfig(**kwargs)


def test_backtest_config_from_settings(test_config):
    cfg = BacktestConfig.from_settings(test_config.backtest)
    assert cfg == BacktestConfig()

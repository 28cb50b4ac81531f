"""tradebook.backtest.io

Lightweight IO helpers for backtesting. Nothing in the engine calls these;
they sit at the edge, for the CLI and for hosts that hand over files.

CSV schema:
- required: time, open, high, low, close
- optional: volume (0 when absent, as forex feeds report none)

``time`` is epoch milliseconds or an ISO-8601 timestamp.
"""

from __future__ import annotations

import csv
import math
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import yaml

from tradebook.backtest.engine import BacktestResult
from tradebook.backtest.metrics import format_profit_factor
from tradebook.backtest.strategies import Strategy
from tradebook.backtest.types import Candle
from tradebook.core.exceptions import DataError
from tradebook.core.time import dt_to_ms, parse_dt

REQUIRED_COLUMNS = ("time", "open", "high", "low", "close")


def _parse_time(value: str) -> int:
    v = value.strip()
    try:
        return int(v)
    except ValueError:
        pass
    try:
        return int(float(v))
    except (ValueError, OverflowError):
        pass
    return dt_to_ms(parse_dt(v))


def load_candles_csv(path: str | Path) -> tuple[Candle, ...]:
    p = Path(path)
    if not p.is_file():
        raise DataError(f"candle file not found: {p}")

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fields = [c.strip().lower() for c in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in fields]
        if missing:
            raise DataError(f"CSV missing required columns: {', '.join(missing)}")

        out: list[Candle] = []
        for line_no, row in enumerate(reader, start=2):
            r = {k.strip().lower(): (v.strip() if isinstance(v, str) else "") for k, v in row.items() if k is not None}
            try:
                vol = r.get("volume", "")
                out.append(
                    Candle(
                        time=_parse_time(r["time"]),
                        open=float(r["open"]),
                        high=float(r["high"]),
                        low=float(r["low"]),
                        close=float(r["close"]),
                        volume=float(vol) if vol else 0.0,
                    )
                )
            except (ValueError, OverflowError) as e:
                raise DataError(f"{p}:{line_no}: {e}") from e

    return tuple(out)


def candles_from_klines(rows: Iterable[Sequence[Any]]) -> tuple[Candle, ...]:
    """Binance ``/klines`` rows to candles.

    Row layout: ``[open_time_ms, open, high, low, close, volume, close_time, ...]``
    with prices and volume as strings.
    """

    out: list[Candle] = []
    for row in rows:
        try:
            out.append(
                Candle(
                    time=int(row[0]),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=float(row[5]),
                )
            )
        except (IndexError, TypeError, ValueError, OverflowError) as e:
            raise DataError(f"malformed kline row: {row!r}") from e
    return tuple(out)


def load_strategy_yaml(path: str | Path) -> Strategy:
    """Strategy from YAML::

        name: Golden cross
        type: SMA_CROSS
        parameters:
          fastPeriod: 10
          slowPeriod: 20
    """

    p = Path(path)
    if not p.is_file():
        raise DataError(f"strategy file not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise DataError(f"strategy file is not valid YAML: {p}") from e
    if not isinstance(raw, dict) or "type" not in raw:
        raise DataError(f"strategy file must be a mapping with a 'type' key: {p}")

    params = raw.get("parameters") or {}
    if not isinstance(params, dict):
        raise DataError(f"strategy parameters must be a mapping: {p}")
    # Values are checked when the strategy is built.
    return Strategy(
        name=str(raw.get("name") or raw["type"]),
        type=str(raw["type"]),
        parameters={str(k): v for k, v in params.items()},
    )


def result_to_dict(result: BacktestResult) -> dict[str, Any]:
    """JSON-ready rendering. An infinite profit factor becomes ``"∞"``."""

    m = result.metrics.to_dict()
    if math.isinf(result.metrics.profit_factor):
        m["profit_factor"] = format_profit_factor(result.metrics.profit_factor)

    open_pos = result.open_position
    return {
        "trades": [
            {
                "entry_time": t.entry_time,
                "exit_time": t.exit_time,
                "entry_price": t.entry_price,
                "exit_price": t.exit_price,
                "direction": str(t.direction),
                "quantity": t.quantity,
                "pnl": t.pnl,
                "pnl_percent": t.pnl_percent,
            }
            for t in result.trades
        ],
        "metrics": m,
        "equity_curve": [{"time": pt.time, "equity": pt.equity} for pt in result.equity_curve],
        "open_position": (
            None
            if open_pos is None
            else {
                "entry_time": open_pos.entry_time,
                "entry_price": open_pos.entry_price,
                "direction": str(open_pos.direction),
            }
        ),
    }

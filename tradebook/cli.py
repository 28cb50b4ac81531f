"""tradebook.cli

Command line interface entry point for tradebook.

Design constraints:
- argparse-based.
- Lazy imports: do not import numpy or pydantic at parse time.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

EPILOG = "Backtests replay the past. They do not promise it."


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tradebook",
        description="Backtest declarative trading strategies on historical candles.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_bt = sub.add_parser("backtest", help="Run a strategy over a candle CSV")
    p_bt.add_argument("--candles", required=True, help="CSV with time,open,high,low,close[,volume].")
    src = p_bt.add_mutually_exclusive_group(required=True)
    src.add_argument("--strategy-file", default=None, help="YAML strategy definition.")
    src.add_argument("--type", dest="strategy_type", default=None, help="Strategy tag, e.g. SMA_CROSS.")
    p_bt.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Strategy parameter (repeatable), e.g. fastPeriod=10.",
    )
    p_bt.add_argument("--capital", type=float, default=None, help="Initial capital.")
    p_bt.add_argument("--commission", type=float, default=None, help="Commission fraction per leg.")
    p_bt.add_argument(
        "--close-open",
        action="store_true",
        help="Close a position still open on the last candle.",
    )
    p_bt.add_argument(
        "--allow-unsupported",
        action="store_true",
        help="Treat an unsupported strategy type as all-HOLD instead of failing.",
    )
    p_bt.add_argument("--json", action="store_true", help="Print the full result as JSON.")

    sub.add_parser("strategies", help="List supported strategy types and their defaults")

    return parser


def _print_version() -> None:
    from tradebook import __version__

    print(f"tradebook v{__version__}")


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(
            {
                "ts": self.formatTime(record),
                "level": record.levelname,
                "logger": record.name,
                "event": record.getMessage(),
            }
        )


def _configure_logging(level: str, *, json_output: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.basicConfig(level=level.upper(), handlers=[handler])


def _load_config(repo_root: Path):
    from pydantic import ValidationError

    from tradebook.core.config import Config
    from tradebook.core.exceptions import ConfigError

    cfg_path = repo_root / "config" / "default.yaml"
    if cfg_path.exists():
        return Config.from_yaml(cfg_path)
    try:
        return Config()
    except ValidationError as e:
        raise ConfigError(f"Invalid config from environment: {e}") from e


def _parse_params(items: list[str]) -> dict[str, float]:
    out: dict[str, float] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected KEY=VALUE, got {item!r}")
        out[key.strip()] = float(value)
    return out


def _cmd_backtest(ctx: CliContext, args: argparse.Namespace) -> int:
    from tradebook.backtest.engine import BacktestConfig, run_backtest
    from tradebook.backtest.io import load_candles_csv, load_strategy_yaml, result_to_dict
    from tradebook.backtest.metrics import format_profit_factor
    from tradebook.backtest.strategies import Strategy
    from tradebook.core.exceptions import TradebookError

    try:
        config = _load_config(ctx.repo_root)
        _configure_logging(config.logging.level, json_output=config.logging.json_output)

        settings = config.backtest.model_copy(
            update={
                k: v
                for k, v in {
                    "initial_capital": args.capital,
                    "commission": args.commission,
                    "close_open_position": True if args.close_open else None,
                    "unsupported_strategy": "hold" if args.allow_unsupported else None,
                }.items()
                if v is not None
            }
        )
        cfg = BacktestConfig.from_settings(settings)

        if args.strategy_file:
            strategy = load_strategy_yaml(args.strategy_file)
        else:
            try:
                params = _parse_params(args.param)
            except ValueError as e:
                print(f"error: {e}", file=sys.stderr)
                return 2
            strategy = Strategy(name=args.strategy_type, type=args.strategy_type, parameters=params)

        candles = load_candles_csv(args.candles)
        result = run_backtest(candles=candles, strategy=strategy, cfg=cfg)
    except TradebookError as e:
        print(f"backtest failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))
        return 0

    m = result.metrics
    print(f"tradebook backtest: {strategy.name or strategy.type}")
    print(f"- candles: {len(candles)}")
    print(f"- trades: {m.total_trades} ({m.winning_trades} won, {m.losing_trades} lost)")
    print(f"- win rate: {m.win_rate:.2f}%")
    print(f"- net profit: {m.net_profit:.2f}")
    print(f"- profit factor: {format_profit_factor(m.profit_factor)}")
    print(f"- max drawdown: {m.max_drawdown:.2f} ({m.max_drawdown_percent:.2f}%)")
    print(f"- sharpe: {m.sharpe_ratio:.2f}")
    print(f"- final equity: {result.equity_curve[-1].equity:.2f}")
    if result.open_position is not None:
        print(f"- open position abandoned: entry {result.open_position.entry_price:.4f}")
    return 0


def _cmd_strategies(ctx: CliContext, args: argparse.Namespace) -> int:
    from tradebook.backtest.strategies import SUPPORTED, StrategyType, default_parameters

    for kind in StrategyType:
        if kind in SUPPORTED:
            params = ", ".join(f"{k}={v}" for k, v in default_parameters(kind).items())
            print(f"{kind}: {params}")
        else:
            print(f"{kind}: (no signal generator)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "backtest": _cmd_backtest,
        "strategies": _cmd_strategies,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())

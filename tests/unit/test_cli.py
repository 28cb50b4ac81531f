from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from tradebook.cli import build_parser, main

REPO_ROOT = Path(__file__).resolve().parents[2]

CLOSES = [10, 10, 10, 10, 10, 13, 16, 16, 16, 16, 7, 4, 4, 4]


def _write_candles(path: Path) -> Path:
    lines = ["time,open,high,low,close,volume"]
    for i, c in enumerate(CLOSES):
        lines.append(f"{1700000000000 + i * 60000},{c},{c + 1},{c - 1},{c},0")
    path.write_text("\n".join(lines) + "\n")
    return path


def test_cli_help_includes_subcommands(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([])
    assert rc == 2
    out = capsys.readouterr().out
    assert "backtest" in out
    assert "strategies" in out


def test_cli_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["--version"])
    assert rc == 0
    assert capsys.readouterr().out.startswith("tradebook v")


def test_cli_unknown_command_errors() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["nope"])


def test_cli_strategies_lists_tags(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["strategies"]) == 0
    out = capsys.readouterr().out
    assert "SMA_CROSS: fastPeriod=10, slowPeriod=20" in out
    assert "BOLLINGER: (no signal generator)" in out


def test_cli_backtest_json(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    csv_path = _write_candles(tmp_path / "candles.csv")

    rc = main(
        [
            "backtest",
            "--candles",
            str(csv_path),
            "--type",
            "SMA_CROSS",
            "--param",
            "fastPeriod=2",
            "--param",
            "slowPeriod=3",
            "--capital",
            "1000",
            "--json",
        ]
    )
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data["trades"]) == 1
    assert data["metrics"]["total_trades"] == 1
    assert data["equity_curve"][0]["equity"] == 1000.0


def test_cli_backtest_summary_from_strategy_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    csv_path = _write_candles(tmp_path / "candles.csv")
    strat = tmp_path / "s.yaml"
    strat.write_text("name: fast cross\ntype: SMA_CROSS\nparameters:\n  fastPeriod: 2\n  slowPeriod: 3\n")

    rc = main(["backtest", "--candles", str(csv_path), "--strategy-file", str(strat)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "fast cross" in out
    assert "- trades: 1 (0 won, 1 lost)" in out


def test_cli_backtest_unsupported_type_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    csv_path = _write_candles(tmp_path / "candles.csv")

    assert main(["backtest", "--candles", str(csv_path), "--type", "CUSTOM"]) == 1
    assert "backtest failed" in capsys.readouterr().err

    assert main(["backtest", "--candles", str(csv_path), "--type", "CUSTOM", "--allow-unsupported"]) == 0


def test_cli_backtest_bad_param(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    csv_path = _write_candles(tmp_path / "candles.csv")
    assert main(["backtest", "--candles", str(csv_path), "--type", "RSI", "--param", "period"]) == 2


def test_cli_backtest_candles_directory_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["backtest", "--candles", str(tmp_path), "--type", "RSI"]) == 1


def test_cli_env_overrides_repo_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "config").mkdir()
    shutil.copy2(REPO_ROOT / "config" / "default.yaml", tmp_path / "config" / "default.yaml")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TRADEBOOK_BACKTEST__COMMISSION", "0.002")
    csv_path = _write_candles(tmp_path / "candles.csv")

    rc = main(
        [
            "backtest",
            "--candles",
            str(csv_path),
            "--type",
            "SMA_CROSS",
            "--param",
            "fastPeriod=2",
            "--param",
            "slowPeriod=3",
            "--json",
        ]
    )
    assert rc == 0
    trade = json.loads(capsys.readouterr().out)["trades"][0]
    assert trade["pnl"] == pytest.approx((7 - 13) * (1 - 2 * 0.002))

from __future__ import annotations

import shutil
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tradebook.backtest.types import Candle  # noqa: E402
from tradebook.core.config import Config  # noqa: E402

T0 = 1_700_000_000_000  # ms
STEP = 60_000


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config fixture loaded from a copy of the repo defaults."""

    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(REPO_ROOT / "config" / "default.yaml", cfg_dst_dir / "default.yaml")
    return Config.from_yaml(cfg_dst_dir / "default.yaml")


def _make_candles(closes: Sequence[float]) -> list[Candle]:
    return [
        Candle(time=T0 + i * STEP, open=float(c), high=float(c) + 1.0, low=max(float(c) - 1.0, 0.01), close=float(c), volume=0.0)
        for i, c in enumerate(closes)
    ]


@pytest.fixture()
def candles_from_closes() -> Callable[[Sequence[float]], list[Candle]]:
    """One-minute candles with the given closes, starting at ``T0``."""

    return _make_candles

"""tradebook.backtest.indicators

Pure indicator functions over a price series.

Every function returns an array of the same length as its input. Indices
without enough history hold a sentinel instead of NaN:

- SMA: 0.0
- RSI: 50.0
- EMA: the seed value (mean of the first ``period`` prices)

Sentinels are not signals. The strategies guard their own warm-up.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

RSI_NEUTRAL = 50.0
RS_CAP = 100.0  # RS when average loss is zero


def _as_array(prices: Sequence[float] | np.ndarray) -> np.ndarray:
    x = np.asarray(prices, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError("prices must be a 1D sequence")
    return x


def _check_period(period: int) -> int:
    n = int(period)
    if n < 1:
        raise ValueError(f"period must be >= 1, got {period}")
    return n


def sma(prices: Sequence[float] | np.ndarray, period: int) -> np.ndarray:
    """Simple moving average; ``0.0`` before index ``period - 1``."""

    x = _as_array(prices)
    n = _check_period(period)
    out = np.zeros(x.shape[0], dtype=np.float64)
    if x.shape[0] < n:
        return out

    # Each window is summed on its own; a running cumsum drifts on long series.
    out[n - 1 :] = sliding_window_view(x, n).mean(axis=1)
    return out


def ema(prices: Sequence[float] | np.ndarray, period: int) -> np.ndarray:
    """Exponential moving average seeded with the SMA of the first ``period`` prices.

    The seed sits at index ``period - 1``; earlier indices repeat it.
    A series shorter than ``period`` has no seed and yields zeros.
    """

    x = _as_array(prices)
    n = _check_period(period)
    t_len = x.shape[0]
    out = np.zeros(t_len, dtype=np.float64)
    if t_len < n:
        return out

    k = 2.0 / (n + 1.0)
    seed = float(np.mean(x[:n]))
    out[:n] = seed
    for i in range(n, t_len):
        out[i] = x[i] * k + out[i - 1] * (1.0 - k)
    return out


def rsi(prices: Sequence[float] | np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index over a trailing window of ``period`` price changes.

    Plain window means, not Wilder smoothing. ``RS`` is capped at 100 when the
    window has no losses, so the result stays inside [0, 100] and never divides
    by zero. Indices before ``period`` hold 50.
    """

    x = _as_array(prices)
    n = _check_period(period)
    t_len = x.shape[0]
    out = np.full(t_len, RSI_NEUTRAL, dtype=np.float64)
    if t_len <= n:
        return out

    delta = np.diff(x)
    gains = np.maximum(delta, 0.0)
    losses = np.maximum(-delta, 0.0)

    # window k covers delta[k : k + n], i.e. the n changes ending at price k + n
    avg_gain = sliding_window_view(gains, n).mean(axis=1)
    avg_loss = sliding_window_view(losses, n).mean(axis=1)

    rs = np.full_like(avg_gain, RS_CAP)
    np.divide(avg_gain, avg_loss, out=rs, where=avg_loss != 0.0)
    out[n:] = 100.0 - (100.0 / (1.0 + rs))
    return out


@dataclass(frozen=True, slots=True)
class MACDResult:
    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


def macd(
    prices: Sequence[float] | np.ndarray,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """MACD line, signal line and histogram.

    Expects ``fast < slow``; not enforced. The signal EMA is seeded on the MACD
    values from index ``slow - 1`` onward, where both EMAs are real.
    """

    x = _as_array(prices)
    fast_n = _check_period(fast)
    slow_n = _check_period(slow)
    sig_n = _check_period(signal)

    line = ema(x, fast_n) - ema(x, slow_n)

    sig = np.zeros_like(line)
    start = max(fast_n, slow_n) - 1
    if line.shape[0] > start:
        tail = ema(line[start:], sig_n)
        sig[start:] = tail
        sig[:start] = tail[0]

    return MACDResult(macd=line, signal=sig, histogram=line - sig)

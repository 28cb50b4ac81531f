"""tradebook: trading journal backtest core.

Candles and a declarative strategy go in; trades, metrics and an equity
curve come out. Nothing here touches the network or a database.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"

"""tradebook.core

Core primitives.

If a module needs to exist, it should probably depend only on this package.
"""

from .config import Config
from .exceptions import TradebookError
from .time import ms_to_dt, now_ms, parse_dt, utc_now

__all__ = [
    "Config",
    "TradebookError",
    "ms_to_dt",
    "now_ms",
    "parse_dt",
    "utc_now",
]

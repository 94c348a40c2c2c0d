"""
lockup_backtest.strategies
==========================

This package contains the trading strategies run by the backtester.

Classes
-------
* :class:`strategies.base.BaseStrategy` – Abstract base class.
* :class:`strategies.lockup_short.LockupShortStrategy` – RSI/volume short around IPO lockup expiry.
* :class:`strategies.lockup_short.StrategyConfig` – Thresholds for the lockup short.
"""

from .base import BaseStrategy  # noqa: F401
from .lockup_short import LockupShortStrategy, StrategyConfig  # noqa: F401

__all__ = [
    "BaseStrategy",
    "LockupShortStrategy",
    "StrategyConfig",
]

"""
models
=================

This module defines simple data containers for bars, trades and backtest
results.  Using `@dataclass` for these structures makes the code more
readable and concise.  They are used throughout the simulator and
strategies to track state.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

__all__ = ["Bar", "PositionSide", "Trade", "BacktestResult", "IpoInfo"]


@dataclass(frozen=True)
class Bar:
    """One daily OHLCV record for a single instrument."""
    # Raw YYYY-MM-DD text; the simulator parses it bar by bar.
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: float


class PositionSide(Enum):
    FLAT = "FLAT"
    SHORT = "SHORT"


@dataclass
class Trade:
    """A short trade opened by the strategy and closed exactly once."""
    entry_price: float
    quantity: float
    # Bar index on which the position was opened.
    entry_index: int
    # These values are populated when the position is closed.
    exit_price: Optional[float] = None
    exit_index: Optional[int] = None
    side: str = PositionSide.SHORT.value

    def is_open(self) -> bool:
        return self.exit_index is None

    def pnl(self) -> Optional[float]:
        """Realised short-side PnL, or ``None`` while the trade is open."""
        if self.exit_price is None:
            return None
        return (self.entry_price - self.exit_price) * self.quantity

    def close(self, price: float, index: int) -> float:
        if not self.is_open():
            raise ValueError(
                f"Trade opened at index {self.entry_index} is already closed"
            )
        self.exit_price = price
        self.exit_index = index
        return self.pnl()


@dataclass
class BacktestResult:
    """Trade ledger plus aggregate PnL accumulated over one pass."""
    trades: List[Trade] = field(default_factory=list)
    total_pnl: float = 0.0
    wins: int = 0
    losses: int = 0

    def record(self, trade: Trade) -> float:
        """Append a closed trade to the ledger and update the totals."""
        pnl = trade.pnl()
        if pnl is None:
            raise ValueError("Only closed trades can be recorded")
        self.total_pnl += pnl
        # Break-even trades count as wins.
        if pnl >= 0.0:
            self.wins += 1
        else:
            self.losses += 1
        self.trades.append(trade)
        return pnl

    def summary(self, symbol: str) -> str:
        return (
            f"{symbol}: trades={len(self.trades)}, pnl={self.total_pnl:.2f}, "
            f"wins={self.wins}, losses={self.losses}"
        )


@dataclass(frozen=True)
class IpoInfo:
    """One row of an IPO/lockup dataset."""
    symbol: str
    lockup_expiration_date: dt.date

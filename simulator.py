"""
lockup_backtest.simulator
=========================

This module implements a simple bar-by-bar trading simulator for a
single instrument.  It keeps the one open position a strategy may hold,
applies short-side PnL accounting when the position is closed and
collects the finished trades into a :class:`models.BacktestResult`.
Bars come from :mod:`data_loader` and lockup lookups from :mod:`lockup`.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional, Sequence

from lockup import AlwaysInLockupWindow, LockupCalendar
from models import BacktestResult, Bar, PositionSide, Trade

__all__ = ["EPOCH", "Simulator"]

DATE_FORMAT = "%Y-%m-%d"
# Substituted for bar dates that cannot be parsed.
EPOCH = dt.date(1970, 1, 1)


class Simulator:
    """Single-instrument simulator holding at most one short position."""

    def __init__(
        self,
        bars: Sequence[Bar],
        symbol: str,
        lockup: Optional[LockupCalendar] = None,
        debug: bool = False,
    ) -> None:
        self.bars = bars
        self.symbol = symbol
        self.lockup = lockup if lockup is not None else AlwaysInLockupWindow()
        self.debug = debug
        # The open trade is the only state that changes between bars; the
        # ledger grows monotonically as trades are closed.
        self.position: Optional[Trade] = None
        self.ledger = BacktestResult()

    def _log(self, msg: str) -> None:
        # Print debug messages only when the user enables --debug.
        if self.debug:
            print(msg)

    @property
    def side(self) -> PositionSide:
        return PositionSide.FLAT if self.position is None else PositionSide.SHORT

    # Market data API
    def get_close(self, dt_index: int) -> float:
        if dt_index < 0 or dt_index >= len(self.bars):
            raise IndexError("Bar index out of bounds")
        return self.bars[dt_index].close

    def trade_date(self, dt_index: int) -> dt.date:
        raw = self.bars[dt_index].date
        try:
            return dt.datetime.strptime(raw, DATE_FORMAT).date()
        except (TypeError, ValueError):
            # A bad date should not abort the run.
            self._log(f"Bar {dt_index}: unparseable date {raw!r}, using {EPOCH}")
            return EPOCH

    def in_lockup_window(self, dt_index: int) -> bool:
        return self.lockup.is_within_lockup_window(
            self.symbol, self.trade_date(dt_index)
        )

    # Position API
    def open_short(self, dt_index: int, price: float, quantity: float = 1.0) -> Trade:
        if self.position is not None:
            raise RuntimeError(
                f"Position opened at index {self.position.entry_index} is still open"
            )
        self.position = Trade(entry_price=price, quantity=quantity, entry_index=dt_index)
        self._log(f"{self.bars[dt_index].date} Enter SHORT at {price:.2f}")
        return self.position

    def close_position(self, dt_index: int, price: float) -> float:
        if self.position is None:
            raise RuntimeError("No open position to close")
        trade = self.position
        trade.close(price, dt_index)
        pnl = self.ledger.record(trade)
        self.position = None
        self._log(
            f"{self.bars[dt_index].date} Exit SHORT at {price:.2f}, PnL {pnl:.2f}"
        )
        return pnl

    def square_off(self, dt_index: int) -> None:
        # Close any open position at the given bar's close.
        if self.position is None:
            return
        self._log(f"Square off SHORT position at bar {dt_index}")
        self.close_position(dt_index, self.get_close(dt_index))

    def unrealised_pnl(self, dt_index: int) -> float:
        if self.position is None:
            return 0.0
        return (self.position.entry_price - self.get_close(dt_index)) * self.position.quantity

    def result(self) -> BacktestResult:
        return self.ledger

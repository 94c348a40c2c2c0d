"""
lockup
======

IPO lockup-expiration lookups used as an entry filter by the lockup
short strategy.  The simulator only ever asks one question: is this
symbol within a few days of its lockup expiring on this date?  Any
:class:`LockupCalendar` subclass can answer it, so a real IPO data
source can be plugged in without touching the strategy.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List

import pandas as pd

from models import IpoInfo

__all__ = [
    "LockupDataError",
    "LockupCalendar",
    "AlwaysInLockupWindow",
    "IpoLockupCalendar",
]


class LockupDataError(ValueError):
    """Raised when an IPO/lockup dataset cannot be read."""


class LockupCalendar:
    """Base class for anything that can answer lockup-window queries."""

    def is_within_lockup_window(self, symbol: str, date: dt.date) -> bool:
        raise NotImplementedError

    def screen(self, date: dt.date) -> List[IpoInfo]:
        """Return the IPOs known to this calendar as of ``date``."""
        return []


class AlwaysInLockupWindow(LockupCalendar):
    """Placeholder calendar that treats every day as inside the window.

    In real usage IPO and lockup data would come from an API; this stub
    reports a single demo IPO expiring on whatever day is asked about.
    """

    def is_within_lockup_window(self, symbol: str, date: dt.date) -> bool:
        # Any screened IPO counts; the demo entry is always there.
        return len(self.screen(date)) > 0

    def screen(self, date: dt.date) -> List[IpoInfo]:
        return [IpoInfo(symbol="DEMO", lockup_expiration_date=date)]


class IpoLockupCalendar(LockupCalendar):
    """Lockup calendar backed by a list of IPO records."""

    def __init__(
        self, ipos: Iterable[IpoInfo], min_days: int = 1, max_days: int = 3
    ) -> None:
        self.ipos: List[IpoInfo] = list(ipos)
        self.min_days = min_days
        self.max_days = max_days

    @classmethod
    def from_csv(
        cls, path: str, min_days: int = 1, max_days: int = 3
    ) -> "IpoLockupCalendar":
        """Load ``symbol,lockup_expiration_date`` rows from a CSV file."""
        try:
            df = pd.read_csv(path, dtype={"symbol": str})
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise LockupDataError(f"Failed to load lockup data from {path}: {e}") from e
        missing = {"symbol", "lockup_expiration_date"} - set(df.columns)
        if missing:
            raise LockupDataError(
                f"Lockup file {path} is missing columns: {', '.join(sorted(missing))}"
            )
        try:
            expirations = pd.to_datetime(
                df["lockup_expiration_date"].astype(str).str.strip(), format="%Y-%m-%d"
            )
        except ValueError as e:
            raise LockupDataError(f"Malformed lockup date in {path}: {e}") from e
        ipos = [
            IpoInfo(symbol=str(symbol).strip(), lockup_expiration_date=ts.date())
            for symbol, ts in zip(df["symbol"], expirations)
        ]
        return cls(ipos, min_days=min_days, max_days=max_days)

    def screen(self, date: dt.date) -> List[IpoInfo]:
        # Only lockups that have not expired yet are still interesting.
        return [ipo for ipo in self.ipos if ipo.lockup_expiration_date >= date]

    def is_within_lockup_window(self, symbol: str, date: dt.date) -> bool:
        for ipo in self.screen(date):
            if ipo.symbol != symbol:
                continue
            days_until = (ipo.lockup_expiration_date - date).days
            if self.min_days <= days_until <= self.max_days:
                return True
        return False

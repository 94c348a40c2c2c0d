"""
lockup_backtest.data_loader
===========================

This module contains the :class:`BarLoader` responsible for reading daily
OHLCV bars for a single instrument from a CSV file.  Separating data
loading into its own module keeps the simulator independent from
file format details and eases testing.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from models import Bar

__all__ = ["BarDataError", "BarLoader", "load_bars"]

REQUIRED_COLUMNS = ["date", "open", "high", "low", "close", "volume"]
NUMERIC_COLUMNS = REQUIRED_COLUMNS[1:]


class BarDataError(ValueError):
    """Raised when a bar file is missing or contains malformed rows."""


class BarLoader:
    """Utility class to load daily OHLCV bars from disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        # Load and validate immediately so the engine only ever receives
        # complete bars.
        self.frame: pd.DataFrame = self._load_frame(path)
        self.bars: List[Bar] = self._to_bars(self.frame)

    @staticmethod
    def _load_frame(path: str) -> pd.DataFrame:
        try:
            # Read every field as text with no NA markers: dates stay raw for the
            # simulator to parse and numbers are validated below.
            df = pd.read_csv(
                path, dtype=str, keep_default_na=False, skipinitialspace=True
            )
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise BarDataError(f"Failed to load bars from {path}: {e}") from e
        missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            raise BarDataError(
                f"Bar file {path} is missing columns: {', '.join(missing)}"
            )
        df = df[REQUIRED_COLUMNS].copy()
        df["date"] = df["date"].str.strip()
        for col in NUMERIC_COLUMNS:
            converted = pd.to_numeric(df[col], errors="coerce")
            bad = converted.isna()
            if bad.any():
                # Report the first offending row the way a reader would count it.
                row = int(df.index[bad][0])
                raise BarDataError(
                    f"Malformed row {row + 1} in {path}: "
                    f"{col}={df[col].iloc[row]!r} is not a number"
                )
            df[col] = converted.astype(float)
        return df

    @staticmethod
    def _to_bars(df: pd.DataFrame) -> List[Bar]:
        # Row order is the file order; bars are assumed to be sorted by date.
        return [
            Bar(
                date=row.date,
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
            )
            for row in df.itertuples(index=False)
        ]


def load_bars(path: str) -> List[Bar]:
    """Read ``date,open,high,low,close,volume`` rows from ``path``."""
    return BarLoader(path).bars

"""
indicators
=====================

This module defines helper functions for computing the technical
indicators used by the lockup short strategy.  Separating these
functions into their own module promotes reuse across strategies and
makes unit testing straightforward.

Indicators provided:

* :func:'compute_rsi'-  Wilder-smoothed Relative Strength Index (RSI).
* :func:'volume_relative_high'-  Volume above the trailing window maximum.
* :func:'indicator_frame'-  Both indicators lined up with the bars in a DataFrame.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from models import Bar

__all__ = ["compute_rsi", "volume_relative_high", "indicator_frame"]


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    # No losses in the window means infinite relative strength, so RSI pins at 100.
    rs = math.inf if avg_loss == 0.0 else avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def compute_rsi(closes: Sequence[float], period: int = 14) -> List[Optional[float]]:
    """Compute the Relative Strength Index (RSI) with Wilder smoothing.

    The first value is seeded from the simple average of the first
    ``period`` price changes, so ``rsi[period]`` is the earliest defined
    value.  Later values apply the recurrence
    ``avg = (avg * (period - 1) + x) / period`` to gains and losses.

    Parameters
    ----------
    closes : sequence of float
        Closing prices, oldest first.
    period : int, optional
        Number of periods for RSI calculation, default 14.

    Returns
    -------
    list of float or None
        RSI values aligned with 'closes'; ``None`` during the warm-up.
    """
    values = [float(c) for c in np.asarray(closes, dtype=float)]
    rsis: List[Optional[float]] = [None] * len(values)
    if period == 0 or len(values) < period + 1:
        return rsis
    gains = 0.0
    losses = 0.0
    # Seed window covers closes[0..period], i.e. the first `period` changes.
    for i in range(1, period + 1):
        change = values[i] - values[i - 1]
        if change >= 0.0:
            gains += change
        else:
            losses -= change
    avg_gain = gains / period
    avg_loss = losses / period
    rsis[period] = _rsi_from_averages(avg_gain, avg_loss)
    for i in range(period + 1, len(values)):
        change = values[i] - values[i - 1]
        gain = max(change, 0.0)
        loss = max(-change, 0.0)
        avg_gain = (avg_gain * (period - 1.0) + gain) / period
        avg_loss = (avg_loss * (period - 1.0) + loss) / period
        rsis[i] = _rsi_from_averages(avg_gain, avg_loss)
    return rsis


def volume_relative_high(volumes: Sequence[float], window: int = 20) -> List[bool]:
    """Flag bars whose volume beats every volume in the trailing window.

    Parameters
    ----------
    volumes : sequence of float
        Traded volume per bar, oldest first.
    window : int, optional
        Number of preceding bars to compare against, default 20.

    Returns
    -------
    list of bool
        ``True`` where ``volumes[i] > max(volumes[i - window:i])``.  The
        first ``window`` entries are always ``False`` and ties do not count.
    """
    values = pd.Series(np.asarray(volumes, dtype=float))
    if window == 0:
        return [False] * len(values)
    # Max of the `window` bars before each bar; NaN until the window fills,
    # and NaN comparisons are False.
    max_prev = values.rolling(window).max().shift(1)
    return [bool(flag) for flag in values > max_prev]


def indicator_frame(
    bars: Sequence[Bar], rsi_period: int = 14, volume_window: int = 20
) -> pd.DataFrame:
    """Return closes, volumes and both indicators in one DataFrame.

    Handy for eyeballing why a signal did or did not fire on a given day.
    """
    closes = [bar.close for bar in bars]
    volumes = [bar.volume for bar in bars]
    return pd.DataFrame(
        {
            "close": closes,
            "volume": volumes,
            "rsi": compute_rsi(closes, rsi_period),
            "volume_high": volume_relative_high(volumes, volume_window),
        },
        index=pd.Index([bar.date for bar in bars], name="date"),
    )

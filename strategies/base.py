"""
lockup_backtest.strategies.base
===============================

Defines the hooks every strategy exposes to the backtest runner.  A run
walks one instrument's daily bars exactly once: `on_start` before the
first bar, `on_bar` for each trading day in order, then `on_finish` on
the last bar so nothing is left open in the simulator.
"""

from __future__ import annotations

from simulator import Simulator

__all__ = ["BaseStrategy"]


class BaseStrategy:
    """Abstract base class for single-instrument daily-bar strategies."""

    def __init__(self, simulator: Simulator) -> None:
        # Positions live in the simulator; strategies only decide when to
        # open and close them.
        self.simulator = simulator

    def on_start(self, dt_index: int) -> None:
        """Precompute anything derived from the full bar series.

        ``dt_index`` is always 0.  Indicator arrays built here must stay
        aligned with ``simulator.bars``.
        """
        pass

    def on_bar(self, dt_index: int) -> None:
        """Decide entries and exits using bar ``dt_index``'s close."""
        raise NotImplementedError

    def on_finish(self, dt_index: int) -> None:
        """Settle any open position at the last bar, ``dt_index``."""
        self.simulator.square_off(dt_index)

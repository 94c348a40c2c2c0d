"""
lockup_backtest.strategies.lockup_short
=======================================

Implements a short-only momentum fade around IPO lockup expirations.
It trades a single symbol on daily bars.

* Short entries occur when RSI(14) > 65, volume beats the max of the
  previous 20 bars and the symbol is 1-3 days from lockup expiry.
* Exits occur when RSI drops below 55, price falls 3 % (take profit) or
  rises 3 % (stop loss) from the entry.
* Exits are checked on the entry bar as well, right after the entry.
* Any position still open after the last bar is closed at its close.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from indicators import compute_rsi, volume_relative_high
from simulator import Simulator
from .base import BaseStrategy

__all__ = ["StrategyConfig", "LockupShortStrategy"]


@dataclass(frozen=True)
class StrategyConfig:
    """Thresholds for :class:`LockupShortStrategy`."""
    rsi_period: int = 14
    volume_window: int = 20
    entry_rsi: float = 65.0
    exit_rsi: float = 55.0
    # Multipliers on the entry price, stored as-is so the exit levels are
    # exactly entry * 0.97 and entry * 1.03.
    take_profit_factor: float = 0.97
    stop_loss_factor: float = 1.03
    quantity: float = 1.0


class LockupShortStrategy(BaseStrategy):
    """Short the instrument on overbought, high-volume days near lockup expiry."""

    def __init__(self, simulator: Simulator, config: Optional[StrategyConfig] = None) -> None:
        super().__init__(simulator)
        self.config = config if config is not None else StrategyConfig()
        # Populated during on_start so the per-bar work is only lookups.
        self.closes: List[float] = []
        self.rsi_values: List[Optional[float]] = []
        self.volume_high: List[bool] = []

    def on_start(self, dt_index: int) -> None:
        bars = self.simulator.bars
        self.closes = [bar.close for bar in bars]
        self.rsi_values = compute_rsi(self.closes, self.config.rsi_period)
        self.volume_high = volume_relative_high(
            [bar.volume for bar in bars], self.config.volume_window
        )

    def _entry_signal(self, dt_index: int) -> bool:
        rsi_val = self.rsi_values[dt_index]
        # Missing RSI during warm-up never triggers an entry.
        rsi_ok = rsi_val is not None and rsi_val > self.config.entry_rsi
        vol_ok = self.volume_high[dt_index]
        # The lockup calendar is consulted on every bar, flat or not.
        within_lockup_window = self.simulator.in_lockup_window(dt_index)
        return rsi_ok and vol_ok and within_lockup_window

    def _exit_signal(self, dt_index: int) -> bool:
        pos = self.simulator.position
        price = self.closes[dt_index]
        rsi_val = self.rsi_values[dt_index]
        take_profit = pos.entry_price * self.config.take_profit_factor
        stop_loss = pos.entry_price * self.config.stop_loss_factor
        rsi_exit = rsi_val is not None and rsi_val < self.config.exit_rsi
        return rsi_exit or price <= take_profit or price >= stop_loss

    def on_bar(self, dt_index: int) -> None:
        price = self.closes[dt_index]
        enter = self._entry_signal(dt_index)
        if self.simulator.position is None and enter:
            self.simulator.open_short(dt_index, price, self.config.quantity)
        # A position opened on this bar is checked for exit right away.
        if self.simulator.position is not None:
            if self._exit_signal(dt_index):
                self.simulator.close_position(dt_index, price)
            else:
                self.simulator._log(
                    f"{self.simulator.bars[dt_index].date} Holding SHORT, "
                    f"unrealised PnL {self.simulator.unrealised_pnl(dt_index):.2f}"
                )

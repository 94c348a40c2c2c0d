"""
lockup_backtest.backtest
========================

This module provides a command line entry point for running the lockup
short strategy over a CSV of daily bars.  It wires together the data
loader, lockup calendar, simulator and strategy, iterates over the bars
and reports the resulting trade log and PnL.
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, Optional, Sequence

import pandas as pd

from data_loader import BarDataError, load_bars
from indicators import indicator_frame
from lockup import AlwaysInLockupWindow, IpoLockupCalendar, LockupCalendar, LockupDataError
from models import BacktestResult, Bar
from simulator import Simulator
from strategies import LockupShortStrategy, StrategyConfig

__all__ = ["run_strategy", "trades_frame", "run_backtest", "parse_args", "main"]


def run_strategy(
    bars: Sequence[Bar],
    symbol: str,
    lockup: Optional[LockupCalendar] = None,
    config: Optional[StrategyConfig] = None,
    debug: bool = False,
) -> BacktestResult:
    """Replay the lockup short strategy over ``bars`` and return the ledger."""
    if len(bars) == 0:
        return BacktestResult()
    # A fresh simulator per call keeps runs independent of each other.
    sim = Simulator(bars, symbol, lockup=lockup, debug=debug)
    strategy = LockupShortStrategy(sim, config)
    # Allow the strategy to prepare its indicators before the loop.
    strategy.on_start(0)
    for dt_index in range(len(bars)):
        strategy.on_bar(dt_index)
    # Give the strategy a final callback to close any open position.
    strategy.on_finish(len(bars) - 1)
    return sim.result()


def trades_frame(result: BacktestResult, bars: Sequence[Bar]) -> pd.DataFrame:
    """Tabulate the trade ledger with entry/exit dates and per-trade PnL."""
    rows = [
        {
            "entry_date": bars[trade.entry_index].date,
            "exit_date": bars[trade.exit_index].date,
            "entry_price": trade.entry_price,
            "exit_price": trade.exit_price,
            "quantity": trade.quantity,
            "pnl": trade.pnl(),
        }
        for trade in result.trades
    ]
    return pd.DataFrame(
        rows,
        columns=["entry_date", "exit_date", "entry_price", "exit_price", "quantity", "pnl"],
    )


def run_backtest(
    data_file: str,
    symbol: str = "DEMO",
    lockup_file: Optional[str] = None,
    debug: bool = False,
) -> Optional[BacktestResult]:
    """Load bars from ``data_file``, run the strategy and print a report."""
    bars = load_bars(data_file)
    if not bars:
        print(f"No data found in {data_file}")
        return None
    # Without a lockup file every day counts as inside the window.
    if lockup_file is not None:
        lockup: LockupCalendar = IpoLockupCalendar.from_csv(lockup_file)
    else:
        lockup = AlwaysInLockupWindow()
    if debug:
        # Show the indicator values behind every entry/exit decision.
        config = StrategyConfig()
        print("Indicators:")
        print(
            indicator_frame(bars, config.rsi_period, config.volume_window).to_string()
        )
    result = run_strategy(bars, symbol, lockup=lockup, debug=debug)
    if result.trades:
        print("Trade log:")
        for _, trade in trades_frame(result, bars).iterrows():
            print(
                f"SHORT | {trade.entry_date} -> {trade.exit_date} | "
                f"Entry: {trade.entry_price:.2f}, Exit: {trade.exit_price:.2f}, PnL: {trade.pnl:.2f}"
            )
    print(result.summary(symbol))
    return result


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    # argparse builds a friendly command-line interface for the backtester.
    parser = argparse.ArgumentParser(description="Run the IPO lockup short backtest")
    # CSV with date,open,high,low,close,volume columns, one row per day.
    parser.add_argument("--data-file", default="data/sample.csv", help="Path to daily OHLCV CSV")
    parser.add_argument("--symbol", default="DEMO", help="Symbol the bars belong to")
    # Optional symbol,lockup_expiration_date CSV; omitted means always in window.
    parser.add_argument("--lockup-file", default=None, help="Path to IPO lockup calendar CSV")
    # Toggle extra print statements inside the simulator and strategy.
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> None:
    # Parse CLI arguments (or provided list for unit tests) and kick off the run.
    args = parse_args(argv)
    try:
        run_backtest(
            data_file=args.data_file,
            symbol=args.symbol,
            lockup_file=args.lockup_file,
            debug=args.debug,
        )
    except BarDataError as e:
        print(f"Failed to read {args.data_file}: {e}")
        sys.exit(1)
    except LockupDataError as e:
        print(f"Failed to read {args.lockup_file}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

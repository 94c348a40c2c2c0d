"""
lockup_backtest package
=======================

Backtester for a short-only strategy that fades overbought, high-volume
days shortly before an IPO lockup expires.  The code is split into
several coherent modules:

* :mod:`indicators` – RSI and volume relative-high indicators.
* :mod:`models` – Dataclasses for bars, trades and backtest results.
* :mod:`data_loader` – Daily OHLCV CSV loading.
* :mod:`lockup` – Lockup-expiration calendars consulted before entries.
* :mod:`simulator` – Single-position trading simulator.
* :mod:`strategies` – Package containing base and concrete strategies.

The top-level entry point for running a backtest is ``backtest.py``.
"""


"""
python3 -m backtest \
  --data-file data/sample.csv \
  --symbol DEMO \
  --debug
"""

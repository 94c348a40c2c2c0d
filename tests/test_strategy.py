import datetime as dt

import pytest

from backtest import run_strategy
from indicators import compute_rsi
from lockup import IpoLockupCalendar, LockupCalendar
from models import BacktestResult, IpoInfo
from simulator import EPOCH
from strategies import LockupShortStrategy, StrategyConfig


class NeverInWindow(LockupCalendar):
    def is_within_lockup_window(self, symbol, date):
        return False


class RecordingCalendar(LockupCalendar):
    def __init__(self):
        self.calls = []

    def is_within_lockup_window(self, symbol, date):
        self.calls.append((symbol, date))
        return True


def rally(base=100, n=23):
    # Strictly rising closes keep RSI(14) pinned at 100 from bar 14.
    return [float(base + i) for i in range(n)]


def assert_consistent(result):
    assert all(not trade.is_open() for trade in result.trades)
    assert result.wins + result.losses == len(result.trades)
    assert result.total_pnl == sum(
        (t.entry_price - t.exit_price) * t.quantity for t in result.trades
    )


def test_empty_input_gives_default_result():
    assert run_strategy([], "DEMO") == BacktestResult()


def test_take_profit_exit(make_bars, spike_volumes):
    closes = rally() + [118.0, 117.0, 116.0]
    # RSI stays above the exit level, so only the 3% drop can close it.
    assert compute_rsi(closes, 14)[23] > 55.0
    result = run_strategy(make_bars(closes, spike_volumes(len(closes))), "DEMO")
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert (trade.entry_index, trade.entry_price) == (22, 122.0)
    assert (trade.exit_index, trade.exit_price) == (23, 118.0)
    assert result.total_pnl == 4.0
    assert (result.wins, result.losses) == (1, 0)
    assert_consistent(result)


def test_stop_loss_exit(make_bars, spike_volumes):
    closes = rally() + [126.0, 127.0]
    result = run_strategy(make_bars(closes, spike_volumes(len(closes))), "DEMO")
    assert [(t.entry_index, t.exit_index) for t in result.trades] == [(22, 23)]
    assert result.total_pnl == -4.0
    assert (result.wins, result.losses) == (0, 1)
    assert_consistent(result)


def test_rsi_exit(make_bars, spike_volumes):
    closes = rally(base=1000) + [995.0, 994.0]
    rsi = compute_rsi(closes, 14)
    assert rsi[23] < 55.0
    # Still inside the +/-3% band, so RSI is what triggers the exit.
    assert 1022.0 * 0.97 < 995.0 < 1022.0 * 1.03
    result = run_strategy(make_bars(closes, spike_volumes(len(closes))), "DEMO")
    trade = result.trades[0]
    assert (trade.exit_index, trade.exit_price) == (23, 995.0)
    assert result.total_pnl == 27.0
    assert result.wins == 1
    assert_consistent(result)


def test_open_position_is_closed_at_last_bar(make_bars, spike_volumes):
    closes = rally(n=24)
    result = run_strategy(make_bars(closes, spike_volumes(len(closes))), "DEMO")
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert (trade.exit_index, trade.exit_price) == (23, 123.0)
    assert result.total_pnl == -1.0
    assert (result.wins, result.losses) == (0, 1)
    assert_consistent(result)


def test_entry_needs_volume_spike(make_bars):
    closes = rally() + [118.0]
    result = run_strategy(make_bars(closes), "DEMO")
    assert result.trades == []


def test_entry_needs_lockup_window(make_bars, spike_volumes):
    closes = rally() + [118.0]
    result = run_strategy(
        make_bars(closes, spike_volumes(len(closes))), "DEMO", lockup=NeverInWindow()
    )
    assert result == BacktestResult()


def test_entry_needs_overbought_rsi(make_bars, spike_volumes):
    # Falling prices keep RSI at 0 even with the volume spike.
    closes = [float(200 - i) for i in range(26)]
    result = run_strategy(make_bars(closes, spike_volumes(len(closes))), "DEMO")
    assert result.trades == []


def test_real_calendar_gates_entry(make_bars, spike_volumes):
    closes = rally() + [118.0]
    bars = make_bars(closes, spike_volumes(len(closes)))
    entry_day = dt.date.fromisoformat(bars[22].date)
    near = IpoLockupCalendar([IpoInfo("ACME", entry_day + dt.timedelta(days=2))])
    far = IpoLockupCalendar([IpoInfo("ACME", entry_day + dt.timedelta(days=30))])
    assert len(run_strategy(bars, "ACME", lockup=near).trades) == 1
    assert run_strategy(bars, "ACME", lockup=far).trades == []
    assert run_strategy(bars, "OTHER", lockup=near).trades == []


def test_exit_checked_on_entry_bar(make_bars, spike_volumes):
    closes = rally() + [123.0]
    config = StrategyConfig(exit_rsi=101.0)
    result = run_strategy(make_bars(closes, spike_volumes(len(closes))), "DEMO", config=config)
    assert [(t.entry_index, t.exit_index) for t in result.trades] == [(22, 22)]
    assert result.total_pnl == 0.0
    assert (result.wins, result.losses) == (1, 0)


def test_bad_dates_fall_back_without_aborting(make_bars, spike_volumes):
    closes = rally() + [118.0]
    calendar = RecordingCalendar()
    bars = make_bars(closes, spike_volumes(len(closes)), dates=["n/a"] * len(closes))
    result = run_strategy(bars, "DEMO", lockup=calendar)
    assert len(result.trades) == 1
    assert len(calendar.calls) == len(bars)
    assert set(calendar.calls) == {("DEMO", EPOCH)}


def test_runs_are_independent(make_bars, spike_volumes):
    closes = rally() + [118.0, 117.0]
    bars = make_bars(closes, spike_volumes(len(closes)))
    first = run_strategy(bars, "DEMO")
    second = run_strategy(bars, "DEMO")
    assert first == second
    assert first is not second


def test_several_trades_one_at_a_time(make_bars):
    # Two rallies, each ending in a volume spike followed by a 3% drop.
    closes = rally() + [118.0] + [118.0 + i for i in range(1, 25)]
    volumes = [1000.0] * len(closes)
    volumes[22] = 5000.0
    volumes[46] = 9000.0
    result = run_strategy(make_bars(closes, volumes), "DEMO")
    entries = [t.entry_index for t in result.trades]
    assert entries[0] == 22
    assert entries == sorted(entries)
    for prev, nxt in zip(result.trades, result.trades[1:]):
        assert prev.exit_index <= nxt.entry_index
    assert_consistent(result)


def test_strategy_hooks_drive_simulator(make_bars, spike_volumes):
    from simulator import Simulator

    closes = rally(n=24)
    sim = Simulator(make_bars(closes, spike_volumes(len(closes))), "DEMO")
    strategy = LockupShortStrategy(sim)
    strategy.on_start(0)
    assert strategy.rsi_values[13] is None
    assert strategy.volume_high[22] is True
    for i in range(len(closes)):
        strategy.on_bar(i)
    assert sim.position is not None
    strategy.on_finish(len(closes) - 1)
    assert sim.position is None
    assert len(sim.result().trades) == 1


@pytest.mark.parametrize("field", ["rsi_period", "volume_window", "entry_rsi", "exit_rsi"])
def test_config_defaults(field):
    expected = {"rsi_period": 14, "volume_window": 20, "entry_rsi": 65.0, "exit_rsi": 55.0}
    assert getattr(StrategyConfig(), field) == expected[field]

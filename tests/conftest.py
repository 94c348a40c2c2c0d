import datetime as dt

import pytest

from models import Bar


def _make_bars(closes, volumes=None, dates=None, start=dt.date(2024, 1, 1)):
    if volumes is None:
        volumes = [1000.0] * len(closes)
    if dates is None:
        dates = [(start + dt.timedelta(days=i)).isoformat() for i in range(len(closes))]
    return [
        Bar(date=d, open=float(c), high=float(c) + 1.0, low=float(c) - 1.0, close=float(c), volume=float(v))
        for d, c, v in zip(dates, closes, volumes)
    ]


@pytest.fixture
def make_bars():
    """Build daily bars from closes (and optionally volumes/dates)."""
    return _make_bars


@pytest.fixture
def spike_volumes():
    """Volumes flat at 1000 with a single spike on bar 22."""

    def _volumes(n, spike_index=22):
        volumes = [1000.0] * n
        volumes[spike_index] = 5000.0
        return volumes

    return _volumes

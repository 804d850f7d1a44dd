"""
Pytest fixtures for the indicator library tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quant_indicators.core.num import DecimalNumFactory, DoubleNumFactory  # noqa: E402
from quant_indicators.core.series import BarSeries  # noqa: E402

START_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(params=["decimal", "double"])
def num_factory(request):
    """Each test runs once per numeric representation."""
    if request.param == "decimal":
        return DecimalNumFactory()
    return DoubleNumFactory()


@pytest.fixture
def decimal_factory():
    """Decimal factory with the default precision."""
    return DecimalNumFactory()


@pytest.fixture
def make_series(num_factory):
    """Build a daily series from bar rows.

    Each row is either a close price, or a mapping with any of ``open``,
    ``high``, ``low``, ``close``, ``volume``, ``amount``. Missing prices
    default to the close, missing volume to zero.
    """

    def _make(rows, name="test_series", factory=None, maximum_bar_count=None):
        factory = factory or num_factory
        series = BarSeries(name=name, num_factory=factory)
        for i, row in enumerate(rows):
            if not isinstance(row, dict):
                row = {"close": row}
            close = row.get("close")
            series.add_ohlcv(
                end_time=START_TIME + timedelta(days=i),
                open=row.get("open", close),
                high=row.get("high", close),
                low=row.get("low", close),
                close=close,
                volume=row.get("volume", 0),
                amount=row.get("amount", 0),
                time_period=timedelta(days=1),
            )
        if maximum_bar_count is not None:
            series.maximum_bar_count = maximum_bar_count
        return series

    return _make


@pytest.fixture
def ohlcv_rows():
    """Twenty daily OHLCV bars with a rise, a pullback and a recovery."""
    closes = [10, 11, 12, 11.5, 13, 14, 13.5, 12, 11, 11.5, 12.5, 13, 14.5, 15, 14, 13, 14, 15.5, 16, 15]
    rows = []
    for i, close in enumerate(closes):
        rows.append(
            {
                "open": close - 0.25,
                "high": close + 0.5,
                "low": close - 0.75,
                "close": close,
                "volume": 1000 + 100 * i,
            }
        )
    return rows

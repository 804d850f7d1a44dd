"""
Unit tests for core/bar.py and core/series.py
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd
import polars as pl
import pytest

from quant_indicators.core.exceptions import (
    DataValidationError,
    EvictedIndexError,
    IndexOutOfRangeError,
    NumTypeMismatchError,
    ValidationError,
)
from quant_indicators.core.num import DecimalNumFactory, DoubleNumFactory, NaN
from quant_indicators.core.series import (
    BarSeries,
    BarSeriesBuilder,
    bar_series_from_arrays,
    bar_series_from_pandas,
    bar_series_from_polars,
    make_bar,
)

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestBar:
    """Tests for the Bar model."""

    def test_begin_time_derived_from_period(self, decimal_factory):
        """Test begin_time is end_time minus the period."""
        bar = make_bar(decimal_factory, START, 1, 2, 0.5, 1.5, time_period=timedelta(hours=1))
        assert bar.begin_time == START - timedelta(hours=1)
        assert bar.in_period(START - timedelta(minutes=30))
        assert not bar.in_period(START)

    def test_non_positive_period_rejected(self, decimal_factory):
        """Test a zero time period fails validation."""
        with pytest.raises(ValueError):
            make_bar(decimal_factory, START, 1, 1, 1, 1, time_period=0)

    def test_missing_prices_are_nan(self, decimal_factory):
        """Test None prices become NaN."""
        bar = make_bar(decimal_factory, START, None, None, None, 10, time_period=60)
        assert bar.open is NaN
        assert bar.close == 10

    def test_bullish_and_bearish(self, decimal_factory):
        """Test bullish and bearish candles."""
        up = make_bar(decimal_factory, START, 1, 3, 1, 2, time_period=60)
        down = make_bar(decimal_factory, START, 2, 3, 1, 1, time_period=60)
        assert up.is_bullish() and not up.is_bearish()
        assert down.is_bearish() and not down.is_bullish()

    def test_with_trade_accumulates(self, decimal_factory):
        """Test trades accumulate volume and amount and widen the range."""
        bar = make_bar(decimal_factory, START, None, None, None, None, volume=None, amount=None, time_period=60)
        bar = bar.with_trade(decimal_factory.num_of(2), decimal_factory.num_of(10))
        bar = bar.with_trade(decimal_factory.num_of(3), decimal_factory.num_of(12))
        assert bar.open == 10
        assert bar.high == 12
        assert bar.low == 10
        assert bar.close == 12
        assert bar.volume == 5
        assert bar.amount == 56
        assert bar.trades == 2

    def test_naive_end_time_is_utc(self, decimal_factory):
        """Test a naive end time is taken as UTC."""
        bar = make_bar(decimal_factory, datetime(2024, 1, 1), 1, 1, 1, 1, time_period=60)
        assert bar.end_time == START

    def test_to_dict(self, decimal_factory):
        """Test dictionary conversion."""
        bar = make_bar(decimal_factory, START, 1, 2, 0.5, 1.5, time_period=60)
        data = bar.to_dict()
        assert data["close"] == "1.5"
        assert data["time_period_seconds"] == 60.0


class TestBarSeriesIndexing:
    """Tests for the index window of a series."""

    def test_empty_series(self, num_factory):
        """Test an empty series reports -1 bounds."""
        series = BarSeries("empty", num_factory)
        assert series.is_empty()
        assert series.begin_index == -1
        assert series.end_index == -1
        with pytest.raises(IndexOutOfRangeError):
            series.get_bar(0)

    def test_bounds_and_access(self, make_series):
        """Test begin and end index over three bars."""
        series = make_series([1, 2, 3])
        assert series.begin_index == 0
        assert series.end_index == 2
        assert series.bar_count == 3
        assert series[1].close == 2
        assert series.first_bar.close == 1
        assert series.last_bar.close == 3
        assert len(series) == 3

    def test_out_of_range(self, make_series):
        """Test indices past either end raise IndexOutOfRangeError."""
        series = make_series([1, 2, 3])
        with pytest.raises(IndexOutOfRangeError):
            series.get_bar(3)
        with pytest.raises(IndexOutOfRangeError):
            series.get_bar(-1)


class TestBarSeriesMutation:
    """Tests for adding and updating bars."""

    def test_end_times_must_increase(self, make_series, num_factory):
        """Test a bar at or before the last end time is rejected."""
        series = make_series([1, 2])
        with pytest.raises(DataValidationError):
            series.add_ohlcv(START, 1, 1, 1, 1, time_period=timedelta(days=1))

    def test_replace_last_bar(self, make_series):
        """Test replace swaps the last bar and bumps the version."""
        series = make_series([1, 2])
        version = series.last_bar_version
        series.add_ohlcv(START + timedelta(days=1), 5, 5, 5, 5, time_period=timedelta(days=1), replace=True)
        assert series.bar_count == 2
        assert series.last_bar.close == 5
        assert series.last_bar_version == version + 1

    def test_add_price_updates_last_bar(self, make_series):
        """Test add_price moves the close and widens high and low."""
        series = make_series([{"open": 10, "high": 11, "low": 9, "close": 10}])
        series.add_price(12)
        assert series.last_bar.close == 12
        assert series.last_bar.high == 12
        series.add_price(8)
        assert series.last_bar.low == 8

    def test_add_trade_on_empty_series(self, num_factory):
        """Test updating the last bar of an empty series raises."""
        series = BarSeries("empty", num_factory)
        with pytest.raises(DataValidationError):
            series.add_trade(1, 10)

    def test_representation_mismatch(self):
        """Test adding a double bar to a decimal series raises."""
        series = BarSeries("decimal", DecimalNumFactory())
        bar = make_bar(DoubleNumFactory(), START, 1, 1, 1, 1, time_period=60)
        with pytest.raises(NumTypeMismatchError):
            series.add_bar(bar)


class TestMaximumBarCount:
    """Tests for eviction by maximum bar count."""

    def test_eviction_keeps_absolute_indices(self, make_series):
        """Test evicted bars shift begin_index but not the indices of kept bars."""
        series = make_series([1, 2, 3, 4, 5], maximum_bar_count=3)
        assert series.begin_index == 2
        assert series.end_index == 4
        assert series.removed_bars_count == 2
        assert series.get_bar(2).close == 3

    def test_evicted_index_raises(self, make_series):
        """Test querying an evicted index raises EvictedIndexError."""
        series = make_series([1, 2, 3, 4, 5], maximum_bar_count=3)
        with pytest.raises(EvictedIndexError):
            series.get_bar(1)
        # EvictedIndexError is also an IndexOutOfRangeError
        with pytest.raises(IndexOutOfRangeError):
            series.get_bar(0)

    def test_eviction_on_append(self, make_series):
        """Test appending past the bound evicts the oldest bar."""
        series = make_series([1, 2, 3], maximum_bar_count=3)
        series.add_ohlcv(START + timedelta(days=3), 4, 4, 4, 4, time_period=timedelta(days=1))
        assert series.begin_index == 1
        assert series.end_index == 3

    def test_invalid_maximum(self, make_series):
        """Test a non-positive maximum is rejected."""
        series = make_series([1])
        with pytest.raises(DataValidationError):
            series.maximum_bar_count = 0


class TestSubSeries:
    """Tests for get_sub_series."""

    def test_sub_series_is_reindexed(self, make_series):
        """Test the sub-series starts at index 0."""
        series = make_series([1, 2, 3, 4, 5])
        sub = series.get_sub_series(1, 4)
        assert sub.begin_index == 0
        assert sub.end_index == 2
        assert sub[0].close == 2
        assert sub.num_factory is series.num_factory

    def test_invalid_range(self, make_series):
        """Test an empty range raises."""
        series = make_series([1, 2, 3])
        with pytest.raises(IndexOutOfRangeError):
            series.get_sub_series(2, 2)


class TestBuilders:
    """Tests for the series builders."""

    def test_builder(self, num_factory):
        """Test the fluent builder."""
        bar = make_bar(num_factory, START, 1, 1, 1, 1, time_period=60)
        series = (
            BarSeriesBuilder()
            .with_name("built")
            .with_num_factory(num_factory)
            .with_max_bar_count(10)
            .with_bars([bar])
            .build()
        )
        assert series.name == "built"
        assert series.maximum_bar_count == 10
        assert series.bar_count == 1

    def test_from_arrays_defaults_volume(self, num_factory):
        """Test missing volume and amount default to zero."""
        times = [START + timedelta(days=i) for i in range(3)]
        prices = np.array([1.0, 2.0, 3.0])
        series = bar_series_from_arrays(times, prices, prices, prices, prices, num_factory=num_factory)
        assert series.bar_count == 3
        assert series.get_bar(2).close == 3
        assert series.get_bar(0).volume.is_zero()

    def test_from_arrays_length_mismatch(self, num_factory):
        """Test parallel arrays of different lengths raise."""
        with pytest.raises(ValidationError):
            bar_series_from_arrays([START], [1, 2], [1], [1], [1], num_factory=num_factory)

    def test_from_polars(self, num_factory):
        """Test building from a polars frame sorts by timestamp."""
        df = pl.DataFrame(
            {
                "timestamp": [datetime(2024, 1, 2), datetime(2024, 1, 1)],
                "open": [2.0, 1.0],
                "high": [2.5, 1.5],
                "low": [1.5, 0.5],
                "close": [2.25, 1.25],
                "volume": [200.0, 100.0],
            }
        )
        series = bar_series_from_polars(df, name="pl", num_factory=num_factory, time_period=timedelta(days=1))
        assert series.get_bar(0).close == 1.25
        assert series.get_bar(1).volume == 200
        assert series.get_bar(0).end_time == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_from_polars_missing_column(self, num_factory):
        """Test a missing column raises ValidationError."""
        df = pl.DataFrame({"timestamp": [datetime(2024, 1, 1)], "close": [1.0]})
        with pytest.raises(ValidationError):
            bar_series_from_polars(df, num_factory=num_factory)

    def test_from_pandas_datetime_index(self, num_factory):
        """Test a DatetimeIndex and capitalized columns are accepted."""
        index = pd.date_range("2024-01-01", periods=3, freq="D")
        df = pd.DataFrame(
            {
                "Open": [1.0, 2.0, 3.0],
                "High": [1.5, 2.5, 3.5],
                "Low": [0.5, 1.5, 2.5],
                "Close": [1.25, 2.25, 3.25],
                "Volume": [10, 20, 30],
            },
            index=index,
        )
        series = bar_series_from_pandas(df, num_factory=num_factory, time_period=timedelta(days=1))
        assert series.bar_count == 3
        assert series.get_bar(2).close == 3.25
        assert series.get_bar(0).end_time == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_from_pandas_missing_column(self, num_factory):
        """Test a frame without volume raises ValidationError."""
        df = pd.DataFrame(
            {"timestamp": pd.date_range("2024-01-01", periods=1), "open": [1.0], "high": [1.0], "low": [1.0], "close": [1.0]}
        )
        with pytest.raises(ValidationError):
            bar_series_from_pandas(df, num_factory=num_factory)

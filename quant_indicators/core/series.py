"""
Bar series container and builders.

A ``BarSeries`` holds bars ordered by strictly increasing end time and
addresses them through the absolute index window
``[begin_index, end_index]``. With a maximum bar count set, the oldest bars
are evicted as new ones arrive; indices keep counting from the start of the
series, so an evicted index is gone for good and querying it raises
``EvictedIndexError``.

The series is bound to a single ``NumFactory`` for its lifetime. Every bar
added must carry values of that representation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Iterator, Sequence

import numpy as np
import pandas as pd
import polars as pl

from quant_indicators.core.bar import Bar
from quant_indicators.core.exceptions import (
    DataValidationError,
    EvictedIndexError,
    IndexOutOfRangeError,
    NumTypeMismatchError,
    ValidationError,
)
from quant_indicators.core.num import Num, NumberLike, NumFactory
from quant_indicators.core.utils import as_timedelta, to_utc
from quant_indicators.monitoring.logger import log_data

logger = logging.getLogger(__name__)

DEFAULT_SERIES_NAME = "unnamed_series"


def _default_num_factory() -> NumFactory:
    from quant_indicators.config.settings import get_settings

    return get_settings().num_factory()


class BarSeries:
    """Ordered, index-addressable sequence of bars.

    Not safe for concurrent writers: appending bars while indicators are
    being evaluated from another thread is unsupported.
    """

    def __init__(
        self,
        name: str = DEFAULT_SERIES_NAME,
        num_factory: NumFactory | None = None,
        bars: Sequence[Bar] | None = None,
        maximum_bar_count: int | None = None,
    ) -> None:
        """Initialize the series.

        Args:
            name: Series name, used in logs.
            num_factory: Numeric representation for all bars. Defaults to the
                configured ``numeric`` settings.
            bars: Initial bars, in end time order.
            maximum_bar_count: Optional bound on retained bars.
        """
        self.name = name
        self.num_factory = num_factory or _default_num_factory()
        self._bars: list[Bar] = []
        self._removed_bars_count = 0
        self._maximum_bar_count: int | None = None
        self._last_bar_version = 0

        for bar in bars or ():
            self.add_bar(bar)
        if maximum_bar_count is not None:
            self.maximum_bar_count = maximum_bar_count

    # -------------------------------------------------------------------------
    # Index window
    # -------------------------------------------------------------------------

    @property
    def begin_index(self) -> int:
        """First valid index, or -1 for an empty series."""
        if not self._bars:
            return -1
        return self._removed_bars_count

    @property
    def end_index(self) -> int:
        """Last valid index, or -1 for an empty series."""
        if not self._bars:
            return -1
        return self._removed_bars_count + len(self._bars) - 1

    @property
    def bar_count(self) -> int:
        """Number of bars currently retained."""
        return len(self._bars)

    @property
    def removed_bars_count(self) -> int:
        return self._removed_bars_count

    @property
    def last_bar_version(self) -> int:
        """Counter bumped whenever the last bar is appended, replaced or updated."""
        return self._last_bar_version

    def is_empty(self) -> bool:
        return not self._bars

    def check_index(self, index: int) -> None:
        """Raise if ``index`` is outside the valid window.

        Raises:
            EvictedIndexError: If the index existed but was evicted.
            IndexOutOfRangeError: If the index never existed.
        """
        if self._bars and self._removed_bars_count > 0 and 0 <= index < self._removed_bars_count:
            raise EvictedIndexError(
                f"Index {index} of series '{self.name}' was evicted by the maximum bar count",
                index=index,
                removed_bars_count=self._removed_bars_count,
            )
        if not self._bars or index < self.begin_index or index > self.end_index:
            raise IndexOutOfRangeError(
                f"Index {index} is out of range for series '{self.name}'",
                index=index,
                begin_index=self.begin_index,
                end_index=self.end_index,
            )

    # -------------------------------------------------------------------------
    # Bar access
    # -------------------------------------------------------------------------

    def get_bar(self, index: int) -> Bar:
        """Return the bar at absolute ``index``."""
        self.check_index(index)
        return self._bars[index - self._removed_bars_count]

    @property
    def first_bar(self) -> Bar:
        return self.get_bar(self.begin_index)

    @property
    def last_bar(self) -> Bar:
        return self.get_bar(self.end_index)

    @property
    def bars(self) -> list[Bar]:
        """Copy of the retained bars."""
        return list(self._bars)

    def num_of(self, value: NumberLike | None) -> Num:
        """Convert ``value`` through the series' numeric factory."""
        return self.num_factory.num_of(value)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_bar(self, bar: Bar, replace: bool = False) -> None:
        """Append a bar, or replace the last one.

        Args:
            bar: Bar to add. Its values must come from the series' factory.
            replace: If True and the series is not empty, the last bar is
                replaced instead of appending.

        Raises:
            DataValidationError: If the end time does not come after the
                previous bar's end time.
            NumTypeMismatchError: If the bar uses another numeric representation.
        """
        self._check_representation(bar)

        if replace and self._bars:
            if len(self._bars) > 1 and bar.end_time <= self._bars[-2].end_time:
                raise DataValidationError(
                    f"Replacement bar end time {bar.end_time} must be after {self._bars[-2].end_time}",
                    field="end_time",
                    value=bar.end_time,
                )
            self._bars[-1] = bar
            self._last_bar_version += 1
            logger.debug(f"Replaced last bar of series '{self.name}' at index {self.end_index}")
            return

        if self._bars and bar.end_time <= self._bars[-1].end_time:
            raise DataValidationError(
                f"Cannot add a bar with end time {bar.end_time} at or before "
                f"the series end time {self._bars[-1].end_time}",
                field="end_time",
                value=bar.end_time,
            )

        self._bars.append(bar)
        self._last_bar_version += 1
        self._remove_exceeding_bars()

    def add_ohlcv(
        self,
        end_time: datetime,
        open: NumberLike | None,
        high: NumberLike | None,
        low: NumberLike | None,
        close: NumberLike | None,
        volume: NumberLike | None = 0,
        amount: NumberLike | None = 0,
        trades: int = 0,
        time_period: timedelta | int | float | None = None,
        replace: bool = False,
    ) -> Bar:
        """Build a bar from plain values through the series factory and add it."""
        bar = make_bar(
            self.num_factory,
            end_time=end_time,
            open=open,
            high=high,
            low=low,
            close=close,
            volume=volume,
            amount=amount,
            trades=trades,
            time_period=time_period,
        )
        self.add_bar(bar, replace=replace)
        return bar

    def add_trade(self, trade_volume: NumberLike, trade_price: NumberLike) -> None:
        """Record a trade on the last bar."""
        last = self._require_last_bar()
        self._bars[-1] = last.with_trade(self.num_of(trade_volume), self.num_of(trade_price))
        self._last_bar_version += 1

    def add_price(self, price: NumberLike) -> None:
        """Update the last bar with a new price."""
        last = self._require_last_bar()
        self._bars[-1] = last.with_price(self.num_of(price))
        self._last_bar_version += 1

    @property
    def maximum_bar_count(self) -> int | None:
        """Maximum number of retained bars, None for unbounded."""
        return self._maximum_bar_count

    @maximum_bar_count.setter
    def maximum_bar_count(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise DataValidationError(
                "Maximum bar count must be strictly positive",
                field="maximum_bar_count",
                value=value,
            )
        self._maximum_bar_count = value
        self._remove_exceeding_bars()

    def get_sub_series(self, start_index: int, end_index: int) -> BarSeries:
        """Return a new series over the bars in ``[start_index, end_index)``.

        The sub-series is re-indexed from 0 and shares the factory.
        """
        if start_index < 0 or start_index >= end_index:
            raise IndexOutOfRangeError(
                f"Invalid sub-series range [{start_index}, {end_index})",
                index=start_index,
                begin_index=self.begin_index,
                end_index=self.end_index,
            )
        self.check_index(start_index)
        stop = min(end_index, self.end_index + 1) - self._removed_bars_count
        bars = self._bars[start_index - self._removed_bars_count : stop]
        return BarSeries(name=self.name, num_factory=self.num_factory, bars=bars)

    def _remove_exceeding_bars(self) -> None:
        if self._maximum_bar_count is None:
            return
        excess = len(self._bars) - self._maximum_bar_count
        if excess > 0:
            del self._bars[:excess]
            self._removed_bars_count += excess
            logger.debug(
                f"Evicted {excess} bars from series '{self.name}', "
                f"begin index is now {self._removed_bars_count}"
            )

    def _require_last_bar(self) -> Bar:
        if not self._bars:
            raise DataValidationError(f"Series '{self.name}' has no bar to update")
        return self._bars[-1]

    def _check_representation(self, bar: Bar) -> None:
        for value in (bar.close, bar.open, bar.high, bar.low, bar.volume, bar.amount):
            if value.is_nan():
                continue
            if not self.num_factory.produces(value):
                raise NumTypeMismatchError(
                    f"Bar uses {value.name} but series '{self.name}' expects {self.num_factory!r}",
                    left_type=value.name,
                    right_type=self.num_factory.name,
                )

    # -------------------------------------------------------------------------
    # Python protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(list(self._bars))

    def __getitem__(self, index: int) -> Bar:
        return self.get_bar(index)

    def __repr__(self) -> str:
        return (
            f"BarSeries(name={self.name!r}, begin_index={self.begin_index}, "
            f"end_index={self.end_index}, num_factory={self.num_factory!r})"
        )


# =============================================================================
# Builders
# =============================================================================


def make_bar(
    num_factory: NumFactory,
    end_time: datetime,
    open: NumberLike | None,
    high: NumberLike | None,
    low: NumberLike | None,
    close: NumberLike | None,
    volume: NumberLike | None = 0,
    amount: NumberLike | None = 0,
    trades: int = 0,
    time_period: timedelta | int | float | None = None,
) -> Bar:
    """Create a bar whose values are converted through ``num_factory``.

    Naive end times are taken as UTC.
    """
    if time_period is None:
        from quant_indicators.config.settings import get_settings

        time_period = get_settings().series.default_time_period_seconds
    return Bar(
        time_period=as_timedelta(time_period),
        end_time=to_utc(end_time),
        open=num_factory.num_of(open),
        high=num_factory.num_of(high),
        low=num_factory.num_of(low),
        close=num_factory.num_of(close),
        volume=num_factory.num_of(volume),
        amount=num_factory.num_of(amount),
        trades=trades,
    )


class BarSeriesBuilder:
    """Fluent builder for ``BarSeries``.

    Example:
        series = (
            BarSeriesBuilder()
            .with_name("AAPL")
            .with_num_factory(DoubleNumFactory())
            .with_max_bar_count(500)
            .build()
        )
    """

    def __init__(self) -> None:
        self._name = DEFAULT_SERIES_NAME
        self._num_factory: NumFactory | None = None
        self._maximum_bar_count: int | None = None
        self._bars: list[Bar] = []

    def with_name(self, name: str) -> BarSeriesBuilder:
        self._name = name
        return self

    def with_num_factory(self, num_factory: NumFactory) -> BarSeriesBuilder:
        self._num_factory = num_factory
        return self

    def with_max_bar_count(self, maximum_bar_count: int) -> BarSeriesBuilder:
        self._maximum_bar_count = maximum_bar_count
        return self

    def with_bars(self, bars: Sequence[Bar]) -> BarSeriesBuilder:
        self._bars = list(bars)
        return self

    def build(self) -> BarSeries:
        maximum_bar_count = self._maximum_bar_count
        if maximum_bar_count is None:
            from quant_indicators.config.settings import get_settings

            maximum_bar_count = get_settings().series.maximum_bar_count
        return BarSeries(
            name=self._name,
            num_factory=self._num_factory,
            bars=self._bars,
            maximum_bar_count=maximum_bar_count,
        )


def _to_list(values: Any) -> list[Any]:
    if isinstance(values, np.ndarray):
        if np.issubdtype(values.dtype, np.datetime64):
            return values.astype("datetime64[us]").tolist()
        return values.tolist()
    if isinstance(values, pl.Series):
        return values.to_list()
    if isinstance(values, pd.Series):
        if pd.api.types.is_datetime64_any_dtype(values):
            return [ts.to_pydatetime() for ts in values]
        return values.tolist()
    if isinstance(values, pd.DatetimeIndex):
        return [ts.to_pydatetime() for ts in values]
    return list(values)


def bar_series_from_arrays(
    end_times: Sequence[datetime] | np.ndarray,
    open: Sequence[Any] | np.ndarray,
    high: Sequence[Any] | np.ndarray,
    low: Sequence[Any] | np.ndarray,
    close: Sequence[Any] | np.ndarray,
    volume: Sequence[Any] | np.ndarray | None = None,
    amount: Sequence[Any] | np.ndarray | None = None,
    trades: Sequence[int] | np.ndarray | None = None,
    time_period: timedelta | int | float | None = None,
    name: str = DEFAULT_SERIES_NAME,
    num_factory: NumFactory | None = None,
    maximum_bar_count: int | None = None,
) -> BarSeries:
    """Build a series from parallel arrays.

    Missing volume, amount and trade counts default to zero.

    Raises:
        ValidationError: If the arrays do not all have the same length.
    """
    columns: dict[str, list[Any]] = {
        "end_times": _to_list(end_times),
        "open": _to_list(open),
        "high": _to_list(high),
        "low": _to_list(low),
        "close": _to_list(close),
    }
    if volume is not None:
        columns["volume"] = _to_list(volume)
    if amount is not None:
        columns["amount"] = _to_list(amount)
    if trades is not None:
        columns["trades"] = _to_list(trades)

    lengths = {key: len(values) for key, values in columns.items()}
    if len(set(lengths.values())) > 1:
        raise ValidationError(
            "Parallel bar arrays must have the same length",
            field_name="lengths",
            invalid_value=lengths,
        )

    factory = num_factory or _default_num_factory()
    size = lengths["end_times"]
    zeros = [0] * size
    bars = [
        make_bar(
            factory,
            end_time=columns["end_times"][i],
            open=columns["open"][i],
            high=columns["high"][i],
            low=columns["low"][i],
            close=columns["close"][i],
            volume=columns.get("volume", zeros)[i],
            amount=columns.get("amount", zeros)[i],
            trades=int(columns.get("trades", zeros)[i]),
            time_period=time_period,
        )
        for i in range(size)
    ]

    series = BarSeries(name=name, num_factory=factory, bars=bars, maximum_bar_count=maximum_bar_count)
    log_data(f"Built series with {size} bars", series=name, level="DEBUG")
    return series


REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


def bar_series_from_polars(
    df: pl.DataFrame,
    name: str = DEFAULT_SERIES_NAME,
    num_factory: NumFactory | None = None,
    time_period: timedelta | int | float | None = None,
    maximum_bar_count: int | None = None,
) -> BarSeries:
    """Build a series from a polars OHLCV DataFrame.

    The frame needs ``timestamp, open, high, low, close, volume`` columns
    (bar end times in ``timestamp``). ``amount`` and ``trades`` are used when
    present. Rows are sorted by timestamp first.

    Raises:
        ValidationError: If a required column is missing.
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValidationError(
            f"DataFrame is missing required columns: {missing}",
            field_name="columns",
            invalid_value=missing,
        )

    df = df.sort("timestamp")
    return bar_series_from_arrays(
        end_times=df["timestamp"],
        open=df["open"],
        high=df["high"],
        low=df["low"],
        close=df["close"],
        volume=df["volume"],
        amount=df["amount"] if "amount" in df.columns else None,
        trades=df["trades"] if "trades" in df.columns else None,
        time_period=time_period,
        name=name,
        num_factory=num_factory,
        maximum_bar_count=maximum_bar_count,
    )


def bar_series_from_pandas(
    df: pd.DataFrame,
    name: str = DEFAULT_SERIES_NAME,
    num_factory: NumFactory | None = None,
    time_period: timedelta | int | float | None = None,
    maximum_bar_count: int | None = None,
) -> BarSeries:
    """Build a series from a pandas OHLCV DataFrame.

    Bar end times come from a ``timestamp`` column, or from a
    ``DatetimeIndex`` when the column is absent. Column names are matched
    case-insensitively.

    Raises:
        ValidationError: If a required column is missing.
    """
    df = df.rename(columns=lambda col: str(col).lower())
    if "timestamp" not in df.columns and isinstance(df.index, pd.DatetimeIndex):
        df = df.rename_axis("timestamp").reset_index()

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValidationError(
            f"DataFrame is missing required columns: {missing}",
            field_name="columns",
            invalid_value=missing,
        )

    df = df.sort_values("timestamp")
    return bar_series_from_arrays(
        end_times=df["timestamp"],
        open=df["open"],
        high=df["high"],
        low=df["low"],
        close=df["close"],
        volume=df["volume"],
        amount=df["amount"] if "amount" in df.columns else None,
        trades=df["trades"] if "trades" in df.columns else None,
        time_period=time_period,
        name=name,
        num_factory=num_factory,
        maximum_bar_count=maximum_bar_count,
    )

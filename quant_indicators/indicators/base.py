"""
Indicator contract and memoizing evaluation.

An indicator is a function from a bar series index to a ``Num``. Concrete
indicators subclass ``CachedIndicator`` and implement ``calculate(index)``;
``get_value`` checks the index, serves memoized values and stores new ones.
A formula may read other indicators, or itself at strictly earlier indices,
through their ``get_value``.

Cache behaviour:
    - Each index is computed once for the life of the indicator, except the
      series' last bar, which is recomputed after the bar is replaced or
      updated (``BarSeries.last_bar_version``).
    - Entries for indices evicted by the series' maximum bar count are
      dropped; querying them raises ``EvictedIndexError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterator

import numpy as np

from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.core.num import Num, NumberLike
from quant_indicators.core.series import BarSeries
from quant_indicators.monitoring.logger import TRACE, LogCategory, get_logger, trace_indicator_value

if TYPE_CHECKING:
    from quant_indicators.indicators.numeric import NumericIndicator

logger = get_logger(__name__, LogCategory.INDICATOR)


class Indicator(ABC):
    """Function from series index to numeric value."""

    def __init__(self, series: BarSeries) -> None:
        self._series = series

    @property
    def series(self) -> BarSeries:
        return self._series

    @abstractmethod
    def get_value(self, index: int) -> Num:
        """Return the indicator value at absolute ``index``."""

    @property
    def unstable_bars(self) -> int:
        """Number of leading bars whose values are not yet reliable."""
        return 0

    def is_stable_at(self, index: int) -> bool:
        """True once ``index`` is past the warm-up window."""
        return index >= self._series.begin_index + self.unstable_bars

    def num_of(self, value: NumberLike | None) -> Num:
        """Convert ``value`` through the series' numeric factory."""
        return self._series.num_of(value)

    def values(self) -> list[Num]:
        """Evaluate every index in the series' current window."""
        series = self._series
        if series.is_empty():
            return []
        return [self.get_value(i) for i in range(series.begin_index, series.end_index + 1)]

    def to_numpy(self) -> np.ndarray:
        """Evaluate every index into a float64 array, NaN where undefined."""
        return np.array(
            [np.nan if value.is_nan() else float(value) for value in self.values()],
            dtype=np.float64,
        )

    def numeric(self) -> NumericIndicator:
        """Wrap this indicator for fluent arithmetic."""
        from quant_indicators.indicators.numeric import NumericIndicator

        return NumericIndicator.of(self)

    @property
    def name(self) -> str:
        return type(self).__name__

    def __getitem__(self, index: int) -> Num:
        return self.get_value(index)

    def __iter__(self) -> Iterator[Num]:
        return iter(self.values())

    def __str__(self) -> str:
        bar_count = getattr(self, "bar_count", None)
        if bar_count is not None:
            return f"{self.name}(bar_count={bar_count})"
        return self.name

    def __repr__(self) -> str:
        return str(self)


def series_of(source: BarSeries | Indicator) -> BarSeries:
    """Return the series behind a series or an indicator."""
    if isinstance(source, Indicator):
        return source.series
    return source


def check_same_series(*indicators: Indicator) -> BarSeries:
    """Ensure all indicators are defined over one series and return it.

    Raises:
        InvalidParameterError: If the indicators use different series.
    """
    series = indicators[0].series
    for indicator in indicators[1:]:
        if indicator.series is not series:
            raise InvalidParameterError(
                f"Indicators {indicators[0]} and {indicator} are defined over different series",
                field_name="series",
            )
    return series


class CachedIndicator(Indicator):
    """Indicator memoizing one value per series index.

    Subclasses implement :meth:`calculate` and declare ``unstable_bars``.
    """

    def __init__(self, source: BarSeries | Indicator) -> None:
        super().__init__(series_of(source))
        self._cache: dict[int, Num] = {}
        # index -> last_bar_version for values computed on the (then) last bar
        self._volatile: dict[int, int] = {}
        self._removed_seen = self._series.removed_bars_count
        self._highest_index = -1

    @abstractmethod
    def calculate(self, index: int) -> Num:
        """Compute the value at ``index`` without caching."""

    def get_value(self, index: int) -> Num:
        """Return the memoized value at ``index``, computing it if needed.

        Raises:
            EvictedIndexError: If ``index`` was evicted from the series.
            IndexOutOfRangeError: If ``index`` is outside the series window.
        """
        series = self._series
        series.check_index(index)

        if series.removed_bars_count != self._removed_seen:
            self._prune(series.begin_index)

        version = self._volatile.get(index)
        if version is not None and version != series.last_bar_version:
            del self._volatile[index]
            self._cache.pop(index, None)

        value = self._cache.get(index)
        if value is not None:
            return value

        value = self.calculate(index)
        self._cache[index] = value
        if index > self._highest_index:
            self._highest_index = index
        if index == series.end_index:
            self._volatile[index] = series.last_bar_version

        if logger.isEnabledFor(TRACE):
            trace_indicator_value(str(self), index, value)
        return value

    def clear_cache(self) -> None:
        """Drop every memoized value."""
        self._cache.clear()
        self._volatile.clear()
        self._highest_index = -1

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    def _prune(self, begin_index: int) -> None:
        for key in [k for k in self._cache if k < begin_index]:
            del self._cache[key]
        for key in [k for k in self._volatile if k < begin_index]:
            del self._volatile[key]
        self._removed_seen = self._series.removed_bars_count
        logger.debug(f"{self}: pruned cache below index {begin_index}")


class RecursiveCachedIndicator(CachedIndicator):
    """Cached indicator whose formula reads its own earlier values.

    A query far ahead of the highest computed index first fills the gap in
    ascending order, so each computation only recurses one level deep.
    """

    def __init__(self, source: BarSeries | Indicator, fill_threshold: int | None = None) -> None:
        super().__init__(source)
        if fill_threshold is None:
            from quant_indicators.config.settings import get_settings

            fill_threshold = get_settings().indicators.recursion_fill_threshold
        self._fill_threshold = fill_threshold

    def get_value(self, index: int) -> Num:
        series = self._series
        if not series.is_empty() and series.begin_index <= index <= series.end_index:
            start = max(self._highest_index + 1, series.begin_index)
            if index - start > self._fill_threshold:
                for prev_index in range(start, index):
                    super().get_value(prev_index)
        return super().get_value(index)


class ConstantIndicator(Indicator):
    """Same value at every index. Not cached."""

    def __init__(self, series: BarSeries, value: NumberLike) -> None:
        super().__init__(series)
        self._value = series.num_of(value)

    @property
    def value(self) -> Num:
        return self._value

    def get_value(self, index: int) -> Num:
        return self._value

    def __str__(self) -> str:
        return f"{self.name}({self._value})"


def as_indicator(series: BarSeries, operand: Indicator | NumberLike) -> Indicator:
    """Return ``operand`` as an indicator, wrapping scalars in a constant."""
    if isinstance(operand, Indicator):
        return operand
    return ConstantIndicator(series, operand)

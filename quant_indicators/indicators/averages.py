"""
Moving average indicators.

Warm-up behaviour: every average returns a best-effort value from the first
index on. SMA and WMA average over the bars available so far; the
exponential family seeds itself with the first value.
"""

from __future__ import annotations

from quant_indicators.core.num import Num
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.base import CachedIndicator, Indicator, RecursiveCachedIndicator


class SMAIndicator(CachedIndicator):
    """Simple Moving Average."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        total = self._series.num_factory.zero()
        for i in range(start, index + 1):
            total = total.plus(self.indicator.get_value(i))
        return total.divided_by(self.num_of(index - start + 1))

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class WMAIndicator(CachedIndicator):
    """Weighted Moving Average with linear weights, newest bar heaviest."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        factory = self._series.num_factory
        weighted = factory.zero()
        weights = factory.zero()
        for weight, i in enumerate(range(start, index + 1), start=1):
            w = factory.num_of(weight)
            weighted = weighted.plus(self.indicator.get_value(i).multiplied_by(w))
            weights = weights.plus(w)
        return weighted.divided_by(weights)

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class AbstractEMAIndicator(RecursiveCachedIndicator):
    """Exponential smoothing ``prev + (value - prev) * multiplier``.

    A NaN source value yields NaN at that index; the next valid value
    restarts the smoothing from itself.
    """

    def __init__(self, indicator: Indicator, bar_count: int, multiplier: Num) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = bar_count
        self.multiplier = multiplier

    def calculate(self, index: int) -> Num:
        value = self.indicator.get_value(index)
        if index <= self._series.begin_index or value.is_nan():
            return value
        previous = self.get_value(index - 1)
        if previous.is_nan():
            return value
        return value.minus(previous).multiplied_by(self.multiplier).plus(previous)

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class EMAIndicator(AbstractEMAIndicator):
    """Exponential Moving Average, multiplier 2 / (bar_count + 1)."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        bar_count = require_integer("bar_count", bar_count)
        factory = indicator.series.num_factory
        multiplier = factory.two().divided_by(factory.num_of(bar_count + 1))
        super().__init__(indicator, bar_count, multiplier)


class MMAIndicator(AbstractEMAIndicator):
    """Modified (Wilder's) Moving Average, multiplier 1 / bar_count."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        bar_count = require_integer("bar_count", bar_count)
        factory = indicator.series.num_factory
        multiplier = factory.one().divided_by(factory.num_of(bar_count))
        super().__init__(indicator, bar_count, multiplier)

"""
Statistical indicators over a trailing window.

Population statistics: the window holds ``min(bar_count, bars so far)``
observations and the divisor is the observation count.
"""

from __future__ import annotations

from quant_indicators.core.num import Num
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.averages import SMAIndicator
from quant_indicators.indicators.base import CachedIndicator, Indicator


class VarianceIndicator(CachedIndicator):
    """Population variance."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)
        self.sma = SMAIndicator(indicator, bar_count)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        mean = self.sma.get_value(index)
        total = self._series.num_factory.zero()
        for i in range(start, index + 1):
            total = total.plus(self.indicator.get_value(i).minus(mean).pow(2))
        return total.divided_by(self.num_of(index - start + 1))

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class StandardDeviationIndicator(CachedIndicator):
    """Population standard deviation."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.bar_count = require_integer("bar_count", bar_count)
        self.variance = VarianceIndicator(indicator, bar_count)

    def calculate(self, index: int) -> Num:
        return self.variance.get_value(index).sqrt()

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class MeanDeviationIndicator(CachedIndicator):
    """Mean absolute deviation from the simple moving average."""

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)
        self.sma = SMAIndicator(indicator, bar_count)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        mean = self.sma.get_value(index)
        total = self._series.num_factory.zero()
        for i in range(start, index + 1):
            total = total.plus(self.indicator.get_value(i).minus(mean).abs())
        return total.divided_by(self.num_of(index - start + 1))

    @property
    def unstable_bars(self) -> int:
        return self.bar_count

"""
Aroon indicators.

Aroon Up measures how recently the highest high of the last
``bar_count + 1`` bars occurred; Aroon Down does the same for the lowest
low. Both range from 0 (extreme ``bar_count`` bars ago) to 100 (extreme on
the current bar).
"""

from __future__ import annotations

from quant_indicators.core.num import NaN, Num
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.base import CachedIndicator, Indicator
from quant_indicators.indicators.helpers import (
    HighPriceIndicator,
    HighestValueIndicator,
    LowPriceIndicator,
    LowestValueIndicator,
)


class _AroonIndicator(CachedIndicator):
    """Bars since the window extreme, scaled to 0..100.

    The window is scanned backwards from the current bar and the first bar
    equal to the extreme wins. A NaN value on the current bar gives NaN.
    """

    def __init__(self, source: Indicator, extreme: Indicator, bar_count: int) -> None:
        super().__init__(source)
        self.source = source
        self.extreme = extreme
        self.bar_count = bar_count

    def calculate(self, index: int) -> Num:
        if self.source.get_value(index).is_nan():
            return NaN
        extreme = self.extreme.get_value(index)
        end = max(self._series.begin_index, index - self.bar_count)
        bars_since = 0
        for i in range(index, end, -1):
            if self.source.get_value(i).is_equal(extreme):
                break
            bars_since += 1
        factory = self._series.num_factory
        bar_count = factory.num_of(self.bar_count)
        return bar_count.minus(bars_since).divided_by(bar_count).multiplied_by(factory.hundred())

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class AroonUpIndicator(_AroonIndicator):
    """Aroon Up over high prices, or over any indicator."""

    @validate_positive("bar_count")
    def __init__(self, source: BarSeries | Indicator, bar_count: int = 25) -> None:
        bar_count = require_integer("bar_count", bar_count)
        if isinstance(source, BarSeries):
            source = HighPriceIndicator(source)
        super().__init__(source, HighestValueIndicator(source, bar_count + 1), bar_count)


class AroonDownIndicator(_AroonIndicator):
    """Aroon Down over low prices, or over any indicator."""

    @validate_positive("bar_count")
    def __init__(self, source: BarSeries | Indicator, bar_count: int = 25) -> None:
        bar_count = require_integer("bar_count", bar_count)
        if isinstance(source, BarSeries):
            source = LowPriceIndicator(source)
        super().__init__(source, LowestValueIndicator(source, bar_count + 1), bar_count)


class AroonOscillatorIndicator(CachedIndicator):
    """Aroon Up minus Aroon Down, from -100 to 100."""

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 25) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.up = AroonUpIndicator(series, self.bar_count)
        self.down = AroonDownIndicator(series, self.bar_count)

    def calculate(self, index: int) -> Num:
        return self.up.get_value(index).minus(self.down.get_value(index))

    @property
    def unstable_bars(self) -> int:
        return self.bar_count

"""
Helper indicators.

Bar field accessors, derived prices, shifts, rolling extremes and sums
that the concrete indicators are built from.
"""

from __future__ import annotations

from quant_indicators.core.bar import Bar
from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.core.num import NaN, Num
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.base import (
    CachedIndicator,
    ConstantIndicator,
    Indicator,
    check_same_series,
)

__all__ = [
    "AmountIndicator",
    "ClosePriceIndicator",
    "CloseLocationValueIndicator",
    "ConstantIndicator",
    "GainIndicator",
    "HighPriceIndicator",
    "HighestValueIndicator",
    "LossIndicator",
    "LowPriceIndicator",
    "LowestValueIndicator",
    "MedianPriceIndicator",
    "OpenPriceIndicator",
    "PreviousValueIndicator",
    "RunningTotalIndicator",
    "SumIndicator",
    "TrueRangeIndicator",
    "TypicalPriceIndicator",
    "VolumeIndicator",
]


# =============================================================================
# Bar fields
# =============================================================================


class PriceIndicator(CachedIndicator):
    """Base for indicators reading one field of each bar."""

    field: str = "close"

    def __init__(self, series: BarSeries) -> None:
        super().__init__(series)

    def calculate(self, index: int) -> Num:
        return self.bar_value(self._series.get_bar(index))

    def bar_value(self, bar: Bar) -> Num:
        return getattr(bar, self.field)


class ClosePriceIndicator(PriceIndicator):
    """Close price of each bar."""

    field = "close"


class OpenPriceIndicator(PriceIndicator):
    """Open price of each bar."""

    field = "open"


class HighPriceIndicator(PriceIndicator):
    """High price of each bar."""

    field = "high"


class LowPriceIndicator(PriceIndicator):
    """Low price of each bar."""

    field = "low"


class AmountIndicator(PriceIndicator):
    """Traded amount of each bar."""

    field = "amount"


class TypicalPriceIndicator(PriceIndicator):
    """(high + low + close) / 3."""

    def bar_value(self, bar: Bar) -> Num:
        three = self._series.num_factory.three()
        return bar.high.plus(bar.low).plus(bar.close).divided_by(three)


class MedianPriceIndicator(PriceIndicator):
    """(high + low) / 2."""

    def bar_value(self, bar: Bar) -> Num:
        return bar.high.plus(bar.low).divided_by(self._series.num_factory.two())


class VolumeIndicator(CachedIndicator):
    """Volume of each bar, or its rolling sum over ``bar_count`` bars."""

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 1) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        total = self._series.num_factory.zero()
        for i in range(start, index + 1):
            total = total.plus(self._series.get_bar(i).volume)
        return total


# =============================================================================
# Shifts and rolling windows
# =============================================================================


class PreviousValueIndicator(CachedIndicator):
    """Value of ``indicator`` ``n`` bars ago, NaN before the series start."""

    @validate_positive("n")
    def __init__(self, indicator: Indicator, n: int = 1) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.n = require_integer("n", n)

    def calculate(self, index: int) -> Num:
        previous_index = index - self.n
        if previous_index < self._series.begin_index:
            return NaN
        return self.indicator.get_value(previous_index)

    @property
    def unstable_bars(self) -> int:
        return self.n

    def __str__(self) -> str:
        return f"{self.name}(n={self.n}, {self.indicator})"


class _WindowExtremeIndicator(CachedIndicator):
    """Extreme value over the trailing ``bar_count`` window.

    NaN values inside the window are skipped; the result is NaN only when
    the whole window is NaN.
    """

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)

    def _better(self, candidate: Num, current: Num) -> bool:
        raise NotImplementedError

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        extreme: Num = NaN
        for i in range(index, start - 1, -1):
            value = self.indicator.get_value(i)
            if value.is_nan():
                continue
            if extreme.is_nan() or self._better(value, extreme):
                extreme = value
        return extreme

    @property
    def unstable_bars(self) -> int:
        return self.bar_count - 1


class HighestValueIndicator(_WindowExtremeIndicator):
    """Highest value over the trailing ``bar_count`` bars."""

    def _better(self, candidate: Num, current: Num) -> bool:
        return candidate.is_greater_than(current)


class LowestValueIndicator(_WindowExtremeIndicator):
    """Lowest value over the trailing ``bar_count`` bars."""

    def _better(self, candidate: Num, current: Num) -> bool:
        return candidate.is_less_than(current)


class RunningTotalIndicator(CachedIndicator):
    """Sum of ``indicator`` over the trailing ``bar_count`` bars.

    The window is summed in full at each index; a NaN inside the window
    makes the total NaN.
    """

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
        return total

    @property
    def unstable_bars(self) -> int:
        return self.bar_count - 1


class SumIndicator(CachedIndicator):
    """Per-index sum of several indicators."""

    def __init__(self, *operands: Indicator) -> None:
        if not operands:
            raise InvalidParameterError("SumIndicator needs at least one operand", field_name="operands")
        super().__init__(check_same_series(*operands))
        self.operands = operands

    def calculate(self, index: int) -> Num:
        total = self.operands[0].get_value(index)
        for operand in self.operands[1:]:
            total = total.plus(operand.get_value(index))
        return total

    @property
    def unstable_bars(self) -> int:
        return max(operand.unstable_bars for operand in self.operands)


# =============================================================================
# Price changes
# =============================================================================


class GainIndicator(CachedIndicator):
    """Positive change from the previous value, zero otherwise."""

    def __init__(self, indicator: Indicator) -> None:
        super().__init__(indicator)
        self.indicator = indicator

    def calculate(self, index: int) -> Num:
        zero = self._series.num_factory.zero()
        if index <= self._series.begin_index:
            return zero
        change = self.indicator.get_value(index).minus(self.indicator.get_value(index - 1))
        if change.is_nan():
            return NaN
        return change if change.is_positive() else zero

    @property
    def unstable_bars(self) -> int:
        return 1


class LossIndicator(CachedIndicator):
    """Absolute negative change from the previous value, zero otherwise."""

    def __init__(self, indicator: Indicator) -> None:
        super().__init__(indicator)
        self.indicator = indicator

    def calculate(self, index: int) -> Num:
        zero = self._series.num_factory.zero()
        if index <= self._series.begin_index:
            return zero
        change = self.indicator.get_value(index).minus(self.indicator.get_value(index - 1))
        if change.is_nan():
            return NaN
        return change.negate() if change.is_negative() else zero

    @property
    def unstable_bars(self) -> int:
        return 1


class TrueRangeIndicator(CachedIndicator):
    """Greatest of high - low, |high - previous close| and |previous close - low|."""

    def __init__(self, series: BarSeries) -> None:
        super().__init__(series)

    def calculate(self, index: int) -> Num:
        bar = self._series.get_bar(index)
        high_low = bar.high.minus(bar.low).abs()
        if index <= self._series.begin_index:
            return high_low
        previous_close = self._series.get_bar(index - 1).close
        high_close = bar.high.minus(previous_close).abs()
        close_low = previous_close.minus(bar.low).abs()
        return high_low.max(high_close).max(close_low)

    @property
    def unstable_bars(self) -> int:
        return 1


class CloseLocationValueIndicator(CachedIndicator):
    """Close location value: ((close - low) - (high - close)) / (high - low).

    Zero when the bar has no range (high == low).
    """

    def __init__(self, series: BarSeries) -> None:
        super().__init__(series)

    def calculate(self, index: int) -> Num:
        bar = self._series.get_bar(index)
        spread = bar.high.minus(bar.low)
        if spread.is_zero():
            return self._series.num_factory.zero()
        return bar.close.minus(bar.low).minus(bar.high.minus(bar.close)).divided_by(spread)

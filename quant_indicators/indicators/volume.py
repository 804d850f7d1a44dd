"""
Volume-based indicators.

VWAP and Chaikin Money Flow sum their whole trailing window at every
index; each index is still computed only once thanks to the cache.
On-balance volume and accumulation/distribution are running totals
that read their own previous value.
"""

from __future__ import annotations

from quant_indicators.core.num import Num
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.averages import SMAIndicator
from quant_indicators.indicators.base import CachedIndicator, RecursiveCachedIndicator
from quant_indicators.indicators.helpers import (
    CloseLocationValueIndicator,
    TypicalPriceIndicator,
    VolumeIndicator,
)


class VWAPIndicator(CachedIndicator):
    """Volume-weighted average typical price over ``bar_count`` bars.

    NaN when the window traded no volume.
    """

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.typical_price = TypicalPriceIndicator(series)
        self.volume = VolumeIndicator(series)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        zero = self._series.num_factory.zero()
        cumulative_value = zero
        cumulative_volume = zero
        for i in range(start, index + 1):
            volume = self.volume.get_value(i)
            cumulative_value = cumulative_value.plus(self.typical_price.get_value(i).multiplied_by(volume))
            cumulative_volume = cumulative_volume.plus(volume)
        return cumulative_value.divided_by(cumulative_volume)

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class MVWAPIndicator(CachedIndicator):
    """Simple moving average of a VWAP."""

    @validate_positive("bar_count")
    def __init__(self, vwap: VWAPIndicator, bar_count: int) -> None:
        super().__init__(vwap)
        self.vwap = vwap
        self.bar_count = require_integer("bar_count", bar_count)
        self.sma = SMAIndicator(vwap, self.bar_count)

    def calculate(self, index: int) -> Num:
        return self.sma.get_value(index)

    @property
    def unstable_bars(self) -> int:
        return self.vwap.unstable_bars + self.bar_count


class ChaikinMoneyFlowIndicator(CachedIndicator):
    """Sum of money flow volume over the sum of volume, over ``bar_count`` bars.

    Money flow volume is the close location value times the bar volume.
    NaN when the window traded no volume.
    """

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 20) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.close_location = CloseLocationValueIndicator(series)
        self.volume = VolumeIndicator(series, self.bar_count)

    def calculate(self, index: int) -> Num:
        start = max(index - self.bar_count + 1, self._series.begin_index)
        money_flow_volume = self._series.num_factory.zero()
        for i in range(start, index + 1):
            money_flow_volume = money_flow_volume.plus(
                self.close_location.get_value(i).multiplied_by(self._series.get_bar(i).volume)
            )
        return money_flow_volume.divided_by(self.volume.get_value(index))

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class IntradayIntensityIndicator(CachedIndicator):
    """(2 * close - high - low) / ((high - low) * volume).

    Zero on the first bar and on bars without range or volume.
    """

    def __init__(self, series: BarSeries) -> None:
        super().__init__(series)

    def calculate(self, index: int) -> Num:
        zero = self._series.num_factory.zero()
        if index == self._series.begin_index:
            return zero
        bar = self._series.get_bar(index)
        denominator = bar.high.minus(bar.low).multiplied_by(bar.volume)
        if denominator.is_zero():
            return zero
        return (
            bar.close.multiplied_by(self._series.num_factory.two())
            .minus(bar.high)
            .minus(bar.low)
            .divided_by(denominator)
        )

    @property
    def unstable_bars(self) -> int:
        return 1


class OnBalanceVolumeIndicator(RecursiveCachedIndicator):
    """Running total adding volume on up closes and subtracting it on down closes."""

    def __init__(self, series: BarSeries) -> None:
        super().__init__(series)

    def calculate(self, index: int) -> Num:
        if index == self._series.begin_index:
            return self._series.num_factory.zero()
        previous = self.get_value(index - 1)
        bar = self._series.get_bar(index)
        previous_close = self._series.get_bar(index - 1).close
        if bar.close.is_greater_than(previous_close):
            return previous.plus(bar.volume)
        if bar.close.is_less_than(previous_close):
            return previous.minus(bar.volume)
        return previous


class AccumulationDistributionIndicator(RecursiveCachedIndicator):
    """Running total of money flow volume (close location value times volume)."""

    def __init__(self, series: BarSeries) -> None:
        super().__init__(series)
        self.close_location = CloseLocationValueIndicator(series)

    def calculate(self, index: int) -> Num:
        if index == self._series.begin_index:
            return self._series.num_factory.zero()
        money_flow_volume = self.close_location.get_value(index).multiplied_by(self._series.get_bar(index).volume)
        return money_flow_volume.plus(self.get_value(index - 1))

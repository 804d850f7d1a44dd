"""
Ichimoku Kinko Hyo lines.

Tenkan-sen and Kijun-sen are midpoints of the high/low range over 9 and 26
bars. Senkou spans A and B are plotted 26 bars ahead, so the value at an
index is computed from the bar ``offset`` bars earlier and is NaN before
that bar exists. Chikou span reads the close ``delay`` bars ahead and is
NaN past the end of the series.
"""

from __future__ import annotations

from quant_indicators.core.num import NaN, Num
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.base import CachedIndicator, Indicator
from quant_indicators.indicators.helpers import (
    ClosePriceIndicator,
    HighPriceIndicator,
    HighestValueIndicator,
    LowPriceIndicator,
    LowestValueIndicator,
)


class IchimokuLineIndicator(CachedIndicator):
    """(highest high + lowest low) / 2 over ``bar_count`` bars."""

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.highest_high = HighestValueIndicator(HighPriceIndicator(series), self.bar_count)
        self.lowest_low = LowestValueIndicator(LowPriceIndicator(series), self.bar_count)

    def calculate(self, index: int) -> Num:
        return (
            self.highest_high.get_value(index)
            .plus(self.lowest_low.get_value(index))
            .divided_by(self._series.num_factory.two())
        )

    @property
    def unstable_bars(self) -> int:
        return self.bar_count - 1


class IchimokuTenkanSenIndicator(IchimokuLineIndicator):
    """Conversion line."""

    def __init__(self, series: BarSeries, bar_count: int = 9) -> None:
        super().__init__(series, bar_count)


class IchimokuKijunSenIndicator(IchimokuLineIndicator):
    """Base line."""

    def __init__(self, series: BarSeries, bar_count: int = 26) -> None:
        super().__init__(series, bar_count)


class IchimokuSenkouSpanAIndicator(CachedIndicator):
    """Leading span A: (Tenkan-sen + Kijun-sen) / 2, shifted ``offset`` bars forward."""

    @validate_positive("offset", allow_zero=True)
    def __init__(
        self,
        series: BarSeries,
        conversion_line: Indicator | None = None,
        base_line: Indicator | None = None,
        offset: int = 26,
    ) -> None:
        super().__init__(series)
        self.conversion_line = conversion_line or IchimokuTenkanSenIndicator(series)
        self.base_line = base_line or IchimokuKijunSenIndicator(series)
        self.offset = require_integer("offset", offset)

    def calculate(self, index: int) -> Num:
        source_index = index - self.offset
        if source_index < self._series.begin_index:
            return NaN
        return (
            self.conversion_line.get_value(source_index)
            .plus(self.base_line.get_value(source_index))
            .divided_by(self._series.num_factory.two())
        )

    @property
    def unstable_bars(self) -> int:
        return self.offset + max(self.conversion_line.unstable_bars, self.base_line.unstable_bars)

    def __str__(self) -> str:
        return f"{self.name}(offset={self.offset})"


class IchimokuSenkouSpanBIndicator(CachedIndicator):
    """Leading span B: Ichimoku line over ``bar_count`` bars, shifted ``offset`` bars forward."""

    @validate_positive("bar_count")
    @validate_positive("offset", allow_zero=True)
    def __init__(self, series: BarSeries, bar_count: int = 52, offset: int = 26) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.offset = require_integer("offset", offset)
        self.line = IchimokuLineIndicator(series, self.bar_count)

    def calculate(self, index: int) -> Num:
        source_index = index - self.offset
        if source_index < self._series.begin_index:
            return NaN
        return self.line.get_value(source_index)

    @property
    def unstable_bars(self) -> int:
        return self.offset + self.bar_count - 1

    def __str__(self) -> str:
        return f"{self.name}(bar_count={self.bar_count}, offset={self.offset})"


class IchimokuChikouSpanIndicator(Indicator):
    """Lagging span: the close ``delay`` bars ahead, NaN past the series end.

    Not cached: the value changes as future bars arrive.
    """

    @validate_positive("delay")
    def __init__(self, series: BarSeries, delay: int = 26) -> None:
        super().__init__(series)
        self.delay = require_integer("delay", delay)
        self.close = ClosePriceIndicator(series)

    def get_value(self, index: int) -> Num:
        self._series.check_index(index)
        future_index = index + self.delay
        if future_index > self._series.end_index:
            return NaN
        return self.close.get_value(future_index)

    def __str__(self) -> str:
        return f"{self.name}(delay={self.delay})"

"""
Bollinger Bands.

The middle band is usually an SMA of the close price. The upper and lower
bands sit ``k`` deviations above and below it, where the deviation is
usually the standard deviation of the same input over the same window.
"""

from __future__ import annotations

from quant_indicators.core.num import Num, NumberLike
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.averages import SMAIndicator
from quant_indicators.indicators.base import CachedIndicator, Indicator, check_same_series
from quant_indicators.indicators.statistics import StandardDeviationIndicator


class BollingerBandsMiddleIndicator(CachedIndicator):
    """Middle band: the given moving average, unchanged."""

    def __init__(self, indicator: Indicator) -> None:
        super().__init__(indicator)
        self.indicator = indicator

    def calculate(self, index: int) -> Num:
        return self.indicator.get_value(index)

    @property
    def unstable_bars(self) -> int:
        return self.indicator.unstable_bars

    def __str__(self) -> str:
        return f"{self.name}({self.indicator})"


class _BollingerBandIndicator(CachedIndicator):
    """Middle band shifted by ``k`` times the deviation."""

    direction = 1

    @validate_positive("k")
    def __init__(
        self,
        middle: BollingerBandsMiddleIndicator,
        deviation: Indicator,
        k: NumberLike = 2,
    ) -> None:
        super().__init__(check_same_series(middle, deviation))
        self.middle = middle
        self.deviation = deviation
        self.k = middle.num_of(k)

    def calculate(self, index: int) -> Num:
        offset = self.deviation.get_value(index).multiplied_by(self.k)
        middle = self.middle.get_value(index)
        return middle.plus(offset) if self.direction > 0 else middle.minus(offset)

    @property
    def unstable_bars(self) -> int:
        return max(self.middle.unstable_bars, self.deviation.unstable_bars)

    def __str__(self) -> str:
        return f"{self.name}(k={self.k}, {self.middle}, {self.deviation})"


class BollingerBandsUpperIndicator(_BollingerBandIndicator):
    """Upper band: middle + k * deviation."""

    direction = 1


class BollingerBandsLowerIndicator(_BollingerBandIndicator):
    """Lower band: middle - k * deviation."""

    direction = -1


class BollingerBandWidthIndicator(CachedIndicator):
    """Band width as a percentage of the middle band: (upper - lower) / middle * 100."""

    def __init__(
        self,
        upper: BollingerBandsUpperIndicator,
        middle: BollingerBandsMiddleIndicator,
        lower: BollingerBandsLowerIndicator,
    ) -> None:
        super().__init__(check_same_series(upper, middle, lower))
        self.upper = upper
        self.middle = middle
        self.lower = lower

    def calculate(self, index: int) -> Num:
        return (
            self.upper.get_value(index)
            .minus(self.lower.get_value(index))
            .divided_by(self.middle.get_value(index))
            .multiplied_by(self._series.num_factory.hundred())
        )

    @property
    def unstable_bars(self) -> int:
        return max(self.upper.unstable_bars, self.lower.unstable_bars)


class PercentBIndicator(CachedIndicator):
    """%B: position of the value inside the bands, (value - lower) / (upper - lower).

    Built on an SMA middle band and a standard deviation over ``bar_count``
    bars. Flat bands give NaN.
    """

    @validate_positive("bar_count", "k")
    def __init__(self, indicator: Indicator, bar_count: int = 20, k: NumberLike = 2) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)
        self.middle = BollingerBandsMiddleIndicator(SMAIndicator(indicator, self.bar_count))
        deviation = StandardDeviationIndicator(indicator, self.bar_count)
        self.upper = BollingerBandsUpperIndicator(self.middle, deviation, k)
        self.lower = BollingerBandsLowerIndicator(self.middle, deviation, k)

    def calculate(self, index: int) -> Num:
        lower = self.lower.get_value(index)
        return (
            self.indicator.get_value(index)
            .minus(lower)
            .divided_by(self.upper.get_value(index).minus(lower))
        )

    @property
    def unstable_bars(self) -> int:
        return self.bar_count

"""
Momentum oscillators.

Implements:
- RSI (Wilder smoothing of gains and losses)
- Stochastic oscillator %K and %D
- Commodity Channel Index
- Williams %R
- Rate of Change
- MACD with signal line and histogram
"""

from __future__ import annotations

from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.core.num import NaN, Num
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.averages import EMAIndicator, MMAIndicator, SMAIndicator
from quant_indicators.indicators.base import CachedIndicator, Indicator
from quant_indicators.indicators.helpers import (
    ClosePriceIndicator,
    GainIndicator,
    HighPriceIndicator,
    HighestValueIndicator,
    LossIndicator,
    LowPriceIndicator,
    LowestValueIndicator,
    TypicalPriceIndicator,
)
from quant_indicators.indicators.numeric import NumericIndicator
from quant_indicators.indicators.statistics import MeanDeviationIndicator


class RSIIndicator(CachedIndicator):
    """Relative Strength Index.

    RSI = 100 - 100 / (1 + average gain / average loss), with both averages
    smoothed by Wilder's moving average. A window without losses gives 100,
    or 0 when it has no gains either.
    """

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int = 14) -> None:
        super().__init__(indicator)
        self.bar_count = require_integer("bar_count", bar_count)
        self.average_gain = MMAIndicator(GainIndicator(indicator), self.bar_count)
        self.average_loss = MMAIndicator(LossIndicator(indicator), self.bar_count)

    def calculate(self, index: int) -> Num:
        factory = self._series.num_factory
        average_gain = self.average_gain.get_value(index)
        average_loss = self.average_loss.get_value(index)
        if average_gain.is_nan() or average_loss.is_nan():
            return NaN
        if average_loss.is_zero():
            return factory.zero() if average_gain.is_zero() else factory.hundred()
        relative_strength = average_gain.divided_by(average_loss)
        return factory.hundred().minus(factory.hundred().divided_by(factory.one().plus(relative_strength)))

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class StochasticOscillatorKIndicator(CachedIndicator):
    """Stochastic %K: (close - lowest low) / (highest high - lowest low) * 100."""

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 14) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.close = ClosePriceIndicator(series)
        self.highest_high = HighestValueIndicator(HighPriceIndicator(series), self.bar_count)
        self.lowest_low = LowestValueIndicator(LowPriceIndicator(series), self.bar_count)

    def calculate(self, index: int) -> Num:
        highest = self.highest_high.get_value(index)
        lowest = self.lowest_low.get_value(index)
        return (
            self.close.get_value(index)
            .minus(lowest)
            .divided_by(highest.minus(lowest))
            .multiplied_by(self._series.num_factory.hundred())
        )

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class StochasticOscillatorDIndicator(CachedIndicator):
    """Stochastic %D: simple moving average of %K."""

    @validate_positive("bar_count")
    def __init__(self, k: StochasticOscillatorKIndicator, bar_count: int = 3) -> None:
        super().__init__(k)
        self.k = k
        self.bar_count = require_integer("bar_count", bar_count)
        self.sma = SMAIndicator(k, self.bar_count)

    def calculate(self, index: int) -> Num:
        return self.sma.get_value(index)

    @property
    def unstable_bars(self) -> int:
        return self.k.unstable_bars + self.bar_count


class CCIIndicator(CachedIndicator):
    """Commodity Channel Index.

    CCI = (typical price - SMA) / (0.015 * mean deviation); zero when the
    mean deviation is zero.
    """

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 20) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        typical_price = TypicalPriceIndicator(series)
        self.typical_price = typical_price
        self.sma = SMAIndicator(typical_price, self.bar_count)
        self.mean_deviation = MeanDeviationIndicator(typical_price, self.bar_count)
        self.factor = series.num_of("0.015")

    def calculate(self, index: int) -> Num:
        mean_deviation = self.mean_deviation.get_value(index)
        if mean_deviation.is_zero():
            return self._series.num_factory.zero()
        return (
            self.typical_price.get_value(index)
            .minus(self.sma.get_value(index))
            .divided_by(mean_deviation.multiplied_by(self.factor))
        )

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class WilliamsRIndicator(CachedIndicator):
    """Williams %R: (highest high - close) / (highest high - lowest low) * -100."""

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 14) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.close = ClosePriceIndicator(series)
        self.highest_high = HighestValueIndicator(HighPriceIndicator(series), self.bar_count)
        self.lowest_low = LowestValueIndicator(LowPriceIndicator(series), self.bar_count)

    def calculate(self, index: int) -> Num:
        highest = self.highest_high.get_value(index)
        lowest = self.lowest_low.get_value(index)
        return (
            highest.minus(self.close.get_value(index))
            .divided_by(highest.minus(lowest))
            .multiplied_by(self._series.num_factory.hundred().negate())
        )

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class ROCIndicator(CachedIndicator):
    """Rate of Change: (value - value n bars ago) / value n bars ago * 100.

    Before ``bar_count`` bars are available the first bar is the reference.
    """

    @validate_positive("bar_count")
    def __init__(self, indicator: Indicator, bar_count: int) -> None:
        super().__init__(indicator)
        self.indicator = indicator
        self.bar_count = require_integer("bar_count", bar_count)

    def calculate(self, index: int) -> Num:
        reference_index = max(index - self.bar_count, self._series.begin_index)
        reference = self.indicator.get_value(reference_index)
        return (
            self.indicator.get_value(index)
            .minus(reference)
            .divided_by(reference)
            .multiplied_by(self._series.num_factory.hundred())
        )

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class MACDIndicator(CachedIndicator):
    """Moving Average Convergence Divergence: short EMA - long EMA."""

    @validate_positive("short_bar_count", "long_bar_count")
    def __init__(self, indicator: Indicator, short_bar_count: int = 12, long_bar_count: int = 26) -> None:
        super().__init__(indicator)
        self.short_bar_count = require_integer("short_bar_count", short_bar_count)
        self.long_bar_count = require_integer("long_bar_count", long_bar_count)
        if self.short_bar_count >= self.long_bar_count:
            raise InvalidParameterError(
                "Long bar count must be greater than short bar count",
                field_name="long_bar_count",
                invalid_value=long_bar_count,
            )
        self.short_ema = EMAIndicator(indicator, self.short_bar_count)
        self.long_ema = EMAIndicator(indicator, self.long_bar_count)

    def calculate(self, index: int) -> Num:
        return self.short_ema.get_value(index).minus(self.long_ema.get_value(index))

    def signal_line(self, bar_count: int = 9) -> EMAIndicator:
        """EMA of the MACD line."""
        return EMAIndicator(self, bar_count)

    def histogram(self, bar_count: int = 9) -> Indicator:
        """MACD line minus its signal line."""
        return NumericIndicator.of(self).minus(self.signal_line(bar_count))

    @property
    def unstable_bars(self) -> int:
        return self.long_bar_count

    def __str__(self) -> str:
        return f"{self.name}(short={self.short_bar_count}, long={self.long_bar_count})"

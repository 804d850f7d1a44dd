"""
Keltner Channels.

The middle line is an EMA of the typical price; the upper and lower lines
sit ``ratio`` average true ranges away from it.
"""

from __future__ import annotations

from quant_indicators.core.num import Num, NumberLike
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.averages import EMAIndicator
from quant_indicators.indicators.base import CachedIndicator, Indicator
from quant_indicators.indicators.helpers import TypicalPriceIndicator
from quant_indicators.indicators.numeric import NumericIndicator
from quant_indicators.indicators.volatility import ATRIndicator


class KeltnerChannelMiddleIndicator(CachedIndicator):
    """EMA of ``indicator`` (typical price for a series)."""

    @validate_positive("bar_count")
    def __init__(self, source: BarSeries | Indicator, bar_count: int = 20) -> None:
        if isinstance(source, BarSeries):
            source = TypicalPriceIndicator(source)
        super().__init__(source)
        self.bar_count = require_integer("bar_count", bar_count)
        self.ema = EMAIndicator(source, self.bar_count)

    def calculate(self, index: int) -> Num:
        return self.ema.get_value(index)

    @property
    def unstable_bars(self) -> int:
        return self.bar_count


class _KeltnerChannelBandIndicator(CachedIndicator):
    direction = 1

    @validate_positive("ratio")
    def __init__(
        self,
        middle: KeltnerChannelMiddleIndicator,
        ratio: NumberLike = 2,
        atr_bar_count: int = 10,
    ) -> None:
        super().__init__(middle)
        self.middle = middle
        self.ratio = middle.num_of(ratio)
        self.atr = ATRIndicator(middle.series, atr_bar_count)

    def calculate(self, index: int) -> Num:
        offset = self.atr.get_value(index).multiplied_by(self.ratio)
        middle = self.middle.get_value(index)
        return middle.plus(offset) if self.direction > 0 else middle.minus(offset)

    @property
    def unstable_bars(self) -> int:
        return max(self.middle.unstable_bars, self.atr.unstable_bars)

    def __str__(self) -> str:
        return f"{self.name}(ratio={self.ratio}, atr={self.atr.bar_count})"


class KeltnerChannelUpperIndicator(_KeltnerChannelBandIndicator):
    """Middle + ratio * ATR."""

    direction = 1


class KeltnerChannelLowerIndicator(_KeltnerChannelBandIndicator):
    """Middle - ratio * ATR."""

    direction = -1


class KeltnerChannelFacade:
    """Middle, upper and lower Keltner lines as fluent numeric indicators."""

    def __init__(
        self,
        series: BarSeries,
        ema_bar_count: int = 20,
        atr_bar_count: int = 10,
        ratio: NumberLike = 2,
    ) -> None:
        middle = KeltnerChannelMiddleIndicator(series, ema_bar_count)
        self._middle = NumericIndicator.of(middle)
        self._upper = NumericIndicator.of(KeltnerChannelUpperIndicator(middle, ratio, atr_bar_count))
        self._lower = NumericIndicator.of(KeltnerChannelLowerIndicator(middle, ratio, atr_bar_count))

    def middle(self) -> NumericIndicator:
        return self._middle

    def upper(self) -> NumericIndicator:
        return self._upper

    def lower(self) -> NumericIndicator:
        return self._lower

"""
Volatility indicators.
"""

from __future__ import annotations

from quant_indicators.core.num import Num
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.indicators.averages import MMAIndicator
from quant_indicators.indicators.base import CachedIndicator
from quant_indicators.indicators.helpers import TrueRangeIndicator


class ATRIndicator(CachedIndicator):
    """Average True Range: Wilder's moving average of the true range."""

    @validate_positive("bar_count")
    def __init__(self, series: BarSeries, bar_count: int = 14) -> None:
        super().__init__(series)
        self.bar_count = require_integer("bar_count", bar_count)
        self.true_range = TrueRangeIndicator(series)
        self.average_true_range = MMAIndicator(self.true_range, self.bar_count)

    def calculate(self, index: int) -> Num:
        return self.average_true_range.get_value(index)

    @property
    def unstable_bars(self) -> int:
        return self.bar_count

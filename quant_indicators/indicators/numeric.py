"""
Fluent arithmetic over indicators.

``NumericIndicator`` wraps any indicator so expressions can be chained:

    close = NumericIndicator.close_price(series)
    upper = close.sma(20).plus(close.stddev(20).multiplied_by(2))

Arithmetic nodes (``BinaryOperationIndicator``, ``UnaryOperationIndicator``)
hold no cache of their own; each ``get_value`` evaluates the operands, which
keep their own caches. Wrap a hot expression in a cached indicator when the
same node is queried many times over a large series.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

from quant_indicators.core.num import Num, NumberLike
from quant_indicators.core.series import BarSeries
from quant_indicators.indicators.averages import EMAIndicator, SMAIndicator
from quant_indicators.indicators.base import Indicator, as_indicator, check_same_series
from quant_indicators.indicators.helpers import (
    ClosePriceIndicator,
    HighestValueIndicator,
    LowestValueIndicator,
    PreviousValueIndicator,
    VolumeIndicator,
)
from quant_indicators.indicators.statistics import StandardDeviationIndicator

if TYPE_CHECKING:
    from quant_indicators.rules.indicator_rules import (
        CrossedDownIndicatorRule,
        CrossedUpIndicatorRule,
        OverIndicatorRule,
        UnderIndicatorRule,
    )

Operand = Union[Indicator, NumberLike]


class BinaryOperationIndicator(Indicator):
    """Per-index binary operation over two indicators of one series. Not cached."""

    def __init__(
        self,
        operator: Callable[[Num, Num], Num],
        left: Indicator,
        right: Indicator,
        symbol: str,
    ) -> None:
        super().__init__(check_same_series(left, right))
        self._operator = operator
        self.left = left
        self.right = right
        self.symbol = symbol

    def get_value(self, index: int) -> Num:
        return self._operator(self.left.get_value(index), self.right.get_value(index))

    @property
    def unstable_bars(self) -> int:
        return max(self.left.unstable_bars, self.right.unstable_bars)

    @classmethod
    def sum(cls, left: Indicator, right: Indicator) -> BinaryOperationIndicator:
        return cls(lambda a, b: a.plus(b), left, right, "+")

    @classmethod
    def difference(cls, left: Indicator, right: Indicator) -> BinaryOperationIndicator:
        return cls(lambda a, b: a.minus(b), left, right, "-")

    @classmethod
    def product(cls, left: Indicator, right: Indicator) -> BinaryOperationIndicator:
        return cls(lambda a, b: a.multiplied_by(b), left, right, "*")

    @classmethod
    def quotient(cls, left: Indicator, right: Indicator) -> BinaryOperationIndicator:
        return cls(lambda a, b: a.divided_by(b), left, right, "/")

    @classmethod
    def min(cls, left: Indicator, right: Indicator) -> BinaryOperationIndicator:
        return cls(lambda a, b: a.min(b), left, right, "min")

    @classmethod
    def max(cls, left: Indicator, right: Indicator) -> BinaryOperationIndicator:
        return cls(lambda a, b: a.max(b), left, right, "max")

    def __str__(self) -> str:
        if self.symbol.isalpha():
            return f"{self.symbol}({self.left}, {self.right})"
        return f"({self.left} {self.symbol} {self.right})"


class UnaryOperationIndicator(Indicator):
    """Per-index unary operation over one indicator. Not cached."""

    def __init__(self, operator: Callable[[Num], Num], operand: Indicator, label: str) -> None:
        super().__init__(operand.series)
        self._operator = operator
        self.operand = operand
        self.label = label

    def get_value(self, index: int) -> Num:
        return self._operator(self.operand.get_value(index))

    @property
    def unstable_bars(self) -> int:
        return self.operand.unstable_bars

    @classmethod
    def abs(cls, operand: Indicator) -> UnaryOperationIndicator:
        return cls(lambda a: a.abs(), operand, "abs")

    @classmethod
    def sqrt(cls, operand: Indicator) -> UnaryOperationIndicator:
        return cls(lambda a: a.sqrt(), operand, "sqrt")

    @classmethod
    def log(cls, operand: Indicator) -> UnaryOperationIndicator:
        return cls(lambda a: a.log(), operand, "log")

    @classmethod
    def negate(cls, operand: Indicator) -> UnaryOperationIndicator:
        return cls(lambda a: a.negate(), operand, "negate")

    @classmethod
    def pow(cls, operand: Indicator, exponent: NumberLike) -> UnaryOperationIndicator:
        power = operand.series.num_of(exponent)
        return cls(lambda a: a.pow(power), operand, f"pow[{power}]")

    @classmethod
    def substitute(cls, operand: Indicator, value: NumberLike, replacement: NumberLike) -> UnaryOperationIndicator:
        """Replace every occurrence of ``value`` by ``replacement``."""
        target = operand.series.num_of(value)
        substitute = operand.series.num_of(replacement)
        return cls(lambda a: substitute if a.is_equal(target) else a, operand, f"substitute[{target}->{substitute}]")

    def __str__(self) -> str:
        return f"{self.label}({self.operand})"


class NumericIndicator(Indicator):
    """Fluent wrapper delegating to an indicator.

    Binary operations accept an indicator or a scalar; scalars are converted
    once through the series factory into a constant indicator.
    """

    def __init__(self, delegate: Indicator) -> None:
        super().__init__(delegate.series)
        self.delegate = delegate

    @classmethod
    def of(cls, indicator: Indicator) -> NumericIndicator:
        if isinstance(indicator, NumericIndicator):
            return indicator
        return cls(indicator)

    @classmethod
    def close_price(cls, series: BarSeries) -> NumericIndicator:
        return cls(ClosePriceIndicator(series))

    @classmethod
    def volume(cls, series: BarSeries, bar_count: int = 1) -> NumericIndicator:
        return cls(VolumeIndicator(series, bar_count))

    def get_value(self, index: int) -> Num:
        return self.delegate.get_value(index)

    @property
    def unstable_bars(self) -> int:
        return self.delegate.unstable_bars

    def _operand(self, other: Operand) -> Indicator:
        return as_indicator(self._series, other)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def plus(self, other: Operand) -> NumericIndicator:
        return NumericIndicator(BinaryOperationIndicator.sum(self, self._operand(other)))

    def minus(self, other: Operand) -> NumericIndicator:
        return NumericIndicator(BinaryOperationIndicator.difference(self, self._operand(other)))

    def multiplied_by(self, other: Operand) -> NumericIndicator:
        return NumericIndicator(BinaryOperationIndicator.product(self, self._operand(other)))

    def divided_by(self, other: Operand) -> NumericIndicator:
        return NumericIndicator(BinaryOperationIndicator.quotient(self, self._operand(other)))

    def min(self, other: Operand) -> NumericIndicator:
        return NumericIndicator(BinaryOperationIndicator.min(self, self._operand(other)))

    def max(self, other: Operand) -> NumericIndicator:
        return NumericIndicator(BinaryOperationIndicator.max(self, self._operand(other)))

    def abs(self) -> NumericIndicator:
        return NumericIndicator(UnaryOperationIndicator.abs(self))

    def sqrt(self) -> NumericIndicator:
        return NumericIndicator(UnaryOperationIndicator.sqrt(self))

    def squared(self) -> NumericIndicator:
        return self.multiplied_by(self)

    def pow(self, exponent: NumberLike) -> NumericIndicator:
        return NumericIndicator(UnaryOperationIndicator.pow(self, exponent))

    def log(self) -> NumericIndicator:
        return NumericIndicator(UnaryOperationIndicator.log(self))

    def negate(self) -> NumericIndicator:
        return NumericIndicator(UnaryOperationIndicator.negate(self))

    def substitute(self, value: NumberLike, replacement: NumberLike) -> NumericIndicator:
        return NumericIndicator(UnaryOperationIndicator.substitute(self, value, replacement))

    # -------------------------------------------------------------------------
    # Cached derived indicators
    # -------------------------------------------------------------------------

    def previous(self, n: int = 1) -> NumericIndicator:
        return NumericIndicator(PreviousValueIndicator(self, n))

    def sma(self, bar_count: int) -> NumericIndicator:
        return NumericIndicator(SMAIndicator(self, bar_count))

    def ema(self, bar_count: int) -> NumericIndicator:
        return NumericIndicator(EMAIndicator(self, bar_count))

    def stddev(self, bar_count: int) -> NumericIndicator:
        return NumericIndicator(StandardDeviationIndicator(self, bar_count))

    def highest(self, bar_count: int) -> NumericIndicator:
        return NumericIndicator(HighestValueIndicator(self, bar_count))

    def lowest(self, bar_count: int) -> NumericIndicator:
        return NumericIndicator(LowestValueIndicator(self, bar_count))

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def crossed_over(self, other: Operand) -> CrossedUpIndicatorRule:
        from quant_indicators.rules.indicator_rules import CrossedUpIndicatorRule

        return CrossedUpIndicatorRule(self, self._operand(other))

    def crossed_under(self, other: Operand) -> CrossedDownIndicatorRule:
        from quant_indicators.rules.indicator_rules import CrossedDownIndicatorRule

        return CrossedDownIndicatorRule(self, self._operand(other))

    def is_greater_than(self, other: Operand) -> OverIndicatorRule:
        from quant_indicators.rules.indicator_rules import OverIndicatorRule

        return OverIndicatorRule(self, self._operand(other))

    def is_less_than(self, other: Operand) -> UnderIndicatorRule:
        from quant_indicators.rules.indicator_rules import UnderIndicatorRule

        return UnderIndicatorRule(self, self._operand(other))

    # -------------------------------------------------------------------------
    # Python operators
    # -------------------------------------------------------------------------

    def __add__(self, other: Operand) -> NumericIndicator:
        return self.plus(other)

    def __radd__(self, other: Operand) -> NumericIndicator:
        return NumericIndicator.of(self._operand(other)).plus(self)

    def __sub__(self, other: Operand) -> NumericIndicator:
        return self.minus(other)

    def __rsub__(self, other: Operand) -> NumericIndicator:
        return NumericIndicator.of(self._operand(other)).minus(self)

    def __mul__(self, other: Operand) -> NumericIndicator:
        return self.multiplied_by(other)

    def __rmul__(self, other: Operand) -> NumericIndicator:
        return NumericIndicator.of(self._operand(other)).multiplied_by(self)

    def __truediv__(self, other: Operand) -> NumericIndicator:
        return self.divided_by(other)

    def __rtruediv__(self, other: Operand) -> NumericIndicator:
        return NumericIndicator.of(self._operand(other)).divided_by(self)

    def __neg__(self) -> NumericIndicator:
        return self.negate()

    def __abs__(self) -> NumericIndicator:
        return self.abs()

    def __str__(self) -> str:
        return str(self.delegate)

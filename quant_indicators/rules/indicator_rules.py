"""
Rules comparing two indicators, or an indicator and a threshold.

Crosses use strict previous/current semantics: ``first`` crosses up
``second`` at ``i`` when ``first[i-1] <= second[i-1]`` and
``first[i] > second[i]``. Nothing crosses at the first bar, and any NaN
operand makes a comparison unsatisfied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quant_indicators.core.num import NumberLike
from quant_indicators.indicators.base import Indicator, as_indicator, check_same_series
from quant_indicators.rules.base import Rule

if TYPE_CHECKING:
    from quant_indicators.backtest.trading_record import TradingRecord


class _IndicatorPairRule(Rule):
    """Base for rules over a pair of indicators on one series."""

    def __init__(self, first: Indicator, second: Indicator | NumberLike) -> None:
        self.first = first
        self.second = as_indicator(first.series, second)
        check_same_series(self.first, self.second)

    def __str__(self) -> str:
        return f"{self.name}({self.first}, {self.second})"


class CrossedUpIndicatorRule(_IndicatorPairRule):
    """``first`` moves from at-or-below ``second`` to strictly above it."""

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = False
        if index > self.first.series.begin_index:
            satisfied = self.first.get_value(index - 1).is_less_than_or_equal(
                self.second.get_value(index - 1)
            ) and self.first.get_value(index).is_greater_than(self.second.get_value(index))
        self.trace_is_satisfied(index, satisfied)
        return satisfied


class CrossedDownIndicatorRule(_IndicatorPairRule):
    """``first`` moves from at-or-above ``second`` to strictly below it."""

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = False
        if index > self.first.series.begin_index:
            satisfied = self.first.get_value(index - 1).is_greater_than_or_equal(
                self.second.get_value(index - 1)
            ) and self.first.get_value(index).is_less_than(self.second.get_value(index))
        self.trace_is_satisfied(index, satisfied)
        return satisfied


class OverIndicatorRule(_IndicatorPairRule):
    """``first`` is strictly greater than ``second``."""

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = self.first.get_value(index).is_greater_than(self.second.get_value(index))
        self.trace_is_satisfied(index, satisfied)
        return satisfied


class UnderIndicatorRule(_IndicatorPairRule):
    """``first`` is strictly less than ``second``."""

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = self.first.get_value(index).is_less_than(self.second.get_value(index))
        self.trace_is_satisfied(index, satisfied)
        return satisfied


class IsEqualRule(_IndicatorPairRule):
    """``first`` equals ``second``."""

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = self.first.get_value(index).is_equal(self.second.get_value(index))
        self.trace_is_satisfied(index, satisfied)
        return satisfied

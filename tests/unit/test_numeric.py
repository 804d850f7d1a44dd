"""
Unit tests for indicators/numeric.py
"""

import pytest

from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.indicators.averages import SMAIndicator
from quant_indicators.indicators.base import ConstantIndicator
from quant_indicators.indicators.bollinger import (
    BollingerBandsLowerIndicator,
    BollingerBandsMiddleIndicator,
    BollingerBandsUpperIndicator,
)
from quant_indicators.indicators.helpers import ClosePriceIndicator
from quant_indicators.indicators.numeric import (
    BinaryOperationIndicator,
    NumericIndicator,
    UnaryOperationIndicator,
)
from quant_indicators.indicators.statistics import StandardDeviationIndicator
from quant_indicators.indicators.volume import VWAPIndicator
from quant_indicators.rules.indicator_rules import CrossedUpIndicatorRule, OverIndicatorRule


@pytest.fixture
def close(make_series):
    """Fluent close price over 1, 2, 3, 4, 5."""
    return NumericIndicator.close_price(make_series([1, 2, 3, 4, 5]))


class TestArithmetic:
    """Tests for fluent arithmetic."""

    def test_scalar_operations(self, close):
        """Test operations against scalars."""
        assert close.plus(1).get_value(0) == 2
        assert close.minus(1).get_value(4) == 4
        assert close.multiplied_by(3).get_value(1) == 6
        assert close.divided_by(2).get_value(2) == 1.5

    def test_indicator_operations(self, close):
        """Test operations between two indicators."""
        doubled = close.plus(close)
        assert doubled.get_value(3) == 8
        assert close.squared().get_value(2) == 9
        assert close.max(3).get_value(0) == 3
        assert close.min(3).get_value(4) == 3

    def test_operators(self, close):
        """Test Python operators build the same nodes."""
        assert (close + 1).get_value(0) == 2
        assert (10 - close).get_value(1) == 8
        assert (2 * close).get_value(2) == 6
        assert (close / 2).get_value(0) == 0.5
        assert (6 / close).get_value(2) == 2
        assert (-close).get_value(0) == -1
        assert abs(close - 3).get_value(0) == 2

    def test_divide_by_zero_indicator_is_nan(self, close):
        """Test dividing by a zero constant yields NaN at every index."""
        quotient = close.divided_by(0)
        assert all(value.is_nan() for value in quotient.values())

    def test_unary_operations(self, close):
        """Test sqrt, pow, log and negate."""
        assert close.pow(2).get_value(3) == 16
        assert close.sqrt().get_value(3) == 2
        assert close.log().get_value(0).is_zero()
        assert close.minus(10).sqrt().get_value(0).is_nan()

    def test_substitute(self, close):
        """Test value replacement."""
        replaced = close.substitute(3, 30)
        assert replaced.get_value(2) == 30
        assert replaced.get_value(1) == 2

    def test_string_form(self, close):
        """Test expression nodes describe themselves."""
        assert str(close.plus(1)).startswith("(ClosePriceIndicator + ConstantIndicator(")
        assert str(close.max(close)) == "max(ClosePriceIndicator, ClosePriceIndicator)"
        assert str(close.abs()) == "abs(ClosePriceIndicator)"

    def test_mixed_series_rejected(self, close, make_series):
        """Test combining indicators of different series raises."""
        other = NumericIndicator.close_price(make_series([1, 2]))
        with pytest.raises(InvalidParameterError):
            close.plus(other)


class TestDerivedIndicators:
    """Tests for cached indicators reached through the fluent API."""

    def test_previous(self, close):
        """Test previous values."""
        previous = close.previous(2)
        assert previous.get_value(1).is_nan()
        assert previous.get_value(4) == 3

    def test_sma_and_ema(self, close):
        """Test fluent averages."""
        assert close.sma(3).get_value(4) == 4
        assert close.ema(3).get_value(1) == 1.5

    def test_highest_lowest_stddev(self, close):
        """Test fluent window statistics."""
        assert close.highest(2).get_value(4) == 5
        assert close.lowest(2).get_value(4) == 4
        assert close.stddev(1).get_value(4).is_zero()

    def test_unstable_bars_propagate(self, close):
        """Test unstable bars follow the operands."""
        expression = close.sma(3).minus(close.sma(2))
        assert expression.unstable_bars == 3

    def test_of_does_not_rewrap(self, close):
        """Test NumericIndicator.of returns an existing wrapper."""
        assert NumericIndicator.of(close) is close
        assert isinstance(ClosePriceIndicator(close.series).numeric(), NumericIndicator)

    def test_volume(self, make_series):
        """Test the volume factory."""
        series = make_series([{"close": 1, "volume": 10}, {"close": 2, "volume": 20}])
        assert NumericIndicator.volume(series, 2).get_value(1) == 30


class TestRuleBuilders:
    """Tests for rules built from numeric indicators."""

    def test_crossed_over(self, make_series):
        """Test a cross above a threshold."""
        close = NumericIndicator.close_price(make_series([1, 2, 4, 3, 5]))
        rule = close.crossed_over(3)
        assert isinstance(rule, CrossedUpIndicatorRule)
        assert [rule.is_satisfied(i) for i in range(5)] == [False, False, True, False, True]

    def test_crossed_under(self, make_series):
        """Test a cross below a threshold."""
        close = NumericIndicator.close_price(make_series([5, 4, 2, 3, 1]))
        rule = close.crossed_under(3)
        assert [rule.is_satisfied(i) for i in range(5)] == [False, False, True, False, True]

    def test_comparisons(self, close):
        """Test greater and less than rules."""
        over = close.is_greater_than(3)
        assert isinstance(over, OverIndicatorRule)
        assert not over.is_satisfied(2)
        assert over.is_satisfied(3)
        assert close.is_less_than(2).is_satisfied(0)


class TestOperationNodes:
    """Tests for the operation node classes."""

    def test_binary_node(self, make_series):
        """Test a binary node evaluated directly."""
        series = make_series([4, 6])
        node = BinaryOperationIndicator.quotient(ClosePriceIndicator(series), ConstantIndicator(series, 2))
        assert node.get_value(1) == 3

    def test_unary_node(self, make_series):
        """Test a unary node evaluated directly."""
        series = make_series([-4])
        node = UnaryOperationIndicator.abs(ClosePriceIndicator(series))
        assert node.get_value(0) == 4


class TestSeriesProperties:
    """Properties that hold at every index of a series."""

    def test_plus_then_minus_restores_values(self, make_series):
        """Test close + 5 - 5 equals close at every index."""
        series = make_series([10.25, 11.5, 9.75, 100.125, 0.5, 1234.5])
        close = NumericIndicator.close_price(series)
        shifted = close.plus(5).minus(5)
        for index in range(series.begin_index, series.end_index + 1):
            assert shifted.get_value(index).is_equal(close.get_value(index))

    def test_nan_close_spreads_through_windows(self, make_series):
        """Test a NaN close gives NaN wherever a window covers it."""
        closes = [1, 2, None, 4, 5, 6, 7]
        series = make_series([{"close": c, "volume": 10} for c in closes])
        close = ClosePriceIndicator(series)
        middle = BollingerBandsMiddleIndicator(SMAIndicator(close, 3))
        deviation = StandardDeviationIndicator(close, 3)
        indicators = [
            SMAIndicator(close, 3),
            BollingerBandsUpperIndicator(middle, deviation),
            BollingerBandsLowerIndicator(middle, deviation),
            VWAPIndicator(series, 3),
            BinaryOperationIndicator.sum(SMAIndicator(close, 3), ConstantIndicator(series, 1)),
        ]
        for indicator in indicators:
            for index in (2, 3, 4):
                assert indicator.get_value(index).is_nan(), f"{indicator}[{index}]"
            for index in (0, 1, 5, 6):
                assert not indicator.get_value(index).is_nan(), f"{indicator}[{index}]"

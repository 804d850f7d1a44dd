"""
Unit tests for rules/
"""

import logging

import pytest

from quant_indicators.backtest.trading_record import TradeType, TradingRecord
from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.indicators.base import ConstantIndicator
from quant_indicators.indicators.helpers import ClosePriceIndicator
from quant_indicators.monitoring.logger import TRACE
from quant_indicators.rules import (
    AndRule,
    BooleanRule,
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
    FixedRule,
    IsEqualRule,
    NotRule,
    OrRule,
    OverIndicatorRule,
    StopGainRule,
    StopLossRule,
    UnderIndicatorRule,
    XorRule,
)
from quant_indicators.rules.trading_rules import stop_gain_price, stop_loss_price


class TestBooleanCombinators:
    """Tests for and, or, xor and not."""

    def test_truth_tables(self):
        """Test every combinator over the four input pairs."""
        t, f = BooleanRule.TRUE, BooleanRule.FALSE
        assert t.and_(t).is_satisfied(0)
        assert not t.and_(f).is_satisfied(0)
        assert t.or_(f).is_satisfied(0)
        assert not f.or_(f).is_satisfied(0)
        assert t.xor(f).is_satisfied(0)
        assert not t.xor(t).is_satisfied(0)
        assert not t.negation().is_satisfied(0)
        assert f.negation().is_satisfied(0)

    def test_operators(self):
        """Test &, |, ^ and ~ build the matching rules."""
        t, f = BooleanRule.TRUE, BooleanRule.FALSE
        assert isinstance(t & f, AndRule)
        assert isinstance(t | f, OrRule)
        assert isinstance(t ^ f, XorRule)
        assert isinstance(~t, NotRule)
        assert ((t & ~f) | f).is_satisfied(3)

    def test_and_short_circuits(self):
        """Test the second rule is not evaluated when the first fails."""

        class ExplodingRule(BooleanRule):
            def is_satisfied(self, index, trading_record=None):
                raise AssertionError("should not be evaluated")

        assert not BooleanRule.FALSE.and_(ExplodingRule(True)).is_satisfied(0)
        assert BooleanRule.TRUE.or_(ExplodingRule(True)).is_satisfied(0)

    def test_string_form(self):
        """Test combinators describe their operands."""
        rule = FixedRule(1, 2).and_(BooleanRule.TRUE.negation())
        assert str(rule) == "(FixedRule([1, 2]) AND NOT BooleanRule(True))"


class TestFixedRule:
    """Tests for FixedRule."""

    def test_fixed_indices(self):
        """Test the rule holds only at its indices."""
        rule = FixedRule(0, 3, 5)
        assert [rule.is_satisfied(i) for i in range(6)] == [True, False, False, True, False, True]

    def test_rejects_non_integer(self):
        """Test a non-integer index is rejected."""
        with pytest.raises(InvalidParameterError):
            FixedRule(1.5)


class TestIndicatorRules:
    """Tests for indicator comparison rules."""

    def test_crossed_up(self, make_series):
        """Test the cross above another indicator, never at the first bar."""
        series = make_series([12, 8, 10, 11, 9, 12])
        rule = CrossedUpIndicatorRule(ClosePriceIndicator(series), 10)
        assert [rule.is_satisfied(i) for i in range(6)] == [False, False, False, True, False, True]

    def test_crossed_down(self, make_series):
        """Test the cross below another indicator."""
        series = make_series([8, 12, 10, 9, 11, 8])
        rule = CrossedDownIndicatorRule(ClosePriceIndicator(series), 10)
        assert [rule.is_satisfied(i) for i in range(6)] == [False, False, False, True, False, True]

    def test_cross_between_indicators(self, make_series):
        """Test crosses between two indicators of one series."""
        series = make_series([1, 2, 3])
        close = ClosePriceIndicator(series)
        rule = CrossedUpIndicatorRule(close, ConstantIndicator(series, 1.5))
        assert rule.is_satisfied(1)

    def test_nan_never_crosses(self, make_series):
        """Test NaN operands leave the rule unsatisfied."""
        series = make_series([5, None, 15])
        rule = CrossedUpIndicatorRule(ClosePriceIndicator(series), 10)
        assert not rule.is_satisfied(1)
        assert not rule.is_satisfied(2)

    def test_over_under_equal(self, make_series):
        """Test strict comparisons and equality."""
        close = ClosePriceIndicator(make_series([1, 2, 3]))
        assert OverIndicatorRule(close, 2).is_satisfied(2)
        assert not OverIndicatorRule(close, 2).is_satisfied(1)
        assert UnderIndicatorRule(close, 2).is_satisfied(0)
        assert not UnderIndicatorRule(close, 2).is_satisfied(1)
        assert IsEqualRule(close, 2).is_satisfied(1)

    def test_different_series_rejected(self, make_series):
        """Test comparing indicators of different series raises."""
        first = ClosePriceIndicator(make_series([1, 2]))
        second = ClosePriceIndicator(make_series([1, 2]))
        with pytest.raises(InvalidParameterError):
            OverIndicatorRule(first, second)

    def test_trace_logging(self, make_series, caplog):
        """Test rule decisions are logged at TRACE level."""
        close = ClosePriceIndicator(make_series([1, 2, 3]))
        rule = OverIndicatorRule(close, 2)
        with caplog.at_level(TRACE, logger="quant_indicators"):
            rule.is_satisfied(2)
        assert any("OverIndicatorRule" in record.getMessage() for record in caplog.records)


class TestStopPrices:
    """Tests for the stop price helpers."""

    def test_stop_loss_price(self, num_factory):
        """Test loss thresholds for long and short entries."""
        price = num_factory.num_of(100)
        assert stop_loss_price(price, num_factory.num_of(5), True) == 95
        assert stop_loss_price(price, num_factory.num_of(5), False) == 105

    def test_stop_gain_price(self, num_factory):
        """Test gain thresholds for long and short entries."""
        price = num_factory.num_of(100)
        assert stop_gain_price(price, num_factory.num_of(10), True) == 110
        assert stop_gain_price(price, num_factory.num_of(10), False) == 90


class TestStopRules:
    """Tests for StopLossRule and StopGainRule."""

    @pytest.fixture
    def close(self, make_series):
        return ClosePriceIndicator(make_series([100, 97, 95, 94, 106, 111]))

    def test_no_record_or_position(self, close):
        """Test stops are never satisfied without an opened position."""
        rule = StopLossRule(close, 5)
        assert not rule.is_satisfied(2)
        assert not rule.is_satisfied(2, TradingRecord())

    def test_stop_loss_long(self, close):
        """Test a long stop loss triggers at or below the threshold."""
        record = TradingRecord()
        record.enter(0, close.get_value(0), close.num_of(1))
        rule = StopLossRule(close, 5)
        assert not rule.is_satisfied(1, record)
        assert rule.is_satisfied(2, record)
        assert rule.is_satisfied(3, record)

    def test_stop_gain_long(self, close):
        """Test a long stop gain triggers at or above the threshold."""
        record = TradingRecord()
        record.enter(0, close.get_value(0), close.num_of(1))
        rule = StopGainRule(close, 10)
        assert not rule.is_satisfied(4, record)
        assert rule.is_satisfied(5, record)

    def test_stop_loss_short(self, close):
        """Test a short stop loss triggers when the price rises."""
        record = TradingRecord(TradeType.SELL)
        record.enter(0, close.get_value(0), close.num_of(1))
        rule = StopLossRule(close, 5)
        assert not rule.is_satisfied(3, record)
        assert rule.is_satisfied(4, record)

    def test_stop_gain_short(self, close):
        """Test a short stop gain triggers when the price falls."""
        record = TradingRecord(TradeType.SELL)
        record.enter(0, close.get_value(0), close.num_of(1))
        rule = StopGainRule(close, 5)
        assert not rule.is_satisfied(1, record)
        assert rule.is_satisfied(2, record)

    def test_closed_position_not_stopped(self, close):
        """Test a record without an opened position is never stopped."""
        record = TradingRecord()
        record.enter(0, close.get_value(0), close.num_of(1))
        record.exit(1, close.get_value(1), close.num_of(1))
        assert not StopLossRule(close, 5).is_satisfied(3, record)

    def test_invalid_percentage(self, close):
        """Test a non-positive percentage is rejected."""
        with pytest.raises(InvalidParameterError):
            StopLossRule(close, 0)
        with pytest.raises(InvalidParameterError):
            StopGainRule(close, -5)

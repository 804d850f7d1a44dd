"""
Unit tests for backtest/manager.py
"""

import pytest

from quant_indicators.backtest.cost import LinearTransactionCostModel
from quant_indicators.backtest.manager import BarSeriesManager, TradeOnNextOpenModel
from quant_indicators.backtest.strategy import Strategy
from quant_indicators.backtest.trading_record import TradeType
from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.rules import FixedRule


@pytest.fixture
def series(make_series):
    """Closes 10..15, opens half a point below the close."""
    return make_series(
        [{"open": c - 0.5, "high": c + 1, "low": c - 1, "close": c} for c in range(10, 16)]
    )


class TestTradeOnCurrentClose:
    """Tests for the default execution model."""

    def test_fills_on_signal_close(self, series):
        """Test trades fill at the close of the signal bar."""
        record = BarSeriesManager(series).run(Strategy(FixedRule(1), FixedRule(3)))
        assert record.position_count == 1
        position = record.positions[0]
        assert position.entry.index == 1
        assert position.entry.price_per_asset == 11
        assert position.exit.index == 3
        assert position.exit.price_per_asset == 13
        assert record.current_position.is_new()

    def test_trade_type_and_amount(self, series):
        """Test the run's starting type and amount reach the trades."""
        manager = BarSeriesManager(series)
        record = manager.run(Strategy(FixedRule(0), FixedRule(2)), TradeType.SELL, amount=2)
        position = record.positions[0]
        assert position.entry.is_sell()
        assert position.entry.amount == 2
        assert position.profit() == -4

    def test_cost_models_reach_trades(self, series):
        """Test the manager's cost models price the record's trades."""
        manager = BarSeriesManager(series, transaction_cost_model=LinearTransactionCostModel(0.01))
        record = manager.run(Strategy(FixedRule(0), FixedRule(2)))
        assert float(record.positions[0].entry.cost) == pytest.approx(0.1)

    def test_repeated_runs_are_independent(self, series):
        """Test every run starts from a fresh record."""
        manager = BarSeriesManager(series)
        strategy = Strategy(FixedRule(0), FixedRule(1))
        assert manager.run(strategy).position_count == 1
        assert manager.run(strategy).position_count == 1


class TestTradeOnNextOpen:
    """Tests for the next-open execution model."""

    def test_fills_on_next_open(self, series):
        """Test trades fill at the open of the bar after the signal."""
        manager = BarSeriesManager(series, execution_model=TradeOnNextOpenModel())
        record = manager.run(Strategy(FixedRule(1), FixedRule(3)))
        position = record.positions[0]
        assert position.entry.index == 2
        assert position.entry.price_per_asset == 11.5
        assert position.exit.index == 4
        assert position.exit.price_per_asset == 13.5

    def test_last_bar_signal_dropped(self, series):
        """Test a signal on the last bar produces no trade."""
        manager = BarSeriesManager(series, execution_model=TradeOnNextOpenModel())
        record = manager.run(Strategy(FixedRule(5), FixedRule(5)))
        assert record.trades == []
        assert record.current_position.is_new()


class TestRunBounds:
    """Tests for the run start and end indices."""

    def test_bounds_clamped_to_series(self, series):
        """Test out-of-range bounds are clamped."""
        manager = BarSeriesManager(series)
        record = manager.run(Strategy(FixedRule(0), FixedRule(5)), start=-10, end=100)
        assert record.positions[0].entry.index == 0
        assert record.positions[0].exit.index == 5

    def test_start_limits_entries(self, series):
        """Test no trade happens before the run start."""
        manager = BarSeriesManager(series)
        record = manager.run(Strategy(FixedRule(1, 3), FixedRule(4)), start=2)
        assert record.positions[0].entry.index == 3

    def test_start_after_end_rejected(self, series):
        """Test an empty run range raises."""
        with pytest.raises(InvalidParameterError):
            BarSeriesManager(series).run(Strategy(FixedRule(0), FixedRule(1)), start=4, end=2)

    def test_open_position_closed_after_end(self, series):
        """Test a position open at the run end may exit on a later bar."""
        manager = BarSeriesManager(series)
        record = manager.run(Strategy(FixedRule(1, 5), FixedRule(4)), end=2)
        assert record.position_count == 1
        assert record.positions[0].exit.index == 4
        assert record.is_closed()

    def test_no_new_entry_after_end(self, series):
        """Test no position is opened past the run end."""
        manager = BarSeriesManager(series)
        record = manager.run(Strategy(FixedRule(4), FixedRule(5)), end=2)
        assert record.trades == []

    def test_position_left_open_without_exit(self, series):
        """Test a position without an exit signal stays open."""
        record = BarSeriesManager(series).run(Strategy(FixedRule(2), FixedRule()), end=3)
        assert record.position_count == 0
        assert record.current_position.is_opened()

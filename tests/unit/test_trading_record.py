"""
Unit tests for backtest/trading_record.py
"""

import pytest

from quant_indicators.backtest.cost import LinearTransactionCostModel
from quant_indicators.backtest.trading_record import Position, Trade, TradeType, TradingRecord
from quant_indicators.core.exceptions import InvalidParameterError


class TestTradeType:
    """Tests for TradeType."""

    def test_complement(self):
        """Test BUY and SELL complement each other."""
        assert TradeType.BUY.complement() is TradeType.SELL
        assert TradeType.SELL.complement() is TradeType.BUY
        assert TradeType("buy") is TradeType.BUY


class TestTrade:
    """Tests for Trade."""

    def test_buy_and_sell_factories(self, num_factory):
        """Test the factory constructors and trade value."""
        buy = Trade.buy_at(1, num_factory.num_of(10), num_factory.num_of(3))
        sell = Trade.sell_at(2, num_factory.num_of(12), num_factory.num_of(3))
        assert buy.is_buy() and not buy.is_sell()
        assert sell.is_sell()
        assert buy.value == 30
        assert buy.cost.is_zero()
        assert buy.net_price == 10

    def test_equality(self, num_factory):
        """Test trades compare by index, type, price and amount."""
        first = Trade.buy_at(1, num_factory.num_of(10), num_factory.one())
        second = Trade.buy_at(1, num_factory.num_of(10), num_factory.one())
        other = Trade.sell_at(1, num_factory.num_of(10), num_factory.one())
        assert first == second
        assert hash(first) == hash(second)
        assert first != other

    def test_to_dict(self, decimal_factory):
        """Test dictionary conversion."""
        trade = Trade.sell_at(4, decimal_factory.num_of("10.5"), decimal_factory.num_of(2))
        data = trade.to_dict()
        assert data["index"] == 4
        assert data["type"] == "sell"
        assert data["price_per_asset"] == "10.5"

    def test_cost_model_sets_net_price(self, num_factory):
        """Test a sell net price is lowered by the cost per asset."""
        trade = Trade.sell_at(0, num_factory.num_of(100), num_factory.num_of(2), LinearTransactionCostModel(0.01))
        assert float(trade.cost) == pytest.approx(2)
        assert float(trade.net_price) == pytest.approx(99)


class TestPosition:
    """Tests for Position."""

    def test_lifecycle(self, num_factory):
        """Test new, opened and closed states."""
        position = Position()
        assert position.is_new()
        entry = position.operate(0, num_factory.num_of(10), num_factory.one())
        assert position.is_opened()
        assert entry.is_buy()
        exit_trade = position.operate(3, num_factory.num_of(12), num_factory.one())
        assert position.is_closed()
        assert exit_trade.is_sell()
        assert position.operate(4, num_factory.num_of(13), num_factory.one()) is None

    def test_exit_before_entry_rejected(self, num_factory):
        """Test an exit index before the entry index raises."""
        position = Position()
        position.operate(5, num_factory.num_of(10), num_factory.one())
        with pytest.raises(InvalidParameterError):
            position.operate(4, num_factory.num_of(10), num_factory.one())

    def test_of(self, num_factory):
        """Test building a closed position from two trades."""
        entry = Trade.sell_at(0, num_factory.num_of(10), num_factory.one())
        exit_trade = Trade.buy_at(2, num_factory.num_of(8), num_factory.one())
        position = Position.of(entry, exit_trade)
        assert position.is_closed()
        assert position.starting_type is TradeType.SELL
        assert position.profit() == 2

    def test_of_rejects_same_type(self, num_factory):
        """Test two trades of the same type cannot form a position."""
        entry = Trade.buy_at(0, num_factory.num_of(10), num_factory.one())
        exit_trade = Trade.buy_at(2, num_factory.num_of(8), num_factory.one())
        with pytest.raises(InvalidParameterError):
            Position.of(entry, exit_trade)

    def test_of_rejects_different_cost_models(self, num_factory):
        """Test trades priced by different cost models are rejected."""
        entry = Trade.buy_at(0, num_factory.num_of(10), num_factory.one(), LinearTransactionCostModel(0.01))
        exit_trade = Trade.sell_at(2, num_factory.num_of(8), num_factory.one())
        with pytest.raises(InvalidParameterError):
            Position.of(entry, exit_trade)

    def test_long_profit_and_return(self, num_factory):
        """Test gross profit and return of a long position."""
        position = Position(TradeType.BUY)
        position.operate(0, num_factory.num_of(100), num_factory.two())
        position.operate(1, num_factory.num_of(110), num_factory.two())
        assert position.gross_profit() == 20
        assert position.profit() == 20
        assert float(position.gross_return()) == pytest.approx(1.1)
        assert position.has_profit()
        assert not position.has_loss()

    def test_short_profit_and_return(self, num_factory):
        """Test a short profits when the price falls."""
        position = Position(TradeType.SELL)
        position.operate(0, num_factory.num_of(100), num_factory.one())
        position.operate(1, num_factory.num_of(90), num_factory.one())
        assert position.gross_profit() == 10
        assert float(position.gross_return()) == pytest.approx(1.1)

    def test_losing_position(self, num_factory):
        """Test a long position closed lower has a loss."""
        position = Position()
        position.operate(0, num_factory.num_of(100), num_factory.one())
        position.operate(1, num_factory.num_of(95), num_factory.one())
        assert position.profit() == -5
        assert position.has_loss()

    def test_opened_position(self, num_factory):
        """Test an opened position reports zero unless marked to a price."""
        position = Position()
        position.operate(0, num_factory.num_of(100), num_factory.num_of(2))
        assert position.profit().is_zero()
        assert position.gross_return().is_zero()
        assert position.profit(3, num_factory.num_of(105)) == 10
        assert float(position.gross_return(num_factory.num_of(105))) == pytest.approx(1.05)

    def test_new_position_figures_are_nan(self):
        """Test a position without trades has no figures."""
        position = Position()
        assert position.gross_profit().is_nan()
        assert position.gross_return().is_nan()

    def test_equality(self, num_factory):
        """Test positions compare by their trades."""
        first = Position.of(
            Trade.buy_at(0, num_factory.num_of(1), num_factory.one()),
            Trade.sell_at(1, num_factory.num_of(2), num_factory.one()),
        )
        second = Position.of(
            Trade.buy_at(0, num_factory.num_of(1), num_factory.one()),
            Trade.sell_at(1, num_factory.num_of(2), num_factory.one()),
        )
        assert first == second


class TestTradingRecord:
    """Tests for TradingRecord."""

    def test_enter_and_exit(self, num_factory):
        """Test entering and exiting builds closed positions."""
        record = TradingRecord(name="test")
        price, amount = num_factory.num_of(10), num_factory.one()
        assert record.is_closed()
        assert record.enter(0, price, amount)
        assert not record.enter(1, price, amount)
        assert not record.is_closed()
        assert record.exit(2, price, amount)
        assert not record.exit(3, price, amount)
        assert record.position_count == 1
        assert len(record.trades) == 2
        assert record.current_position.is_new()

    def test_last_trades(self, num_factory):
        """Test last trade lookups."""
        record = TradingRecord()
        amount = num_factory.one()
        record.operate(0, num_factory.num_of(10), amount)
        record.operate(2, num_factory.num_of(11), amount)
        record.operate(4, num_factory.num_of(12), amount)
        assert record.last_trade.index == 4
        assert record.last_entry.index == 4
        assert record.last_exit.index == 2
        assert record.last_trade_of(TradeType.SELL).index == 2
        assert record.last_position.exit.index == 2
        assert record.current_position.is_opened()

    def test_empty_record(self):
        """Test lookups on an empty record."""
        record = TradingRecord()
        assert record.last_trade is None
        assert record.last_entry is None
        assert record.last_position is None
        assert record.positions == []

    def test_out_of_order_trade_rejected(self, num_factory):
        """Test a trade index before the last trade raises."""
        record = TradingRecord()
        record.operate(5, num_factory.num_of(10), num_factory.one())
        with pytest.raises(InvalidParameterError):
            record.operate(3, num_factory.num_of(10), num_factory.one())

    def test_short_record(self, num_factory):
        """Test a record starting with sells."""
        record = TradingRecord(TradeType.SELL)
        record.enter(0, num_factory.num_of(10), num_factory.one())
        record.exit(1, num_factory.num_of(8), num_factory.one())
        position = record.positions[0]
        assert position.entry.is_sell()
        assert position.exit.is_buy()
        assert position.profit() == 2

    def test_cost_models_propagate(self, num_factory):
        """Test trades are priced with the record's cost model."""
        record = TradingRecord(transaction_cost_model=LinearTransactionCostModel(0.01))
        record.enter(0, num_factory.num_of(100), num_factory.one())
        assert float(record.last_entry.cost) == pytest.approx(1)

    def test_positions_are_a_copy(self, num_factory):
        """Test callers cannot mutate the position list."""
        record = TradingRecord()
        record.enter(0, num_factory.num_of(10), num_factory.one())
        record.exit(1, num_factory.num_of(11), num_factory.one())
        record.positions.clear()
        assert record.position_count == 1

    def test_str(self):
        """Test the string form."""
        assert str(TradingRecord(name="sma")) == "sma(positions=0, open=False)"

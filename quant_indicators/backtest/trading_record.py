"""
Trades, positions and the trading record of a backtest.

A position is an entry trade followed by an exit trade of the complementary
type. The trading record is the ordered history of positions produced by a
strategy run, with at most one position open at any time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from quant_indicators.backtest.cost import CostModel, ZeroCostModel
from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.core.num import NaN, Num


class TradeType(str, Enum):
    """Direction of a trade."""

    BUY = "buy"
    SELL = "sell"

    def complement(self) -> TradeType:
        return TradeType.SELL if self is TradeType.BUY else TradeType.BUY


@dataclass(eq=False)
class Trade:
    """A single buy or sell at one series index.

    ``cost`` is priced by the transaction cost model on creation. The net
    price spreads that cost over the amount: higher than the execution
    price for a buy, lower for a sell.
    """

    index: int
    type: TradeType
    price_per_asset: Num = NaN
    amount: Num = NaN
    cost_model: CostModel = field(default_factory=ZeroCostModel)
    cost: Num = field(init=False)
    net_price: Num = field(init=False)

    def __post_init__(self) -> None:
        self.type = TradeType(self.type)
        self.cost = self.cost_model.calculate_trade(self.price_per_asset, self.amount)
        cost_per_asset = self.cost.divided_by(self.amount)
        if self.is_buy():
            self.net_price = self.price_per_asset.plus(cost_per_asset)
        else:
            self.net_price = self.price_per_asset.minus(cost_per_asset)

    @classmethod
    def buy_at(
        cls,
        index: int,
        price: Num,
        amount: Num,
        cost_model: CostModel | None = None,
    ) -> Trade:
        return cls(index, TradeType.BUY, price, amount, cost_model or ZeroCostModel())

    @classmethod
    def sell_at(
        cls,
        index: int,
        price: Num,
        amount: Num,
        cost_model: CostModel | None = None,
    ) -> Trade:
        return cls(index, TradeType.SELL, price, amount, cost_model or ZeroCostModel())

    @property
    def value(self) -> Num:
        """Traded value: price per asset times amount."""
        return self.price_per_asset.multiplied_by(self.amount)

    def is_buy(self) -> bool:
        return self.type is TradeType.BUY

    def is_sell(self) -> bool:
        return self.type is TradeType.SELL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trade):
            return NotImplemented
        return (
            self.index == other.index
            and self.type is other.type
            and self.price_per_asset == other.price_per_asset
            and self.amount == other.amount
        )

    def __hash__(self) -> int:
        return hash((self.index, self.type))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "type": self.type.value,
            "price_per_asset": str(self.price_per_asset),
            "amount": str(self.amount),
            "cost": str(self.cost),
            "net_price": str(self.net_price),
        }

    def __str__(self) -> str:
        return f"Trade({self.type.value} @ {self.index}, price={self.price_per_asset}, amount={self.amount})"


class Position:
    """Pair of entry and exit trades.

    Profit and return figures are zero while the position is open.
    """

    def __init__(
        self,
        starting_type: TradeType = TradeType.BUY,
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
    ) -> None:
        self.starting_type = TradeType(starting_type)
        self.transaction_cost_model = transaction_cost_model or ZeroCostModel()
        self.holding_cost_model = holding_cost_model or ZeroCostModel()
        self.entry: Trade | None = None
        self.exit: Trade | None = None

    @classmethod
    def of(
        cls,
        entry: Trade,
        exit: Trade,
        holding_cost_model: CostModel | None = None,
    ) -> Position:
        """Build a closed position from two existing trades.

        Raises:
            InvalidParameterError: If both trades have the same type, or
                their cost models differ.
        """
        if entry.type is exit.type:
            raise InvalidParameterError(
                "Entry and exit trades must have different types",
                field_name="exit",
                invalid_value=exit.type.value,
            )
        if entry.cost_model != exit.cost_model:
            raise InvalidParameterError(
                "Entry and exit trades must share one transaction cost model",
                field_name="cost_model",
            )
        position = cls(entry.type, entry.cost_model, holding_cost_model)
        position.entry = entry
        position.exit = exit
        return position

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def is_new(self) -> bool:
        return self.entry is None and self.exit is None

    def is_opened(self) -> bool:
        return self.entry is not None and self.exit is None

    def is_closed(self) -> bool:
        return self.entry is not None and self.exit is not None

    def operate(self, index: int, price: Num = NaN, amount: Num = NaN) -> Trade | None:
        """Enter a new position or exit an opened one.

        Returns:
            The created trade, or None when the position is already closed.

        Raises:
            InvalidParameterError: If the exit index precedes the entry index.
        """
        if self.is_new():
            self.entry = Trade(index, self.starting_type, price, amount, self.transaction_cost_model)
            return self.entry
        if self.is_opened():
            if index < self.entry.index:
                raise InvalidParameterError(
                    f"Exit index {index} precedes entry index {self.entry.index}",
                    field_name="index",
                    invalid_value=index,
                )
            self.exit = Trade(
                index,
                self.starting_type.complement(),
                price,
                amount,
                self.transaction_cost_model,
            )
            return self.exit
        return None

    # -------------------------------------------------------------------------
    # Performance
    # -------------------------------------------------------------------------

    def _zero(self) -> Num:
        if self.entry is None:
            return NaN
        return self.entry.price_per_asset.num_of(0)

    def gross_profit(self, final_price: Num | None = None) -> Num:
        """Profit before costs.

        Args:
            final_price: Mark price for an opened position. Without it an
                opened position has zero gross profit.
        """
        if self.entry is None:
            return NaN
        if self.exit is not None:
            profit = self.exit.value.minus(self.entry.value)
        elif final_price is not None:
            profit = self.entry.amount.multiplied_by(final_price).minus(self.entry.value)
        else:
            return self._zero()
        # Profits of a long position are losses of a short one
        return profit.negate() if self.entry.is_sell() else profit

    def profit(self, final_index: int | None = None, final_price: Num | None = None) -> Num:
        """Profit net of transaction and holding costs.

        An opened position is marked at ``final_price`` and ``final_index``
        when both are given, otherwise its profit is zero.
        """
        if self.is_closed():
            return self.gross_profit().minus(self.position_cost())
        if self.is_opened() and final_index is not None and final_price is not None:
            return self.gross_profit(final_price).minus(self.position_cost(final_index))
        return self._zero()

    def gross_return(self, final_price: Num | None = None) -> Num:
        """Ratio of exit to entry price, mirrored around one for shorts."""
        if self.entry is None:
            return NaN
        if self.exit is not None:
            exit_price = self.exit.price_per_asset
        elif final_price is not None:
            exit_price = final_price
        else:
            return self._zero()
        return self.gross_return_between(self.entry.price_per_asset, exit_price)

    def gross_return_between(self, entry_price: Num, exit_price: Num) -> Num:
        ratio = exit_price.divided_by(entry_price)
        if self.starting_type is TradeType.BUY:
            return ratio
        one = entry_price.num_of(1)
        return one.plus(one).minus(ratio)

    def position_cost(self, final_index: int | None = None) -> Num:
        """Transaction plus holding cost."""
        transaction_cost = self.transaction_cost_model.calculate(self, final_index)
        return transaction_cost.plus(self.holding_cost(final_index))

    def holding_cost(self, final_index: int | None = None) -> Num:
        return self.holding_cost_model.calculate(self, final_index)

    def has_profit(self) -> bool:
        return self.profit().is_positive()

    def has_loss(self) -> bool:
        return self.profit().is_negative()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.entry == other.entry and self.exit == other.exit

    def __hash__(self) -> int:
        return hash((self.entry, self.exit))

    def __str__(self) -> str:
        return f"Position(entry={self.entry}, exit={self.exit})"

    def __repr__(self) -> str:
        return str(self)


class TradingRecord:
    """History of trades and positions of one strategy run."""

    def __init__(
        self,
        starting_type: TradeType = TradeType.BUY,
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
        name: str | None = None,
    ) -> None:
        self.name = name
        self.starting_type = TradeType(starting_type)
        self.transaction_cost_model = transaction_cost_model or ZeroCostModel()
        self.holding_cost_model = holding_cost_model or ZeroCostModel()
        self._positions: list[Position] = []
        self._trades: list[Trade] = []
        self._current = self._new_position()

    def _new_position(self) -> Position:
        return Position(self.starting_type, self.transaction_cost_model, self.holding_cost_model)

    @property
    def current_position(self) -> Position:
        return self._current

    @property
    def positions(self) -> list[Position]:
        """Closed positions, in order."""
        return list(self._positions)

    @property
    def trades(self) -> list[Trade]:
        return list(self._trades)

    @property
    def position_count(self) -> int:
        return len(self._positions)

    def is_closed(self) -> bool:
        return not self._current.is_opened()

    def operate(self, index: int, price: Num = NaN, amount: Num = NaN) -> Trade | None:
        """Enter or exit at ``index`` depending on the current position.

        Raises:
            InvalidParameterError: If ``index`` precedes the last trade.
        """
        if self._current.is_closed():
            self._current = self._new_position()
        last = self.last_trade
        if last is not None and index < last.index:
            raise InvalidParameterError(
                f"Trade index {index} precedes the last trade index {last.index}",
                field_name="index",
                invalid_value=index,
            )
        trade = self._current.operate(index, price, amount)
        if trade is not None:
            self._trades.append(trade)
        if self._current.is_closed():
            self._positions.append(self._current)
            self._current = self._new_position()
        return trade

    def enter(self, index: int, price: Num = NaN, amount: Num = NaN) -> bool:
        """Open a position. Returns False when one is already open."""
        if self._current.is_new():
            self.operate(index, price, amount)
            return True
        return False

    def exit(self, index: int, price: Num = NaN, amount: Num = NaN) -> bool:
        """Close the opened position. Returns False when none is open."""
        if self._current.is_opened():
            self.operate(index, price, amount)
            return True
        return False

    @property
    def last_trade(self) -> Trade | None:
        return self._trades[-1] if self._trades else None

    def last_trade_of(self, trade_type: TradeType) -> Trade | None:
        for trade in reversed(self._trades):
            if trade.type is trade_type:
                return trade
        return None

    @property
    def last_entry(self) -> Trade | None:
        return self.last_trade_of(self.starting_type)

    @property
    def last_exit(self) -> Trade | None:
        return self.last_trade_of(self.starting_type.complement())

    @property
    def last_position(self) -> Position | None:
        return self._positions[-1] if self._positions else None

    def __str__(self) -> str:
        label = self.name or type(self).__name__
        return f"{label}(positions={len(self._positions)}, open={self._current.is_opened()})"

"""
Cost models for backtested trades and positions.

Transaction cost models price each trade when it is created; holding cost
models price a position over the bars it is held. Models compare equal by
class and parameters so a position can check its trades share its model.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from quant_indicators.core.num import NaN, Num, NumberLike
from quant_indicators.core.utils import validate_positive

if TYPE_CHECKING:
    from quant_indicators.backtest.trading_record import Position


class CostModel(ABC):
    """Base class for cost models."""

    @abstractmethod
    def calculate_trade(self, price: Num, amount: Num) -> Num:
        """Cost of a single trade.

        Args:
            price: Execution price per asset.
            amount: Traded amount.

        Returns:
            Cost in the price's numeric type.
        """
        pass

    @abstractmethod
    def calculate(self, position: Position, final_index: int | None = None) -> Num:
        """Cost of a position.

        Args:
            position: Opened or closed position.
            final_index: Index used as the exit of an opened position.

        Returns:
            Cost in the position's numeric type.
        """
        pass

    def _key(self) -> tuple:
        return ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CostModel):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    def __repr__(self) -> str:
        params = ", ".join(str(p) for p in self._key())
        return f"{type(self).__name__}({params})"


def _position_zero(position: Position) -> Num:
    entry = position.entry
    if entry is None:
        return NaN
    return entry.price_per_asset.num_of(0)


class ZeroCostModel(CostModel):
    """No costs at all."""

    def calculate_trade(self, price: Num, amount: Num) -> Num:
        return price.num_of(0)

    def calculate(self, position: Position, final_index: int | None = None) -> Num:
        return _position_zero(position)


class LinearTransactionCostModel(CostModel):
    """Cost proportional to traded value: ``price * amount * fee``."""

    @validate_positive("fee", allow_zero=True)
    def __init__(self, fee: NumberLike) -> None:
        self.fee = fee

    def calculate_trade(self, price: Num, amount: Num) -> Num:
        return price.multiplied_by(amount).multiplied_by(price.num_of(self.fee))

    def calculate(self, position: Position, final_index: int | None = None) -> Num:
        """Sum of the costs of the position's existing trades.

        An opened position is charged for its entry only.
        """
        total = _position_zero(position)
        for trade in (position.entry, position.exit):
            if trade is not None:
                total = total.plus(trade.cost)
        return total

    def _key(self) -> tuple:
        return (self.fee,)


class FixedTransactionCostModel(CostModel):
    """Flat fee per trade."""

    @validate_positive("fee", allow_zero=True)
    def __init__(self, fee: NumberLike) -> None:
        self.fee = fee

    def calculate_trade(self, price: Num, amount: Num) -> Num:
        return price.num_of(self.fee)

    def calculate(self, position: Position, final_index: int | None = None) -> Num:
        zero = _position_zero(position)
        if position.entry is None:
            return zero
        trades = 2 if position.is_closed() else 1
        return zero.num_of(self.fee).multiplied_by(trades)

    def _key(self) -> tuple:
        return (self.fee,)


class LinearBorrowingCostModel(CostModel):
    """Borrowing cost of short positions: ``entry value * fee * periods held``.

    Long positions borrow nothing. The holding period runs from the entry
    index to the exit index, or to ``final_index`` while the position is open.
    """

    @validate_positive("fee_per_period", allow_zero=True)
    def __init__(self, fee_per_period: NumberLike) -> None:
        self.fee_per_period = fee_per_period

    def calculate_trade(self, price: Num, amount: Num) -> Num:
        return price.num_of(0)

    def calculate(self, position: Position, final_index: int | None = None) -> Num:
        zero = _position_zero(position)
        entry = position.entry
        if entry is None or entry.is_buy():
            return zero
        if position.exit is not None:
            end_index = position.exit.index
        elif final_index is not None:
            end_index = final_index
        else:
            return zero
        periods = max(end_index - entry.index, 0)
        return entry.value.multiplied_by(zero.num_of(self.fee_per_period)).multiplied_by(periods)

    def _key(self) -> tuple:
        return (self.fee_per_period,)

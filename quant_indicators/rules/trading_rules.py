"""
Rules driven by the state of the trading record.

Stop rules compare a price indicator against the net entry price of the
opened position. Without a record or an opened position they are never
satisfied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quant_indicators.core.num import Num, NumberLike
from quant_indicators.core.utils import validate_positive
from quant_indicators.indicators.base import Indicator
from quant_indicators.rules.base import Rule

if TYPE_CHECKING:
    from quant_indicators.backtest.trading_record import TradingRecord


def stop_loss_price(entry_price: Num, loss_percentage: Num, is_buy: bool) -> Num:
    """Price at which a position has lost ``loss_percentage`` percent."""
    hundred = entry_price.num_of(100)
    if is_buy:
        factor = hundred.minus(loss_percentage)
    else:
        factor = hundred.plus(loss_percentage)
    return entry_price.multiplied_by(factor).divided_by(hundred)


def stop_gain_price(entry_price: Num, gain_percentage: Num, is_buy: bool) -> Num:
    """Price at which a position has gained ``gain_percentage`` percent."""
    hundred = entry_price.num_of(100)
    if is_buy:
        factor = hundred.plus(gain_percentage)
    else:
        factor = hundred.minus(gain_percentage)
    return entry_price.multiplied_by(factor).divided_by(hundred)


class StopLossRule(Rule):
    """Satisfied once the price moved ``loss_percentage`` percent against the position."""

    @validate_positive("loss_percentage")
    def __init__(self, price_indicator: Indicator, loss_percentage: NumberLike) -> None:
        self.price_indicator = price_indicator
        self.loss_percentage = price_indicator.num_of(loss_percentage)

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = False
        if trading_record is not None and trading_record.current_position.is_opened():
            entry = trading_record.current_position.entry
            stop_price = stop_loss_price(entry.net_price, self.loss_percentage, entry.is_buy())
            price = self.price_indicator.get_value(index)
            if entry.is_buy():
                satisfied = price.is_less_than_or_equal(stop_price)
            else:
                satisfied = price.is_greater_than_or_equal(stop_price)
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"{self.name}({self.price_indicator}, {self.loss_percentage}%)"


class StopGainRule(Rule):
    """Satisfied once the price moved ``gain_percentage`` percent in favour of the position."""

    @validate_positive("gain_percentage")
    def __init__(self, price_indicator: Indicator, gain_percentage: NumberLike) -> None:
        self.price_indicator = price_indicator
        self.gain_percentage = price_indicator.num_of(gain_percentage)

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = False
        if trading_record is not None and trading_record.current_position.is_opened():
            entry = trading_record.current_position.entry
            stop_price = stop_gain_price(entry.net_price, self.gain_percentage, entry.is_buy())
            price = self.price_indicator.get_value(index)
            if entry.is_buy():
                satisfied = price.is_greater_than_or_equal(stop_price)
            else:
                satisfied = price.is_less_than_or_equal(stop_price)
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"{self.name}({self.price_indicator}, {self.gain_percentage}%)"

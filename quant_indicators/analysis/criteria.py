"""
Analysis criteria for positions and trading records.

Each criterion computes one figure for a single position or for a whole
trading record, and knows whether a higher or a lower figure is better.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from quant_indicators.analysis.cash_flow import CashFlow
from quant_indicators.backtest.trading_record import Position, TradeType, TradingRecord
from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.core.num import Num
from quant_indicators.core.series import BarSeries
from quant_indicators.monitoring.logger import log_analysis

if TYPE_CHECKING:
    from quant_indicators.backtest.manager import BarSeriesManager
    from quant_indicators.backtest.strategy import Strategy


class AnalysisCriterion(ABC):
    """Base class for analysis criteria."""

    @abstractmethod
    def calculate(self, series: BarSeries, position: Position) -> Num:
        """Criterion value for a single position."""
        pass

    @abstractmethod
    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        """Criterion value for a whole trading record."""
        pass

    def better_than(self, value1: Num, value2: Num) -> bool:
        """True if ``value1`` is better than ``value2``. Higher is better by default."""
        return value1.is_greater_than(value2)

    def choose_best(
        self,
        manager: BarSeriesManager,
        strategies: Sequence[Strategy],
        trade_type: TradeType = TradeType.BUY,
    ) -> Strategy:
        """Run every strategy and return the one with the best value.

        Ties keep the earlier strategy.

        Raises:
            InvalidParameterError: If ``strategies`` is empty.
        """
        if not strategies:
            raise InvalidParameterError("No strategies to choose from", field_name="strategies")
        best: Strategy | None = None
        best_value: Num | None = None
        for strategy in strategies:
            record = manager.run(strategy, trade_type)
            value = self.calculate_record(manager.series, record)
            log_analysis(f"{self} of {strategy.name}: {value}", level="DEBUG", strategy=strategy.name)
            if best_value is None or self.better_than(value, best_value):
                best = strategy
                best_value = value
        log_analysis(f"Best strategy by {self}: {best.name} ({best_value})", strategy=best.name)
        return best

    def __str__(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return str(self)


# =============================================================================
# Return and profit
# =============================================================================


class GrossReturnCriterion(AnalysisCriterion):
    """Product of position gross returns. An opened position counts as one."""

    def calculate(self, series: BarSeries, position: Position) -> Num:
        if position.is_closed():
            return position.gross_return()
        return series.num_factory.one()

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        total = series.num_factory.one()
        for position in record.positions:
            total = total.multiplied_by(self.calculate(series, position))
        return total


class ProfitLossCriterion(AnalysisCriterion):
    """Sum of net profits. An opened position counts as zero."""

    def calculate(self, series: BarSeries, position: Position) -> Num:
        if position.is_closed():
            return position.profit()
        return series.num_factory.zero()

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        total = series.num_factory.zero()
        for position in record.positions:
            total = total.plus(self.calculate(series, position))
        return total


# =============================================================================
# Position counts
# =============================================================================


class NumberOfPositionsCriterion(AnalysisCriterion):
    """Number of closed positions. Fewer is better."""

    def calculate(self, series: BarSeries, position: Position) -> Num:
        return series.num_factory.one()

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        return series.num_of(record.position_count)

    def better_than(self, value1: Num, value2: Num) -> bool:
        return value1.is_less_than(value2)


class WinningPositionsRatioCriterion(AnalysisCriterion):
    """Share of closed positions with a positive net profit."""

    def calculate(self, series: BarSeries, position: Position) -> Num:
        factory = series.num_factory
        return factory.one() if position.is_closed() and position.has_profit() else factory.zero()

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        positions = record.positions
        if not positions:
            return series.num_factory.zero()
        winning = sum(1 for position in positions if position.has_profit())
        return series.num_of(winning).divided_by(series.num_of(len(positions)))


# =============================================================================
# Drawdown
# =============================================================================


def maximum_drawdown(cash_flow: CashFlow, series: BarSeries) -> Num:
    """Largest relative fall from a running peak of the cash flow."""
    factory = series.num_factory
    drawdown = factory.zero()
    peak: Num | None = None
    for value in cash_flow:
        if peak is None or value.is_greater_than(peak):
            peak = value
        current = peak.minus(value).divided_by(peak)
        if current.is_greater_than(drawdown):
            drawdown = current
    return drawdown


class MaximumDrawdownCriterion(AnalysisCriterion):
    """Maximum drawdown of the cash flow. Lower is better."""

    def calculate(self, series: BarSeries, position: Position) -> Num:
        if position.entry is None:
            return series.num_factory.zero()
        return maximum_drawdown(CashFlow(series, position), series)

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        return maximum_drawdown(CashFlow(series, record), series)

    def better_than(self, value1: Num, value2: Num) -> bool:
        return value1.is_less_than(value2)


class ReturnOverMaxDrawdownCriterion(AnalysisCriterion):
    """Net return divided by maximum drawdown.

    Without a drawdown the net return itself is reported. An opened
    position scores zero.
    """

    def __init__(self) -> None:
        self.max_drawdown = MaximumDrawdownCriterion()

    def calculate(self, series: BarSeries, position: Position) -> Num:
        if not position.is_closed():
            return series.num_factory.zero()
        cash_flow = CashFlow(series, position)
        net_return = cash_flow.get_value(position.exit.index).minus(series.num_factory.one())
        return self._ratio(net_return, maximum_drawdown(cash_flow, series))

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        if series.is_empty():
            return series.num_factory.zero()
        cash_flow = CashFlow(series, record)
        net_return = cash_flow.get_value(series.end_index).minus(series.num_factory.one())
        return self._ratio(net_return, maximum_drawdown(cash_flow, series))

    @staticmethod
    def _ratio(net_return: Num, drawdown: Num) -> Num:
        if drawdown.is_zero():
            return net_return
        return net_return.divided_by(drawdown)


# =============================================================================
# Benchmarks
# =============================================================================


class EnterAndHoldCriterion(AnalysisCriterion):
    """Applies a criterion to a single buy-and-hold position.

    For a record the position spans the whole series; for a position it
    spans the position's entry and exit indices.
    """

    def __init__(self, criterion: AnalysisCriterion, trade_type: TradeType = TradeType.BUY, amount: int = 1) -> None:
        self.criterion = criterion
        self.trade_type = TradeType(trade_type)
        self.amount = amount

    def _hold(self, series: BarSeries, entry_index: int, exit_index: int) -> Position:
        position = Position(self.trade_type)
        amount = series.num_of(self.amount)
        position.operate(entry_index, series.get_bar(entry_index).close, amount)
        position.operate(exit_index, series.get_bar(exit_index).close, amount)
        return position

    def calculate(self, series: BarSeries, position: Position) -> Num:
        if not position.is_closed():
            return self.criterion.calculate(series, position)
        hold = self._hold(series, position.entry.index, position.exit.index)
        return self.criterion.calculate(series, hold)

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        if series.is_empty():
            return series.num_factory.one()
        hold = self._hold(series, series.begin_index, series.end_index)
        return self.criterion.calculate(series, hold)

    def better_than(self, value1: Num, value2: Num) -> bool:
        return self.criterion.better_than(value1, value2)

    def __str__(self) -> str:
        return f"EnterAndHold({self.criterion})"


class VersusEnterAndHoldCriterion(AnalysisCriterion):
    """Criterion value relative to the same criterion for enter-and-hold.

    NaN when the enter-and-hold value is zero.
    """

    def __init__(self, criterion: AnalysisCriterion) -> None:
        self.criterion = criterion
        self.enter_and_hold = EnterAndHoldCriterion(criterion)

    def calculate(self, series: BarSeries, position: Position) -> Num:
        return self.criterion.calculate(series, position).divided_by(
            self.enter_and_hold.calculate(series, position)
        )

    def calculate_record(self, series: BarSeries, record: TradingRecord) -> Num:
        if series.is_empty():
            return series.num_factory.one()
        return self.criterion.calculate_record(series, record).divided_by(
            self.enter_and_hold.calculate_record(series, record)
        )

    def __str__(self) -> str:
        return f"VersusEnterAndHold({self.criterion})"

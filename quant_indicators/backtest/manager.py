"""
Backtest runner.

``BarSeriesManager`` walks a bar series, asks the strategy whether to
operate at each index and lets an execution model turn signals into trades
on the trading record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from quant_indicators.backtest.cost import CostModel, ZeroCostModel
from quant_indicators.backtest.strategy import Strategy
from quant_indicators.backtest.trading_record import TradeType, TradingRecord
from quant_indicators.core.exceptions import InvalidParameterError
from quant_indicators.core.num import NumberLike
from quant_indicators.core.series import BarSeries
from quant_indicators.core.utils import timer
from quant_indicators.monitoring.logger import LogCategory, get_logger, log_backtest

logger = get_logger(__name__, LogCategory.BACKTEST)


# =============================================================================
# Execution models
# =============================================================================


class TradeExecutionModel(ABC):
    """Turns a strategy signal at an index into a trade."""

    @abstractmethod
    def execute(self, index: int, trading_record: TradingRecord, series: BarSeries, amount: NumberLike) -> None:
        """Operate the trading record for a signal raised at ``index``."""
        pass


class TradeOnCurrentCloseModel(TradeExecutionModel):
    """Fill at the close price of the signal bar."""

    def execute(self, index: int, trading_record: TradingRecord, series: BarSeries, amount: NumberLike) -> None:
        price = series.get_bar(index).close
        trading_record.operate(index, price, series.num_of(amount))


class TradeOnNextOpenModel(TradeExecutionModel):
    """Fill at the open price of the bar after the signal.

    A signal on the last bar of the series is dropped.
    """

    def execute(self, index: int, trading_record: TradingRecord, series: BarSeries, amount: NumberLike) -> None:
        fill_index = index + 1
        if fill_index > series.end_index:
            logger.debug(f"Signal at {index} dropped: no next bar to fill on")
            return
        price = series.get_bar(fill_index).open
        trading_record.operate(fill_index, price, series.num_of(amount))


# =============================================================================
# Manager
# =============================================================================


class BarSeriesManager:
    """Runs strategies over one bar series."""

    def __init__(
        self,
        series: BarSeries,
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
        execution_model: TradeExecutionModel | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            series: Bar series to trade on.
            transaction_cost_model: Cost of each trade. Defaults to no cost.
            holding_cost_model: Cost of holding positions. Defaults to no cost.
            execution_model: Fill model. Defaults to the signal bar's close.
        """
        self.series = series
        self.transaction_cost_model = transaction_cost_model or ZeroCostModel()
        self.holding_cost_model = holding_cost_model or ZeroCostModel()
        self.execution_model = execution_model or TradeOnCurrentCloseModel()

    def run(
        self,
        strategy: Strategy,
        trade_type: TradeType = TradeType.BUY,
        amount: NumberLike = 1,
        start: int | None = None,
        end: int | None = None,
    ) -> TradingRecord:
        """Run a strategy over ``[start, end]``.

        A position still open at ``end`` may be closed by an exit signal on
        a later bar of the series.

        Args:
            strategy: Strategy to run.
            trade_type: Type of the entry trades.
            amount: Amount traded per trade.
            start: First index. Defaults to the series begin index.
            end: Last index. Defaults to the series end index.

        Returns:
            The trading record of the run.

        Raises:
            InvalidParameterError: If ``start`` is after ``end``.
        """
        series = self.series
        run_start = series.begin_index if start is None else max(start, series.begin_index)
        run_end = series.end_index if end is None else min(end, series.end_index)
        if run_start > run_end and not series.is_empty():
            raise InvalidParameterError(
                f"Run start {run_start} is after run end {run_end}",
                field_name="start",
                invalid_value=start,
            )

        record = TradingRecord(
            trade_type,
            self.transaction_cost_model,
            self.holding_cost_model,
            name=strategy.name,
        )
        log_backtest(
            f"Running {strategy} on [{run_start}, {run_end}] starting with {TradeType(trade_type).value}",
            series=series.name,
            level="DEBUG",
        )

        with timer(f"Backtest of {strategy.name}") as timing:
            for index in range(run_start, run_end + 1):
                if strategy.should_operate(index, record):
                    self.execution_model.execute(index, record, series, amount)

            if not record.is_closed() and run_end < series.end_index:
                for index in range(run_end + 1, series.end_index + 1):
                    if strategy.should_operate(index, record):
                        self.execution_model.execute(index, record, series, amount)
                        break

        log_backtest(
            f"{strategy.name}: {record.position_count} positions, "
            f"open={not record.is_closed()} in {timing['elapsed']:.4f}s",
            series=series.name,
        )
        return record

"""
Backtesting module.

Provides cost models, trades, positions and trading records, the
strategy abstraction and the bar series manager that runs strategies.
"""

from .cost import (
    CostModel,
    FixedTransactionCostModel,
    LinearBorrowingCostModel,
    LinearTransactionCostModel,
    ZeroCostModel,
)
from .manager import (
    BarSeriesManager,
    TradeExecutionModel,
    TradeOnCurrentCloseModel,
    TradeOnNextOpenModel,
)
from .strategy import Strategy
from .trading_record import Position, Trade, TradeType, TradingRecord

__all__ = [
    "BarSeriesManager",
    "CostModel",
    "FixedTransactionCostModel",
    "LinearBorrowingCostModel",
    "LinearTransactionCostModel",
    "Position",
    "Strategy",
    "Trade",
    "TradeExecutionModel",
    "TradeOnCurrentCloseModel",
    "TradeOnNextOpenModel",
    "TradeType",
    "TradingRecord",
    "ZeroCostModel",
]

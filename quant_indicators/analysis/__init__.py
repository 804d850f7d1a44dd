"""
Performance analysis of backtest results.
"""

from .cash_flow import CashFlow
from .criteria import (
    AnalysisCriterion,
    EnterAndHoldCriterion,
    GrossReturnCriterion,
    MaximumDrawdownCriterion,
    NumberOfPositionsCriterion,
    ProfitLossCriterion,
    ReturnOverMaxDrawdownCriterion,
    VersusEnterAndHoldCriterion,
    WinningPositionsRatioCriterion,
    maximum_drawdown,
)

__all__ = [
    "AnalysisCriterion",
    "CashFlow",
    "EnterAndHoldCriterion",
    "GrossReturnCriterion",
    "MaximumDrawdownCriterion",
    "NumberOfPositionsCriterion",
    "ProfitLossCriterion",
    "ReturnOverMaxDrawdownCriterion",
    "VersusEnterAndHoldCriterion",
    "WinningPositionsRatioCriterion",
    "maximum_drawdown",
]

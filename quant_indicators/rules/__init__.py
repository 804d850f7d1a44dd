"""
Trading rules.

Boolean conditions over indicators and the trading record, combinable with
``&``, ``|``, ``^`` and ``~``.
"""

from .base import AndRule, BooleanRule, FixedRule, NotRule, OrRule, Rule, XorRule
from .indicator_rules import (
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
    IsEqualRule,
    OverIndicatorRule,
    UnderIndicatorRule,
)
from .trading_rules import StopGainRule, StopLossRule, stop_gain_price, stop_loss_price

__all__ = [
    "AndRule",
    "BooleanRule",
    "CrossedDownIndicatorRule",
    "CrossedUpIndicatorRule",
    "FixedRule",
    "IsEqualRule",
    "NotRule",
    "OrRule",
    "OverIndicatorRule",
    "Rule",
    "StopGainRule",
    "StopLossRule",
    "UnderIndicatorRule",
    "XorRule",
    "stop_gain_price",
    "stop_loss_price",
]

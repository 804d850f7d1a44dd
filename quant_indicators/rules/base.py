"""
Trading rule contract and boolean combinators.

A rule answers, for one series index and an optional trading record,
whether a condition holds. Rules compose with ``and_``, ``or_``, ``xor``
and ``negation`` or the ``&``, ``|``, ``^`` and ``~`` operators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from quant_indicators.core.utils import require_integer
from quant_indicators.monitoring.logger import TRACE, LogCategory, get_logger, trace_rule

if TYPE_CHECKING:
    from quant_indicators.backtest.trading_record import TradingRecord

logger = get_logger(__name__, LogCategory.RULE)


class Rule(ABC):
    """Boolean condition evaluated per index."""

    @abstractmethod
    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        """Return True if the rule holds at ``index``."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def trace_is_satisfied(self, index: int, satisfied: bool) -> None:
        if logger.isEnabledFor(TRACE):
            trace_rule(str(self), index, satisfied)

    def and_(self, rule: Rule) -> Rule:
        return AndRule(self, rule)

    def or_(self, rule: Rule) -> Rule:
        return OrRule(self, rule)

    def xor(self, rule: Rule) -> Rule:
        return XorRule(self, rule)

    def negation(self) -> Rule:
        return NotRule(self)

    def __and__(self, rule: Rule) -> Rule:
        return self.and_(rule)

    def __or__(self, rule: Rule) -> Rule:
        return self.or_(rule)

    def __xor__(self, rule: Rule) -> Rule:
        return self.xor(rule)

    def __invert__(self) -> Rule:
        return self.negation()

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return str(self)


class AndRule(Rule):
    """Satisfied when both rules are. The second rule is skipped when the first fails."""

    def __init__(self, rule1: Rule, rule2: Rule) -> None:
        self.rule1 = rule1
        self.rule2 = rule2

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = self.rule1.is_satisfied(index, trading_record) and self.rule2.is_satisfied(
            index, trading_record
        )
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"({self.rule1} AND {self.rule2})"


class OrRule(Rule):
    """Satisfied when either rule is."""

    def __init__(self, rule1: Rule, rule2: Rule) -> None:
        self.rule1 = rule1
        self.rule2 = rule2

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = self.rule1.is_satisfied(index, trading_record) or self.rule2.is_satisfied(
            index, trading_record
        )
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"({self.rule1} OR {self.rule2})"


class XorRule(Rule):
    """Satisfied when exactly one rule is."""

    def __init__(self, rule1: Rule, rule2: Rule) -> None:
        self.rule1 = rule1
        self.rule2 = rule2

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = self.rule1.is_satisfied(index, trading_record) ^ self.rule2.is_satisfied(
            index, trading_record
        )
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"({self.rule1} XOR {self.rule2})"


class NotRule(Rule):
    """Inverts a rule."""

    def __init__(self, rule: Rule) -> None:
        self.rule = rule

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = not self.rule.is_satisfied(index, trading_record)
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"NOT {self.rule}"


class BooleanRule(Rule):
    """Always the same answer."""

    def __init__(self, satisfied: bool) -> None:
        self.satisfied = bool(satisfied)

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        self.trace_is_satisfied(index, self.satisfied)
        return self.satisfied

    def __str__(self) -> str:
        return f"{self.name}({self.satisfied})"


BooleanRule.TRUE = BooleanRule(True)  # type: ignore[attr-defined]
BooleanRule.FALSE = BooleanRule(False)  # type: ignore[attr-defined]


class FixedRule(Rule):
    """Satisfied only at the given indices."""

    def __init__(self, *indices: int) -> None:
        self.indices = frozenset(require_integer("index", i) for i in indices)

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        satisfied = index in self.indices
        self.trace_is_satisfied(index, satisfied)
        return satisfied

    def __str__(self) -> str:
        return f"{self.name}({sorted(self.indices)})"

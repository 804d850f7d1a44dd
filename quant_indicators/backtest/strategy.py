"""
Trading strategy: an entry rule and an exit rule.
"""

from __future__ import annotations

from quant_indicators.backtest.trading_record import TradingRecord
from quant_indicators.core.utils import require_integer, validate_positive
from quant_indicators.monitoring.logger import LogCategory, get_logger
from quant_indicators.rules.base import Rule

logger = get_logger(__name__, LogCategory.BACKTEST)


class Strategy:
    """Pairs an entry rule with an exit rule.

    No entry is signalled during the first ``unstable_bars`` indices, where
    the underlying indicators are still warming up.
    """

    @validate_positive("unstable_bars", allow_zero=True)
    def __init__(
        self,
        entry_rule: Rule,
        exit_rule: Rule,
        unstable_bars: int = 0,
        name: str | None = None,
    ) -> None:
        self.entry_rule = entry_rule
        self.exit_rule = exit_rule
        self.unstable_bars = require_integer("unstable_bars", unstable_bars)
        self.name = name or type(self).__name__

    def is_unstable_at(self, index: int) -> bool:
        return index < self.unstable_bars

    def should_enter(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        enter = not self.is_unstable_at(index) and self.entry_rule.is_satisfied(index, trading_record)
        if enter:
            logger.trace(f"{self.name}: enter signal at {index}")
        return enter

    def should_exit(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        exit_ = not self.is_unstable_at(index) and self.exit_rule.is_satisfied(index, trading_record)
        if exit_:
            logger.trace(f"{self.name}: exit signal at {index}")
        return exit_

    def should_operate(self, index: int, trading_record: TradingRecord) -> bool:
        """Enter when flat, exit when a position is open."""
        position = trading_record.current_position
        if position.is_new():
            return self.should_enter(index, trading_record)
        if position.is_opened():
            return self.should_exit(index, trading_record)
        return False

    def and_(self, other: Strategy) -> Strategy:
        """Strategy requiring both entry rules and both exit rules."""
        return Strategy(
            self.entry_rule.and_(other.entry_rule),
            self.exit_rule.and_(other.exit_rule),
            max(self.unstable_bars, other.unstable_bars),
            name=f"{self.name} and {other.name}",
        )

    def or_(self, other: Strategy) -> Strategy:
        """Strategy satisfied by either entry rule or either exit rule."""
        return Strategy(
            self.entry_rule.or_(other.entry_rule),
            self.exit_rule.or_(other.exit_rule),
            max(self.unstable_bars, other.unstable_bars),
            name=f"{self.name} or {other.name}",
        )

    def opposite(self) -> Strategy:
        """Strategy with entry and exit rules swapped."""
        return Strategy(self.exit_rule, self.entry_rule, self.unstable_bars, name=f"opposite of {self.name}")

    def __str__(self) -> str:
        return f"{self.name}(entry={self.entry_rule}, exit={self.exit_rule})"

"""
Equity curve of a trading record.

The cash flow starts at one on the series begin index. Over each position
it follows the close price relative to the net entry price, with the
holding cost spread evenly over the bars held. Outside positions it stays
flat. Short positions mirror the ratio around one.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np

from quant_indicators.backtest.trading_record import Position, TradingRecord
from quant_indicators.core.exceptions import IndexOutOfRangeError
from quant_indicators.core.num import Num
from quant_indicators.core.series import BarSeries


class CashFlow:
    """Per-index equity ratio of a position or a trading record."""

    def __init__(
        self,
        series: BarSeries,
        source: Position | TradingRecord,
        final_index: int | None = None,
    ) -> None:
        """Build the cash flow.

        Args:
            series: Series the trades were made on.
            source: A single position or a whole trading record.
            final_index: Last index to value opened positions at. Defaults
                to the series end index.
        """
        self.series = series
        self._values: list[Num] = [series.num_factory.one()] if not series.is_empty() else []
        final_index = series.end_index if final_index is None else min(final_index, series.end_index)

        if isinstance(source, TradingRecord):
            positions = source.positions
            if source.current_position.is_opened():
                positions.append(source.current_position)
        else:
            positions = [source]

        for position in positions:
            if position.entry is not None and position.entry.index <= final_index:
                self._add_position(position, final_index)
        self._fill_to(final_index)

    def _offset(self, index: int) -> int:
        return index - self.series.begin_index

    def _fill_to(self, index: int) -> None:
        last = self._values[-1] if self._values else None
        while last is not None and len(self._values) <= self._offset(index):
            self._values.append(last)

    def _add_position(self, position: Position, final_index: int) -> None:
        entry = position.entry
        is_long = entry.is_buy()
        end_index = position.exit.index if position.exit is not None else final_index
        end_index = min(end_index, final_index)
        entry_index = max(entry.index, self.series.begin_index)
        self._fill_to(entry_index)

        periods = max(end_index - entry_index, 1)
        average_cost = position.holding_cost(end_index).divided_by(periods)
        entry_value = self._values[self._offset(entry_index)]
        net_entry_price = entry.net_price

        for index in range(entry_index + 1, end_index + 1):
            price = self._with_cost(self.series.get_bar(index).close, average_cost, is_long)
            value = entry_value.multiplied_by(self._ratio(is_long, net_entry_price, price))
            offset = self._offset(index)
            if offset < len(self._values):
                self._values[offset] = value
            else:
                self._values.append(value)

        if position.exit is not None and position.exit.index == end_index:
            exit_price = self._with_cost(position.exit.net_price, average_cost, is_long)
            self._values[self._offset(end_index)] = entry_value.multiplied_by(
                self._ratio(is_long, net_entry_price, exit_price)
            )

    @staticmethod
    def _with_cost(price: Num, cost: Num, is_long: bool) -> Num:
        return price.minus(cost) if is_long else price.plus(cost)

    @staticmethod
    def _ratio(is_long: bool, entry_price: Num, exit_price: Num) -> Num:
        ratio = exit_price.divided_by(entry_price)
        if is_long:
            return ratio
        two = entry_price.num_of(2)
        return two.minus(ratio)

    def get_value(self, index: int) -> Num:
        """Equity ratio at absolute ``index``.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside the cash flow.
        """
        offset = self._offset(index)
        if offset < 0 or offset >= len(self._values):
            raise IndexOutOfRangeError(
                f"Index {index} is outside the cash flow",
                index=index,
                begin_index=self.series.begin_index,
                end_index=self.series.begin_index + len(self._values) - 1,
            )
        return self._values[offset]

    @property
    def size(self) -> int:
        return len(self._values)

    @property
    def values(self) -> list[Num]:
        return list(self._values)

    def to_numpy(self) -> np.ndarray:
        return np.array([float(v) for v in self._values], dtype=np.float64)

    def __getitem__(self, index: int) -> Num:
        return self.get_value(index)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Num]:
        return iter(self._values)

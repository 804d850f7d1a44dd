"""
Bar model for OHLCV records.

A ``Bar`` is an immutable record for one time period. Price and volume
fields are ``Num`` values of the owning series' representation, ``NaN``
where the data is missing.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quant_indicators.core.num import NaN, Num


class Bar(BaseModel):
    """OHLCV bar with an explicit time period.

    ``begin_time`` is derived as ``end_time - time_period``, so the
    ``begin_time < end_time`` invariant holds whenever ``time_period`` is
    strictly positive.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    time_period: timedelta = Field(..., description="Duration of the bar")
    end_time: datetime = Field(..., description="End of the bar period")
    open: Num = Field(default=NaN, description="Open price")
    high: Num = Field(default=NaN, description="High price")
    low: Num = Field(default=NaN, description="Low price")
    close: Num = Field(default=NaN, description="Close price")
    volume: Num = Field(default=NaN, description="Traded volume")
    amount: Num = Field(default=NaN, description="Traded amount (price * volume)")
    trades: int = Field(default=0, ge=0, description="Number of trades")

    @field_validator("time_period")
    @classmethod
    def validate_time_period(cls, v: timedelta) -> timedelta:
        """Time period must be strictly positive."""
        if v <= timedelta(0):
            raise ValueError(f"Bar time period must be positive, got {v}")
        return v

    @field_validator("open", "high", "low", "close", "volume", "amount", mode="before")
    @classmethod
    def missing_as_nan(cls, v: Any) -> Any:
        """Missing prices are represented by NaN."""
        return NaN if v is None else v

    @property
    def begin_time(self) -> datetime:
        return self.end_time - self.time_period

    def in_period(self, timestamp: datetime) -> bool:
        """Check if ``timestamp`` falls in ``[begin_time, end_time)``."""
        return self.begin_time <= timestamp < self.end_time

    def is_bullish(self) -> bool:
        """True if the bar closed above its open."""
        return self.open.is_less_than(self.close)

    def is_bearish(self) -> bool:
        """True if the bar closed below its open."""
        return self.open.is_greater_than(self.close)

    def with_price(self, price: Num) -> Bar:
        """Return a copy updated with a new last price.

        Sets the open if it is missing, moves the close, and widens the
        high/low range.
        """
        return self.model_copy(update=self._price_update(price))

    def with_trade(self, trade_volume: Num, trade_price: Num) -> Bar:
        """Return a copy updated with one executed trade.

        Volume and amount accumulate; prices are updated as in
        :meth:`with_price`.
        """
        update = self._price_update(trade_price)
        trade_amount = trade_price.multiplied_by(trade_volume)
        update["volume"] = trade_volume if self.volume.is_nan() else self.volume.plus(trade_volume)
        update["amount"] = trade_amount if self.amount.is_nan() else self.amount.plus(trade_amount)
        update["trades"] = self.trades + 1
        return self.model_copy(update=update)

    def _price_update(self, price: Num) -> dict[str, Num]:
        return {
            "open": price if self.open.is_nan() else self.open,
            "close": price,
            "high": price if self.high.is_nan() else self.high.max(price),
            "low": price if self.low.is_nan() else self.low.min(price),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with serializable types."""
        return {
            "begin_time": self.begin_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "time_period_seconds": self.time_period.total_seconds(),
            "open": str(self.open),
            "high": str(self.high),
            "low": str(self.low),
            "close": str(self.close),
            "volume": str(self.volume),
            "amount": str(self.amount),
            "trades": self.trades,
        }

    def __str__(self) -> str:
        return (
            f"Bar(end={self.end_time.isoformat()}, open={self.open}, high={self.high}, "
            f"low={self.low}, close={self.close}, volume={self.volume})"
        )

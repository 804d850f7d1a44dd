"""
Numeric value types for indicator computations.

Every price, volume and indicator output is a ``Num``. A ``Num`` is bound to
one representation family, created by a ``NumFactory``:

- ``DecimalNum``: fixed precision ``decimal.Decimal`` arithmetic (exact
  equality, HALF_UP rounding to the factory's precision).
- ``DoubleNum``: native ``float`` arithmetic (exact float equality, no
  epsilon tolerance).
- ``NaN``: singleton sentinel for undefined or missing data.

Arithmetic fails closed: a NaN operand, a zero divisor or an out-of-domain
operand (``sqrt`` of a negative, ``log`` of a non-positive) yields ``NaN``
instead of raising. Every ordered comparison involving ``NaN`` is ``False``
and ``NaN`` never equals anything, itself included; use ``is_nan()``.
"""

from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from decimal import (
    ROUND_CEILING,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DecimalException,
)
from typing import Any, Callable, Union

from quant_indicators.core.exceptions import InvalidConfigError, NumTypeMismatchError

DEFAULT_DECIMAL_PRECISION = 32

NumberLike = Union["Num", int, float, str, Decimal]


class Num(ABC):
    """Abstract numeric value with NaN-propagating arithmetic."""

    __slots__ = ()

    # -------------------------------------------------------------------------
    # Representation
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def delegate(self) -> Any:
        """The wrapped native value."""

    @property
    @abstractmethod
    def factory(self) -> NumFactory | None:
        """Factory that created this value."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def num_of(self, value: NumberLike) -> Num:
        """Create a value of the same representation family as ``self``."""
        return self.factory.num_of(value)

    def is_nan(self) -> bool:
        return False

    # -------------------------------------------------------------------------
    # Hooks for subclasses
    # -------------------------------------------------------------------------

    @abstractmethod
    def _wrap(self, raw: Any) -> Num:
        """Wrap a raw native result into a value of this family."""

    @abstractmethod
    def _apply(self, op: str, left: Any, right: Any) -> Any:
        """Apply a raw binary operation on native values."""

    @abstractmethod
    def _apply_unary(self, op: str, value: Any) -> Any:
        """Apply a raw unary operation on a native value."""

    def _operand(self, other: NumberLike) -> Num:
        if isinstance(other, Num):
            if other.is_nan():
                return other
            if type(other) is not type(self):
                raise NumTypeMismatchError(
                    f"Cannot combine {self.name} with {other.name}",
                    left_type=self.name,
                    right_type=other.name,
                )
            return other
        return self.factory.num_of(other)

    def _binary(self, op: str, other: NumberLike) -> Num:
        operand = self._operand(other)
        if operand.is_nan():
            return NaN
        return self._wrap(self._apply(op, self.delegate, operand.delegate))

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def plus(self, augend: NumberLike) -> Num:
        return self._binary("add", augend)

    def minus(self, subtrahend: NumberLike) -> Num:
        return self._binary("sub", subtrahend)

    def multiplied_by(self, multiplicand: NumberLike) -> Num:
        return self._binary("mul", multiplicand)

    def divided_by(self, divisor: NumberLike) -> Num:
        """Divide by ``divisor``; a zero or NaN divisor yields ``NaN``."""
        operand = self._operand(divisor)
        if operand.is_nan() or operand.is_zero():
            return NaN
        return self._wrap(self._apply("div", self.delegate, operand.delegate))

    def remainder(self, divisor: NumberLike) -> Num:
        operand = self._operand(divisor)
        if operand.is_nan() or operand.is_zero():
            return NaN
        return self._wrap(self._apply("mod", self.delegate, operand.delegate))

    def pow(self, exponent: NumberLike) -> Num:
        return self._binary("pow", exponent)

    def min(self, other: NumberLike) -> Num:
        """Smaller of ``self`` and ``other``; ``self`` on ties."""
        operand = self._operand(other)
        if operand.is_nan():
            return NaN
        return self if self.delegate <= operand.delegate else operand

    def max(self, other: NumberLike) -> Num:
        """Greater of ``self`` and ``other``; ``self`` on ties."""
        operand = self._operand(other)
        if operand.is_nan():
            return NaN
        return self if self.delegate >= operand.delegate else operand

    def sqrt(self) -> Num:
        if self.delegate < 0:
            return NaN
        return self._wrap(self._apply_unary("sqrt", self.delegate))

    def log(self) -> Num:
        if self.delegate <= 0:
            return NaN
        return self._wrap(self._apply_unary("log", self.delegate))

    def exp(self) -> Num:
        return self._wrap(self._apply_unary("exp", self.delegate))

    def abs(self) -> Num:
        return self._wrap(self._apply_unary("abs", self.delegate))

    def negate(self) -> Num:
        return self._wrap(self._apply_unary("neg", self.delegate))

    def floor(self) -> Num:
        return self._wrap(self._apply_unary("floor", self.delegate))

    def ceil(self) -> Num:
        return self._wrap(self._apply_unary("ceil", self.delegate))

    # -------------------------------------------------------------------------
    # Predicates and comparisons
    # -------------------------------------------------------------------------

    def is_zero(self) -> bool:
        return self.delegate == 0

    def is_positive(self) -> bool:
        return self.delegate > 0

    def is_positive_or_zero(self) -> bool:
        return self.delegate >= 0

    def is_negative(self) -> bool:
        return self.delegate < 0

    def is_negative_or_zero(self) -> bool:
        return self.delegate <= 0

    def _compare(self, other: NumberLike | None, predicate: Callable[[Any, Any], bool]) -> bool:
        if other is None:
            return False
        operand = self._operand(other)
        if operand.is_nan():
            return False
        return predicate(self.delegate, operand.delegate)

    def is_equal(self, other: NumberLike | None) -> bool:
        return self._compare(other, lambda a, b: a == b)

    def is_greater_than(self, other: NumberLike | None) -> bool:
        return self._compare(other, lambda a, b: a > b)

    def is_greater_than_or_equal(self, other: NumberLike | None) -> bool:
        return self._compare(other, lambda a, b: a >= b)

    def is_less_than(self, other: NumberLike | None) -> bool:
        return self._compare(other, lambda a, b: a < b)

    def is_less_than_or_equal(self, other: NumberLike | None) -> bool:
        return self._compare(other, lambda a, b: a <= b)

    # -------------------------------------------------------------------------
    # Python protocol
    # -------------------------------------------------------------------------

    def __add__(self, other: NumberLike) -> Num:
        return self.plus(other)

    def __radd__(self, other: NumberLike) -> Num:
        return self.num_of(other).plus(self)

    def __sub__(self, other: NumberLike) -> Num:
        return self.minus(other)

    def __rsub__(self, other: NumberLike) -> Num:
        return self.num_of(other).minus(self)

    def __mul__(self, other: NumberLike) -> Num:
        return self.multiplied_by(other)

    def __rmul__(self, other: NumberLike) -> Num:
        return self.num_of(other).multiplied_by(self)

    def __truediv__(self, other: NumberLike) -> Num:
        return self.divided_by(other)

    def __rtruediv__(self, other: NumberLike) -> Num:
        return self.num_of(other).divided_by(self)

    def __mod__(self, other: NumberLike) -> Num:
        return self.remainder(other)

    def __pow__(self, other: NumberLike) -> Num:
        return self.pow(other)

    def __neg__(self) -> Num:
        return self.negate()

    def __abs__(self) -> Num:
        return self.abs()

    def __lt__(self, other: NumberLike) -> bool:
        return self.is_less_than(other)

    def __le__(self, other: NumberLike) -> bool:
        return self.is_less_than_or_equal(other)

    def __gt__(self, other: NumberLike) -> bool:
        return self.is_greater_than(other)

    def __ge__(self, other: NumberLike) -> bool:
        return self.is_greater_than_or_equal(other)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Num):
            if other.is_nan() or type(other) is not type(self):
                return False
            return self.delegate == other.delegate
        if isinstance(other, (int, float, Decimal)) and not isinstance(other, bool):
            operand = self._operand(other)
            return not operand.is_nan() and self.delegate == operand.delegate
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.delegate)

    def __float__(self) -> float:
        return float(self.delegate)

    def __int__(self) -> int:
        return int(self.delegate)

    def __str__(self) -> str:
        return str(self.delegate)

    def __repr__(self) -> str:
        return f"{self.name}({self.delegate})"


class DecimalNum(Num):
    """Fixed precision decimal value."""

    __slots__ = ("_delegate", "_factory")

    def __init__(self, value: Decimal, factory: DecimalNumFactory) -> None:
        self._delegate = value
        self._factory = factory

    @property
    def delegate(self) -> Decimal:
        return self._delegate

    @property
    def factory(self) -> DecimalNumFactory:
        return self._factory

    @property
    def precision(self) -> int:
        return self._factory.precision

    def _wrap(self, raw: Any) -> Num:
        if raw is None or raw.is_nan() or raw.is_infinite():
            return NaN
        return DecimalNum(raw, self._factory)

    def _apply(self, op: str, left: Decimal, right: Decimal) -> Decimal | None:
        ctx = self._factory.context
        try:
            if op == "add":
                return ctx.add(left, right)
            if op == "sub":
                return ctx.subtract(left, right)
            if op == "mul":
                return ctx.multiply(left, right)
            if op == "div":
                return ctx.divide(left, right)
            if op == "mod":
                return ctx.remainder(left, right)
            if op == "pow":
                return ctx.power(left, right)
        except DecimalException:
            return None
        raise ValueError(f"Unknown operation: {op}")

    def _apply_unary(self, op: str, value: Decimal) -> Decimal | None:
        ctx = self._factory.context
        try:
            if op == "sqrt":
                return ctx.sqrt(value)
            if op == "log":
                return ctx.ln(value)
            if op == "exp":
                return ctx.exp(value)
            if op == "abs":
                return value.copy_abs()
            if op == "neg":
                return value.copy_negate()
            if op == "floor":
                return value.to_integral_value(rounding=ROUND_FLOOR)
            if op == "ceil":
                return value.to_integral_value(rounding=ROUND_CEILING)
        except DecimalException:
            return None
        raise ValueError(f"Unknown operation: {op}")


class DoubleNum(Num):
    """Native float value."""

    __slots__ = ("_delegate", "_factory")

    def __init__(self, value: float, factory: DoubleNumFactory) -> None:
        self._delegate = value
        self._factory = factory

    @property
    def delegate(self) -> float:
        return self._delegate

    @property
    def factory(self) -> DoubleNumFactory:
        return self._factory

    def _wrap(self, raw: Any) -> Num:
        if raw is None or math.isnan(raw) or math.isinf(raw):
            return NaN
        return DoubleNum(float(raw), self._factory)

    def _apply(self, op: str, left: float, right: float) -> float | None:
        try:
            if op == "add":
                return left + right
            if op == "sub":
                return left - right
            if op == "mul":
                return left * right
            if op == "div":
                return left / right
            if op == "mod":
                return math.fmod(left, right)
            if op == "pow":
                return math.pow(left, right)
        except (ValueError, OverflowError, ZeroDivisionError):
            return None
        raise ValueError(f"Unknown operation: {op}")

    def _apply_unary(self, op: str, value: float) -> float | None:
        try:
            if op == "sqrt":
                return math.sqrt(value)
            if op == "log":
                return math.log(value)
            if op == "exp":
                return math.exp(value)
            if op == "abs":
                return abs(value)
            if op == "neg":
                return -value
            if op == "floor":
                return float(math.floor(value))
            if op == "ceil":
                return float(math.ceil(value))
        except (ValueError, OverflowError):
            return None
        raise ValueError(f"Unknown operation: {op}")


class _NaNNum(Num):
    """The not-a-number sentinel. Use the module level ``NaN`` instance."""

    __slots__ = ()
    _instance: _NaNNum | None = None

    def __new__(cls) -> _NaNNum:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def delegate(self) -> float:
        return math.nan

    @property
    def factory(self) -> None:
        return None

    @property
    def name(self) -> str:
        return "NaN"

    def num_of(self, value: NumberLike) -> Num:
        return self

    def is_nan(self) -> bool:
        return True

    def _wrap(self, raw: Any) -> Num:
        return self

    def _apply(self, op: str, left: Any, right: Any) -> Any:
        return None

    def _apply_unary(self, op: str, value: Any) -> Any:
        return None

    def _binary(self, op: str, other: NumberLike) -> Num:
        return self

    def divided_by(self, divisor: NumberLike) -> Num:
        return self

    def remainder(self, divisor: NumberLike) -> Num:
        return self

    def min(self, other: NumberLike) -> Num:
        return self

    def max(self, other: NumberLike) -> Num:
        return self

    def sqrt(self) -> Num:
        return self

    def log(self) -> Num:
        return self

    def exp(self) -> Num:
        return self

    def abs(self) -> Num:
        return self

    def negate(self) -> Num:
        return self

    def floor(self) -> Num:
        return self

    def ceil(self) -> Num:
        return self

    def is_zero(self) -> bool:
        return False

    def is_positive(self) -> bool:
        return False

    def is_positive_or_zero(self) -> bool:
        return False

    def is_negative(self) -> bool:
        return False

    def is_negative_or_zero(self) -> bool:
        return False

    def _compare(self, other: NumberLike | None, predicate: Callable[[Any, Any], bool]) -> bool:
        return False

    def __radd__(self, other: NumberLike) -> Num:
        return self

    def __rsub__(self, other: NumberLike) -> Num:
        return self

    def __rmul__(self, other: NumberLike) -> Num:
        return self

    def __rtruediv__(self, other: NumberLike) -> Num:
        return self

    def __eq__(self, other: object) -> bool:
        return False

    def __hash__(self) -> int:
        return hash("NaN")

    def __str__(self) -> str:
        return "NaN"

    def __repr__(self) -> str:
        return "NaN"

    def __reduce__(self) -> str:
        return "NaN"


NaN: Num = _NaNNum()


def is_invalid(value: Num | None) -> bool:
    """Return True if ``value`` is missing or NaN."""
    return value is None or value.is_nan()


# =============================================================================
# Factories
# =============================================================================


class NumFactory(ABC):
    """Creates values of one numeric representation family."""

    def __init__(self) -> None:
        self._minus_one = self.num_of(-1)
        self._zero = self.num_of(0)
        self._one = self.num_of(1)
        self._two = self.num_of(2)
        self._three = self.num_of(3)
        self._hundred = self.num_of(100)
        self._thousand = self.num_of(1000)

    @property
    @abstractmethod
    def name(self) -> str:
        """Representation name (``decimal`` or ``double``)."""

    @abstractmethod
    def _from_number(self, value: int | float | str | Decimal) -> Num:
        """Create a value from a native number."""

    def num_of(self, value: NumberLike | None) -> Num:
        """Convert ``value`` into this representation.

        ``None``, float NaN and the strings "nan"/"NaN" map to ``NaN``.
        """
        if value is None:
            return NaN
        if isinstance(value, Num):
            if value.is_nan():
                return NaN
            if self.produces(value):
                return value
            value = value.delegate
            if isinstance(value, float):
                value = repr(value)
        if isinstance(value, numbers.Integral) and not isinstance(value, int):
            value = int(value)
        elif isinstance(value, numbers.Real) and not isinstance(value, (int, float, Decimal)):
            value = float(value)
        if isinstance(value, float) and math.isnan(value):
            return NaN
        if isinstance(value, str) and value.strip().lower() == "nan":
            return NaN
        if isinstance(value, Decimal) and value.is_nan():
            return NaN
        return self._from_number(value)

    def nan(self) -> Num:
        return NaN

    def minus_one(self) -> Num:
        return self._minus_one

    def zero(self) -> Num:
        return self._zero

    def one(self) -> Num:
        return self._one

    def two(self) -> Num:
        return self._two

    def three(self) -> Num:
        return self._three

    def hundred(self) -> Num:
        return self._hundred

    def thousand(self) -> Num:
        return self._thousand

    @abstractmethod
    def produces(self, num: Num) -> bool:
        """Return True if ``num`` belongs to this factory's family."""


class DecimalNumFactory(NumFactory):
    """Factory for ``DecimalNum`` values with a fixed significant-digit precision."""

    def __init__(self, precision: int = DEFAULT_DECIMAL_PRECISION) -> None:
        if precision <= 0:
            raise InvalidConfigError(
                "Decimal precision must be strictly positive",
                config_key="precision",
                value=precision,
                expected="> 0",
            )
        self.precision = precision
        self.context = Context(prec=precision, rounding=ROUND_HALF_UP)
        super().__init__()

    @property
    def name(self) -> str:
        return "decimal"

    def _from_number(self, value: int | float | str | Decimal) -> Num:
        if isinstance(value, float):
            # Convert through the shortest repr to avoid binary FP artifacts
            value = Decimal(repr(float(value)))
        value = self.context.create_decimal(value)
        if value.is_infinite():
            return NaN
        return DecimalNum(value, self)

    def produces(self, num: Num) -> bool:
        return isinstance(num, DecimalNum) and num.factory.precision == self.precision

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DecimalNumFactory) and other.precision == self.precision

    def __hash__(self) -> int:
        return hash(("decimal", self.precision))

    def __repr__(self) -> str:
        return f"DecimalNumFactory(precision={self.precision})"


class DoubleNumFactory(NumFactory):
    """Factory for ``DoubleNum`` values."""

    @property
    def name(self) -> str:
        return "double"

    def _from_number(self, value: int | float | str | Decimal) -> Num:
        result = float(value)
        if math.isinf(result):
            return NaN
        return DoubleNum(result, self)

    def produces(self, num: Num) -> bool:
        return isinstance(num, DoubleNum)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DoubleNumFactory)

    def __hash__(self) -> int:
        return hash("double")

    def __repr__(self) -> str:
        return "DoubleNumFactory()"


def create_num_factory(num_type: str, precision: int = DEFAULT_DECIMAL_PRECISION) -> NumFactory:
    """Create a factory from its configuration name.

    Args:
        num_type: ``decimal`` or ``double``.
        precision: Significant digits for decimal values.

    Returns:
        The matching NumFactory.

    Raises:
        InvalidConfigError: If ``num_type`` is unknown.
    """
    normalized = num_type.strip().lower()
    if normalized == "decimal":
        return DecimalNumFactory(precision)
    if normalized == "double":
        return DoubleNumFactory()
    raise InvalidConfigError(
        f"Unknown numeric representation: {num_type}",
        config_key="num_type",
        value=num_type,
        expected="decimal or double",
    )

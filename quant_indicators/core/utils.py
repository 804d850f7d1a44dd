"""
Shared utilities for the indicator library.

Provides common functions for:
- Constructor parameter validation
- Time handling for bar timestamps
- Performance timing
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator, TypeVar

from quant_indicators.core.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Time Utilities
# =============================================================================


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC. Naive datetimes are assumed to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_timedelta(value: timedelta | int | float) -> timedelta:
    """Coerce a bar duration given in seconds into a timedelta."""
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


# =============================================================================
# Performance Timing
# =============================================================================


@contextmanager
def timer(name: str = "Operation") -> Generator[dict[str, float], None, None]:
    """Context manager for timing operations.

    Args:
        name: Name of the operation being timed.

    Yields:
        Dictionary that will contain 'elapsed' time after context exits.
    """
    result: dict[str, float] = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        elapsed = time.perf_counter() - start
        result["elapsed"] = elapsed
        logger.debug(f"{name} took {elapsed:.4f}s")


# =============================================================================
# Validation Utilities
# =============================================================================


def validate_positive(
    *param_names: str,
    allow_zero: bool = False,
) -> Callable[[F], F]:
    """Decorator to validate that constructor parameters are positive numbers.

    Used on indicator, rule and cost model constructors so that bad
    configuration fails when the object is built, not when it is first
    evaluated.

    Args:
        *param_names: Names of parameters that must be positive.
        allow_zero: If True, zero values are allowed.

    Returns:
        Decorator function.

    Example:
        @validate_positive("bar_count")
        def __init__(self, indicator, bar_count: int):
            ...
    """
    def decorator(func: F) -> F:
        sig = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = sig.bind_partial(*args, **kwargs)
            bound.apply_defaults()
            params = dict(bound.arguments)

            errors: list[str] = []
            for param_name in param_names:
                if param_name not in params:
                    continue
                value = params[param_name]
                if value is None:
                    continue

                try:
                    num_value = float(value)
                except (ValueError, TypeError):
                    errors.append(f"{param_name} must be a number, got {type(value).__name__}")
                    continue

                if num_value != num_value:
                    errors.append(f"{param_name} must be a number, got NaN")
                elif allow_zero and num_value < 0:
                    errors.append(f"{param_name} must be non-negative, got {value}")
                elif not allow_zero and num_value <= 0:
                    errors.append(f"{param_name} must be positive, got {value}")

            if errors:
                raise InvalidParameterError(
                    f"Invalid parameters for {func.__qualname__}: {'; '.join(errors)}",
                    field_name=", ".join(param_names),
                )

            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def require_integer(name: str, value: Any) -> int:
    """Ensure ``value`` is an int (bools excluded) and return it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(
            f"{name} must be an integer, got {type(value).__name__}",
            field_name=name,
            invalid_value=value,
        )
    return value

"""
Core layer for the indicator library.

Contains the numeric value types, the bar and bar series models, the
exception hierarchy and shared utilities used across all modules.
"""

from .bar import Bar
from .exceptions import (
    IndicatorSystemError,
    ValidationError,
    InvalidParameterError,
    DataError,
    DataValidationError,
    IndexOutOfRangeError,
    EvictedIndexError,
    NumTypeMismatchError,
    ConfigurationError,
    InvalidConfigError,
    ConfigParseError,
)
from .num import (
    NaN,
    Num,
    DecimalNum,
    DoubleNum,
    NumFactory,
    DecimalNumFactory,
    DoubleNumFactory,
    create_num_factory,
    is_invalid,
)
from .series import (
    BarSeries,
    BarSeriesBuilder,
    bar_series_from_arrays,
    bar_series_from_pandas,
    bar_series_from_polars,
    make_bar,
)

__all__ = [
    # Bars and series
    "Bar",
    "BarSeries",
    "BarSeriesBuilder",
    "bar_series_from_arrays",
    "bar_series_from_pandas",
    "bar_series_from_polars",
    "make_bar",
    # Numeric values
    "NaN",
    "Num",
    "DecimalNum",
    "DoubleNum",
    "NumFactory",
    "DecimalNumFactory",
    "DoubleNumFactory",
    "create_num_factory",
    "is_invalid",
    # Exceptions
    "IndicatorSystemError",
    "ValidationError",
    "InvalidParameterError",
    "DataError",
    "DataValidationError",
    "IndexOutOfRangeError",
    "EvictedIndexError",
    "NumTypeMismatchError",
    "ConfigurationError",
    "InvalidConfigError",
    "ConfigParseError",
]

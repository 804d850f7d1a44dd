"""
Custom exception hierarchy for the indicator library.

Provides a structured exception hierarchy for different error categories:
- Validation errors (bad constructor parameters, bad parallel inputs)
- Data errors (bar invariants, index bounds, evicted history)
- Numeric errors (mixing numeric representations)
- Configuration errors (invalid, unparsable)

Undefined arithmetic (division by zero, missing prices) is never an
exception here: it is carried through the computation as the NaN sentinel.
"""

from __future__ import annotations

from typing import Any


class IndicatorSystemError(Exception):
    """Base exception for all indicator library errors.

    All custom exceptions in the library inherit from this class.
    Provides structured error information including error code, message,
    and additional context.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Optional error code for programmatic handling.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error string."""
        if self.details:
            return f"[{self.error_code}] {self.message} - Details: {self.details}"
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(IndicatorSystemError):
    """Raised when parameter or input validation fails.

    Examples:
        - Parallel price and timestamp arrays of different lengths
        - Unknown numeric representation name
    """

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        invalid_value: Any = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the validation error.

        Args:
            message: Human-readable error message.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            **kwargs: Additional context passed to parent.
        """
        details = kwargs.pop("details", {})
        if field_name:
            details["field_name"] = field_name
        if invalid_value is not None:
            details["invalid_value"] = str(invalid_value)
        super().__init__(message, details=details, **kwargs)
        self.field_name = field_name
        self.invalid_value = invalid_value


class InvalidParameterError(ValidationError, ValueError):
    """Raised when an indicator, rule or model is configured with a bad parameter.

    Examples:
        - Non-positive bar count for a moving average
        - Negative fee for a cost model
    """

    pass


# =============================================================================
# Data Errors
# =============================================================================


class DataError(IndicatorSystemError):
    """Base exception for bar and series related errors."""

    pass


class DataValidationError(DataError, ValueError):
    """Raised when bar data violates a series invariant.

    Examples:
        - Bar end time not after the series' last end time
        - Non-positive bar time period
        - Maximum bar count that is not strictly positive
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.value = value


class IndexOutOfRangeError(DataError, IndexError):
    """Raised when an index outside the series' valid window is queried."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        begin_index: int | None = None,
        end_index: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if index is not None:
            details["index"] = index
        if begin_index is not None:
            details["begin_index"] = begin_index
        if end_index is not None:
            details["end_index"] = end_index
        super().__init__(message, details=details, **kwargs)
        self.index = index
        self.begin_index = begin_index
        self.end_index = end_index


class EvictedIndexError(IndexOutOfRangeError):
    """Raised when an index existed but was evicted by the maximum bar count."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        removed_bars_count: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if removed_bars_count is not None:
            details["removed_bars_count"] = removed_bars_count
        super().__init__(message, index=index, details=details, **kwargs)
        self.removed_bars_count = removed_bars_count


# =============================================================================
# Numeric Errors
# =============================================================================


class NumTypeMismatchError(IndicatorSystemError, TypeError):
    """Raised when two numeric representations are mixed in one operation."""

    def __init__(
        self,
        message: str,
        left_type: str | None = None,
        right_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if left_type:
            details["left_type"] = left_type
        if right_type:
            details["right_type"] = right_type
        super().__init__(message, details=details, **kwargs)
        self.left_type = left_type
        self.right_type = right_type


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(IndicatorSystemError):
    """Base exception for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration is invalid.

    Examples:
        - Unknown numeric representation
        - Non-positive decimal precision
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        value: Any = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if value is not None:
            details["value"] = str(value)
        if expected:
            details["expected"] = expected
        super().__init__(message, details=details, **kwargs)
        self.config_key = config_key
        self.value = value
        self.expected = expected


class ConfigParseError(ConfigurationError):
    """Raised when configuration parsing fails.

    Examples:
        - Invalid YAML syntax
        - Top-level YAML document that is not a mapping
    """

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        line_number: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_file:
            details["config_file"] = config_file
        if line_number is not None:
            details["line_number"] = line_number
        super().__init__(message, details=details, **kwargs)
        self.config_file = config_file
        self.line_number = line_number

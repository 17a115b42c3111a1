"""Custom exceptions for the Snang case core.

The scoring and redaction functions are total over their input domain and
never raise for in-domain values. These exceptions belong to the edges of the
package: request validation, configuration loading, and misuse of helper
APIs such as asking for zero determinism iterations.

All exceptions inherit from SnangError, making it easy to catch every
package-specific error in one place.

Example:
    try:
        response, record = evaluate_readiness_request(payload)
    except ValidationError as e:
        return {"error": e.message, "details": e.details}, 400
    except SnangError as e:
        logger.error("readiness_failed", error=str(e))
"""

from typing import Any, Optional


class SnangError(Exception):
    """Base exception for all Snang core errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize SnangError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                retry or corrected input. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(SnangError):
    """Error raised when caller-supplied data fails validation.

    Raised by the request layer (malformed readiness payloads) and by
    helper APIs given out-of-range arguments. The scorer itself never
    raises this; it degrades unknown categories instead.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (never salary figures or TAC codes).
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "income_range must be one of: 0-3000, 3001-4000, ...",
        ...     field="income_range",
        ...     value="lots",
        ... )
        ValidationError: income_range must be one of: 0-3000, 3001-4000, ...
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value (avoid including sensitive data).
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ConfigurationError(SnangError):
    """Error raised when configuration is invalid.

    Most notably raised when a permission matrix lists the same resource as
    both allowed and denied for one action while strict matrix checking is
    enabled.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Defaults to False since configuration errors require
                a corrected deployment.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "SnangError",
    "ValidationError",
    "ConfigurationError",
]

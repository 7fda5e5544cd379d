"""Custom exceptions for Keel Core.

The calculation path never raises on numeric input: missing values are
treated as zero and non-positive denominators fall back to zero. Exceptions
are reserved for the edges that validate structure, namely loading
configuration and parsing stored scenario documents. All of them inherit
from KeelError.

Example:
    try:
        overlay = overlay_from_config(stored["config"])
    except ScenarioConfigError as e:
        logger.warning("scenario_config_rejected", error=str(e), **e.details)
        overlay = ScenarioOverlay()
"""

from typing import Any, Optional


class KeelError(Exception):
    """Base exception for all Keel errors.

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
        """Initialize KeelError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the caller can recover, for example by
                correcting input. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ConfigurationError(KeelError):
    """Error raised when engine configuration is invalid.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid federal income rate",
        ...     config_key="federal_income_rate",
        ...     expected="Decimal between 0 and 1",
        ...     actual="1.5",
        ... )
        ConfigurationError: Invalid federal income rate
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


class ScenarioConfigError(KeelError):
    """Error raised when a stored scenario document cannot be parsed.

    Raised by :func:`keel_core.overlay.overlay_from_config` when the
    persisted configuration has the wrong shape or carries values that fail
    model validation.

    Attributes:
        section: The top-level config section being parsed
            (e.g. ``"contractors"``).
    """

    def __init__(
        self,
        message: str,
        *,
        section: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ScenarioConfigError.

        Args:
            message: Human-readable error description.
            section: Config section that failed to parse.
            details: Optional dictionary with additional context.
            recoverable: Defaults to True since the caller can fall back to
                an empty overlay or ask the user to fix the scenario.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.section = section

        if section:
            self.details["section"] = section


__all__ = [
    "KeelError",
    "ConfigurationError",
    "ScenarioConfigError",
]

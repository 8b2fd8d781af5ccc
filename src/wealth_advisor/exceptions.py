"""
Exception hierarchy for the Wealth Advisor engine.

This module defines all custom exceptions used throughout the analysis
pipelines and tools. Input problems, arithmetic hazards and pipeline
plumbing failures each get their own family so callers (the HTTP layer,
the CLI) can decide what to surface to the user.
"""

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ErrorSeverity(Enum):
    """Categorizes the severity of errors for handling decisions."""

    CRITICAL = "critical"
    """Pipeline should stop; this error prevents meaningful continuation"""

    WARNING = "warning"
    """Log but continue; we can proceed despite this issue"""

    INFO = "info"
    """Track but don't alarm; this is informational"""


@dataclass
class ProcessingError:
    """
    Structured error record for tracking failures while loading holdings.

    Used to collect every skipped row in a holdings import so the loader can
    report them without stopping (for WARNING/INFO severity).
    """

    file_name: str
    """Name of the file that caused the error"""

    error_type: str
    """Category of error (e.g., "ROW_PARSE_ERROR", "VALIDATION_ERROR")"""

    message: str
    """Human-readable error message"""

    severity: ErrorSeverity
    """How serious is this error? CRITICAL/WARNING/INFO"""

    traceback_str: Optional[str] = None
    """Full traceback for debugging (only for CRITICAL/WARNING)"""

    context: dict = field(default_factory=dict)
    """Additional context data (row number, symbol, etc.)"""

    @classmethod
    def from_exception(
        cls,
        file_name: str,
        error_type: str,
        exception: Exception,
        severity: ErrorSeverity,
        context: Optional[dict] = None,
    ) -> "ProcessingError":
        """
        Create ProcessingError from a caught exception.

        Args:
            file_name: Name of file being processed
            error_type: Custom error category
            exception: The exception that was caught
            severity: How to categorize this error
            context: Optional additional context data

        Returns:
            ProcessingError with traceback automatically extracted
        """
        tb_str = traceback.format_exc() if severity in (ErrorSeverity.CRITICAL, ErrorSeverity.WARNING) else None
        return cls(
            file_name=file_name,
            error_type=error_type,
            message=str(exception),
            severity=severity,
            traceback_str=tb_str,
            context=context or {},
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "file_name": self.file_name,
            "error_type": self.error_type,
            "message": self.message,
            "severity": self.severity.value,
            "traceback": self.traceback_str,
            "context": self.context,
        }


# ============================================================================
# BASE EXCEPTION CLASSES
# ============================================================================

class WealthAdvisorException(Exception):
    """
    Base exception for all Wealth Advisor errors.

    Inheriting from this allows catching all engine errors:
        try:
            ...
        except WealthAdvisorException as e:
            ...
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class DataProcessingError(WealthAdvisorException):
    """Base class for errors during holdings loading and computation."""
    pass


class ValidationError(WealthAdvisorException):
    """Base class for input validation failures."""
    pass


class ConfigurationError(WealthAdvisorException):
    """Base class for configuration/setup issues."""
    pass


class PipelineError(WealthAdvisorException):
    """Base class for pipeline execution errors."""
    pass


# ============================================================================
# INPUT EXCEPTIONS
# ============================================================================

class HoldingsReadError(DataProcessingError):
    """
    Raised when a user context or holdings file cannot be read at all.

    Example:
        raise HoldingsReadError("Unable to open holdings.xlsx: Permission denied")
    """
    pass


class InputValidationError(ValidationError):
    """
    Raised when a user context does not match the expected schema.

    This wraps the pydantic error text so callers do not depend on pydantic.

    Example:
        raise InputValidationError("portfolio.stocks.0.quantity: value is not a valid number")
    """
    pass


class ClassificationError(DataProcessingError):
    """
    Raised when a holding cannot be classified at all.

    Example:
        raise ClassificationError("Holding row 7 has neither symbol nor scheme name")
    """
    pass


# ============================================================================
# CALCULATION EXCEPTIONS
# ============================================================================

class CalculationError(DataProcessingError):
    """
    Raised when mathematical calculations fail unexpectedly.

    Example:
        raise CalculationError("Cannot compute returns without any investment")
    """
    pass


class DomainError(CalculationError):
    """
    Raised when an input is outside the domain of a calculation.

    Example:
        raise DomainError("Months remaining requires a target date")
    """
    pass


class InvalidPortfolioState(DomainError):
    """
    Raised when holdings exist but the portfolio value is zero or negative.

    Percentages of portfolio value are undefined in that state; raising keeps
    NaN and infinity out of every report.

    Example:
        raise InvalidPortfolioState("3 holdings present but total_current_value is 0")
    """
    pass


# ============================================================================
# CONFIGURATION & SETUP EXCEPTIONS
# ============================================================================

class EnvConfigError(ConfigurationError):
    """
    Raised when an environment variable holds an unusable value.

    Example:
        raise EnvConfigError("WEALTH_ADVISOR_LOG_LEVEL='LOUD' is not a logging level")
    """
    pass


# ============================================================================
# PIPELINE EXECUTION EXCEPTIONS
# ============================================================================

class OutputWriteError(PipelineError):
    """
    Raised when a JSON snapshot or Excel report cannot be written.

    Example:
        raise OutputWriteError("Cannot write recommendations_2026-10-18.xlsx: Permission denied")
    """
    pass


# ============================================================================
# UTILITY FUNCTIONS FOR ERROR HANDLING
# ============================================================================

def wrap_exception_as_processing_error(
    exception: Exception,
    file_name: str,
    error_type: str,
    severity: ErrorSeverity = ErrorSeverity.WARNING,
    context: Optional[dict] = None,
) -> ProcessingError:
    """
    Convert any exception to ProcessingError for unified logging.

    Args:
        exception: The exception to wrap
        file_name: Name of file being processed
        error_type: Custom categorization
        severity: How to treat this error (default: WARNING)
        context: Optional additional context data

    Returns:
        ProcessingError ready for logging
    """
    return ProcessingError.from_exception(
        file_name=file_name,
        error_type=error_type,
        exception=exception,
        severity=severity,
        context=context,
    )

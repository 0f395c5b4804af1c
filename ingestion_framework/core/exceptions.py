"""
Ingestion Exception Hierarchy.

This module defines the exception hierarchy for the ingestion framework,
providing clear categorization of errors and standardized error handling
across the preview and finalize paths.

Exception Severity Levels:
    - FATAL: Stop all processing immediately (bad configuration)
    - CRITICAL: No result can be produced for this input (structural errors)
    - RECOVERABLE: A result can be shown but not accepted (limit violations)
    - WARNING: Log and continue

Public pipeline entry points never let these escape: they are caught and
reported inside the result value so callers can always distinguish
"no dataset yet" from "dataset failed to build".
"""

from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: Input-level error, no result for this input
        RECOVERABLE: Result can be inspected but must not be accepted
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class IngestionError(Exception):
    """
    Base exception for all ingestion errors with enhanced context.

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (row indices, column names, etc.)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     rows = split_rows(text)
        ... except csv.Error as e:
        ...     raise IngestionError(
        ...         "Could not tokenize input",
        ...         severity=ErrorSeverity.CRITICAL,
        ...         original_exception=e
        ...     )
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize ingestion exception.

        Args:
            message: Human-readable error description
            severity: Error severity level (default: RECOVERABLE)
            details: Additional context dictionary
            original_exception: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging/reporting.

        Returns:
            Dictionary containing exception details suitable for JSON serialization
        """
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'details': self.details,
            'original_error': str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors (Fatal)
# ============================================================================

class ConfigError(IngestionError):
    """
    Configuration errors (fatal - stop all processing).

    Raised when:
    - Configuration file not found
    - Invalid YAML syntax
    - Required configuration fields missing or of the wrong type

    Attributes:
        field (Optional[str]): Specific config field that caused error
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'field': field} if field else {}
        )
        self.field = field


class YAMLSizeError(ConfigError):
    """YAML file too large (security protection)."""

    def __init__(self, message: str, file_size: Optional[int] = None, max_size: Optional[int] = None):
        super().__init__(message)
        self.details.update({
            'file_size': file_size,
            'max_size': max_size
        })


class ConfigValidationError(ConfigError):
    """
    Configuration value failed validation.

    Example:
        >>> raise ConfigValidationError(
        ...     "Unknown missing-value strategy: 'average'",
        ...     field="column_strategies.age",
        ...     expected="leave-as-is, drop-row, zero, mean, median, mode, constant",
        ...     actual="average"
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None
    ):
        super().__init__(message, field)
        self.details.update({
            'expected': expected,
            'actual': actual
        })


# ============================================================================
# Data Loading Errors (Critical)
# ============================================================================

class DataLoadError(IngestionError):
    """
    Raw input could not be read or tokenized.

    Attributes:
        source (str): File path or a label for in-memory text
        line_number (Optional[int]): Line number where error occurred
    """

    def __init__(
        self,
        message: str,
        source: str = "<text>",
        line_number: Optional[int] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={'source': source, 'line_number': line_number},
            original_exception=original_exception
        )
        self.source = source
        self.line_number = line_number


class RowSplitError(DataLoadError):
    """Delimited text could not be split into rows (malformed quoting, etc.)."""


# ============================================================================
# Structural Errors (Critical)
# ============================================================================

class StructuralError(IngestionError):
    """
    The table structure implied by the configuration is impossible.

    No partial result is produced: the message is surfaced verbatim.
    """

    def __init__(self, message: str, **details: Any):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details=details
        )


class EmptyInputError(StructuralError):
    """Input contained no rows at all."""

    def __init__(self, message: str = "No rows found"):
        super().__init__(message)


class OutOfRangeError(StructuralError):
    """
    skip_rows or header_row points past the end of the input.

    Example:
        >>> raise OutOfRangeError(
        ...     "header_row is out of range after skipping rows",
        ...     skip_rows=2, header_row=5, total_rows=4
        ... )
    """


class NoDataRowsError(StructuralError):
    """Header row resolved but no data rows follow it."""

    def __init__(self, message: str = "No data rows found after header"):
        super().__init__(message)


class ColumnNotFoundError(IngestionError):
    """
    A configured target or feature column does not exist in the header.

    Attributes:
        column (str): Missing column name
        available_columns (List[str]): Resolved header columns
    """

    def __init__(self, column: str, available_columns: List[str], role: str = "column"):
        super().__init__(
            f"{role.capitalize()} '{column}' not found in data. Available: {', '.join(available_columns)}",
            severity=ErrorSeverity.CRITICAL,
            details={
                'column': column,
                'role': role,
                'available_columns': list(available_columns)
            }
        )
        self.column = column
        self.available_columns = list(available_columns)


# ============================================================================
# Limit Errors (Recoverable)
# ============================================================================

class LimitExceededError(IngestionError):
    """
    Dataset exceeds one or more configured size limits.

    Preview still renders; finalization is refused until resolved.

    Attributes:
        violations (List[LimitViolation]): Every outstanding violation
    """

    def __init__(self, violations: List[Any]):
        messages = "; ".join(v.message for v in violations)
        super().__init__(
            f"Dataset exceeds configured limits: {messages}",
            severity=ErrorSeverity.RECOVERABLE,
            details={'violations': [v.to_dict() for v in violations]}
        )
        self.violations = list(violations)

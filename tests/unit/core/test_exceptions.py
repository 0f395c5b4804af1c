"""
Unit tests for the exception hierarchy.

Tests severity assignment, context details and serialization of the
ingestion exception classes.
"""

import pytest

from ingestion_framework.core.exceptions import (
    ColumnNotFoundError,
    ConfigError,
    ConfigValidationError,
    DataLoadError,
    EmptyInputError,
    ErrorSeverity,
    IngestionError,
    LimitExceededError,
    NoDataRowsError,
    OutOfRangeError,
    RowSplitError,
    StructuralError,
    YAMLSizeError,
)
from ingestion_framework.core.results import LimitViolation


@pytest.mark.unit
class TestErrorSeverity:
    """Test error severity enum."""

    def test_severity_values(self):
        """Test that all severity levels exist."""
        assert ErrorSeverity.FATAL.value == "fatal"
        assert ErrorSeverity.CRITICAL.value == "critical"
        assert ErrorSeverity.RECOVERABLE.value == "recoverable"
        assert ErrorSeverity.WARNING.value == "warning"


@pytest.mark.unit
class TestIngestionError:
    """Test base exception class."""

    def test_basic_exception(self):
        """Test basic exception creation."""
        exc = IngestionError("Test error")

        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.severity == ErrorSeverity.RECOVERABLE  # Default
        assert exc.details == {}
        assert exc.original_exception is None

    def test_exception_with_original(self):
        """Test exception wrapping another exception."""
        original = ValueError("Original error")
        exc = IngestionError("Wrapped error", original_exception=original)

        assert exc.original_exception is original
        assert exc.to_dict()['original_error'] == "Original error"

    def test_to_dict(self):
        """Test serialization to dictionary."""
        exc = IngestionError(
            "Test error",
            severity=ErrorSeverity.CRITICAL,
            details={'row': 3}
        )

        assert exc.to_dict() == {
            'type': 'IngestionError',
            'message': 'Test error',
            'severity': 'critical',
            'details': {'row': 3},
            'original_error': None,
        }


@pytest.mark.unit
class TestConfigErrors:
    """Test configuration error classes."""

    def test_config_error_is_fatal(self):
        exc = ConfigError("Bad config", field="skip_rows")

        assert exc.severity == ErrorSeverity.FATAL
        assert exc.field == "skip_rows"
        assert exc.details == {'field': 'skip_rows'}

    def test_yaml_size_error(self):
        exc = YAMLSizeError("Too large", file_size=2048, max_size=1024)

        assert isinstance(exc, ConfigError)
        assert exc.details['file_size'] == 2048
        assert exc.details['max_size'] == 1024

    def test_config_validation_error(self):
        exc = ConfigValidationError(
            "Unknown strategy",
            field="global_strategy",
            expected="mean, median",
            actual="average"
        )

        assert exc.details['field'] == "global_strategy"
        assert exc.details['expected'] == "mean, median"
        assert exc.details['actual'] == "average"


@pytest.mark.unit
class TestDataAndStructuralErrors:
    """Test loading and structural error classes."""

    def test_data_load_error(self):
        exc = DataLoadError("Cannot read", source="data.csv", line_number=7)

        assert exc.severity == ErrorSeverity.CRITICAL
        assert exc.source == "data.csv"
        assert exc.details == {'source': 'data.csv', 'line_number': 7}

    def test_row_split_error_is_data_load_error(self):
        assert issubclass(RowSplitError, DataLoadError)

    def test_structural_defaults(self):
        assert EmptyInputError().message == "No rows found"
        assert NoDataRowsError().message == "No data rows found after header"
        assert isinstance(EmptyInputError(), StructuralError)

    def test_out_of_range_details(self):
        exc = OutOfRangeError("header_row out of range", skip_rows=2, header_row=5, total_rows=4)

        assert exc.severity == ErrorSeverity.CRITICAL
        assert exc.details == {'skip_rows': 2, 'header_row': 5, 'total_rows': 4}

    def test_column_not_found(self):
        exc = ColumnNotFoundError("label", ["a", "b"], role="target")

        assert exc.column == "label"
        assert exc.available_columns == ["a", "b"]
        assert "Target 'label' not found" in exc.message
        assert exc.details['role'] == "target"


@pytest.mark.unit
class TestLimitExceededError:
    """Test limit violation aggregation."""

    def test_messages_joined(self):
        violations = [
            LimitViolation("max_rows", "Too many rows"),
            LimitViolation("max_columns", "Too many columns"),
        ]
        exc = LimitExceededError(violations)

        assert exc.severity == ErrorSeverity.RECOVERABLE
        assert exc.violations == violations
        assert "Too many rows; Too many columns" in exc.message
        assert exc.details['violations'][0] == {'limit': 'max_rows', 'message': 'Too many rows'}

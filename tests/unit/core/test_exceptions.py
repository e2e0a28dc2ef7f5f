"""
Unit tests for exception hierarchy.

Tests the datainspect exception classes and error handling mechanisms.
"""

import pytest
from datainspect.core.exceptions import (
    DataInspectException,
    ErrorSeverity,
    ConfigError,
    YAMLSizeError,
    ConfigValidationError,
    DataLoadError,
    DataFileNotFoundError,
    UnsupportedFormatError,
    StreamReadError,
    EngineUsageError,
    ReporterError
)


class TestErrorSeverity:
    """Test error severity enum."""

    def test_severity_values(self):
        """Test that all severity levels exist."""
        assert ErrorSeverity.FATAL.value == "fatal"
        assert ErrorSeverity.CRITICAL.value == "critical"
        assert ErrorSeverity.RECOVERABLE.value == "recoverable"
        assert ErrorSeverity.WARNING.value == "warning"


class TestDataInspectException:
    """Test base exception class."""

    def test_basic_exception(self):
        """Test basic exception creation."""
        exc = DataInspectException("Test error")

        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.severity == ErrorSeverity.RECOVERABLE  # Default
        assert exc.details == {}
        assert exc.original_exception is None

    def test_exception_serialization(self):
        """Test to_dict() serialization."""
        exc = DataInspectException(
            "Test error",
            severity=ErrorSeverity.CRITICAL,
            details={'column': 'salary'},
            original_exception=ValueError("Original")
        )

        result = exc.to_dict()

        assert result['type'] == 'DataInspectException'
        assert result['message'] == 'Test error'
        assert result['severity'] == 'critical'
        assert result['details']['column'] == 'salary'
        assert 'Original' in result['original_error']

    def test_exception_serialization_no_original(self):
        """Test serialization without original exception."""
        result = DataInspectException("Test").to_dict()

        assert result['original_error'] is None


class TestConfigErrors:
    """Test configuration error classes."""

    def test_config_error_is_fatal(self):
        """Test that ConfigError has FATAL severity."""
        exc = ConfigError("Config error", field="inspection")

        assert exc.severity == ErrorSeverity.FATAL
        assert exc.field == "inspection"
        assert exc.details['field'] == "inspection"

    def test_yaml_size_error(self):
        """Test YAML size error."""
        exc = YAMLSizeError("File too large", file_size=1500000, max_size=1048576)

        assert isinstance(exc, ConfigError)
        assert exc.severity == ErrorSeverity.FATAL
        assert exc.details['file_size'] == 1500000
        assert exc.details['max_size'] == 1048576

    def test_config_validation_error(self):
        """Test configuration validation error."""
        exc = ConfigValidationError(
            "Invalid threshold",
            field="thresholds.outlier_robust_z",
            expected="> 0",
            actual="-1"
        )

        assert exc.field == "thresholds.outlier_robust_z"
        assert exc.details['expected'] == "> 0"
        assert exc.details['actual'] == "-1"


class TestDataLoadErrors:
    """Test data loading error classes."""

    def test_data_load_error_is_critical(self):
        """Test that DataLoadError has CRITICAL severity."""
        exc = DataLoadError("Load error", file_path="/data/file.csv", line_number=3)

        assert exc.severity == ErrorSeverity.CRITICAL
        assert exc.file_path == "/data/file.csv"
        assert exc.details['line_number'] == 3

    def test_file_not_found_error(self):
        """Test file not found error."""
        exc = DataFileNotFoundError("data.csv")

        assert isinstance(exc, DataLoadError)
        assert exc.file_path == "data.csv"
        assert "File not found" in str(exc)

    def test_unsupported_format_error(self):
        """Test unsupported format error."""
        exc = UnsupportedFormatError("data.xml", format="xml", supported_formats=["csv", "json"])

        assert exc.details['format'] == "xml"
        assert "csv" in exc.details['supported_formats']
        assert "xml" in str(exc)

    def test_stream_read_error_carries_row_index(self):
        """Test StreamReadError records the failing row."""
        original = OSError("Input/output error")
        exc = StreamReadError("Read failed", file_path="big.csv", row_index=41, original_exception=original)

        assert isinstance(exc, DataLoadError)
        assert exc.severity == ErrorSeverity.CRITICAL
        assert exc.row_index == 41
        assert exc.details['row_index'] == 41
        assert exc.original_exception is original

    def test_stream_read_error_default_source(self):
        """Test StreamReadError without a file path."""
        exc = StreamReadError("Read failed")

        assert exc.file_path == "<stream>"
        assert exc.row_index is None


class TestUsageAndReporterErrors:
    """Test engine usage and reporter errors."""

    def test_engine_usage_error_is_fatal(self):
        """Test EngineUsageError severity and context."""
        exc = EngineUsageError("Cannot finalize", operation="finalize", state="finalized")

        assert exc.severity == ErrorSeverity.FATAL
        assert exc.operation == "finalize"
        assert exc.details['state'] == "finalized"

    def test_reporter_error(self):
        """Test ReporterError context."""
        exc = ReporterError("Write failed", reporter_type="json", output_path="out/report.json")

        assert exc.severity == ErrorSeverity.RECOVERABLE
        assert exc.reporter_type == "json"
        assert exc.details['output_path'] == "out/report.json"

    def test_all_inherit_from_base(self):
        """Test catching every error through the base class."""
        errors = [
            ConfigError("x"),
            DataLoadError("x", file_path="f"),
            StreamReadError("x"),
            EngineUsageError("x", operation="report", state="empty"),
            ReporterError("x", reporter_type="json"),
        ]
        for error in errors:
            with pytest.raises(DataInspectException):
                raise error

"""
datainspect Exception Hierarchy.

Quality problems in the *data* are never exceptions: they are reported as
findings. This module covers problems with the *input stream*, the
*configuration*, or the *use of the engine*.

Exception Severity Levels:
    - FATAL: Stop all processing immediately (bad config, engine misuse)
    - CRITICAL: Stop processing this file, no partial report
    - RECOVERABLE: Log error and continue
    - WARNING: Log warning and continue
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: File-level error, stop processing this file
        RECOVERABLE: Row-level error, continue processing
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class DataInspectException(Exception):
    """
    Base exception for all datainspect errors with enhanced context.

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (file path, row index, etc.)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     rows = list(reader)
        ... except OSError as e:
        ...     raise DataInspectException(
        ...         "Reading rows failed",
        ...         severity=ErrorSeverity.CRITICAL,
        ...         details={'file': 'customers.csv'},
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
        Initialize datainspect exception.

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

class ConfigError(DataInspectException):
    """
    Configuration file errors (fatal - stop all processing).

    Raised when:
    - Configuration file not found
    - Invalid YAML syntax
    - Invalid configuration structure

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
    """
    YAML file too large.

    Example:
        >>> raise YAMLSizeError(
        ...     "Config file exceeds 1MB limit",
        ...     file_size=1500000,
        ...     max_size=1048576
        ... )
    """

    def __init__(self, message: str, file_size: Optional[int] = None, max_size: Optional[int] = None):
        super().__init__(message)
        self.details.update({
            'file_size': file_size,
            'max_size': max_size
        })


class ConfigValidationError(ConfigError):
    """
    Configuration is valid YAML but has unknown keys or out-of-range values.

    Example:
        >>> raise ConfigValidationError(
        ...     "Invalid value for 'outlier_robust_z'",
        ...     field="thresholds.outlier_robust_z",
        ...     expected="number > 0",
        ...     actual="-1"
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

class DataLoadError(DataInspectException):
    """
    Data file loading errors (critical - stop processing this file).

    Raised when:
    - File format invalid or corrupted
    - File cannot be read (permissions, encoding issues)
    - File has no header row

    Attributes:
        file_path (str): Path to file that failed to load
        line_number (Optional[int]): Line number where error occurred
    """

    def __init__(
        self,
        message: str,
        file_path: str,
        line_number: Optional[int] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={'file_path': file_path, 'line_number': line_number},
            original_exception=original_exception
        )
        self.file_path = file_path
        self.line_number = line_number


class DataFileNotFoundError(DataLoadError):
    """Data file not found at specified path."""

    def __init__(self, file_path: str):
        super().__init__(f"File not found: {file_path}", file_path)


class UnsupportedFormatError(DataLoadError):
    """
    File format not supported.

    Example:
        >>> raise UnsupportedFormatError(
        ...     "customers.xml",
        ...     format="xml",
        ...     supported_formats=["csv", "json"]
        ... )
    """

    def __init__(self, file_path: str, format: str, supported_formats: list):
        super().__init__(
            f"Unsupported file format '{format}'. Supported: {', '.join(supported_formats)}",
            file_path
        )
        self.details.update({
            'format': format,
            'supported_formats': supported_formats
        })


class StreamReadError(DataLoadError):
    """
    The row source failed part-way through the pass.

    The engine aborts: no finalize, no partial report. ``row_index`` is the
    0-based index of the data row that could not be read (the header is not
    counted).

    Example:
        >>> raise StreamReadError(
        ...     "Read failed: [Errno 5] Input/output error",
        ...     file_path="customers.csv",
        ...     row_index=41
        ... )
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        row_index: Optional[int] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            file_path=file_path or "<stream>",
            line_number=None,
            original_exception=original_exception
        )
        self.row_index = row_index
        self.details['row_index'] = row_index


# ============================================================================
# Engine Usage Errors (Fatal)
# ============================================================================

class EngineUsageError(DataInspectException):
    """
    Programming error in how the inspection engine is driven.

    Raised when rows are fed after finalize, finalize is called twice, a
    report is requested twice, or incompatible engines are merged. Not
    user-recoverable.

    Attributes:
        operation (str): The operation that was attempted
        state (str): The engine state at the time
    """

    def __init__(self, message: str, operation: str, state: str):
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'operation': operation, 'state': state}
        )
        self.operation = operation
        self.state = state


# ============================================================================
# Reporter Errors
# ============================================================================

class ReporterError(DataInspectException):
    """
    Report generation errors (JSON file could not be written, etc.).

    Attributes:
        reporter_type (str): Reporter that failed ("json", "console")
        output_path (Optional[str]): Target path if any
    """

    def __init__(
        self,
        message: str,
        reporter_type: str,
        output_path: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={'reporter_type': reporter_type, 'output_path': output_path},
            original_exception=original_exception
        )
        self.reporter_type = reporter_type
        self.output_path = output_path

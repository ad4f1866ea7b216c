"""
Custom exception classes for the Chittoor project tracker.

This module defines the exception hierarchy used across the package, with
context information attached to every error so it can be logged or
serialized consistently.
"""

from typing import Optional, List, Dict, Any


class TrackerError(Exception):
    """Base exception class for all project tracker errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize the base tracker error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional context information about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'context': self.context
        }


class ValidationError(TrackerError):
    """Exception raised when project form values fail validation."""

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error message
            field_errors: Mapping of field name to the message shown for that field
        """
        context = {'field_errors': dict(field_errors or {})}
        super().__init__(message, error_code='VALIDATION_ERROR', context=context)
        self.field_errors = dict(field_errors or {})


class DataLoadError(TrackerError):
    """Exception raised for data loading errors."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 line_number: Optional[int] = None, original_error: Optional[Exception] = None):
        """
        Initialize data load error.

        Args:
            message: Human-readable error message
            file_path: Path to the file that caused the error
            line_number: Line number where the error occurred
            original_error: Original exception that caused this error
        """
        context = {
            'file_path': file_path,
            'line_number': line_number,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='DATA_LOAD_ERROR', context=context)
        self.file_path = file_path
        self.line_number = line_number
        self.original_error = original_error


class FileAccessError(TrackerError):
    """Exception raised for file access and I/O errors."""

    def __init__(self, message: str, file_path: str, operation: str,
                 original_error: Optional[Exception] = None):
        """
        Initialize file access error.

        Args:
            message: Human-readable error message
            file_path: Path to the file that caused the error
            operation: Type of operation that failed (read, write, create, etc.)
            original_error: Original exception that caused this error
        """
        context = {
            'file_path': file_path,
            'operation': operation,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='FILE_ACCESS_ERROR', context=context)
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigurationError(TrackerError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_value: Any = None, valid_values: Optional[List[Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Human-readable error message
            config_key: Configuration key that has invalid value
            config_value: Invalid configuration value
            valid_values: List of valid values for the configuration key
        """
        context = {
            'config_key': config_key,
            'config_value': str(config_value) if config_value is not None else None,
            'valid_values': [str(v) for v in valid_values] if valid_values else None
        }
        super().__init__(message, error_code='CONFIGURATION_ERROR', context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.valid_values = valid_values or []


class BackendError(TrackerError):
    """Exception raised when the table backend rejects or fails an operation."""

    def __init__(self, message: str, table: Optional[str] = None,
                 operation: Optional[str] = None, original_error: Optional[Exception] = None):
        """
        Initialize backend error.

        Args:
            message: Human-readable error message
            table: Name of the table the operation targeted
            operation: Operation that failed (select, insert, update, delete)
            original_error: Original exception raised by the backend client
        """
        context = {
            'table': table,
            'operation': operation,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='BACKEND_ERROR', context=context)
        self.table = table
        self.operation = operation
        self.original_error = original_error


class RecordNotFoundError(BackendError):
    """Exception raised when a project id does not exist in the table."""

    def __init__(self, message: str, table: Optional[str] = None, record_id: Optional[str] = None):
        super().__init__(message, table=table, operation='select')
        self.error_code = 'RECORD_NOT_FOUND'
        self.context['record_id'] = record_id
        self.record_id = record_id


class StorageError(TrackerError):
    """Exception raised for image storage failures."""

    def __init__(self, message: str, bucket: Optional[str] = None,
                 path: Optional[str] = None, original_error: Optional[Exception] = None):
        """
        Initialize storage error.

        Args:
            message: Human-readable error message
            bucket: Storage bucket the upload targeted
            path: Object path inside the bucket
            original_error: Original exception raised by the storage client
        """
        context = {
            'bucket': bucket,
            'path': path,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='STORAGE_ERROR', context=context)
        self.bucket = bucket
        self.path = path
        self.original_error = original_error


class OutputGenerationError(TrackerError):
    """Exception raised for errors during report generation."""

    def __init__(self, message: str, output_type: Optional[str] = None,
                 output_path: Optional[str] = None, record_count: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize output generation error.

        Args:
            message: Human-readable error message
            output_type: Type of output being generated (CSV, report, etc.)
            output_path: Path where output was being written
            record_count: Number of records being written
            original_error: Original exception that caused this error
        """
        context = {
            'output_type': output_type,
            'output_path': output_path,
            'record_count': record_count,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='OUTPUT_GENERATION_ERROR', context=context)
        self.output_type = output_type
        self.output_path = output_path
        self.record_count = record_count
        self.original_error = original_error


# Utility functions for exception handling

def get_error_severity(error: Exception) -> str:
    """
    Get the severity level of an error.

    Args:
        error: Exception to evaluate

    Returns:
        Severity level string (low, medium, high, critical)
    """
    if isinstance(error, ConfigurationError):
        return 'critical'
    elif isinstance(error, (DataLoadError, FileAccessError)):
        return 'high'
    elif isinstance(error, RecordNotFoundError):
        return 'low'
    elif isinstance(error, (BackendError, StorageError, OutputGenerationError)):
        return 'medium'
    elif isinstance(error, ValidationError):
        return 'low'
    else:
        return 'medium'

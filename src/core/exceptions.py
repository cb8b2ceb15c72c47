#!/usr/bin/env python3
"""
Standardized exception hierarchy for the actions reporter.

Every error carries a human-readable message plus machine-readable context so
commands can log it and map it to an exit code.
"""

from typing import Optional, Dict, Any


class ActionsReporterError(Exception):
    """Base exception for all actions reporter errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Caller input
class InputValidationError(ActionsReporterError):
    """Caller supplied missing or malformed input; nothing was requested."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, context={'field': field} if field else None)


# Remote API
class RemoteApiError(ActionsReporterError):
    """The primary runs listing returned a non-success response."""

    def __init__(self, detail: str, status: Optional[int] = None, url: Optional[str] = None):
        message = f"GitHub API error: {detail}"
        context = {
            'status': status,
            'url': url,
            'detail': detail
        }
        super().__init__(message, context=context)
        self.status = status


class StepDetailError(ActionsReporterError):
    """Step-detail request for a single run failed."""

    def __init__(self, run_id: Any, original_error: Exception):
        message = f"Failed to fetch step details for run {run_id}"
        context = {
            'run_id': run_id,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Import
class ImportParseError(ActionsReporterError):
    """Import payload could not be parsed; no rows were accepted."""

    def __init__(self, detail: str, line: Optional[int] = None):
        message = f"Failed to parse import file: {detail}"
        if line is not None:
            message += f" (line {line})"
        super().__init__(message, context={'detail': detail, 'line': line})


class RecordValidationError(ActionsReporterError):
    """A run record is missing required fields."""

    def __init__(self, missing: list, record: Optional[Dict[str, Any]] = None):
        message = f"Run record missing required fields: {', '.join(missing)}"
        super().__init__(message, context={'missing': missing, 'record': record or {}})
        self.missing = missing


# Storage
class StorageError(ActionsReporterError):
    """Durable storage could not be written."""

    def __init__(self, operation: str, key: str, original_error: Exception):
        message = f"Storage {operation} failed for slot {key}"
        context = {
            'operation': operation,
            'key': key,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class StorageParseError(ActionsReporterError):
    """Persisted slot content is corrupt."""

    def __init__(self, key: str, original_error: Exception):
        message = f"Stored data in slot {key} is corrupt"
        context = {
            'key': key,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


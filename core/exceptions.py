"""
Custom exceptions for the reporting pipeline with structured error context.

This module provides the exception hierarchy used by the capture export,
the snapshot builder and the HTTP layer. Each exception carries context
information for debugging and an HTTP status code that route handlers use
when converting it into an ``{"error": message}`` body.

Exception Hierarchy:
    PulseException (base, 500)
    ├── RequestValidationError (400)
    ├── StoreError (500)
    │   └── MissingRelationError
    │       └── SnapshotTableMissingError
    └── ExportError (500)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class PulseException(Exception):
    """
    Base exception for all reporting errors.

    Attributes:
        message: Human-readable error message (returned to API clients)
        context: Additional context information (project, table, etc.)
        original_exception: The original exception that was caught (if any)
        status_code: HTTP status used when the error reaches a route handler
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Request Errors
# ============================================================================

class RequestValidationError(PulseException):
    """
    Raised when a required request parameter is missing or blank.

    Context should include:
        - parameter: Name of the offending parameter
    """
    status_code = 400


# ============================================================================
# Store Errors
# ============================================================================

class StoreError(PulseException):
    """
    Raised when a read or write against the relational store fails.

    Context should include:
        - operation: SELECT, UPSERT, DELETE, INSERT
        - table_name: Name of the table
        - sqlstate: Database error code (if available)
    """
    pass


class MissingRelationError(StoreError):
    """A backing table does not exist (SQLSTATE 42P01)."""
    pass


class SnapshotTableMissingError(MissingRelationError):
    """The zone_daily_snapshots table does not exist; snapshot paths cannot proceed."""

    def __init__(
        self,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            "Table zone_daily_snapshots does not exist. Create the snapshot table first.",
            context=context,
            original_exception=original_exception
        )


# ============================================================================
# Export Errors
# ============================================================================

class ExportError(PulseException):
    """Unexpected failure while building an export."""
    pass

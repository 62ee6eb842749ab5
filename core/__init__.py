"""
Core utilities and configuration for the Pulse reporting service.

This package provides foundational components used throughout the service:

Modules:
    config: Application configuration and environment variable management
    database: Async engine, session factory and database error classification
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import async_session_maker, get_session
    from core.exceptions import StoreError, SnapshotTableMissingError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()
    
    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "get_session",
    "setup_logging",
    # Exceptions
    "PulseException",
    "RequestValidationError",
    "StoreError",
    "MissingRelationError",
    "SnapshotTableMissingError",
    "ExportError",
]

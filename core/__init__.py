"""
Core utilities and configuration for the dataset updater.

This package provides foundational components used by every updater run:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and async session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import FetchError, ParseError, StoreError
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
    "setup_logging",
    # Exceptions
    "UpdaterError",
    "ExtractionError",
    "FetchError",
    "ArchiveEntryNotFoundError",
    "LocalIOError",
    "TransformationError",
    "ParseError",
    "CacheError",
    "LoadError",
    "StoreError",
]

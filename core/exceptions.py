"""
Custom exceptions for the dataset updater with structured error context.

Every failure inside an updater run is raised as one of these exceptions and
propagated to the caller (scheduler, CLI or HTTP trigger). Nothing is
recovered locally: a failed run is safe to repeat, so the caller decides
whether and when to retry.

Exception Hierarchy:
    UpdaterError (base)
    ├── ExtractionError
    │   ├── FetchError
    │   ├── ArchiveEntryNotFoundError
    │   └── LocalIOError
    ├── TransformationError
    │   └── ParseError
    ├── CacheError
    └── LoadError
        └── StoreError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class UpdaterError(Exception):
    """
    Base exception for all updater errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (url, table, file, etc.)
        original_exception: The original exception that was caught (if any)
    """

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

        self.context["error_timestamp"] = self.timestamp.isoformat()

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
        """Convert exception to dictionary for logging and HTTP error bodies."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(UpdaterError):
    """Base exception for archive download and extraction failures."""
    pass


class FetchError(ExtractionError):
    """
    Raised when the archive download fails (non-2xx status or network error).

    Context should include:
        - url: The archive URL
        - status_code: HTTP status code (absent for network failures)
        - response_body: Response body, truncated
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        self.response_body = response_body
        if status_code is not None:
            self.context["status_code"] = status_code
        if response_body is not None:
            self.context["response_body"] = response_body


class ArchiveEntryNotFoundError(ExtractionError):
    """
    Raised when the requested file is not present in the downloaded archive.

    Context should include:
        - url: The archive URL
        - target_file: The file that was requested
        - entries: File names found in the archive
    """
    pass


class LocalIOError(ExtractionError):
    """
    Raised on local filesystem failures while extracting, reading or
    fingerprinting a file.

    Context should include:
        - file_path: The path being read or written
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(UpdaterError):
    """Base exception for record transformation failures."""
    pass


class ParseError(TransformationError):
    """
    Raised when delimited data is malformed or a field transform fails.
    The whole run fails; rows are never skipped.

    Context should include:
        - file_path: Path to the CSV file
        - line_number: Line number where the error occurred (if known)
        - field_name: Destination field that failed (if applicable)
    """
    pass


# ============================================================================
# Cache Errors
# ============================================================================

class CacheError(UpdaterError):
    """
    Raised when the change cache cannot be read or written.

    Context should include:
        - key: Cache key involved
        - operation: get or set
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(UpdaterError):
    """Base exception for destination store failures."""
    pass


class StoreError(LoadError):
    """
    Raised when a destination store query or insert fails.

    Context should include:
        - operation: SELECT or INSERT
        - table_name: Name of the destination table
        - batch_index: Index of the failed batch (inserts only)
        - records_committed: Rows committed before the failure (inserts only)
    """
    pass

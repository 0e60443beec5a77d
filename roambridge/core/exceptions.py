"""
Domain-Specific Exceptions

Defines the failure taxonomy of the Roam bridge. Each condition a caller must
be able to tell apart (a login that never completed, an in-page API that is
not reachable, a deletion query that matched too much, an export that never
arrived) has its own exception type.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


# Base domain exception hierarchy
class RoamDomainError(Exception):
    """Base exception for all Roam bridge errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.domain = "Roam"


class ConfigurationError(RoamDomainError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, **context):
        super().__init__(message, context)


class SessionError(RoamDomainError):
    """Raised when browser session operations fail"""

    def __init__(self, message: str, workspace_id: Optional[str] = None, **context):
        super().__init__(message, context)
        self.workspace_id = workspace_id


class LoginFailure(SessionError):
    """
    Raised when the login form never rendered or the post-login landmark
    never appeared. Never retried automatically.
    """

    def __init__(self, message: str, stage: str, workspace_id: Optional[str] = None, **context):
        super().__init__(message, workspace_id=workspace_id, stage=stage, **context)
        self.stage = stage


class MenuItemNotFound(SessionError):
    """Raised when an entry of the overflow menu cannot be found"""

    def __init__(self, title: str, **context):
        super().__init__(f"Menu item not found: '{title}'", title=title, **context)
        self.title = title


class RemoteApiUnavailable(RoamDomainError):
    """Raised when the in-page graph API object is missing from the page"""

    def __init__(self, operation: str, **context):
        super().__init__(
            f"Roam in-page API not available for '{operation}'",
            dict(context, operation=operation)
        )
        self.operation = operation


class UnsafeQueryResult(RoamDomainError):
    """Raised when a deletion query matches more rows than the safety ceiling"""

    def __init__(self, row_count: int, ceiling: int, query: Optional[str] = None):
        super().__init__(
            f"Too many results ({row_count} > {ceiling}). Is your query ok?",
            {'row_count': row_count, 'ceiling': ceiling, 'query': query}
        )
        self.row_count = row_count
        self.ceiling = ceiling
        self.query = query


class ExportError(RoamDomainError):
    """Base exception for graph export errors"""

    def __init__(self, message: str, **context):
        super().__init__(message, context)


class ExportNotFound(ExportError):
    """Raised when no export archive can be located in the working directory"""

    def __init__(self, directory: Union[str, Path], marker: str, reason: Optional[str] = None):
        message = f"No export found in {directory} (looking for files containing '{marker}')"
        if reason:
            message += f": {reason}"
        super().__init__(message, directory=str(directory), marker=marker)
        self.directory = Path(directory)
        self.marker = marker


class ArchiveParseFailure(ExportError):
    """Raised when the JSON member of an export archive cannot be extracted or parsed"""

    def __init__(self, message: str, archive_path: Optional[Union[str, Path]] = None, **context):
        super().__init__(message, archive_path=str(archive_path) if archive_path else None, **context)
        self.archive_path = Path(archive_path) if archive_path else None


class BlockImportError(RoamDomainError):
    """Base exception for block import errors"""

    def __init__(self, message: str, **context):
        super().__init__(message, context)


class UploadTargetMissing(BlockImportError):
    """Raised when the file input of the import dialog is absent"""

    def __init__(self, selector: str):
        super().__init__(f"Cannot find the file input: {selector}", selector=selector)
        self.selector = selector


def describe_errors(errors: List[Exception]) -> str:
    """One-line summary of several errors, used for teardown reports"""
    return "; ".join(f"{type(e).__name__}: {e}" for e in errors)


# Context managers for error boundary handling
class ErrorBoundary:
    """Context manager for logging errors that cross an architectural boundary"""

    def __init__(self, boundary_name: str, context: Optional[Dict[str, Any]] = None):
        self.boundary_name = boundary_name
        self.context = context or {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type and not issubclass(exc_type, RoamDomainError):
            logger.error(
                "Infrastructure error at %s: %s (%s)",
                self.boundary_name, exc_val, self.context
            )
        return False  # Don't suppress exceptions

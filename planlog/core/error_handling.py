"""Centralized error handling framework for planlog."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class PlanlogError(Exception):
    """Base exception for all planlog errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(PlanlogError):
    """Raised when configuration is invalid."""

    pass


class PlanError(PlanlogError):
    """Raised when a plan operation is invalid."""

    pass


class PlanNotFoundError(PlanError):
    """Raised when no plan file carries the requested number."""

    pass


class PlanStateError(PlanError):
    """Raised when a plan is not in the right state for an operation."""

    pass


class PlanFormatError(PlanError):
    """Raised when a plan file cannot be parsed."""

    pass


class DeployError(PlanlogError):
    """Raised when a deployment step fails."""

    pass


class GitError(DeployError):
    """Raised when a git command fails."""

    pass


class DeployTimeoutError(DeployError):
    """Raised when the site is not published before the deadline."""

    def __init__(
        self,
        message: str,
        last_check: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.last_check = last_check


class ErrorContext:
    """Context information for error handling."""

    def __init__(self, operation: str, file_path: Optional[str] = None, **kwargs):
        self.operation = operation
        self.file_path = file_path
        self.context = kwargs


@contextmanager
def error_context(operation: str, **context_kwargs):
    """
    Context manager for error handling with operation context.

    Args:
        operation: Description of the operation being performed
        **context_kwargs: Additional context information
    """
    try:
        yield ErrorContext(operation, **context_kwargs)
    except Exception as e:
        logger.error(f"Error during {operation}: {e}")

        if isinstance(e, PlanlogError):
            e.details.update({"operation": operation, **context_kwargs})

        raise


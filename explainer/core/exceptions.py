"""
Custom exceptions for the explainer application.

Provides a hierarchy of exceptions for better error handling and debugging.
"""

from typing import Any, Dict, Optional


class ExplainerError(Exception):
    """Base exception for all explainer errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ExplainerError):
    """Raised when there are configuration issues."""
    pass


class ValidationError(ExplainerError):
    """Input validation errors."""
    pass


class DataAccessError(ExplainerError):
    """Base class for errors talking to external services."""
    pass


class LLMError(DataAccessError):
    """Chat-completion API related errors."""
    pass


class ExternalServiceError(DataAccessError):
    """External service is unavailable or returning errors."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(f"{service}: {message}", **kwargs)
        self.service = service
        self.status_code = status_code

"""
Exception handling for the PreopFlow application.

Infrastructure-level exceptions; business rule violations live in
``preopflow.domain.errors``.
"""

from typing import Any, Dict, Optional


class PreopFlowException(Exception):
    """Base exception class for the PreopFlow application."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(PreopFlowException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)


class DatabaseError(PreopFlowException):
    """Raised when there's a database operation error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "DATABASE_ERROR", details)

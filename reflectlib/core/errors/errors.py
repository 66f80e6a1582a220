"""Base error classes with structured error context.

This module provides the foundation for the error handling system:
a structured context attached to every framework error, cause tracking
for wrapped errors and clean serialization for logging.
"""

import traceback
from datetime import datetime
from typing import Any

from .models import ErrorContextData, ProviderErrorContext


class ErrorContext:
    """Structured error context.

    Wraps an ``ErrorContextData`` model so that errors carry the component
    and operation they were raised from.
    """

    def __init__(self, context_data: ErrorContextData):
        """Initialize error context.

        Args:
            context_data: Required error context data
        """
        self._data = context_data

    @classmethod
    def create(
        cls, component: str, operation: str, error_type: str, error_location: str
    ) -> "ErrorContext":
        """Create a new error context with required data.

        Args:
            component: Component raising error
            operation: Operation being performed
            error_type: Type of error
            error_location: Location in code

        Returns:
            New ErrorContext instance
        """
        context_data = ErrorContextData(
            component=component,
            operation=operation,
            error_type=error_type,
            error_location=error_location,
        )
        return cls(context_data)

    @property
    def data(self) -> ErrorContextData:
        """Get the context data."""
        return self._data

    @property
    def timestamp(self) -> datetime:
        """Get the context creation timestamp."""
        return self._data.timestamp

    def __str__(self) -> str:
        return f"ErrorContext({self._data.model_dump()})"


class BaseError(Exception):
    """Base class for all framework errors.

    Provides structured context, cause tracking for nested errors and
    dictionary serialization.
    """

    def __init__(self, message: str, context: ErrorContext, cause: Exception | None = None):
        """Initialize error.

        Args:
            message: Error message
            context: Required error context
            cause: Optional cause exception
        """
        self.message = message
        self.context = context
        self.cause = cause
        self.timestamp = datetime.now()
        self.traceback = self._capture_traceback()

        super().__init__(message)

    def _capture_traceback(self) -> str:
        """Capture the current traceback."""
        return traceback.format_exc()

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary.

        Returns:
            Dictionary representation of error
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.data.model_dump(mode="json"),
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        cause_str = f" (caused by: {self.cause})" if self.cause else ""
        return f"{self.__class__.__name__}: {self.message}{cause_str}"


class ProviderError(BaseError):
    """Error raised when provider operations fail.

    Concrete LLM providers raise this for transport and API failures.
    The reflection loop never retries it.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext,
        provider_context: ProviderErrorContext,
        cause: Exception | None = None,
    ):
        """Initialize provider error.

        Args:
            message: Error message
            context: Required error context
            provider_context: Required provider error context
            cause: Optional cause exception
        """
        self.provider_context = provider_context
        super().__init__(message, context, cause)

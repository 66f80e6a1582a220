"""Core error handling for reflectlib."""

from .errors import BaseError, ErrorContext, ProviderError
from .models import ErrorContextData, ProviderErrorContext

__all__ = [
    "BaseError",
    "ErrorContext",
    "ProviderError",
    "ErrorContextData",
    "ProviderErrorContext",
]

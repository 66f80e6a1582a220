"""Strict Pydantic models for error handling.

No fallbacks, no optional fields unless explicitly required.
"""

from datetime import datetime

from pydantic import Field

from reflectlib.core.models import StrictBaseModel


class ErrorContextData(StrictBaseModel):
    """Strict error context data model."""

    component: str = Field(..., description="Component that raised the error")
    operation: str = Field(..., description="Operation being performed")
    error_type: str = Field(..., description="Type of error")
    error_location: str = Field(..., description="Location in code where error occurred")
    timestamp: datetime = Field(default_factory=datetime.now, description="When error occurred")


class ProviderErrorContext(StrictBaseModel):
    """Strict provider error context."""

    provider_name: str = Field(..., description="Name of the provider")
    provider_type: str = Field(..., description="Type of provider")
    operation: str = Field(..., description="Operation that failed")
    retry_count: int = Field(..., description="Number of retries attempted")

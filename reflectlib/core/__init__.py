"""Core building blocks: strict models, errors and settings."""

from reflectlib.core.models import StrictBaseModel

__all__ = [
    "StrictBaseModel",
]

"""Strict Pydantic base model shared by all reflectlib data types.

Every model in the codebase derives from this base so that validation
behaviour is uniform: no type coercion, no unknown fields, immutability.
"""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Immutable base model with strict validation.

    Enforces:
    - strict=True: inputs must already have the declared type
    - extra="forbid": unknown fields are rejected
    - frozen=True: instances are immutable
    """

    model_config = ConfigDict(
        strict=True,              # No type coercion - fail fast on wrong types
        extra="forbid",           # No extra fields - fail fast on unknown keys
        validate_assignment=True,
        frozen=True,
        validate_default=True,    # Validate even default values
        use_enum_values=False,    # Preserve enum objects for their methods
        arbitrary_types_allowed=False,
    )


__all__ = [
    "StrictBaseModel",
]

"""Base Pydantic model with strict defaults for arenapat configs.

All arenapat config schemas inherit from this base to ensure consistent
validation behavior across arena, parameter, user, CLI, and internal
configs.
"""

from pydantic import BaseModel, ConfigDict


class ArenapatBaseModel(BaseModel):
    """Base model for all arenapat configuration schemas.

    Enforces strict validation:
    - No extra fields allowed
    - Validates assignments after initialization
    - Stores enum values rather than enum members
    - Strips whitespace from strings
    """

    model_config = ConfigDict(
        extra='forbid',           # Reject unknown fields
        validate_assignment=True, # Validate on field mutation
        use_enum_values=True,     # Convert enums to values
        str_strip_whitespace=True,# Strip whitespace from strings
    )

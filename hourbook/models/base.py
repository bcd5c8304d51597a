"""Base model for all data models in the timesheet system.

This module provides a base Pydantic model with common configuration
and helper methods for serialization/deserialization.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with type checking
    - Serialization to/from dictionaries
    - Construction from ORM rows (``model_validate(row)``)
    - Arbitrary types support for dates, times, decimals

    Example:
        >>> class Colour(BaseDataModel):
        ...     name: str
        ...     hex: str
        >>> colour = Colour(name="Indigo", hex="#6366f1")
        >>> colour.model_dump()
        {'name': 'Indigo', 'hex': '#6366f1'}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date, time
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Unknown fields are an input error
        extra="forbid",
        # Storage rows are read straight into domain models
        from_attributes=True,
        frozen=False,
    )

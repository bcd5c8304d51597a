"""Business rule validators for timesheet entries.

This module provides the checks that gate entry mutations: parsing raw
input into the pydantic input models, the backdate window and duration
normalization. Each check raises ``ValidationError`` from the shared error
taxonomy so callers see one failure type for malformed input.
"""

import datetime as dt
from typing import Any, Mapping, Tuple, Type, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from hourbook.calculators.time_utils import is_within_backdate_limit, normalize_duration
from hourbook.errors import ValidationError, from_pydantic
from hourbook.models.base import BaseDataModel

ModelT = TypeVar("ModelT", bound=BaseDataModel)


def parse_input(model: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Validate raw input against an input model.

    Args:
        model: Pydantic input model class
        data: Model instance or raw mapping

    Returns:
        Validated model instance

    Raises:
        ValidationError: With the first validation issue's message
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise from_pydantic(e) from e


class EntryRuleValidators:
    """Collection of entry business rule checks."""

    @staticmethod
    def validate_backdate(date: dt.date, limit_days: int, today: dt.date) -> None:
        """Reject dates further than ``limit_days`` in the past.

        Raises:
            ValidationError: If the date is outside the window
        """
        if not is_within_backdate_limit(date, limit_days, today):
            raise ValidationError(
                f"Cannot log time for dates more than {limit_days} days in the past"
            )

    @staticmethod
    def normalize_duration(hours: int, minutes: int) -> Tuple[int, int]:
        """Round minutes to a quarter hour, carrying into hours.

        Raises:
            ValidationError: If the duration exceeds 24 hours
        """
        try:
            return normalize_duration(hours, minutes)
        except ValueError as e:
            raise ValidationError(str(e)) from e

"""Error taxonomy for the timesheet system.

Every service raises one of these exceptions for expected failures. Callers
(CLI, HTTP adapters) turn them into a structured failure via ``to_dict()``;
anything else is reported as a generic internal error.
"""

from typing import Any, Dict


class HourbookError(Exception):
    """Base class for expected, user-facing failures."""

    code = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Return the structured failure payload for this error."""
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(HourbookError):
    """Malformed input: bad date, out-of-range duration, missing target."""

    code = "validation_error"


class AuthorizationError(HourbookError):
    """The actor lacks the role or assignment required for the operation."""

    code = "forbidden"


class NotFoundError(HourbookError):
    """Referenced entity is absent or soft-deleted."""

    code = "not_found"


class ConflictError(HourbookError):
    """Duplicate insert on a unique key."""

    code = "conflict"


class RateLimitError(HourbookError):
    """Throttle exceeded."""

    code = "rate_limited"


def internal_error_response() -> Dict[str, Any]:
    """Generic failure payload for unexpected errors (no detail leakage)."""
    return {"success": False, "error": "Internal server error", "code": "internal_error"}


def from_pydantic(error: Exception) -> ValidationError:
    """Translate a pydantic validation error into a ValidationError.

    Only the first issue is reported, mirroring what a form would show.

    Args:
        error: pydantic.ValidationError raised while parsing input

    Returns:
        ValidationError carrying the first issue's message
    """
    errors = getattr(error, "errors", None)
    if callable(errors):
        issues = errors()
        if issues:
            first = issues[0]
            message = str(first.get("msg", "Invalid input"))
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            location = ".".join(str(part) for part in first.get("loc", ()) if part)
            if location:
                message = f"{location}: {message}"
            return ValidationError(message)
    return ValidationError(str(error))

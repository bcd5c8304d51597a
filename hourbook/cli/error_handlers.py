"""Error handling for CLI commands.

Maps the service error taxonomy onto exit codes:

==================  =========
Error               Exit code
==================  =========
ValidationError     3
ConflictError       4
AuthorizationError  6
NotFoundError       7
RateLimitError      8
click.Abort         130
anything else       255
==================  =========
"""

import sys
import traceback

import click

from hourbook.cli.utils.formatters import format_error, format_warning
from hourbook.errors import (
    AuthorizationError,
    ConflictError,
    HourbookError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

EXIT_CODES = {
    ValidationError: 3,
    ConflictError: 4,
    AuthorizationError: 6,
    NotFoundError: 7,
    RateLimitError: 8,
}

_LABELS = {
    ValidationError: "Validation Error",
    ConflictError: "Conflict",
    AuthorizationError: "Permission Denied",
    NotFoundError: "Not Found",
    RateLimitError: "Rate Limit Exceeded",
}

_HINTS = {
    RateLimitError: "Wait a minute before retrying",
    AuthorizationError: "Ask an administrator for access",
}


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Print a user-friendly message for ``error``.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code for the error type
    """
    if isinstance(error, HourbookError):
        error_type = type(error)
        for known in EXIT_CODES:
            if isinstance(error, known):
                error_type = known
                break
        click.echo(format_error(f"{_LABELS.get(error_type, 'Error')}: {error.message}"))
        hint = _HINTS.get(error_type)
        if hint:
            click.echo(format_warning(f"Hint: {hint}"))
        return EXIT_CODES.get(error_type, 1)

    elif isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130  # Standard exit code for SIGINT

    else:
        click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
        click.echo(str(error))

        if debug:
            click.echo("\nFull stack trace:")
            click.echo(traceback.format_exc())
        else:
            click.echo(format_warning("\nRun with --debug flag for full stack trace"))

        return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                # Command implementation
                pass
    """

    class ErrorHandler:
        """Context manager for error handling."""

        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is None or isinstance(exc_val, (SystemExit, click.exceptions.Exit)):
                return False
            exit_code = handle_cli_error(exc_val, self.show_debug)
            sys.exit(exit_code)

    return ErrorHandler(debug)

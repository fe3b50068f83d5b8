"""
CLI Error Handling
==================

Consistent error messages and exit codes for the command-line tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from eopub.errors import PubError


class ExitCode(IntEnum):
    """Exit codes for pubtool."""
    SUCCESS = 0
    PUB_ERROR = 1        # Invalid, mismatched or unencodable pub data
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception and exit with the matching code.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback for internal errors

    Raises:
        SystemExit: Always
    """
    if isinstance(error, PubError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.PUB_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError,
                            IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)

"""Shared error reporting for CLI commands."""

import logging
import sys

import click

from fakecandy.exceptions import format_error_for_display

logger = logging.getLogger(__name__)


def fail(error: Exception) -> None:
    """Print a clean error message (no traceback) and exit with status 1."""
    logger.debug("Command failed", exc_info=error)
    user_message, recovery_hint = format_error_for_display(error)

    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)
    sys.exit(1)

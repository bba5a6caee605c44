"""Shared CLI infrastructure: option decorators, error handlers, and the CLI group."""

from __future__ import annotations

import logging
from typing import Callable

import click
import requests

import content_migrator
from content_migrator.constants import (
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_PAT_TOKEN,
    HTTP_FORBIDDEN,
    HTTP_RATE_LIMIT,
    HTTP_SERVER_ERROR_MIN,
    HTTP_UNAUTHORIZED,
)
from content_migrator.exceptions import APIError, MigratorError
from content_migrator.utils.logging import log_with_context

# ---------------------------------------------------------------------------
# Shared option decorators
# ---------------------------------------------------------------------------


def credential_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator adding the hub id and credential options.

    Credentials may also come from the environment so they stay out of
    shell history.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with credential options attached.
    """
    f = click.option(
        "--hub_id",
        required=True,
        help="Id of the destination hub",
    )(f)
    f = click.option(
        "--client_id",
        envvar=ENV_CLIENT_ID,
        help=f"OAuth client id (or set {ENV_CLIENT_ID})",
    )(f)
    f = click.option(
        "--client_secret",
        envvar=ENV_CLIENT_SECRET,
        help=f"OAuth client secret (or set {ENV_CLIENT_SECRET})",
    )(f)
    f = click.option(
        "--pat_token",
        envvar=ENV_PAT_TOKEN,
        help=f"Personal access token, instead of client credentials (or set {ENV_PAT_TOKEN})",
    )(f)
    return f


def common_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds options shared across multiple subcommands.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with common options attached.
    """
    f = credential_options(f)
    f = click.option(
        "--config",
        default="config.yaml",
        show_default=True,
        help="Path to config YAML",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose console logging (shows DEBUG level messages)",
    )(f)
    f = click.option(
        "--debug_api",
        is_flag=True,
        default=False,
        help="Enable detailed API request/response logging (creates very large log files)",
    )(f)
    return f


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=content_migrator.__version__, prog_name="content-migrator")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Content hub migration tool.

    Args:
        ctx: The Click context (injected by ``@click.pass_context``).
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def handle_api_error(e: APIError) -> None:
    """Handle hub API errors with specific messages.

    Args:
        e: The API error to handle.
    """
    status = e.status_code
    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
        log_with_context(logging.ERROR, f"Access denied by the hub: {e}")
        log_with_context(
            logging.INFO,
            "Check that the client credentials or token are valid and have "
            "permission to manage content on this hub.",
        )
    elif status == HTTP_RATE_LIMIT:
        log_with_context(logging.ERROR, f"Rate limit exceeded: {e}")
        log_with_context(
            logging.INFO,
            "Re-run the import with the same mapping file to continue where it stopped.",
        )
    elif status is not None and status >= HTTP_SERVER_ERROR_MIN:
        log_with_context(logging.ERROR, f"Server error from the hub API: {e}")
        log_with_context(
            logging.INFO, "This is likely a temporary issue. Please try again later."
        )
    else:
        log_with_context(logging.ERROR, f"API error during migration: {e}")


def handle_exception(e: BaseException) -> None:
    """Handle different types of exceptions.

    Args:
        e: The exception to handle.
    """
    if isinstance(e, APIError):
        handle_api_error(e)
    elif isinstance(e, MigratorError):
        log_with_context(logging.ERROR, str(e))
    elif isinstance(e, requests.RequestException):
        log_with_context(logging.ERROR, f"Could not reach the hub: {e}")
        log_with_context(
            logging.INFO, "Check your network connection and the API URL."
        )
    elif isinstance(e, FileNotFoundError):
        log_with_context(logging.ERROR, f"File not found: {e}")
        log_with_context(
            logging.INFO,
            "Please check that all required files exist and paths are correct.",
        )
    elif isinstance(e, KeyboardInterrupt):
        log_with_context(logging.WARNING, "Migration interrupted by user.")
        log_with_context(
            logging.INFO,
            "The mapping file has been saved; re-run the import to continue.",
        )
    else:
        log_with_context(logging.ERROR, f"Migration failed: {e}", exc_info=True)

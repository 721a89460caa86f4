"""Rendering of domain errors for CLI commands."""

import click

from finflow.domain.errors import DomainError
from finflow.logging_config import get_logger

logger = get_logger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError) -> None:
    """Print a domain error to stderr and exit with status 1."""
    logger.debug("Command '%s' failed: %r", ctx.command_path, error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)

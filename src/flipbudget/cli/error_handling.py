"""CLI error handling helpers."""

from typing import Iterable

import click

from flipbudget.domain.entities import ValidationWarning
from flipbudget.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Validation errors are listed one line per field message.
    """
    if isinstance(error, ValidationError) and error.errors:
        click.echo("Error: Invalid input", err=True)
        for field, messages in error.errors.items():
            for message in messages:
                click.echo(f"  {field}: {message}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def echo_warnings(warnings: Iterable[ValidationWarning]) -> None:
    """Print advisory warnings with their severity."""
    for warning in warnings:
        click.echo(f"[{warning.severity.value}] {warning.path}: {warning.message}")

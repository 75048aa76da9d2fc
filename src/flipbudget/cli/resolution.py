"""CLI helpers for project, vendor and template resolution."""

from __future__ import annotations

import click
from flipbudget.domain.project import ProjectService
from flipbudget.domain.template import TemplateService
from flipbudget.domain.vendor import VendorService
from flipbudget.utils.resolver import resolve_project, resolve_template, resolve_vendor


def resolve_project_or_exit(
    ctx: click.Context, project_service: ProjectService, project: str | int
) -> int:
    """Resolve project name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_project(project_service, project)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_vendor_or_exit(
    ctx: click.Context, vendor_service: VendorService, vendor: str | int
) -> int:
    """Resolve vendor name or ID, or exit with a CLI error."""
    try:
        return resolve_vendor(vendor_service, vendor)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_template_or_exit(
    ctx: click.Context, template_service: TemplateService, template: str | int
) -> int:
    """Resolve template name or ID, or exit with a CLI error."""
    try:
        return resolve_template(template_service, template)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)

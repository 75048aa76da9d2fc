"""Construction draw commands."""

import click
from flipbudget.cli.error_handling import handle_domain_error
from flipbudget.cli.resolution import resolve_project_or_exit, resolve_vendor_or_exit
from flipbudget.domain.budget import BudgetService
from flipbudget.domain.draw import DrawService
from flipbudget.domain.entities import DrawMilestone, DrawStatus
from flipbudget.domain.errors import DomainError
from flipbudget.domain.project import ProjectService
from flipbudget.domain.vendor import VendorService
from flipbudget.utils.amount_parser import parse_amount
from flipbudget.utils.date_parser import parse_date


@click.group()
def draw_group():
    """Manage construction draws."""
    pass


@draw_group.command("add")
@click.argument("project", metavar="PROJECT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--vendor", help="Vendor name or ID")
@click.option("--milestone", help=f"Milestone ({', '.join(m.value for m in DrawMilestone)})")
@click.option("--description", help="Description")
@click.option("--percent-complete", "percent_complete", help="Work completed, in percent")
@click.option("--requested", help="Date requested (YYYY-MM-DD or relative like 'today')")
@click.option("--status", help=f"Status ({', '.join(s.value for s in DrawStatus)}), default pending")
@click.option("--method", "payment_method", help="Payment method (check, zelle, wire, ...)")
@click.option("--reference", "reference_number", help="Check or reference number")
@click.option("--notes", help="Notes")
@click.pass_context
def add_draw(ctx, project: str, amount: str, vendor: str | None, requested: str | None, **options) -> None:
    """Add the next draw for a project.

    PROJECT can be a project name or ID.

    Examples:
        flipbudget draw add "123 Main St" 15000 --milestone demo_complete
        flipbudget draw add 1 '$8,500' --vendor "Acme GC" --status paid
    """
    db = ctx.obj["db"]
    service = DrawService(db)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)

    try:
        draw_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    fields = {key: value for key, value in options.items() if value is not None}
    if vendor is not None:
        fields["vendor_id"] = resolve_vendor_or_exit(ctx, VendorService(db), vendor)
    if requested is not None:
        try:
            fields["date_requested"] = parse_date(requested)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        draw_id = service.create_draw(project_id, draw_amount, **fields)
        draw = service.require_draw(draw_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added draw #{draw.draw_number} for ${draw.amount:,.2f} (ID: {draw_id})")


@draw_group.command("list")
@click.argument("project", metavar="PROJECT")
@click.pass_context
def list_draws(ctx, project: str) -> None:
    """List a project's draws with paid and remaining totals.

    PROJECT can be a project name or ID.
    """
    db = ctx.obj["db"]
    service = DrawService(db)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)

    draws = service.list_draws(project_id)
    if not draws:
        click.echo("No draws found.")
        return

    click.echo("\nDraws:")
    click.echo("-" * 80)
    for d in draws:
        milestone = d.milestone.value if d.milestone else "-"
        paid = d.date_paid.isoformat() if d.date_paid else "-"
        click.echo(
            f"#{d.draw_number:<3d} ID: {d.id:3d} | ${d.amount:>12,.2f} | {d.status.value:9s} | "
            f"{milestone:14s} | Paid: {paid}"
        )

    budget = BudgetService(db).summarize(project_id)
    summary = service.summarize(project_id, budget.total_budget)
    click.echo("-" * 80)
    click.echo(f"Budget:    ${summary.total_budget:,.2f}")
    click.echo(f"Paid:      ${summary.total_paid:,.2f} ({summary.percent_paid:.1f}%)")
    click.echo(f"Pending:   ${summary.total_pending:,.2f}")
    click.echo(f"Remaining: ${summary.remaining:,.2f}")


@draw_group.command("status")
@click.argument("draw_id", type=int)
@click.argument("status", metavar="STATUS")
@click.option("--date-paid", "date_paid", help="Payment date (defaults to today when marking paid)")
@click.pass_context
def set_status(ctx, draw_id: int, status: str, date_paid: str | None) -> None:
    """Move a draw to pending, approved or paid.

    Examples:
        flipbudget draw status 4 approved
        flipbudget draw status 4 paid --date-paid yesterday
    """
    service = DrawService(ctx.obj["db"])

    paid_on = None
    if date_paid is not None:
        try:
            paid_on = parse_date(date_paid)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        service.update_status(draw_id, status, date_paid=paid_on)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Draw {draw_id} is now {status}")


@draw_group.command("delete")
@click.argument("draw_id", type=int)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_draw(ctx, draw_id: int, yes: bool) -> None:
    """Delete a draw."""
    service = DrawService(ctx.obj["db"])

    if not yes and not click.confirm(f"Are you sure you want to delete draw {draw_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_draw(draw_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted draw {draw_id}")


def register_commands(cli):
    """Register draw commands with main CLI."""
    cli.add_command(draw_group, name="draw")

"""Vendor management commands."""

import click
from flipbudget.cli.error_handling import handle_domain_error
from flipbudget.cli.resolution import resolve_vendor_or_exit
from flipbudget.domain.entities import VendorStatus, VendorTrade
from flipbudget.domain.errors import DomainError
from flipbudget.domain.vendor import VendorService


def vendor_field_options(func):
    """Options shared by 'vendor create' and 'vendor update'."""
    options = [
        click.option("--trade", help=f"Trade ({', '.join(t.value for t in VendorTrade)})"),
        click.option("--contact", "contact_name", help="Contact person"),
        click.option("--phone", help="Phone number"),
        click.option("--email", help="Email address"),
        click.option("--website", help="Website URL"),
        click.option("--address", help="Address"),
        click.option("--licensed/--not-licensed", default=None, help="Licensed"),
        click.option("--insured/--not-insured", default=None, help="Insured"),
        click.option("--w9/--no-w9", "w9_on_file", default=None, help="W-9 on file"),
        click.option("--rating", help="Rating from 1 to 5"),
        click.option("--reliability", help="excellent, good, fair or poor"),
        click.option("--price-level", "price_level", help="$, $$ or $$$"),
        click.option("--status", help=f"Status ({', '.join(s.value for s in VendorStatus)})"),
        click.option("--notes", help="Notes"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect_fields(options: dict) -> dict:
    return {field: value for field, value in options.items() if value is not None}


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


@click.group()
def vendor_group():
    """Manage vendors and contractors."""
    pass


@vendor_group.command("create")
@click.argument("name", metavar="VENDOR_NAME")
@vendor_field_options
@click.pass_context
def create_vendor(ctx, name: str, **options) -> None:
    """Create a new vendor.

    Examples:
        flipbudget vendor create "Joe's Plumbing" --trade plumber --phone 612-555-0100
        flipbudget vendor create "Acme GC" --licensed --insured --rating 4
    """
    service = VendorService(ctx.obj["db"])
    try:
        vendor_id = service.create_vendor({"name": name, **_collect_fields(options)})
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created vendor '{name.strip()}' (ID: {vendor_id})")


@vendor_group.command("list")
@click.option("--trade", help="Only vendors with this trade")
@click.option("--status", help="Only vendors with this status")
@click.pass_context
def list_vendors(ctx, trade: str | None, status: str | None) -> None:
    """List vendors."""
    service = VendorService(ctx.obj["db"])

    vendors = service.list_vendors(trade=trade, status=status)
    if not vendors:
        click.echo("No vendors found.")
        return

    click.echo("\nVendors:")
    click.echo("-" * 80)
    for v in vendors:
        rating = f"{v.rating}/5" if v.rating is not None else "-"
        click.echo(
            f"ID: {v.id:3d} | {v.name:25s} | {v.trade.value:18s} | "
            f"Rating: {rating:4s} | {v.status.value}"
        )


@vendor_group.command("show")
@click.argument("vendor", metavar="VENDOR")
@click.pass_context
def show_vendor(ctx, vendor: str) -> None:
    """Show vendor details and payment totals.

    VENDOR can be a vendor name or ID.
    """
    service = VendorService(ctx.obj["db"])
    vendor_id = resolve_vendor_or_exit(ctx, service, vendor)
    v = service.require_vendor(vendor_id)
    payments = service.payment_summary(vendor_id)

    click.echo(f"\n{v.name} (ID: {v.id})")
    click.echo("-" * 60)
    click.echo(f"Trade:        {v.trade.value}")
    click.echo(f"Status:       {v.status.value}")
    for label, value in (
        ("Contact", v.contact_name),
        ("Phone", v.phone),
        ("Email", v.email),
        ("Website", v.website),
        ("Address", v.address),
        ("Reliability", v.reliability),
        ("Price level", v.price_level),
    ):
        if value:
            click.echo(f"{label + ':':14s}{value}")
    if v.rating is not None:
        click.echo(f"Rating:       {v.rating}/5")
    click.echo(
        f"Licensed: {_yes_no(v.licensed)} | Insured: {_yes_no(v.insured)} | "
        f"W-9: {_yes_no(v.w9_on_file)}"
    )
    click.echo(f"\nProjects:     {payments.projects_count}")
    click.echo(f"Total paid:   ${payments.total_paid:,.2f}")
    click.echo(f"Pending:      ${payments.pending_amount:,.2f}")
    if v.notes:
        click.echo(f"\nNotes:\n{v.notes}")


@vendor_group.command("update")
@click.argument("vendor", metavar="VENDOR")
@click.option("--name", help="New vendor name")
@vendor_field_options
@click.pass_context
def update_vendor(ctx, vendor: str, **options) -> None:
    """Update a vendor.

    VENDOR can be a vendor name or ID. Only the fields given are changed.
    """
    service = VendorService(ctx.obj["db"])
    vendor_id = resolve_vendor_or_exit(ctx, service, vendor)
    raw = _collect_fields(options)
    if not raw:
        click.echo("Error: No fields to update", err=True)
        ctx.exit(1)

    try:
        service.update_vendor(vendor_id, raw)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated vendor {vendor_id}")


@vendor_group.command("delete")
@click.argument("vendor", metavar="VENDOR")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_vendor(ctx, vendor: str, yes: bool) -> None:
    """Delete a vendor.

    VENDOR can be a vendor name or ID.

    The vendor can only be deleted if no budget items or draws reference it.
    Reassign them with 'budget update --vendor' or delete them first.
    """
    service = VendorService(ctx.obj["db"])
    vendor_id = resolve_vendor_or_exit(ctx, service, vendor)
    vendor_obj = service.require_vendor(vendor_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete vendor '{vendor_obj.name}' (ID: {vendor_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_vendor(vendor_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted vendor '{vendor_obj.name}'")


def register_commands(cli):
    """Register vendor commands with main CLI."""
    cli.add_command(vendor_group, name="vendor")

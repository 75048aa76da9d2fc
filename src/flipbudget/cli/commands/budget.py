"""Budget line item commands."""

import click
from flipbudget.cli.error_handling import handle_domain_error
from flipbudget.cli.resolution import resolve_project_or_exit, resolve_vendor_or_exit
from flipbudget.domain.budget import BudgetService, actual_variance, effective_budget
from flipbudget.domain.entities import BudgetCategory, ItemStatus
from flipbudget.domain.errors import DomainError
from flipbudget.domain.project import ProjectService
from flipbudget.domain.vendor import VendorService
from flipbudget.utils.amount_parser import parse_amount

_AMOUNT_FIELDS = {
    "underwriting": "underwriting_amount",
    "forecast": "forecast_amount",
    "actual": "actual_amount",
    "qty": "qty",
    "rate": "rate",
}

_TEXT_FIELDS = {
    "status": "status",
    "unit": "unit",
    "cost_type": "cost_type",
    "priority": "priority",
    "room": "room_area",
    "description": "description",
    "notes": "notes",
}


def item_field_options(func):
    """Options shared by 'budget add' and 'budget update'."""
    options = [
        click.option("--underwriting", help="Underwriting (pre-deal) estimate"),
        click.option("--forecast", help="Forecast (revised) estimate"),
        click.option("--actual", help="Actual amount spent (empty string to clear on update)"),
        click.option("--qty", help="Quantity"),
        click.option("--rate", help="Unit rate"),
        click.option("--unit", help="Unit (sf, lf, ea, ls, ...)"),
        click.option("--status", help=f"Status ({', '.join(s.value for s in ItemStatus)})"),
        click.option("--cost-type", "cost_type", help="labor, materials or both"),
        click.option("--priority", help="high, medium or low"),
        click.option("--vendor", help="Vendor name or ID (empty string to clear on update)"),
        click.option("--room", help="Room or area"),
        click.option("--description", help="Description"),
        click.option("--notes", help="Notes"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _item_fields(ctx, db, options: dict) -> dict:
    """Turn command options into budget item fields, exiting on bad input."""
    fields = {}
    for option, field in _AMOUNT_FIELDS.items():
        value = options.get(option)
        if value is None:
            continue
        if value.strip() == "" and field == "actual_amount":
            fields[field] = None
            continue
        try:
            fields[field] = parse_amount(value)
        except ValueError as e:
            click.echo(f"Error: Invalid amount for --{option}: {e}", err=True)
            ctx.exit(1)

    for option, field in _TEXT_FIELDS.items():
        if options.get(option) is not None:
            fields[field] = options[option]

    vendor = options.get("vendor")
    if vendor is not None:
        if vendor.strip() == "":
            fields["vendor_id"] = None
        else:
            fields["vendor_id"] = resolve_vendor_or_exit(ctx, VendorService(db), vendor)
    return fields


def _money(value) -> str:
    if value is None:
        return "-"
    return f"${value:,.2f}"


@click.group()
def budget_group():
    """Manage rehab budget line items."""
    pass


@budget_group.command("add")
@click.argument("project", metavar="PROJECT")
@click.argument("category", metavar="CATEGORY")
@click.argument("item", metavar="ITEM")
@item_field_options
@click.pass_context
def add_item(ctx, project: str, category: str, item: str, **options) -> None:
    """Add a budget line item.

    PROJECT can be a project name or ID. CATEGORY is a category key such as
    demo, plumbing or kitchen.

    Examples:
        flipbudget budget add "123 Main St" kitchen "Cabinets" --underwriting 8000
        flipbudget budget add 1 plumbing "Water heater" --underwriting 1200 --vendor "Joe's Plumbing"
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)
    fields = _item_fields(ctx, db, options)

    try:
        item_id = service.create_item(project_id, category, item, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added budget item '{item}' (ID: {item_id})")


@budget_group.command("list")
@click.argument("project", metavar="PROJECT")
@click.option("--category", help="Only items in this category")
@click.pass_context
def list_items(ctx, project: str, category: str | None) -> None:
    """List budget items grouped by category.

    PROJECT can be a project name or ID.
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)

    items = service.list_items(project_id)
    if category is not None:
        items = [i for i in items if i.category == category]
    if not items:
        click.echo("No budget items found.")
        return

    current = None
    for i in items:
        if i.category != current:
            current = i.category
            try:
                label = BudgetCategory(current).label
            except ValueError:
                label = current
            click.echo(f"\n{label}")
            click.echo("-" * 100)
        variance = actual_variance(i)
        variance_text = f"{variance:+,.2f}" if variance is not None else "-"
        click.echo(
            f"ID: {i.id:4d} | {i.item:28s} | UW {_money(i.underwriting_amount):>12s} | "
            f"FC {_money(i.forecast_amount):>12s} | ACT {_money(i.actual_amount):>12s} | "
            f"Var {variance_text:>12s} | {i.status.value}"
        )


@budget_group.command("summary")
@click.argument("project", metavar="PROJECT")
@click.pass_context
def budget_summary(ctx, project: str) -> None:
    """Show budget totals by category.

    PROJECT can be a project name or ID.
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)

    summary = service.summarize(project_id)
    if not summary.categories:
        click.echo("No budget items found.")
        return

    click.echo(f"\n{'Category':22s} {'Items':>5s} {'Budget':>14s} {'Actual':>14s} {'Variance':>14s}")
    click.echo("-" * 73)
    for key, agg in summary.categories.items():
        try:
            label = BudgetCategory(key).label
        except ValueError:
            label = key
        click.echo(
            f"{label:22s} {agg.item_count:5d} {_money(agg.budget):>14s} "
            f"{_money(agg.actual):>14s} {agg.variance:>+14,.2f}"
        )
    click.echo("-" * 73)
    click.echo(
        f"{'Total':22s} {'':5s} {_money(summary.total_budget):>14s} "
        f"{_money(summary.total_actual):>14s} {summary.total_variance:>+14,.2f}"
    )


@budget_group.command("update")
@click.argument("item_id", type=int)
@click.option("--category", help="Move the item to another category")
@click.option("--item", "item_name", help="New item name")
@item_field_options
@click.pass_context
def update_item(ctx, item_id: int, category: str | None, item_name: str | None, **options) -> None:
    """Update a budget item.

    Only the fields given are changed.

    Examples:
        flipbudget budget update 12 --forecast 9500
        flipbudget budget update 12 --actual 9800 --status complete
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    fields = _item_fields(ctx, db, options)
    if category is not None:
        fields["category"] = category
    if item_name is not None:
        fields["item"] = item_name
    if not fields:
        click.echo("Error: No fields to update", err=True)
        ctx.exit(1)

    try:
        service.update_budget_item(item_id, fields)
        updated = service.require_item(item_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated budget item {item_id} (budget {_money(effective_budget(updated))})")


@budget_group.command("delete")
@click.argument("item_ids", type=int, nargs=-1, required=True)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_items(ctx, item_ids: tuple[int, ...], yes: bool) -> None:
    """Delete one or more budget items."""
    service = BudgetService(ctx.obj["db"])

    if not yes and not click.confirm(f"Delete {len(item_ids)} budget item(s)?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.bulk_delete(list(item_ids))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted {len(item_ids)} budget item(s)")


@budget_group.command("status")
@click.argument("status", metavar="STATUS")
@click.argument("item_ids", type=int, nargs=-1, required=True)
@click.pass_context
def set_status(ctx, status: str, item_ids: tuple[int, ...]) -> None:
    """Set the status of one or more budget items.

    Examples:
        flipbudget budget status complete 3 4 5
    """
    service = BudgetService(ctx.obj["db"])
    try:
        service.bulk_update_status(list(item_ids), status)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Set {len(item_ids)} budget item(s) to {status}")


@budget_group.command("reorder")
@click.argument("item_ids", type=int, nargs=-1, required=True)
@click.pass_context
def reorder_items(ctx, item_ids: tuple[int, ...]) -> None:
    """Reorder budget items: each item takes its position in the list.

    Examples:
        flipbudget budget reorder 7 5 6
    """
    service = BudgetService(ctx.obj["db"])
    try:
        service.reorder(list(item_ids))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Reordered {len(item_ids)} budget item(s)")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")

"""Project management commands."""

import click
from flipbudget.cli.error_handling import echo_warnings, handle_domain_error
from flipbudget.cli.resolution import resolve_project_or_exit
from flipbudget.domain.budget import aggregate_budget
from flipbudget.domain.entities import MaoMethod, ProjectStatus, PropertyType
from flipbudget.domain.errors import DomainError
from flipbudget.domain.project import ProjectService
from flipbudget.domain.settings import CalculationSettingsService
from flipbudget.domain.validation import (
    get_project_form_warnings,
    validate_project_form,
)

# (field, help) for every editable project field except name
PROJECT_FIELD_OPTIONS = [
    ("address", "Street address"),
    ("city", "City"),
    ("state", "2-letter state abbreviation"),
    ("zip", "ZIP code (55401 or 55401-1234)"),
    ("beds", "Bedrooms"),
    ("baths", "Bathrooms (in 0.5 steps)"),
    ("sqft", "Square footage"),
    ("year_built", "Year built"),
    ("property_type", f"Property type ({', '.join(t.value for t in PropertyType)})"),
    ("arv", "After repair value"),
    ("purchase_price", "Purchase price"),
    ("closing_costs", "Closing costs"),
    ("holding_costs_monthly", "Monthly holding costs"),
    ("hold_months", "Expected hold period in months"),
    ("selling_cost_percent", "Selling costs as a percentage of ARV"),
    ("contingency_percent", "Rehab contingency percentage"),
    ("status", f"Status ({', '.join(s.value for s in ProjectStatus)})"),
    ("contract_date", "Contract date (YYYY-MM-DD or relative like 'today')"),
    ("close_date", "Close date"),
    ("rehab_start_date", "Rehab start date"),
    ("target_complete_date", "Target completion date"),
    ("list_date", "List date"),
    ("sale_date", "Sale date"),
    ("notes", "Notes"),
]


def project_field_options(func):
    """Add one --option per project field."""
    for field, help_text in reversed(PROJECT_FIELD_OPTIONS):
        option_name = "--" + field.replace("_", "-")
        func = click.option(option_name, field, default=None, help=help_text)(func)
    return func


def _collect_fields(options: dict) -> dict:
    """Keep only the options given on the command line."""
    return {field: value for field, value in options.items() if value is not None}


def _money(value) -> str:
    if value is None:
        return "-"
    return f"${value:,.2f}"


def mao_label(settings) -> str:
    """Short description of how MAO is computed."""
    if settings.mao_method in (MaoMethod.SEVENTY_RULE, MaoMethod.CUSTOM_PERCENTAGE):
        return f"{settings.mao_arv_multiplier * 100:.0f}% rule"
    return settings.mao_method.value.replace("_", " ")


@click.group()
def project_group():
    """Manage fix & flip projects."""
    pass


@project_group.command("create")
@click.argument("name", metavar="PROJECT_NAME")
@project_field_options
@click.pass_context
def create_project(ctx, name: str, **options) -> None:
    """Create a new project.

    Unspecified fields take the new-project defaults (state MN, 4 month hold,
    8% selling costs, 10% contingency, status lead).

    Examples:
        flipbudget project create "123 Main St" --arv 250000 --purchase-price 150000
        flipbudget project create "456 Oak Ave" --city Minneapolis --contract-date 2024-01-10
    """
    service = ProjectService(ctx.obj["db"])
    raw = {"name": name, **_collect_fields(options)}

    try:
        project_id, warnings = service.create_project(raw)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created project '{name.strip()}' (ID: {project_id})")
    echo_warnings(warnings)


@project_group.command("validate")
@click.option("--name", default=None, help="Project name")
@project_field_options
@click.pass_context
def validate_project(ctx, **options) -> None:
    """Check project values without saving them.

    Examples:
        flipbudget project validate --name "123 Main St" --arv 90000 --purchase-price 100000
    """
    try:
        values = validate_project_form(_collect_fields(options))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("Valid")
    echo_warnings(get_project_form_warnings(values))


@project_group.command("list")
@click.option("--status", default=None, help="Only projects with this status")
@click.pass_context
def list_projects(ctx, status: str | None) -> None:
    """List projects."""
    service = ProjectService(ctx.obj["db"])

    try:
        projects = service.list_projects(status=status)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not projects:
        click.echo("No projects found.")
        return

    click.echo("\nProjects:")
    click.echo("-" * 80)
    for p in projects:
        click.echo(
            f"ID: {p.id:3d} | {p.name:30s} | {p.status.value:14s} | "
            f"ARV: {_money(p.arv):>14s} | Purchase: {_money(p.purchase_price):>14s}"
        )


@project_group.command("show")
@click.argument("project", metavar="PROJECT")
@click.pass_context
def show_project(ctx, project: str) -> None:
    """Show project details, budget totals and deal analysis.

    PROJECT can be a project name or ID.
    """
    db = ctx.obj["db"]
    service = ProjectService(db)
    project_id = resolve_project_or_exit(ctx, service, project)
    p = service.require_project(project_id)

    click.echo(f"\n{p.name} (ID: {p.id})")
    click.echo("-" * 60)
    location = ", ".join(part for part in (p.address, p.city, p.state, p.zip) if part)
    if location:
        click.echo(f"Location:       {location}")
    click.echo(f"Type:           {p.property_type.value}")
    click.echo(f"Status:         {p.status.value}")
    details = [
        f"{p.beds} bd" if p.beds is not None else None,
        f"{p.baths} ba" if p.baths is not None else None,
        f"{p.sqft:,} sqft" if p.sqft is not None else None,
        f"built {p.year_built}" if p.year_built is not None else None,
    ]
    if any(details):
        click.echo(f"Property:       {' | '.join(d for d in details if d)}")
    click.echo(f"ARV:            {_money(p.arv)}")
    click.echo(f"Purchase price: {_money(p.purchase_price)}")
    click.echo(f"Closing costs:  {_money(p.closing_costs)}")
    click.echo(f"Holding:        {_money(p.holding_costs_monthly)}/month for {p.hold_months} months")
    click.echo(f"Selling costs:  {p.selling_cost_percent}%")
    click.echo(f"Contingency:    {p.contingency_percent}%")
    for label, value in (
        ("Contract", p.contract_date),
        ("Close", p.close_date),
        ("Rehab start", p.rehab_start_date),
        ("Target done", p.target_complete_date),
        ("Listed", p.list_date),
        ("Sold", p.sale_date),
    ):
        if value is not None:
            click.echo(f"{label + ':':16s}{value.isoformat()}")

    summary = aggregate_budget(db.list_budget_items(project_id=project_id))
    click.echo("\nBudget:")
    click.echo(f"  Underwriting: {_money(summary.total_underwriting)}")
    click.echo(f"  Forecast:     {_money(summary.total_forecast)}")
    click.echo(f"  Budget:       {_money(summary.total_budget)}")
    click.echo(f"  Actual:       {_money(summary.total_actual)}")

    settings = CalculationSettingsService(db).get_default_settings()
    metrics = service.get_deal_metrics(project_id, settings)
    click.echo(f"\nDeal analysis (active: {metrics.active_scenario}):")
    for name in ("underwriting", "forecast", "actual"):
        scenario = metrics.scenario(name)
        click.echo(
            f"  {name:12s} rehab {_money(scenario.rehab_budget):>14s} | "
            f"investment {_money(scenario.total_investment):>14s} | "
            f"profit {_money(scenario.gross_profit):>14s} | ROI {scenario.roi:.1f}%"
        )
    click.echo(f"  MAO ({mao_label(settings)}): {_money(metrics.mao)}  Spread: {_money(metrics.spread)}")
    click.echo(f"  Rating: {metrics.rating.value}")

    if p.notes:
        click.echo(f"\nNotes:\n{p.notes}")


@project_group.command("update")
@click.argument("project", metavar="PROJECT")
@click.option("--name", default=None, help="New project name")
@project_field_options
@click.pass_context
def update_project(ctx, project: str, **options) -> None:
    """Update a project.

    PROJECT can be a project name or ID. Only the fields given are changed;
    pass an empty string to clear an optional field.

    Examples:
        flipbudget project update "123 Main St" --status under_contract --contract-date today
        flipbudget project update 1 --notes ""
    """
    service = ProjectService(ctx.obj["db"])
    project_id = resolve_project_or_exit(ctx, service, project)
    raw = _collect_fields(options)
    if not raw:
        click.echo("Error: No fields to update", err=True)
        ctx.exit(1)

    try:
        warnings = service.update_project(project_id, raw)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Updated project {project_id}")
    echo_warnings(warnings)


@project_group.command("delete")
@click.argument("project", metavar="PROJECT")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_project(ctx, project: str, yes: bool) -> None:
    """Delete a project with its budget items and draws.

    PROJECT can be a project name or ID. Journal pages attached to the
    project are kept as general pages.
    """
    service = ProjectService(ctx.obj["db"])
    project_id = resolve_project_or_exit(ctx, service, project)
    project_obj = service.require_project(project_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete project '{project_obj.name}' (ID: {project_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_project(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted project '{project_obj.name}'")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")

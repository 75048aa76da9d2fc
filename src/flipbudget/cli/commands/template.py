"""Budget template commands."""

import click
from flipbudget.cli.error_handling import handle_domain_error
from flipbudget.cli.resolution import resolve_project_or_exit, resolve_template_or_exit
from flipbudget.domain.entities import ApplyMode, BudgetCategory, PropertyType, ScopeLevel
from flipbudget.domain.errors import DomainError
from flipbudget.domain.project import ProjectService
from flipbudget.domain.template import TemplateService


def _money(value) -> str:
    return f"${value:,.2f}"


@click.group()
def template_group():
    """Manage reusable budget templates."""
    pass


@template_group.command("list")
@click.option("--favorites", is_flag=True, help="Only favorite templates")
@click.option("--property-type", "property_type", help=f"Only templates for ({', '.join(t.value for t in PropertyType)})")
@click.option("--scope", help=f"Only templates with this scope ({', '.join(s.value for s in ScopeLevel)})")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive templates")
@click.pass_context
def list_templates(
    ctx, favorites: bool, property_type: str | None, scope: str | None, include_inactive: bool
) -> None:
    """List budget templates, favorites first then most used."""
    service = TemplateService(ctx.obj["db"])
    try:
        templates = service.list_templates(
            favorites_only=favorites,
            property_type=property_type,
            scope_level=scope,
            include_inactive=include_inactive,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    if not templates:
        click.echo("No templates found.")
        return

    click.echo("\nBudget templates:")
    click.echo("-" * 80)
    for t in templates:
        star = "*" if t.is_favorite else " "
        scope_text = t.scope_level.value if t.scope_level else "-"
        click.echo(f"{star} ID: {t.id:3d} | {t.name:30s} | Scope: {scope_text:6s} | Used: {t.times_used}")


@template_group.command("show")
@click.argument("template", metavar="TEMPLATE")
@click.pass_context
def show_template(ctx, template: str) -> None:
    """Show a template and its items.

    TEMPLATE can be a template name or ID.
    """
    service = TemplateService(ctx.obj["db"])
    template_id = resolve_template_or_exit(ctx, service, template)
    t = service.require_template(template_id)
    items = service.list_template_items(template_id)

    click.echo(f"\n{t.name} (ID: {t.id})")
    click.echo("-" * 60)
    if t.description:
        click.echo(t.description)
    if t.property_type:
        click.echo(f"Property type: {t.property_type.value}")
    if t.scope_level:
        click.echo(f"Scope:         {t.scope_level.value}")
    click.echo(f"Used:          {t.times_used} time{'s' if t.times_used != 1 else ''}")

    if not items:
        click.echo("\nNo items.")
        return
    click.echo("")
    for i in items:
        try:
            label = BudgetCategory(i.category).label
        except ValueError:
            label = i.category
        click.echo(f"  {label:20s} | {i.item:28s} | {_money(i.default_amount):>12s} | {i.unit.value}")
    total = sum(i.default_amount for i in items)
    click.echo(f"\n  Total: {_money(total)}")


@template_group.command("save")
@click.argument("project", metavar="PROJECT")
@click.argument("name", metavar="TEMPLATE_NAME")
@click.option("--item", "item_ids", type=int, multiple=True, help="Only this item ID (repeatable)")
@click.option("--no-amounts", is_flag=True, help="Save items without amounts")
@click.option("--description", help="Template description")
@click.option("--scope", help=f"Scope level ({', '.join(s.value for s in ScopeLevel)})")
@click.pass_context
def save_template(
    ctx,
    project: str,
    name: str,
    item_ids: tuple[int, ...],
    no_amounts: bool,
    description: str | None,
    scope: str | None,
) -> None:
    """Save a project's budget as a template.

    PROJECT can be a project name or ID.

    Examples:
        flipbudget template save "123 Main St" "Kitchen refresh" --scope light
        flipbudget template save 1 "Standard bath" --item 4 --item 5
    """
    db = ctx.obj["db"]
    service = TemplateService(db)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)
    try:
        template_id = service.save_project_as_template(
            project_id,
            name,
            item_ids=list(item_ids) or None,
            include_amounts=not no_amounts,
            description=description,
            scope_level=scope,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    count = len(service.list_template_items(template_id))
    click.echo(f"Saved template '{name.strip()}' (ID: {template_id}) with {count} item{'s' if count != 1 else ''}")


@template_group.command("apply")
@click.argument("template", metavar="TEMPLATE")
@click.argument("project", metavar="PROJECT")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ApplyMode]),
    default=ApplyMode.SKIP.value,
    show_default=True,
    help="What to do with items the project already has",
)
@click.option("--no-amounts", is_flag=True, help="Add items without amounts")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt for --mode replace")
@click.pass_context
def apply_template(ctx, template: str, project: str, mode: str, no_amounts: bool, yes: bool) -> None:
    """Add a template's items to a project's budget.

    TEMPLATE and PROJECT can be names or IDs. Items match existing ones by
    category and name.
    """
    db = ctx.obj["db"]
    service = TemplateService(db)
    template_id = resolve_template_or_exit(ctx, service, template)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)

    if mode == ApplyMode.REPLACE.value and not yes and not click.confirm(
        "Replace mode deletes every existing budget item in the project. Continue?"
    ):
        click.echo("Cancelled.")
        return

    try:
        result = service.apply_template(template_id, project_id, mode=mode, include_amounts=not no_amounts)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Applied template {template_id}: {result.added} added, "
        f"{result.updated} updated, {result.skipped} skipped"
    )


@template_group.command("duplicate")
@click.argument("template", metavar="TEMPLATE")
@click.pass_context
def duplicate_template(ctx, template: str) -> None:
    """Copy a template and its items."""
    service = TemplateService(ctx.obj["db"])
    template_id = resolve_template_or_exit(ctx, service, template)
    new_id = service.duplicate_template(template_id)
    click.echo(f"Created '{service.require_template(new_id).name}' (ID: {new_id})")


@template_group.command("favorite")
@click.argument("template", metavar="TEMPLATE")
@click.option("--off", is_flag=True, help="Remove from favorites")
@click.pass_context
def favorite_template(ctx, template: str, off: bool) -> None:
    """Mark a template as favorite."""
    service = TemplateService(ctx.obj["db"])
    template_id = resolve_template_or_exit(ctx, service, template)
    service.set_favorite(template_id, not off)
    click.echo(f"{'Removed template from' if off else 'Added template to'} favorites")


@template_group.command("delete")
@click.argument("template", metavar="TEMPLATE")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_template(ctx, template: str, yes: bool) -> None:
    """Delete a template. Budgets created from it are kept."""
    service = TemplateService(ctx.obj["db"])
    template_id = resolve_template_or_exit(ctx, service, template)
    t = service.require_template(template_id)

    if not yes and not click.confirm(f"Are you sure you want to delete template '{t.name}' (ID: {template_id})?"):
        click.echo("Deletion cancelled.")
        return

    service.delete_template(template_id)
    click.echo(f"Deleted template '{t.name}'")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")

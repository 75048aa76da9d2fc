"""Journal page commands."""

import asyncio

import click
from flipbudget.cli.error_handling import handle_domain_error
from flipbudget.cli.resolution import resolve_project_or_exit
from flipbudget.domain.autosave import DEFAULT_QUIET_PERIOD, AutosaveCoordinator
from flipbudget.domain.entities import JournalPageType
from flipbudget.domain.errors import DomainError
from flipbudget.domain.journal import JournalService
from flipbudget.domain.project import ProjectService

_PAGE_TYPES = ", ".join(t.value for t in JournalPageType)


def _document_fields(page) -> dict:
    return {
        "title": page.title,
        "content": page.content or "",
        "icon": page.icon,
        "page_type": page.page_type.value,
    }


async def _apply_edits(service: JournalService, page, edits: list[dict], quiet_period: float):
    """Feed edits through an autosave coordinator and save on blur."""
    coordinator = AutosaveCoordinator(
        service, page.id, initial=_document_fields(page), quiet_period=quiet_period
    )
    try:
        for edit in edits:
            coordinator.update(**edit)
        saved = await coordinator.blur()
    finally:
        await coordinator.close()
    return saved, coordinator.last_error


@click.group()
def journal_group():
    """Keep a journal of notes, meetings and site visits."""
    pass


@journal_group.command("new")
@click.option("--title", help="Page title (default 'Untitled')")
@click.option("--content", help="Page content")
@click.option("--icon", help="Page icon")
@click.option("--type", "page_type", help=f"Page type ({_PAGE_TYPES}), default note")
@click.option("--project", help="Attach to this project (name or ID)")
@click.pass_context
def new_page(ctx, title: str | None, content: str | None, icon: str | None,
             page_type: str | None, project: str | None) -> None:
    """Create a journal page.

    Examples:
        flipbudget journal new --title "Walkthrough" --type site_visit --project "123 Main St"
        flipbudget journal new --title "Lender call" --type meeting
    """
    db = ctx.obj["db"]
    service = JournalService(db)

    fields = {}
    for key, value in (("title", title), ("content", content), ("icon", icon), ("page_type", page_type)):
        if value is not None:
            fields[key] = value
    if project is not None:
        fields["project_id"] = resolve_project_or_exit(ctx, ProjectService(db), project)

    try:
        page_id = service.create_page(**fields)
        page = service.fetch_document(page_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created journal page '{page.title}' (ID: {page_id})")


@journal_group.command("list")
@click.option("--project", help="Only pages for this project (name or ID)")
@click.option("--general", is_flag=True, help="Only pages not attached to a project")
@click.option("--type", "page_type", help="Only pages of this type")
@click.option("--search", help="Search titles and content")
@click.option("--archived", is_flag=True, help="Include archived pages")
@click.option("--pinned", is_flag=True, help="Only pinned pages")
@click.pass_context
def list_pages(ctx, project: str | None, general: bool, page_type: str | None,
               search: str | None, archived: bool, pinned: bool) -> None:
    """List journal pages, pinned first then most recently updated."""
    db = ctx.obj["db"]
    service = JournalService(db)

    project_id = None
    if project is not None:
        project_id = resolve_project_or_exit(ctx, ProjectService(db), project)

    pages = service.list_pages(
        project_id=project_id,
        general_only=general,
        page_type=page_type,
        search=search,
        include_archived=archived,
        pinned_only=pinned,
    )
    if not pages:
        click.echo("No journal pages found.")
        return

    click.echo("\nJournal:")
    click.echo("-" * 80)
    for p in pages:
        markers = ("*" if p.is_pinned else " ") + ("A" if p.is_archived else " ")
        click.echo(
            f"{markers} ID: {p.id:3d} | {p.icon} {p.title:30s} | {p.page_type.value:10s} | "
            f"{p.updated_at:%Y-%m-%d %H:%M}"
        )


@journal_group.command("show")
@click.argument("page_id", type=int)
@click.pass_context
def show_page(ctx, page_id: int) -> None:
    """Show a journal page."""
    service = JournalService(ctx.obj["db"])
    try:
        page = service.fetch_document(page_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{page.icon} {page.title}")
    flags = [page.page_type.value]
    if page.is_pinned:
        flags.append("pinned")
    if page.is_archived:
        flags.append("archived")
    click.echo(f"({', '.join(flags)}; updated {page.updated_at:%Y-%m-%d %H:%M})")
    click.echo("-" * 60)
    if page.content:
        click.echo(page.content)


@journal_group.command("edit")
@click.argument("page_id", type=int)
@click.option("--title", help="New title")
@click.option("--content", help="Replace the content")
@click.option("--append", multiple=True, help="Append a line to the content (repeatable)")
@click.option("--icon", help="New icon")
@click.option("--type", "page_type", help=f"New page type ({_PAGE_TYPES})")
@click.option("--editor", is_flag=True, help="Edit the content in $EDITOR")
@click.option(
    "--delay",
    type=float,
    default=DEFAULT_QUIET_PERIOD,
    show_default=True,
    envvar="FLIPBUDGET_AUTOSAVE_DELAY",
    help="Autosave quiet period in seconds (overrides FLIPBUDGET_AUTOSAVE_DELAY)",
)
@click.pass_context
def edit_page(ctx, page_id: int, title: str | None, content: str | None, append: tuple[str, ...],
              icon: str | None, page_type: str | None, editor: bool, delay: float) -> None:
    """Edit a journal page.

    Edits are applied through autosave and written once when the command
    finishes. Nothing is written if the page ends up unchanged.

    Examples:
        flipbudget journal edit 3 --title "Final walkthrough"
        flipbudget journal edit 3 --append "Inspector signed off on electrical"
        flipbudget journal edit 3 --editor
    """
    service = JournalService(ctx.obj["db"])
    try:
        page = service.fetch_document(page_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    edits = []
    for key, value in (("title", title), ("icon", icon), ("page_type", page_type)):
        if value is not None:
            edits.append({key: value})

    text = page.content or ""
    if editor:
        edited = click.edit(text)
        if edited is not None:
            text = edited.rstrip("\n")
    if content is not None:
        text = content
    for line in append:
        text = f"{text}\n{line}" if text else line
    if text != (page.content or ""):
        edits.append({"content": text})

    if not edits:
        click.echo("Nothing to change.")
        return

    saved, error = asyncio.run(_apply_edits(service, page, edits, delay))
    if not saved:
        if isinstance(error, DomainError):
            handle_domain_error(ctx, error)
            return
        click.echo(f"Error: Could not save journal page {page_id}: {error}", err=True)
        ctx.exit(1)
    click.echo(f"Saved journal page {page_id}")


def _set_flag(ctx, page_id: int, flag: str, value: bool, done: str) -> None:
    service = JournalService(ctx.obj["db"])
    try:
        service.fetch_document(page_id)
        service.toggle_flag(page_id, flag, value)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"{done} journal page {page_id}")


@journal_group.command("pin")
@click.argument("page_id", type=int)
@click.pass_context
def pin_page(ctx, page_id: int) -> None:
    """Pin a page to the top of the list."""
    _set_flag(ctx, page_id, "is_pinned", True, "Pinned")


@journal_group.command("unpin")
@click.argument("page_id", type=int)
@click.pass_context
def unpin_page(ctx, page_id: int) -> None:
    """Unpin a page."""
    _set_flag(ctx, page_id, "is_pinned", False, "Unpinned")


@journal_group.command("archive")
@click.argument("page_id", type=int)
@click.pass_context
def archive_page(ctx, page_id: int) -> None:
    """Archive a page. Archived pages are hidden from 'journal list'."""
    _set_flag(ctx, page_id, "is_archived", True, "Archived")


@journal_group.command("restore")
@click.argument("page_id", type=int)
@click.pass_context
def restore_page(ctx, page_id: int) -> None:
    """Restore an archived page."""
    _set_flag(ctx, page_id, "is_archived", False, "Restored")


@journal_group.command("delete")
@click.argument("page_id", type=int)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_page(ctx, page_id: int, yes: bool) -> None:
    """Delete a journal page."""
    service = JournalService(ctx.obj["db"])
    try:
        page = service.fetch_document(page_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not yes and not click.confirm(f"Are you sure you want to delete journal page '{page.title}'?"):
        click.echo("Deletion cancelled.")
        return

    service.delete_page(page_id)
    click.echo(f"Deleted journal page '{page.title}'")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")

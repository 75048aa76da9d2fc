"""Main CLI entry point."""

import click
from flipbudget.database.factories import create_sqlite_database
from flipbudget.logging_config import configure_logging

# Import and register all commands at module level
from flipbudget.cli.commands import (
    project,
    budget,
    vendor,
    draw,
    journal,
    template,
    settings,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FLIPBUDGET_DB_PATH environment variable)",
    envvar="FLIPBUDGET_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (overrides FLIPBUDGET_LOG_LEVEL environment variable)",
    envvar="FLIPBUDGET_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Flipbudget - Budget tracking for fix & flip projects.

    Track projects, their three-column rehab budgets (underwriting, forecast,
    actual), vendors, construction draws and a project journal. Budget
    templates copy line items between projects, and calculation settings
    control how deals are graded.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
project.register_commands(cli)
budget.register_commands(cli)
vendor.register_commands(cli)
draw.register_commands(cli)
journal.register_commands(cli)
template.register_commands(cli)
settings.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

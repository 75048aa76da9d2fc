"""Calculation settings commands."""

import click
from flipbudget.cli.error_handling import handle_domain_error
from flipbudget.cli.commands.project import mao_label
from flipbudget.domain.entities import MaoMethod
from flipbudget.domain.errors import DomainError
from flipbudget.domain.settings import CalculationSettingsService
from flipbudget.utils.amount_parser import parse_amount

# option name -> settings field, parsed as amounts
_AMOUNT_OPTIONS = {
    "multiplier": "mao_arv_multiplier",
    "target_profit": "mao_target_profit",
    "target_profit_percent": "mao_target_profit_percent",
    "excellent": "roi_threshold_excellent",
    "good": "roi_threshold_good",
    "fair": "roi_threshold_fair",
    "poor": "roi_threshold_poor",
}

_FLAG_OPTIONS = {
    "holding": "mao_include_holding_costs",
    "selling": "mao_include_selling_costs",
    "closing": "mao_include_closing_costs",
}


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


@click.group()
def settings_group():
    """Configure deal calculations (MAO method, ROI ratings)."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx) -> None:
    """Show the calculation settings used for deal analysis."""
    service = CalculationSettingsService(ctx.obj["db"])
    s = service.get_default_settings()

    click.echo(f"\n{s.name}" + (" (built-in defaults)" if s.id is None else f" (ID: {s.id})"))
    click.echo("-" * 60)
    click.echo(f"MAO method:         {s.mao_method.value} ({mao_label(s)})")
    click.echo(f"ARV multiplier:     {s.mao_arv_multiplier}")
    click.echo(f"Target profit:      ${s.mao_target_profit:,.2f}")
    click.echo(f"Target margin:      {s.mao_target_profit_percent}%")
    click.echo(
        f"MAO includes:       holding {_yes_no(s.mao_include_holding_costs)} | "
        f"selling {_yes_no(s.mao_include_selling_costs)} | "
        f"closing {_yes_no(s.mao_include_closing_costs)}"
    )
    click.echo(
        f"ROI ratings:        excellent {s.roi_threshold_excellent}% | good {s.roi_threshold_good}% | "
        f"fair {s.roi_threshold_fair}% | poor {s.roi_threshold_poor}%"
    )


@settings_group.command("set")
@click.option("--mao-method", "mao_method", type=click.Choice([m.value for m in MaoMethod]), help="MAO method")
@click.option("--multiplier", help="ARV multiplier for the percentage rules (e.g. 0.70)")
@click.option("--target-profit", "target_profit", help="Target profit for arv_minus_all and net_profit_target")
@click.option("--target-profit-percent", "target_profit_percent", help="Target margin for gross_margin")
@click.option("--include-holding/--exclude-holding", "holding", default=None, help="Subtract holding costs")
@click.option("--include-selling/--exclude-selling", "selling", default=None, help="Subtract selling costs")
@click.option("--include-closing/--exclude-closing", "closing", default=None, help="Subtract closing costs")
@click.option("--excellent", help="Minimum ROI % rated excellent")
@click.option("--good", help="Minimum ROI % rated good")
@click.option("--fair", help="Minimum ROI % rated fair")
@click.option("--poor", help="Minimum ROI % rated poor")
@click.pass_context
def set_settings(ctx, mao_method: str | None, **options) -> None:
    """Change calculation settings. Only the options given are changed.

    Examples:
        flipbudget settings set --multiplier 0.75 --include-closing
        flipbudget settings set --mao-method net_profit_target --target-profit 40k
    """
    fields = {}
    if mao_method is not None:
        fields["mao_method"] = mao_method
    for option, field in _AMOUNT_OPTIONS.items():
        value = options.get(option)
        if value is None:
            continue
        try:
            fields[field] = parse_amount(value)
        except ValueError as e:
            click.echo(f"Error: Invalid amount for --{option.replace('_', '-')}: {e}", err=True)
            ctx.exit(1)
    for option, field in _FLAG_OPTIONS.items():
        if options.get(option) is not None:
            fields[field] = options[option]

    if not fields:
        click.echo("Error: No settings to change", err=True)
        ctx.exit(1)

    service = CalculationSettingsService(ctx.obj["db"])
    try:
        settings_id = service.save_settings(fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Saved calculation settings (ID: {settings_id})")


@settings_group.command("reset")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def reset_settings(ctx, yes: bool) -> None:
    """Discard saved settings and return to the built-in defaults."""
    service = CalculationSettingsService(ctx.obj["db"])
    current = service.get_default_settings()
    if current.id is None:
        click.echo("Already using the built-in defaults.")
        return
    if not yes and not click.confirm("Reset calculation settings to the built-in defaults?"):
        click.echo("Reset cancelled.")
        return
    service.delete_settings(current.id)
    click.echo("Calculation settings reset to the built-in defaults")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")

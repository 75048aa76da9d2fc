"""Deal analysis: profitability of a project under each budget phase."""

from decimal import Decimal
from typing import Optional

from flipbudget.domain.entities import (
    BudgetSummary,
    CalculationSettings,
    DealMetrics,
    DealRating,
    DealScenario,
    MaoMethod,
    Project,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DEFAULT_SETTINGS = CalculationSettings()


def _money(value: Optional[Decimal]) -> Decimal:
    return value if value is not None else ZERO


def _percent_change(base: Decimal, value: Decimal) -> Decimal:
    if base == 0:
        return ZERO
    return (value - base) / base * HUNDRED


def _scenario(
    name: str,
    rehab_budget: Decimal,
    project: Project,
    holding_costs_total: Decimal,
    selling_costs: Decimal,
) -> DealScenario:
    total_investment = (
        _money(project.purchase_price)
        + rehab_budget
        + _money(project.closing_costs)
        + holding_costs_total
        + selling_costs
    )
    gross_profit = _money(project.arv) - total_investment
    roi = gross_profit / total_investment * HUNDRED if total_investment != 0 else ZERO
    return DealScenario(
        name=name,
        rehab_budget=rehab_budget,
        total_investment=total_investment,
        gross_profit=gross_profit,
        roi=roi,
    )


def maximum_allowable_offer(
    arv: Decimal,
    rehab: Decimal,
    holding_costs: Decimal,
    selling_costs: Decimal,
    closing_costs: Decimal,
    settings: CalculationSettings = DEFAULT_SETTINGS,
) -> Decimal:
    """Highest purchase price that still meets the configured return.

    ``seventy_rule``, ``custom_percentage`` and ``net_profit_target`` subtract
    the rehab plus whichever holding, selling and closing costs the settings
    include. ``arv_minus_all`` and ``gross_margin`` always subtract every cost.
    """
    included = rehab
    if settings.mao_include_holding_costs:
        included += holding_costs
    if settings.mao_include_selling_costs:
        included += selling_costs
    if settings.mao_include_closing_costs:
        included += closing_costs
    all_costs = rehab + holding_costs + selling_costs + closing_costs

    method = MaoMethod(settings.mao_method)
    if method in (MaoMethod.SEVENTY_RULE, MaoMethod.CUSTOM_PERCENTAGE):
        return arv * settings.mao_arv_multiplier - included
    if method == MaoMethod.GROSS_MARGIN:
        return arv * (1 - settings.mao_target_profit_percent / HUNDRED) - all_costs
    if method == MaoMethod.ARV_MINUS_ALL:
        return arv - all_costs - settings.mao_target_profit
    return arv - included - settings.mao_target_profit


def rate_roi(roi: Decimal, settings: CalculationSettings = DEFAULT_SETTINGS) -> DealRating:
    """Grade an ROI percentage against the settings' thresholds."""
    if roi >= settings.roi_threshold_excellent:
        return DealRating.EXCELLENT
    if roi >= settings.roi_threshold_good:
        return DealRating.GOOD
    if roi >= settings.roi_threshold_fair:
        return DealRating.FAIR
    if roi >= settings.roi_threshold_poor:
        return DealRating.POOR
    return DealRating.BAD


def calculate_deal_metrics(
    project: Project,
    summary: BudgetSummary,
    settings: Optional[CalculationSettings] = None,
) -> DealMetrics:
    """Compute deal metrics for a project from its budget summary.

    Underwriting and forecast rehab budgets carry the project's contingency;
    the actual scenario uses money spent as recorded. MAO is always taken
    from the underwriting rehab.

    Args:
        project: Project with purchase, ARV and cost assumptions
        summary: Aggregated budget for the same project
        settings: MAO method and ROI thresholds (built-in defaults if None)

    Returns:
        DealMetrics with all three scenarios
    """
    if settings is None:
        settings = DEFAULT_SETTINGS

    arv = _money(project.arv)
    contingency = 1 + _money(project.contingency_percent) / HUNDRED
    holding_costs_total = _money(project.holding_costs_monthly) * (project.hold_months or 0)
    selling_costs = arv * _money(project.selling_cost_percent) / HUNDRED

    underwriting_rehab = summary.total_underwriting * contingency
    # Forecast falls back to underwriting per item, same as the effective budget
    forecast_rehab = summary.total_budget * contingency
    actual_rehab = summary.total_actual

    scenarios = {
        name: _scenario(name, rehab, project, holding_costs_total, selling_costs)
        for name, rehab in (
            ("underwriting", underwriting_rehab),
            ("forecast", forecast_rehab),
            ("actual", actual_rehab),
        )
    }

    if summary.total_actual > 0:
        active = "actual"
    elif summary.total_forecast > 0:
        active = "forecast"
    else:
        active = "underwriting"

    mao = maximum_allowable_offer(
        arv,
        underwriting_rehab,
        holding_costs_total,
        selling_costs,
        _money(project.closing_costs),
        settings,
    )
    return DealMetrics(
        underwriting=scenarios["underwriting"],
        forecast=scenarios["forecast"],
        actual=scenarios["actual"],
        holding_costs_total=holding_costs_total,
        selling_costs=selling_costs,
        mao=mao,
        spread=mao - _money(project.purchase_price),
        active_scenario=active,
        forecast_variance_percent=_percent_change(summary.total_underwriting, summary.total_budget),
        actual_variance_percent=_percent_change(summary.total_budget, summary.total_actual),
        rating=rate_roi(scenarios[active].roi, settings),
    )

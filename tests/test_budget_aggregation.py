"""Tests for the budget aggregation functions."""

from decimal import Decimal

from flipbudget.domain.budget import (
    actual_variance,
    aggregate_budget,
    effective_actual,
    effective_budget,
    forecast_variance,
    sort_by_category,
)
from flipbudget.domain.entities import BudgetItem, ItemStatus


def make_item(item_id, category, underwriting="0", forecast="0", actual=None, sort_order=0, **kwargs):
    return BudgetItem(
        id=item_id,
        project_id=1,
        category=category,
        item=f"Item {item_id}",
        underwriting_amount=Decimal(underwriting),
        forecast_amount=Decimal(forecast),
        actual_amount=Decimal(actual) if actual is not None else None,
        sort_order=sort_order,
        **kwargs,
    )


def test_effective_budget_uses_underwriting_until_forecast_set():
    """Test that the effective budget falls back to underwriting."""
    """Forecast of zero means no forecast yet."""
    assert effective_budget(make_item(1, "demo", underwriting="1000")) == Decimal("1000")
    assert effective_budget(make_item(1, "demo", underwriting="1000", forecast="1200")) == Decimal("1200")


def test_effective_budget_forecast_can_be_lower():
    """Test that a lower forecast replaces underwriting."""
    assert effective_budget(make_item(1, "demo", underwriting="1000", forecast="800")) == Decimal("800")


def test_effective_actual_defaults_to_zero():
    """Test that a missing actual counts as zero."""
    assert effective_actual(make_item(1, "demo", underwriting="500")) == Decimal("0")
    assert effective_actual(make_item(1, "demo", actual="450")) == Decimal("450")


def test_variances():
    """Test forecast and actual variance."""
    item = make_item(1, "kitchen", underwriting="8000", forecast="9000", actual="9500")
    assert forecast_variance(item) == Decimal("1000")
    assert actual_variance(item) == Decimal("500")


def test_actual_variance_is_none_without_actual():
    """Test that actual variance is None until an actual is set."""
    assert actual_variance(make_item(1, "demo", underwriting="1000")) is None


def test_actual_variance_negative_when_under_budget():
    """Test that spending under budget gives a negative variance."""
    item = make_item(1, "demo", underwriting="1000", actual="900")
    assert actual_variance(item) == Decimal("-100")


def test_aggregate_empty_input():
    """Test aggregating no items."""
    summary = aggregate_budget([])
    assert summary.categories == {}
    assert summary.total_budget == Decimal("0")
    assert summary.total_actual == Decimal("0")


def test_aggregate_groups_by_category_in_first_seen_order():
    """Test that categories keep the order they first appear in."""
    items = [
        make_item(1, "kitchen", underwriting="100"),
        make_item(2, "demo", underwriting="50"),
        make_item(3, "kitchen", underwriting="200", forecast="250", actual="260"),
    ]
    summary = aggregate_budget(items)

    assert list(summary.categories) == ["kitchen", "demo"]
    kitchen = summary.categories["kitchen"]
    assert [i.id for i in kitchen.items] == [1, 3]
    assert kitchen.budget == Decimal("350")
    assert kitchen.actual == Decimal("260")
    assert kitchen.underwriting == Decimal("300")
    assert kitchen.forecast == Decimal("250")
    assert kitchen.item_count == 2


def test_category_budgets_sum_to_total():
    """Test that category budgets add up to the total."""
    items = [
        make_item(1, "demo", underwriting="1000"),
        make_item(2, "demo", underwriting="1000", forecast="1200"),
        make_item(3, "plumbing", underwriting="3500.50", actual="3600"),
        make_item(4, "kitchen", forecast="9000"),
        make_item(5, "custom_extra", underwriting="75.25"),
    ]
    summary = aggregate_budget(items)

    per_category = sum(agg.budget for agg in summary.categories.values())
    assert per_category == summary.total_budget
    assert summary.total_budget == sum(effective_budget(i) for i in items)
    assert summary.total_actual == Decimal("3600")


def test_category_variance_positive_when_over_budget():
    """Test that overspending gives a positive category variance."""
    summary = aggregate_budget([make_item(1, "tile", underwriting="1000", actual="1300")])
    assert summary.categories["tile"].variance == Decimal("300")
    assert summary.total_variance == Decimal("300")


def test_status_counts():
    """Test completed and in-progress counts per category."""
    items = [
        make_item(1, "demo", status=ItemStatus.COMPLETE),
        make_item(2, "demo", status=ItemStatus.IN_PROGRESS),
        make_item(3, "demo"),
    ]
    demo = aggregate_budget(items).categories["demo"]
    assert demo.completed_count == 1
    assert demo.in_progress_count == 1


def test_sort_by_category_follows_standard_order():
    """Test sorting items by the standard category order."""
    items = [
        make_item(1, "kitchen", sort_order=2),
        make_item(2, "demo", sort_order=1),
        make_item(3, "kitchen", sort_order=1),
        make_item(4, "unlisted", sort_order=0),
        make_item(5, "soft_costs", sort_order=5),
    ]
    assert [i.id for i in sort_by_category(items)] == [5, 2, 3, 1, 4]

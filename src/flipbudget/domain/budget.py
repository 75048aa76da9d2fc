"""Budget aggregation engine and budget item service.

The module-level functions are pure: they derive effective amounts, variances
and per-category totals from a sequence of budget items, and are rebuilt from
scratch on every call. ``BudgetService`` handles persistence of line items.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Sequence

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.entities import (
    BudgetCategory,
    BudgetItem,
    BudgetSummary,
    CategoryAggregate,
    CostType,
    ItemStatus,
    UnitType,
)
from flipbudget.logging_config import get_logger

logger = get_logger("budget")

ZERO = Decimal("0")

_CATEGORY_POSITION = {category.value: index for index, category in enumerate(BudgetCategory)}

# Fields a caller may change on an existing item
UPDATABLE_FIELDS = frozenset(
    {
        "category",
        "item",
        "description",
        "room_area",
        "qty",
        "unit",
        "rate",
        "underwriting_amount",
        "forecast_amount",
        "actual_amount",
        "cost_type",
        "status",
        "priority",
        "vendor_id",
        "sort_order",
        "notes",
    }
)

PRIORITIES = ("high", "medium", "low")


def effective_budget(item: BudgetItem) -> Decimal:
    """Forecast once it is set above zero, otherwise underwriting."""
    if item.forecast_amount > 0:
        return item.forecast_amount
    return item.underwriting_amount


def effective_actual(item: BudgetItem) -> Decimal:
    """Money actually spent, zero until recorded."""
    return item.actual_amount if item.actual_amount is not None else ZERO


def forecast_variance(item: BudgetItem) -> Decimal:
    """Forecast minus underwriting."""
    return item.forecast_amount - item.underwriting_amount


def actual_variance(item: BudgetItem) -> Optional[Decimal]:
    """Actual minus effective budget; positive means over budget.

    Returns None while no actual amount has been recorded.
    """
    if item.actual_amount is None:
        return None
    return item.actual_amount - effective_budget(item)


def aggregate_budget(items: Iterable[BudgetItem]) -> BudgetSummary:
    """Group items by category and total effective budget and actual.

    Categories appear in order of first occurrence and items keep their
    relative input order inside each category.
    """
    grouped: dict[str, list[BudgetItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)

    categories: dict[str, CategoryAggregate] = {}
    for category, members in grouped.items():
        categories[category] = CategoryAggregate(
            category=category,
            budget=sum((effective_budget(i) for i in members), ZERO),
            actual=sum((effective_actual(i) for i in members), ZERO),
            items=tuple(members),
            underwriting=sum((i.underwriting_amount for i in members), ZERO),
            forecast=sum((i.forecast_amount for i in members), ZERO),
        )

    return BudgetSummary(
        categories=categories,
        total_budget=sum((agg.budget for agg in categories.values()), ZERO),
        total_actual=sum((agg.actual for agg in categories.values()), ZERO),
        total_underwriting=sum((agg.underwriting for agg in categories.values()), ZERO),
        total_forecast=sum((agg.forecast for agg in categories.values()), ZERO),
    )


def sort_by_category(items: Sequence[BudgetItem]) -> list[BudgetItem]:
    """Order items by the standard category sequence, then sort order."""
    return sorted(
        items,
        key=lambda i: (_CATEGORY_POSITION.get(i.category, len(_CATEGORY_POSITION)), i.sort_order, i.id),
    )


def check_amount(name: str, value: Any, allow_none: bool = False) -> Optional[Decimal]:
    """Coerce a non-negative money or quantity value, keyed by field name in errors."""
    if value is None:
        if allow_none:
            return None
        raise errors.ValidationError(errors={name: [f"{name} is required"]})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise errors.ValidationError(errors={name: [f"{name} must be a number"]})
    if not amount.is_finite():
        raise errors.ValidationError(errors={name: [f"{name} must be a number"]})
    if amount < 0:
        raise errors.ValidationError(errors={name: [f"{name} cannot be negative"]})
    return amount


def check_choice(name: str, enum_cls, value):
    """Coerce a value to a member of ``enum_cls``."""
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise errors.ValidationError(errors={name: [f"Invalid {name} '{value}'. Choose from: {choices}"]})


class BudgetService:
    """Service for managing budget line items."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_project(self, project_id: int) -> None:
        if self.db.get_project(project_id) is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))

    def _require_vendor(self, vendor_id: Optional[int]) -> None:
        if vendor_id is not None and self.db.get_vendor(vendor_id) is None:
            raise errors.NotFoundError(errors.vendor_not_found(vendor_id))

    def _clean_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalize item fields in place of the raw values."""
        cleaned = dict(fields)
        if "category" in cleaned:
            cleaned["category"] = check_choice("category", BudgetCategory, cleaned["category"]).value
        if "item" in cleaned:
            name = (cleaned["item"] or "").strip()
            if not name:
                raise errors.ValidationError(errors={"item": ["Item name is required"]})
            cleaned["item"] = name
        for amount_field in ("underwriting_amount", "forecast_amount", "qty", "rate"):
            if amount_field in cleaned:
                cleaned[amount_field] = check_amount(amount_field, cleaned[amount_field])
        if "actual_amount" in cleaned:
            cleaned["actual_amount"] = check_amount("actual_amount", cleaned["actual_amount"], allow_none=True)
        if "status" in cleaned:
            cleaned["status"] = check_choice("status", ItemStatus, cleaned["status"]).value
        if "unit" in cleaned:
            cleaned["unit"] = check_choice("unit", UnitType, cleaned["unit"]).value
        if "cost_type" in cleaned:
            cleaned["cost_type"] = check_choice("cost_type", CostType, cleaned["cost_type"]).value
        if "priority" in cleaned and cleaned["priority"] not in PRIORITIES:
            raise errors.ValidationError(
                errors={"priority": [f"Invalid priority '{cleaned['priority']}'. Choose from: high, medium, low"]}
            )
        if "vendor_id" in cleaned:
            self._require_vendor(cleaned["vendor_id"])
        return cleaned

    def create_item(
        self,
        project_id: int,
        category: BudgetCategory | str,
        item: str,
        underwriting_amount: Decimal = ZERO,
        forecast_amount: Decimal = ZERO,
        actual_amount: Optional[Decimal] = None,
        status: ItemStatus | str = ItemStatus.NOT_STARTED,
        vendor_id: Optional[int] = None,
        **extra: Any,
    ) -> int:
        """Create a budget item at the end of its category.

        Args:
            project_id: Owning project ID
            category: Budget category key
            item: Line item name
            underwriting_amount: Pre-deal estimate
            forecast_amount: Revised estimate (0 means not yet forecast)
            actual_amount: Money spent so far, if any
            status: Work status
            vendor_id: Optional assigned vendor
            **extra: Other item columns (description, room_area, qty, unit,
                rate, cost_type, priority, notes)

        Returns:
            Budget item ID

        Raises:
            NotFoundError: If the project or vendor doesn't exist
            ValidationError: If a value is invalid
        """
        self._require_project(project_id)
        unknown = set(extra) - UPDATABLE_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown budget item field(s): {', '.join(sorted(unknown))}")

        fields = self._clean_fields(
            {
                "category": category,
                "item": item,
                "underwriting_amount": underwriting_amount,
                "forecast_amount": forecast_amount,
                "actual_amount": actual_amount,
                "status": status,
                "vendor_id": vendor_id,
                **extra,
            }
        )
        if "sort_order" not in fields:
            max_sort_order = self.db.get_max_sort_order(project_id, fields["category"])
            fields["sort_order"] = (max_sort_order or 0) + 1
        fields["project_id"] = project_id

        item_id = self.db.create_budget_item(fields)
        logger.debug("Created budget item %s in project %s", item_id, project_id)
        return item_id

    def get_item(self, item_id: int) -> Optional[BudgetItem]:
        """Get budget item by ID."""
        return self.db.get_budget_item(item_id)

    def require_item(self, item_id: int) -> BudgetItem:
        """Get budget item by ID or raise NotFoundError."""
        item = self.db.get_budget_item(item_id)
        if item is None:
            raise errors.NotFoundError(errors.budget_item_not_found(item_id))
        return item

    def fetch_budget_items(self, project_id: int) -> list[BudgetItem]:
        """Load a project's budget items in display order.

        Raises:
            NotFoundError: If the project doesn't exist
            FetchFailure: If the store could not be read
        """
        self._require_project(project_id)
        return sort_by_category(self.db.list_budget_items(project_id=project_id))

    def list_items(self, project_id: int) -> list[BudgetItem]:
        """List a project's budget items in display order."""
        return self.fetch_budget_items(project_id)

    def update_budget_item(self, item_id: int, fields: dict[str, Any]) -> None:
        """Write a partial set of fields to a budget item.

        Only the supplied fields are written; everything else is untouched.

        Raises:
            NotFoundError: If the item doesn't exist
            ValidationError: If a field is unknown or invalid
            PersistenceFailure: If the write did not complete
        """
        self.require_item(item_id)
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown budget item field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return
        self.db.update_budget_item(item_id, self._clean_fields(fields))

    def update_item(self, item_id: int, **fields: Any) -> None:
        """Keyword form of update_budget_item."""
        self.update_budget_item(item_id, fields)

    def delete_item(self, item_id: int) -> None:
        """Delete a budget item."""
        self.require_item(item_id)
        self.db.delete_budget_item(item_id)

    def bulk_update_status(self, item_ids: Sequence[int], status: ItemStatus | str) -> None:
        """Set the same status on several items."""
        status_value = check_choice("status", ItemStatus, status).value
        for item_id in item_ids:
            self.require_item(item_id)
        for item_id in item_ids:
            self.db.update_budget_item(item_id, {"status": status_value})

    def bulk_delete(self, item_ids: Sequence[int]) -> None:
        """Delete several items."""
        for item_id in item_ids:
            self.require_item(item_id)
        for item_id in item_ids:
            self.db.delete_budget_item(item_id)

    def reorder(self, item_ids: Sequence[int]) -> None:
        """Set each item's sort order to its position in ``item_ids``."""
        for item_id in item_ids:
            self.require_item(item_id)
        for position, item_id in enumerate(item_ids):
            self.db.update_budget_item(item_id, {"sort_order": position})

    def summarize(self, project_id: int) -> BudgetSummary:
        """Aggregate a project's budget by category."""
        return aggregate_budget(self.fetch_budget_items(project_id))

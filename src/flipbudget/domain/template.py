"""Budget template domain service.

A template is a named list of line items that can be copied into any
project's budget. Templates are saved from an existing project or built by
hand, and applying one never touches forecast or actual amounts.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.budget import ZERO, PRIORITIES, BudgetService, check_amount, check_choice
from flipbudget.domain.entities import (
    ApplyMode,
    BudgetCategory,
    BudgetTemplate,
    BudgetTemplateItem,
    CostType,
    PropertyType,
    ScopeLevel,
    TemplateApplyResult,
    UnitType,
    VendorTrade,
)
from flipbudget.logging_config import get_logger

logger = get_logger("template")

# Gap between consecutive template item sort orders
SORT_STEP = 10

UPDATABLE_FIELDS = frozenset({"name", "description", "property_type", "scope_level", "is_active"})

_ITEM_FIELDS = frozenset(
    {
        "category",
        "item",
        "description",
        "qty",
        "unit",
        "rate",
        "default_amount",
        "cost_type",
        "default_priority",
        "suggested_trade",
        "sort_order",
    }
)


class TemplateService:
    """Service for managing budget templates."""

    def __init__(self, db: Database):
        """Initialize template service.

        Args:
            db: Database instance
        """
        self.db = db
        self.budget = BudgetService(db)

    def _clean_template_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        cleaned = dict(fields)
        if "name" in cleaned:
            name = (cleaned["name"] or "").strip()
            if not name:
                raise errors.ValidationError(errors={"name": ["Template name is required"]})
            cleaned["name"] = name
        if "description" in cleaned and cleaned["description"] is not None:
            cleaned["description"] = cleaned["description"].strip() or None
        if cleaned.get("property_type") is not None:
            cleaned["property_type"] = check_choice("property_type", PropertyType, cleaned["property_type"]).value
        if cleaned.get("scope_level") is not None:
            cleaned["scope_level"] = check_choice("scope_level", ScopeLevel, cleaned["scope_level"]).value
        return cleaned

    def _clean_item_fields(self, fields: Mapping[str, Any], position: int) -> dict[str, Any]:
        unknown = set(fields) - _ITEM_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown template item field(s): {', '.join(sorted(unknown))}")

        cleaned = dict(fields)
        if "category" not in cleaned:
            raise errors.ValidationError(errors={"category": ["category is required"]})
        cleaned["category"] = check_choice("category", BudgetCategory, cleaned["category"]).value
        name = (cleaned.get("item") or "").strip()
        if not name:
            raise errors.ValidationError(errors={"item": ["Item name is required"]})
        cleaned["item"] = name
        for amount_field in ("default_amount", "qty", "rate"):
            if amount_field in cleaned:
                cleaned[amount_field] = check_amount(amount_field, cleaned[amount_field])
        if "unit" in cleaned:
            cleaned["unit"] = check_choice("unit", UnitType, cleaned["unit"]).value
        if "cost_type" in cleaned:
            cleaned["cost_type"] = check_choice("cost_type", CostType, cleaned["cost_type"]).value
        if cleaned.get("suggested_trade") is not None:
            cleaned["suggested_trade"] = check_choice("suggested_trade", VendorTrade, cleaned["suggested_trade"]).value
        if "default_priority" in cleaned and cleaned["default_priority"] not in PRIORITIES:
            raise errors.ValidationError(
                errors={
                    "default_priority": [
                        f"Invalid priority '{cleaned['default_priority']}'. Choose from: high, medium, low"
                    ]
                }
            )
        cleaned.setdefault("sort_order", position * SORT_STEP)
        return cleaned

    def _insert(self, template_fields: Mapping[str, Any], items: Iterable[Mapping[str, Any]]) -> int:
        """Validate everything first, then write the template and its items."""
        cleaned = self._clean_template_fields(template_fields)
        cleaned_items = [self._clean_item_fields(item, position) for position, item in enumerate(items)]

        template_id = self.db.create_budget_template(cleaned)
        for item in cleaned_items:
            self.db.create_budget_template_item({**item, "template_id": template_id})
        logger.debug("Created budget template %s with %d item(s)", template_id, len(cleaned_items))
        return template_id

    def create_template(
        self,
        name: str,
        items: Iterable[Mapping[str, Any]] = (),
        description: Optional[str] = None,
        property_type: Optional[PropertyType | str] = None,
        scope_level: Optional[ScopeLevel | str] = None,
    ) -> int:
        """Create a template from a list of item mappings.

        Args:
            name: Template name
            items: Item fields (category, item, default_amount, qty, unit,
                rate, cost_type, default_priority, suggested_trade, sort_order)
            description: Optional description
            property_type: Property type the template suits
            scope_level: Rehab scope (light, medium, heavy, gut)

        Returns:
            Template ID

        Raises:
            ValidationError: If the template or any item is invalid
        """
        return self._insert(
            {
                "name": name,
                "description": description,
                "property_type": property_type,
                "scope_level": scope_level,
            },
            items,
        )

    def get_template(self, template_id: int) -> Optional[BudgetTemplate]:
        """Get template by ID."""
        return self.db.get_budget_template(template_id)

    def require_template(self, template_id: int) -> BudgetTemplate:
        """Get template by ID or raise NotFoundError."""
        template = self.db.get_budget_template(template_id)
        if template is None:
            raise errors.NotFoundError(errors.budget_template_not_found(template_id))
        return template

    def get_template_by_name(self, name: str) -> Optional[BudgetTemplate]:
        """Get the first active template with this name."""
        for template in self.db.list_budget_templates():
            if template.name == name:
                return template
        return None

    def list_templates(
        self,
        favorites_only: bool = False,
        property_type: Optional[PropertyType | str] = None,
        scope_level: Optional[ScopeLevel | str] = None,
        include_inactive: bool = False,
    ) -> list[BudgetTemplate]:
        """List templates, favorites first then most used."""
        if property_type is not None:
            property_type = check_choice("property_type", PropertyType, property_type).value
        if scope_level is not None:
            scope_level = check_choice("scope_level", ScopeLevel, scope_level).value
        return self.db.list_budget_templates(
            favorites_only=favorites_only,
            property_type=property_type,
            scope_level=scope_level,
            include_inactive=include_inactive,
        )

    def list_template_items(self, template_id: int) -> list[BudgetTemplateItem]:
        """List a template's items in sort order."""
        self.require_template(template_id)
        return self.db.list_budget_template_items(template_id)

    def update_template(self, template_id: int, fields: Mapping[str, Any]) -> None:
        """Update template details; items are left as they are."""
        self.require_template(template_id)
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown template field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return
        self.db.update_budget_template(template_id, self._clean_template_fields(fields))

    def delete_template(self, template_id: int) -> None:
        """Delete a template and its items. Budgets built from it are kept."""
        self.require_template(template_id)
        self.db.delete_budget_template(template_id)

    def set_favorite(self, template_id: int, is_favorite: bool) -> None:
        """Mark or unmark a template as favorite."""
        self.require_template(template_id)
        self.db.update_budget_template(template_id, {"is_favorite": bool(is_favorite)})

    def toggle_favorite(self, template_id: int) -> bool:
        """Flip the favorite flag and return the new value."""
        template = self.require_template(template_id)
        self.set_favorite(template_id, not template.is_favorite)
        return not template.is_favorite

    def duplicate_template(self, template_id: int) -> int:
        """Copy a template and its items under the name '<name> (Copy)'.

        The copy starts unused and not favorited.
        """
        template = self.require_template(template_id)
        items = self.db.list_budget_template_items(template_id)
        return self._insert(
            {
                "name": f"{template.name} (Copy)",
                "description": template.description,
                "property_type": template.property_type,
                "scope_level": template.scope_level,
            },
            [_item_fields(item) for item in items],
        )

    def save_project_as_template(
        self,
        project_id: int,
        name: str,
        item_ids: Optional[Sequence[int]] = None,
        include_amounts: bool = True,
        description: Optional[str] = None,
        scope_level: Optional[ScopeLevel | str] = None,
        property_type: Optional[PropertyType | str] = None,
    ) -> int:
        """Save a project's budget items as a new template.

        Args:
            project_id: Source project
            name: Template name
            item_ids: Only these items (default: every item in the project)
            include_amounts: Copy underwriting amount, qty and rate; when
                False they are saved as zero
            description: Optional description
            scope_level: Rehab scope
            property_type: Defaults to the project's property type

        Returns:
            Template ID

        Raises:
            NotFoundError: If the project or a selected item doesn't exist
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))
        items = self.budget.fetch_budget_items(project_id)

        if item_ids is not None:
            by_id = {item.id: item for item in items}
            missing = [item_id for item_id in item_ids if item_id not in by_id]
            if missing:
                raise errors.NotFoundError(errors.budget_item_not_found(missing[0]))
            wanted = set(item_ids)
            items = [item for item in items if item.id in wanted]

        template_items = []
        for item in items:
            trade = None
            if item.vendor_id is not None:
                vendor = self.db.get_vendor(item.vendor_id)
                trade = vendor.trade if vendor is not None else None
            template_items.append(
                {
                    "category": item.category,
                    "item": item.item,
                    "description": item.description,
                    "qty": item.qty if include_amounts else ZERO,
                    "unit": item.unit,
                    "rate": item.rate if include_amounts else ZERO,
                    "default_amount": item.underwriting_amount if include_amounts else ZERO,
                    "cost_type": item.cost_type,
                    "default_priority": item.priority,
                    "suggested_trade": trade,
                }
            )

        template_id = self._insert(
            {
                "name": name,
                "description": description,
                "property_type": property_type if property_type is not None else project.property_type,
                "scope_level": scope_level,
            },
            template_items,
        )
        logger.info("Saved project %s as template %s (%d items)", project_id, template_id, len(template_items))
        return template_id

    def apply_template(
        self,
        template_id: int,
        project_id: int,
        mode: ApplyMode | str = ApplyMode.SKIP,
        include_amounts: bool = True,
    ) -> TemplateApplyResult:
        """Add a template's items to a project's budget.

        Items match existing ones by category and case-insensitive name.
        In ``skip`` mode matches are left alone. In ``merge`` mode their
        underwriting amount, qty and rate are overwritten (only when amounts
        are included). ``replace`` deletes every existing item first.

        New items get the template's default amount as underwriting, no
        forecast and no actual. They are placed after the existing items,
        or in template order when replacing.

        Raises:
            NotFoundError: If the template or project doesn't exist
            ValidationError: If the template has no items or the mode is invalid
        """
        mode = check_choice("mode", ApplyMode, mode)
        template = self.require_template(template_id)
        template_items = self.db.list_budget_template_items(template_id)
        if not template_items:
            raise errors.ValidationError("Template has no items")

        existing = self.budget.fetch_budget_items(project_id)
        if mode == ApplyMode.REPLACE:
            self.budget.bulk_delete([item.id for item in existing])
            existing = []

        by_key = {(item.category, item.item.lower()): item for item in existing}
        max_sort_order = max((item.sort_order for item in existing), default=0)

        added = updated = skipped = 0
        for index, template_item in enumerate(template_items):
            match = by_key.get((template_item.category, template_item.item.lower()))
            if match is not None:
                if mode == ApplyMode.MERGE and include_amounts:
                    self.budget.update_budget_item(
                        match.id,
                        {
                            "underwriting_amount": template_item.default_amount,
                            "qty": template_item.qty,
                            "rate": template_item.rate,
                        },
                    )
                    updated += 1
                else:
                    skipped += 1
                continue

            if mode == ApplyMode.REPLACE:
                sort_order = template_item.sort_order
            else:
                sort_order = max_sort_order + SORT_STEP + index * SORT_STEP
            self.budget.create_item(
                project_id,
                template_item.category,
                template_item.item,
                underwriting_amount=template_item.default_amount if include_amounts else ZERO,
                description=template_item.description,
                qty=template_item.qty if include_amounts else ZERO,
                unit=template_item.unit,
                rate=template_item.rate if include_amounts else ZERO,
                cost_type=template_item.cost_type,
                priority=template_item.default_priority,
                sort_order=sort_order,
            )
            added += 1

        self.db.update_budget_template(template_id, {"times_used": template.times_used + 1})
        logger.info(
            "Applied template %s to project %s: %d added, %d updated, %d skipped",
            template_id,
            project_id,
            added,
            updated,
            skipped,
        )
        return TemplateApplyResult(added=added, updated=updated, skipped=skipped)


def _item_fields(item: BudgetTemplateItem) -> dict[str, Any]:
    return {
        "category": item.category,
        "item": item.item,
        "description": item.description,
        "qty": item.qty,
        "unit": item.unit,
        "rate": item.rate,
        "default_amount": item.default_amount,
        "cost_type": item.cost_type,
        "default_priority": item.default_priority,
        "suggested_trade": item.suggested_trade,
        "sort_order": item.sort_order,
    }

"""Tests for TemplateService."""

from decimal import Decimal

import pytest

from flipbudget.domain.entities import ScopeLevel, TemplateApplyResult, VendorTrade
from flipbudget.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def empty_project_id(project_service):
    project_id, _ = project_service.create_project({"name": "456 Oak Ave"})
    return project_id


@pytest.fixture
def kitchen_template(template_service):
    return template_service.create_template(
        "Kitchen refresh",
        items=[
            {"category": "kitchen", "item": "Cabinets", "default_amount": "8500", "unit": "set"},
            {"category": "kitchen", "item": "Backsplash", "default_amount": "900", "qty": "30", "unit": "sf",
             "rate": "30"},
            {"category": "interior_paint", "item": "Paint kitchen", "default_amount": "600"},
        ],
        scope_level="light",
    )


class TestSaveProjectAsTemplate:
    """Tests for saving a project's budget as a template."""

    def test_copies_items_in_display_order(self, template_service, sample_project, sample_items):
        """Test that every item is copied with its underwriting amount."""
        template_id = template_service.save_project_as_template(sample_project.id, "Main St scope")

        template = template_service.get_template(template_id)
        items = template_service.list_template_items(template_id)
        assert template.name == "Main St scope"
        assert template.property_type == sample_project.property_type
        assert [i.item for i in items] == ["Demo labor", "Cabinets", "Counters"]
        assert [i.default_amount for i in items] == [Decimal("2000"), Decimal("8000"), Decimal("3000")]
        assert [i.sort_order for i in items] == [0, 10, 20]

    def test_selected_items_without_amounts(self, template_service, sample_project, sample_items):
        """Test saving a subset of items with amounts zeroed."""
        template_id = template_service.save_project_as_template(
            sample_project.id,
            "Kitchen only",
            item_ids=[sample_items["Cabinets"], sample_items["Counters"]],
            include_amounts=False,
        )

        items = template_service.list_template_items(template_id)
        assert [i.item for i in items] == ["Cabinets", "Counters"]
        assert all(i.default_amount == Decimal("0") for i in items)
        assert all(i.rate == Decimal("0") for i in items)

    def test_unknown_item_id(self, template_service, sample_project, sample_items):
        """Test that selecting an item outside the project fails."""
        with pytest.raises(NotFoundError, match="Budget item 999 not found"):
            template_service.save_project_as_template(sample_project.id, "Bad", item_ids=[999])
        assert template_service.list_templates() == []

    def test_unknown_project(self, template_service):
        """Test saving from a missing project."""
        with pytest.raises(NotFoundError, match="Project 42 not found"):
            template_service.save_project_as_template(42, "Nothing")

    def test_suggested_trade_from_vendor(self, template_service, budget_service, sample_project, sample_vendor):
        """Test that an assigned vendor's trade becomes the suggested trade."""
        budget_service.create_item(
            sample_project.id, "plumbing", "Water heater",
            underwriting_amount=Decimal("1200"), vendor_id=sample_vendor.id,
        )

        template_id = template_service.save_project_as_template(sample_project.id, "Plumbing")

        (item,) = template_service.list_template_items(template_id)
        assert item.suggested_trade == VendorTrade.PLUMBER


class TestApplyTemplate:
    """Tests for applying a template to a project."""

    def test_apply_to_empty_project(self, template_service, budget_service, kitchen_template, empty_project_id):
        """Test that every template item becomes an underwriting-only budget item."""
        result = template_service.apply_template(kitchen_template, empty_project_id)

        assert result == TemplateApplyResult(added=3, updated=0, skipped=0)
        items = {i.item: i for i in budget_service.list_items(empty_project_id)}
        assert set(items) == {"Cabinets", "Backsplash", "Paint kitchen"}
        backsplash = items["Backsplash"]
        assert backsplash.underwriting_amount == Decimal("900")
        assert backsplash.forecast_amount == Decimal("0")
        assert backsplash.actual_amount is None
        assert backsplash.qty == Decimal("30")
        assert backsplash.unit.value == "sf"
        assert items["Cabinets"].sort_order == 10
        assert backsplash.sort_order == 20
        assert template_service.get_template(kitchen_template).times_used == 1

    def test_skip_keeps_matching_items(self, template_service, budget_service, kitchen_template,
                                       sample_project, sample_items):
        """Test that items matching by category and name are left alone."""
        result = template_service.apply_template(kitchen_template, sample_project.id, mode="skip")

        assert result == TemplateApplyResult(added=2, updated=0, skipped=1)
        cabinets = budget_service.get_item(sample_items["Cabinets"])
        assert cabinets.underwriting_amount == Decimal("8000")
        new_items = [i for i in budget_service.list_items(sample_project.id) if i.item == "Backsplash"]
        # Placed after the highest existing sort order (2)
        assert new_items[0].sort_order == 22

    def test_merge_overwrites_underwriting_only(self, template_service, budget_service, kitchen_template,
                                                sample_project, sample_items):
        """Test that merge resets underwriting but keeps forecast and actual."""
        result = template_service.apply_template(kitchen_template, sample_project.id, mode="merge")

        assert result.updated == 1
        cabinets = budget_service.get_item(sample_items["Cabinets"])
        assert cabinets.underwriting_amount == Decimal("8500")
        assert cabinets.forecast_amount == Decimal("9000")
        assert cabinets.actual_amount == Decimal("9500")

    def test_merge_without_amounts_skips(self, template_service, kitchen_template, sample_project, sample_items):
        """Test that merge without amounts has nothing to update."""
        result = template_service.apply_template(
            kitchen_template, sample_project.id, mode="merge", include_amounts=False
        )
        assert result == TemplateApplyResult(added=2, updated=0, skipped=1)

    def test_match_ignores_case(self, template_service, budget_service, sample_project, sample_items):
        """Test that item names match case-insensitively."""
        template_id = template_service.create_template(
            "Demo", items=[{"category": "demo", "item": "DEMO LABOR", "default_amount": "2500"}]
        )

        result = template_service.apply_template(template_id, sample_project.id)

        assert result == TemplateApplyResult(added=0, updated=0, skipped=1)

    def test_replace_deletes_existing_items(self, template_service, budget_service, kitchen_template,
                                            sample_project, sample_items):
        """Test that replace leaves exactly the template's items."""
        result = template_service.apply_template(kitchen_template, sample_project.id, mode="replace")

        assert result == TemplateApplyResult(added=3, updated=0, skipped=0)
        items = budget_service.list_items(sample_project.id)
        assert sorted(i.item for i in items) == ["Backsplash", "Cabinets", "Paint kitchen"]
        assert budget_service.get_item(sample_items["Demo labor"]) is None
        cabinets = next(i for i in items if i.item == "Cabinets")
        assert cabinets.actual_amount is None
        assert cabinets.sort_order == 0

    def test_empty_template(self, template_service, empty_project_id):
        """Test that a template without items cannot be applied."""
        template_id = template_service.create_template("Empty")

        with pytest.raises(ValidationError, match="Template has no items"):
            template_service.apply_template(template_id, empty_project_id)
        assert template_service.get_template(template_id).times_used == 0

    def test_invalid_mode(self, template_service, kitchen_template, empty_project_id):
        """Test that an unknown apply mode is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            template_service.apply_template(kitchen_template, empty_project_id, mode="overwrite")
        assert exc_info.value.messages_for("mode")

    def test_unknown_project(self, template_service, kitchen_template):
        """Test applying to a missing project."""
        with pytest.raises(NotFoundError):
            template_service.apply_template(kitchen_template, 999)


class TestTemplateManagement:
    """Tests for creating, listing and copying templates."""

    def test_create_template_requires_name(self, template_service):
        """Test that a blank template name is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            template_service.create_template("  ")
        assert exc_info.value.messages_for("name") == ["Template name is required"]

    def test_invalid_item_writes_nothing(self, template_service):
        """Test that one bad item stops the whole template from being saved."""
        with pytest.raises(ValidationError) as exc_info:
            template_service.create_template(
                "Bad",
                items=[
                    {"category": "demo", "item": "Dumpster", "default_amount": "600"},
                    {"category": "garage", "item": "Door"},
                ],
            )
        assert exc_info.value.messages_for("category")
        assert template_service.list_templates() == []

    def test_negative_default_amount(self, template_service):
        """Test that template amounts cannot be negative."""
        with pytest.raises(ValidationError) as exc_info:
            template_service.create_template(
                "Bad", items=[{"category": "demo", "item": "Dumpster", "default_amount": "-1"}]
            )
        assert exc_info.value.messages_for("default_amount") == ["default_amount cannot be negative"]

    def test_duplicate_template(self, template_service, kitchen_template, empty_project_id):
        """Test that a copy has the same items and fresh usage."""
        template_service.apply_template(kitchen_template, empty_project_id)
        template_service.set_favorite(kitchen_template, True)

        copy_id = template_service.duplicate_template(kitchen_template)

        copy = template_service.get_template(copy_id)
        assert copy.name == "Kitchen refresh (Copy)"
        assert copy.scope_level == ScopeLevel.LIGHT
        assert copy.times_used == 0
        assert copy.is_favorite is False
        original_items = template_service.list_template_items(kitchen_template)
        copied_items = template_service.list_template_items(copy_id)
        assert [(i.item, i.default_amount, i.sort_order) for i in copied_items] == [
            (i.item, i.default_amount, i.sort_order) for i in original_items
        ]

    def test_favorites_listed_first(self, template_service, kitchen_template):
        """Test list ordering and the favorites filter."""
        other = template_service.create_template("Bath", items=[{"category": "bathrooms", "item": "Vanity"}])

        assert template_service.toggle_favorite(other) is True
        templates = template_service.list_templates()
        assert [t.id for t in templates] == [other, kitchen_template]
        assert [t.id for t in template_service.list_templates(favorites_only=True)] == [other]

        assert template_service.toggle_favorite(other) is False
        assert template_service.list_templates(favorites_only=True) == []

    def test_filter_by_scope(self, template_service, kitchen_template):
        """Test filtering templates by scope level."""
        template_service.create_template("Gut job", scope_level="gut")

        assert [t.name for t in template_service.list_templates(scope_level="light")] == ["Kitchen refresh"]
        with pytest.raises(ValidationError):
            template_service.list_templates(scope_level="total")

    def test_inactive_templates_hidden(self, template_service, kitchen_template):
        """Test that deactivated templates only show with include_inactive."""
        template_service.update_template(kitchen_template, {"is_active": False})

        assert template_service.list_templates() == []
        assert len(template_service.list_templates(include_inactive=True)) == 1

    def test_update_rejects_unknown_field(self, template_service, kitchen_template):
        """Test that only template details can be updated."""
        with pytest.raises(ValidationError, match="times_used"):
            template_service.update_template(kitchen_template, {"times_used": 10})

    def test_delete_keeps_applied_budget(self, template_service, budget_service, kitchen_template,
                                         empty_project_id):
        """Test that deleting a template leaves budgets built from it."""
        template_service.apply_template(kitchen_template, empty_project_id)

        template_service.delete_template(kitchen_template)

        assert template_service.get_template(kitchen_template) is None
        assert template_service.db.list_budget_template_items(kitchen_template) == []
        assert len(budget_service.list_items(empty_project_id)) == 3

    def test_delete_missing(self, template_service):
        """Test deleting a missing template."""
        with pytest.raises(NotFoundError, match="Budget template 5 not found"):
            template_service.delete_template(5)

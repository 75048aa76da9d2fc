"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from flipbudget.domain import entities
from flipbudget.domain.errors import NotFoundError, PersistenceFailure, ValidationError


def _project_fields(name="Test Project", **overrides):
    fields = {"name": name, "status": "lead", "property_type": "sfh"}
    fields.update(overrides)
    return fields


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_project_returns_domain_model(self, temp_db):
        """Test that get_project returns a domain Project entity."""
        project_id = temp_db.create_project(
            _project_fields(arv=Decimal("250000"), close_date=date(2024, 1, 15))
        )

        project = temp_db.get_project(project_id)

        assert isinstance(project, entities.Project)
        assert project.id == project_id
        assert project.status == entities.ProjectStatus.LEAD
        assert project.property_type == entities.PropertyType.SFH
        assert project.arv == Decimal("250000")
        assert project.close_date == date(2024, 1, 15)
        assert project.hold_months == 4
        assert isinstance(project.created_at, datetime)

    def test_get_missing_returns_none(self, temp_db):
        assert temp_db.get_project(1) is None
        assert temp_db.get_vendor(1) is None
        assert temp_db.get_budget_item(1) is None
        assert temp_db.get_draw(1) is None
        assert temp_db.get_journal_page(1) is None

    def test_budget_item_returns_domain_model(self, temp_db):
        project_id = temp_db.create_project(_project_fields())
        item_id = temp_db.create_budget_item(
            {
                "project_id": project_id,
                "category": "kitchen",
                "item": "Cabinets",
                "underwriting_amount": Decimal("8000"),
                "status": entities.ItemStatus.IN_PROGRESS,
            }
        )

        item = temp_db.get_budget_item(item_id)
        assert isinstance(item, entities.BudgetItem)
        assert item.underwriting_amount == Decimal("8000")
        assert item.forecast_amount == Decimal("0")
        assert item.actual_amount is None
        assert item.status == entities.ItemStatus.IN_PROGRESS
        assert item.unit == entities.UnitType.EA

    def test_partial_update_bumps_updated_at(self, temp_db):
        project_id = temp_db.create_project(_project_fields(city="Minneapolis"))
        before = temp_db.get_project(project_id)

        temp_db.update_project(project_id, {"notes": "Needs a roof"})
        after = temp_db.get_project(project_id)

        assert after.notes == "Needs a roof"
        assert after.city == "Minneapolis"
        assert after.updated_at >= before.updated_at

    def test_update_rejects_protected_columns(self, temp_db):
        project_id = temp_db.create_project(_project_fields())
        with pytest.raises(ValidationError):
            temp_db.update_project(project_id, {"id": 99})
        with pytest.raises(ValidationError):
            temp_db.update_project(project_id, {"not_a_column": 1})

    def test_update_missing_raises(self, temp_db):
        with pytest.raises(NotFoundError, match="Vendor 3 not found"):
            temp_db.update_vendor(3, {"phone": "1"})

    def test_max_helpers(self, temp_db):
        project_id = temp_db.create_project(_project_fields())
        assert temp_db.get_max_sort_order(project_id, "demo") is None
        assert temp_db.get_max_draw_number(project_id) is None

        temp_db.create_budget_item({"project_id": project_id, "category": "demo", "item": "A", "sort_order": 4})
        temp_db.create_draw({"project_id": project_id, "draw_number": 2, "amount": Decimal("10")})

        assert temp_db.get_max_sort_order(project_id, "demo") == 4
        assert temp_db.get_max_sort_order(project_id, "kitchen") is None
        assert temp_db.get_max_draw_number(project_id) == 2

    def test_list_journal_pages_returns_domain_models(self, temp_db):
        temp_db.create_journal_page({"title": "One"})
        temp_db.create_journal_page({"title": "Two", "is_pinned": True})

        pages = temp_db.list_journal_pages()
        assert [p.title for p in pages] == ["Two", "One"]
        for page in pages:
            assert isinstance(page, entities.JournalPage)
            assert page.page_type == entities.JournalPageType.NOTE

    def test_failed_write_becomes_persistence_failure(self, temp_db):
        project_id = temp_db.create_project(_project_fields())
        session = temp_db._get_session()

        with patch.object(session, "commit", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
            with pytest.raises(PersistenceFailure):
                temp_db.update_project(project_id, {"notes": "x"})

        assert temp_db.get_project(project_id).notes is None

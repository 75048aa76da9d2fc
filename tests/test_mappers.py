"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from flipbudget.database.models import (
    BudgetItem as ORMBudgetItem,
    Draw as ORMDraw,
    JournalPage as ORMJournalPage,
    Vendor as ORMVendor,
)
from flipbudget.database.mappers import (
    budget_item_to_domain,
    draw_to_domain,
    journal_page_to_domain,
    vendor_to_domain,
)
from flipbudget.domain.entities import (
    BudgetItem,
    CostType,
    Draw,
    DrawMilestone,
    DrawStatus,
    ItemStatus,
    JournalPage,
    JournalPageType,
    UnitType,
    Vendor,
    VendorStatus,
    VendorTrade,
)


class TestVendorMapper:
    """Tests for Vendor mapper."""

    def test_vendor_to_domain(self):
        """Test converting ORM Vendor to domain Vendor."""
        now = datetime.now(UTC)
        orm_vendor = ORMVendor(
            id=1,
            name="Joe's Plumbing",
            trade="plumber",
            licensed=True,
            insured=False,
            w9_on_file=True,
            rating=4,
            status="active",
            created_at=now,
            updated_at=now,
        )
        vendor = vendor_to_domain(orm_vendor)

        assert isinstance(vendor, Vendor)
        assert vendor.trade == VendorTrade.PLUMBER
        assert vendor.status == VendorStatus.ACTIVE
        assert vendor.licensed is True
        assert vendor.rating == 4
        assert vendor.email is None


class TestBudgetItemMapper:
    """Tests for BudgetItem mapper."""

    def _orm_item(self, **overrides):
        fields = dict(
            id=1,
            project_id=1,
            category="flooring",
            item="LVP",
            qty=Decimal("800"),
            unit="sf",
            rate=Decimal("4.50"),
            underwriting_amount=Decimal("3600"),
            forecast_amount=Decimal("0"),
            actual_amount=None,
            cost_type="materials",
            status="in_progress",
            priority="high",
            sort_order=2,
        )
        fields.update(overrides)
        return ORMBudgetItem(**fields)

    def test_budget_item_to_domain(self):
        item = budget_item_to_domain(self._orm_item())

        assert isinstance(item, BudgetItem)
        assert item.unit == UnitType.SF
        assert item.cost_type == CostType.MATERIALS
        assert item.status == ItemStatus.IN_PROGRESS
        assert item.underwriting_amount == Decimal("3600")
        assert item.actual_amount is None
        assert item.sort_order == 2

    def test_float_amounts_become_decimals(self):
        """SQLite can hand back floats for numeric columns."""
        item = budget_item_to_domain(self._orm_item(rate=4.5, actual_amount=3700.25))

        assert item.rate == Decimal("4.5")
        assert isinstance(item.actual_amount, Decimal)
        assert item.actual_amount == Decimal("3700.25")


class TestDrawMapper:
    """Tests for Draw mapper."""

    def test_draw_to_domain(self):
        orm_draw = ORMDraw(
            id=3,
            project_id=1,
            draw_number=2,
            milestone="demo_complete",
            amount=Decimal("15000"),
            date_paid=date(2024, 5, 2),
            status="paid",
            payment_method=None,
        )
        draw = draw_to_domain(orm_draw)

        assert isinstance(draw, Draw)
        assert draw.milestone == DrawMilestone.DEMO_COMPLETE
        assert draw.status == DrawStatus.PAID
        assert draw.payment_method is None
        assert draw.date_paid == date(2024, 5, 2)

    def test_draw_without_milestone(self):
        orm_draw = ORMDraw(id=1, project_id=1, draw_number=1, amount=Decimal("10"), status="pending")
        assert draw_to_domain(orm_draw).milestone is None


class TestJournalPageMapper:
    """Tests for JournalPage mapper."""

    def test_journal_page_to_domain(self):
        now = datetime.now(UTC)
        orm_page = ORMJournalPage(
            id=1,
            title="Walkthrough",
            content="Roof looks ok",
            icon="🏠",
            project_id=None,
            page_type="site_visit",
            is_pinned=True,
            is_archived=False,
            created_at=now,
            updated_at=now,
        )
        page = journal_page_to_domain(orm_page)

        assert isinstance(page, JournalPage)
        assert page.page_type == JournalPageType.SITE_VISIT
        assert page.is_pinned is True
        assert page.project_id is None
        assert page.updated_at == now

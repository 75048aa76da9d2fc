"""Tests for VendorService."""

from decimal import Decimal

import pytest

from flipbudget.domain.entities import VendorStatus, VendorTrade
from flipbudget.domain.errors import DependencyError, NotFoundError, ValidationError


def test_create_vendor(vendor_service):
    vendor_id = vendor_service.create_vendor(
        {"name": "Acme GC", "email": "office@acme.test", "licensed": True, "rating": 4}
    )
    vendor = vendor_service.get_vendor(vendor_id)

    assert vendor.trade == VendorTrade.GENERAL_CONTRACTOR
    assert vendor.status == VendorStatus.ACTIVE
    assert vendor.email == "office@acme.test"
    assert vendor.licensed is True
    assert vendor.rating == 4


def test_create_vendor_invalid(vendor_service):
    with pytest.raises(ValidationError) as exc_info:
        vendor_service.create_vendor({"name": "", "email": "nope"})
    assert set(exc_info.value.errors) == {"name", "email"}


def test_create_vendor_without_name(vendor_service):
    with pytest.raises(ValidationError) as exc_info:
        vendor_service.create_vendor({"trade": "plumber"})
    assert exc_info.value.messages_for("name") == ["Vendor name is required"]
    assert vendor_service.list_vendors() == []


def test_list_vendors_filters(vendor_service, sample_vendor):
    vendor_service.create_vendor({"name": "Bright Electric", "trade": "electrician", "status": "inactive"})

    assert [v.name for v in vendor_service.list_vendors()] == ["Bright Electric", "Joe's Plumbing"]
    assert [v.name for v in vendor_service.list_vendors(trade="plumber")] == ["Joe's Plumbing"]
    assert [v.name for v in vendor_service.list_vendors(status="inactive")] == ["Bright Electric"]


def test_update_vendor_keeps_other_fields(vendor_service, sample_vendor):
    vendor_service.update_vendor(sample_vendor.id, {"phone": "612-555-0100"})
    vendor = vendor_service.get_vendor(sample_vendor.id)

    assert vendor.phone == "612-555-0100"
    assert vendor.trade == VendorTrade.PLUMBER


def test_update_missing_vendor(vendor_service):
    with pytest.raises(NotFoundError):
        vendor_service.update_vendor(99, {"phone": "1"})


def test_delete_unused_vendor(vendor_service, sample_vendor):
    vendor_service.delete_vendor(sample_vendor.id)
    assert vendor_service.get_vendor(sample_vendor.id) is None


def test_delete_vendor_blocked_by_items_and_draws(vendor_service, budget_service, draw_service,
                                                  sample_project, sample_vendor):
    budget_service.create_item(sample_project.id, "plumbing", "Rough-in", vendor_id=sample_vendor.id)
    draw_service.create_draw(sample_project.id, Decimal("1000"), vendor_id=sample_vendor.id)

    with pytest.raises(DependencyError, match="1 budget item, 1 draw"):
        vendor_service.delete_vendor(sample_vendor.id)
    assert vendor_service.get_vendor(sample_vendor.id) is not None


def test_payment_summary(vendor_service, budget_service, draw_service, sample_project, sample_vendor):
    budget_service.create_item(sample_project.id, "plumbing", "Rough-in", vendor_id=sample_vendor.id)
    budget_service.create_item(sample_project.id, "plumbing", "Fixtures", vendor_id=sample_vendor.id)
    draw_service.create_draw(sample_project.id, Decimal("1000"), vendor_id=sample_vendor.id, status="paid")
    draw_service.create_draw(sample_project.id, Decimal("400"), vendor_id=sample_vendor.id)

    summary = vendor_service.payment_summary(sample_vendor.id)
    assert summary.projects_count == 1
    assert summary.total_paid == Decimal("1000")
    assert summary.pending_amount == Decimal("400")

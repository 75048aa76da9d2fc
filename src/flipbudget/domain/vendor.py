"""Vendor domain service."""

from dataclasses import asdict, fields
from decimal import Decimal
from typing import Any, Mapping, Optional

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.entities import (
    DrawStatus,
    Vendor as VendorEntity,
    VendorPaymentSummary,
    VendorStatus,
    VendorTrade,
)
from flipbudget.domain.validation import VendorFormValues, validate_vendor_form
from flipbudget.logging_config import get_logger

logger = get_logger("vendor")


def _vendor_columns(values: VendorFormValues) -> dict[str, Any]:
    record = asdict(values)
    record["trade"] = values.trade.value
    record["status"] = values.status.value
    return record


class VendorService:
    """Service for managing vendors."""

    def __init__(self, db: Database):
        """Initialize vendor service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_vendor(self, raw: Mapping[str, Any]) -> int:
        """Validate form input and create a vendor.

        Args:
            raw: Vendor form field values

        Returns:
            Vendor ID

        Raises:
            ValidationError: If any field is invalid
        """
        values = validate_vendor_form(raw)
        vendor_id = self.db.create_vendor(_vendor_columns(values))
        logger.debug("Created vendor %s (%s)", vendor_id, values.name)
        return vendor_id

    def get_vendor(self, vendor_id: int) -> Optional[VendorEntity]:
        """Get vendor by ID."""
        return self.db.get_vendor(vendor_id)

    def require_vendor(self, vendor_id: int) -> VendorEntity:
        """Get vendor by ID or raise NotFoundError."""
        vendor = self.db.get_vendor(vendor_id)
        if vendor is None:
            raise errors.NotFoundError(errors.vendor_not_found(vendor_id))
        return vendor

    def list_vendors(
        self,
        trade: Optional[VendorTrade | str] = None,
        status: Optional[VendorStatus | str] = None,
    ) -> list[VendorEntity]:
        """List vendors by name, optionally filtered by trade and status."""
        return self.db.list_vendors(trade=trade, status=status)

    def update_vendor(self, vendor_id: int, raw: Mapping[str, Any]) -> None:
        """Apply changed fields to a vendor, validating the merged result.

        Raises:
            NotFoundError: If the vendor doesn't exist
            ValidationError: If the merged values are invalid
        """
        vendor = self.require_vendor(vendor_id)
        current = {f.name: getattr(vendor, f.name) for f in fields(VendorFormValues)}
        values = validate_vendor_form({**current, **raw})
        self.db.update_vendor(vendor_id, _vendor_columns(values))
        logger.debug("Updated vendor %s", vendor_id)

    def delete_vendor(self, vendor_id: int) -> None:
        """Delete a vendor.

        Args:
            vendor_id: Vendor ID to delete

        Raises:
            NotFoundError: If vendor not found
            DependencyError: If budget items or draws still reference the vendor
        """
        self.require_vendor(vendor_id)

        item_count = len(self.db.list_budget_items(vendor_id=vendor_id))
        draw_count = len(self.db.list_draws(vendor_id=vendor_id))
        if item_count > 0 or draw_count > 0:
            raise errors.DependencyError(errors.vendor_delete_blocked(vendor_id, item_count, draw_count))

        self.db.delete_vendor(vendor_id)
        logger.debug("Deleted vendor %s", vendor_id)

    def payment_summary(self, vendor_id: int) -> VendorPaymentSummary:
        """Projects worked on and money paid or pending for a vendor."""
        self.require_vendor(vendor_id)
        items = self.db.list_budget_items(vendor_id=vendor_id)
        draws = self.db.list_draws(vendor_id=vendor_id)
        return VendorPaymentSummary(
            vendor_id=vendor_id,
            projects_count=len({item.project_id for item in items}),
            total_paid=sum((d.amount for d in draws if d.status == DrawStatus.PAID), Decimal("0")),
            pending_amount=sum((d.amount for d in draws if d.status == DrawStatus.PENDING), Decimal("0")),
        )

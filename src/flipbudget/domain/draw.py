"""Draw domain service."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.entities import (
    Draw as DrawEntity,
    DrawMilestone,
    DrawStatus,
    DrawSummary,
    PaymentMethod,
)
from flipbudget.logging_config import get_logger

logger = get_logger("draw")

ZERO = Decimal("0")

UPDATABLE_FIELDS = frozenset(
    {
        "vendor_id",
        "milestone",
        "description",
        "percent_complete",
        "amount",
        "date_requested",
        "date_paid",
        "status",
        "payment_method",
        "reference_number",
        "notes",
    }
)

_ENUM_FIELDS = {
    "status": DrawStatus,
    "milestone": DrawMilestone,
    "payment_method": PaymentMethod,
}


class DrawService:
    """Service for managing construction draws."""

    def __init__(self, db: Database):
        """Initialize draw service.

        Args:
            db: Database instance
        """
        self.db = db

    def _clean_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        cleaned = dict(fields)
        unknown = set(cleaned) - UPDATABLE_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown draw field(s): {', '.join(sorted(unknown))}")

        if "amount" in cleaned:
            try:
                amount = Decimal(str(cleaned["amount"]))
            except InvalidOperation:
                raise errors.ValidationError(errors={"amount": ["Amount must be a number"]})
            if amount <= 0:
                raise errors.ValidationError(errors={"amount": ["Amount must be greater than zero"]})
            cleaned["amount"] = amount

        if cleaned.get("percent_complete") is not None:
            try:
                percent = Decimal(str(cleaned["percent_complete"]))
            except InvalidOperation:
                raise errors.ValidationError(
                    errors={"percent_complete": ["Percent complete must be a number"]}
                )
            if percent < 0 or percent > 100:
                raise errors.ValidationError(
                    errors={"percent_complete": ["Percent complete must be between 0 and 100"]}
                )
            cleaned["percent_complete"] = percent

        for name, enum_cls in _ENUM_FIELDS.items():
            if cleaned.get(name) is not None:
                try:
                    cleaned[name] = enum_cls(cleaned[name]).value
                except ValueError:
                    choices = ", ".join(member.value for member in enum_cls)
                    raise errors.ValidationError(
                        errors={name: [f"Invalid {name} '{cleaned[name]}'. Choose from: {choices}"]}
                    )

        if cleaned.get("vendor_id") is not None and self.db.get_vendor(cleaned["vendor_id"]) is None:
            raise errors.NotFoundError(errors.vendor_not_found(cleaned["vendor_id"]))
        return cleaned

    def create_draw(self, project_id: int, amount: Decimal, **fields: Any) -> int:
        """Create the next draw for a project.

        Draw numbers run from 1 per project.

        Args:
            project_id: Project ID
            amount: Draw amount (must be positive)
            **fields: Other draw columns (vendor_id, milestone, description,
                percent_complete, date_requested, status, payment_method, ...)

        Returns:
            Draw ID

        Raises:
            NotFoundError: If the project or vendor doesn't exist
            ValidationError: If a value is invalid
        """
        if self.db.get_project(project_id) is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))

        cleaned = self._clean_fields({"amount": amount, **fields})
        cleaned.setdefault("status", DrawStatus.PENDING.value)
        if cleaned["status"] == DrawStatus.PAID.value and cleaned.get("date_paid") is None:
            cleaned["date_paid"] = date.today()

        max_number = self.db.get_max_draw_number(project_id)
        cleaned["draw_number"] = (max_number or 0) + 1
        cleaned["project_id"] = project_id

        draw_id = self.db.create_draw(cleaned)
        logger.debug("Created draw #%s (%s) for project %s", cleaned["draw_number"], draw_id, project_id)
        return draw_id

    def get_draw(self, draw_id: int) -> Optional[DrawEntity]:
        """Get draw by ID."""
        return self.db.get_draw(draw_id)

    def require_draw(self, draw_id: int) -> DrawEntity:
        """Get draw by ID or raise NotFoundError."""
        draw = self.db.get_draw(draw_id)
        if draw is None:
            raise errors.NotFoundError(errors.draw_not_found(draw_id))
        return draw

    def list_draws(self, project_id: int) -> list[DrawEntity]:
        """List a project's draws by draw number."""
        if self.db.get_project(project_id) is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))
        return self.db.list_draws(project_id=project_id)

    def update_draw(self, draw_id: int, **fields: Any) -> None:
        """Update draw fields."""
        self.require_draw(draw_id)
        if not fields:
            return
        self.db.update_draw(draw_id, self._clean_fields(fields))

    def update_status(
        self, draw_id: int, status: DrawStatus | str, date_paid: Optional[date] = None
    ) -> None:
        """Move a draw to a new status.

        Marking a draw paid without a payment date stamps today's date.
        """
        self.require_draw(draw_id)
        fields = self._clean_fields({"status": status})
        if fields["status"] == DrawStatus.PAID.value:
            fields["date_paid"] = date_paid or date.today()
        elif date_paid is not None:
            fields["date_paid"] = date_paid
        self.db.update_draw(draw_id, fields)
        logger.debug("Draw %s is now %s", draw_id, fields["status"])

    def delete_draw(self, draw_id: int) -> None:
        """Delete a draw."""
        self.require_draw(draw_id)
        self.db.delete_draw(draw_id)

    def summarize(self, project_id: int, total_budget: Decimal) -> DrawSummary:
        """Paid and outstanding draw totals against a budget.

        Approved draws count as pending until they are paid.
        """
        draws = self.list_draws(project_id)
        paid = sum((d.amount for d in draws if d.status == DrawStatus.PAID), ZERO)
        pending = sum(
            (d.amount for d in draws if d.status in (DrawStatus.PENDING, DrawStatus.APPROVED)), ZERO
        )
        return DrawSummary(
            total_budget=total_budget,
            total_paid=paid,
            total_pending=pending,
            total_drawn=sum((d.amount for d in draws), ZERO),
        )

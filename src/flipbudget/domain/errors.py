"""Shared domain error messages and error types."""

from typing import Mapping, Sequence


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    ``errors`` maps a field path to every message raised against it, so a
    caller can annotate each input at once.
    """

    def __init__(self, message: str | None = None, errors: Mapping[str, Sequence[str]] | None = None):
        self.errors: dict[str, list[str]] = {
            field: list(messages) for field, messages in (errors or {}).items()
        }
        if message is None:
            message = "; ".join(
                f"{field}: {msg}" for field, messages in self.errors.items() for msg in messages
            )
        super().__init__(message)

    def messages_for(self, field: str) -> list[str]:
        """Return the messages reported against a field path."""
        return self.errors.get(field, [])


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class PersistenceFailure(DomainError):
    """A write to the store did not complete."""


class FetchFailure(DomainError):
    """A read from the store could not complete."""


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def vendor_not_found(vendor_id: int) -> str:
    """Return message for missing vendor."""
    return f"Vendor {vendor_id} not found"


def budget_item_not_found(item_id: int) -> str:
    """Return message for missing budget item."""
    return f"Budget item {item_id} not found"


def draw_not_found(draw_id: int) -> str:
    """Return message for missing draw."""
    return f"Draw {draw_id} not found"


def journal_page_not_found(page_id: int) -> str:
    """Return message for missing journal page."""
    return f"Journal page {page_id} not found"


def budget_template_not_found(template_id: int) -> str:
    """Return message for missing budget template."""
    return f"Budget template {template_id} not found"


def calculation_settings_not_found(settings_id: int) -> str:
    """Return message for missing calculation settings."""
    return f"Calculation settings {settings_id} not found"


def vendor_delete_blocked(vendor_id: int, item_count: int, draw_count: int) -> str:
    """Return message when a vendor is still referenced by budget items or draws."""
    parts = []
    if item_count > 0:
        parts.append(f"{item_count} budget item{'s' if item_count != 1 else ''}")
    if draw_count > 0:
        parts.append(f"{draw_count} draw{'s' if draw_count != 1 else ''}")
    return (
        f"Cannot delete vendor {vendor_id}: it is assigned to {', '.join(parts)}. "
        "Please reassign or delete them first."
    )

"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from flipbudget.domain.entities import (
    Project,
    Vendor,
    BudgetItem,
    Draw,
    JournalPage,
    BudgetTemplate,
    BudgetTemplateItem,
    CalculationSettings,
)


class Database(ABC):
    """Abstract database interface for flipbudget.

    Write operations take a mapping of column values. Updates are partial:
    only the keys present in the mapping are written.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Project operations
    @abstractmethod
    def create_project(self, fields: Mapping[str, Any]) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def get_project_by_name(self, name: str) -> Optional[Project]:
        """Get project by name."""
        pass

    @abstractmethod
    def list_projects(self, status: Optional[str] = None) -> list[Project]:
        """List projects, optionally filtered by status."""
        pass

    @abstractmethod
    def update_project(self, project_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given project fields."""
        pass

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        """Delete a project with its budget items and draws."""
        pass

    # Vendor operations
    @abstractmethod
    def create_vendor(self, fields: Mapping[str, Any]) -> int:
        """Create a vendor. Returns vendor ID."""
        pass

    @abstractmethod
    def get_vendor(self, vendor_id: int) -> Optional[Vendor]:
        """Get vendor by ID."""
        pass

    @abstractmethod
    def list_vendors(
        self, trade: Optional[str] = None, status: Optional[str] = None
    ) -> list[Vendor]:
        """List vendors, optionally filtered by trade and status."""
        pass

    @abstractmethod
    def update_vendor(self, vendor_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given vendor fields."""
        pass

    @abstractmethod
    def delete_vendor(self, vendor_id: int) -> None:
        """Delete a vendor."""
        pass

    # Budget item operations
    @abstractmethod
    def create_budget_item(self, fields: Mapping[str, Any]) -> int:
        """Create a budget item. Returns item ID."""
        pass

    @abstractmethod
    def get_budget_item(self, item_id: int) -> Optional[BudgetItem]:
        """Get budget item by ID."""
        pass

    @abstractmethod
    def list_budget_items(
        self, project_id: Optional[int] = None, vendor_id: Optional[int] = None
    ) -> list[BudgetItem]:
        """List budget items ordered by sort order, optionally filtered."""
        pass

    @abstractmethod
    def update_budget_item(self, item_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given budget item fields."""
        pass

    @abstractmethod
    def delete_budget_item(self, item_id: int) -> None:
        """Delete a budget item."""
        pass

    @abstractmethod
    def get_max_sort_order(self, project_id: int, category: str) -> Optional[int]:
        """Highest sort order in a project's category, or None when empty."""
        pass

    # Draw operations
    @abstractmethod
    def create_draw(self, fields: Mapping[str, Any]) -> int:
        """Create a draw. Returns draw ID."""
        pass

    @abstractmethod
    def get_draw(self, draw_id: int) -> Optional[Draw]:
        """Get draw by ID."""
        pass

    @abstractmethod
    def list_draws(
        self, project_id: Optional[int] = None, vendor_id: Optional[int] = None
    ) -> list[Draw]:
        """List draws ordered by draw number, optionally filtered."""
        pass

    @abstractmethod
    def update_draw(self, draw_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given draw fields."""
        pass

    @abstractmethod
    def delete_draw(self, draw_id: int) -> None:
        """Delete a draw."""
        pass

    @abstractmethod
    def get_max_draw_number(self, project_id: int) -> Optional[int]:
        """Highest draw number for a project, or None when it has no draws."""
        pass

    # Journal page operations
    @abstractmethod
    def create_journal_page(self, fields: Mapping[str, Any]) -> int:
        """Create a journal page. Returns page ID."""
        pass

    @abstractmethod
    def get_journal_page(self, page_id: int) -> Optional[JournalPage]:
        """Get journal page by ID."""
        pass

    @abstractmethod
    def list_journal_pages(
        self,
        project_id: Optional[int] = None,
        general_only: bool = False,
        page_type: Optional[str] = None,
        search: Optional[str] = None,
        include_archived: bool = False,
        pinned_only: bool = False,
    ) -> list[JournalPage]:
        """List journal pages, pinned first then most recently updated.

        Args:
            project_id: Only pages tagged with this project
            general_only: Only pages without a project
            page_type: Only pages of this type
            search: Case-insensitive match against title and content
            include_archived: Include archived pages
            pinned_only: Only pinned pages
        """
        pass

    @abstractmethod
    def update_journal_page(self, page_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given journal page fields."""
        pass

    @abstractmethod
    def delete_journal_page(self, page_id: int) -> None:
        """Delete a journal page."""
        pass

    # Budget template operations
    @abstractmethod
    def create_budget_template(self, fields: Mapping[str, Any]) -> int:
        """Create a budget template. Returns template ID."""
        pass

    @abstractmethod
    def get_budget_template(self, template_id: int) -> Optional[BudgetTemplate]:
        """Get budget template by ID."""
        pass

    @abstractmethod
    def list_budget_templates(
        self,
        favorites_only: bool = False,
        property_type: Optional[str] = None,
        scope_level: Optional[str] = None,
        include_inactive: bool = False,
    ) -> list[BudgetTemplate]:
        """List templates, favorites first then most used then by name."""
        pass

    @abstractmethod
    def update_budget_template(self, template_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given budget template fields."""
        pass

    @abstractmethod
    def delete_budget_template(self, template_id: int) -> None:
        """Delete a budget template with its items."""
        pass

    @abstractmethod
    def create_budget_template_item(self, fields: Mapping[str, Any]) -> int:
        """Create a budget template item. Returns item ID."""
        pass

    @abstractmethod
    def list_budget_template_items(self, template_id: int) -> list[BudgetTemplateItem]:
        """List a template's items in sort order."""
        pass

    # Calculation settings operations
    @abstractmethod
    def create_calculation_settings(self, fields: Mapping[str, Any]) -> int:
        """Create a calculation settings row. Returns settings ID."""
        pass

    @abstractmethod
    def get_calculation_settings(self, settings_id: int) -> Optional[CalculationSettings]:
        """Get calculation settings by ID."""
        pass

    @abstractmethod
    def get_default_calculation_settings(self) -> Optional[CalculationSettings]:
        """Get the settings row marked as default, if any."""
        pass

    @abstractmethod
    def list_calculation_settings(self) -> list[CalculationSettings]:
        """List calculation settings, default first."""
        pass

    @abstractmethod
    def update_calculation_settings(self, settings_id: int, fields: Mapping[str, Any]) -> None:
        """Update the given calculation settings fields."""
        pass

    @abstractmethod
    def delete_calculation_settings(self, settings_id: int) -> None:
        """Delete a calculation settings row."""
        pass

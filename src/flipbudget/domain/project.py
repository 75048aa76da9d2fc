"""Project domain service."""

from dataclasses import asdict
from typing import Any, Mapping, Optional

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.budget import aggregate_budget
from flipbudget.domain.deal import calculate_deal_metrics
from flipbudget.domain.entities import (
    CalculationSettings,
    DealMetrics,
    Project as ProjectEntity,
    ProjectStatus,
    ValidationWarning,
)
from flipbudget.domain.settings import CalculationSettingsService
from flipbudget.domain.validation import (
    get_project_form_warnings,
    transform_database_to_form,
    transform_form_to_database,
    validate_project_form,
)
from flipbudget.logging_config import get_logger

logger = get_logger("project")


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: Database):
        """Initialize project service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_unique_name(self, name: str, project_id: Optional[int] = None) -> None:
        existing = self.db.get_project_by_name(name)
        if existing is not None and existing.id != project_id:
            raise errors.ConflictError(f"Project with name '{name}' already exists")

    def create_project(self, raw: Mapping[str, Any]) -> tuple[int, list[ValidationWarning]]:
        """Validate form input and create a project.

        Args:
            raw: Form field values (strings or typed values)

        Returns:
            Tuple of (project ID, advisory warnings)

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If a project with the same name exists
        """
        values = validate_project_form(raw)
        self._check_unique_name(values.name)
        project_id = self.db.create_project(transform_form_to_database(values))
        logger.debug("Created project %s (%s)", project_id, values.name)
        return project_id, get_project_form_warnings(values)

    def update_project(self, project_id: int, raw: Mapping[str, Any]) -> list[ValidationWarning]:
        """Apply changed fields to a project.

        The changes are merged over the stored values and the whole form is
        validated again, so cross-field date rules see the final state.

        Args:
            project_id: Project ID
            raw: Changed form field values

        Returns:
            Advisory warnings for the merged values

        Raises:
            NotFoundError: If the project doesn't exist
            ValidationError: If the merged values are invalid
            ConflictError: If the new name is taken by another project
        """
        project = self.require_project(project_id)
        merged = {**asdict(transform_database_to_form(project)), **raw}
        values = validate_project_form(merged)
        self._check_unique_name(values.name, project_id)
        self.db.update_project(project_id, transform_form_to_database(values))
        logger.debug("Updated project %s", project_id)
        return get_project_form_warnings(values)

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        """Get project by ID.

        Returns:
            Project entity or None if not found
        """
        return self.db.get_project(project_id)

    def get_project_by_name(self, name: str) -> Optional[ProjectEntity]:
        """Get project by name."""
        return self.db.get_project_by_name(name)

    def require_project(self, project_id: int) -> ProjectEntity:
        """Get project by ID or raise NotFoundError."""
        project = self.db.get_project(project_id)
        if project is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))
        return project

    def list_projects(self, status: Optional[ProjectStatus | str] = None) -> list[ProjectEntity]:
        """List projects, optionally filtered by status."""
        if status is not None:
            try:
                status = ProjectStatus(status)
            except ValueError:
                choices = ", ".join(s.value for s in ProjectStatus)
                raise errors.ValidationError(
                    errors={"status": [f"Invalid status '{status}'. Choose from: {choices}"]}
                )
        return self.db.list_projects(status=status)

    def delete_project(self, project_id: int) -> None:
        """Delete a project together with its budget items and draws.

        Journal pages attached to the project are kept as general pages.
        """
        self.require_project(project_id)
        self.db.delete_project(project_id)
        logger.debug("Deleted project %s", project_id)

    def get_deal_metrics(
        self, project_id: int, settings: Optional[CalculationSettings] = None
    ) -> DealMetrics:
        """Deal analysis for a project from its current budget.

        Uses the default calculation settings unless ``settings`` is given.
        """
        project = self.require_project(project_id)
        items = self.db.list_budget_items(project_id=project_id)
        if settings is None:
            settings = CalculationSettingsService(self.db).get_default_settings()
        return calculate_deal_metrics(project, aggregate_budget(items), settings)

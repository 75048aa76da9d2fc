"""Utilities for resolving project, vendor and template names to IDs."""

from typing import Callable, Optional, Sequence


def _resolve(
    value: str | int,
    kind: str,
    get_by_id: Callable[[int], Optional[object]],
    list_all: Callable[[], Sequence],
) -> int:
    # If it's already an integer, use it as ID
    if isinstance(value, int):
        if get_by_id(value) is None:
            raise ValueError(f"{kind} ID {value} not found")
        return value

    # Try to parse as integer (handles string IDs like "1")
    try:
        entity_id = int(value)
    except (ValueError, TypeError):
        entity_id = None
    if entity_id is not None:
        if get_by_id(entity_id) is None:
            raise ValueError(f"{kind} ID {entity_id} not found")
        return entity_id

    for entity in list_all():
        if entity.name == value:
            return entity.id

    raise ValueError(f"{kind} '{value}' not found")


def resolve_project(project_service, project: str | int) -> int:
    """Resolve project name or ID to project ID.

    Args:
        project_service: ProjectService instance
        project: Project name (str) or ID (int or string representation of int)

    Returns:
        Project ID

    Raises:
        ValueError: If project is not found
    """
    return _resolve(project, "Project", project_service.get_project, project_service.list_projects)


def resolve_vendor(vendor_service, vendor: str | int) -> int:
    """Resolve vendor name or ID to vendor ID.

    Raises:
        ValueError: If vendor is not found
    """
    return _resolve(vendor, "Vendor", vendor_service.get_vendor, vendor_service.list_vendors)


def resolve_template(template_service, template: str | int) -> int:
    """Resolve budget template name or ID to template ID.

    Raises:
        ValueError: If template is not found
    """
    return _resolve(template, "Template", template_service.get_template, template_service.list_templates)

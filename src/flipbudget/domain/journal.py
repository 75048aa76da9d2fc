"""Journal domain service.

Journal pages are the documents edited through the autosave coordinator, so
this service exposes the document store contract it expects:
``fetch_document``, ``save_document`` and ``toggle_flag``.
"""

from typing import Any, Mapping, Optional

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.entities import JournalPage as JournalPageEntity, JournalPageType
from flipbudget.logging_config import get_logger

logger = get_logger("journal")

DEFAULT_TITLE = "Untitled"
DEFAULT_ICON = "📝"

DOCUMENT_FIELDS = frozenset({"title", "content", "icon", "page_type", "project_id"})
FLAG_FIELDS = frozenset({"is_pinned", "is_archived"})


class JournalService:
    """Service for managing journal pages."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def _clean_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - DOCUMENT_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown journal page field(s): {', '.join(sorted(unknown))}")
        cleaned = dict(fields)
        if "title" in cleaned:
            cleaned["title"] = (cleaned["title"] or "").strip() or DEFAULT_TITLE
        if "page_type" in cleaned:
            try:
                cleaned["page_type"] = JournalPageType(cleaned["page_type"]).value
            except ValueError:
                choices = ", ".join(t.value for t in JournalPageType)
                raise errors.ValidationError(
                    errors={"page_type": [f"Invalid page type '{cleaned['page_type']}'. Choose from: {choices}"]}
                )
        if cleaned.get("project_id") is not None and self.db.get_project(cleaned["project_id"]) is None:
            raise errors.NotFoundError(errors.project_not_found(cleaned["project_id"]))
        return cleaned

    def create_page(self, **fields: Any) -> int:
        """Create a journal page.

        Args:
            **fields: Page fields (title, content, icon, page_type, project_id).
                Missing fields take defaults: an untitled, empty note.

        Returns:
            Journal page ID
        """
        page = {
            "title": DEFAULT_TITLE,
            "content": "",
            "icon": DEFAULT_ICON,
            "page_type": JournalPageType.NOTE.value,
            **fields,
        }
        page_id = self.db.create_journal_page(self._clean_fields(page))
        logger.debug("Created journal page %s", page_id)
        return page_id

    def get_page(self, page_id: int) -> Optional[JournalPageEntity]:
        """Get journal page by ID."""
        return self.db.get_journal_page(page_id)

    def fetch_document(self, page_id: int) -> JournalPageEntity:
        """Load a page for editing.

        Raises:
            NotFoundError: If the page doesn't exist
            FetchFailure: If the store could not be read
        """
        page = self.db.get_journal_page(page_id)
        if page is None:
            raise errors.NotFoundError(errors.journal_page_not_found(page_id))
        return page

    def list_pages(
        self,
        project_id: Optional[int] = None,
        general_only: bool = False,
        page_type: Optional[JournalPageType | str] = None,
        search: Optional[str] = None,
        include_archived: bool = False,
        pinned_only: bool = False,
    ) -> list[JournalPageEntity]:
        """List pages, pinned first and then most recently updated.

        Args:
            project_id: Only pages attached to this project
            general_only: Only pages not attached to any project
            page_type: Only pages of this type
            search: Case-insensitive match against title and content
            include_archived: Include archived pages
            pinned_only: Only pinned pages
        """
        return self.db.list_journal_pages(
            project_id=project_id,
            general_only=general_only,
            page_type=page_type,
            search=search,
            include_archived=include_archived,
            pinned_only=pinned_only,
        )

    def save_document(self, page_id: int, fields: Mapping[str, Any]) -> None:
        """Write a partial set of page fields in a single attempt.

        Raises:
            NotFoundError: If the page doesn't exist
            ValidationError: If a field is unknown or invalid
            PersistenceFailure: If the write did not complete
        """
        if not fields:
            return
        self.db.update_journal_page(page_id, self._clean_fields(fields))
        logger.debug("Saved journal page %s: %s", page_id, sorted(fields))

    def toggle_flag(self, page_id: int, flag: str, value: bool) -> None:
        """Set ``is_pinned`` or ``is_archived`` on a page."""
        if flag not in FLAG_FIELDS:
            raise errors.ValidationError(f"Unknown flag '{flag}'. Choose from: is_archived, is_pinned")
        self.db.update_journal_page(page_id, {flag: bool(value)})

    def delete_page(self, page_id: int) -> None:
        """Delete a journal page."""
        self.fetch_document(page_id)
        self.db.delete_journal_page(page_id)

"""Shared pytest fixtures for flipbudget tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from flipbudget.database.factories import create_sqlite_database
from flipbudget.domain.budget import BudgetService
from flipbudget.domain.draw import DrawService
from flipbudget.domain.journal import JournalService
from flipbudget.domain.project import ProjectService
from flipbudget.domain.settings import CalculationSettingsService
from flipbudget.domain.template import TemplateService
from flipbudget.domain.vendor import VendorService
from flipbudget.logging_config import reset_logging


@pytest.fixture(autouse=True)
def clean_logging():
    """Drop handlers installed by CLI invocations between tests."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def fresh_db(temp_db):
    """Open a second connection to the temporary database.

    Useful after CLI invocations, which write through their own connection.
    """
    opened = []

    def _open():
        db = create_sqlite_database(database_path=temp_db.database_path)
        opened.append(db)
        return db

    yield _open

    for db in opened:
        db.disconnect()


@pytest.fixture
def project_service(temp_db):
    """Create a ProjectService with a temporary database."""
    return ProjectService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def vendor_service(temp_db):
    """Create a VendorService with a temporary database."""
    return VendorService(temp_db)


@pytest.fixture
def draw_service(temp_db):
    """Create a DrawService with a temporary database."""
    return DrawService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def template_service(temp_db):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    """Create a CalculationSettingsService with a temporary database."""
    return CalculationSettingsService(temp_db)


@pytest.fixture
def sample_project(project_service):
    """Create a sample project for testing."""
    project_id, _ = project_service.create_project(
        {
            "name": "123 Main St",
            "city": "Minneapolis",
            "arv": "250000",
            "purchase_price": "150000",
            "closing_costs": "3000",
            "holding_costs_monthly": "1500",
            "hold_months": "4",
        }
    )
    return project_service.get_project(project_id)


@pytest.fixture
def sample_vendor(vendor_service):
    """Create a sample vendor for testing."""
    vendor_id = vendor_service.create_vendor({"name": "Joe's Plumbing", "trade": "plumber"})
    return vendor_service.get_vendor(vendor_id)


@pytest.fixture
def sample_items(budget_service, sample_project):
    """Create a small three-column budget and return the item IDs by name."""
    items = {}
    items["Demo labor"] = budget_service.create_item(
        sample_project.id, "demo", "Demo labor", underwriting_amount=Decimal("2000")
    )
    items["Cabinets"] = budget_service.create_item(
        sample_project.id,
        "kitchen",
        "Cabinets",
        underwriting_amount=Decimal("8000"),
        forecast_amount=Decimal("9000"),
        actual_amount=Decimal("9500"),
    )
    items["Counters"] = budget_service.create_item(
        sample_project.id, "kitchen", "Counters", underwriting_amount=Decimal("3000")
    )
    return items


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

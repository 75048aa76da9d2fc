"""Tests for project commands."""

from decimal import Decimal

from flipbudget.cli.main import cli


def invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_project_create(cli_runner, temp_db, fresh_db):
    result = invoke(
        cli_runner, temp_db, "project", "create", "123 Main St",
        "--arv", "$250,000", "--purchase-price", "150000", "--city", "Minneapolis",
    )

    assert result.exit_code == 0
    assert "Created project '123 Main St'" in result.output
    assert "ID:" in result.output

    project = fresh_db().get_project_by_name("123 Main St")
    assert project.arv == Decimal("250000")
    assert project.state == "MN"


def test_project_create_reports_warnings(cli_runner, temp_db):
    result = invoke(
        cli_runner, temp_db, "project", "create", "Thin deal", "--arv", "90000", "--purchase-price", "100000"
    )

    assert result.exit_code == 0
    assert "[warning] arv: ARV is less than purchase price - this deal may not be profitable" in result.output


def test_project_create_invalid_dates(cli_runner, temp_db):
    result = invoke(
        cli_runner, temp_db, "project", "create", "Bad dates",
        "--contract-date", "2024-01-10", "--close-date", "2024-01-05",
    )

    assert result.exit_code == 1
    assert "close_date: Close date must be after contract date" in result.output


def test_project_create_lists_every_field_error(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "project", "create", "x", "--zip", "123", "--beds", "99")

    assert result.exit_code == 1
    assert "zip: ZIP code must be 5 digits" in result.output
    assert "beds: Bedrooms seems too high - max is 50" in result.output


def test_project_create_duplicate(cli_runner, temp_db):
    invoke(cli_runner, temp_db, "project", "create", "123 Main St")
    result = invoke(cli_runner, temp_db, "project", "create", "123 Main St")

    assert result.exit_code == 1
    assert "already exists" in result.output.lower()


def test_project_validate(cli_runner, temp_db):
    result = invoke(
        cli_runner, temp_db, "project", "validate", "--name", "x", "--year-built", "1920"
    )

    assert result.exit_code == 0
    assert "Valid" in result.output
    assert "[info] year_built:" in result.output


def test_project_validate_without_name(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "project", "validate", "--arv", "200000")

    assert result.exit_code == 1
    assert "name: Property name is required - typically the street address" in result.output


def test_project_list(cli_runner, temp_db):
    empty = invoke(cli_runner, temp_db, "project", "list")
    assert "No projects found" in empty.output

    invoke(cli_runner, temp_db, "project", "create", "123 Main St", "--status", "in_rehab")
    invoke(cli_runner, temp_db, "project", "create", "456 Oak Ave")

    result = invoke(cli_runner, temp_db, "project", "list", "--status", "in_rehab")
    assert result.exit_code == 0
    assert "123 Main St" in result.output
    assert "456 Oak Ave" not in result.output


def test_project_show(cli_runner, temp_db):
    invoke(
        cli_runner, temp_db, "project", "create", "123 Main St",
        "--arv", "250000", "--purchase-price", "150000",
    )
    invoke(cli_runner, temp_db, "budget", "add", "123 Main St", "kitchen", "Cabinets", "--underwriting", "8000")

    result = invoke(cli_runner, temp_db, "project", "show", "123 Main St")

    assert result.exit_code == 0
    assert "123 Main St" in result.output
    assert "Underwriting: $8,000.00" in result.output
    assert "MAO (70% rule): $166,200.00" in result.output


def test_project_show_unknown(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "project", "show", "Nowhere")

    assert result.exit_code == 1
    assert "Project 'Nowhere' not found" in result.output


def test_project_update(cli_runner, temp_db, fresh_db):
    invoke(cli_runner, temp_db, "project", "create", "123 Main St", "--city", "Minneapolis")

    result = invoke(cli_runner, temp_db, "project", "update", "123 Main St", "--status", "sold", "--city", "")

    assert result.exit_code == 0
    project = fresh_db().get_project_by_name("123 Main St")
    assert project.status.value == "sold"
    assert project.city is None


def test_project_update_nothing(cli_runner, temp_db):
    invoke(cli_runner, temp_db, "project", "create", "123 Main St")
    result = invoke(cli_runner, temp_db, "project", "update", "123 Main St")

    assert result.exit_code == 1
    assert "No fields to update" in result.output


def test_project_delete(cli_runner, temp_db, fresh_db):
    invoke(cli_runner, temp_db, "project", "create", "123 Main St")

    cancelled = invoke(cli_runner, temp_db, "project", "delete", "123 Main St", input="n\n")
    assert "Deletion cancelled" in cancelled.output

    result = invoke(cli_runner, temp_db, "project", "delete", "1", "--yes")
    assert result.exit_code == 0
    assert "Deleted project '123 Main St'" in result.output
    assert fresh_db().list_projects() == []

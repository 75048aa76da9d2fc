"""Tests for template and settings commands."""

from decimal import Decimal

import pytest

from flipbudget.cli.main import cli


def invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


@pytest.fixture
def budgeted_project(cli_runner, temp_db):
    invoke(cli_runner, temp_db, "project", "create", "123 Main St", "--arv", "250000", "--purchase-price", "150000")
    invoke(cli_runner, temp_db, "budget", "add", "123 Main St", "kitchen", "Cabinets", "--underwriting", "8000")
    invoke(cli_runner, temp_db, "budget", "add", "123 Main St", "demo", "Dumpster", "--underwriting", "600")
    return "123 Main St"


class TestTemplateCommands:
    """Tests for the template command group."""

    def test_save_and_show(self, cli_runner, temp_db, budgeted_project):
        """Test saving a project budget and showing the template."""
        result = invoke(cli_runner, temp_db, "template", "save", budgeted_project, "Main St scope", "--scope", "light")

        assert result.exit_code == 0
        assert "Saved template 'Main St scope' (ID: 1) with 2 items" in result.output

        result = invoke(cli_runner, temp_db, "template", "show", "Main St scope")
        assert result.exit_code == 0
        assert "Scope:         light" in result.output
        assert "Cabinets" in result.output
        assert "Total: $8,600.00" in result.output

    def test_apply_to_new_project(self, cli_runner, temp_db, fresh_db, budgeted_project):
        """Test applying a template adds items and counts usage."""
        invoke(cli_runner, temp_db, "template", "save", budgeted_project, "Main St scope")
        invoke(cli_runner, temp_db, "project", "create", "456 Oak Ave")

        result = invoke(cli_runner, temp_db, "template", "apply", "Main St scope", "456 Oak Ave")

        assert result.exit_code == 0
        assert "Applied template 1: 2 added, 0 updated, 0 skipped" in result.output
        db = fresh_db()
        oak = db.get_project_by_name("456 Oak Ave")
        items = {i.item: i for i in db.list_budget_items(project_id=oak.id)}
        assert items["Cabinets"].underwriting_amount == Decimal("8000")
        assert db.get_budget_template(1).times_used == 1

    def test_apply_replace_can_be_cancelled(self, cli_runner, temp_db, fresh_db, budgeted_project):
        """Test that replace mode asks before deleting items."""
        invoke(cli_runner, temp_db, "template", "save", budgeted_project, "Main St scope")

        result = invoke(
            cli_runner, temp_db, "template", "apply", "1", budgeted_project, "--mode", "replace", input="n\n"
        )

        assert "Cancelled." in result.output
        assert fresh_db().get_budget_template(1).times_used == 0

    def test_apply_empty_template(self, cli_runner, temp_db, budgeted_project):
        """Test that an empty template reports an error."""
        invoke(cli_runner, temp_db, "project", "create", "Empty lot")
        invoke(cli_runner, temp_db, "template", "save", "Empty lot", "Nothing")

        result = invoke(cli_runner, temp_db, "template", "apply", "Nothing", budgeted_project)

        assert result.exit_code == 1
        assert "Error: Template has no items" in result.output

    def test_favorite_and_list(self, cli_runner, temp_db, budgeted_project):
        """Test that favorites are starred in the list."""
        invoke(cli_runner, temp_db, "template", "save", budgeted_project, "Main St scope")
        invoke(cli_runner, temp_db, "template", "favorite", "Main St scope")

        result = invoke(cli_runner, temp_db, "template", "list", "--favorites")

        assert result.exit_code == 0
        assert "* ID:   1 | Main St scope" in result.output

    def test_duplicate_and_delete(self, cli_runner, temp_db, fresh_db, budgeted_project):
        """Test copying a template and deleting the original."""
        invoke(cli_runner, temp_db, "template", "save", budgeted_project, "Main St scope")

        result = invoke(cli_runner, temp_db, "template", "duplicate", "Main St scope")
        assert "Created 'Main St scope (Copy)' (ID: 2)" in result.output

        result = invoke(cli_runner, temp_db, "template", "delete", "1", "--yes")
        assert result.exit_code == 0
        db = fresh_db()
        assert db.get_budget_template(1) is None
        assert len(db.list_budget_template_items(2)) == 2

    def test_unknown_template(self, cli_runner, temp_db):
        """Test resolving a missing template."""
        result = invoke(cli_runner, temp_db, "template", "show", "Nope")

        assert result.exit_code == 1
        assert "Template 'Nope' not found" in result.output


class TestSettingsCommands:
    """Tests for the settings command group."""

    def test_show_builtin_defaults(self, cli_runner, temp_db):
        """Test that the built-in defaults are shown before any save."""
        result = invoke(cli_runner, temp_db, "settings", "show")

        assert result.exit_code == 0
        assert "Default (built-in defaults)" in result.output
        assert "MAO method:         seventy_rule (70% rule)" in result.output

    def test_set_changes_project_mao(self, cli_runner, temp_db, budgeted_project):
        """Test that saved settings change the project's deal analysis."""
        result = invoke(cli_runner, temp_db, "settings", "set", "--multiplier", "0.75", "--include-closing")
        assert result.exit_code == 0
        assert "Saved calculation settings (ID: 1)" in result.output

        result = invoke(cli_runner, temp_db, "project", "show", budgeted_project)

        # 250,000 x 0.75 - 8,600 x 1.1
        assert "MAO (75% rule): $178,040.00" in result.output
        assert "Rating:" in result.output

    def test_set_invalid(self, cli_runner, temp_db):
        """Test that validation errors are listed per field."""
        result = invoke(cli_runner, temp_db, "settings", "set", "--multiplier", "1.2")

        assert result.exit_code == 1
        assert "mao_arv_multiplier: mao_arv_multiplier must be above 0 and at most 1" in result.output

    def test_set_bad_amount(self, cli_runner, temp_db):
        """Test that unparseable amounts are rejected before saving."""
        result = invoke(cli_runner, temp_db, "settings", "set", "--target-profit", "lots")

        assert result.exit_code == 1
        assert "Invalid amount for --target-profit" in result.output

    def test_set_nothing(self, cli_runner, temp_db):
        """Test that set without options is an error."""
        result = invoke(cli_runner, temp_db, "settings", "set")

        assert result.exit_code == 1
        assert "No settings to change" in result.output

    def test_reset(self, cli_runner, temp_db, fresh_db):
        """Test that reset removes the saved row."""
        invoke(cli_runner, temp_db, "settings", "set", "--mao-method", "gross_margin")

        result = invoke(cli_runner, temp_db, "settings", "reset", "--yes")

        assert result.exit_code == 0
        assert fresh_db().get_default_calculation_settings() is None

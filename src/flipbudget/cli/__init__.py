"""CLI layer for flipbudget application."""

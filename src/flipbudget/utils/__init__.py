"""Utility functions for flipbudget."""

from flipbudget.utils.date_parser import parse_date, format_iso_date
from flipbudget.utils.amount_parser import parse_amount
from flipbudget.utils.resolver import resolve_project, resolve_vendor

__all__ = ["parse_date", "format_iso_date", "parse_amount", "resolve_project", "resolve_vendor"]

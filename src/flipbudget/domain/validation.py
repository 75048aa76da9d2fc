"""Form validation for project and vendor data entry.

Raw form input (strings from the CLI, or already-typed values) is coerced to
canonical types and checked against per-field constraints. Every problem is
collected into one ``ValidationError`` keyed by field path. Cross-field date
ordering is a declarative rule list evaluated independently, and advisory
warnings are computed separately so they never block a submission.
"""

import re
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from flipbudget.domain.entities import (
    Project,
    ProjectStatus,
    PropertyType,
    ValidationWarning,
    VendorStatus,
    VendorTrade,
    WarningSeverity,
)
from flipbudget.domain.errors import ValidationError
from flipbudget.utils.amount_parser import parse_amount
from flipbudget.utils.date_parser import format_iso_date, parse_date

ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
STATE_PATTERN = re.compile(r"^[A-Z]{2}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

RELIABILITY_CHOICES = ("excellent", "good", "fair", "poor")
PRICE_LEVEL_CHOICES = ("$", "$$", "$$$")

_MISSING = object()


@dataclass(frozen=True)
class ProjectFormValues:
    """Canonical project form input. Defaults match a blank new-project form."""

    name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = "MN"
    zip: Optional[str] = None
    beds: Optional[int] = None
    baths: Optional[Decimal] = None
    sqft: Optional[int] = None
    year_built: Optional[int] = None
    property_type: PropertyType = PropertyType.SFH
    arv: Optional[Decimal] = None
    purchase_price: Optional[Decimal] = None
    closing_costs: Decimal = Decimal("0")
    holding_costs_monthly: Decimal = Decimal("0")
    hold_months: int = 4
    selling_cost_percent: Decimal = Decimal("8")
    contingency_percent: Decimal = Decimal("10")
    status: ProjectStatus = ProjectStatus.LEAD
    contract_date: Optional[date] = None
    close_date: Optional[date] = None
    rehab_start_date: Optional[date] = None
    target_complete_date: Optional[date] = None
    list_date: Optional[date] = None
    sale_date: Optional[date] = None
    notes: Optional[str] = None


PROJECT_FORM_DEFAULTS = ProjectFormValues()

MILESTONE_DATE_FIELDS = (
    "contract_date",
    "close_date",
    "rehab_start_date",
    "target_complete_date",
    "list_date",
    "sale_date",
)


@dataclass(frozen=True)
class DateOrderRule:
    """``later`` must not fall before ``earlier`` when both are set."""

    earlier: str
    later: str
    message: str

    def violated(self, values: Mapping[str, Optional[date]]) -> bool:
        start = values.get(self.earlier)
        end = values.get(self.later)
        if start is None or end is None:
            return False
        return end < start


DATE_ORDER_RULES = (
    DateOrderRule("contract_date", "close_date", "Close date must be after contract date"),
    DateOrderRule("close_date", "rehab_start_date", "Rehab start date should be on or after close date"),
    DateOrderRule(
        "rehab_start_date", "target_complete_date", "Target completion date must be after rehab start date"
    ),
    DateOrderRule("rehab_start_date", "list_date", "List date should be after rehab starts"),
    DateOrderRule("list_date", "sale_date", "Sale date must be after list date"),
)


@dataclass(frozen=True)
class NumberRule:
    """Range (and optional whole-number or step) constraint on a numeric field."""

    path: str
    label: str
    minimum: Decimal
    maximum: Decimal
    min_message: str
    max_message: str
    nullable: bool = True
    integer_message: Optional[str] = None
    step: Optional[Decimal] = None
    step_message: Optional[str] = None


def _currency_rule(path: str, label: str, maximum: int, nullable: bool = True) -> NumberRule:
    return NumberRule(
        path=path,
        label=label,
        minimum=Decimal("0"),
        maximum=Decimal(maximum),
        min_message=f"{label} cannot be negative",
        max_message=f"{label} cannot exceed ${maximum:,}",
        nullable=nullable,
    )


def _percent_rule(path: str, label: str, maximum: int) -> NumberRule:
    return NumberRule(
        path=path,
        label=label,
        minimum=Decimal("0"),
        maximum=Decimal(maximum),
        min_message=f"{label} cannot be less than 0%",
        max_message=f"{label} cannot exceed {maximum}%",
        nullable=False,
    )


def project_number_rules(today: Optional[date] = None) -> tuple[NumberRule, ...]:
    """Numeric field constraints; the year-built ceiling moves with the calendar."""
    today = today or date.today()
    return (
        NumberRule(
            "beds", "Bedrooms", Decimal("0"), Decimal("50"),
            "Bedrooms cannot be negative", "Bedrooms seems too high - max is 50",
            integer_message="Bedrooms must be a whole number",
        ),
        NumberRule(
            "baths", "Bathrooms", Decimal("0"), Decimal("50"),
            "Bathrooms cannot be negative", "Bathrooms seems too high - max is 50",
            step=Decimal("0.5"),
            step_message="Bathrooms should be in increments of 0.5 (e.g., 1, 1.5, 2)",
        ),
        NumberRule(
            "sqft", "Square footage", Decimal("0"), Decimal("100000"),
            "Square footage cannot be negative", "Square footage cannot exceed 100,000",
            integer_message="Square footage must be a whole number",
        ),
        NumberRule(
            "year_built", "Year built", Decimal("1800"), Decimal(today.year + 1),
            "Year built must be after 1800", "Year built cannot be in the future",
            integer_message="Year built must be a whole number",
        ),
        _currency_rule("arv", "ARV (After Repair Value)", 100_000_000),
        _currency_rule("purchase_price", "Purchase price", 100_000_000),
        _currency_rule("closing_costs", "Closing costs", 1_000_000, nullable=False),
        _currency_rule("holding_costs_monthly", "Monthly holding costs", 100_000, nullable=False),
        NumberRule(
            "hold_months", "Hold months", Decimal("0"), Decimal("60"),
            "Hold months cannot be negative", "Hold months cannot exceed 60 (5 years)",
            nullable=False, integer_message="Hold months must be a whole number",
        ),
        _percent_rule("selling_cost_percent", "Selling cost percentage", 20),
        _percent_rule("contingency_percent", "Contingency percentage", 50),
    )


class _FormReader:
    """Reads raw form values and collects field errors."""

    def __init__(self, raw: Mapping[str, Any], defaults: Any):
        self.raw = raw
        self.defaults = defaults
        self.errors: dict[str, list[str]] = {}

    def error(self, path: str, message: str) -> None:
        self.errors.setdefault(path, []).append(message)

    def get(self, path: str) -> Any:
        value = self.raw.get(path, _MISSING)
        if value is _MISSING:
            value = getattr(self.defaults, path)
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                return None
        return value

    def text(self, path: str, max_length: int, message: str, required_message: Optional[str] = None) -> Optional[str]:
        value = self.get(path)
        if value is None:
            if required_message:
                self.error(path, required_message)
            return None
        value = str(value)
        if len(value) > max_length:
            self.error(path, message)
        return value

    def number(self, rule: NumberRule) -> Any:
        value = self.get(rule.path)
        if value is None:
            if not rule.nullable:
                self.error(rule.path, f"{rule.label} is required")
            return None
        if isinstance(value, bool):
            self.error(rule.path, f"{rule.label} must be a number")
            return None
        try:
            if isinstance(value, str):
                number = parse_amount(value)
            elif isinstance(value, Decimal):
                number = value
            else:
                number = Decimal(str(value))
        except (ValueError, InvalidOperation):
            self.error(rule.path, f"{rule.label} must be a number")
            return None
        if not number.is_finite():
            self.error(rule.path, f"{rule.label} must be a number")
            return None

        if number < rule.minimum:
            self.error(rule.path, rule.min_message)
        if number > rule.maximum:
            self.error(rule.path, rule.max_message)
        if rule.integer_message and number != number.to_integral_value():
            self.error(rule.path, rule.integer_message)
            return None
        if rule.step is not None and number % rule.step != 0:
            self.error(rule.path, rule.step_message)
        if rule.integer_message:
            return int(number)
        return number

    def choice(self, path: str, enum_cls, label: str) -> Any:
        value = self.get(path)
        if value is None:
            self.error(path, f"{label} is required")
            return None
        try:
            return enum_cls(value.lower() if isinstance(value, str) else value)
        except ValueError:
            choices = ", ".join(member.value for member in enum_cls)
            self.error(path, f"Invalid {label.lower()} '{value}'. Choose from: {choices}")
            return None

    def date(self, path: str, label: str) -> Optional[date]:
        value = self.get(path)
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return parse_date(str(value))
        except ValueError:
            self.error(path, f"{label} must be a valid date")
            return None

    def flag(self, path: str) -> bool:
        value = self.get(path)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "yes", "y", "1"):
            return True
        if isinstance(value, str) and value.lower() in ("false", "no", "n", "0"):
            return False
        if isinstance(value, int):
            return bool(value)
        self.error(path, f"'{value}' is not a yes/no value")
        return False


def check_date_order(values: Mapping[str, Optional[date]]) -> dict[str, list[str]]:
    """Evaluate every date ordering rule and collect all violations."""
    violations: dict[str, list[str]] = {}
    for rule in DATE_ORDER_RULES:
        if rule.violated(values):
            violations.setdefault(rule.later, []).append(rule.message)
    return violations


def validate_project_form(raw: Mapping[str, Any], today: Optional[date] = None) -> ProjectFormValues:
    """Coerce and validate project form input.

    Args:
        raw: Field values keyed by field name. Missing keys take form defaults;
            blank strings mean "not set".
        today: Reference date for the year-built ceiling (defaults to today)

    Returns:
        Canonical ProjectFormValues

    Raises:
        ValidationError: With every field error found, keyed by field path
    """
    unknown = set(raw) - {f.name for f in fields(ProjectFormValues)}
    reader = _FormReader(raw, PROJECT_FORM_DEFAULTS)
    for path in sorted(unknown):
        reader.error(path, f"Unknown field '{path}'")

    values: dict[str, Any] = {}
    values["name"] = reader.text(
        "name", 200, "Property name cannot exceed 200 characters",
        required_message="Property name is required - typically the street address",
    )
    values["address"] = reader.text("address", 500, "Address cannot exceed 500 characters")
    values["city"] = reader.text("city", 100, "City name cannot exceed 100 characters")
    values["state"] = _read_state(reader)
    values["zip"] = _read_zip(reader)

    for rule in project_number_rules(today):
        values[rule.path] = reader.number(rule)

    values["property_type"] = reader.choice("property_type", PropertyType, "Property type")
    values["status"] = reader.choice("status", ProjectStatus, "Status")

    labels = {
        "contract_date": "Contract date",
        "close_date": "Close date",
        "rehab_start_date": "Rehab start date",
        "target_complete_date": "Target completion date",
        "list_date": "List date",
        "sale_date": "Sale date",
    }
    for path in MILESTONE_DATE_FIELDS:
        values[path] = reader.date(path, labels[path])

    values["notes"] = reader.text("notes", 10000, "Notes cannot exceed 10,000 characters")

    for path, messages in check_date_order(values).items():
        for message in messages:
            reader.error(path, message)

    if reader.errors:
        raise ValidationError(errors=reader.errors)
    return ProjectFormValues(**values)


def _read_state(reader: _FormReader) -> Optional[str]:
    value = reader.get("state")
    if value is None:
        return None
    value = str(value).upper()
    if len(value) != 2:
        reader.error("state", "State must be a 2-letter abbreviation (e.g., MN, CA, TX)")
    elif not STATE_PATTERN.match(value):
        reader.error("state", "State must be letters only (e.g., MN)")
    return value


def _read_zip(reader: _FormReader) -> Optional[str]:
    value = reader.get("zip")
    if value is None:
        return None
    value = str(value)
    if not ZIP_PATTERN.match(value):
        reader.error(
            "zip", "ZIP code must be 5 digits (e.g., 55401) or 9 digits with dash (55401-1234)"
        )
    return value


def get_project_form_warnings(values: ProjectFormValues) -> list[ValidationWarning]:
    """Advisory checks on valid project values. Never blocks submission."""
    warnings: list[ValidationWarning] = []

    # ARV vs purchase price
    if values.arv and values.purchase_price:
        ratio = values.arv / values.purchase_price
        if ratio < 1:
            warnings.append(
                ValidationWarning(
                    "arv",
                    "ARV is less than purchase price - this deal may not be profitable",
                    WarningSeverity.WARNING,
                )
            )
        elif ratio < Decimal("1.1"):
            warnings.append(
                ValidationWarning(
                    "arv",
                    "ARV is less than 10% above purchase price - margins may be thin",
                    WarningSeverity.INFO,
                )
            )

    if values.holding_costs_monthly and values.hold_months:
        total_holding = values.holding_costs_monthly * values.hold_months
        if values.arv and total_holding > values.arv * Decimal("0.1"):
            warnings.append(
                ValidationWarning(
                    "holding_costs_monthly",
                    "Total holding costs exceed 10% of ARV - consider reducing hold time",
                    WarningSeverity.WARNING,
                )
            )

    if values.year_built and values.year_built < 1950:
        warnings.append(
            ValidationWarning(
                "year_built",
                "Pre-1950 construction may have lead paint, asbestos, or other considerations",
                WarningSeverity.INFO,
            )
        )

    if values.sqft and values.sqft > 5000:
        warnings.append(
            ValidationWarning(
                "sqft",
                "Large property (5000+ sqft) - rehab costs may be higher than typical",
                WarningSeverity.INFO,
            )
        )

    if values.contingency_percent < 5 and values.status != ProjectStatus.SOLD:
        warnings.append(
            ValidationWarning(
                "contingency_percent",
                "Contingency below 5% is risky - unexpected costs are common in rehabs",
                WarningSeverity.WARNING,
            )
        )

    if values.hold_months > 12:
        warnings.append(
            ValidationWarning(
                "hold_months",
                "Hold period over 12 months may increase carrying costs significantly",
                WarningSeverity.INFO,
            )
        )

    return warnings


def transform_form_to_database(values: ProjectFormValues) -> dict[str, Any]:
    """Column mapping for the store, with enums as their text values."""
    record = asdict(values)
    record["property_type"] = values.property_type.value
    record["status"] = values.status.value
    return record


def transform_database_to_form(project: Project) -> ProjectFormValues:
    """Form values for editing an existing project."""
    return ProjectFormValues(
        **{f.name: getattr(project, f.name) for f in fields(ProjectFormValues)}
    )


def form_to_json(values: ProjectFormValues) -> dict[str, Any]:
    """JSON-friendly form values: dates as YYYY-MM-DD, decimals as strings."""
    record = transform_form_to_database(values)
    for path in MILESTONE_DATE_FIELDS:
        record[path] = format_iso_date(record[path])
    for key, value in record.items():
        if isinstance(value, Decimal):
            record[key] = str(value)
    return record


@dataclass(frozen=True)
class VendorFormValues:
    """Canonical vendor form input."""

    name: str = ""
    trade: VendorTrade = VendorTrade.GENERAL_CONTRACTOR
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    licensed: bool = False
    insured: bool = False
    w9_on_file: bool = False
    rating: Optional[int] = None
    reliability: Optional[str] = None
    price_level: Optional[str] = None
    status: VendorStatus = VendorStatus.ACTIVE
    notes: Optional[str] = None


VENDOR_FORM_DEFAULTS = VendorFormValues()

_RATING_RULE = NumberRule(
    "rating", "Rating", Decimal("1"), Decimal("5"),
    "Rating must be between 1 and 5", "Rating must be between 1 and 5",
    integer_message="Rating must be a whole number",
)


def validate_vendor_form(raw: Mapping[str, Any]) -> VendorFormValues:
    """Coerce and validate vendor form input.

    Raises:
        ValidationError: With every field error found, keyed by field path
    """
    unknown = set(raw) - {f.name for f in fields(VendorFormValues)}
    reader = _FormReader(raw, VENDOR_FORM_DEFAULTS)
    for path in sorted(unknown):
        reader.error(path, f"Unknown field '{path}'")

    values: dict[str, Any] = {}
    values["name"] = reader.text("name", 200, "Vendor name cannot exceed 200 characters",
                                 required_message="Vendor name is required")
    values["trade"] = reader.choice("trade", VendorTrade, "Trade")
    values["contact_name"] = reader.text("contact_name", 200, "Contact name cannot exceed 200 characters")
    values["phone"] = reader.text("phone", 50, "Phone cannot exceed 50 characters")
    values["address"] = reader.text("address", 500, "Address cannot exceed 500 characters")

    email = reader.get("email")
    if email is not None and not EMAIL_PATTERN.match(str(email)):
        reader.error("email", "Invalid email address")
    values["email"] = email

    website = reader.get("website")
    if website is not None:
        parsed = urlparse(str(website))
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            reader.error("website", "Invalid URL")
    values["website"] = website

    for path in ("licensed", "insured", "w9_on_file"):
        values[path] = reader.flag(path)

    values["rating"] = reader.number(_RATING_RULE)

    reliability = reader.get("reliability")
    if reliability is not None:
        reliability = str(reliability).lower()
        if reliability not in RELIABILITY_CHOICES:
            reader.error("reliability", f"Invalid reliability '{reliability}'. Choose from: "
                         + ", ".join(RELIABILITY_CHOICES))
    values["reliability"] = reliability

    price_level = reader.get("price_level")
    if price_level is not None and price_level not in PRICE_LEVEL_CHOICES:
        reader.error("price_level", "Price level must be $, $$ or $$$")
    values["price_level"] = price_level

    values["status"] = reader.choice("status", VendorStatus, "Status")
    values["notes"] = reader.text("notes", 10000, "Notes cannot exceed 10,000 characters")

    if reader.errors:
        raise ValidationError(errors=reader.errors)
    return VendorFormValues(**values)

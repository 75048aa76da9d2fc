"""Domain model entities for flipbudget.

These are pure data classes representing business concepts, independent of
database schema. Derived structures (budget aggregates, deal metrics,
validation warnings) live here too so every layer shares one vocabulary.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class ProjectStatus(str, Enum):
    LEAD = "lead"
    ANALYZING = "analyzing"
    UNDER_CONTRACT = "under_contract"
    IN_REHAB = "in_rehab"
    LISTED = "listed"
    SOLD = "sold"
    DEAD = "dead"


class PropertyType(str, Enum):
    SFH = "sfh"
    DUPLEX = "duplex"
    TRIPLEX = "triplex"
    FOURPLEX = "fourplex"
    TOWNHOUSE = "townhouse"
    CONDO = "condo"


class BudgetCategory(str, Enum):
    SOFT_COSTS = "soft_costs"
    DEMO = "demo"
    STRUCTURAL = "structural"
    PLUMBING = "plumbing"
    HVAC = "hvac"
    ELECTRICAL = "electrical"
    INSULATION_DRYWALL = "insulation_drywall"
    INTERIOR_PAINT = "interior_paint"
    FLOORING = "flooring"
    TILE = "tile"
    KITCHEN = "kitchen"
    BATHROOMS = "bathrooms"
    DOORS_WINDOWS = "doors_windows"
    INTERIOR_TRIM = "interior_trim"
    EXTERIOR = "exterior"
    LANDSCAPING = "landscaping"
    FINISHING = "finishing"
    CONTINGENCY = "contingency"

    @property
    def label(self) -> str:
        return BUDGET_CATEGORY_LABELS[self]


BUDGET_CATEGORY_LABELS = {
    BudgetCategory.SOFT_COSTS: "Soft Costs",
    BudgetCategory.DEMO: "Demo",
    BudgetCategory.STRUCTURAL: "Structural/Framing",
    BudgetCategory.PLUMBING: "Plumbing",
    BudgetCategory.HVAC: "HVAC",
    BudgetCategory.ELECTRICAL: "Electrical",
    BudgetCategory.INSULATION_DRYWALL: "Insulation/Drywall",
    BudgetCategory.INTERIOR_PAINT: "Interior Paint",
    BudgetCategory.FLOORING: "Flooring",
    BudgetCategory.TILE: "Tile",
    BudgetCategory.KITCHEN: "Kitchen",
    BudgetCategory.BATHROOMS: "Bathrooms",
    BudgetCategory.DOORS_WINDOWS: "Doors/Windows",
    BudgetCategory.INTERIOR_TRIM: "Interior Trim",
    BudgetCategory.EXTERIOR: "Exterior",
    BudgetCategory.LANDSCAPING: "Landscaping",
    BudgetCategory.FINISHING: "Finishing Touches",
    BudgetCategory.CONTINGENCY: "Contingency",
}


class ItemStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class UnitType(str, Enum):
    SF = "sf"
    LF = "lf"
    EA = "ea"
    LS = "ls"
    SQ = "sq"
    HR = "hr"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    LOAD = "load"
    TON = "ton"
    SET = "set"
    OPENING = "opening"


class CostType(str, Enum):
    LABOR = "labor"
    MATERIALS = "materials"
    BOTH = "both"


class VendorTrade(str, Enum):
    GENERAL_CONTRACTOR = "general_contractor"
    PLUMBER = "plumber"
    ELECTRICIAN = "electrician"
    HVAC = "hvac"
    ROOFER = "roofer"
    DRYWALL = "drywall"
    PAINTER = "painter"
    FLOORING = "flooring"
    TILE = "tile"
    CABINETS = "cabinets"
    COUNTERTOPS = "countertops"
    FRAMING = "framing"
    SIDING = "siding"
    LANDSCAPER = "landscaper"
    CONCRETE = "concrete"
    FENCING = "fencing"
    WINDOWS_DOORS = "windows_doors"
    CLEANING = "cleaning"
    INSPECTOR = "inspector"
    APPRAISER = "appraiser"
    OTHER = "other"


class VendorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DO_NOT_USE = "do_not_use"


class DrawStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


class DrawMilestone(str, Enum):
    PROJECT_START = "project_start"
    DEMO_COMPLETE = "demo_complete"
    ROUGH_IN = "rough_in"
    DRYWALL = "drywall"
    FINISHES = "finishes"
    FINAL = "final"


class PaymentMethod(str, Enum):
    CHECK = "check"
    ZELLE = "zelle"
    VENMO = "venmo"
    WIRE = "wire"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class JournalPageType(str, Enum):
    NOTE = "note"
    MEETING = "meeting"
    CHECKLIST = "checklist"
    IDEA = "idea"
    RESEARCH = "research"
    SITE_VISIT = "site_visit"


class WarningSeverity(str, Enum):
    WARNING = "warning"
    INFO = "info"


class ScopeLevel(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    GUT = "gut"


class ApplyMode(str, Enum):
    """How a template treats items the project already has."""

    SKIP = "skip"
    MERGE = "merge"
    REPLACE = "replace"


class MaoMethod(str, Enum):
    SEVENTY_RULE = "seventy_rule"
    CUSTOM_PERCENTAGE = "custom_percentage"
    ARV_MINUS_ALL = "arv_minus_all"
    GROSS_MARGIN = "gross_margin"
    NET_PROFIT_TARGET = "net_profit_target"


class DealRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    BAD = "bad"


@dataclass(frozen=True)
class Project:
    """Fix & flip project domain entity."""

    id: int
    name: str
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip: Optional[str]
    beds: Optional[int]
    baths: Optional[Decimal]
    sqft: Optional[int]
    year_built: Optional[int]
    property_type: PropertyType
    arv: Optional[Decimal]
    purchase_price: Optional[Decimal]
    closing_costs: Decimal
    holding_costs_monthly: Decimal
    hold_months: int
    selling_cost_percent: Decimal
    contingency_percent: Decimal
    status: ProjectStatus
    contract_date: Optional[date]
    close_date: Optional[date]
    rehab_start_date: Optional[date]
    target_complete_date: Optional[date]
    list_date: Optional[date]
    sale_date: Optional[date]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Vendor:
    """Vendor (contractor, supplier, inspector) domain entity."""

    id: int
    name: str
    trade: VendorTrade
    contact_name: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    address: Optional[str]
    licensed: bool
    insured: bool
    w9_on_file: bool
    rating: Optional[int]
    reliability: Optional[str]
    price_level: Optional[str]
    status: VendorStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BudgetItem:
    """Budget line item domain entity (three-column budget model)."""

    id: int
    project_id: int
    category: str
    item: str
    underwriting_amount: Decimal = Decimal("0")
    forecast_amount: Decimal = Decimal("0")
    actual_amount: Optional[Decimal] = None
    status: ItemStatus = ItemStatus.NOT_STARTED
    vendor_id: Optional[int] = None
    sort_order: int = 0
    description: Optional[str] = None
    room_area: Optional[str] = None
    qty: Decimal = Decimal("1")
    unit: UnitType = UnitType.EA
    rate: Decimal = Decimal("0")
    cost_type: CostType = CostType.BOTH
    priority: str = "medium"
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Draw:
    """Draw (scheduled disbursement of rehab financing) domain entity."""

    id: int
    project_id: int
    draw_number: int
    amount: Decimal
    status: DrawStatus
    vendor_id: Optional[int] = None
    milestone: Optional[DrawMilestone] = None
    description: Optional[str] = None
    percent_complete: Optional[Decimal] = None
    date_requested: Optional[date] = None
    date_paid: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class JournalPage:
    """Journal page domain entity, the document edited through autosave."""

    id: int
    title: str
    content: Optional[str]
    icon: str
    project_id: Optional[int]
    page_type: JournalPageType
    is_pinned: bool
    is_archived: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BudgetTemplate:
    """Reusable set of budget line items."""

    id: int
    name: str
    description: Optional[str] = None
    property_type: Optional[PropertyType] = None
    scope_level: Optional[ScopeLevel] = None
    times_used: int = 0
    is_favorite: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class BudgetTemplateItem:
    """One line of a budget template.

    ``default_amount`` becomes the underwriting amount of the budget item
    created from it.
    """

    id: int
    template_id: int
    category: str
    item: str
    default_amount: Decimal = Decimal("0")
    description: Optional[str] = None
    qty: Decimal = Decimal("1")
    unit: UnitType = UnitType.LS
    rate: Decimal = Decimal("0")
    cost_type: CostType = CostType.BOTH
    default_priority: str = "medium"
    suggested_trade: Optional[VendorTrade] = None
    sort_order: int = 0


@dataclass(frozen=True)
class TemplateApplyResult:
    """Counts of budget items touched by applying a template."""

    added: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class CalculationSettings:
    """Assumptions behind deal analysis.

    An unsaved instance (``id`` of None) carries the built-in defaults: the
    70% rule with rehab and contingency as the only costs.
    """

    id: Optional[int] = None
    name: str = "Default"
    is_default: bool = True
    mao_method: MaoMethod = MaoMethod.SEVENTY_RULE
    mao_arv_multiplier: Decimal = Decimal("0.70")
    mao_target_profit: Decimal = Decimal("30000")
    mao_target_profit_percent: Decimal = Decimal("15")
    mao_include_holding_costs: bool = False
    mao_include_selling_costs: bool = False
    mao_include_closing_costs: bool = False
    roi_threshold_excellent: Decimal = Decimal("25")
    roi_threshold_good: Decimal = Decimal("15")
    roi_threshold_fair: Decimal = Decimal("10")
    roi_threshold_poor: Decimal = Decimal("5")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryAggregate:
    """Totals for one budget category. Derived, never persisted."""

    category: str
    budget: Decimal
    actual: Decimal
    items: tuple[BudgetItem, ...]
    underwriting: Decimal = Decimal("0")
    forecast: Decimal = Decimal("0")

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def variance(self) -> Decimal:
        """Actual minus budget; positive means over budget."""
        return self.actual - self.budget

    @property
    def forecast_variance(self) -> Decimal:
        return self.forecast - self.underwriting

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.items if item.status == ItemStatus.COMPLETE)

    @property
    def in_progress_count(self) -> int:
        return sum(1 for item in self.items if item.status == ItemStatus.IN_PROGRESS)


@dataclass(frozen=True)
class BudgetSummary:
    """Category aggregates plus project-wide totals."""

    categories: dict[str, CategoryAggregate] = field(default_factory=dict)
    total_budget: Decimal = Decimal("0")
    total_actual: Decimal = Decimal("0")
    total_underwriting: Decimal = Decimal("0")
    total_forecast: Decimal = Decimal("0")

    @property
    def total_variance(self) -> Decimal:
        return self.total_actual - self.total_budget


@dataclass(frozen=True)
class DealScenario:
    """Profitability of a project under one budget phase."""

    name: str
    rehab_budget: Decimal
    total_investment: Decimal
    gross_profit: Decimal
    roi: Decimal


@dataclass(frozen=True)
class DealMetrics:
    """Deal analysis for a project across underwriting, forecast and actual."""

    underwriting: DealScenario
    forecast: DealScenario
    actual: DealScenario
    holding_costs_total: Decimal
    selling_costs: Decimal
    mao: Decimal
    spread: Decimal
    active_scenario: str
    forecast_variance_percent: Decimal
    actual_variance_percent: Decimal
    rating: DealRating

    def scenario(self, name: str) -> DealScenario:
        return getattr(self, name)


@dataclass(frozen=True)
class DrawSummary:
    """Draw totals for a project against its budget."""

    total_budget: Decimal
    total_paid: Decimal
    total_pending: Decimal
    total_drawn: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.total_paid - self.total_pending

    @property
    def percent_paid(self) -> Decimal:
        if self.total_budget <= 0:
            return Decimal("0")
        return self.total_paid / self.total_budget * 100


@dataclass(frozen=True)
class VendorPaymentSummary:
    """Payment rollup for a vendor across projects."""

    vendor_id: int
    projects_count: int
    total_paid: Decimal
    pending_amount: Decimal


@dataclass(frozen=True)
class ValidationWarning:
    """Non-blocking advisory about form input."""

    path: str
    message: str
    severity: WarningSeverity

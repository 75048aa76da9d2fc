"""SQLAlchemy models for flipbudget database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Project(Base):
    """Fix & flip project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)

    # Property info
    name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(2), nullable=True)
    zip = Column(String(10), nullable=True)
    beds = Column(Integer, nullable=True)
    baths = Column(Numeric(4, 1), nullable=True)
    sqft = Column(Integer, nullable=True)
    year_built = Column(Integer, nullable=True)
    property_type = Column(String, default="sfh", nullable=False)

    # Financials
    arv = Column(Numeric(12, 2), nullable=True)
    purchase_price = Column(Numeric(12, 2), nullable=True)
    closing_costs = Column(Numeric(12, 2), default=0, nullable=False)
    holding_costs_monthly = Column(Numeric(10, 2), default=0, nullable=False)
    hold_months = Column(Integer, default=4, nullable=False)
    selling_cost_percent = Column(Numeric(5, 2), default=8, nullable=False)
    contingency_percent = Column(Numeric(5, 2), default=10, nullable=False)

    # Status & dates
    status = Column(String, default="lead", nullable=False)
    contract_date = Column(Date, nullable=True)
    close_date = Column(Date, nullable=True)
    rehab_start_date = Column(Date, nullable=True)
    target_complete_date = Column(Date, nullable=True)
    list_date = Column(Date, nullable=True)
    sale_date = Column(Date, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    budget_items = relationship("BudgetItem", back_populates="project", cascade="all, delete-orphan")
    draws = relationship("Draw", back_populates="project", cascade="all, delete-orphan")
    journal_pages = relationship("JournalPage", back_populates="project")


class Vendor(Base):
    """Vendor model."""

    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    trade = Column(String, default="general_contractor", nullable=False)
    contact_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    address = Column(String, nullable=True)
    licensed = Column(Boolean, default=False, nullable=False)
    insured = Column(Boolean, default=False, nullable=False)
    w9_on_file = Column(Boolean, default=False, nullable=False)
    rating = Column(Integer, nullable=True)
    reliability = Column(String, nullable=True)
    price_level = Column(String, nullable=True)
    status = Column(String, default="active", nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    budget_items = relationship("BudgetItem", back_populates="vendor")
    draws = relationship("Draw", back_populates="vendor")


class BudgetItem(Base):
    """Budget line item model."""

    __tablename__ = "budget_items"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True)

    category = Column(String, nullable=False)
    item = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    room_area = Column(String, nullable=True)

    qty = Column(Numeric(10, 2), default=1, nullable=False)
    unit = Column(String, default="ea", nullable=False)
    rate = Column(Numeric(10, 2), default=0, nullable=False)
    underwriting_amount = Column(Numeric(10, 2), default=0, nullable=False)
    forecast_amount = Column(Numeric(10, 2), default=0, nullable=False)
    actual_amount = Column(Numeric(10, 2), nullable=True)

    cost_type = Column(String, default="both", nullable=False)
    status = Column(String, default="not_started", nullable=False)
    priority = Column(String, default="medium", nullable=False)

    sort_order = Column(Integer, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    project = relationship("Project", back_populates="budget_items")
    vendor = relationship("Vendor", back_populates="budget_items")


class Draw(Base):
    """Draw (payment) model."""

    __tablename__ = "draws"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True)

    draw_number = Column(Integer, nullable=False)
    milestone = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    percent_complete = Column(Numeric(5, 2), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)

    date_requested = Column(Date, nullable=True)
    date_paid = Column(Date, nullable=True)
    status = Column(String, default="pending", nullable=False)

    payment_method = Column(String, nullable=True)
    reference_number = Column(String, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # One draw number per project
    __table_args__ = (UniqueConstraint("project_id", "draw_number", name="uq_project_draw_number"),)

    project = relationship("Project", back_populates="draws")
    vendor = relationship("Vendor", back_populates="draws")


class JournalPage(Base):
    """Journal page model."""

    __tablename__ = "journal_pages"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    title = Column(String, default="Untitled", nullable=False)
    content = Column(Text, nullable=True)
    icon = Column(String, default="📝", nullable=False)
    page_type = Column(String, default="note", nullable=False)

    is_pinned = Column(Boolean, default=False, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    project = relationship("Project", back_populates="journal_pages")


class BudgetTemplate(Base):
    """Budget template model."""

    __tablename__ = "budget_templates"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    property_type = Column(String, nullable=True)
    scope_level = Column(String, nullable=True)
    times_used = Column(Integer, default=0, nullable=False)
    is_favorite = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    items = relationship(
        "BudgetTemplateItem",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="BudgetTemplateItem.sort_order",
    )


class BudgetTemplateItem(Base):
    """Budget template line item model."""

    __tablename__ = "budget_template_items"

    id = Column(Integer, primary_key=True)
    template_id = Column(Integer, ForeignKey("budget_templates.id", ondelete="CASCADE"), nullable=False)

    category = Column(String, nullable=False)
    item = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    qty = Column(Numeric(10, 2), default=1, nullable=False)
    unit = Column(String, default="ls", nullable=False)
    rate = Column(Numeric(10, 2), default=0, nullable=False)
    default_amount = Column(Numeric(10, 2), default=0, nullable=False)
    cost_type = Column(String, default="both", nullable=False)
    default_priority = Column(String, default="medium", nullable=False)
    suggested_trade = Column(String, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)

    template = relationship("BudgetTemplate", back_populates="items")


class CalculationSettings(Base):
    """Deal calculation settings model."""

    __tablename__ = "calculation_settings"

    id = Column(Integer, primary_key=True)
    name = Column(String, default="Default", nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)

    mao_method = Column(String, default="seventy_rule", nullable=False)
    mao_arv_multiplier = Column(Numeric(4, 3), default=0.70, nullable=False)
    mao_target_profit = Column(Numeric(12, 2), default=30000, nullable=False)
    mao_target_profit_percent = Column(Numeric(5, 2), default=15, nullable=False)
    mao_include_holding_costs = Column(Boolean, default=False, nullable=False)
    mao_include_selling_costs = Column(Boolean, default=False, nullable=False)
    mao_include_closing_costs = Column(Boolean, default=False, nullable=False)

    roi_threshold_excellent = Column(Numeric(5, 2), default=25, nullable=False)
    roi_threshold_good = Column(Numeric(5, 2), default=15, nullable=False)
    roi_threshold_fair = Column(Numeric(5, 2), default=10, nullable=False)
    roi_threshold_poor = Column(Numeric(5, 2), default=5, nullable=False)

    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Make SQLite honour ON DELETE clauses."""
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

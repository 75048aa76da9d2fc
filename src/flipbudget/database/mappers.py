"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: ORM rows store enums as plain text
and the domain entities carry the enum types.
"""

from decimal import Decimal
from typing import Optional

from flipbudget.domain import entities as domain
from flipbudget.database.models import (
    Project as ORMProject,
    Vendor as ORMVendor,
    BudgetItem as ORMBudgetItem,
    Draw as ORMDraw,
    JournalPage as ORMJournalPage,
    BudgetTemplate as ORMBudgetTemplate,
    BudgetTemplateItem as ORMBudgetTemplateItem,
    CalculationSettings as ORMCalculationSettings,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _enum(enum_cls, value):
    if value is None:
        return None
    return enum_cls(value)


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        name=orm_project.name,
        address=orm_project.address,
        city=orm_project.city,
        state=orm_project.state,
        zip=orm_project.zip,
        beds=orm_project.beds,
        baths=_decimal(orm_project.baths),
        sqft=orm_project.sqft,
        year_built=orm_project.year_built,
        property_type=domain.PropertyType(orm_project.property_type),
        arv=_decimal(orm_project.arv),
        purchase_price=_decimal(orm_project.purchase_price),
        closing_costs=_decimal(orm_project.closing_costs),
        holding_costs_monthly=_decimal(orm_project.holding_costs_monthly),
        hold_months=orm_project.hold_months,
        selling_cost_percent=_decimal(orm_project.selling_cost_percent),
        contingency_percent=_decimal(orm_project.contingency_percent),
        status=domain.ProjectStatus(orm_project.status),
        contract_date=orm_project.contract_date,
        close_date=orm_project.close_date,
        rehab_start_date=orm_project.rehab_start_date,
        target_complete_date=orm_project.target_complete_date,
        list_date=orm_project.list_date,
        sale_date=orm_project.sale_date,
        notes=orm_project.notes,
        created_at=orm_project.created_at,
        updated_at=orm_project.updated_at,
    )


def vendor_to_domain(orm_vendor: ORMVendor) -> domain.Vendor:
    """Convert SQLAlchemy Vendor model to domain Vendor entity."""
    return domain.Vendor(
        id=orm_vendor.id,
        name=orm_vendor.name,
        trade=domain.VendorTrade(orm_vendor.trade),
        contact_name=orm_vendor.contact_name,
        phone=orm_vendor.phone,
        email=orm_vendor.email,
        website=orm_vendor.website,
        address=orm_vendor.address,
        licensed=orm_vendor.licensed,
        insured=orm_vendor.insured,
        w9_on_file=orm_vendor.w9_on_file,
        rating=orm_vendor.rating,
        reliability=orm_vendor.reliability,
        price_level=orm_vendor.price_level,
        status=domain.VendorStatus(orm_vendor.status),
        notes=orm_vendor.notes,
        created_at=orm_vendor.created_at,
        updated_at=orm_vendor.updated_at,
    )


def budget_item_to_domain(orm_item: ORMBudgetItem) -> domain.BudgetItem:
    """Convert SQLAlchemy BudgetItem model to domain BudgetItem entity."""
    return domain.BudgetItem(
        id=orm_item.id,
        project_id=orm_item.project_id,
        vendor_id=orm_item.vendor_id,
        category=orm_item.category,
        item=orm_item.item,
        description=orm_item.description,
        room_area=orm_item.room_area,
        qty=_decimal(orm_item.qty),
        unit=domain.UnitType(orm_item.unit),
        rate=_decimal(orm_item.rate),
        underwriting_amount=_decimal(orm_item.underwriting_amount),
        forecast_amount=_decimal(orm_item.forecast_amount),
        actual_amount=_decimal(orm_item.actual_amount),
        cost_type=domain.CostType(orm_item.cost_type),
        status=domain.ItemStatus(orm_item.status),
        priority=orm_item.priority,
        sort_order=orm_item.sort_order,
        notes=orm_item.notes,
        created_at=orm_item.created_at,
        updated_at=orm_item.updated_at,
    )


def draw_to_domain(orm_draw: ORMDraw) -> domain.Draw:
    """Convert SQLAlchemy Draw model to domain Draw entity."""
    return domain.Draw(
        id=orm_draw.id,
        project_id=orm_draw.project_id,
        vendor_id=orm_draw.vendor_id,
        draw_number=orm_draw.draw_number,
        milestone=_enum(domain.DrawMilestone, orm_draw.milestone),
        description=orm_draw.description,
        percent_complete=_decimal(orm_draw.percent_complete),
        amount=_decimal(orm_draw.amount),
        date_requested=orm_draw.date_requested,
        date_paid=orm_draw.date_paid,
        status=domain.DrawStatus(orm_draw.status),
        payment_method=_enum(domain.PaymentMethod, orm_draw.payment_method),
        reference_number=orm_draw.reference_number,
        notes=orm_draw.notes,
        created_at=orm_draw.created_at,
        updated_at=orm_draw.updated_at,
    )


def journal_page_to_domain(orm_page: ORMJournalPage) -> domain.JournalPage:
    """Convert SQLAlchemy JournalPage model to domain JournalPage entity."""
    return domain.JournalPage(
        id=orm_page.id,
        title=orm_page.title,
        content=orm_page.content,
        icon=orm_page.icon,
        project_id=orm_page.project_id,
        page_type=domain.JournalPageType(orm_page.page_type),
        is_pinned=orm_page.is_pinned,
        is_archived=orm_page.is_archived,
        created_at=orm_page.created_at,
        updated_at=orm_page.updated_at,
    )


def budget_template_to_domain(orm_template: ORMBudgetTemplate) -> domain.BudgetTemplate:
    """Convert SQLAlchemy BudgetTemplate model to domain BudgetTemplate entity."""
    return domain.BudgetTemplate(
        id=orm_template.id,
        name=orm_template.name,
        description=orm_template.description,
        property_type=_enum(domain.PropertyType, orm_template.property_type),
        scope_level=_enum(domain.ScopeLevel, orm_template.scope_level),
        times_used=orm_template.times_used,
        is_favorite=orm_template.is_favorite,
        is_active=orm_template.is_active,
        created_at=orm_template.created_at,
        updated_at=orm_template.updated_at,
    )


def budget_template_item_to_domain(orm_item: ORMBudgetTemplateItem) -> domain.BudgetTemplateItem:
    """Convert SQLAlchemy BudgetTemplateItem model to domain BudgetTemplateItem entity."""
    return domain.BudgetTemplateItem(
        id=orm_item.id,
        template_id=orm_item.template_id,
        category=orm_item.category,
        item=orm_item.item,
        description=orm_item.description,
        qty=_decimal(orm_item.qty),
        unit=domain.UnitType(orm_item.unit),
        rate=_decimal(orm_item.rate),
        default_amount=_decimal(orm_item.default_amount),
        cost_type=domain.CostType(orm_item.cost_type),
        default_priority=orm_item.default_priority,
        suggested_trade=_enum(domain.VendorTrade, orm_item.suggested_trade),
        sort_order=orm_item.sort_order,
    )


def calculation_settings_to_domain(orm_settings: ORMCalculationSettings) -> domain.CalculationSettings:
    """Convert SQLAlchemy CalculationSettings model to domain CalculationSettings entity."""
    return domain.CalculationSettings(
        id=orm_settings.id,
        name=orm_settings.name,
        is_default=orm_settings.is_default,
        mao_method=domain.MaoMethod(orm_settings.mao_method),
        mao_arv_multiplier=_decimal(orm_settings.mao_arv_multiplier),
        mao_target_profit=_decimal(orm_settings.mao_target_profit),
        mao_target_profit_percent=_decimal(orm_settings.mao_target_profit_percent),
        mao_include_holding_costs=orm_settings.mao_include_holding_costs,
        mao_include_selling_costs=orm_settings.mao_include_selling_costs,
        mao_include_closing_costs=orm_settings.mao_include_closing_costs,
        roi_threshold_excellent=_decimal(orm_settings.roi_threshold_excellent),
        roi_threshold_good=_decimal(orm_settings.roi_threshold_good),
        roi_threshold_fair=_decimal(orm_settings.roi_threshold_fair),
        roi_threshold_poor=_decimal(orm_settings.roi_threshold_poor),
        created_at=orm_settings.created_at,
        updated_at=orm_settings.updated_at,
    )

"""Domain layer for flipbudget application."""

# Services are imported lazily: they depend on flipbudget.database, which in
# turn imports the entities defined in this package.
_SERVICES = {
    "ProjectService": "flipbudget.domain.project",
    "BudgetService": "flipbudget.domain.budget",
    "VendorService": "flipbudget.domain.vendor",
    "DrawService": "flipbudget.domain.draw",
    "JournalService": "flipbudget.domain.journal",
    "AutosaveCoordinator": "flipbudget.domain.autosave",
    "TemplateService": "flipbudget.domain.template",
    "CalculationSettingsService": "flipbudget.domain.settings",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

"""Calculation settings domain service.

Settings rows hold the assumptions behind deal analysis: how the maximum
allowable offer is computed and which ROI thresholds grade a deal. One row
is the default; without any saved row the built-in defaults apply.
"""

from dataclasses import fields as dataclass_fields
from decimal import Decimal
from typing import Any, Mapping, Optional

from flipbudget.database.base import Database
from flipbudget.domain import errors
from flipbudget.domain.budget import check_amount, check_choice
from flipbudget.domain.entities import CalculationSettings, MaoMethod
from flipbudget.logging_config import get_logger

logger = get_logger("settings")

HUNDRED = Decimal("100")

UPDATABLE_FIELDS = frozenset(
    f.name for f in dataclass_fields(CalculationSettings)
) - {"id", "is_default", "created_at", "updated_at"}

_FLAG_FIELDS = ("mao_include_holding_costs", "mao_include_selling_costs", "mao_include_closing_costs")

# Highest to lowest
ROI_THRESHOLDS = ("roi_threshold_excellent", "roi_threshold_good", "roi_threshold_fair", "roi_threshold_poor")


class CalculationSettingsService:
    """Service for managing deal calculation settings."""

    def __init__(self, db: Database):
        """Initialize calculation settings service.

        Args:
            db: Database instance
        """
        self.db = db

    def _clean(self, fields: Mapping[str, Any], current: CalculationSettings) -> dict[str, Any]:
        """Validate a partial update against the row it will be merged into."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise errors.ValidationError(f"Unknown settings field(s): {', '.join(sorted(unknown))}")

        cleaned = dict(fields)
        if "name" in cleaned:
            name = (cleaned["name"] or "").strip()
            if not name:
                raise errors.ValidationError(errors={"name": ["Settings name is required"]})
            cleaned["name"] = name
        if "mao_method" in cleaned:
            cleaned["mao_method"] = check_choice("mao_method", MaoMethod, cleaned["mao_method"]).value
        if "mao_arv_multiplier" in cleaned:
            multiplier = check_amount("mao_arv_multiplier", cleaned["mao_arv_multiplier"])
            if multiplier == 0 or multiplier > 1:
                raise errors.ValidationError(
                    errors={"mao_arv_multiplier": ["mao_arv_multiplier must be above 0 and at most 1"]}
                )
            cleaned["mao_arv_multiplier"] = multiplier
        if "mao_target_profit" in cleaned:
            cleaned["mao_target_profit"] = check_amount("mao_target_profit", cleaned["mao_target_profit"])
        if "mao_target_profit_percent" in cleaned:
            percent = check_amount("mao_target_profit_percent", cleaned["mao_target_profit_percent"])
            if percent >= HUNDRED:
                raise errors.ValidationError(
                    errors={"mao_target_profit_percent": ["mao_target_profit_percent must be below 100"]}
                )
            cleaned["mao_target_profit_percent"] = percent
        for flag in _FLAG_FIELDS:
            if flag in cleaned:
                cleaned[flag] = bool(cleaned[flag])

        for threshold in ROI_THRESHOLDS:
            if threshold in cleaned:
                cleaned[threshold] = check_amount(threshold, cleaned[threshold])
        merged = [cleaned.get(name, getattr(current, name)) for name in ROI_THRESHOLDS]
        for higher, lower, name in zip(merged, merged[1:], ROI_THRESHOLDS[1:]):
            if lower > higher:
                raise errors.ValidationError(
                    errors={name: ["ROI thresholds must run from excellent down to poor"]}
                )
        return cleaned

    def get_default_settings(self) -> CalculationSettings:
        """Return the default settings row, or the built-in defaults if none is saved."""
        settings = self.db.get_default_calculation_settings()
        if settings is None:
            return CalculationSettings()
        return settings

    def get_settings(self, settings_id: int) -> Optional[CalculationSettings]:
        """Get settings by ID."""
        return self.db.get_calculation_settings(settings_id)

    def require_settings(self, settings_id: int) -> CalculationSettings:
        """Get settings by ID or raise NotFoundError."""
        settings = self.db.get_calculation_settings(settings_id)
        if settings is None:
            raise errors.NotFoundError(errors.calculation_settings_not_found(settings_id))
        return settings

    def list_settings(self) -> list[CalculationSettings]:
        """List saved settings, default first."""
        return self.db.list_calculation_settings()

    def create_settings(self, fields: Mapping[str, Any], make_default: bool = False) -> int:
        """Create a settings row; unspecified fields take the built-in defaults.

        Returns:
            Settings ID

        Raises:
            ValidationError: If a field is unknown or invalid
        """
        cleaned = self._clean(fields, CalculationSettings())
        defaults = {name: getattr(CalculationSettings(), name) for name in UPDATABLE_FIELDS}
        settings_id = self.db.create_calculation_settings({**defaults, **cleaned, "is_default": False})
        if make_default:
            self.set_default(settings_id)
        logger.debug("Created calculation settings %s", settings_id)
        return settings_id

    def update_settings(self, settings_id: int, fields: Mapping[str, Any]) -> None:
        """Write a partial set of fields to a settings row."""
        current = self.require_settings(settings_id)
        if not fields:
            return
        self.db.update_calculation_settings(settings_id, self._clean(fields, current))

    def save_settings(self, fields: Mapping[str, Any]) -> int:
        """Update the default row, creating it on first save.

        Returns:
            ID of the default settings row
        """
        current = self.db.get_default_calculation_settings()
        if current is None:
            return self.create_settings(fields, make_default=True)
        self.update_settings(current.id, fields)
        return current.id

    def set_default(self, settings_id: int) -> None:
        """Make one row the default and clear the flag everywhere else."""
        self.require_settings(settings_id)
        for settings in self.db.list_calculation_settings():
            if settings.is_default and settings.id != settings_id:
                self.db.update_calculation_settings(settings.id, {"is_default": False})
        self.db.update_calculation_settings(settings_id, {"is_default": True})
        logger.info("Calculation settings %s is now the default", settings_id)

    def delete_settings(self, settings_id: int) -> None:
        """Delete a settings row. Deleting the default falls back to built-in defaults."""
        self.require_settings(settings_id)
        self.db.delete_calculation_settings(settings_id)

from dataclasses import dataclass, field
from decimal import Decimal

from repair_estimator.base.model import BaseModel
from repair_estimator.models.enums import MetalType, ServiceCategory, SizingCategory


@dataclass(kw_only=True)
class ServiceType(BaseModel):
    """Catalog entry for a service. Treated as immutable reference data; a new
    version of a service is saved as a new record rather than edited in place."""

    record_type = "ServiceType"

    company_id: str
    name: str
    category: ServiceCategory
    default_sku: str
    default_labor_minutes: int = 0
    default_metal_usage_grams: Decimal | None = None
    base_retail: Decimal = Decimal("0")
    base_cost: Decimal = Decimal("0")
    pricing_formula_id: str | None = None
    is_active: bool = True
    is_generic_sku: bool = False
    requires_partner_check: bool = False
    supports_rush: bool = True
    sizing_category: SizingCategory | None = None
    metal_types: list[MetalType] = field(default_factory=list)

    @property
    def involves_metal(self) -> bool:
        return bool(self.default_metal_usage_grams and self.default_metal_usage_grams > 0)

    @property
    def has_catalog_pricing(self) -> bool:
        return not self.is_generic_sku and (self.base_retail > 0 or self.base_cost > 0)

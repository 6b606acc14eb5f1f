from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from repair_estimator.base.model import BaseModel
from repair_estimator.models.enums import MetalType, MetalUnit, UserRole


@dataclass(kw_only=True)
class MetalMarketRate(BaseModel):
    record_type = "MetalMarketRate"

    company_id: str
    metal_type: MetalType
    rate: Decimal
    unit: MetalUnit = MetalUnit.GRAMS_PER_GRAM
    effective_date: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)
    is_active: bool = True


@dataclass(kw_only=True)
class LaborRate(BaseModel):
    record_type = "LaborRate"

    company_id: str
    role: UserRole
    rate_per_hour: Decimal
    effective_date: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)
    is_active: bool = True

    def calculate_cost(self, minutes: int) -> Decimal:
        return Decimal(minutes) / Decimal(60) * self.rate_per_hour

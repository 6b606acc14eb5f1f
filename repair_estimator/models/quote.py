from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from repair_estimator.base.model import BaseModel
from repair_estimator.models.enums import (
    MetalType,
    QuotePriority,
    QuoteStatus,
    RushType,
    ServiceCategory,
)
from repair_estimator.config import get_settings
from repair_estimator.utils import align_awareness, now_like

if TYPE_CHECKING:
    from repair_estimator.services.pricing_engine import PricingResult

QUOTE_VALIDITY = timedelta(days=30)


def _default_valid_until() -> datetime:
    return datetime.now() + QUOTE_VALIDITY


@dataclass(kw_only=True)
class Quote(BaseModel):
    record_type = "Quote"

    id: str
    company_id: str
    store_id: str
    guest_id: str
    status: QuoteStatus = QuoteStatus.DRAFT
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    valid_until: datetime = field(default_factory=_default_valid_until)
    currency_code: str = "USD"
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    rush_multiplier_applied: Decimal = Decimal("1.0")
    pricing_version: str = "1.0"
    internal_notes: str | None = None
    customer_facing_notes: str | None = None

    partner_item: bool = False
    sales_sku: str | None = None
    rush_type: RushType | None = None
    requested_due_date: datetime | None = None
    promised_due_date: datetime | None = None
    coordinator_approval_required: bool = False
    coordinator_approval_granted: bool = False
    primary_service_category: ServiceCategory = ServiceCategory.JEWELRY_REPAIR
    priority: QuotePriority = QuotePriority.MEDIUM
    estimate_approved: bool = False
    pre_approved_limit: Decimal | None = None
    version: int = 0

    def update_total(self, now: datetime | None = None) -> None:
        self.total = self.subtotal + self.tax
        self.updated_at = now or now_like(self.updated_at)

    @property
    def should_apply_rush_fees(self) -> bool:
        if self.rush_type is None:
            return False
        return self.rush_type.applies_rush_multiplier(self.partner_item)

    @property
    def needs_estimate_approval(self) -> bool:
        if self.estimate_approved:
            return False
        if self.pre_approved_limit is not None:
            return self.total > self.pre_approved_limit
        return True

    def requires_coordinator_approval(self, now: datetime | None = None, *, cutoff_hour: int | None = None) -> bool:
        if self.rush_type is RushType.SAME_DAY:
            current = now or datetime.now()
            if cutoff_hour is None:
                cutoff_hour = get_settings().pricing.same_day_cutoff_hour
            if current.hour >= cutoff_hour:
                return True
        return self.coordinator_approval_required

    def time_until_due(self, now: datetime | None = None) -> timedelta | None:
        if self.promised_due_date is None:
            return None
        due, current = align_awareness(self.promised_due_date, now or now_like(self.promised_due_date))
        return due - current

    def is_overdue(self, now: datetime | None = None) -> bool:
        remaining = self.time_until_due(now)
        if remaining is None:
            return False
        return remaining < timedelta(0) and self.status not in (QuoteStatus.COMPLETED, QuoteStatus.CLOSED)

    def update_priority(self, now: datetime | None = None) -> None:
        if self.rush_type is RushType.SAME_DAY:
            self.priority = QuotePriority.URGENT
        elif self.rush_type is RushType.WITHIN_48H or self.primary_service_category is ServiceCategory.JEWELRY_REPAIR:
            self.priority = QuotePriority.HIGH
        elif self.primary_service_category in (ServiceCategory.WATCH_SERVICE, ServiceCategory.CARE_PLAN):
            self.priority = QuotePriority.MEDIUM
        else:
            self.priority = QuotePriority.LOW
        self.updated_at = now or now_like(self.updated_at)


@dataclass(kw_only=True)
class QuoteLineItem(BaseModel):
    record_type = "QuoteLineItem"

    quote_id: str
    service_type_id: str
    sku: str
    description: str
    metal_type: MetalType | None = None
    metal_weight_grams: Decimal | None = None
    labor_minutes: int = 0
    base_cost: Decimal = Decimal("0")
    base_retail: Decimal = Decimal("0")
    calculated_retail: Decimal = Decimal("0")
    manual_override_retail: Decimal | None = None
    override_reason: str | None = None
    is_rush: bool = False
    rush_multiplier: Decimal = Decimal("1.0")
    final_retail: Decimal | None = None

    def __post_init__(self) -> None:
        self.final_retail = max(Decimal("0"), self.effective_retail)

    @property
    def has_override(self) -> bool:
        return self.manual_override_retail is not None

    @property
    def effective_retail(self) -> Decimal:
        if self.manual_override_retail is not None:
            return self.manual_override_retail
        return self.calculated_retail

    def apply_override(self, amount: Decimal | None, reason: str | None = None) -> None:
        self.manual_override_retail = amount
        self.override_reason = reason if amount is not None else None
        self.final_retail = max(Decimal("0"), self.effective_retail)

    @classmethod
    def from_pricing_result(
        cls,
        result: "PricingResult",
        *,
        quote_id: str,
        service_type_id: str,
        sku: str,
        description: str,
        metal_type: MetalType | None = None,
        metal_weight_grams: Decimal | None = None,
        labor_minutes: int = 0,
    ) -> "QuoteLineItem":
        return cls(
            quote_id=quote_id,
            service_type_id=service_type_id,
            sku=sku,
            description=description,
            metal_type=metal_type,
            metal_weight_grams=metal_weight_grams,
            labor_minutes=labor_minutes,
            base_cost=result.base_cost,
            base_retail=result.base_retail,
            calculated_retail=result.final_retail,
            is_rush=result.rush_multiplier > 1,
            rush_multiplier=result.rush_multiplier,
        )

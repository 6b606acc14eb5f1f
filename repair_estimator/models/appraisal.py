from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from repair_estimator.base.model import BaseModel
from repair_estimator.config import get_settings
from repair_estimator.utils import years_before

UPDATE_WINDOW_YEARS = 10
EXPEDITE_MULTIPLIER = Decimal("1.5")


@dataclass(frozen=True)
class AppraisalCaratTier:
    max_carats: Decimal
    multiplier: Decimal


@dataclass(frozen=True)
class AppraisalFeeStructure:
    """Fee schedule for one pricing tier.

    ``carat_tiers`` is ordered by ``max_carats`` and always ends in a
    catch-all band with a very large ceiling.
    """

    first_item_base: Decimal
    additional_item_fee: Decimal
    carat_tiers: tuple[AppraisalCaratTier, ...]

    def band_for(self, largest_carat_weight: Decimal) -> AppraisalCaratTier:
        for tier in self.carat_tiers:
            if largest_carat_weight <= tier.max_carats:
                return tier
        return self.carat_tiers[-1]

    def calculate_fee(self, item_count: int, largest_carat_weight: Decimal) -> Decimal:
        if item_count <= 0:
            return Decimal("0")
        band = self.band_for(largest_carat_weight)
        first_item_fee = self.first_item_base * band.multiplier
        additional_fee = self.additional_item_fee * band.multiplier * Decimal(max(0, item_count - 1))
        return first_item_fee + additional_fee


def _bands(*pairs: tuple[str, str]) -> tuple[AppraisalCaratTier, ...]:
    return tuple(AppraisalCaratTier(Decimal(max_carats), Decimal(multiplier)) for max_carats, multiplier in pairs)


class AppraisalPricingTier(str, Enum):
    STANDARD = "STANDARD"
    GEM_ID = "GEM_ID"
    SPECIALIZED = "SPECIALIZED"
    UPDATE = "UPDATE"
    SARIN_REPORT = "SARIN_REPORT"

    @property
    def display_name(self) -> str:
        return {
            AppraisalPricingTier.STANDARD: "Standard Appraisal",
            AppraisalPricingTier.GEM_ID: "Gem Identification",
            AppraisalPricingTier.SPECIALIZED: "Specialized Service",
            AppraisalPricingTier.UPDATE: "Update/Review",
            AppraisalPricingTier.SARIN_REPORT: "Sarin Report",
        }[self]

    @property
    def fee_structure(self) -> AppraisalFeeStructure:
        return FEE_STRUCTURES[self]


FEE_STRUCTURES: dict[AppraisalPricingTier, AppraisalFeeStructure] = {
    AppraisalPricingTier.STANDARD: AppraisalFeeStructure(
        first_item_base=Decimal("150"),
        additional_item_fee=Decimal("75"),
        carat_tiers=_bands(("1.0", "1.0"), ("2.0", "1.3"), ("3.0", "1.6"), ("5.0", "2.0"), ("99.0", "2.5")),
    ),
    AppraisalPricingTier.GEM_ID: AppraisalFeeStructure(
        first_item_base=Decimal("75"),
        additional_item_fee=Decimal("50"),
        carat_tiers=_bands(("99.0", "1.0")),
    ),
    AppraisalPricingTier.SPECIALIZED: AppraisalFeeStructure(
        first_item_base=Decimal("250"),
        additional_item_fee=Decimal("125"),
        carat_tiers=_bands(("1.0", "1.0"), ("99.0", "1.5")),
    ),
    AppraisalPricingTier.UPDATE: AppraisalFeeStructure(
        first_item_base=Decimal("75"),
        additional_item_fee=Decimal("38"),
        carat_tiers=_bands(("99.0", "1.0")),
    ),
    AppraisalPricingTier.SARIN_REPORT: AppraisalFeeStructure(
        first_item_base=Decimal("200"),
        additional_item_fee=Decimal("100"),
        carat_tiers=_bands(("99.0", "1.0")),
    ),
}

# Flat add-on for a detailed (Sarin) report.
DETAILED_REPORT_FEE = FEE_STRUCTURES[AppraisalPricingTier.SARIN_REPORT].first_item_base


class AppraisalType(str, Enum):
    INSURANCE = "INSURANCE"
    ESTATE = "ESTATE"
    DONATION = "DONATION"
    DAMAGE = "DAMAGE"
    DIVORCE = "DIVORCE"
    PROBATE = "PROBATE"
    GEM_ID = "GEM_ID"
    HYPOTHETICAL = "HYPOTHETICAL"
    VIRTUAL = "VIRTUAL"
    UPDATE = "UPDATE"

    @property
    def display_name(self) -> str:
        return {
            AppraisalType.INSURANCE: "Insurance",
            AppraisalType.ESTATE: "Estate",
            AppraisalType.DONATION: "Donation",
            AppraisalType.DAMAGE: "Damage/Loss",
            AppraisalType.DIVORCE: "Divorce",
            AppraisalType.PROBATE: "Probate",
            AppraisalType.GEM_ID: "Gem Identification",
            AppraisalType.HYPOTHETICAL: "Hypothetical",
            AppraisalType.VIRTUAL: "Virtual Appraisal",
            AppraisalType.UPDATE: "Update/Review",
        }[self]

    @property
    def base_pricing_tier(self) -> AppraisalPricingTier:
        return APPRAISAL_TIERS[self]


APPRAISAL_TIERS: dict[AppraisalType, AppraisalPricingTier] = {
    AppraisalType.INSURANCE: AppraisalPricingTier.STANDARD,
    AppraisalType.ESTATE: AppraisalPricingTier.STANDARD,
    AppraisalType.DONATION: AppraisalPricingTier.STANDARD,
    AppraisalType.DAMAGE: AppraisalPricingTier.STANDARD,
    AppraisalType.DIVORCE: AppraisalPricingTier.STANDARD,
    AppraisalType.PROBATE: AppraisalPricingTier.STANDARD,
    AppraisalType.GEM_ID: AppraisalPricingTier.GEM_ID,
    AppraisalType.HYPOTHETICAL: AppraisalPricingTier.SPECIALIZED,
    AppraisalType.VIRTUAL: AppraisalPricingTier.SPECIALIZED,
    AppraisalType.UPDATE: AppraisalPricingTier.UPDATE,
}


class AppraisalStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"


class AppraisalDeliveryMethod(str, Enum):
    EMAIL = "EMAIL"
    PICKUP = "PICKUP"
    MAIL = "MAIL"
    COURIER = "COURIER"


def within_update_window(original_date: datetime, now: datetime, years: int = UPDATE_WINDOW_YEARS) -> bool:
    """True when ``original_date`` is on or after the same calendar day ``years`` ago."""
    return original_date.date() >= years_before(now, years).date()


@dataclass(kw_only=True)
class AppraisalService(BaseModel):
    record_type = "AppraisalService"

    quote_id: str
    guest_id: str
    appraiser_id: str
    appraisal_type: AppraisalType
    item_count: int
    largest_carat_weight: Decimal
    calculated_fee: Decimal
    pricing_tier: AppraisalPricingTier | None = None
    final_fee: Decimal | None = None
    fee_override_reason: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None
    expedited: bool = False
    expedite_multiplier: Decimal = EXPEDITE_MULTIPLIER
    sarin_report_requested: bool = False
    gem_id_requested: bool = False
    photo_documentation: bool = True
    certification_verification: bool = False
    is_update: bool = False
    original_appraisal_date: datetime | None = None
    status: AppraisalStatus = AppraisalStatus.SCHEDULED
    delivery_method: AppraisalDeliveryMethod = AppraisalDeliveryMethod.EMAIL
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.pricing_tier is None:
            self.pricing_tier = self.appraisal_type.base_pricing_tier
        if self.final_fee is None:
            self.final_fee = self.calculated_fee

    def qualifies_for_update_discount(self, now: datetime | None = None) -> bool:
        if not self.is_update or self.original_appraisal_date is None:
            return False
        return within_update_window(
            self.original_appraisal_date,
            now or datetime.now(),
            get_settings().appraisal.update_window_years,
        )

    @property
    def total_cost(self) -> Decimal:
        total = self.final_fee
        if self.sarin_report_requested:
            total += DETAILED_REPORT_FEE
        if self.expedited:
            total *= self.expedite_multiplier
        return total

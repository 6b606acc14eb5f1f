from enum import Enum


class MetalType(str, Enum):
    GOLD_14K = "GOLD_14K"
    GOLD_18K = "GOLD_18K"
    GOLD_22K = "GOLD_22K"
    PLATINUM = "PLATINUM"
    PALLADIUM = "PALLADIUM"
    SILVER = "SILVER"
    STAINLESS_STEEL = "STAINLESS_STEEL"
    TITANIUM = "TITANIUM"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return _METAL_DISPLAY_NAMES[self]

    @property
    def requires_market_rate_pricing(self) -> bool:
        return self in _MARKET_RATE_METALS


_METAL_DISPLAY_NAMES = {
    MetalType.GOLD_14K: "14K Gold",
    MetalType.GOLD_18K: "18K Gold",
    MetalType.GOLD_22K: "22K Gold",
    MetalType.PLATINUM: "Platinum",
    MetalType.PALLADIUM: "Palladium",
    MetalType.SILVER: "Silver",
    MetalType.STAINLESS_STEEL: "Stainless Steel",
    MetalType.TITANIUM: "Titanium",
    MetalType.OTHER: "Other",
}

_MARKET_RATE_METALS = frozenset(
    {
        MetalType.GOLD_14K,
        MetalType.GOLD_18K,
        MetalType.GOLD_22K,
        MetalType.PLATINUM,
        MetalType.PALLADIUM,
        MetalType.SILVER,
    }
)


class MetalUnit(str, Enum):
    GRAMS_PER_GRAM = "GRAMS_PER_GRAM"
    OUNCES_PER_OUNCE = "OUNCES_PER_OUNCE"
    PENNYWEIGHT_PER_PENNYWEIGHT = "PENNYWEIGHT_PER_PENNYWEIGHT"

    @property
    def symbol(self) -> str:
        return {
            MetalUnit.GRAMS_PER_GRAM: "g",
            MetalUnit.OUNCES_PER_OUNCE: "oz",
            MetalUnit.PENNYWEIGHT_PER_PENNYWEIGHT: "dwt",
        }[self]


class UserRole(str, Enum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    STORE_MANAGER = "STORE_MANAGER"
    ASSOCIATE = "ASSOCIATE"
    BENCH_JEWELER = "BENCH_JEWELER"

    @property
    def can_approve_overrides(self) -> bool:
        return self in (UserRole.SUPERADMIN, UserRole.ADMIN, UserRole.STORE_MANAGER)


class ServiceCategory(str, Enum):
    JEWELRY_REPAIR = "JEWELRY_REPAIR"
    WATCH_SERVICE = "WATCH_SERVICE"
    CARE_PLAN = "CARE_PLAN"
    APPRAISAL = "APPRAISAL"
    CLEANING = "CLEANING"
    CUSTOM_DESIGN = "CUSTOM_DESIGN"
    ENGRAVING = "ENGRAVING"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class SizingCategory(str, Enum):
    UNDER_3MM = "UNDER_3MM"
    MM_3_TO_5 = "MM_3_TO_5"
    MM_5_TO_8 = "MM_5_TO_8"


class RushType(str, Enum):
    SAME_DAY = "SAME_DAY"
    WITHIN_48H = "WITHIN_48H"
    STANDARD = "STANDARD"

    @property
    def display_name(self) -> str:
        return {
            RushType.SAME_DAY: "Same Day",
            RushType.WITHIN_48H: "Within 48 Hours",
            RushType.STANDARD: "Standard",
        }[self]

    def applies_rush_multiplier(self, partner_item: bool) -> bool:
        if self is RushType.STANDARD:
            return False
        return not partner_item


class QuotePriority(str, Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def sort_order(self) -> int:
        return {
            QuotePriority.URGENT: 1,
            QuotePriority.HIGH: 2,
            QuotePriority.MEDIUM: 3,
            QuotePriority.LOW: 4,
        }[self]


class QuoteStatus(str, Enum):
    DRAFT = "DRAFT"
    PRESENTED = "PRESENTED"
    AWAITING_APPROVAL = "AWAITING_APPROVAL"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    IN_SHOP = "IN_SHOP"
    AT_VENDOR = "AT_VENDOR"
    QUALITY_REVIEW = "QUALITY_REVIEW"
    QUALITY_FAILED = "QUALITY_FAILED"
    REWORK = "REWORK"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return _STATUS_DISPLAY_NAMES[self]

    @property
    def possible_next_statuses(self) -> frozenset["QuoteStatus"]:
        return STATUS_TRANSITIONS[self]

    def can_transition_to(self, target: "QuoteStatus") -> bool:
        return target in STATUS_TRANSITIONS[self]

    @property
    def can_edit(self) -> bool:
        return self in (QuoteStatus.DRAFT, QuoteStatus.PRESENTED, QuoteStatus.AWAITING_APPROVAL)

    @property
    def can_start_work(self) -> bool:
        return self is QuoteStatus.APPROVED

    @property
    def is_active_work(self) -> bool:
        return self in (QuoteStatus.IN_SHOP, QuoteStatus.AT_VENDOR, QuoteStatus.REWORK)

    @property
    def requires_quality_control(self) -> bool:
        return self.is_active_work

    @property
    def is_terminal(self) -> bool:
        return not STATUS_TRANSITIONS[self]

    @property
    def is_finished(self) -> bool:
        return self in (QuoteStatus.COMPLETED, QuoteStatus.CLOSED, QuoteStatus.CANCELLED)

    @property
    def queue_priority(self) -> int:
        return _QUEUE_PRIORITY[self]


_STATUS_DISPLAY_NAMES = {
    QuoteStatus.DRAFT: "Draft",
    QuoteStatus.PRESENTED: "Presented",
    QuoteStatus.AWAITING_APPROVAL: "Awaiting Approval",
    QuoteStatus.APPROVED: "Approved",
    QuoteStatus.DECLINED: "Declined",
    QuoteStatus.IN_SHOP: "In Shop",
    QuoteStatus.AT_VENDOR: "At Vendor",
    QuoteStatus.QUALITY_REVIEW: "Quality Review",
    QuoteStatus.QUALITY_FAILED: "Quality Failed",
    QuoteStatus.REWORK: "Rework Required",
    QuoteStatus.READY_FOR_PICKUP: "Ready for Pickup",
    QuoteStatus.COMPLETED: "Completed",
    QuoteStatus.CLOSED: "Closed",
    QuoteStatus.CANCELLED: "Cancelled",
}

STATUS_TRANSITIONS: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.PRESENTED, QuoteStatus.CANCELLED}),
    QuoteStatus.PRESENTED: frozenset(
        {QuoteStatus.AWAITING_APPROVAL, QuoteStatus.APPROVED, QuoteStatus.DECLINED, QuoteStatus.DRAFT}
    ),
    QuoteStatus.AWAITING_APPROVAL: frozenset(
        {QuoteStatus.APPROVED, QuoteStatus.DECLINED, QuoteStatus.PRESENTED}
    ),
    QuoteStatus.APPROVED: frozenset({QuoteStatus.IN_SHOP, QuoteStatus.AT_VENDOR, QuoteStatus.CANCELLED}),
    QuoteStatus.DECLINED: frozenset({QuoteStatus.PRESENTED, QuoteStatus.CLOSED}),
    QuoteStatus.IN_SHOP: frozenset(
        {QuoteStatus.QUALITY_REVIEW, QuoteStatus.AT_VENDOR, QuoteStatus.CANCELLED}
    ),
    QuoteStatus.AT_VENDOR: frozenset({QuoteStatus.IN_SHOP, QuoteStatus.QUALITY_REVIEW, QuoteStatus.CANCELLED}),
    QuoteStatus.QUALITY_REVIEW: frozenset({QuoteStatus.READY_FOR_PICKUP, QuoteStatus.QUALITY_FAILED}),
    QuoteStatus.QUALITY_FAILED: frozenset(
        {QuoteStatus.REWORK, QuoteStatus.QUALITY_REVIEW, QuoteStatus.CANCELLED}
    ),
    QuoteStatus.REWORK: frozenset({QuoteStatus.QUALITY_REVIEW, QuoteStatus.CANCELLED}),
    # Items can go back to the bench for additional work after QC.
    QuoteStatus.READY_FOR_PICKUP: frozenset({QuoteStatus.COMPLETED, QuoteStatus.IN_SHOP}),
    QuoteStatus.COMPLETED: frozenset({QuoteStatus.CLOSED}),
    QuoteStatus.CLOSED: frozenset(),
    QuoteStatus.CANCELLED: frozenset(),
}

_QUEUE_PRIORITY = {
    QuoteStatus.QUALITY_FAILED: 1,
    QuoteStatus.REWORK: 1,
    QuoteStatus.READY_FOR_PICKUP: 2,
    QuoteStatus.IN_SHOP: 3,
    QuoteStatus.QUALITY_REVIEW: 3,
    QuoteStatus.APPROVED: 4,
    QuoteStatus.AT_VENDOR: 5,
    QuoteStatus.AWAITING_APPROVAL: 6,
    QuoteStatus.PRESENTED: 6,
    QuoteStatus.DRAFT: 7,
    QuoteStatus.DECLINED: 8,
    QuoteStatus.COMPLETED: 8,
    QuoteStatus.CLOSED: 8,
    QuoteStatus.CANCELLED: 8,
}


class NotificationPurpose(str, Enum):
    ESTIMATE_READY = "ESTIMATE_READY"
    APPROVAL_REQUEST = "APPROVAL_REQUEST"
    WORK_IN_PROGRESS = "WORK_IN_PROGRESS"
    DELAY_NOTIFICATION = "DELAY_NOTIFICATION"
    VENDOR_UPDATE = "VENDOR_UPDATE"
    QUALITY_ISSUE = "QUALITY_ISSUE"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    PAYMENT_DUE = "PAYMENT_DUE"
    FOLLOW_UP = "FOLLOW_UP"
    GENERAL = "GENERAL"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

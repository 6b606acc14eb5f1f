from repair_estimator.models.appraisal import (
    AppraisalCaratTier,
    AppraisalDeliveryMethod,
    AppraisalFeeStructure,
    AppraisalPricingTier,
    AppraisalService,
    AppraisalStatus,
    AppraisalType,
)
from repair_estimator.models.enums import (
    MetalType,
    MetalUnit,
    NotificationPurpose,
    QuotePriority,
    QuoteStatus,
    RushType,
    ServiceCategory,
    SizingCategory,
    UserRole,
)
from repair_estimator.models.pricing_rule import PricingFormula, PricingRule
from repair_estimator.models.quote import Quote, QuoteLineItem
from repair_estimator.models.rates import LaborRate, MetalMarketRate
from repair_estimator.models.service_type import ServiceType
from repair_estimator.models.status_change_log import StatusChangeLog

__all__ = [
    "AppraisalCaratTier",
    "AppraisalDeliveryMethod",
    "AppraisalFeeStructure",
    "AppraisalPricingTier",
    "AppraisalService",
    "AppraisalStatus",
    "AppraisalType",
    "LaborRate",
    "MetalMarketRate",
    "MetalType",
    "MetalUnit",
    "NotificationPurpose",
    "PricingFormula",
    "PricingRule",
    "Quote",
    "QuoteLineItem",
    "QuotePriority",
    "QuoteStatus",
    "RushType",
    "ServiceCategory",
    "ServiceType",
    "SizingCategory",
    "StatusChangeLog",
    "UserRole",
]

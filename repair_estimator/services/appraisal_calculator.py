import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from repair_estimator.config import get_settings
from repair_estimator.config.sections import Appraisal
from repair_estimator.models import AppraisalPricingTier, AppraisalType
from repair_estimator.models.appraisal import DETAILED_REPORT_FEE, within_update_window
from repair_estimator.utils import coerce_decimal, format_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppraisalPricingResult:
    base_fee: Decimal
    total_fee: Decimal
    tier: AppraisalPricingTier
    item_count: int
    largest_carat_weight: Decimal
    update_discount_applied: bool = False
    additional_services: tuple[str, ...] = ()

    @property
    def pricing_breakdown(self) -> str:
        lines = [
            f"Tier: {self.tier.display_name}",
            f"Items: {self.item_count}",
            f"Largest stone: {self.largest_carat_weight}ct",
            f"Base fee: {format_amount(self.base_fee)}",
        ]
        if self.update_discount_applied:
            lines.append("Update discount applied")
        lines.extend(self.additional_services)
        lines.append(f"Total: {format_amount(self.total_fee)}")
        return "\n".join(lines)


class AppraisalCalculator:
    def __init__(self, policy: Appraisal | None = None) -> None:
        self.policy = policy or get_settings().appraisal

    def calculate_appraisal_fee(
        self,
        appraisal_type: AppraisalType,
        item_count: int,
        largest_carat_weight: Decimal,
        is_update: bool = False,
        original_appraisal_date: datetime | None = None,
        expedited: bool = False,
        extra_report_requested: bool = False,
        *,
        now: datetime | None = None,
    ) -> AppraisalPricingResult:
        now = now or datetime.now()
        tier = appraisal_type.base_pricing_tier
        carats = coerce_decimal(largest_carat_weight, Decimal("0"))

        base_fee = tier.fee_structure.calculate_fee(item_count, carats)
        total_fee = base_fee
        additional_services: list[str] = []

        update_discount_applied = False
        if is_update and original_appraisal_date is not None:
            if within_update_window(original_appraisal_date, now, self.policy.update_window_years):
                base_fee *= coerce_decimal(self.policy.update_discount_factor)
                total_fee = base_fee
                update_discount_applied = True
            else:
                logger.info(
                    "Original appraisal from %s is outside the %s-year update window",
                    original_appraisal_date.date(),
                    self.policy.update_window_years,
                )

        # Report fee is added before expediting so the report is expedited too.
        if extra_report_requested:
            total_fee += DETAILED_REPORT_FEE
            additional_services.append(f"Detailed report: {format_amount(DETAILED_REPORT_FEE)}")

        if expedited:
            multiplier = coerce_decimal(self.policy.expedite_multiplier)
            total_fee *= multiplier
            additional_services.append(f"Expedited service: {multiplier}×")

        return AppraisalPricingResult(
            base_fee=base_fee,
            total_fee=total_fee,
            tier=tier,
            item_count=item_count,
            largest_carat_weight=carats,
            update_discount_applied=update_discount_applied,
            additional_services=tuple(additional_services),
        )

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from repair_estimator.config.sections import Appraisal
from repair_estimator.models import AppraisalPricingTier, AppraisalType
from repair_estimator.services.appraisal_calculator import AppraisalCalculator

NOW = datetime(2026, 3, 4, 10, 0)


@pytest.fixture
def calculator() -> AppraisalCalculator:
    return AppraisalCalculator()


def test_standard_tier_uses_carat_band(calculator: AppraisalCalculator) -> None:
    result = calculator.calculate_appraisal_fee(AppraisalType.INSURANCE, 3, Decimal("1.5"), now=NOW)

    assert result.tier is AppraisalPricingTier.STANDARD
    assert result.base_fee == Decimal("390")
    assert result.total_fee == Decimal("390")


def test_expedite_multiplies_total(calculator: AppraisalCalculator) -> None:
    result = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE, 3, Decimal("1.5"), expedited=True, now=NOW
    )

    assert result.total_fee == Decimal("585")
    assert "Expedited service: 1.5×" in result.additional_services


def test_report_fee_is_added_before_expedite(calculator: AppraisalCalculator) -> None:
    result = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE,
        1,
        Decimal("0.5"),
        expedited=True,
        extra_report_requested=True,
        now=NOW,
    )

    assert result.base_fee == Decimal("150")
    assert result.total_fee == Decimal("525")


@pytest.mark.parametrize("item_count", [0, -2])
def test_non_positive_item_count_is_free(calculator: AppraisalCalculator, item_count: int) -> None:
    result = calculator.calculate_appraisal_fee(AppraisalType.ESTATE, item_count, Decimal("2"), now=NOW)

    assert result.base_fee == Decimal("0")
    assert result.total_fee == Decimal("0")


def test_fee_never_decreases_with_carat_weight_or_item_count(calculator: AppraisalCalculator) -> None:
    weights = [Decimal(value) for value in ("0.2", "1.0", "1.01", "2.5", "4", "7", "150")]
    by_weight = [
        calculator.calculate_appraisal_fee(AppraisalType.INSURANCE, 2, weight, now=NOW).total_fee
        for weight in weights
    ]
    by_count = [
        calculator.calculate_appraisal_fee(AppraisalType.INSURANCE, count, Decimal("1.5"), now=NOW).total_fee
        for count in range(0, 6)
    ]

    assert by_weight == sorted(by_weight)
    assert by_count == sorted(by_count)


def test_weight_beyond_last_band_uses_catch_all(calculator: AppraisalCalculator) -> None:
    result = calculator.calculate_appraisal_fee(AppraisalType.INSURANCE, 1, Decimal("150"), now=NOW)

    assert result.base_fee == Decimal("375")


def test_update_discount_within_window(calculator: AppraisalCalculator) -> None:
    original = NOW - timedelta(days=365 * 3)

    result = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE, 1, Decimal("0.5"), is_update=True, original_appraisal_date=original, now=NOW
    )

    assert result.update_discount_applied is True
    assert result.base_fee == Decimal("75")
    assert result.total_fee == Decimal("75")
    assert "Base fee: $75.00" in result.pricing_breakdown


def test_update_window_boundary_is_inclusive(calculator: AppraisalCalculator) -> None:
    ten_years_ago = NOW.replace(year=NOW.year - 10)

    just_inside = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE,
        1,
        Decimal("0.5"),
        is_update=True,
        original_appraisal_date=ten_years_ago + timedelta(days=1),
        now=NOW,
    )
    on_boundary = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE, 1, Decimal("0.5"), is_update=True, original_appraisal_date=ten_years_ago, now=NOW
    )
    just_outside = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE,
        1,
        Decimal("0.5"),
        is_update=True,
        original_appraisal_date=ten_years_ago - timedelta(days=1),
        now=NOW,
    )

    assert just_inside.update_discount_applied is True
    assert on_boundary.update_discount_applied is True
    assert just_outside.update_discount_applied is False
    assert just_outside.total_fee == Decimal("150")


def test_update_without_original_date_is_not_discounted(calculator: AppraisalCalculator) -> None:
    result = calculator.calculate_appraisal_fee(AppraisalType.INSURANCE, 1, Decimal("0.5"), is_update=True, now=NOW)

    assert result.update_discount_applied is False


def test_policy_controls_expedite_multiplier() -> None:
    policy = Appraisal()
    policy.expedite_multiplier = 2.0
    calculator = AppraisalCalculator(policy=policy)

    result = calculator.calculate_appraisal_fee(AppraisalType.GEM_ID, 1, Decimal("3"), expedited=True, now=NOW)

    assert result.tier is AppraisalPricingTier.GEM_ID
    assert result.total_fee == Decimal("150")


def test_pricing_breakdown_lists_each_step(calculator: AppraisalCalculator) -> None:
    result = calculator.calculate_appraisal_fee(
        AppraisalType.INSURANCE, 3, Decimal("1.5"), expedited=True, extra_report_requested=True, now=NOW
    )

    breakdown = result.pricing_breakdown

    assert "Tier: Standard Appraisal" in breakdown
    assert "Base fee: $390.00" in breakdown
    assert "Detailed report: $200.00" in breakdown
    assert breakdown.endswith("Total: $885.00")

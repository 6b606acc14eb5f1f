from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from repair_estimator.exceptions import RecordDecodeError
from repair_estimator.models import (
    MetalMarketRate,
    MetalType,
    PricingFormula,
    PricingRule,
    Quote,
    QuoteStatus,
    RushType,
    ServiceCategory,
    ServiceType,
)


def test_from_dict_parses_wire_types_and_cleans_keys() -> None:
    quote = Quote.from_dict(
        {
            "id": "Q-2026-000001",
            "companyId": "company-1",
            "storeId": "store-1",
            "guestId": "guest-1",
            "status": "IN_SHOP",
            "createdAt": "2026-01-10T10:20:30Z",
            "total": "125.50",
            "rushType": "SAME_DAY",
            "promisedDueDate": None,
        }
    )

    assert quote.status is QuoteStatus.IN_SHOP
    assert quote.created_at == datetime(2026, 1, 10, 10, 20, 30, tzinfo=timezone.utc)
    assert quote.total == Decimal("125.50")
    assert quote.rush_type is RushType.SAME_DAY
    assert quote.promised_due_date is None


def test_to_dict_uses_json_safe_values() -> None:
    rate = MetalMarketRate(
        id="rate-1",
        company_id="company-1",
        metal_type=MetalType.PLATINUM,
        rate=Decimal("31.25"),
        effective_date=datetime(2026, 3, 1, 9, 0),
    )

    payload = rate.to_dict()

    assert payload["metal_type"] == "PLATINUM"
    assert payload["rate"] == "31.25"
    assert payload["effective_date"] == "2026-03-01T09:00:00"
    assert MetalMarketRate.from_dict(payload) == rate


def test_from_dict_preserves_falsey_values() -> None:
    service = ServiceType.from_dict(
        {
            "id": "svc-1",
            "company_id": "company-1",
            "name": "Cleaning",
            "category": "CLEANING",
            "default_sku": "CLN",
            "supports_rush": False,
            "default_labor_minutes": 0,
            "metal_types": ["GOLD_14K", "SILVER"],
        }
    )

    assert service.category is ServiceCategory.CLEANING
    assert service.supports_rush is False
    assert service.default_labor_minutes == 0
    assert service.metal_types == [MetalType.GOLD_14K, MetalType.SILVER]


def test_missing_required_field_is_a_decode_error() -> None:
    with pytest.raises(RecordDecodeError) as error:
        Quote.from_dict({"id": "Q-2026-000001", "company_id": "company-1"})

    assert set(error.value.missing) == {"guest_id", "store_id"}
    assert "Quote" in str(error.value)


def test_stored_record_must_carry_its_id() -> None:
    with pytest.raises(RecordDecodeError, match="missing id"):
        MetalMarketRate.from_dict({"company_id": "company-1", "metal_type": "SILVER", "rate": "0.9"})


@pytest.mark.parametrize(
    ("field_name", "value"),
    [
        ("status", "ON_FIRE"),
        ("total", "twelve"),
        ("created_at", "not-a-datetime"),
    ],
)
def test_malformed_values_are_decode_errors(field_name: str, value: str) -> None:
    payload = {"id": "Q-1", "company_id": "c", "store_id": "s", "guest_id": "g", field_name: value}

    with pytest.raises(RecordDecodeError, match=field_name):
        Quote.from_dict(payload)


def test_pricing_rule_formula_round_trips_as_camel_case_blob() -> None:
    rule = PricingRule(
        id="rule-1",
        company_id="company-1",
        name="Default",
        formula_definition=PricingFormula(fixed_fee=Decimal("10"), minimum_charge=Decimal("25")),
    )

    payload = rule.to_dict()

    assert isinstance(payload["formula_definition"], str)
    assert '"fixedFee": "10"' in payload["formula_definition"]
    assert '"minimumCharge": "25"' in payload["formula_definition"]
    assert PricingRule.from_dict(payload) == rule


def test_pricing_rule_requires_formula_and_active_flag() -> None:
    with pytest.raises(RecordDecodeError) as error:
        PricingRule.from_dict({"id": "rule-1", "company_id": "company-1", "name": "Default"})

    assert set(error.value.missing) == {"formula_definition", "is_active"}


def test_formula_blob_missing_keys_is_a_decode_error() -> None:
    with pytest.raises(RecordDecodeError, match="rushMultiplier"):
        PricingFormula.from_json('{"metalMarkupPercentage": "2", "laborMarkupPercentage": "1.5", "fixedFee": "0"}')


def test_formula_blob_must_be_json_object() -> None:
    with pytest.raises(RecordDecodeError):
        PricingFormula.from_json("[1, 2]")
    with pytest.raises(RecordDecodeError):
        PricingFormula.from_json("{not json")


@pytest.mark.parametrize(
    "blob",
    [
        '["metalMarkupPercentage", 2]',
        '{"metalMarkupPercentage": {"value": 2}, "laborMarkupPercentage": "1.5"}',
        '{"metalMarkupPercentage": true, "laborMarkupPercentage": "1.5"}',
    ],
)
def test_formula_blob_must_be_flat_numbers(blob: str) -> None:
    with pytest.raises(RecordDecodeError):
        PricingFormula.from_json(blob)

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterator

import pytest

from repair_estimator.config import AppSettings
from repair_estimator.models import (
    LaborRate,
    MetalMarketRate,
    MetalType,
    PricingFormula,
    PricingRule,
    ServiceCategory,
    ServiceType,
    UserRole,
)
from repair_estimator.repository import InMemoryRepository

COMPANY_ID = "company-1"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch) -> Iterator[None]:
    monkeypatch.setenv("REPAIR_ESTIMATOR_CONFIG_FILE", str(tmp_path / "config.toml"))
    AppSettings.reset_instance()
    yield
    AppSettings.reset_instance()


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def pricing_rule() -> PricingRule:
    return PricingRule(
        id="rule-default",
        company_id=COMPANY_ID,
        name="Default",
        formula_definition=PricingFormula(
            metal_markup_percentage=Decimal("2.0"),
            labor_markup_percentage=Decimal("1.5"),
            fixed_fee=Decimal("10"),
            rush_multiplier=Decimal("1.5"),
        ),
    )


@pytest.fixture
def seeded_repository(repository: InMemoryRepository, pricing_rule: PricingRule) -> InMemoryRepository:
    repository.save(pricing_rule)
    repository.save(
        MetalMarketRate(
            company_id=COMPANY_ID,
            metal_type=MetalType.GOLD_14K,
            rate=Decimal("25"),
            effective_date=datetime(2026, 3, 2),
        )
    )
    repository.save(
        LaborRate(
            company_id=COMPANY_ID,
            role=UserRole.BENCH_JEWELER,
            rate_per_hour=Decimal("60"),
            effective_date=datetime(2026, 3, 1),
        )
    )
    return repository


@pytest.fixture
def formula_service() -> ServiceType:
    return ServiceType(
        id="svc-solder",
        company_id=COMPANY_ID,
        name="Chain Solder",
        category=ServiceCategory.JEWELRY_REPAIR,
        default_sku="REP-SOLDER",
    )

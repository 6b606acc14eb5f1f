import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from repair_estimator.config import get_settings
from repair_estimator.config.sections import Pricing
from repair_estimator.exceptions import NoPricingRuleFoundError
from repair_estimator.models import (
    LaborRate,
    MetalMarketRate,
    MetalType,
    PricingFormula,
    PricingRule,
    RushType,
    ServiceType,
    SizingCategory,
    UserRole,
)
from repair_estimator.repository import Repository, SortDescriptor
from repair_estimator.utils import align_awareness, coerce_decimal, days_between, format_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1.0")
PARTNER_SKU_PREFIXES = ("PUR", "PRST", "SPR", "14K", "18K", "PLAT")
WATCH_BRACELET_SIZING_RETAIL = Decimal("20")
WATCH_BRACELET_SIZING_COST = Decimal("5")
NEWEST_FIRST = (SortDescriptor("effective_date", ascending=False),)


@dataclass(frozen=True)
class PricingBreakdown:
    metal_cost: Decimal
    labor_cost: Decimal
    fixed_fees: Decimal
    material_markup: Decimal
    labor_markup: Decimal
    rush_fee: Decimal

    @property
    def total_cost(self) -> Decimal:
        return self.metal_cost + self.labor_cost + self.fixed_fees

    @property
    def total_markup(self) -> Decimal:
        return self.material_markup + self.labor_markup


@dataclass(frozen=True)
class PricingResult:
    base_cost: Decimal
    base_retail: Decimal
    rush_multiplier: Decimal
    final_retail: Decimal
    breakdown: PricingBreakdown
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class _RushDecision:
    multiplier: Decimal
    fee: Decimal
    applied: bool


class PricingEngine:
    """Turns a service, metal and labor inputs into a retail price.

    Missing rate data never fails a calculation: the engine falls back (zero
    metal cost, fallback labor rate) and records a warning on the result. Only
    a missing pricing rule is fatal.
    """

    def __init__(
        self,
        repository: Repository,
        policy: Pricing | None = None,
    ) -> None:
        self.repository = repository
        self.policy = policy or get_settings().pricing

    def calculate_price(
        self,
        service_type: ServiceType,
        *,
        company_id: str,
        metal_type: MetalType | None = None,
        metal_weight_grams: Decimal | None = None,
        labor_minutes: int = 0,
        is_rush: bool = False,
        partner_purchase: bool = False,
        rush_type: RushType | None = None,
        requested_due_date: datetime | None = None,
        sizing_category: SizingCategory | None = None,
        now: datetime | None = None,
    ) -> PricingResult:
        """Price one service for a company.

        An explicit ``rush_type`` decides the rush policy on its own, so
        ``rush_type=RushType.WITHIN_48H`` is charged as a rush even with
        ``is_rush=False``. ``is_rush`` only matters when ``rush_type`` is
        omitted, where it selects a 48-hour rush or standard service.
        """
        notes: list[str] = []
        warnings: list[str] = []
        now = now or datetime.now()

        pricing_rule = self.get_pricing_rule(service_type, company_id, warnings)
        formula = pricing_rule.formula_definition

        metal_cost = self._metal_cost(metal_type, metal_weight_grams, company_id, now, notes, warnings)
        labor_cost = self._labor_cost(labor_minutes, company_id, notes, warnings)
        self._check_catalog_entry(service_type, sizing_category, notes, warnings)

        if service_type.has_catalog_pricing:
            # Catalog prices already include markup.
            base_cost = service_type.base_cost
            base_retail = service_type.base_retail
            material_markup = ZERO
            labor_markup = ZERO
        else:
            base_cost = metal_cost + labor_cost + formula.fixed_fee
            material_markup = metal_cost * formula.metal_markup_percentage
            labor_markup = labor_cost * formula.labor_markup_percentage
            base_retail = base_cost + material_markup + labor_markup

        effective_rush = rush_type
        if effective_rush is None:
            effective_rush = RushType.WITHIN_48H if is_rush else RushType.STANDARD
        rush = self._rush_decision(
            base_retail,
            effective_rush,
            partner_purchase,
            service_type,
            requested_due_date,
            formula,
            now,
            notes,
            warnings,
        )

        final_retail = base_retail * rush.multiplier if rush.applied else base_retail

        if formula.minimum_charge is not None and final_retail < formula.minimum_charge:
            final_retail = formula.minimum_charge
            warnings.append(f"Applied minimum charge of {format_amount(formula.minimum_charge)}")

        if rush.applied and rush.multiplier > 1:
            notes.append(f"Rush multiplier applied: {rush.multiplier}×")
        elif effective_rush is not RushType.STANDARD and partner_purchase:
            notes.append("Rush requested but no fee applied (partner purchase)")

        for warning in warnings:
            logger.warning("Pricing %s for %s: %s", service_type.name, company_id, warning)

        return PricingResult(
            base_cost=base_cost,
            base_retail=base_retail,
            rush_multiplier=rush.multiplier,
            final_retail=max(ZERO, final_retail),
            breakdown=PricingBreakdown(
                metal_cost=metal_cost,
                labor_cost=labor_cost,
                fixed_fees=formula.fixed_fee,
                material_markup=material_markup,
                labor_markup=labor_markup,
                rush_fee=rush.fee,
            ),
            notes=tuple(notes),
            warnings=tuple(warnings),
        )

    def get_pricing_rule(
        self, service_type: ServiceType, company_id: str, warnings: list[str] | None = None
    ) -> PricingRule:
        if service_type.pricing_formula_id:
            rule = self.repository.fetch(PricingRule, service_type.pricing_formula_id)
            if rule is not None:
                return rule
            logger.warning(
                "Pricing rule %s linked from %s not found; using company default",
                service_type.pricing_formula_id,
                service_type.name,
            )

        rules = self.repository.query(
            PricingRule,
            lambda rule: rule.company_id == company_id and rule.is_active,
        )
        if not rules:
            logger.error("No active pricing rule for company %s", company_id)
            raise NoPricingRuleFoundError(company_id, service_type.name)

        if len(rules) > 1 and warnings is not None:
            warnings.append(f"Multiple active pricing rules found; using {rules[0].name}")
        return rules[0]

    def _metal_cost(
        self,
        metal_type: MetalType | None,
        weight_grams: Decimal | None,
        company_id: str,
        now: datetime,
        notes: list[str],
        warnings: list[str],
    ) -> Decimal:
        weight = coerce_decimal(weight_grams, ZERO)
        if metal_type is None or weight <= 0:
            notes.append("No metal work required")
            return ZERO

        if not metal_type.requires_market_rate_pricing:
            notes.append(f"Metal type {metal_type.display_name} uses fixed pricing")
            return ZERO

        rates = self.repository.query(
            MetalMarketRate,
            lambda rate: rate.company_id == company_id and rate.metal_type is metal_type and rate.is_active,
            NEWEST_FIRST,
        )
        if not rates:
            warnings.append(f"No market rate found for {metal_type.display_name}")
            return ZERO

        current_rate = rates[0]
        age_days = days_between(current_rate.effective_date, now)
        if age_days > self.policy.stale_rate_days:
            warnings.append(f"Market rate for {metal_type.display_name} is {age_days} days old")

        cost = weight * current_rate.rate
        unit = current_rate.unit.symbol
        rate = format_amount(current_rate.rate)
        notes.append(f"{weight}{unit} {metal_type.display_name} at {rate}/{unit} = {format_amount(cost)}")
        return cost

    def _labor_cost(self, minutes: int, company_id: str, notes: list[str], warnings: list[str]) -> Decimal:
        if minutes <= 0:
            notes.append("No labor time required")
            return ZERO

        rates = self.repository.query(
            LaborRate,
            lambda rate: rate.company_id == company_id and rate.role is UserRole.BENCH_JEWELER and rate.is_active,
            NEWEST_FIRST,
        )
        if not rates:
            fallback_rate = coerce_decimal(self.policy.fallback_labor_rate_per_hour, Decimal("75"))
            warnings.append("No labor rate found for bench jeweler")
            warnings.append(f"Using fallback rate of {format_amount(fallback_rate)}/hour")
            return Decimal(minutes) / Decimal(60) * fallback_rate

        labor_rate = rates[0]
        cost = labor_rate.calculate_cost(minutes)
        hours = Decimal(minutes) / Decimal(60)
        notes.append(f"{hours:.2f}h labor at {format_amount(labor_rate.rate_per_hour)}/h = {format_amount(cost)}")
        return cost

    @staticmethod
    def _check_catalog_entry(
        service_type: ServiceType,
        sizing_category: SizingCategory | None,
        notes: list[str],
        warnings: list[str],
    ) -> None:
        if service_type.is_generic_sku:
            notes.append("Generic SKU - pricing will be entered manually")
            return

        if (
            sizing_category is not None
            and service_type.sizing_category is not None
            and sizing_category is not service_type.sizing_category
        ):
            warnings.append(
                f"Sizing category {sizing_category.value} does not match {service_type.name}"
            )

        if service_type.has_catalog_pricing:
            notes.append(f"Using specific pricing for {service_type.name}")

    def _rush_decision(
        self,
        base_retail: Decimal,
        rush_type: RushType,
        partner_purchase: bool,
        service_type: ServiceType,
        requested_due_date: datetime | None,
        formula: PricingFormula,
        now: datetime,
        notes: list[str],
        warnings: list[str],
    ) -> _RushDecision:
        no_rush = _RushDecision(ONE, ZERO, False)
        if rush_type is RushType.STANDARD:
            return no_rush

        if not service_type.supports_rush:
            warnings.append(f"Service type {service_type.name} cannot be rushed")
            return no_rush

        if partner_purchase:
            notes.append("Partner purchase - no rush fee applied")
            return no_rush

        if rush_type is RushType.SAME_DAY:
            cutoff = self.policy.same_day_cutoff_hour
            if now.hour >= cutoff:
                warnings.append(
                    f"Same-day request after {cutoff}:00 cutoff - requires coordinator approval"
                )
            notes.append("Same-day rush service requested")

        if requested_due_date is not None:
            due, current = align_awareness(requested_due_date, now)
            hours_until_due = int((due - current).total_seconds() // 3600)
            if hours_until_due <= 24:
                notes.append(f"Same-day completion requested ({hours_until_due} hours)")
            elif hours_until_due <= 48:
                notes.append(f"48-hour rush requested ({hours_until_due} hours)")

        multiplier = formula.rush_multiplier
        return _RushDecision(multiplier, base_retail * (multiplier - 1), True)

    @staticmethod
    def verify_partner_item(sales_sku: str | None) -> bool:
        if not sales_sku:
            return False
        return sales_sku.upper().startswith(PARTNER_SKU_PREFIXES)

    @staticmethod
    def calculate_watch_bracelet_sizing(partner_item: bool) -> PricingResult:
        retail = ZERO if partner_item else WATCH_BRACELET_SIZING_RETAIL
        cost = ZERO if partner_item else WATCH_BRACELET_SIZING_COST
        note = (
            "Watch bracelet sizing - no charge (partner purchase)"
            if partner_item
            else f"Watch bracelet sizing - {format_amount(WATCH_BRACELET_SIZING_RETAIL)} for non-partner items"
        )
        return PricingResult(
            base_cost=cost,
            base_retail=retail,
            rush_multiplier=ONE,
            final_retail=retail,
            breakdown=PricingBreakdown(
                metal_cost=ZERO,
                labor_cost=cost,
                fixed_fees=ZERO,
                material_markup=ZERO,
                labor_markup=retail - cost,
                rush_fee=ZERO,
            ),
            notes=(note,),
        )

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Self

from repair_estimator.base.model import BaseModel
from repair_estimator.exceptions import RecordDecodeError
from repair_estimator.type_defs import JsonObject, is_formula_payload
from repair_estimator.utils import coerce_decimal

_FORMULA_KEYS = {
    "metal_markup_percentage": "metalMarkupPercentage",
    "labor_markup_percentage": "laborMarkupPercentage",
    "fixed_fee": "fixedFee",
    "rush_multiplier": "rushMultiplier",
    "minimum_charge": "minimumCharge",
}
_REQUIRED_FORMULA_KEYS = ("metalMarkupPercentage", "laborMarkupPercentage", "fixedFee", "rushMultiplier")


@dataclass(frozen=True)
class PricingFormula:
    """Markup formula attached to a pricing rule.

    Markup percentages are multipliers on cost (2.0 means a markup equal to
    twice the metal cost, added on top of it).
    """

    metal_markup_percentage: Decimal = Decimal("2.0")
    labor_markup_percentage: Decimal = Decimal("1.5")
    fixed_fee: Decimal = Decimal("0")
    rush_multiplier: Decimal = Decimal("1.5")
    minimum_charge: Decimal | None = None

    def to_json(self) -> str:
        payload: dict[str, str] = {}
        for attribute, wire_key in _FORMULA_KEYS.items():
            value = getattr(self, attribute)
            if value is not None:
                payload[wire_key] = str(value)
        return json.dumps(payload, sort_keys=True)

    @classmethod
    def from_json(cls, blob: str | JsonObject) -> Self:
        try:
            payload = json.loads(blob) if isinstance(blob, str) else blob
        except json.JSONDecodeError as error:
            raise RecordDecodeError(cls.__name__, detail=str(error)) from error
        if not is_formula_payload(payload):
            raise RecordDecodeError(cls.__name__, detail="formula must be a flat JSON object of numbers")

        missing = [key for key in _REQUIRED_FORMULA_KEYS if payload.get(key) is None]
        if missing:
            raise RecordDecodeError(cls.__name__, missing)

        values: dict[str, Decimal | None] = {}
        for attribute, wire_key in _FORMULA_KEYS.items():
            raw = payload.get(wire_key)
            if raw is None:
                continue
            value = coerce_decimal(raw)
            if value is None:
                raise RecordDecodeError(cls.__name__, detail=f"{wire_key} is not a decimal: {raw!r}")
            values[attribute] = value
        return cls(**values)


@dataclass(kw_only=True)
class PricingRule(BaseModel):
    record_type = "PricingRule"
    decode_required = BaseModel.decode_required | {"formula_definition", "is_active"}

    company_id: str
    name: str
    description: str = ""
    formula_definition: PricingFormula = field(default_factory=PricingFormula)
    allow_manual_override: bool = True
    manager_approval_threshold_percent: Decimal | None = Decimal("10")
    is_active: bool = True

    @classmethod
    def _coerce_value(cls, value: object, field_type: object, *, field_name: str) -> object:
        if field_name == "formula_definition" and value is not None:
            if isinstance(value, PricingFormula):
                return value
            if not isinstance(value, (str, dict)):
                raise RecordDecodeError(cls.__name__, detail="formula_definition must be a JSON blob")
            return PricingFormula.from_json(value)
        return super()._coerce_value(value, field_type, field_name=field_name)

    @classmethod
    def _serialize_value(cls, value: object):
        if isinstance(value, PricingFormula):
            return value.to_json()
        return super()._serialize_value(value)

    def requires_manager_approval(self, original_price: Decimal, override_price: Decimal) -> bool:
        if self.manager_approval_threshold_percent is None or original_price <= 0:
            return False
        discount_percentage = (original_price - override_price) / original_price * 100
        return discount_percentage > self.manager_approval_threshold_percent

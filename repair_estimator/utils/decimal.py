from __future__ import annotations

from decimal import Decimal, InvalidOperation

CENT = Decimal("0.01")


def coerce_decimal(value: object, default: Decimal | None = None) -> Decimal | None:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            return default
    return default


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT)


def format_amount(value: Decimal) -> str:
    return f"${to_cents(value)}"

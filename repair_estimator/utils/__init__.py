from repair_estimator.utils.datetime import (
    add_business_days,
    align_awareness,
    days_between,
    now_like,
    parse_datetime,
    years_before,
)
from repair_estimator.utils.decimal import coerce_decimal, format_amount, to_cents

__all__ = [
    "add_business_days",
    "align_awareness",
    "coerce_decimal",
    "days_between",
    "format_amount",
    "now_like",
    "parse_datetime",
    "to_cents",
    "years_before",
]

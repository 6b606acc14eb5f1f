from __future__ import annotations

from typing import Callable, TypeAlias, TypeGuard

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | dict[str, "JsonValue"] | list["JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]

# Stored record as it travels to and from a repository.
RecordPayload: TypeAlias = JsonObject
# Decimal fields of a pricing formula blob, as strings or JSON numbers.
FormulaPayload: TypeAlias = dict[str, str | int | float | None]

Predicate: TypeAlias = Callable[[object], bool]
SettingValue: TypeAlias = str | int | float | bool


def is_json_scalar(value: object) -> TypeGuard[JsonScalar]:
    return value is None or isinstance(value, (str, int, float, bool))


def is_json_value(value: object) -> TypeGuard[JsonValue]:
    if is_json_scalar(value):
        return True
    if isinstance(value, list):
        return all(is_json_value(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and is_json_value(item) for key, item in value.items()
        )
    return False


def is_json_object(value: object) -> TypeGuard[JsonObject]:
    return isinstance(value, dict) and all(
        isinstance(key, str) and is_json_value(item) for key, item in value.items()
    )


def is_record_payload(value: object) -> TypeGuard[RecordPayload]:
    return is_json_object(value) and isinstance(value.get("id"), str)


def is_formula_payload(value: object) -> TypeGuard[FormulaPayload]:
    return isinstance(value, dict) and all(
        isinstance(key, str)
        and (item is None or (isinstance(item, (str, int, float)) and not isinstance(item, bool)))
        for key, item in value.items()
    )


def is_setting_value(value: object) -> TypeGuard[SettingValue]:
    return isinstance(value, (str, int, float, bool))

import logging
import re
import uuid
from abc import ABC
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import UnionType
from typing import Any, ClassVar, TypeVar, Union, get_args, get_origin, get_type_hints

from repair_estimator.exceptions import RecordDecodeError
from repair_estimator.type_defs import JsonObject, JsonValue
from repair_estimator.utils import coerce_decimal, parse_datetime

ModelType = TypeVar("ModelType", bound="BaseModel")
logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def new_record_id() -> str:
    return str(uuid.uuid4()).upper()


@dataclass(kw_only=True)
class BaseModel(ABC):
    """Persisted record.

    Records travel to and from the repository as plain JSON-compatible dicts:
    datetimes as ISO-8601 strings, decimals as strings, enums as their wire
    values. ``from_dict`` raises ``RecordDecodeError`` when a required field is
    absent or a value cannot be coerced to the declared type.
    """

    record_type: ClassVar[str] = ""
    # Fields with in-memory defaults that a stored payload must still carry.
    decode_required: ClassVar[frozenset[str]] = frozenset({"id"})

    id: str = field(default_factory=new_record_id)

    @classmethod
    def from_dict(cls: type[ModelType], data: dict[str, Any]) -> ModelType:
        if not isinstance(data, dict):
            raise RecordDecodeError(cls.__name__, detail=f"expected dict, got {type(data).__name__}")

        cleaned_data = {cls.clean_key(key): value for key, value in data.items()}
        type_hints = get_type_hints(cls)
        values: dict[str, Any] = {}
        missing: list[str] = []

        for current_field in fields(cls):
            if not current_field.init:
                continue

            if current_field.name not in cleaned_data:
                has_default = not (
                    current_field.default is MISSING and current_field.default_factory is MISSING
                )
                if not has_default or current_field.name in cls.decode_required:
                    missing.append(current_field.name)
                continue

            values[current_field.name] = cls._coerce_value(
                cleaned_data[current_field.name],
                type_hints.get(current_field.name, Any),
                field_name=current_field.name,
            )

        if missing:
            raise RecordDecodeError(cls.__name__, missing)

        try:
            return cls(**values)
        except (TypeError, ValueError) as error:
            raise RecordDecodeError(cls.__name__, detail=str(error)) from error

    def to_dict(self) -> JsonObject:
        return {
            current_field.name: self._serialize_value(getattr(self, current_field.name))
            for current_field in fields(self)
        }

    @staticmethod
    def clean_key(key: str) -> str:
        cleaned_key = re.sub(r"[ /-]", "_", key)
        cleaned_key = _CAMEL_BOUNDARY_RE.sub("_", cleaned_key)
        return cleaned_key.lower()

    @classmethod
    def _coerce_value(cls, value: object, field_type: object, *, field_name: str) -> object:
        if value is None:
            return None

        field_type = cls._unwrap_optional(field_type)
        origin = get_origin(field_type)

        if origin is list:
            args = get_args(field_type)
            if not isinstance(value, list):
                raise RecordDecodeError(cls.__name__, detail=f"{field_name} must be a list")
            item_type = args[0] if args else Any
            return [cls._coerce_value(item, item_type, field_name=field_name) for item in value]

        if field_type is datetime:
            if isinstance(value, datetime):
                return value
            parsed_value = parse_datetime(value) if isinstance(value, str) else None
            if parsed_value is None:
                raise RecordDecodeError(cls.__name__, detail=f"{field_name} is not a datetime: {value!r}")
            return parsed_value

        if field_type is Decimal:
            coerced = coerce_decimal(value)
            if coerced is None:
                raise RecordDecodeError(cls.__name__, detail=f"{field_name} is not a decimal: {value!r}")
            return coerced

        if isinstance(field_type, type) and issubclass(field_type, Enum):
            try:
                return field_type(value)
            except ValueError as error:
                raise RecordDecodeError(
                    cls.__name__, detail=f"{field_name} has unknown value {value!r}"
                ) from error

        if isinstance(field_type, type) and issubclass(field_type, BaseModel) and isinstance(value, dict):
            return field_type.from_dict(value)

        return value

    @staticmethod
    def _unwrap_optional(field_type: object) -> object:
        origin = get_origin(field_type)
        if origin in {Union, UnionType}:
            candidates = [arg for arg in get_args(field_type) if arg is not type(None)]
            if len(candidates) == 1:
                return candidates[0]
        return field_type

    @classmethod
    def _serialize_value(cls, value: object) -> JsonValue:
        if isinstance(value, BaseModel):
            return value.to_dict()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, (list, tuple)):
            return [cls._serialize_value(item) for item in value]
        if is_dataclass(value) and not isinstance(value, type):
            return {f.name: cls._serialize_value(getattr(value, f.name)) for f in fields(value)}
        return value

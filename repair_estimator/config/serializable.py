import logging
from typing import Mapping

from repair_estimator.type_defs import JsonObject, JsonValue, SettingValue, is_json_object, is_setting_value

logger = logging.getLogger(__name__)


def coerce_setting(value: JsonValue, expected_type: object) -> SettingValue:
    """Convert a value read from the settings file to the annotated type.

    Raises ``TypeError`` when the value cannot stand in for ``expected_type``.
    Integers are accepted for float settings; booleans are never accepted as
    numbers.
    """
    if not is_setting_value(value):
        raise TypeError(f"unsupported setting value {value!r}")
    if expected_type is bool:
        if isinstance(value, bool):
            return value
    elif expected_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif expected_type is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif expected_type is str:
        if isinstance(value, str):
            return value
    else:
        return value
    raise TypeError(f"expected {getattr(expected_type, '__name__', expected_type)}, got {type(value).__name__}")


class Serializable:
    """Settings node whose fields are its class annotations.

    Nested nodes are plain instance attributes holding another
    ``Serializable``; they serialize to nested tables.
    """

    def _annotations(self) -> dict[str, object]:
        annotations: dict[str, object] = {}
        for cls in reversed(type(self).mro()):
            cls_annotations = getattr(cls, "__annotations__", None)
            if isinstance(cls_annotations, dict):
                annotations.update(cls_annotations)
        return {key: value for key, value in annotations.items() if not key.startswith("_")}

    def get_all_keys(self) -> set[str]:
        instance_keys = {key for key in self.__dict__ if not key.startswith("_")}
        return instance_keys | set(self._annotations())

    def to_dict(self) -> JsonObject:
        result: JsonObject = {}
        for key in sorted(self.get_all_keys()):
            value = getattr(self, key, None)
            result[key] = value.to_dict() if isinstance(value, Serializable) else value
        return result

    def from_dict(self, data: Mapping[str, JsonValue]) -> None:
        annotations = self._annotations()
        for key, value in data.items():
            if key.startswith("_"):
                continue

            current = getattr(self, key, None)
            if isinstance(current, Serializable):
                if is_json_object(value):
                    current.from_dict(value)
                else:
                    logger.warning(
                        f"Expected table for {key} in {self.__class__.__name__}, "
                        f"got {type(value).__name__}. Skipping..."
                    )
                continue

            if key not in annotations:
                logger.warning(f"{key} not in {self.__class__.__name__}. Skipping...")
                continue

            try:
                setattr(self, key, coerce_setting(value, annotations[key]))
            except TypeError as error:
                logger.warning(f"Ignoring {self.__class__.__name__}.{key}: {error}")

        self.validate()

    def validate(self) -> None:
        for key in self._annotations():
            if getattr(self, key, None) is None:
                logger.warning(
                    f"Warning: Configuration value '{key}' is missing or None in {self.__class__.__name__}"
                )
        for problem in self.check():
            logger.warning(f"{self.__class__.__name__}: {problem}")

    def check(self) -> list[str]:
        """Range problems with the current values; empty when the node is usable."""
        return []

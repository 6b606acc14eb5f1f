import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Protocol, Sequence, TypeVar

from repair_estimator.base.model import BaseModel
from repair_estimator.exceptions import RecordNotFoundError
from repair_estimator.type_defs import Predicate, RecordPayload, is_record_payload

logger = logging.getLogger(__name__)

RecordType = TypeVar("RecordType", bound=BaseModel)


@dataclass(frozen=True)
class SortDescriptor:
    key: str
    ascending: bool = True


class Repository(Protocol):
    """Storage collaborator every engine depends on.

    Implementations return detached copies: mutating a fetched record has no
    effect until it is passed back to ``save``.
    """

    def save(self, record: RecordType) -> RecordType:
        ...

    def fetch(self, model: type[RecordType], record_id: str) -> RecordType | None:
        ...

    def query(
        self,
        model: type[RecordType],
        predicate: Predicate | None = None,
        sort: Sequence[SortDescriptor] | None = None,
    ) -> list[RecordType]:
        ...

    def delete(self, model: type[RecordType], record_id: str) -> None:
        ...

    def is_available(self) -> bool:
        ...


def _sort_key(values: list[object]) -> Callable[[object], object]:
    datetimes = [value for value in values if isinstance(value, datetime)]
    if len({value.tzinfo is None for value in datetimes}) > 1:
        # Mixed aware and naive timestamps compare as wall-clock times.
        return lambda value: value.replace(tzinfo=None) if isinstance(value, datetime) else value
    return lambda value: value


def _sort_records(records: list[RecordType], sort: Iterable[SortDescriptor]) -> list[RecordType]:
    ordered = list(records)
    for descriptor in reversed(list(sort)):
        present = [record for record in ordered if getattr(record, descriptor.key, None) is not None]
        absent = [record for record in ordered if getattr(record, descriptor.key, None) is None]
        key = _sort_key([getattr(record, descriptor.key) for record in present])
        present.sort(key=lambda record: key(getattr(record, descriptor.key)), reverse=not descriptor.ascending)
        ordered = present + absent
    return ordered


class InMemoryRepository:
    """Thread-safe repository keeping records in their persisted dict shape."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[str, dict[str, RecordPayload]] = {}

    @staticmethod
    def _table_name(model: type[BaseModel]) -> str:
        return model.record_type or model.__name__

    def save(self, record: RecordType) -> RecordType:
        payload = record.to_dict()
        with self._lock:
            self._tables.setdefault(self._table_name(type(record)), {})[record.id] = payload
        logger.debug("Saved %s %s", type(record).__name__, record.id)
        return type(record).from_dict(payload)

    def load_raw(self, model: type[BaseModel], payload: RecordPayload) -> None:
        """Store a payload as-is, bypassing encoding. Used for imports and fixtures."""
        if not is_record_payload(payload):
            raise ValueError("payload requires a string id")
        with self._lock:
            self._tables.setdefault(self._table_name(model), {})[payload["id"]] = dict(payload)

    def fetch(self, model: type[RecordType], record_id: str) -> RecordType | None:
        with self._lock:
            payload = self._tables.get(self._table_name(model), {}).get(record_id)
        if payload is None:
            return None
        return model.from_dict(payload)

    def query(
        self,
        model: type[RecordType],
        predicate: Predicate | None = None,
        sort: Sequence[SortDescriptor] | None = None,
    ) -> list[RecordType]:
        with self._lock:
            payloads = list(self._tables.get(self._table_name(model), {}).values())
        records = [model.from_dict(payload) for payload in payloads]
        if predicate is not None:
            records = [record for record in records if predicate(record)]
        if sort:
            records = _sort_records(records, sort)
        return records

    def delete(self, model: type[RecordType], record_id: str) -> None:
        with self._lock:
            table = self._tables.get(self._table_name(model), {})
            if record_id not in table:
                raise RecordNotFoundError(f"{model.__name__} {record_id} not found")
            del table[record_id]

    def is_available(self) -> bool:
        return True

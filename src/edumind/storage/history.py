"""Generic most-recent-first history collection mirrored to a store key."""

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from edumind.errors import RecordNotFoundError
from edumind.storage.store import KeyValueStore, StoreKey

logger = structlog.get_logger()

# Records must carry `id: str` and `timestamp: int`.
T = TypeVar("T", bound=BaseModel)

Listener = Callable[[tuple], None]


class HistoryStore(Generic[T]):
    """Ordered collection of records persisted as one JSON array.

    Every mutation rewrites the whole collection under its key and then
    notifies subscribers with the new items. In-memory items only change
    once the write has succeeded.

    Args:
        store: Backing key-value store.
        key: Logical key holding the collection.
        record_type: Pydantic model used to validate stored records.
    """

    def __init__(self, store: KeyValueStore, key: StoreKey, record_type: type[T]):
        self.store = store
        self.key = key
        self.record_type = record_type
        self._items: list[T] = []
        self._listeners: list[Listener] = []
        self.load()

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def load(self) -> tuple[T, ...]:
        """Re-read the collection; absent or unreadable data yields empty."""
        raw = self.store.get(self.key)
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("history_not_a_list", key=str(self.key))
            self._items = []
            return self.items

        items: list[T] = []
        for entry in raw:
            try:
                items.append(self.record_type.model_validate(entry))
            except ValidationError as e:
                logger.warning(
                    "history_record_dropped", key=str(self.key), error=str(e)
                )
        self._items = items
        return self.items

    def append(self, record: T) -> T:
        self._commit([record, *self._items])
        return record

    def upsert(self, record: T) -> T:
        """Replace the record with the same id in place, else insert at head."""
        items = list(self._items)
        for i, existing in enumerate(items):
            if existing.id == record.id:
                items[i] = record
                break
        else:
            items.insert(0, record)
        self._commit(items)
        return record

    def clear_all(self) -> None:
        self._commit([])

    def get(self, record_id: str) -> T:
        for record in self._items:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def restore(self, record_id: str) -> T:
        """Return a stored record unchanged."""
        return self.get(record_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, items: list[T]) -> None:
        """Persist `items`, then adopt them; a failed write changes nothing."""
        self.store.set(
            self.key,
            [r.model_dump(mode="json", by_alias=True) for r in items],
        )
        self._items = items
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)
